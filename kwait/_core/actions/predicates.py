"""
Stock predicates for the most common desired states of the configurations.

Any other callable with the same signature can be used in the waiting
functions; these are just the ones needed in most of the tests.
"""
from kwait._cogs.structs import bodies


def configuration_has_created_revision(cfg: bodies.Configuration) -> bool:
    """ Whether the configuration has created a revision. """
    return cfg.status.latest_created_revision_name != ''


def configuration_has_ready_revision(cfg: bodies.Configuration) -> bool:
    """ Whether the configuration has any ready revision (maybe not the latest one). """
    return cfg.status.latest_ready_revision_name != ''


def configuration_is_ready(cfg: bodies.Configuration) -> bool:
    """
    Whether the configuration is ready as of its latest generation.

    The "Ready" condition alone is not enough: it can be left from the previous
    generation if the controller did not process the latest changes yet.
    """
    if cfg.generation is not None and cfg.status.observed_generation != cfg.generation:
        return False
    condition = cfg.status.get_condition('Ready')
    return condition is not None and condition.is_true


def configuration_is_failed(cfg: bodies.Configuration) -> bool:
    """
    Whether the configuration has definitely failed to become ready.

    Use it with `check_configuration_state` for the negative tests,
    e.g. with the images that do not exist.
    """
    condition = cfg.status.get_condition('Ready')
    return condition is not None and condition.is_false
