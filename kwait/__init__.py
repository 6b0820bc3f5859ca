"""
The main kwait module for all the exported functions & classes.
"""
# isort: skip_file

# Unlike all other places, where we import other modules and refer
# the functions via the modules, this is the package's top-level interface,
# as it is seen by the users. So, we export the individual functions.

from kwait._cogs.clients.auth import (
    APIContext,
    login_with_kubeconfig,
)
from kwait._cogs.clients.errors import (
    APIError,
    APIServerError,
    APINotFoundError,
)
from kwait._cogs.configs.configuration import (
    Settings,
    PollingSettings,
    NetworkingSettings,
    ImageSettings,
)
from kwait._cogs.helpers.typedefs import (
    Logger,
)
from kwait._cogs.helpers.versions import (
    version as __version__,
)
from kwait._cogs.structs.bodies import (
    RawBody,
    Condition,
    Configuration,
    ConfigurationStatus,
)
from kwait._cogs.structs.credentials import (
    LoginError,
    ConnectionInfo,
)
from kwait._cogs.structs.patches import (
    JSONPatch,
    make_json_patch,
)
from kwait._cogs.structs.references import (
    Resource,
    CONFIGURATIONS,
)
from kwait._core.actions.predicates import (
    configuration_has_created_revision,
    configuration_has_ready_revision,
    configuration_is_ready,
    configuration_is_failed,
)
from kwait._core.actions.waiting import (
    Predicate,
    ConfigurationStateError,
    FetchError,
    PredicateError,
    WaitTimeoutError,
    NotInDesiredStateError,
    wait_for_configuration_state,
    check_configuration_state,
    wait_for_config_latest_revision,
)
from kwait._core.engines.loggers import (
    LogFormat,
    configure as configure_logging,
)
from kwait._core.intents.configurations import (
    ConfigOption,
    ConfigurationsClient,
    ResourceNames,
    image_path,
    configuration_spec,
    legacy_configuration_spec,
    build_configuration,
    with_config_label,
    with_config_env,
    create_configuration,
    patch_config_image,
)

__all__ = [
    'APIContext', 'login_with_kubeconfig',
    'APIError', 'APIServerError', 'APINotFoundError',
    'Settings', 'PollingSettings', 'NetworkingSettings', 'ImageSettings',
    'Logger',
    'RawBody', 'Condition', 'Configuration', 'ConfigurationStatus',
    'LoginError', 'ConnectionInfo',
    'JSONPatch', 'make_json_patch',
    'Resource', 'CONFIGURATIONS',
    'configuration_has_created_revision', 'configuration_has_ready_revision',
    'configuration_is_ready', 'configuration_is_failed',
    'Predicate',
    'ConfigurationStateError', 'FetchError', 'PredicateError',
    'WaitTimeoutError', 'NotInDesiredStateError',
    'wait_for_configuration_state', 'check_configuration_state',
    'wait_for_config_latest_revision',
    'LogFormat', 'configure_logging',
    'ConfigOption', 'ConfigurationsClient', 'ResourceNames',
    'image_path', 'configuration_spec', 'legacy_configuration_spec', 'build_configuration',
    'with_config_label', 'with_config_env',
    'create_configuration', 'patch_config_image',
]
