"""
Logging of the waits with the references to the waited configurations.

The waiters log via `ObjectLogger`, which puts the configuration's reference
into every record as ``config_ref``. For humans, the text formatter prefixes
the messages with ``[namespace/name]``. For log parsers, the JSON formatter
puts the reference into the ``object`` field instead, next to the other extras
(e.g. the spans' names and durations).
"""
import asyncio
import copy
import enum
import logging
from typing import Any, MutableMapping, Optional, Tuple, Union

import pythonjsonlogger.core
import pythonjsonlogger.json

logger = logging.getLogger('kwait.objects')


class LogFormat(enum.Enum):
    PLAIN = '%(message)s'
    FULL = '[%(asctime)s] %(name)-20.20s [%(levelname)-8.8s] %(message)s'
    JSON = enum.auto()


class ObjectFormatter(logging.Formatter):
    """ A marker of our own formatters, so that their handlers can be found later. """


class ObjectTextFormatter(ObjectFormatter):

    def __init__(self, fmt: Optional[str] = None, *, prefix: bool = True) -> None:
        super().__init__(fmt)
        self.prefix = prefix

    def format(self, record: logging.LogRecord) -> str:
        ref = getattr(record, 'config_ref', None)
        if self.prefix and ref is not None:
            where = f"{ref['namespace']}/{ref['name']}" if ref.get('namespace') else ref['name']
            record = copy.copy(record)  # the original record goes to other handlers too.
            record.msg = f"[{where}] {record.msg}"
        return super().format(record)


class ObjectJsonFormatter(ObjectFormatter, pythonjsonlogger.json.JsonFormatter):

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        reserved = set(kwargs.pop('reserved_attrs', pythonjsonlogger.core.RESERVED_ATTRS))
        kwargs.update(reserved_attrs=reserved | {'config_ref'}, timestamp=True)
        super().__init__(*args, **kwargs)

    def add_fields(
            self,
            log_record: MutableMapping[str, Any],
            record: logging.LogRecord,
            message_dict: MutableMapping[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        if hasattr(record, 'config_ref'):
            log_record['object'] = getattr(record, 'config_ref')
        log_record.setdefault('severity', logging.getLevelName(record.levelno).lower())


class ObjectLogger(logging.LoggerAdapter):  # type: ignore
    """
    A logger of one configuration: every message refers to it.

    The per-message extras (e.g. of the spans) are kept along with the reference.
    """

    def __init__(
            self,
            *,
            name: str,
            namespace: Optional[str] = None,
            kind: str = 'Configuration',
    ) -> None:
        super().__init__(logger, dict(config_ref=dict(kind=kind, namespace=namespace, name=name)))

    def process(
            self,
            msg: str,
            kwargs: MutableMapping[str, Any],
    ) -> Tuple[str, MutableMapping[str, Any]]:
        kwargs['extra'] = dict(self.extra or {}, **kwargs.get('extra', {}))
        return msg, kwargs


def make_formatter(
        log_format: Union[LogFormat, str] = LogFormat.FULL,
        log_prefix: Optional[bool] = None,
) -> ObjectFormatter:
    """
    Make a formatter for the format; the text ones are prefixed unless disabled.
    """
    if log_format is LogFormat.JSON:
        return ObjectJsonFormatter()
    elif isinstance(log_format, LogFormat):
        return ObjectTextFormatter(log_format.value, prefix=log_prefix is not False)
    elif isinstance(log_format, str):
        return ObjectTextFormatter(log_format, prefix=log_prefix is not False)
    else:
        raise ValueError(f"Unsupported log format: {log_format!r}")


def configure(
        debug: Optional[bool] = None,
        verbose: Optional[bool] = None,
        quiet: Optional[bool] = None,
        log_format: Union[LogFormat, str] = LogFormat.FULL,
        log_prefix: Optional[bool] = None,
) -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(make_formatter(log_format=log_format, log_prefix=log_prefix))
    root = logging.getLogger()
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if debug or verbose else logging.WARNING if quiet else logging.INFO)

    # The libraries' own chatter is shown only in the debug mode.
    for name in ['asyncio', 'aiohttp']:
        library_logger = logging.getLogger(name)
        library_logger.propagate = bool(debug)
        library_logger.handlers[:] = [] if debug else [logging.NullHandler()]

    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        pass  # not started yet, e.g. in CLI: it is configured when started.
    else:
        loop.set_debug(bool(debug))
