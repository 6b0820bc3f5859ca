"""
Diagnostic spans: the measured durations of the named activities.

A span is emitted as a log record on the ``kwait.spans`` logger when the
activity is over, with the span's name and duration in the record's extras.
In the JSON log format, these extras become the fields of the JSON record,
so that the external tooling can collect the timings from the logs.

The spans are purely informational. They never affect the activities.
"""
import asyncio
import contextlib
import dataclasses
import logging
from typing import Iterator, Optional

logger = logging.getLogger('kwait.spans')


@dataclasses.dataclass
class Span:
    name: str
    started: float
    finished: Optional[float] = None

    @property
    def duration(self) -> Optional[float]:
        return None if self.finished is None else self.finished - self.started


@contextlib.contextmanager
def emitable_span(name: str) -> Iterator[Span]:
    """
    Measure the duration of a code block by the event loop's clock.

    The span is emitted even if the block fails, so that the failed waits
    are also visible with their timing.
    """
    loop = asyncio.get_running_loop()
    span = Span(name=name, started=loop.time())
    try:
        yield span
    finally:
        span.finished = loop.time()
        logger.info(f"Span {name!r} took {span.duration:.3f}s.",
                    extra=dict(span=name, duration=span.duration))
