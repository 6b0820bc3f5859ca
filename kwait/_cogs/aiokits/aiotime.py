"""
Advanced modes of sleeping.
"""
import asyncio
import collections.abc
from typing import Collection, Optional, Union


async def sleep(
        delays: Union[None, float, Collection[Optional[float]]],
) -> None:
    """
    Sleep for the shortest of the specified delays.

    ``None`` delays are ignored (as if they were not specified at all).
    Negative and zero delays, or no delays at all, skip the sleeping entirely:
    this is typical for deadlines that have already passed while computing.
    """
    passed_delays = delays if isinstance(delays, collections.abc.Collection) else [delays]
    actual_delays = [delay for delay in passed_delays if delay is not None]
    minimal_delay = min(actual_delays) if actual_delays else 0

    # Do not go for the real low-level system sleep if there is no need to sleep.
    if minimal_delay <= 0:
        return

    await asyncio.sleep(minimal_delay)
