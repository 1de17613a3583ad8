"""Order-preserving fan-out of independent async generation tasks.

Tasks are zero-argument callables returning awaitables, so nothing starts
before the scheduling policy decides how to run them.
"""
import asyncio
import logging
import sys
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Platforms whose native image engine must not be entered from several threads at once
SEQUENTIAL_PLATFORMS = ("win32",)


class SchedulingPolicy(Enum):
    CONCURRENT = "concurrent"
    SEQUENTIAL = "sequential"


def resolve_scheduling_policy(setting: str = "auto", platform: Optional[str] = None) -> SchedulingPolicy:
    """Turn a configured policy name into a SchedulingPolicy.

    Args:
        setting: "auto", "concurrent" or "sequential".
        platform: Platform identifier to evaluate "auto" against (defaults to sys.platform).

    Returns:
        SEQUENTIAL for "sequential" or for "auto" on a platform with a non-reentrant engine,
        CONCURRENT otherwise.
    """
    if setting == "auto":
        platform = platform or sys.platform
        return SchedulingPolicy.SEQUENTIAL if platform in SEQUENTIAL_PLATFORMS else SchedulingPolicy.CONCURRENT
    return SchedulingPolicy(setting)


async def run_all(tasks: Sequence[Callable[[], Awaitable[T]]], policy: SchedulingPolicy) -> List[T]:
    """Run every task and return their results in input order.

    SEQUENTIAL awaits one task at a time and stops at the first failure. CONCURRENT
    starts all tasks together; the first failure is raised while siblings keep
    running and their results are discarded.

    Args:
        tasks: Zero-argument callables producing awaitables.
        policy: How the tasks are scheduled.

    Returns:
        List of results positionally matching tasks.
    """
    logger.debug(f"Running {len(tasks)} tasks with {policy.value} policy")

    if policy is SchedulingPolicy.SEQUENTIAL:
        results: List[T] = []
        for task in tasks:
            results.append(await task())
        return results

    return list(await asyncio.gather(*(task() for task in tasks)))
