"""Concurrent all-or-nothing fetch of independent fields.

Every field runs as its own task. Results are keyed by the field's name, never
by arrival order, and the first failure cancels the rest of the group.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

import structlog

from smartnode.exceptions import AggregationTimeoutError, FieldFetchError

logger = structlog.get_logger()


def _identity(value: Any) -> Any:
    return value


@dataclass(frozen=True)
class FieldTask:
    """One independent remote fetch plus its conversion to domain units."""

    name: str
    """Result key. Must be unique within one aggregation."""

    fetch: Callable[[], Awaitable[Any]]
    """Zero-argument coroutine factory performing the remote call."""

    description: str
    """Human-readable name used in error messages (e.g. "node ETH balance")."""

    convert: Callable[[Any], Any] = field(default=_identity)
    """Applied once to the raw value, right after the call returns."""


async def _run_field(task: FieldTask, semaphore: asyncio.Semaphore | None) -> Any:
    try:
        if semaphore is None:
            raw = await task.fetch()
        else:
            async with semaphore:
                raw = await task.fetch()
        return task.convert(raw)
    except Exception as e:
        raise FieldFetchError(task.name, task.description, e) from e


def _failure(task: asyncio.Task[Any], field_task: FieldTask) -> BaseException:
    # A child that ends cancelled while the group is still running is a failed field.
    if task.cancelled():
        cause = asyncio.CancelledError("field task was cancelled")
        return FieldFetchError(field_task.name, field_task.description, cause)
    exc = task.exception()
    assert exc is not None
    return exc


async def gather_fields(
    tasks: Iterable[FieldTask],
    *,
    timeout: float | None = None,
    max_concurrency: int | None = None,
) -> dict[str, Any]:
    """
    Run every field fetch concurrently and return all converted values.

    All tasks are started before any result is awaited. The call returns only
    once every field has succeeded; otherwise it raises the first failure it
    observes and cancels (and awaits) everything still in flight, so no task
    outlives the aggregation.

    Args:
        tasks: Field fetches to run. Names must be unique.
        timeout: Deadline in seconds for the whole group (None = no deadline).
        max_concurrency: Upper bound on remote calls in flight at once.

    Returns:
        Mapping of field name to converted value, one entry per task.

    Raises:
        FieldFetchError: A field's call or conversion failed. When several
            failures are observed together, the earliest-declared field wins.
        AggregationTimeoutError: The deadline passed first.
        ValueError: Duplicate field names or a non-positive concurrency bound.
    """
    field_tasks = list(tasks)
    names = [t.name for t in field_tasks]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise ValueError(f"Duplicate field names: {', '.join(duplicates)}")
    if max_concurrency is not None and max_concurrency < 1:
        raise ValueError("max_concurrency must be at least 1")
    if not field_tasks:
        return {}

    semaphore = asyncio.Semaphore(max_concurrency) if max_concurrency is not None else None

    # Insertion order doubles as declaration order for the error tie-break.
    running: dict[asyncio.Task[Any], FieldTask] = {
        asyncio.create_task(_run_field(t, semaphore), name=f"field:{t.name}"): t
        for t in field_tasks
    }
    results: dict[str, Any] = {}

    try:
        async with asyncio.timeout(timeout):
            pending: set[asyncio.Task[Any]] = set(running)
            while pending:
                done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
                failed = [t for t in running if t in done and (t.cancelled() or t.exception())]
                if failed:
                    for extra in failed[1:]:
                        logger.debug(
                            "Dropping additional field failure",
                            field=running[extra].name,
                            error=str(_failure(extra, running[extra])),
                        )
                    raise _failure(failed[0], running[failed[0]])
                for t in done:
                    results[running[t].name] = t.result()
    except TimeoutError:
        outstanding = [task for t, task in running.items() if not t.done()]
        raise AggregationTimeoutError(
            [task.name for task in outstanding],
            timeout,
            [task.description for task in outstanding],
        ) from None
    finally:
        leftover = [t for t in running if not t.done()]
        for t in leftover:
            t.cancel()
        if leftover:
            await asyncio.gather(*leftover, return_exceptions=True)

    return results
