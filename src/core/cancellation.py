# src/core/cancellation.py - v1
"""Cooperative cancellation driven by a single asyncio.Event per run."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

from pagesync.core.errors import DeploymentCancelled

T = TypeVar("T")


def raise_if_cancelled(cancel_event: asyncio.Event | None, what: str = "run") -> None:
    """Raise DeploymentCancelled if the event has been set."""
    if cancel_event is not None and cancel_event.is_set():
        raise DeploymentCancelled(what)


async def run_cancellable(
    awaitable: Awaitable[T],
    cancel_event: asyncio.Event | None,
    what: str = "call",
) -> T:
    """Await ``awaitable`` unless ``cancel_event`` fires first.

    When the event fires, the in-flight awaitable is cancelled and
    DeploymentCancelled is raised.
    """
    if cancel_event is None:
        return await awaitable

    if cancel_event.is_set():
        if asyncio.iscoroutine(awaitable):
            awaitable.close()
        raise DeploymentCancelled(what)

    task = asyncio.ensure_future(awaitable)
    waiter = asyncio.ensure_future(cancel_event.wait())
    try:
        await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        raise
    finally:
        waiter.cancel()

    if task.done():
        return task.result()

    task.cancel()
    await asyncio.gather(task, return_exceptions=True)
    raise DeploymentCancelled(what)
