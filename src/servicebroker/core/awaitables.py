"""Helpers for collaborators that may be implemented sync or async."""

from __future__ import annotations

import inspect
from typing import Any


async def maybe_await(value: Any) -> Any:
    """Await ``value`` when it is awaitable, otherwise return it unchanged."""

    if inspect.isawaitable(value):
        return await value
    return value


__all__ = ["maybe_await"]
