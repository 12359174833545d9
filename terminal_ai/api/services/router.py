from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Sequence, Union

logger = logging.getLogger(__name__)

# --- Route typing ---
GuardResult = Union[bool, Awaitable[bool]]
Guard = Callable[[str], GuardResult]
Handler = Callable[[str], Awaitable[str]]


@dataclass(frozen=True)
class Route:
    name: str
    guard: Guard
    handler: Handler


async def _evaluate(guard: Guard, text: str) -> bool:
    result = guard(text)
    if inspect.isawaitable(result):
        result = await result
    return bool(result)


# --- Decision list ---
async def first_matching_route(routes: Sequence[Route], text: str) -> Optional[Route]:
    """
    Walk routes in order and return the first whose guard accepts text.

    Guards may be plain or async predicates. Later guards are not evaluated
    once one matches, so an expensive guard placed late costs nothing for
    text claimed earlier.
    """

    for route in routes:
        if await _evaluate(route.guard, text):
            logger.debug("route_selected", extra={"route": route.name})
            return route
    return None
