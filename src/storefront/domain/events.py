"""In-process publish/subscribe for domain events."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, cast

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    type EventHandler[E] = Callable[[E], Awaitable[object]]

log = logging.getLogger(__name__)


@dataclass(slots=True)
class EventBus:
    """Delivers each published event to the handlers subscribed to its exact type, in order."""

    _handlers: dict[type, list[EventHandler[object]]] = field(
        default_factory=lambda: defaultdict(list)
    )

    def subscribe[E](self, event_type: type[E], handler: EventHandler[E]) -> None:
        self._handlers[event_type].append(cast("EventHandler[object]", handler))

    async def publish(self, event: object) -> list[object]:
        handlers = self._handlers.get(type(event), [])
        if not handlers:
            log.debug("No subscribers for %s", type(event).__name__)
        return [await handler(event) for handler in handlers]
