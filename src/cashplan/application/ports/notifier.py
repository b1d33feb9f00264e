"""Port for change notifications."""

from collections.abc import Callable
from typing import Protocol

from cashplan.domain.models import ChangeEvent, ChangeType

ChangeListener = Callable[[ChangeEvent], None]


class ChangeNotifierPort(Protocol):
    """Publish/subscribe channel for store mutations."""

    def publish(self, event: ChangeEvent) -> None:
        """Deliver ``event`` to every matching listener."""

    def subscribe(
        self,
        listener: ChangeListener,
        change_type: ChangeType = ChangeType.ALL,
    ) -> Callable[[], None]:
        """Register a listener and return its unsubscribe callable."""


__all__ = ["ChangeListener", "ChangeNotifierPort"]
