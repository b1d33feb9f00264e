"""In-process change notification bus."""

from collections.abc import Callable

from cashplan.application.ports.notifier import (
    ChangeListener,
    ChangeNotifierPort,
)
from cashplan.domain.models import ChangeEvent, ChangeType
from cashplan.infrastructure.logging.logger import get_app_logger


class ChangeEventBus(ChangeNotifierPort):
    """Synchronous publish/subscribe bus passed to the components using it.

    Listeners run in subscription order on the publisher's thread. A
    failing listener is logged and does not prevent the others from
    running. ``version`` increases on every publish so pollers can detect
    changes without subscribing.
    """

    def __init__(self, logger=None) -> None:
        self._logger = logger or get_app_logger()
        self._listeners: list[tuple[ChangeType, ChangeListener]] = []
        self.version = 0
        self.last_event: ChangeEvent | None = None

    def subscribe(
        self,
        listener: ChangeListener,
        change_type: ChangeType = ChangeType.ALL,
    ) -> Callable[[], None]:
        """Register ``listener`` for one change type (or all of them).

        Args:
            listener: Callable receiving the event.
            change_type: Type filter; ``ChangeType.ALL`` receives everything.

        Returns:
            Callable[[], None]: Removes the subscription when called.
        """
        subscription = (change_type, listener)
        self._listeners.append(subscription)

        def unsubscribe() -> None:
            if subscription in self._listeners:
                self._listeners.remove(subscription)

        return unsubscribe

    def publish(self, event: ChangeEvent) -> None:
        self.version += 1
        self.last_event = event
        self._logger.info(
            f"Change event {event.change_type.value}"
            f"/{event.subtype.value if event.subtype else '-'} "
            f"on {event.entity.value if event.entity else '-'} "
            f"ids={list(event.affected_ids)}"
        )
        for change_type, listener in list(self._listeners):
            if change_type not in (ChangeType.ALL, event.change_type):
                continue
            try:
                listener(event)
            except Exception as exc:
                self._logger.error(
                    f"Change listener {listener!r} failed: {exc}"
                )

    @property
    def listener_count(self) -> int:
        return len(self._listeners)


__all__ = ["ChangeEventBus"]
