"""Event bus contracts used by the outbox relay.

The relay rebuilds each stored event and publishes it; subscribers are
registered by the apps' ``ready()`` hooks.  A handler that raises makes
the relay record the failure on the outbox row, so handlers must be safe
to run more than once for the same ``event_id``.
"""

from __future__ import annotations

from typing import Generic, Protocol, Sequence, Type, TypeVar, runtime_checkable

from shared.domain.events import DomainEvent

E = TypeVar("E", bound=DomainEvent, contravariant=True)


@runtime_checkable
class IEventHandler(Protocol, Generic[E]):
    def handle(self, event: E) -> None: ...


class IEventBus(Protocol):
    def publish(self, event: DomainEvent) -> None:
        """Run every handler subscribed to ``type(event)``, in order."""

    def subscribe(self, event_class: Type[E], handler: IEventHandler[E]) -> None:
        """Register *handler*; subscribing the same handler twice is a no-op."""

    def handlers_for(self, event_class: Type[DomainEvent]) -> Sequence[IEventHandler]:
        ...

    def clear(self) -> None:
        """Drop every subscription."""
