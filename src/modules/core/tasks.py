"""Asynchronous tasks of the core module."""

from __future__ import annotations

import structlog
from celery import shared_task
from django.db import transaction

from modules.core.models import OutboxEvent
from shared.domain.events import DomainEvent
from shared.infrastructure.bus import event_bus

logger = structlog.get_logger(__name__)

OUTBOX_MAX_RETRIES = 5


@shared_task(name="core.relay_outbox_events")
def relay_outbox_events(batch_size: int = 100) -> dict:
    """Relay pending outbox rows to the in-process event bus.

    Each row is claimed under ``select_for_update(skip_locked=True)`` so
    concurrent workers never publish the same event twice.  A handler
    failure marks only that row as failed; the batch continues.
    """
    published = failed = 0
    with transaction.atomic():
        batch = list(
            OutboxEvent.objects.relayable(OUTBOX_MAX_RETRIES)
            .select_for_update(skip_locked=True)[:batch_size]
        )
        for row in batch:
            log = logger.bind(outbox_id=str(row.id), event_type=row.event_type)
            try:
                event = DomainEvent.from_payload(row.event_type, row.payload)
                event_bus.publish(event)
            except Exception as exc:  # noqa: BLE001 - recorded on the row
                row.mark_as_failed(str(exc))
                log.warning("outbox.relay_failed", error=str(exc))
                failed += 1
                continue
            row.mark_as_published()
            published += 1

    logger.info("outbox.relay_completed", published=published, failed=failed)
    return {"published": published, "failed": failed}
