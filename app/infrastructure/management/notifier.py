"""
Adapter: Entity change notifier.

Implements EntityNotifier port. Nothing subscribes to entity events yet,
so the default adapter only records them at debug level.
"""

import logging

from app.domain.management.entities import EntityEvent
from app.domain.management.ports import EntityNotifier

logger = logging.getLogger(__name__)


class NullNotifier(EntityNotifier):
    """Notifier that drops every event."""

    def notify(self, event: EntityEvent) -> None:
        logger.debug(
            "Entity event: %s %d %s",
            event.entity_kind.value,
            event.entity_id,
            event.action,
        )
