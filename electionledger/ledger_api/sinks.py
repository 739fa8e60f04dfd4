"""
Event sinks backed by the hosting Django project.
"""
import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer

from .events import EventSink
from .models import LedgerEntry

logger = logging.getLogger(__name__)

LEDGER_GROUP_NAME = "ledger_events"


class JournalEventSink(EventSink):
    """Appends every event to the hash-chained journal."""

    def emit(self, event):
        entry = LedgerEntry.objects.create(
            event_type=event.event_type,
            payload=event.as_dict(),
        )
        logger.debug("journal_appended event=%s entry_id=%d hash=%s",
                     event.event_type, entry.id, entry.current_hash)
        return entry


class ChannelsEventSink(EventSink):
    """
    Broadcasts every event to the dashboard group.
    Consumers receive it in `LedgerEventsConsumer.ledger_event`.
    """

    def __init__(self, group_name=LEDGER_GROUP_NAME):
        self.group_name = group_name

    def emit(self, event):
        channel_layer = get_channel_layer()
        if channel_layer is None:
            logger.debug("channels_broadcast_skipped reason=no_channel_layer event=%s", event.event_type)
            return

        async_to_sync(channel_layer.group_send)(
            self.group_name,
            {
                "type": "ledger.event",  # MUST match LedgerEventsConsumer.ledger_event
                "event": event.event_type,
                "payload": event.as_dict(),
            }
        )
        logger.debug("channels_broadcast_sent event=%s group=%s", event.event_type, self.group_name)
