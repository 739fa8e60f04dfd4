import json
import logging

from channels.generic.websocket import AsyncWebsocketConsumer
from asgiref.sync import sync_to_async

from .services import get_ledger
from .sinks import LEDGER_GROUP_NAME
from .views import election_snapshot

logger = logging.getLogger(__name__)


class LedgerEventsConsumer(AsyncWebsocketConsumer):
    """
    Live feed for dashboards:
    1. Sends the current election snapshot on connect.
    2. Forwards every committed ledger event after that.
    """

    @sync_to_async
    def get_initial_data(self):
        return election_snapshot(get_ledger())

    async def connect(self):
        self.group_name = LEDGER_GROUP_NAME

        # Subscribe before taking the snapshot so no event falls in between.
        await self.channel_layer.group_add(
            self.group_name,
            self.channel_name
        )
        await self.accept()

        initial_data = await self.get_initial_data()
        await self.send(text_data=json.dumps(initial_data))
        logger.debug("ledger_ws_connected channel=%s", self.channel_name)

    async def disconnect(self, close_code):
        logger.debug("ledger_ws_disconnected channel=%s code=%s", self.channel_name, close_code)
        await self.channel_layer.group_discard(
            self.group_name,
            self.channel_name
        )

    # Called by ChannelsEventSink's group_send ("ledger.event" -> ledger_event).
    async def ledger_event(self, event):
        await self.send(text_data=json.dumps({
            'event': event['event'],
            'payload': event['payload'],
        }))
