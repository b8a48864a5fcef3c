import json

from channels.generic.websocket import AsyncWebsocketConsumer

from flow.models import Stage
from flow.services.notify import board_group


class BoardConsumer(AsyncWebsocketConsumer):
    """Pushes ``board.refresh`` events to the displays of one stage."""

    async def connect(self):
        self.stage = self.scope["url_route"]["kwargs"]["stage"]
        if self.stage not in Stage.values:
            await self.close()
            return
        self.group = board_group(self.stage)
        await self.channel_layer.group_add(self.group, self.channel_name)
        await self.accept()
        await self.send(json.dumps({"type": "welcome", "stage": self.stage}))

    async def disconnect(self, close_code):
        if getattr(self, "group", None):
            await self.channel_layer.group_discard(self.group, self.channel_name)

    async def board_refresh(self, event):
        # event: {"type": "board.refresh", "stage": str, "version": int, "ts": "..."}
        await self.send(json.dumps(event))
