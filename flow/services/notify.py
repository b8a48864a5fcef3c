"""
Board refresh push.

After a mutation commits, every display subscribed to an affected stage
receives a ``board.refresh`` event and re-fetches the board.  Polling keeps
working without it; the push only shortens the delay.
"""
import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.db import transaction
from django.utils import timezone

logger = logging.getLogger(__name__)


def board_group(stage: str) -> str:
    return f"board.{stage}"


def _send(stages) -> None:
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return
    now = timezone.now()
    for stage in stages:
        event = {"type": "board.refresh", "stage": stage, "version": int(now.timestamp() * 1000), "ts": now.isoformat()}
        try:
            async_to_sync(channel_layer.group_send)(board_group(stage), event)
        except Exception:
            # the mutation is already committed; displays fall back to polling
            logger.warning('Board refresh push failed for %s', stage, exc_info=True)


def refresh_boards(*stages: str) -> None:
    stages = tuple(dict.fromkeys(s for s in stages if s))
    if stages:
        transaction.on_commit(lambda: _send(stages))
