import logging
from typing import Dict, Mapping, Optional
from marshmallow import ValidationError
from reattach.types.models import Claim
from reattach.types.schemas import ClaimSchema

logger = logging.getLogger(__name__)

EVENT_ADDED = "ADDED"
EVENT_MODIFIED = "MODIFIED"
EVENT_DELETED = "DELETED"


class ClaimEventTracker:
    """Turn raw claim watch events into add, update and delete notifications.

    The watch stream only carries the latest revision of an object, so the
    last revision seen for every key is kept to give update handlers the
    old claim to compare against.
    """

    def __init__(self, handler):
        self.handler = handler
        self._claims: Dict[str, Claim] = {}

    def __len__(self) -> int:
        return len(self._claims)

    def last_seen(self, key: str) -> Optional[Claim]:
        return self._claims.get(key)

    async def dispatch(self, event_type: Optional[str], body: Mapping) -> None:
        """Route one watch event to the handler.

        ``event_type`` is None for objects listed when the watch starts.
        """
        try:
            claim: Claim = ClaimSchema().load(dict(body))
        except ValidationError as e:
            logger.error(f"Ignoring malformed claim event: {e.messages}")
            return

        key = claim.key
        if event_type == EVENT_DELETED:
            self._claims.pop(key, None)
            await self.handler.on_delete(claim)
            return

        old = self._claims.get(key)
        self._claims[key] = claim
        if old is None:
            await self.handler.on_add(claim)
        else:
            await self.handler.on_update(old, claim)
