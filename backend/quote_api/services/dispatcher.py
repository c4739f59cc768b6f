import json
import logging
from typing import Mapping, Optional

from pydantic import ValidationError

from quote_api.schemas.events import (
    UNKNOWN_EVENT_ID,
    DispatchOutcome,
    DispatchStatus,
    HandlerResult,
    VerifiedEvent,
)
from quote_api.services.handlers import DEFAULT_HANDLERS, Handler

logger = logging.getLogger(__name__)


class DispatchError(Exception):
    reason = "unparseable_body"


class EventDispatcher:
    """
    Route verified webhook events to handlers by exact event type.

    Unknown types are acknowledged and ignored. Handler failures are logged
    and never raised: the provider only needs to know the event arrived.
    """

    def __init__(self, handlers: Optional[Mapping[str, Handler]] = None):
        self._handlers: dict[str, Handler] = dict(
            DEFAULT_HANDLERS if handlers is None else handlers
        )

    @property
    def event_types(self) -> list[str]:
        return sorted(self._handlers)

    def register(self, event_type: str, handler: Handler) -> None:
        self._handlers[event_type] = handler

    def parse(self, raw_body: bytes) -> VerifiedEvent:
        try:
            payload = json.loads(raw_body)
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise DispatchError("Verified body is not valid JSON") from exc
        if not isinstance(payload, dict):
            raise DispatchError("Verified body is not a JSON object")

        event_type = payload.get("type")
        event_id = payload.get("id")
        try:
            return VerifiedEvent(
                event_type=event_type if isinstance(event_type, str) else "",
                event_id=str(event_id) if event_id else UNKNOWN_EVENT_ID,
                payload=payload,
            )
        except ValidationError as exc:
            raise DispatchError("Verified body does not form an event") from exc

    def dispatch(self, event: VerifiedEvent) -> DispatchOutcome:
        handler = self._handlers.get(event.event_type)
        if handler is None:
            logger.info(f"Unhandled event type: {event.event_type!r} ({event.event_id})")
            return DispatchOutcome(
                status=DispatchStatus.ignored,
                event_type=event.event_type,
                event_id=event.event_id,
            )

        try:
            result = handler(event)
        except Exception as e:
            logger.warning(
                f"Handler for {event.event_type} failed on event {event.event_id}: {e}",
                exc_info=True,
            )
            result = HandlerResult(ok=False, detail=str(e) or type(e).__name__)
        else:
            if not isinstance(result, HandlerResult):
                result = HandlerResult(ok=False, detail="Handler returned no result")
            if not result.ok:
                logger.warning(
                    f"Handler for {event.event_type} could not process event "
                    f"{event.event_id}: {result.detail}"
                )

        return DispatchOutcome(
            status=DispatchStatus.handled,
            event_type=event.event_type,
            event_id=event.event_id,
            object_id=result.object_id,
            result=result,
        )
