"""
Handlers for the Stripe events the shop acts on.

Each handler receives a VerifiedEvent, reads the primary object at
``data.object`` and returns a HandlerResult. Handlers only log for now;
order records and confirmation emails hang off the same entry points.
"""

import logging
from typing import Any, Callable

from quote_api.schemas.events import HandlerResult, VerifiedEvent, lookup

logger = logging.getLogger(__name__)

Handler = Callable[[VerifiedEvent], HandlerResult]

PRIMARY_OBJECT_PATH = "data.object"


def _primary_object(event: VerifiedEvent) -> dict[str, Any] | None:
    obj = event.lookup(PRIMARY_OBJECT_PATH)
    return obj if isinstance(obj, dict) else None


def _as_id(value: Any) -> str | None:
    return None if value is None else str(value)


def _missing_object(event: VerifiedEvent) -> HandlerResult:
    return HandlerResult(
        ok=False, detail=f"Event {event.event_id} has no {PRIMARY_OBJECT_PATH}"
    )


def handle_checkout_session_completed(event: VerifiedEvent) -> HandlerResult:
    session = _primary_object(event)
    if session is None:
        return _missing_object(event)

    metadata = session.get("metadata")
    if not isinstance(metadata, dict):
        metadata = {}
    fields = {
        "payment_status": session.get("payment_status"),
        "customer_email": lookup(session, "customer_details.email")
        or session.get("customer_email"),
        "metadata": metadata,
        "quote_id": metadata.get("quote_id"),
    }
    session_id = session.get("id")

    logger.info(
        f"Checkout session {session_id} completed, payment status: {fields['payment_status']}"
    )
    if fields["quote_id"]:
        logger.info(f"Order created for quote: {fields['quote_id']}")
    else:
        logger.info(f"Checkout session {session_id} carries no quote_id")

    return HandlerResult(object_id=_as_id(session_id), fields=fields)


def handle_payment_intent_succeeded(event: VerifiedEvent) -> HandlerResult:
    intent = _primary_object(event)
    if intent is None:
        return _missing_object(event)

    amount = intent.get("amount_received")
    if amount is None:
        amount = intent.get("amount")
    fields = {"amount": amount, "currency": intent.get("currency")}

    logger.info(
        f"Payment intent {intent.get('id')} succeeded: {fields['amount']} {fields['currency']}"
    )
    return HandlerResult(object_id=_as_id(intent.get("id")), fields=fields)


def handle_payment_intent_failed(event: VerifiedEvent) -> HandlerResult:
    intent = _primary_object(event)
    if intent is None:
        return _missing_object(event)

    fields = {
        "failure_code": lookup(intent, "last_payment_error.code"),
        "failure_message": lookup(intent, "last_payment_error.message"),
    }
    logger.warning(
        f"Payment intent {intent.get('id')} failed: "
        f"{fields['failure_code']} {fields['failure_message']}"
    )
    return HandlerResult(object_id=_as_id(intent.get("id")), fields=fields)


DEFAULT_HANDLERS: dict[str, Handler] = {
    "checkout.session.completed": handle_checkout_session_completed,
    "payment_intent.succeeded": handle_payment_intent_succeeded,
    "payment_intent.payment_failed": handle_payment_intent_failed,
}
