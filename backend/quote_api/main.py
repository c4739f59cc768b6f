import logging
from functools import lru_cache

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware

from quote_api import __version__
from quote_api.core.config import get_settings
from quote_api.middleware.body_size import BodySizeLimitMiddleware, read_limited_body
from quote_api.schemas.events import WebhookAck
from quote_api.schemas.quotes import QuoteInput, QuoteOutput
from quote_api.services import stripe_verify
from quote_api.services.dispatcher import DispatchError, EventDispatcher
from quote_api.services.pricing import calculate_quote

# Fails here, at startup, when STRIPE_WEBHOOK_SECRET is missing or blank
settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Powder Coating Quote API",
    description="Quotes powder coating jobs and receives Stripe payment events",
    version=__version__,
)

app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.max_body_bytes)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.allowed_origins.split(",") if o.strip()],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


# ---------- dependencies ----------
@lru_cache
def get_verifier() -> stripe_verify.WebhookVerifier:
    settings = get_settings()
    return stripe_verify.WebhookVerifier(
        settings.stripe_webhook_secret,
        tolerance=settings.webhook_tolerance_seconds,
    )


@lru_cache
def get_dispatcher() -> EventDispatcher:
    return EventDispatcher()


# ---------- health ----------
@app.get("/health")
async def health():
    return {"status": "ok", "version": __version__}


# ---------- quotes ----------
@app.post("/api/quotes", response_model=QuoteOutput)
def create_quote(data: QuoteInput):
    quote = calculate_quote(data)
    logger.info(
        f"Quoted {data.quantity} x {data.material.value} ({data.prep_level.value}): "
        f"{quote.total_price} {quote.currency}"
    )
    return quote


# ---------- stripe webhooks ----------
@app.post(
    "/api/webhooks/stripe",
    response_model=WebhookAck,
    responses={400: {"description": "Invalid webhook signature"}},
)
async def stripe_webhook(
    request: Request,
    verifier: stripe_verify.WebhookVerifier = Depends(get_verifier),
    dispatcher: EventDispatcher = Depends(get_dispatcher),
):
    logger.info("Received Stripe webhook")

    # Verify against the exact bytes received, before any parsing
    raw = await read_limited_body(request, settings.max_body_bytes)
    stripe_sig = request.headers.get("stripe-signature", "")

    try:
        verifier.verify(raw, stripe_sig)
    except stripe_verify.StripeSignatureError as e:
        logger.error(f"Rejected Stripe webhook: {e.reason}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid Stripe signature"
        )

    try:
        event = dispatcher.parse(raw)
    except DispatchError as e:
        logger.error(f"Verified Stripe webhook could not be parsed: {e.reason}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        )

    logger.info(f"Verified webhook event type: {event.event_type} ({event.event_id})")
    outcome = dispatcher.dispatch(event)
    logger.info(f"Event {outcome.event_id} {outcome.status.value}")

    return WebhookAck(received=True)
