import hashlib
import hmac
import re
import time
from dataclasses import dataclass, field
from typing import Optional, Union

SCHEME = "v1"
TIMESTAMP_RE = re.compile(r"-?[0-9]+")
DEFAULT_TOLERANCE = 300


class StripeSignatureError(Exception):
    """Base class for every reason a webhook signature is rejected."""

    reason = "invalid_signature"


class MalformedHeader(StripeSignatureError):
    reason = "malformed_header"


class MissingTimestamp(StripeSignatureError):
    reason = "missing_timestamp"


class NoSignatures(StripeSignatureError):
    reason = "no_signatures"


class StaleTimestamp(StripeSignatureError):
    reason = "stale_timestamp"


class SignatureMismatch(StripeSignatureError):
    reason = "signature_mismatch"


@dataclass
class WebhookSignatureHeader:
    timestamp: Optional[int] = None
    signatures: list[str] = field(default_factory=list)


def _secret_bytes(secret: Union[str, bytes]) -> bytes:
    if isinstance(secret, str):
        secret = secret.encode("utf-8")
    if not secret:
        raise ValueError("Webhook signing secret must not be empty")
    return secret


def parse_header(header_value: str) -> WebhookSignatureHeader:
    """
    Parse a ``t=...,v1=...`` header.

    Segments that do not parse are skipped one by one so that extra fields
    added by the provider do not break verification. Raises MalformedHeader
    when nothing parsed, MissingTimestamp and NoSignatures otherwise.
    """
    parsed = WebhookSignatureHeader()
    pairs = 0
    for segment in (header_value or "").split(","):
        key, sep, value = segment.partition("=")
        key, value = key.strip(), value.strip()
        if not sep or not key or not value:
            continue
        if key == "t":
            # Plain decimal seconds only: no "+", "_" or non-ASCII digits
            if not TIMESTAMP_RE.fullmatch(value):
                continue
            try:
                parsed.timestamp = int(value)
            except ValueError:
                continue
        elif key == SCHEME:
            parsed.signatures.append(value)
        pairs += 1

    if pairs == 0:
        raise MalformedHeader("No key=value pairs in signature header")
    if parsed.timestamp is None:
        raise MissingTimestamp("Signature header has no timestamp")
    if not parsed.signatures:
        raise NoSignatures(f"Signature header has no {SCHEME} signatures")
    return parsed


def compute_signature(timestamp: int, body: bytes, secret: Union[str, bytes]) -> str:
    # Body bytes are signed exactly as received
    signed_payload = f"{timestamp}.".encode("utf-8") + body
    return hmac.new(_secret_bytes(secret), signed_payload, hashlib.sha256).hexdigest()


def generate_header(
    body: bytes, secret: Union[str, bytes], timestamp: Optional[int] = None
) -> str:
    """Build a signature header for ``body``, as the provider would send it."""
    if timestamp is None:
        timestamp = int(time.time())
    return f"t={timestamp},{SCHEME}={compute_signature(timestamp, body, secret)}"


def verify(
    raw_body: bytes,
    header: str,
    secret: Union[str, bytes],
    now: Optional[float] = None,
    tolerance: int = DEFAULT_TOLERANCE,
) -> None:
    """
    Raise a StripeSignatureError subclass if the signature is invalid.
    """
    _secret_bytes(secret)
    parsed = parse_header(header)

    if now is None:
        now = time.time()
    # Integer arithmetic: an oversized t must not overflow a float
    if abs(int(now) - parsed.timestamp) > tolerance:
        raise StaleTimestamp("Timestamp outside tolerance")

    expected = compute_signature(parsed.timestamp, raw_body, secret).encode("ascii")
    # Compared as bytes: compare_digest refuses non-ASCII str
    if any(
        hmac.compare_digest(expected, candidate.encode("utf-8"))
        for candidate in parsed.signatures
    ):
        return
    raise SignatureMismatch("No signature matches the expected signature")


class WebhookVerifier:
    """Holds the signing secret so request handlers never read it ad hoc."""

    def __init__(self, secret: Union[str, bytes], tolerance: int = DEFAULT_TOLERANCE):
        self._secret = _secret_bytes(secret)
        self.tolerance = tolerance

    def verify(self, raw_body: bytes, header: str, now: Optional[float] = None) -> None:
        verify(raw_body, header, self._secret, now=now, tolerance=self.tolerance)
