#!/usr/bin/env python3

import json
import sys

from quote_api.services.stripe_verify import generate_header


def main(argv: list[str]) -> int:
    """Print a Stripe-Signature header for a payload, for local testing."""
    if len(argv) != 2:
        print("Usage: make_sig.py <secret> <payload>", file=sys.stderr)
        return 1

    secret, payload = argv

    # Validate payload is valid JSON
    try:
        json.loads(payload)
    except json.JSONDecodeError:
        print("Error: Payload must be valid JSON", file=sys.stderr)
        return 1

    print(generate_header(payload.encode("utf-8"), secret))
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
