"""One-Time Codes — generation, cache keying and comparison for email sign-in.

Invariants:
    - Codes are OTC_LENGTH characters drawn uniformly from OTC_ALPHABET (leading zeros allowed)
    - Randomness comes from the secrets module only
    - One cache key per normalized email; keys never collide across emails
    - Comparison is constant-time in the length of the submitted code
"""

import hmac
import secrets

from proofpass.core.domain_types import OTC_ALPHABET, OTC_LENGTH

_CACHE_KEY_PREFIX = "user:email-signin-code:"


def generate_code(length: int = OTC_LENGTH, alphabet: str = OTC_ALPHABET) -> str:
    """Draw a fresh code from a cryptographically secure source."""
    return "".join(secrets.choice(alphabet) for _ in range(length))


def normalize_email(email: str) -> str:
    return email.strip().lower()


def signin_code_key(email: str) -> str:
    """OTCStore key binding a code exclusively to one email."""
    return f"{_CACHE_KEY_PREFIX}{normalize_email(email)}"


def codes_match(expected: str, submitted: str) -> bool:
    return hmac.compare_digest(expected.encode("utf-8"), submitted.encode("utf-8"))
