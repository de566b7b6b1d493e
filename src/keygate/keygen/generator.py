"""
License key generator.

Format: {AAAAA}-{BBBBB}-{CCCCC}-{DDDDD}-{EEEEE}
- 5 segments x 5 chars from [A-Z0-9] (36^25 ≈ 8 x 10^38 keys)
- the key is a capability string: possession is the whole check, nothing is signed
"""

import re
import secrets

KEY_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
SEGMENT_LEN = 5
SEGMENTS = 5

KEY_PATTERN = re.compile(
    rf"^[A-Z0-9]{{{SEGMENT_LEN}}}(-[A-Z0-9]{{{SEGMENT_LEN}}}){{{SEGMENTS - 1}}}$"
)


def _random_segment() -> str:
    """Generate a random 5-char segment."""
    return "".join(secrets.choice(KEY_ALPHABET) for _ in range(SEGMENT_LEN))


def generate_key() -> str:
    """Generate a complete license key."""
    return "-".join(_random_segment() for _ in range(SEGMENTS))


def normalize_key(key: str) -> str:
    """Uppercase and strip surrounding whitespace, as typed by a user."""
    return key.strip().upper()


def validate_format(key: str) -> bool:
    """True when ``key`` has the 5x5 uppercase alphanumeric layout."""
    return bool(KEY_PATTERN.match(normalize_key(key)))
