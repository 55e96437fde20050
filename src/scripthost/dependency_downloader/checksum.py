"""
Checksum verification for downloaded artifacts.

Repositories publish a ``<artifact>.sha512`` file next to every artifact. Its
content is the hex digest, optionally followed by whitespace and a file name.
"""

import hashlib
import hmac
import string

DIGEST_ALGORITHM = "sha512"

_HEX_DIGITS = frozenset(string.hexdigits)


def compute_digest(payload: bytes, algorithm: str = DIGEST_ALGORITHM) -> str:
    """Lower-case hex digest of ``payload``."""
    return hashlib.new(algorithm, payload).hexdigest()


def normalize_reference(reference: str) -> str:
    """
    Extract the digest from the text of a published checksum file.

    Returns an empty string when there is nothing that looks like a digest.
    """
    parts = reference.strip().split()
    return parts[0].lower() if parts else ""


def is_valid_hex_digest(digest: str, algorithm: str = DIGEST_ALGORITHM) -> bool:
    expected_length = hashlib.new(algorithm).digest_size * 2
    return len(digest) == expected_length and all(c in _HEX_DIGITS for c in digest)


def digests_match(payload: bytes, reference: str, algorithm: str = DIGEST_ALGORITHM) -> bool:
    """
    Check ``payload`` against a published reference digest.

    Malformed references are a mismatch, never an error.
    """
    expected = normalize_reference(reference)
    if not is_valid_hex_digest(expected, algorithm):
        return False
    return hmac.compare_digest(compute_digest(payload, algorithm), expected)
