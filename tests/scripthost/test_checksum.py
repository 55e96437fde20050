"""
Tests for checksum verification.
"""

import hashlib

from scripthost.dependency_downloader.checksum import (
    compute_digest,
    digests_match,
    is_valid_hex_digest,
    normalize_reference,
)


def test_matching_digest():
    payload = b"artifact bytes"
    assert digests_match(payload, hashlib.sha512(payload).hexdigest())


def test_reference_is_case_insensitive_and_may_name_the_file():
    payload = b"artifact bytes"
    reference = hashlib.sha512(payload).hexdigest().upper() + "  lib-1.0.jar\n"
    assert digests_match(payload, reference)


def test_mismatching_digest():
    assert not digests_match(b"one", hashlib.sha512(b"two").hexdigest())


def test_malformed_reference_is_a_mismatch():
    payload = b"artifact bytes"
    assert not digests_match(payload, "deadbeef")
    assert not digests_match(payload, "")
    assert not digests_match(payload, "z" * 128)
    assert not digests_match(payload, "<html>Not Found</html>")


def test_compute_digest_is_sha512_hex():
    digest = compute_digest(b"")
    assert is_valid_hex_digest(digest)
    assert digest == hashlib.sha512(b"").hexdigest()


def test_normalize_reference():
    assert normalize_reference("  ABC def\n") == "abc"
    assert normalize_reference("   ") == ""
