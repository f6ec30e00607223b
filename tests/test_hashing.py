"""Tests for fingerprinting and change detection."""

import hashlib
from datetime import datetime

import pytest

from pagewatch.scraper import (
    ChangeDetector,
    ChangeKind,
    ContentHasher,
    fingerprint,
)


class TestContentHasher:
    """Test the ContentHasher implementation."""

    def test_fingerprint_is_sha256_of_utf8(self):
        text = "Prix: 10 € – déjà vu"
        assert fingerprint(text) == hashlib.sha256(text.encode("utf-8")).hexdigest()

    def test_fingerprint_is_deterministic(self):
        hasher = ContentHasher()
        assert hasher.fingerprint("Hello World") == hasher.fingerprint("Hello World")
        assert len(hasher.fingerprint("Hello World")) == 64

    def test_different_texts_differ(self):
        assert fingerprint("Hello") != fingerprint("Hello World")
        assert fingerprint("a b") != fingerprint("b a")
        assert fingerprint("") != fingerprint(" ")

    def test_blake3_digest(self):
        hasher = ContentHasher(hash_type="blake3")
        digest = hasher.fingerprint("Hello")
        assert len(digest) == 64
        assert digest != fingerprint("Hello")

    def test_unknown_hash_type_rejected(self):
        with pytest.raises(ValueError):
            ContentHasher(hash_type="md5")

    def test_hash_content_metadata(self):
        content_hash = ContentHasher().hash_content("Hello")
        assert content_hash.hash_value == fingerprint("Hello")
        assert content_hash.hash_type == "sha256"
        assert content_hash.content_length == 5


class TestChangeDetector:
    """Test the ChangeDetector implementation."""

    @pytest.fixture
    def detector(self):
        return ChangeDetector()

    def test_first_observation(self, detector):
        now = datetime(2024, 1, 1)
        result = detector.detect(None, "abc", now)

        assert result.kind == ChangeKind.FIRST_OBSERVATION
        assert not result.has_changed
        assert result.state_update == {"last_fingerprint": "abc", "last_checked_at": now}

    def test_unchanged(self, detector):
        result = detector.detect("abc", "abc")
        assert result.kind == ChangeKind.UNCHANGED
        assert result.state_update["last_fingerprint"] == "abc"

    def test_changed(self, detector):
        now = datetime(2024, 1, 1)
        result = detector.detect("abc", "def", now)

        assert result.kind == ChangeKind.CHANGED
        assert result.has_changed
        assert result.previous_fingerprint == "abc"
        assert result.state_update == {"last_fingerprint": "def", "last_checked_at": now}
