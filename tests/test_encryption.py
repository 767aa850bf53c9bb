"""Unit tests for summary encryption."""

import json
from datetime import datetime

import pytest

from mediecho.errors import DecryptionError
from mediecho.services.brief_service import get_summary_cipher
from mediecho.services.encryption import SummaryCipher, serialize_summary

SECRET = "test-secret-key"


@pytest.fixture
def cipher():
    return get_summary_cipher(SECRET)


class TestSummaryCipher:
    """Tests for SummaryCipher."""

    def test_decrypt_reproduces_plaintext_exactly(self, cipher):
        text = serialize_summary({"total_logs": 2, "by_type": {"mood": 2}, "note": "é ✓"})
        assert cipher.decrypt_text(cipher.encrypt_text(text)) == text

    def test_payload_is_hex(self, cipher):
        payload = cipher.encrypt_text("hello")
        assert set(payload) == {"iv", "content"}
        assert len(bytes.fromhex(payload["iv"])) == 16
        assert len(bytes.fromhex(payload["content"])) % 16 == 0

    def test_fresh_iv_per_call(self, cipher):
        first = cipher.encrypt_text("same")
        second = cipher.encrypt_text("same")
        assert first["iv"] != second["iv"]
        assert first["content"] != second["content"]

    def test_summary_round_trip_stringifies_dates(self, cipher):
        summary = {
            "total_logs": 1,
            "highlights": [{"date": datetime(2024, 1, 8, 9, 30), "type": "symptom", "text": "x"}],
        }
        restored = cipher.decrypt_summary(cipher.encrypt_summary(summary))
        assert restored["highlights"][0]["date"] == "2024-01-08T09:30:00"

    def test_wrong_secret_fails(self, cipher):
        payload = cipher.encrypt_text(json.dumps({"total_logs": 5, "by_type": {"food": 5}}))
        other = get_summary_cipher("a-different-secret")
        with pytest.raises(DecryptionError):
            other.decrypt_text(payload)

    def test_malformed_payload_fails(self, cipher):
        with pytest.raises(DecryptionError):
            cipher.decrypt_text({"iv": "zz", "content": "00"})
        with pytest.raises(DecryptionError):
            cipher.decrypt_text({"content": "00"})

    def test_empty_secret_rejected(self):
        with pytest.raises(ValueError):
            SummaryCipher("")


class TestSerializeSummary:
    """Tests for serialize_summary."""

    def test_compact_and_ordered(self):
        assert serialize_summary({"b": 1, "a": [1, 2]}) == '{"b":1,"a":[1,2]}'
