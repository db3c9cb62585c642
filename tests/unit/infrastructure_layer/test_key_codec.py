"""
Unit Tests for Storage Key Derivation

Tests prefixing, determinism and filesystem-safe sanitization.
"""

import re

import pytest

from tiercache.core.config.constants import RESERVED_KEY_CHARACTERS
from tiercache.infrastructure.cache.key_codec import clean_store_key, compute_storage_key

SAFE_KEY_RE = re.compile(r"^[A-Za-z0-9._~-]*$")


@pytest.mark.unit
class TestComputeStorageKey:
    """Test prefix handling."""

    def test_plain_concatenation_without_safe_keys(self):
        assert compute_storage_key("site_", "user:42 <b>") == "site_user:42 <b>"

    def test_sanitized_with_safe_keys(self):
        assert compute_storage_key("site_", "a b", requires_safe_keys=True) == "site_a-b"

    def test_deterministic(self):
        first = compute_storage_key("p_", "Grüße *", requires_safe_keys=True)
        second = compute_storage_key("p_", "Grüße *", requires_safe_keys=True)
        assert first == second


@pytest.mark.unit
class TestCleanStoreKey:
    """Test each sanitization step."""

    def test_whitespace_runs_collapse_to_one_hyphen(self):
        assert clean_store_key("a \t\r\n  b") == "a-b"

    def test_named_entities_collapse_to_base_letter(self):
        assert clean_store_key("café") == "cafe"

    def test_ampersand_becomes_a(self):
        assert clean_store_key("a&b") == "aab"

    def test_encoded_entity_input_is_normalized(self):
        assert clean_store_key("caf&eacute;") == "cafe"

    def test_entity_without_semicolon_stays_literal(self):
        assert clean_store_key("a&copyb") == "aacopyb"
        assert clean_store_key("a&copy;b") == "acb"

    def test_numeric_entity_decoded(self):
        assert clean_store_key("caf&#233;") == "cafe"

    def test_reserved_character_placeholder(self):
        # ":" is the third reserved character -> "-+-+-+-", "+" percent-encodes to "-2B"
        assert clean_store_key("key:1") == "key--2B--2B--2B-1"

    def test_percent_encoding_uses_hyphen(self):
        assert clean_store_key("a/b") == "a-2Fb"

    def test_unreserved_characters_kept(self):
        assert clean_store_key("Az09-_.~") == "Az09-_.~"

    @pytest.mark.parametrize(
        "raw",
        ['quote"d', "star*", "co:lon", "<tag>", "what?", "it's", "pi|pe", "tab\there", "ünïcödé ✓", "slash/back\\"],
    )
    def test_output_is_filesystem_safe(self, raw):
        assert SAFE_KEY_RE.match(clean_store_key(raw))

    def test_reserved_characters_never_collide(self):
        keys = {clean_store_key(f"a{char}b") for char in RESERVED_KEY_CHARACTERS}
        assert len(keys) == len(RESERVED_KEY_CHARACTERS)
