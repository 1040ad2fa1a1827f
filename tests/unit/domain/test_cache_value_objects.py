"""
Unit tests for cache value objects.
"""

from datetime import timedelta

import pytest

from redis_facade.domain.cache.value_objects import (
    TTL,
    CacheKey,
    StructuredValue,
    TextValue,
    as_cache_value,
)


class TestCacheKey:
    def test_valid_key(self):
        assert CacheKey("user:1").value == "user:1"
        assert str(CacheKey("user:1")) == "user:1"

    def test_empty_key_rejected(self):
        with pytest.raises(ValueError, match="empty"):
            CacheKey("")

    def test_non_string_rejected(self):
        with pytest.raises(ValueError):
            CacheKey(None)

    @pytest.mark.parametrize("raw", ["user 1", "k" * 251, " ", "\n"])
    def test_any_non_empty_string_is_a_key(self, raw):
        assert CacheKey(raw).value == raw

    def test_of_normalizes(self):
        key = CacheKey("user:1")

        assert CacheKey.of(key) is key
        assert CacheKey.of("user:1") == key


class TestTTL:
    def test_zero_is_expired(self):
        assert TTL(0).is_expired
        assert not TTL(1).is_expired

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            TTL(-1)

    def test_no_upper_bound(self):
        assert TTL.coerce(timedelta(days=400)).seconds == 400 * 86400

    @pytest.mark.parametrize(
        "raw, seconds",
        [
            (60, 60),
            (1.2, 2),
            (timedelta(minutes=1), 60),
            (timedelta(milliseconds=1500), 2),
            (TTL(5), 5),
        ],
    )
    def test_coerce(self, raw, seconds):
        assert TTL.coerce(raw) == TTL(seconds)

    def test_coerce_none_means_no_expiration(self):
        assert TTL.coerce(None) is None

    @pytest.mark.parametrize("raw", ["60", True])
    def test_coerce_rejects_other_types(self, raw):
        with pytest.raises(TypeError):
            TTL.coerce(raw)


class TestCacheValues:
    def test_str_is_text(self):
        assert as_cache_value("alice") == TextValue("alice")

    def test_other_values_are_structured(self):
        assert as_cache_value({"age": 30}) == StructuredValue({"age": 30})
        assert as_cache_value(3) == StructuredValue(3)

    def test_tagged_values_pass_through(self):
        structured = StructuredValue("alice")

        assert as_cache_value(structured) is structured

    def test_text_value_requires_str(self):
        with pytest.raises(TypeError):
            TextValue(42)
