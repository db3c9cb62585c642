"""
Unit Tests for the Process-Local Tier

Tests promotion, expiry tracking, write-through and removal.
"""

import threading

import pytest

from tiercache.infrastructure.cache.process_tier import ProcessLocalTier, TierEntry, get_process_tier


@pytest.mark.unit
class TestLookup:
    """Test tier reads."""

    def test_unknown_key_misses(self, tier):
        assert tier.lookup("k") == (False, None)
        assert tier.contains("k") is False

    def test_lookup_does_not_count(self, tier):
        tier.lookup("k")
        assert tier.get_entry("k") is None


@pytest.mark.unit
class TestPromotion:
    """Test hit-count-driven promotion."""

    def test_promotes_on_threshold(self, tier):
        assert tier.record_backend_read("k", "v", present=True, threshold=3) is False
        assert tier.record_backend_read("k", "v", present=True, threshold=3) is False
        assert tier.lookup("k") == (False, None)

        assert tier.record_backend_read("k", "v", present=True, threshold=3) is True
        assert tier.lookup("k") == (True, "v")
        assert tier.get_entry("k").hit_count == 3

    def test_threshold_zero_never_promotes(self, tier):
        for _ in range(50):
            assert tier.record_backend_read("k", "v", present=True, threshold=0) is False
        assert tier.get_size() == 0

    def test_absent_value_not_promoted(self, tier):
        assert tier.record_backend_read("k", None, present=False, threshold=1) is False
        assert tier.contains("k") is False
        assert tier.get_entry("k").hit_count == 1

    def test_absent_read_drops_stale_value(self, tier):
        tier.record_backend_read("k", "v", present=True, threshold=1)
        tier.record_backend_read("k", None, present=False, threshold=1)
        assert tier.contains("k") is False

    def test_threshold_one_promotes_on_first_read(self, tier):
        assert tier.record_backend_read("k", 0, present=True, threshold=1) is True
        assert tier.lookup("k") == (True, 0)


@pytest.mark.unit
class TestExpiry:
    """Test expiry bookkeeping against the fake clock."""

    def test_promoted_value_expires(self, tier, fake_clock):
        tier.record_write("k", "v", 1)
        tier.record_backend_read("k", "v", present=True, threshold=1)
        assert tier.contains("k") is True

        fake_clock.advance(2)

        assert tier.lookup("k") == (False, None)

    def test_value_valid_at_exact_expiry(self, tier, fake_clock):
        tier.record_write("k", "v", 5)
        tier.record_backend_read("k", "v", present=True, threshold=1)
        fake_clock.advance(5)
        assert tier.contains("k") is True

    def test_expiry_recorded_before_promotion(self, tier, fake_clock):
        tier.record_write("k", "v", 10)
        entry = tier.get_entry("k")
        assert entry.expires_at == fake_clock.now + 10
        assert entry.has_value is False

    def test_zero_ttl_resets_to_never(self, tier, fake_clock):
        tier.record_write("k", "v", 10)
        tier.record_write("k", "v", 0)
        assert tier.get_entry("k").expires_at is None


@pytest.mark.unit
class TestRecordWrite:
    """Test applying confirmed writes to the tier."""

    def test_overwrites_promoted_value(self, tier):
        tier.record_backend_read("k", "old", present=True, threshold=1)
        assert tier.record_write("k", "new", 0) is True
        assert tier.lookup("k") == (True, "new")

    def test_ignores_unpromoted_key(self, tier):
        tier.record_backend_read("k", "old", present=True, threshold=5)
        assert tier.record_write("k", "new", 0) is False
        assert tier.contains("k") is False

    def test_value_and_expiry_change_together(self, tier, fake_clock):
        tier.record_write("k", "old", 100)
        tier.record_backend_read("k", "old", present=True, threshold=1)

        tier.record_write("k", "new", 5)

        entry = tier.get_entry("k")
        assert (entry.value, entry.expires_at) == ("new", fake_clock.now + 5)

    def test_concurrent_readers_never_see_torn_write(self, tier, fake_clock):
        ttls = {"a": 100, "b": 200}
        tier.record_write("k", "a", ttls["a"])
        tier.record_backend_read("k", "a", present=True, threshold=1)
        torn = []
        done = threading.Event()

        def writer():
            for i in range(2000):
                value = "b" if i % 2 else "a"
                tier.record_write("k", value, ttls[value])
            done.set()

        def reader():
            while not done.is_set():
                entry = tier.get_entry("k")
                if entry.expires_at != fake_clock.now + ttls[entry.value]:
                    torn.append(entry)

        threads = [threading.Thread(target=writer)] + [threading.Thread(target=reader) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert torn == []


@pytest.mark.unit
class TestReadGenerations:
    """Test that backend reads overlapping a write or removal never promote."""

    def test_write_during_read_blocks_promotion(self, tier):
        _, _, generation = tier.begin_read("k")
        tier.record_write("k", "new", 0)

        assert tier.record_backend_read("k", "old", present=True, threshold=1, generation=generation) is False
        assert tier.contains("k") is False
        assert tier.get_entry("k").hit_count == 1

    def test_discard_during_read_blocks_promotion(self, tier):
        _, _, generation = tier.begin_read("k")
        tier.discard("k")

        assert tier.record_backend_read("k", "old", present=True, threshold=1, generation=generation) is False
        assert tier.contains("k") is False

    def test_clear_during_read_blocks_promotion(self, tier):
        _, _, generation = tier.begin_read("k")
        tier.clear()

        assert tier.record_backend_read("k", "old", present=True, threshold=1, generation=generation) is False

    def test_stale_absent_read_keeps_newer_value(self, tier):
        tier.record_backend_read("k", "v1", present=True, threshold=1)
        _, _, generation = tier.begin_read("k")
        tier.record_write("k", "v2", 0)

        tier.record_backend_read("k", None, present=False, threshold=1, generation=generation)

        assert tier.lookup("k") == (True, "v2")

    def test_unrelated_write_does_not_block_promotion(self, tier):
        _, _, generation = tier.begin_read("k")
        tier.record_write("other", "x", 0)

        assert tier.record_backend_read("k", "v", present=True, threshold=1, generation=generation) is True

    def test_begin_read_reports_hit(self, tier):
        tier.record_backend_read("k", "v", present=True, threshold=1)
        hit, value, _ = tier.begin_read("k")
        assert (hit, value) == (True, "v")


@pytest.mark.unit
class TestRemoval:
    """Test discard and clear."""

    def test_discard_drops_everything(self, tier):
        tier.record_write("k", "v", 10)
        tier.record_backend_read("k", "v", present=True, threshold=1)
        tier.discard("k")
        assert tier.get_entry("k") is None

    def test_clear(self, tier):
        tier.record_backend_read("a", 1, present=True, threshold=1)
        tier.record_backend_read("b", 2, present=True, threshold=5)
        tier.clear()
        assert tier.get_keys() == []
        assert tier.get_size() == 0


@pytest.mark.unit
class TestTierMisc:
    """Test introspection, copies and the shared instance."""

    def test_get_entry_returns_copy(self, tier):
        tier.record_backend_read("k", "v", present=True, threshold=1)
        entry = tier.get_entry("k")
        entry.value = "mutated"
        assert tier.lookup("k") == (True, "v")

    def test_entry_freshness(self):
        assert TierEntry(value=1, has_value=True).is_fresh(0) is True
        assert TierEntry(value=1, has_value=True, expires_at=5).is_fresh(6) is False
        assert TierEntry().is_fresh(0) is False

    def test_get_process_tier_is_shared(self):
        assert get_process_tier() is get_process_tier()

    def test_concurrent_reads_count_every_hit(self):
        tier = ProcessLocalTier()

        def worker():
            for _ in range(500):
                tier.record_backend_read("k", "v", present=True, threshold=0)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert tier.get_entry("k").hit_count == 4000
