"""Unit tests for field catalog extraction, loading and caching."""

import asyncio
import json

import pytest

from formflow.core.cache import TTLCache
from formflow.interfaces.form_store import FormRecord
from formflow.strategies.field_resolution.catalog import CatalogLoader, extract_fields_from_form, to_camel_case
from formflow.strategies.stores.memory import InMemoryFormRepository


# =============================================================================
# camelCase Conversion Tests
# =============================================================================


class TestToCamelCase:
    """Test suite for label to camelCase conversion."""

    @pytest.mark.parametrize(
        "label, expected",
        [
            ("Your Email", "yourEmail"),
            ("First name:", "firstName"),
            ("phone-number", "phoneNumber"),
            ("  Budget   Range ", "budgetRange"),
            ("ZIP", "zip"),
            ("", ""),
        ],
    )
    def test_conversion(self, label, expected):
        assert to_camel_case(label) == expected


# =============================================================================
# Extraction Tests
# =============================================================================


class TestExtractFieldsFromForm:
    """Test suite for extract_fields_from_form."""

    def test_sections_then_top_level_fields(self):
        """Section fields come first, in order, then top-level fields."""
        form = FormRecord(
            id="form1",
            sections=[{"fields": [{"id": "a"}, {"id": "b"}]}, {"fields": [{"id": "c"}]}],
            fields=[{"id": "d"}],
        )

        fields = extract_fields_from_form(form)

        assert [f.id for f in fields] == ["a", "b", "c", "d"]

    def test_json_string_sources(self):
        form = FormRecord(
            id="form1",
            sections=json.dumps([{"fields": [{"id": "f1", "stableId": "item_email", "type": "email"}]}]),
            fields=json.dumps([{"id": "f2", "label": "Phone"}]),
        )

        fields = extract_fields_from_form(form)

        assert [f.id for f in fields] == ["f1", "f2"]
        assert fields[0].stable_id == "item_email"
        assert fields[1].label == "Phone"

    def test_malformed_sections_still_reads_fields(self, events):
        """A parse error in one source does not prevent reading the other."""
        form = FormRecord(id="form1", sections="[{not json", fields='[{"id": "f9"}]')

        fields = extract_fields_from_form(form, events)

        assert [f.id for f in fields] == ["f9"]
        assert events.of("catalog.parse_failed")[0]["source"] == "sections"

    def test_both_sources_malformed(self, events):
        form = FormRecord(id="form1", sections="{{", fields="nope")

        assert extract_fields_from_form(form, events) == []
        assert len(events.of("catalog.parse_failed")) == 2

    def test_absent_sources(self):
        assert extract_fields_from_form(FormRecord(id="form1")) == []

    def test_mapping_input_and_junk_entries(self):
        """Plain mappings are accepted; non-object entries and sections without fields are skipped."""
        form = {
            "sections": [{"title": "no fields"}, "junk", {"fields": [1, None, {"id": "ok"}]}],
            "fields": None,
        }

        fields = extract_fields_from_form(form)

        assert [f.id for f in fields] == ["ok"]

    def test_extra_attributes_kept_and_numbers_coerced(self):
        form = FormRecord(id="form1", fields=[{"id": 7, "label": "Age", "options": ["a", "b"]}])

        field = extract_fields_from_form(form)[0]

        assert field.id == "7"
        assert field.model_extra == {"options": ["a", "b"]}


# =============================================================================
# Catalog Loader Tests
# =============================================================================


class TestCatalogLoader:
    """Test suite for CatalogLoader."""

    @pytest.fixture
    def loader(self, repository, cache, events):
        return CatalogLoader(repository, cache=cache, events=events)

    def test_load_flattens_form(self, loader):
        catalog = asyncio.run(loader.load("form2_contact"))

        assert [f.id for f in catalog] == ["f1", "f2", "f3", "f4", "f5"]
        assert catalog.by_id("f5").mapping == "budget"

    def test_second_load_hits_cache(self, loader, events):
        async def run_test():
            first = await loader.load("form2_contact")
            second = await loader.load("form2_contact")
            return first, second

        first, second = asyncio.run(run_test())

        assert first is second
        assert events.names().count("catalog.loaded") == 1
        assert events.names().count("catalog.cache_hit") == 1

    def test_unknown_form_yields_empty_catalog(self, loader, events):
        catalog = asyncio.run(loader.load("missing"))

        assert len(catalog) == 0
        assert catalog.form_id == "missing"
        assert events.of("catalog.form_not_found") == [{"form_id": "missing"}]

    def test_invalidate_forces_reload(self, loader, events):
        async def run_test():
            await loader.load("form2_contact")
            loader.invalidate("form2_contact")
            await loader.load("form2_contact")

        asyncio.run(run_test())

        assert events.names().count("catalog.loaded") == 2

    def test_without_cache_always_fetches(self, repository, events):
        loader = CatalogLoader(repository, cache=None, events=events)

        async def run_test():
            await loader.load("form2_contact")
            await loader.load("form2_contact")

        asyncio.run(run_test())

        assert events.names().count("catalog.loaded") == 2

    def test_repository_errors_propagate(self, events):
        class BrokenRepository(InMemoryFormRepository):
            async def get_form(self, form_id):
                raise ConnectionError("database down")

        loader = CatalogLoader(BrokenRepository(), events=events)

        with pytest.raises(ConnectionError):
            asyncio.run(loader.load("form2_contact"))


# =============================================================================
# TTL Cache Tests
# =============================================================================


class TestTTLCache:
    """Test suite for TTLCache."""

    @pytest.fixture
    def clock(self):
        now = [1000.0]

        def tick():
            return now[0]

        tick.now = now
        return tick

    def test_get_before_expiry(self, clock):
        cache = TTLCache(ttl_seconds=10, clock=clock)
        cache.set("k", "v")
        clock.now[0] += 9.9

        assert cache.get("k") == "v"
        assert "k" in cache

    def test_expired_entry_is_evicted(self, clock):
        cache = TTLCache(ttl_seconds=10, clock=clock)
        cache.set("k", "v")
        clock.now[0] += 10

        assert cache.get("k", "default") == "default"
        assert len(cache) == 0

    def test_set_sweeps_expired_entries(self, clock):
        cache = TTLCache(ttl_seconds=10, clock=clock)
        cache.set("stale", 1)
        clock.now[0] += 5
        cache.set("fresh", 2)
        clock.now[0] += 6
        cache.set("new", 3)

        assert len(cache) == 2
        assert cache.get("fresh") == 2

    def test_zero_ttl_disables_caching(self, clock):
        cache = TTLCache(ttl_seconds=0, clock=clock)
        cache.set("k", "v")

        assert "k" not in cache

    def test_invalidate_and_clear(self):
        cache = TTLCache()
        cache.set("a", 1)
        cache.set("b", 2)

        assert cache.invalidate("a") is True
        assert cache.invalidate("a") is False
        cache.clear()
        assert len(cache) == 0

    def test_negative_ttl_rejected(self):
        with pytest.raises(ValueError):
            TTLCache(ttl_seconds=-1)
