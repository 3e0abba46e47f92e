"""Unit tests for ClientResolver end to end over an in-memory store.

Covers exact uniqueness, phone bounding, fuzzy fallback, the acceptance
floor, early exit, ambiguity passthrough and idempotence.

Run with: pytest backend/tests/unit/resolution/test_engine.py -v
"""

import logging
from uuid import uuid4

import pytest

from calldesk.models import ClientRecord, SearchRequest
from calldesk.resolution import ClientResolver, MatchPass, StoreUnavailable


def _client(campaign_id, name=None, firstname=None, phone="+33100000000"):
    return ClientRecord(
        id=uuid4(),
        name=name,
        firstname=firstname,
        phone=phone,
        campaign_ids=frozenset({campaign_id}),
    )


class TestExactPass:
    """Tests for resolution through the exact pass."""

    @pytest.mark.asyncio
    async def test_any_case_resolves_exactly(self, make_store, campaign_id, zraika, other):
        store = make_store(zraika, other)
        request = SearchRequest(campaign_id=campaign_id, name="ZrAiKa", first_name="rOmAnE")

        result = await ClientResolver(store).resolve(request)

        assert result.found is True
        assert result.record == zraika
        assert result.match_pass == MatchPass.EXACT
        assert store.stream_queries == []

    @pytest.mark.asyncio
    async def test_phone_fragments_with_exact_names(self, make_store, campaign_id, zraika, other):
        store = make_store(zraika, other)
        request = SearchRequest(
            campaign_id=campaign_id,
            name="ZRAIKA",
            first_name="Romane",
            phone_fragment_start="+3313",
            phone_fragment_end="90",
        )

        result = await ClientResolver(store).resolve(request)

        assert result.record == zraika
        assert result.match_pass == MatchPass.EXACT

    @pytest.mark.asyncio
    async def test_other_campaign_is_never_returned(
        self, make_store, campaign_id, other_campaign_id, zraika
    ):
        outsider = _client(other_campaign_id, "ZRAIKA", "Romane")
        store = make_store(outsider, zraika)
        request = SearchRequest(campaign_id=other_campaign_id, name="ZRAIKA", first_name="Romane")

        result = await ClientResolver(store).resolve(request)

        assert result.record == outsider
        for query in store.exact_queries + store.stream_queries:
            assert query.campaign_id == other_campaign_id


class TestFuzzyPass:
    """Tests for resolution through the fuzzy pass."""

    @pytest.mark.asyncio
    async def test_misspelled_name_falls_back_to_fuzzy(
        self, make_store, campaign_id, zraika, other
    ):
        store = make_store(other, zraika)
        request = SearchRequest(campaign_id=campaign_id, name="ZAIKA", first_name="Romane")

        result = await ClientResolver(store).resolve(request)

        assert result.record == zraika
        assert result.match_pass == MatchPass.FUZZY
        assert result.score == pytest.approx(1 + 10 / 11)

    @pytest.mark.asyncio
    async def test_fuzzy_with_phone_fragments(self, make_store, campaign_id, zraika, other):
        store = make_store(zraika, other)
        request = SearchRequest(
            campaign_id=campaign_id,
            name="ZAIKA",
            first_name="Romane",
            phone_fragment_start="+3313",
            phone_fragment_end="90",
        )

        result = await ClientResolver(store).resolve(request)

        assert result.record == zraika
        assert result.match_pass == MatchPass.FUZZY
        assert result.candidates_examined == 1

    @pytest.mark.asyncio
    async def test_below_acceptance_floor_is_not_found(
        self, make_store, campaign_id, zraika, other
    ):
        store = make_store(zraika, other)
        request = SearchRequest(
            campaign_id=campaign_id,
            name="searchCompleteTest",
            first_name="searchCompleteTest",
        )

        result = await ClientResolver(store).resolve(request)

        assert result.found is False
        assert result.match_pass == MatchPass.NONE
        assert result.score is not None
        assert 0.0 < result.score < 0.5

    @pytest.mark.asyncio
    async def test_acceptance_floor_is_configurable(self, make_store, campaign_id, zraika):
        store = make_store(zraika)
        request = SearchRequest(campaign_id=campaign_id, name="ZAIKA")

        strict = await ClientResolver(store, accept_threshold=0.95).resolve(request)
        default = await ClientResolver(store).resolve(request)

        assert strict.found is False
        assert default.record == zraika

    @pytest.mark.asyncio
    async def test_empty_campaign_is_not_found(self, make_store, campaign_id):
        request = SearchRequest(campaign_id=campaign_id, name="ZRAIKA", first_name="Romane")

        result = await ClientResolver(make_store()).resolve(request)

        assert result.found is False
        assert result.score is None
        assert result.candidates_examined == 0

    @pytest.mark.asyncio
    async def test_blank_request_is_not_found(self, make_store, campaign_id, zraika):
        store = make_store(zraika)
        request = SearchRequest(campaign_id=campaign_id, name="", first_name="  ")

        result = await ClientResolver(store).resolve(request)

        assert result.found is False
        assert result.match_pass == MatchPass.NONE
        assert store.exact_queries == []
        assert store.stream_queries == []

    @pytest.mark.asyncio
    async def test_early_exit_keeps_first_perfect_match(self, make_store, campaign_id, zraika):
        decoys = [
            _client(campaign_id, "ZRAIKA", "Romane", "+3313456789" + str(i))
            for i in range(3)
        ]
        near = _client(campaign_id, "ZRAIKAA", "Romane")
        store = make_store(near, zraika, *decoys)
        request = SearchRequest(
            campaign_id=campaign_id, name="ZRAIKA", first_name="Romanne"
        )

        result = await ClientResolver(store).resolve(request)

        assert result.match_pass == MatchPass.FUZZY
        assert result.record == near
        assert result.candidates_examined == 1


class TestAmbiguity:
    """Duplicate names never resolve through the exact pass."""

    @pytest.mark.asyncio
    async def test_duplicates_fall_through_to_fuzzy(self, make_store, campaign_id, zraika):
        twin = _client(campaign_id, "ZRAIKA", "Romane", "+33134567899")
        store = make_store(zraika, twin)
        request = SearchRequest(campaign_id=campaign_id, name="ZRAIKA", first_name="Romane")

        result = await ClientResolver(store).resolve(request)

        assert result.match_pass == MatchPass.FUZZY
        assert result.record == zraika
        assert len(store.stream_queries) == 1


class TestFailures:
    """Store failures are errors, not empty results."""

    @pytest.mark.asyncio
    async def test_exact_query_failure_propagates(self, campaign_id):
        class BrokenStore:
            async def find_exact(self, client_filter, limit=2):
                raise StoreUnavailable("connection refused")

            def stream(self, client_filter):
                raise AssertionError("fuzzy pass must not run")

        request = SearchRequest(campaign_id=campaign_id, name="ZRAIKA")

        with pytest.raises(StoreUnavailable):
            await ClientResolver(BrokenStore()).resolve(request)

    @pytest.mark.asyncio
    async def test_cursor_failure_propagates(self, make_store, campaign_id, zraika, other):
        store = make_store(other, zraika, fail_after=1)
        request = SearchRequest(campaign_id=campaign_id, name="ZAIKA", first_name="Romane")

        with pytest.raises(StoreUnavailable):
            await ClientResolver(store).resolve(request)

        assert store.open_cursors == 0


class TestIdempotence:
    """Same request, same store, same result."""

    @pytest.mark.asyncio
    async def test_repeated_search_is_stable(self, make_store, campaign_id, zraika, other):
        store = make_store(other, zraika)
        request = SearchRequest(campaign_id=campaign_id, name="ZAIKA", first_name="rOmAnE")
        resolver = ClientResolver(store)

        results = [await resolver.resolve(request) for _ in range(3)]

        assert results[0] == results[1] == results[2]


class TestReporting:
    """The pass used is reported through logging."""

    @pytest.mark.asyncio
    async def test_resolution_event_logged(self, make_store, campaign_id, zraika, caplog):
        store = make_store(zraika)
        request = SearchRequest(campaign_id=campaign_id, name="ZAIKA")

        with caplog.at_level(logging.INFO, logger="calldesk.resolution"):
            await ClientResolver(store).resolve(request)

        events = [r for r in caplog.records if getattr(r, "event", None) == "client_resolution"]
        assert len(events) == 1
        assert events[0].match_pass == "fuzzy"
        assert events[0].client_id == str(zraika.id)

    @pytest.mark.asyncio
    async def test_not_found_reported_as_none(self, make_store, campaign_id, caplog):
        request = SearchRequest(campaign_id=campaign_id, name="nobody")

        with caplog.at_level(logging.INFO, logger="calldesk.resolution"):
            await ClientResolver(make_store()).resolve(request)

        events = [r for r in caplog.records if getattr(r, "event", None) == "client_resolution"]
        assert events[0].match_pass == "none"
