"""Tests for the query filter pipeline."""
from threatboard.services.query_filter import (
    CARD_GRID_PAGE_SIZE,
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    FilterSpec,
    PageMeta,
    apply_query,
    build_predicates,
    equals_predicate,
    paginate,
    parse_limit,
    parse_offset,
    search_predicate,
    threshold_predicate,
)

RECORDS = [
    {"id": 1, "name": "APT28", "origin": "Russia", "aliases": ["Fancy Bear"], "score": 90},
    {"id": 2, "name": "Lazarus", "origin": "North Korea", "aliases": ["Hidden Cobra"], "score": 70},
    {"id": 3, "name": "Sandworm", "origin": "RUSSIA", "aliases": [], "score": "55"},
    {"id": 4, "name": "Unknown group", "origin": None, "aliases": None},
]

FILTERS = FilterSpec(
    search_fields=("name", "origin"),
    search_list_fields=("aliases",),
    categorical={"origin": "origin"},
    thresholds={"min_score": "score"},
)


class TestParseLimitOffset:
    def test_defaults(self):
        assert parse_limit(None) == DEFAULT_PAGE_SIZE
        assert parse_offset(None) == 0

    def test_entity_default(self):
        assert parse_limit(None, CARD_GRID_PAGE_SIZE) == 9

    def test_string_values(self):
        assert parse_limit("10") == 10
        assert parse_offset(" 20 ") == 20

    def test_negative_and_invalid(self):
        assert parse_limit("-5") == DEFAULT_PAGE_SIZE
        assert parse_limit("abc") == DEFAULT_PAGE_SIZE
        assert parse_offset("-1") == 0
        assert parse_offset("x") == 0

    def test_zero_limit_allowed(self):
        assert parse_limit("0") == 0

    def test_limit_capped(self):
        assert parse_limit("100000") == MAX_PAGE_SIZE


class TestPredicates:
    def test_search_is_case_insensitive_substring(self):
        match = search_predicate("apt", ("name",))
        assert match(RECORDS[0])
        assert not match(RECORDS[1])

    def test_search_matches_list_elements(self):
        match = search_predicate("cobra", ("name",), ("aliases",))
        assert match(RECORDS[1])
        assert not match(RECORDS[0])

    def test_search_tolerates_missing_fields(self):
        match = search_predicate("korea", ("origin",), ("aliases",))
        assert not match(RECORDS[3])

    def test_equals_is_case_insensitive(self):
        match = equals_predicate("origin", "russia")
        assert match(RECORDS[0])
        assert match(RECORDS[2])
        assert not match(RECORDS[1])

    def test_equals_never_matches_missing(self):
        assert not equals_predicate("origin", "none")(RECORDS[3])

    def test_threshold_is_inclusive(self):
        match = threshold_predicate("score", 70)
        assert match(RECORDS[0])
        assert match(RECORDS[1])
        assert not match(RECORDS[2])
        assert not match(RECORDS[3])

    def test_threshold_reads_numeric_strings(self):
        assert threshold_predicate("score", 55)(RECORDS[2])

    def test_blank_parameters_are_ignored(self):
        assert build_predicates(FILTERS, {"search": "  ", "origin": ""}) == []

    def test_unknown_parameters_are_ignored(self):
        assert build_predicates(FILTERS, {"colour": "red"}) == []

    def test_non_numeric_threshold_is_ignored(self):
        assert build_predicates(FILTERS, {"min_score": "high"}) == []


class TestPaginate:
    def test_meta(self):
        page, meta = paginate(RECORDS, limit=2, offset=1)
        assert [r["id"] for r in page] == [2, 3]
        assert meta.to_dict() == {"total": 4, "limit": 2, "offset": 1, "hasMore": True}

    def test_last_page(self):
        page, meta = paginate(RECORDS, limit=2, offset=2)
        assert len(page) == 2
        assert meta.has_more is False

    def test_offset_past_end(self):
        page, meta = paginate(RECORDS, limit=10, offset=50)
        assert page == []
        assert meta.total == 4
        assert meta.has_more is False

    def test_returned_count_and_has_more(self):
        records = [{"id": i} for i in range(7)]
        for limit in (0, 1, 3, 7, 10):
            for offset in (0, 2, 6, 7, 12):
                page, meta = paginate(records, limit, offset)
                assert len(page) == min(limit, max(0, 7 - offset))
                assert meta.has_more == (offset + limit < 7)

    def test_page_meta_has_more(self):
        assert PageMeta(total=10, limit=5, offset=0).has_more
        assert not PageMeta(total=10, limit=5, offset=5).has_more


class TestApplyQuery:
    def test_no_parameters_returns_everything(self):
        page, meta = apply_query(RECORDS, FILTERS, {})
        assert len(page) == 4
        assert meta.limit == DEFAULT_PAGE_SIZE
        assert meta.offset == 0

    def test_categorical_filter(self):
        page, meta = apply_query(RECORDS, FILTERS, {"origin": "Russia"})
        assert [r["id"] for r in page] == [1, 3]
        assert meta.total == 2

    def test_filters_combine(self):
        page, _ = apply_query(RECORDS, FILTERS, {"origin": "russia", "search": "sand"})
        assert [r["id"] for r in page] == [3]

    def test_total_counts_before_pagination(self):
        page, meta = apply_query(RECORDS, FILTERS, {"origin": "russia", "limit": "1"})
        assert len(page) == 1
        assert meta.total == 2
        assert meta.has_more is True

    def test_input_is_not_mutated(self):
        snapshot = [dict(r) for r in RECORDS]
        apply_query(RECORDS, FILTERS, {"search": "a", "limit": 1, "offset": 1})
        assert RECORDS == snapshot

    def test_recognized_parameters(self):
        assert FILTERS.parameters == {"search", "limit", "offset", "origin", "min_score"}
