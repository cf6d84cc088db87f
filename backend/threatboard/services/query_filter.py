"""
Query filter pipeline.

Translates list-endpoint query parameters into a predicate chain over an
in-memory collection, then slices the result into a page and builds the
``meta`` envelope returned alongside it.
"""
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional, Sequence

DEFAULT_PAGE_SIZE = 50
CARD_GRID_PAGE_SIZE = 9
MAX_PAGE_SIZE = 1000

Predicate = Callable[[dict], bool]


@dataclass(frozen=True)
class FilterSpec:
    """
    Per-entity filter configuration.

    Attributes:
        search_fields: Scalar fields matched by ``search`` as substrings
        search_list_fields: Tag-like list fields whose elements ``search`` also matches
        categorical: Query parameter name -> record field for exact matches
        thresholds: Query parameter name -> numeric record field kept when >= value
        default_limit: Page size used when ``limit`` is absent or invalid
    """
    search_fields: Sequence[str] = ()
    search_list_fields: Sequence[str] = ()
    categorical: Mapping[str, str] = field(default_factory=dict)
    thresholds: Mapping[str, str] = field(default_factory=dict)
    default_limit: int = DEFAULT_PAGE_SIZE

    @property
    def parameters(self) -> set[str]:
        """All query parameter names this filter configuration recognizes."""
        return {"search", "limit", "offset", *self.categorical, *self.thresholds}


@dataclass(frozen=True)
class PageMeta:
    """Pagination envelope for list responses."""
    total: int
    limit: int
    offset: int

    @property
    def has_more(self) -> bool:
        return self.offset + self.limit < self.total

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "limit": self.limit,
            "offset": self.offset,
            "hasMore": self.has_more,
        }


def _to_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def _to_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).strip())
    except (TypeError, ValueError):
        return None


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).lower()


def parse_offset(raw: Any) -> int:
    """Offsets that are missing, negative or non-numeric become 0."""
    offset = _to_int(raw)
    if offset is None or offset < 0:
        return 0
    return offset


def parse_limit(raw: Any, default: int = DEFAULT_PAGE_SIZE) -> int:
    """Limits that are missing, negative or non-numeric fall back to the default."""
    limit = _to_int(raw)
    if limit is None or limit < 0:
        return default
    return min(limit, MAX_PAGE_SIZE)


def search_predicate(
    query: str,
    fields: Sequence[str],
    list_fields: Sequence[str] = (),
) -> Predicate:
    """Case-insensitive substring match over scalar fields and list elements."""
    needle = query.lower()

    def predicate(record: dict) -> bool:
        for name in fields:
            if needle in _text(record.get(name)):
                return True
        for name in list_fields:
            values = record.get(name) or []
            if isinstance(values, str):
                values = [values]
            if any(needle in _text(v) for v in values):
                return True
        return False

    return predicate


def equals_predicate(field_name: str, expected: str) -> Predicate:
    """Exact, case-insensitive equality on a single field."""
    wanted = expected.lower()

    def predicate(record: dict) -> bool:
        value = record.get(field_name)
        return value is not None and _text(value) == wanted

    return predicate


def threshold_predicate(field_name: str, minimum: float) -> Predicate:
    """Keep records whose numeric field is at least ``minimum``."""
    def predicate(record: dict) -> bool:
        value = _to_number(record.get(field_name))
        return value is not None and value >= minimum

    return predicate


def build_predicates(spec: FilterSpec, params: Mapping[str, Any]) -> list[Predicate]:
    """Build the predicate chain for the parameters present in ``params``."""
    predicates: list[Predicate] = []

    search = params.get("search")
    if search is not None and str(search).strip():
        predicates.append(
            search_predicate(str(search).strip(), spec.search_fields, spec.search_list_fields)
        )

    for param, field_name in spec.categorical.items():
        value = params.get(param)
        if value is not None and str(value).strip():
            predicates.append(equals_predicate(field_name, str(value).strip()))

    for param, field_name in spec.thresholds.items():
        minimum = _to_number(params.get(param))
        if minimum is not None:
            predicates.append(threshold_predicate(field_name, minimum))

    return predicates


def filter_records(records: Sequence[dict], predicates: Sequence[Predicate]) -> list[dict]:
    return [r for r in records if all(p(r) for p in predicates)]


def paginate(records: Sequence[dict], limit: int, offset: int) -> tuple[list[dict], PageMeta]:
    """Slice ``records`` and describe the slice."""
    meta = PageMeta(total=len(records), limit=limit, offset=offset)
    return list(records[offset:offset + limit]), meta


def apply_query(
    records: Sequence[dict],
    spec: FilterSpec,
    params: Mapping[str, Any],
) -> tuple[list[dict], PageMeta]:
    """
    Run the full filter pipeline over a collection snapshot.

    Args:
        records: The full collection, never mutated
        spec: Entity filter configuration
        params: Raw query parameters (strings from the URL, or Python values)

    Returns:
        The page of matching records and its pagination metadata
    """
    filtered = filter_records(records, build_predicates(spec, params))
    limit = parse_limit(params.get("limit"), spec.default_limit)
    offset = parse_offset(params.get("offset"))
    return paginate(filtered, limit, offset)
