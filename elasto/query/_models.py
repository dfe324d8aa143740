from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import ConfigDict, Field

from elasto.core import DataModel


class QueryMode(str, Enum):
    """Query mode.

    Attributes:
        SEARCH: Document search.
        COUNT: Document count.
        REMOVE: Delete by query.
        AUTOCOMPLETE: Prefix style match with highlight.
    """

    SEARCH = "search"
    COUNT = "count"
    REMOVE = "remove"
    AUTOCOMPLETE = "autocomplete"


class ResourceHandle(DataModel):
    """Target collection of a query."""

    model_config = ConfigDict(frozen=True)

    index: str
    """Index name."""

    type: str | None = None
    """Document type, for engines with typed documents."""

    @property
    def path(self) -> str:
        if self.type:
            return f"{self.index}/{self.type}"
        return self.index


class Location(DataModel):
    """Geo origin."""

    lat: float
    lon: float
    radius: float | None = None


class TermClause(DataModel):
    """Equality clause.

    Attributes:
        field: Field name.
        value: Exact value.
    """

    kind: Literal["term"] = "term"
    field: str
    value: Any


class TermsClause(DataModel):
    """Membership clause.

    Attributes:
        field: Field name.
        values: Accepted values.
    """

    kind: Literal["terms"] = "terms"
    field: str
    values: list[Any]


class RangeClause(DataModel):
    """Inclusive range clause.

    Attributes:
        field: Field name.
        gte: Lower bound, open if None.
        lte: Upper bound, open if None.
    """

    kind: Literal["range"] = "range"
    field: str
    gte: Any = None
    lte: Any = None


class GeoDistanceClause(DataModel):
    """Geo distance clause.

    Attributes:
        lat: Origin latitude.
        lon: Origin longitude.
        radius: Maximum distance.
    """

    kind: Literal["geo_distance"] = "geo_distance"
    lat: float
    lon: float
    radius: float


class GeoDistanceRangeClause(DataModel):
    """Geo distance ring clause.

    Attributes:
        lat: Origin latitude.
        lon: Origin longitude.
        from_distance: Minimum distance, exclusive.
        to_distance: Maximum distance, inclusive.
    """

    kind: Literal["geo_distance_range"] = "geo_distance_range"
    lat: float
    lon: float
    from_distance: float | None = None
    to_distance: float


Clause = Annotated[
    Union[
        TermClause,
        TermsClause,
        RangeClause,
        GeoDistanceClause,
        GeoDistanceRangeClause,
    ],
    Field(discriminator="kind"),
]


class FieldOrder(DataModel):
    """Sort on a document field.

    Attributes:
        field: Field name.
        direction: "asc", "desc" or native sort options.
    """

    kind: Literal["field"] = "field"
    field: str
    direction: str | dict[str, Any]


class GeoDistanceOrder(DataModel):
    """Sort on distance from a point.

    Attributes:
        lat: Origin latitude.
        lon: Origin longitude.
        unit: Distance unit reported in the hit sort values.
        direction: "asc" or "desc".
    """

    kind: Literal["geo_distance"] = "geo_distance"
    lat: float
    lon: float
    unit: str = "mi"
    direction: str = "asc"


class BareKey(DataModel):
    """Raw sort token such as _score or _doc."""

    kind: Literal["bare"] = "bare"
    name: str


SortSpec = Annotated[
    Union[FieldOrder, GeoDistanceOrder, BareKey],
    Field(discriminator="kind"),
]


class AggregationSpec(DataModel):
    """Aggregation request.

    Attributes:
        kind: Aggregation type, e.g. terms, avg, histogram.
        field: Field to aggregate.
        params: Extra native parameters.
    """

    kind: str = "terms"
    field: str
    params: dict[str, Any] = dict()


class ScriptSpec(DataModel):
    """Script field.

    Attributes:
        source: Script source.
        lang: Script language.
        params: Script parameters.
    """

    source: str
    lang: str = "painless"
    params: dict[str, Any] = dict()


class QueryState(DataModel):
    """Accumulated intent of one query builder."""

    filters: list[Clause] = []
    """Conjunctive clauses."""

    excludes: list[Clause] = []
    """Negated clauses."""

    alternatives: list[Clause] = []
    """Disjunctive clauses."""

    projected_fields: list[str] = []
    """Fields to return. Empty returns the whole document."""

    sort_keys: list[SortSpec] = []
    """Sort keys in precedence order."""

    window_size: int | None = None
    window_offset: int | None = None

    free_text_term: str | None = None
    """Query string text."""

    location: Location | None = None
    """Origin set by near()."""

    aggregations: dict[str, AggregationSpec] = dict()
    script_fields: dict[str, ScriptSpec] = dict()

    highlight_fields: list[str] = []
    """Fields to highlight in search results."""

    def has_clauses(self) -> bool:
        return bool(self.filters or self.excludes or self.alternatives)
