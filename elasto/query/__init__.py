from ._converter import OperationConverter, ResultConverter
from ._models import (
    AggregationSpec,
    BareKey,
    Clause,
    FieldOrder,
    GeoDistanceClause,
    GeoDistanceOrder,
    GeoDistanceRangeClause,
    Location,
    QueryMode,
    QueryState,
    RangeClause,
    ResourceHandle,
    ScriptSpec,
    SortSpec,
    TermClause,
    TermsClause,
)
from .component import Query

__all__ = [
    "AggregationSpec",
    "BareKey",
    "Clause",
    "FieldOrder",
    "GeoDistanceClause",
    "GeoDistanceOrder",
    "GeoDistanceRangeClause",
    "Location",
    "OperationConverter",
    "Query",
    "QueryMode",
    "QueryState",
    "RangeClause",
    "ResourceHandle",
    "ResultConverter",
    "ScriptSpec",
    "SortSpec",
    "TermClause",
    "TermsClause",
]
