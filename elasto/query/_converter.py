from __future__ import annotations

from typing import Any

from elasto.core import ElastoConfig
from elasto.core.exceptions import EngineError, NotFoundError, ValidationError

from ._models import (
    BareKey,
    Clause,
    FieldOrder,
    GeoDistanceClause,
    QueryMode,
    QueryState,
    RangeClause,
    SortSpec,
    TermClause,
    TermsClause,
)

# Conversion factors from one unit to meters, used by arcDistance scripts.
METERS_PER_UNIT: dict[str, float] = {
    "mi": 1609.344,
    "km": 1000.0,
    "m": 1.0,
    "yd": 0.9144,
    "ft": 0.3048,
    "nmi": 1852.0,
}


class OperationConverter:
    config: ElastoConfig

    def __init__(self, config: ElastoConfig) -> None:
        self.config = config

    def convert(self, state: QueryState, mode: QueryMode) -> dict:
        if mode == QueryMode.SEARCH:
            return self.convert_search(state)
        if mode == QueryMode.COUNT:
            return self.convert_count(state)
        if mode == QueryMode.REMOVE:
            return self.convert_remove(state)
        raise ValidationError(f"Mode {mode.value} is not compiled from state")

    def convert_search(self, state: QueryState) -> dict:
        body: dict = {"query": self.convert_query(state)}
        if state.projected_fields:
            body["fields"] = list(state.projected_fields)
            body["_source"] = False
        if state.sort_keys:
            body["sort"] = [self.convert_sort(s) for s in state.sort_keys]
        if state.window_size is not None:
            body["size"] = state.window_size
        if state.window_offset is not None:
            body["from"] = state.window_offset
        if state.aggregations:
            body["aggs"] = {
                name: {agg.kind: {"field": agg.field, **agg.params}}
                for name, agg in state.aggregations.items()
            }
        if state.script_fields:
            body["script_fields"] = {
                name: {
                    "script": {
                        "source": script.source,
                        "lang": script.lang,
                        "params": dict(script.params),
                    }
                }
                for name, script in state.script_fields.items()
            }
            if not state.projected_fields:
                body["_source"] = True
        if state.highlight_fields:
            body["highlight"] = self.convert_highlight(state.highlight_fields)
        return body

    def convert_count(self, state: QueryState) -> dict:
        return {"query": self.convert_query(state)}

    def convert_remove(self, state: QueryState) -> dict:
        if state.excludes or state.alternatives:
            raise ValidationError(
                "Delete by query supports equality filters only, "
                "remove exclude and or_where clauses"
            )
        terms: dict[str, Any] = {}
        for clause in state.filters:
            if not isinstance(clause, TermClause):
                raise ValidationError(
                    "Delete by query supports equality filters only, "
                    f"got a {clause.kind} clause"
                )
            if clause.field in terms and terms[clause.field] != clause.value:
                raise ValidationError(
                    f"Conflicting values for {clause.field}: "
                    f"{terms[clause.field]!r} and {clause.value!r}"
                )
            terms[clause.field] = clause.value
        if not terms:
            raise ValidationError(
                "Refusing to delete by query without a term filter"
            )
        if len(terms) == 1:
            return {"query": {"term": terms}}
        return {
            "query": {
                "bool": {
                    "must": [
                        {"term": {field: value}}
                        for field, value in terms.items()
                    ]
                }
            }
        }

    def convert_autocomplete(self, term: str) -> dict:
        field = self.config.autocomplete_field
        return {
            "query": {"match": {field: term}},
            "highlight": self.convert_highlight([field]),
        }

    def convert_query(self, state: QueryState) -> dict:
        if state.free_text_term is not None:
            base: dict = {"query_string": {"query": state.free_text_term}}
        else:
            base = {"match_all": {}}
        if not state.has_clauses():
            return base
        if (
            len(state.filters) == 1
            and not state.excludes
            and not state.alternatives
        ):
            constraint = self.convert_clause(state.filters[0])
        else:
            constraint = {"bool": self.convert_bool(state)}
        return {"bool": {"must": base, "filter": constraint}}

    def convert_bool(self, state: QueryState) -> dict:
        args: dict = {}
        if state.filters:
            args["must"] = [self.convert_clause(c) for c in state.filters]
        if state.excludes:
            args["must_not"] = [self.convert_clause(c) for c in state.excludes]
        if state.alternatives:
            args["should"] = [
                self.convert_clause(c) for c in state.alternatives
            ]
            args["minimum_should_match"] = 1
        return args

    def convert_clause(self, clause: Clause) -> dict:
        if isinstance(clause, TermClause):
            return {"term": {clause.field: clause.value}}
        if isinstance(clause, TermsClause):
            return {"terms": {clause.field: list(clause.values)}}
        if isinstance(clause, RangeClause):
            bounds: dict = {}
            if clause.gte is not None:
                bounds["gte"] = clause.gte
            if clause.lte is not None:
                bounds["lte"] = clause.lte
            return {"range": {clause.field: bounds}}
        if isinstance(clause, GeoDistanceClause):
            return self.convert_geo_distance(
                clause.lat, clause.lon, clause.radius
            )
        outer = self.convert_geo_distance(
            clause.lat, clause.lon, clause.to_distance
        )
        if not clause.from_distance:
            return outer
        inner = self.convert_geo_distance(
            clause.lat, clause.lon, clause.from_distance
        )
        return {"bool": {"filter": [outer], "must_not": [inner]}}

    def convert_geo_distance(
        self, lat: float, lon: float, distance: float
    ) -> dict:
        return {
            "geo_distance": {
                "distance": self.convert_distance(distance),
                self.config.geo_field: {"lat": lat, "lon": lon},
            }
        }

    def convert_distance(self, distance: float) -> str:
        if float(distance).is_integer():
            distance = int(distance)
        return f"{distance}{self.config.distance_unit}"

    def convert_sort(self, sort: SortSpec) -> Any:
        if isinstance(sort, BareKey):
            return sort.name
        if isinstance(sort, FieldOrder):
            if isinstance(sort.direction, dict):
                return {sort.field: dict(sort.direction)}
            return {sort.field: {"order": sort.direction}}
        return {
            "_geo_distance": {
                self.config.geo_field: {"lat": sort.lat, "lon": sort.lon},
                "order": sort.direction,
                "unit": sort.unit,
            }
        }

    def convert_highlight(self, fields: list[str]) -> dict:
        return {
            "pre_tags": [self.config.highlight_pre_tag],
            "post_tags": [self.config.highlight_post_tag],
            "fields": {field: {} for field in fields},
        }

    def convert_distance_script(self, lat: float, lon: float) -> dict:
        unit = self.config.distance_unit
        if unit not in METERS_PER_UNIT:
            raise ValidationError(f"Distance unit {unit!r} not supported")
        return {
            "source": (
                f"doc['{self.config.geo_field}'].arcDistance("
                "params.lat, params.lon) / params.factor"
            ),
            "params": {
                "lat": lat,
                "lon": lon,
                "factor": METERS_PER_UNIT[unit],
            },
        }


class ResultConverter:
    def convert_search(
        self,
        response: Any,
        state: QueryState | None = None,
    ) -> list[dict[str, Any]]:
        projected = bool(state and state.projected_fields)
        script_fields = list(state.script_fields) if state else []
        hits = self._get_hits(response)
        documents: list[dict[str, Any]] = []
        for hit in hits:
            if projected:
                document = dict(hit.get("fields") or {})
            else:
                document = dict(hit.get("_source") or {})
                fields = hit.get("fields") or {}
                for name in script_fields:
                    if name in fields:
                        document[name] = fields[name]
            if "sort" in hit:
                document["sort"] = hit["sort"]
            if "highlight" in hit:
                document["highlight"] = hit["highlight"]
            documents.append(document)
        return documents

    def convert_aggregations(self, response: Any) -> dict[str, Any]:
        if "aggregations" in response:
            return response["aggregations"]
        if "facets" in response:
            return response["facets"]
        return {}

    def convert_count(self, response: Any) -> int:
        if "count" not in response:
            raise EngineError(
                "Count response has no count field", body=response
            )
        return response["count"]

    def convert_remove(self, response: Any) -> int:
        return response.get("deleted", 0)

    def convert_by_id(self, response: Any) -> dict[str, Any]:
        if response.get("found") is False:
            raise NotFoundError(
                f"Document {response.get('_id')} not found", body=response
            )
        return response.get("_source") or {}

    def _get_hits(self, response: Any) -> list[dict[str, Any]]:
        hits_block = response.get("hits")
        if not isinstance(hits_block, dict) or not isinstance(
            hits_block.get("hits"), list
        ):
            raise EngineError(
                "Search response has no hits list", body=response
            )
        return hits_block["hits"]
