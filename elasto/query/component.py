from __future__ import annotations

from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from elasto.core import get_logger
from elasto.core.exceptions import ValidationError

from ._converter import OperationConverter, ResultConverter
from ._helper import UNSET, Helper
from ._models import (
    AggregationSpec,
    BareKey,
    FieldOrder,
    GeoDistanceClause,
    QueryMode,
    QueryState,
    RangeClause,
    ResourceHandle,
    ScriptSpec,
)

if TYPE_CHECKING:
    from elasto.client import Elasto

logger = get_logger("query")


class Query:
    """Chainable query builder bound to one index and type.

    Configuration methods mutate the builder and return it. The first
    terminal call (search, count, remove, autocomplete, by_id,
    aggregations, exec, raw or their async twins) consumes the builder;
    any later call raises ValidationError.

    Usage:
        docs = (
            client.query("shops", "boutique")
            .where("city", "london")
            .near({"lat": 51.5, "lon": -0.15, "radius": 5})
            .sort("distance")
            .size(10)
            .search()
        )
    """

    resource: ResourceHandle
    state: QueryState

    _client: Elasto
    _op_converter: OperationConverter
    _result_converter: ResultConverter
    _consumed: bool

    def __init__(self, client: Elasto, resource: ResourceHandle):
        self._client = client
        self.resource = resource
        self.state = QueryState()
        self._op_converter = OperationConverter(config=client.config)
        self._result_converter = ResultConverter()
        self._consumed = False

    def __repr__(self) -> str:
        return f"Query({self.resource.path!r})"

    def _check_active(self) -> None:
        if self._consumed:
            raise ValidationError(
                "Query has already been executed, build a new one"
            )

    def _consume(self) -> None:
        self._check_active()
        self._consumed = True

    # Conditions

    def where(self, key: Any, value: Any = UNSET) -> Query:
        """Add equality or membership filters.

        Args:
            key:
                Field name, a mapping of field to value,
                or a list of such mappings.
            value:
                Value for a single field. A list, tuple or set
                matches any of its members.

        Returns:
            The same query.
        """
        self._check_active()
        self.state.filters.extend(Helper.get_conditions(key, value))
        return self

    def exclude(self, key: Any, value: Any = UNSET) -> Query:
        """Add negated filters. Accepts the same arguments as where."""
        self._check_active()
        self.state.excludes.extend(Helper.get_conditions(key, value))
        return self

    def or_where(self, key: Any, value: Any = UNSET) -> Query:
        """Add alternatives. At least one of them must match."""
        self._check_active()
        self.state.alternatives.extend(Helper.get_conditions(key, value))
        return self

    def range(self, field: str, bounds: Any) -> Query:
        """Add an inclusive range filter.

        Args:
            field:
                Field name. The special name "distance" adds a
                geo distance ring instead.
            bounds:
                [low, high] for a field. Either side may be None.
                For "distance", a mapping with from, to and
                optionally lat and lon, defaulting to the near()
                origin.

        Returns:
            The same query.
        """
        self._check_active()
        if field == "distance":
            self.state.filters.append(
                Helper.get_distance_range(bounds, self.state.location)
            )
            return self
        if not isinstance(bounds, (list, tuple)) or len(bounds) != 2:
            raise ValidationError(
                f"Range bounds must be [low, high], got {bounds!r}"
            )
        gte, lte = bounds
        if gte is None and lte is None:
            raise ValidationError(f"Range on {field} has no bounds")
        self.state.filters.append(RangeClause(field=field, gte=gte, lte=lte))
        return self

    def near(self, loc: Any) -> Query:
        """Filter documents within a radius of a point.

        The point is remembered so sort("distance"), distance_field()
        and range("distance", ...) can reuse it.

        Args:
            loc:
                Mapping or object with lat, lon and optional radius.
                Radius defaults to the configured default radius.

        Returns:
            The same query.

        Raises:
            ValidationError:
                Coordinates missing or out of range.
        """
        self._check_active()
        location = Helper.get_location(
            loc, default_radius=self._client.config.default_radius
        )
        self.state.location = location
        self.state.filters.append(
            GeoDistanceClause(
                lat=location.lat,
                lon=location.lon,
                radius=location.radius,
            )
        )
        return self

    def term(self, text: str) -> Query:
        """Match documents against a full text query string."""
        self._check_active()
        if not isinstance(text, str):
            raise ValidationError(f"Term must be a string, got {text!r}")
        self.state.free_text_term = text
        return self

    # Projection and pagination

    def fields(self, *keys: Any) -> Query:
        """Return only the given fields.

        Accepts either a list of names or the names as arguments.
        """
        self._check_active()
        for field in Helper.get_fields(keys):
            if field not in self.state.projected_fields:
                self.state.projected_fields.append(field)
        return self

    def size(self, n: int) -> Query:
        self._check_active()
        self.state.window_size = Helper.get_window("size", n)
        return self

    def from_(self, n: int) -> Query:
        self._check_active()
        self.state.window_offset = Helper.get_window("from", n)
        return self

    def sort(self, key: str, opts: Any = None) -> Query:
        """Add a sort key. Earlier keys take precedence.

        Args:
            key:
                Field name, a raw token such as "_score", or
                "distance" for distance from a point.
            opts:
                "asc", "desc" or native sort options for a field.
                For "distance", an optional mapping with lat, lon,
                unit and order; coordinates default to the near()
                origin.

        Returns:
            The same query.
        """
        self._check_active()
        if key == "distance":
            self.state.sort_keys.append(
                Helper.get_geo_order(
                    opts,
                    self.state.location,
                    unit=self._client.config.distance_unit,
                )
            )
        elif opts is None:
            self.state.sort_keys.append(BareKey(name=key))
        elif isinstance(opts, str):
            self.state.sort_keys.append(
                FieldOrder(field=key, direction=Helper.get_direction(opts))
            )
        elif isinstance(opts, dict):
            self.state.sort_keys.append(FieldOrder(field=key, direction=opts))
        else:
            raise ValidationError(f"Invalid sort options {opts!r}")
        return self

    # Aggregations and computed fields

    def aggregate(
        self,
        name: str,
        field: str,
        kind: str = "terms",
        **params: Any,
    ) -> Query:
        """Request a named aggregation, read back with aggregations()."""
        self._check_active()
        self.state.aggregations[name] = AggregationSpec(
            kind=kind, field=field, params=params
        )
        return self

    def script_field(
        self,
        name: str,
        source: str,
        params: dict[str, Any] | None = None,
        lang: str = "painless",
    ) -> Query:
        self._check_active()
        self.state.script_fields[name] = ScriptSpec(
            source=source, lang=lang, params=params or {}
        )
        return self

    def distance_field(self, name: str = "distance") -> Query:
        """Add a computed field with the distance to the near() origin."""
        self._check_active()
        if self.state.location is None:
            raise ValidationError("distance_field requires near() first")
        script = self._op_converter.convert_distance_script(
            self.state.location.lat, self.state.location.lon
        )
        return self.script_field(
            name, source=script["source"], params=script["params"]
        )

    def highlight(self, *fields: Any) -> Query:
        self._check_active()
        for field in Helper.get_fields(fields):
            if field not in self.state.highlight_fields:
                self.state.highlight_fields.append(field)
        return self

    select = fields
    returns = fields
    limit = size
    offset = from_
    not_ = exclude
    or_ = or_where
    facet = aggregate

    # Terminal operations

    def raw(self, mode: QueryMode | str = QueryMode.SEARCH) -> dict:
        """Return the compiled query DSL without sending it.

        Args:
            mode:
                search, count or remove.

        Returns:
            Query DSL document.
        """
        self._check_active()
        try:
            mode = QueryMode(mode)
        except ValueError as e:
            raise ValidationError(f"Unknown query mode {mode!r}") from e
        if mode == QueryMode.AUTOCOMPLETE:
            raise ValidationError(
                "Autocomplete needs a term, use autocomplete(term)"
            )
        self._consume()
        return self._op_converter.convert(self.state, mode)

    def search(self) -> list[dict[str, Any]]:
        """Search documents.

        Returns:
            Documents, read from fields when a projection is set and
            from _source otherwise, with sort and highlight values
            attached.
        """
        self._consume()
        body = self._op_converter.convert_search(self.state)
        response = self._client._request(
            "POST", self._path("_search"), body=body
        )
        return self._result_converter.convert_search(response, self.state)

    async def asearch(self) -> list[dict[str, Any]]:
        self._consume()
        body = self._op_converter.convert_search(self.state)
        response = await self._client._arequest(
            "POST", self._path("_search"), body=body
        )
        return self._result_converter.convert_search(response, self.state)

    def aggregations(self) -> dict[str, Any]:
        """Run the search and return its aggregation results.

        Returns:
            Aggregations keyed by name, or facets from engines
            that still report them.
        """
        self._consume()
        body = self._op_converter.convert_search(self.state)
        response = self._client._request(
            "POST", self._path("_search"), body=body
        )
        return self._result_converter.convert_aggregations(response)

    async def aaggregations(self) -> dict[str, Any]:
        self._consume()
        body = self._op_converter.convert_search(self.state)
        response = await self._client._arequest(
            "POST", self._path("_search"), body=body
        )
        return self._result_converter.convert_aggregations(response)

    def exec(self) -> dict[str, Any]:
        """Run the search and return the unmodified response body."""
        self._consume()
        body = self._op_converter.convert_search(self.state)
        return self._client._request("POST", self._path("_search"), body=body)

    async def aexec(self) -> dict[str, Any]:
        self._consume()
        body = self._op_converter.convert_search(self.state)
        return await self._client._arequest(
            "POST", self._path("_search"), body=body
        )

    def count(self) -> int:
        """Count matching documents."""
        self._consume()
        body = self._op_converter.convert_count(self.state)
        response = self._client._request(
            "POST", self._path("_count"), body=body
        )
        return self._result_converter.convert_count(response)

    async def acount(self) -> int:
        self._consume()
        body = self._op_converter.convert_count(self.state)
        response = await self._client._arequest(
            "POST", self._path("_count"), body=body
        )
        return self._result_converter.convert_count(response)

    def remove(self) -> int:
        """Delete the documents matching the term filters.

        Only where() equality filters are accepted. The call is refused
        before any request when there are none, when any other clause
        is set, or when a field is given two different values.

        Returns:
            Number of deleted documents.

        Raises:
            ValidationError:
                Filters cannot be expressed as equality terms.
        """
        self._consume()
        body = self._op_converter.convert_remove(self.state)
        logger.info("delete by query", resource=self.resource.path)
        response = self._client._request(
            "POST", self._path("_delete_by_query"), body=body
        )
        return self._result_converter.convert_remove(response)

    async def aremove(self) -> int:
        self._consume()
        body = self._op_converter.convert_remove(self.state)
        logger.info("delete by query", resource=self.resource.path)
        response = await self._client._arequest(
            "POST", self._path("_delete_by_query"), body=body
        )
        return self._result_converter.convert_remove(response)

    def autocomplete(self, term: str) -> list[dict[str, Any]]:
        """Match term against the autocomplete field with highlighting.

        Other builder settings are ignored.
        """
        self._consume()
        body = self._op_converter.convert_autocomplete(term)
        response = self._client._request(
            "POST", self._path("_search"), body=body
        )
        return self._result_converter.convert_search(response)

    async def aautocomplete(self, term: str) -> list[dict[str, Any]]:
        self._consume()
        body = self._op_converter.convert_autocomplete(term)
        response = await self._client._arequest(
            "POST", self._path("_search"), body=body
        )
        return self._result_converter.convert_search(response)

    def by_id(self, id: str | int) -> dict[str, Any]:
        """Get one document.

        Raises:
            NotFoundError:
                Document not found.
        """
        self._consume()
        response = self._client._request("GET", self._doc_path(id))
        return self._result_converter.convert_by_id(response)

    async def aby_id(self, id: str | int) -> dict[str, Any]:
        self._consume()
        response = await self._client._arequest("GET", self._doc_path(id))
        return self._result_converter.convert_by_id(response)

    def _path(self, endpoint: str) -> str:
        return f"{self.resource.path}/{endpoint}"

    def _doc_path(self, id: str | int) -> str:
        if id is None or id == "":
            raise ValidationError("Document id is required")
        doc_type = self.resource.type or "_doc"
        return f"{self.resource.index}/{doc_type}/{quote(str(id), safe='')}"
