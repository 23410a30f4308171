"""Dispatch facade: HTTP-like request description to built statement text.

Example:
    >>> dispatcher = QueryDispatcher()
    >>> built = dispatcher.dispatch({
    ...     "entity_type": "persons",
    ...     "method": "GET",
    ...     "query": {"search": "Doe", "page": 2, "per_page": 10},
    ... })
    >>> built.params["per_page"]
    10
"""

import uuid
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Mapping, Optional, Union

from opentelemetry.trace import Status, StatusCode
from pydantic import Field, field_validator, model_validator

from officeql.common import ErrorCode, QueryBuilderError, missing_parameter_error, validation_error
from officeql.constants import HttpMethod
from officeql.logging import get_logger
from officeql.logging.filters import clear_request_context, set_request_context
from officeql.query_builder import (
    BuiltQuery,
    EntityQueryBuilder,
    LookupQueryBuilder,
    QueryBuilderFactory,
    RelationQueryBuilder,
    TranslationQueryBuilder,
    format_bool_flag,
    uses_old_new_protocol,
)
from officeql.query_builder.factory import ConcreteQueryBuilder
from officeql.schema import EntityRegistry, get_default_registry
from officeql.settings import _Settings, get_settings
from officeql.telemetry import get_tracer
from officeql.types import OfficeQLBaseModel

logger = get_logger(__name__)


class QueryRequest(OfficeQLBaseModel):
    """HTTP-like description of one request.

    Attributes:
        entity_type: Entity token, ``lookup:<name>`` or ``translations``
        method: GET, POST, PUT, PATCH or DELETE
        params: Path parameters (``id``; ``code``/``language_id`` for translations)
        query: Query-string parameters
        body: Request body
        request_id: Correlation id for logs and traces; generated when absent
    """
    entity_type: str = Field(..., min_length=1)
    method: str
    params: Dict[str, Any] = Field(default_factory=dict)
    query: Dict[str, Any] = Field(default_factory=dict)
    body: Dict[str, Any] = Field(default_factory=dict)
    request_id: Optional[str] = None

    @field_validator("method", mode="before")
    @classmethod
    def normalize_method(cls, v: Any) -> str:
        return str(v or "").strip().upper()

    @field_validator("params", "query", "body", mode="before")
    @classmethod
    def default_empty(cls, v: Any) -> Any:
        return {} if v is None else v

    @model_validator(mode="before")
    @classmethod
    def lift_nested_query(cls, data: Any) -> Any:
        """Some webhook payloads nest the query string under ``params.query``."""
        if isinstance(data, dict):
            nested = (data.get("params") or {}).get("query")
            if not data.get("query") and isinstance(nested, dict):
                data = {**data, "query": dict(nested)}
        return data


class QueryDispatcher:
    """Routes a request to the builder and method that serve it.

    The registry and settings are injected; they default to the process-wide
    instances. Routing:

        - GET with ``params.id`` -> select by id, otherwise list
        - GET on object_relations with ``object_from_id`` -> relations
          hydrated with the related objects
        - POST -> insert (translations: upsert when ``query.upsert`` is truthy)
        - PUT/PATCH -> update; the old/new audit protocol when the body has
          any ``<column>_new`` key
        - DELETE -> delete
    """

    def __init__(self, registry: Optional[EntityRegistry] = None, settings: Optional[_Settings] = None):
        self.registry = registry if registry is not None else get_default_registry()
        self.settings = settings if settings is not None else get_settings()

    def dispatch(self, request: Union[QueryRequest, Mapping[str, Any]]) -> BuiltQuery:
        """Build the statement text for a request.

        Raises:
            QueryBuilderError: Configuration error for unknown tokens, input
                error for missing ids, unsupported methods or empty updates
        """
        if not isinstance(request, QueryRequest):
            request = QueryRequest.model_validate(dict(request))

        with self._dispatch_scope(request) as span:
            builder = QueryBuilderFactory.create(request.entity_type, self.registry, self.settings)
            method = self._method(request.method)
            built = self._route(builder, method, request)

            span.set_attribute("officeql.builder", type(builder).__name__)
            if self.settings.include_debug:
                built = built.model_copy(update={"debug": self._debug_envelope(builder, method, request)})

            logger.info(
                "Dispatched %s %s",
                method.value,
                request.entity_type,
                extra={"method": method.value, "builder": type(builder).__name__},
            )
            return built

    @contextmanager
    def _dispatch_scope(self, request: QueryRequest) -> Iterator[Any]:
        """Apply logging context and a tracing span around one dispatch."""
        request_id = request.request_id or str(uuid.uuid4())
        set_request_context(request_id=request_id, entity_type=request.entity_type)

        tracer = get_tracer("officeql")
        with tracer.start_as_current_span("officeql.dispatch") as span:
            span.set_attribute("officeql.request_id", request_id)
            span.set_attribute("officeql.entity_type", request.entity_type)
            span.set_attribute("officeql.method", request.method)
            try:
                yield span
            except QueryBuilderError as exc:
                # Already logged when raised
                span.record_exception(exc)
                span.set_status(Status(StatusCode.ERROR))
                raise
            except Exception as exc:
                span.record_exception(exc)
                span.set_status(Status(StatusCode.ERROR))
                logger.error("Dispatch failed", exc_info=True)
                raise
            finally:
                clear_request_context()

    @staticmethod
    def _method(method: str) -> HttpMethod:
        try:
            return HttpMethod(method)
        except ValueError:
            raise validation_error(
                f"Unsupported method: {method or '<empty>'}",
                field="method",
                value=method,
                error_code=ErrorCode.UNSUPPORTED_METHOD,
                details={"supported": [m.value for m in HttpMethod]},
            ) from None

    def _route(self, builder: ConcreteQueryBuilder, method: HttpMethod, request: QueryRequest) -> BuiltQuery:
        if isinstance(builder, TranslationQueryBuilder):
            return self._route_translation(builder, method, request)

        record_id = request.params.get("id")
        if method == HttpMethod.GET:
            if record_id not in (None, ""):
                return builder.build_select_by_id(record_id, request.query)
            if isinstance(builder, RelationQueryBuilder):
                object_from_id = request.query.get("object_from_id", request.params.get("object_from_id"))
                if object_from_id not in (None, ""):
                    return builder.build_select_related({**request.query, "object_from_id": object_from_id})
            return builder.build_select(request.query)

        if method == HttpMethod.POST:
            return builder.build_insert(request.body)

        if record_id in (None, ""):
            raise missing_parameter_error("id", f"{method.value} {request.entity_type}")

        if method in (HttpMethod.PUT, HttpMethod.PATCH):
            return builder.build_update(record_id, request.body, use_old_new=uses_old_new_protocol(request.body))

        return builder.build_delete(record_id)

    def _route_translation(
        self,
        builder: TranslationQueryBuilder,
        method: HttpMethod,
        request: QueryRequest,
    ) -> BuiltQuery:
        code = request.params.get("code", request.params.get("id"))
        language_id = request.params.get("language_id")
        if language_id is None:
            language_id = request.query.get("language_id", request.body.get("language_id"))

        if method == HttpMethod.GET:
            if code not in (None, ""):
                return builder.build_select_by_key(code, language_id)
            return builder.build_select(request.query)

        if method == HttpMethod.POST:
            if format_bool_flag(request.query.get("upsert", False)) == "1":
                return builder.build_upsert(request.body)
            return builder.build_insert(request.body)

        if method in (HttpMethod.PUT, HttpMethod.PATCH):
            return builder.build_update(code, language_id, request.body)

        return builder.build_delete(code, language_id)

    def _debug_envelope(
        self,
        builder: ConcreteQueryBuilder,
        method: HttpMethod,
        request: QueryRequest,
    ) -> Dict[str, Any]:
        envelope: Dict[str, Any] = {
            "entity_type": request.entity_type,
            "method": method.value,
            "builder": type(builder).__name__,
            "query_params": dict(request.query),
        }
        language_source = request.body if method in (HttpMethod.POST, HttpMethod.PUT, HttpMethod.PATCH) else request.query
        if isinstance(builder, EntityQueryBuilder):
            envelope.update(builder.debug_info(language_source))
        elif isinstance(builder, LookupQueryBuilder):
            envelope["table_name"] = builder.table_name
            envelope["translated"] = builder.is_translated
            envelope["language"] = builder.resolve_language(language_source).to_dict()
        return envelope
