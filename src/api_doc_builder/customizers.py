"""User extension hooks, applied in registration order."""

from collections.abc import Callable

from pydantic import BaseModel

from api_doc_builder.engine.filters import MethodFilter
from api_doc_builder.models.openapi import OpenAPI, Operation
from api_doc_builder.models.route import HandlerMethod, RouterOperation

OperationCustomizer = Callable[[Operation, HandlerMethod], Operation]
RouterOperationCustomizer = Callable[[RouterOperation, HandlerMethod], RouterOperation]
DataRestRouterOperationCustomizer = Callable[[RouterOperation], RouterOperation]
# May return a replacement document or None after changing it in place.
OpenApiCustomizer = Callable[[OpenAPI], OpenAPI | None]
OpenApiLocaleCustomizer = Callable[[OpenAPI, str], OpenAPI | None]


class Customizers(BaseModel):
    operation_customizers: list[OperationCustomizer] = []
    router_operation_customizers: list[RouterOperationCustomizer] = []
    data_rest_router_operation_customizers: list[DataRestRouterOperationCustomizer] = []
    openapi_customizers: list[OpenApiCustomizer] = []
    locale_customizers: list[OpenApiLocaleCustomizer] = []
    method_filters: list[MethodFilter] | None = None
