"""Operation construction for handler routes and router declarations."""

import logging

from api_doc_builder.config import DocConfig
from api_doc_builder.customizers import Customizers
from api_doc_builder.discovery.base import RouteDiscovery
from api_doc_builder.engine.attributes import MethodAttributes
from api_doc_builder.engine.filters import RouteFilter
from api_doc_builder.engine.merge import merge_parameter
from api_doc_builder.engine.paths import add_operation, get_existing_operation, operations_map
from api_doc_builder.engine.routers import sorted_router_operations
from api_doc_builder.errors import RouterMethodNotFound
from api_doc_builder.models.openapi import OpenAPI, Operation, Parameter
from api_doc_builder.models.route import (
    CallbackDoc,
    HandlerMethod,
    OperationDoc,
    RouterOperation,
    sort_methods,
)
from api_doc_builder.services.openapi_service import OpenApiService
from api_doc_builder.services.operation_parser import OperationParser
from api_doc_builder.services.request_builder import RequestBuilder
from api_doc_builder.services.response_builder import ResponseBuilder

logger = logging.getLogger(__name__)


class OperationBuilder:
    """Adds operations to a document under construction."""

    def __init__(
        self,
        config: DocConfig,
        route_filter: RouteFilter,
        service: OpenApiService,
        operation_parser: OperationParser,
        request_builder: RequestBuilder,
        response_builder: ResponseBuilder,
        customizers: Customizers,
        discovery: RouteDiscovery,
    ):
        self.config = config
        self.route_filter = route_filter
        self.service = service
        self.operation_parser = operation_parser
        self.request_builder = request_builder
        self.response_builder = response_builder
        self.customizers = customizers
        self.discovery = discovery

    def calculate_path(
        self, handler: HandlerMethod, router_operation: RouterOperation, locale: str | None, openapi: OpenAPI
    ) -> None:
        """Build one operation per HTTP method of ``router_operation`` and register it under its path."""
        router_operation = self.customize_router_operation(router_operation, handler)
        if self.operation_parser.is_hidden(handler):
            return

        operation_path = router_operation.path
        paths = openapi.paths
        components = openapi.components
        operation_map = operations_map(paths, operation_path)
        javadoc_provider = self.operation_parser.javadoc_provider

        api_operation = router_operation.operation
        if api_operation is None or not api_operation.operation_id.strip():
            api_operation = handler.operation

        for request_method in sort_methods(router_operation.methods):
            existing = get_existing_operation(operation_map, request_method)
            method_attributes = MethodAttributes(
                self.config.default_consumes_media_type,
                self.config.default_produces_media_type,
                router_operation.consumes,
                router_operation.produces,
                router_operation.headers,
                locale,
            )
            method_attributes.method_overloaded = existing is not None
            if javadoc_provider is not None:
                method_attributes.javadoc_return = javadoc_provider.get_method_return(handler) or None
            if handler.bean.has_class_mapping:
                method_attributes.set_class_mapping(handler.bean)
            method_attributes.calculate_headers_for_class(handler.bean)
            method_attributes.calculate_consumes_produces(handler)

            operation = existing if existing is not None else Operation()
            if handler.deprecated:
                operation.deprecated = True

            self.calculate_json_view(api_operation, method_attributes, handler)
            if api_operation is not None:
                self.operation_parser.parse(api_operation, operation, openapi, method_attributes)
            self.fill_parameters_list(operation, router_operation.query_params, method_attributes)

            operation = self.service.build_tags(handler, operation, openapi, locale)

            request_body = self.request_builder.request_body_builder.build_request_body_from_doc(
                handler.request_body_doc, method_attributes, components, method_attributes.json_view_for_request_body
            )
            if request_body is not None:
                operation.request_body = request_body
            operation = self.request_builder.build(handler, request_method, operation, method_attributes, openapi)
            operation.responses = self.response_builder.build(components, handler, operation, method_attributes)

            if javadoc_provider is not None:
                self._apply_doc_comment(operation, handler)
            self._build_callbacks(openapi, method_attributes, operation, handler.callbacks)

            operation = self.customize_operation(operation, handler)
            add_operation(paths, request_method, operation, operation_path)

    def calculate_model_path(self, router_operation: RouterOperation, locale: str | None, openapi: OpenAPI) -> None:
        """Register a declaration that carries its own documentation and no handler."""
        router_operation = self.customize_data_rest_router_operation(router_operation)
        operation_path = router_operation.path
        api_operation = router_operation.operation
        paths = openapi.paths
        operation_map = operations_map(paths, operation_path)

        for request_method in router_operation.methods:
            existing = get_existing_operation(operation_map, request_method)
            method_attributes = MethodAttributes(
                self.config.default_consumes_media_type,
                self.config.default_produces_media_type,
                router_operation.consumes,
                router_operation.produces,
                router_operation.headers,
                locale,
            )
            method_attributes.method_overloaded = existing is not None
            method_attributes.calculate_consumes_produces()

            incoming = router_operation.operation_model
            if incoming is not None:
                incoming = incoming.model_copy(deep=True)
            operation = self.operation_parser.merge_operation(existing, incoming)
            if api_operation is not None:
                self.operation_parser.parse(api_operation, operation, openapi, method_attributes)
            operation.operation_id = self.operation_parser.get_operation_id(
                operation.operation_id, openapi, operation
            )

            self.fill_parameters_list(operation, router_operation.query_params, method_attributes)
            for parameter in operation.parameters or []:
                if not parameter.ref:
                    if parameter.schema_ is None:
                        parameter.schema_ = {"type": "string"}
                    if parameter.in_ is None:
                        parameter.in_ = "query"
            add_operation(paths, request_method, operation, operation_path)

    def calculate_router_operations(
        self, router_operations: list[RouterOperation], locale: str | None, openapi: OpenAPI
    ) -> None:
        for router_operation in sorted_router_operations(list(router_operations)):
            if router_operation.bean_class:
                if not (router_operation.bean_method or "").strip():
                    continue
                try:
                    handler = self.find_handler(router_operation)
                except RouterMethodNotFound as e:
                    logger.error("Unable to find the method %s", e)
                    continue
                if handler is not None and self._filter(router_operation, handler):
                    self.calculate_path(handler, router_operation, locale, openapi)
            elif router_operation.operation is not None and router_operation.operation.operation_id.strip():
                if self._filter(router_operation):
                    self.calculate_model_path(router_operation, locale, openapi)
            elif router_operation.operation_model is not None and (router_operation.operation_model.operation_id or "").strip():
                if self._filter(router_operation):
                    self.calculate_model_path(router_operation, locale, openapi)

    def find_handler(self, router_operation: RouterOperation) -> HandlerMethod | None:
        """The handler method a declaration names.

        Without parameter types a zero-argument method is preferred, then any
        method of that name.
        """
        candidates = [
            h for h in self.discovery.handler_methods(router_operation.bean_class) if h.name == router_operation.bean_method
        ]
        if not router_operation.parameter_types:
            no_args = [h for h in candidates if not h.parameters]
            return (no_args or candidates or [None])[0]
        for handler in candidates:
            if handler.parameter_types == list(router_operation.parameter_types):
                return handler
        raise RouterMethodNotFound(
            f"{router_operation.bean_class}.{router_operation.bean_method}({', '.join(router_operation.parameter_types)})"
        )

    def fill_parameters_list(
        self, operation: Operation, query_params: dict[str, str | None], method_attributes: MethodAttributes
    ) -> None:
        """Add required headers and router query parameters to ``operation``."""
        parameters = list(operation.parameters or [])
        names = {p.name for p in parameters}
        for header in method_attributes.header_parameters():
            if header.name not in names:
                parameters.append(header)
        for name, value in (query_params or {}).items():
            schema = {"type": "string"}
            if value is not None:
                schema["default"] = value
            merge_parameter(parameters, Parameter(name=name, in_="query", required=True, schema_=schema))
        operation.parameters = parameters or None

    def calculate_json_view(
        self, api_operation: OperationDoc | None, method_attributes: MethodAttributes, handler: HandlerMethod
    ) -> None:
        if api_operation is not None and api_operation.ignore_json_view:
            method_attributes.json_view = None
            method_attributes.json_view_for_request_body = None
            return
        method_attributes.json_view = handler.json_view
        body_views = [p.json_view for p in handler.parameters if p.location == "body" and p.json_view]
        if not body_views:
            method_attributes.json_view_for_request_body = handler.json_view
        elif len(body_views) == 1:
            method_attributes.json_view_for_request_body = body_views[0]
        else:
            method_attributes.json_view_for_request_body = None

    def customize_operation(self, operation: Operation, handler: HandlerMethod) -> Operation:
        for customizer in self.customizers.operation_customizers:
            operation = customizer(operation, handler)
        return operation

    def customize_router_operation(self, router_operation: RouterOperation, handler: HandlerMethod) -> RouterOperation:
        for customizer in self.customizers.router_operation_customizers:
            router_operation = customizer(router_operation, handler)
        return router_operation

    def customize_data_rest_router_operation(self, router_operation: RouterOperation) -> RouterOperation:
        for customizer in self.customizers.data_rest_router_operation_customizers:
            router_operation = customizer(router_operation)
        return router_operation

    def _filter(self, router_operation: RouterOperation, handler: HandlerMethod | None = None) -> bool:
        return self.route_filter.is_filter_condition(
            router_operation.path, router_operation.produces, router_operation.consumes, router_operation.headers, handler
        )

    def _apply_doc_comment(self, operation: Operation, handler: HandlerMethod) -> None:
        javadoc_provider = self.operation_parser.javadoc_provider
        description = javadoc_provider.get_method_description(handler)
        summary = javadoc_provider.get_first_sentence(description)
        empty_description = not operation.description
        if description and empty_description:
            operation.description = description
        if summary and not operation.summary and empty_description:
            operation.summary = summary

    def _build_callbacks(
        self,
        openapi: OpenAPI,
        method_attributes: MethodAttributes,
        operation: Operation,
        callback_docs: list[CallbackDoc],
    ) -> None:
        if not callback_docs:
            return
        callbacks = self.operation_parser.build_callbacks(callback_docs, openapi, method_attributes)
        if callbacks:
            operation.callbacks = {**(operation.callbacks or {}), **callbacks}
