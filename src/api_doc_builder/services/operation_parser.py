"""Documentation annotations into operations."""

from api_doc_builder.engine.attributes import MethodAttributes
from api_doc_builder.engine.merge import merge_operations, merge_parameter
from api_doc_builder.models.openapi import OpenAPI, Operation, Parameter, PathItem
from api_doc_builder.models.route import CallbackDoc, HandlerMethod, OperationDoc, ParameterDoc
from api_doc_builder.services.docstrings import DocstringProvider
from api_doc_builder.services.properties import PropertyResolver
from api_doc_builder.services.request_builder import RequestBodyBuilder
from api_doc_builder.services.response_builder import build_api_response
from api_doc_builder.services.schema import SchemaResolver


class OperationParser:
    """Applies an ``OperationDoc`` to an ``Operation``."""

    def __init__(
        self,
        schema_resolver: SchemaResolver,
        property_resolver: PropertyResolver,
        request_body_builder: RequestBodyBuilder,
        javadoc_provider: DocstringProvider | None = None,
    ):
        self.schema_resolver = schema_resolver
        self.property_resolver = property_resolver
        self.request_body_builder = request_body_builder
        self.javadoc_provider = javadoc_provider

    def is_hidden(self, handler: HandlerMethod) -> bool:
        return handler.hidden or (handler.operation is not None and handler.operation.hidden)

    def parse(
        self, doc: OperationDoc, operation: Operation, openapi: OpenAPI, method_attributes: MethodAttributes
    ) -> Operation:
        locale = method_attributes.locale
        components = openapi.components

        if doc.summary:
            operation.summary = self.property_resolver.resolve(doc.summary, locale)
        if doc.description:
            operation.description = self.property_resolver.resolve(doc.description, locale)
        if doc.operation_id.strip():
            operation.operation_id = self.get_operation_id(doc.operation_id, openapi, operation)
        if doc.deprecated:
            operation.deprecated = True
        for tag in doc.tags:
            operation.add_tag(self.property_resolver.resolve(tag, locale))

        if doc.parameters:
            parameters = list(operation.parameters or [])
            for parameter_doc in doc.parameters:
                merge_parameter(parameters, self.build_parameter(parameter_doc, openapi, locale))
            operation.parameters = parameters

        if doc.request_body is not None:
            request_body = self.request_body_builder.build_request_body_from_doc(
                doc.request_body, method_attributes, components, method_attributes.json_view_for_request_body
            )
            if request_body is not None:
                operation.request_body = request_body

        for code, response_doc in doc.responses.items():
            if operation.responses is None:
                operation.responses = {}
            operation.responses[code] = build_api_response(
                code,
                response_doc,
                components,
                self.schema_resolver,
                method_attributes.method_produces,
                self.property_resolver.resolve(response_doc.description, locale),
                method_attributes.json_view,
            )

        if doc.security:
            operation.security = [dict(requirement) for requirement in doc.security]
        if doc.servers:
            operation.servers = [server.model_copy(deep=True) for server in doc.servers]
        return operation

    def build_parameter(self, parameter_doc: ParameterDoc, openapi: OpenAPI, locale: str | None) -> Parameter:
        if parameter_doc.ref:
            return Parameter(name=parameter_doc.name, ref=parameter_doc.ref)
        location = parameter_doc.location or None
        required = True if location == "path" else parameter_doc.required
        return Parameter(
            name=parameter_doc.name,
            in_=location,
            description=self.property_resolver.resolve(parameter_doc.description, locale) or None,
            required=required,
            deprecated=True if parameter_doc.deprecated else None,
            schema_=self.schema_resolver.resolve(parameter_doc.schema_, openapi.components),
            example=parameter_doc.example,
        )

    def get_operation_id(self, operation_id: str | None, openapi: OpenAPI, current: Operation | None = None) -> str | None:
        """Make ``operation_id`` unique in the document by appending ``_1``, ``_2``, ..."""
        if not operation_id:
            return operation_id
        used = {
            op.operation_id
            for path_item in openapi.paths.values()
            for op in path_item.operations_map().values()
            if op is not current
        }
        candidate, counter = operation_id, 0
        while candidate in used:
            counter += 1
            candidate = f"{operation_id}_{counter}"
        return candidate

    def merge_operation(self, existing: Operation | None, incoming: Operation | None) -> Operation:
        return merge_operations(existing, incoming)

    def build_callbacks(
        self, callback_docs: list[CallbackDoc], openapi: OpenAPI, method_attributes: MethodAttributes
    ) -> dict[str, dict[str, PathItem]] | None:
        """Callbacks keyed by name, then by URL expression; operations without a method are skipped."""
        callbacks: dict[str, dict[str, PathItem]] = {}
        for callback_doc in callback_docs:
            path_item = PathItem()
            for operation_doc in callback_doc.operations:
                if not operation_doc.method:
                    continue
                callback_operation = self.parse(operation_doc, Operation(), openapi, method_attributes)
                path_item.set_operation(operation_doc.method, callback_operation)
            if path_item.operations_map():
                callbacks.setdefault(callback_doc.name, {})[callback_doc.callback_url_expression] = path_item
        return callbacks or None
