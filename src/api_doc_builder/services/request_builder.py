"""Parameters and request bodies of handler operations."""

from api_doc_builder.engine.attributes import MethodAttributes
from api_doc_builder.engine.merge import merge_parameter
from api_doc_builder.models.openapi import Components, MediaType, OpenAPI, Operation, Parameter, RequestBody
from api_doc_builder.models.route import HandlerMethod, HandlerParameter, RequestBodyDoc, RequestMethod
from api_doc_builder.services.properties import PropertyResolver
from api_doc_builder.services.schema import SchemaResolver


class RequestBodyBuilder:
    def __init__(self, schema_resolver: SchemaResolver, property_resolver: PropertyResolver):
        self.schema_resolver = schema_resolver
        self.property_resolver = property_resolver

    def build_request_body_from_doc(
        self,
        doc: RequestBodyDoc | None,
        method_attributes: MethodAttributes,
        components: Components,
        json_view: str | None = None,
    ) -> RequestBody | None:
        """A documented request body, or ``None`` when it documents nothing."""
        if doc is None:
            return None
        request_body = RequestBody(required=doc.required)
        if doc.description:
            request_body.description = self.property_resolver.resolve(doc.description, method_attributes.locale)
        content = {}
        for media_type, type_ref in doc.content.items():
            content[media_type] = MediaType(schema_=self.schema_resolver.resolve(type_ref, components, json_view))
        if not content and doc.schema_ is not None:
            schema = self.schema_resolver.resolve(doc.schema_, components, json_view)
            content = {media_type: MediaType(schema_=schema) for media_type in method_attributes.method_consumes}
        if content:
            request_body.content = content
        return None if request_body.is_empty() else request_body


class RequestBuilder:
    """Computes parameters from the handler signature and merges them with documented ones."""

    def __init__(self, schema_resolver: SchemaResolver, request_body_builder: RequestBodyBuilder):
        self.schema_resolver = schema_resolver
        self.request_body_builder = request_body_builder

    def build(
        self,
        handler: HandlerMethod,
        request_method: RequestMethod,
        operation: Operation,
        method_attributes: MethodAttributes,
        openapi: OpenAPI,
    ) -> Operation:
        components = openapi.components
        parameters = list(operation.parameters or [])
        for handler_parameter in handler.parameters:
            if handler_parameter.location == "body":
                self._build_request_body(handler_parameter, operation, method_attributes, components)
            else:
                merge_parameter(parameters, self.build_parameter(handler_parameter, components))

        headers = {p.name: p for p in parameters if p.in_ == "header"}
        for header in method_attributes.header_parameters(headers):
            if not any(header is p for p in parameters):
                parameters.append(header)

        operation.parameters = parameters or None
        return operation

    def build_parameter(self, handler_parameter: HandlerParameter, components: Components) -> Parameter:
        schema = self.schema_resolver.resolve(handler_parameter.type, components) or {"type": "string"}
        if handler_parameter.default is not None:
            schema["default"] = handler_parameter.default
        required = True if handler_parameter.location == "path" else handler_parameter.required
        return Parameter(
            name=handler_parameter.name,
            in_=handler_parameter.location,
            description=handler_parameter.description or None,
            required=required,
            schema_=schema,
        )

    def _build_request_body(
        self,
        handler_parameter: HandlerParameter,
        operation: Operation,
        method_attributes: MethodAttributes,
        components: Components,
    ) -> None:
        schema = self.schema_resolver.resolve(
            handler_parameter.type, components, method_attributes.json_view_for_request_body
        )
        content = {media_type: MediaType(schema_=schema) for media_type in method_attributes.method_consumes}
        required = handler_parameter.required if handler_parameter.required is not None else True

        request_body = operation.request_body
        if request_body is None:
            operation.request_body = RequestBody(
                description=handler_parameter.description or None, content=content or None, required=required
            )
            return
        if request_body.content is None:
            request_body.content = content or None
        else:
            for media_type, media in content.items():
                current = request_body.content.get(media_type)
                if current is None or current.schema_ is None:
                    request_body.content[media_type] = media
        if request_body.required is None:
            request_body.required = required
