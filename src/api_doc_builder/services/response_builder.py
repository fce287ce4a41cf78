"""Responses of an operation: documented, generic, and computed from the handler."""

from http import HTTPStatus

from api_doc_builder.engine.attributes import MethodAttributes
from api_doc_builder.models.openapi import ApiResponse, Components, Header, MediaType, Operation
from api_doc_builder.models.route import ControllerAdvice, HandlerMethod, ResponseDoc
from api_doc_builder.services.properties import PropertyResolver
from api_doc_builder.services.schema import SchemaResolver

DEFAULT_DESCRIPTION = "default response"


def reason_phrase(code: str) -> str:
    try:
        return HTTPStatus(int(code)).phrase
    except ValueError:
        return DEFAULT_DESCRIPTION


def build_api_response(
    code: str,
    response_doc: ResponseDoc,
    components: Components,
    schema_resolver: SchemaResolver,
    media_types: list[str],
    description: str | None = None,
    json_view: str | None = None,
) -> ApiResponse:
    """Render a documented response; a bare ``schema`` is used for every media type."""
    content = {}
    for media_type, type_ref in response_doc.content.items():
        content[media_type] = MediaType(schema_=schema_resolver.resolve(type_ref, components, json_view))
    if not content and response_doc.schema_ is not None:
        schema = schema_resolver.resolve(response_doc.schema_, components, json_view)
        content = {media_type: MediaType(schema_=schema) for media_type in media_types}
    headers = {name: Header(description=text or None, schema_={"type": "string"}) for name, text in response_doc.headers.items()}
    return ApiResponse(
        description=description or response_doc.description or reason_phrase(code),
        content=content or None,
        headers=headers or None,
    )


class ResponseBuilder:
    """Builds the response map of a handler operation."""

    def __init__(self, schema_resolver: SchemaResolver, property_resolver: PropertyResolver):
        self.schema_resolver = schema_resolver
        self.property_resolver = property_resolver
        self.generic_responses: dict[str, ApiResponse] = {}

    def build_generic_response(
        self, components: Components, advices: dict[str, ControllerAdvice], locale: str | None, media_types: list[str] | None = None
    ) -> None:
        """Collect error responses declared by exception handlers; they apply to every operation."""
        media_types = media_types or ["*/*"]
        generic: dict[str, ApiResponse] = {}
        for advice in advices.values():
            for code, response_doc in advice.exception_handlers.items():
                if code not in generic:
                    description = self.property_resolver.resolve(response_doc.description, locale)
                    generic[code] = build_api_response(
                        code, response_doc, components, self.schema_resolver, media_types, description
                    )
        self.generic_responses = generic

    def build(
        self,
        components: Components,
        handler: HandlerMethod,
        operation: Operation,
        method_attributes: MethodAttributes,
    ) -> dict[str, ApiResponse]:
        """Return a new response map that keeps every code already on ``operation``."""
        documented = dict(operation.responses or {})
        responses = dict(documented)
        for code, response in self.generic_responses.items():
            responses.setdefault(code, response.model_copy(deep=True))
        for code, response_doc in handler.bean.exception_handlers.items():
            if code not in responses:
                responses[code] = build_api_response(
                    code, response_doc, components, self.schema_resolver, method_attributes.method_produces
                )
        self._add_default_response(responses, documented, components, handler, method_attributes)
        return responses

    def _add_default_response(
        self,
        responses: dict[str, ApiResponse],
        documented: dict[str, ApiResponse],
        components: Components,
        handler: HandlerMethod,
        method_attributes: MethodAttributes,
    ) -> None:
        code = handler.response_status or "200"
        schema = self.schema_resolver.resolve(handler.return_type, components, method_attributes.json_view)
        content = None
        if schema is not None:
            content = {media_type: MediaType(schema_=schema) for media_type in method_attributes.method_produces}
        description = method_attributes.javadoc_return or reason_phrase(code)

        existing = responses.get(code)
        if existing is not None:
            if existing.content is None and content:
                existing.content = content
            if not existing.description:
                existing.description = description
        elif not any(c.startswith("2") for c in documented):
            responses[code] = ApiResponse(description=description, content=content)
