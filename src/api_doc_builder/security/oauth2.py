"""Documentation of OAuth2 authorization server endpoints.

Security filter chains are described by plain objects: each chain holds
endpoint filters, and each filter exposes the request matcher of its endpoint
under an attribute. Filters are recognised by class name anywhere in their
MRO, so subclasses are picked up too.
"""

import logging

from api_doc_builder.models.openapi import (
    ApiResponse,
    Header,
    MediaType,
    OpenAPI,
    Operation,
    Parameter,
    PathItem,
    RequestBody,
)
from api_doc_builder.models.route import RequestMethod
from api_doc_builder.security.models import (
    JwkSet,
    OAuth2AccessTokenResponse,
    OAuth2AuthorizationConsent,
    OAuth2AuthorizationServerMetadata,
    OAuth2Error,
    OAuth2TokenIntrospection,
)
from api_doc_builder.services.schema import SchemaResolver

logger = logging.getLogger(__name__)

OAUTH2_ENDPOINT_TAG = "authorization-server-endpoints"
APPLICATION_JSON = "application/json"
FORM_URLENCODED = "application/x-www-form-urlencoded"


class AntPathRequestMatcher:
    def __init__(self, pattern: str, method: str | None = None):
        self.pattern = pattern
        self.method = method


class OrRequestMatcher:
    def __init__(self, *request_matchers):
        self.request_matchers = list(request_matchers)


class SecurityFilterChain:
    def __init__(self, filters: list):
        self.filters = list(filters)


def find_filter(chain: SecurityFilterChain, class_name: str):
    for endpoint_filter in chain.filters:
        if any(cls.__name__ == class_name for cls in type(endpoint_filter).__mro__):
            return endpoint_filter
    return None


def matcher_path(matcher) -> str | None:
    """The pattern of an ant matcher; for composite matchers, the last pattern found."""
    if isinstance(matcher, AntPathRequestMatcher):
        return matcher.pattern
    path = None
    for inner in matcher.request_matchers:
        found = matcher_path(inner)
        if found:
            path = found
    return path


class OAuth2EndpointCustomizer:
    """Adds the authorization server endpoints of ``filter_chains`` to the document."""

    def __init__(self, filter_chains: list[SecurityFilterChain], schema_resolver: SchemaResolver | None = None):
        self.filter_chains = list(filter_chains)
        self.schema_resolver = schema_resolver or SchemaResolver()

    def __call__(self, openapi: OpenAPI) -> OpenAPI:
        for chain in self.filter_chains:
            self.jwk_set_endpoint(openapi, chain)
            self.authorization_server_metadata_endpoint(openapi, chain)
            self.token_endpoint(openapi, chain)
            self.authorization_endpoint(openapi, chain)
            self.token_introspection_endpoint(openapi, chain)
            self.token_revocation_endpoint(openapi, chain)
        return openapi

    def jwk_set_endpoint(self, openapi: OpenAPI, chain: SecurityFilterChain) -> None:
        endpoint_filter = find_filter(chain, "NimbusJwkSetEndpointFilter")
        if endpoint_filter is None:
            return
        responses = {"200": self._json_response(openapi, JwkSet, "OK")}
        self._build_path(openapi, endpoint_filter, "request_matcher", RequestMethod.GET, Operation(responses=responses))

    def authorization_server_metadata_endpoint(self, openapi: OpenAPI, chain: SecurityFilterChain) -> None:
        endpoint_filter = find_filter(chain, "OAuth2AuthorizationServerMetadataEndpointFilter")
        if endpoint_filter is None:
            return
        responses = {"200": self._json_response(openapi, OAuth2AuthorizationServerMetadata, "OK")}
        self._build_path(openapi, endpoint_filter, "request_matcher", RequestMethod.GET, Operation(responses=responses))

    def token_endpoint(self, openapi: OpenAPI, chain: SecurityFilterChain) -> None:
        endpoint_filter = find_filter(chain, "OAuth2TokenEndpointFilter")
        if endpoint_filter is None:
            return
        responses = {"200": self._json_response(openapi, OAuth2AccessTokenResponse, "OK")}
        responses.update(self._error_responses(openapi))
        operation = Operation(responses=responses, parameters=[_parameters_parameter()])
        self._build_path(openapi, endpoint_filter, "token_endpoint_matcher", RequestMethod.POST, operation)

    def authorization_endpoint(self, openapi: OpenAPI, chain: SecurityFilterChain) -> None:
        endpoint_filter = find_filter(chain, "OAuth2AuthorizationEndpointFilter")
        if endpoint_filter is None:
            return
        responses = {
            "200": self._json_response(openapi, OAuth2AuthorizationConsent, "OK"),
            "302": ApiResponse(
                description="Moved Temporarily",
                headers={"Location": Header(schema_={"type": "string"})},
            ),
        }
        responses.update(self._error_responses(openapi))
        operation = Operation(responses=responses, parameters=[_parameters_parameter()])
        self._build_path(openapi, endpoint_filter, "authorization_endpoint_matcher", RequestMethod.POST, operation)

    def token_introspection_endpoint(self, openapi: OpenAPI, chain: SecurityFilterChain) -> None:
        endpoint_filter = find_filter(chain, "OAuth2TokenIntrospectionEndpointFilter")
        if endpoint_filter is None:
            return
        responses = {"200": self._json_response(openapi, OAuth2TokenIntrospection, "OK")}
        responses.update(self._error_responses(openapi))
        schema = {
            "type": "object",
            "properties": {
                "token": {"type": "string"},
                "token_type_hint": {"type": "string"},
                "additionalParameters": {"type": "object", "additionalProperties": {"type": "string"}},
            },
        }
        operation = Operation(responses=responses, request_body=_form_body(schema))
        self._build_path(
            openapi, endpoint_filter, "token_introspection_endpoint_matcher", RequestMethod.POST, operation
        )

    def token_revocation_endpoint(self, openapi: OpenAPI, chain: SecurityFilterChain) -> None:
        endpoint_filter = find_filter(chain, "OAuth2TokenRevocationEndpointFilter")
        if endpoint_filter is None:
            return
        responses = {"200": ApiResponse(description="OK")}
        responses.update(self._error_responses(openapi))
        schema = {
            "type": "object",
            "properties": {"token": {"type": "string"}, "token_type_hint": {"type": "string"}},
        }
        operation = Operation(responses=responses, request_body=_form_body(schema))
        self._build_path(
            openapi, endpoint_filter, "token_revocation_endpoint_matcher", RequestMethod.POST, operation
        )

    def _build_path(
        self, openapi: OpenAPI, endpoint_filter, matcher_attribute: str, method: RequestMethod, operation: Operation
    ) -> None:
        try:
            path = matcher_path(getattr(endpoint_filter, matcher_attribute))
        except (AttributeError, TypeError) as e:
            logger.debug("Unable to read the %s of %s: %s", matcher_attribute, type(endpoint_filter).__name__, e)
            return
        if path is None:
            return
        operation.add_tag(OAUTH2_ENDPOINT_TAG)
        path_item = PathItem()
        path_item.set_operation(method.value, operation)
        openapi.paths[path] = path_item

    def _json_response(self, openapi: OpenAPI, model, description: str) -> ApiResponse:
        schema = self.schema_resolver.resolve(model, openapi.components)
        return ApiResponse(description=description, content={APPLICATION_JSON: MediaType(schema_=schema)})

    def _error_responses(self, openapi: OpenAPI) -> dict[str, ApiResponse]:
        return {
            "400": self._json_response(openapi, OAuth2Error, "Bad Request"),
            "401": self._json_response(openapi, OAuth2Error, "Unauthorized"),
            "500": self._json_response(openapi, OAuth2Error, "Internal Server Error"),
        }


def _parameters_parameter() -> Parameter:
    return Parameter(
        name="parameters",
        in_="query",
        schema_={"type": "object", "additionalProperties": {"type": "string"}},
    )


def _form_body(schema: dict) -> RequestBody:
    return RequestBody(content={FORM_URLENCODED: MediaType(schema_=schema)})
