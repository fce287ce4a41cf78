"""Base document, per-locale cache, servers and tags."""

import re

from api_doc_builder.config import DocConfig
from api_doc_builder.discovery.base import RouteDiscovery
from api_doc_builder.models.openapi import OpenAPI, Operation, Server, Tag
from api_doc_builder.models.route import Bean, ControllerAdvice, HandlerMethod
from api_doc_builder.services.properties import PropertyResolver

DEFAULT_SERVER_DESCRIPTION = "Generated server url"

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def split_camel_case(name: str) -> str:
    """``OrderController`` -> ``order-controller``."""
    return _CAMEL_BOUNDARY.sub("-", name).lower()


class OpenApiService:
    """Owns the cached documents of one group."""

    def __init__(
        self,
        config: DocConfig,
        discovery: RouteDiscovery,
        property_resolver: PropertyResolver,
        base_openapi: OpenAPI | None = None,
    ):
        self.config = config
        self.discovery = discovery
        self.property_resolver = property_resolver
        self.base_openapi = base_openapi
        self.servers_present = False
        self.server_base_url: str | None = None
        self._cached: dict[str, OpenAPI] = {}

    def build(self, locale: str | None) -> OpenAPI:
        """A fresh base document for ``locale``."""
        if self.base_openapi is not None:
            openapi = self.base_openapi.model_copy(deep=True)
        else:
            openapi = OpenAPI(
                info=self.config.info.model_copy(deep=True),
                servers=[server.model_copy(deep=True) for server in self.config.servers] or None,
            )
        openapi.info.title = self.property_resolver.resolve(openapi.info.title, locale)
        openapi.info.description = self.property_resolver.resolve(openapi.info.description, locale)
        return openapi

    def get_cached_openapi(self, locale: str) -> OpenAPI | None:
        return self._cached.get(locale)

    def set_cached_openapi(self, openapi: OpenAPI, locale: str) -> None:
        self._cached[locale] = openapi

    def evict(self, locale: str | None = None) -> None:
        if locale is None:
            self._cached.clear()
        else:
            self._cached.pop(locale, None)

    def update_servers(self, openapi: OpenAPI) -> None:
        if not self.servers_present and self.server_base_url:
            openapi.servers = [Server(url=self.server_base_url, description=DEFAULT_SERVER_DESCRIPTION)]

    def build_tags(self, handler: HandlerMethod, operation: Operation, openapi: OpenAPI, locale: str | None) -> Operation:
        for name in handler.bean.tags:
            name = self.property_resolver.resolve(name, locale)
            operation.add_tag(name)
            openapi.add_tag(Tag(name=name))
        if not operation.tags and self.config.auto_tag_classes:
            operation.add_tag(split_camel_case(handler.bean.simple_name))
        return operation

    def get_mappings_map(self) -> dict[str, Bean]:
        return {bean.name: bean for bean in self.discovery.rest_controllers()}

    def get_controller_advice_map(self) -> dict[str, ControllerAdvice]:
        return {advice.name: advice for advice in self.discovery.controller_advices()}
