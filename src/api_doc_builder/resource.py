"""Document orchestration: build, cache, serve.

One ``OpenApiResource`` produces the document of one group. Builds are
serialised across all resources of the process; a cached document per locale
is served until ``invalidate`` is called or caching is disabled.
"""

import json
import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from urllib.parse import urlsplit, urlunsplit

from api_doc_builder.config import ACTUATOR_DEFAULT_GROUP, DEFAULT_GROUP, OPENAPI_3_1, DocConfig
from api_doc_builder.customizers import Customizers
from api_doc_builder.discovery.base import RouteDiscovery
from api_doc_builder.engine.builder import OperationBuilder
from api_doc_builder.engine.filters import RouteFilter
from api_doc_builder.engine.pathmatch import parse_path
from api_doc_builder.engine.routers import router_function_operations
from api_doc_builder.models.openapi import OpenAPI, Server
from api_doc_builder.models.route import Bean, HandlerMethod, RequestMethod, RouterOperation, sort_methods
from api_doc_builder.providers import Providers
from api_doc_builder.registry import ControllerRegistry, default_registry
from api_doc_builder.serialization import write_json_value, write_yaml_value
from api_doc_builder.services.docstrings import DocstringProvider
from api_doc_builder.services.openapi_service import OpenApiService
from api_doc_builder.services.operation_parser import OperationParser
from api_doc_builder.services.properties import PropertyResolver
from api_doc_builder.services.request_builder import RequestBodyBuilder, RequestBuilder
from api_doc_builder.services.response_builder import ResponseBuilder
from api_doc_builder.services.schema import SchemaResolver
from api_doc_builder.spec_filter import remove_broken_reference_definitions

logger = logging.getLogger(__name__)

# A mapping without methods answers every method but TRACE.
DEFAULT_ALLOWED_METHODS = [m for m in RequestMethod if m is not RequestMethod.TRACE]


class OpenApiResource:
    """Builds and caches the OpenAPI document of one group."""

    _build_lock = threading.Lock()

    def __init__(
        self,
        config: DocConfig,
        discovery: RouteDiscovery,
        group_name: str = DEFAULT_GROUP,
        customizers: Customizers | None = None,
        providers: Providers | None = None,
        registry: ControllerRegistry | None = None,
        schema_resolver: SchemaResolver | None = None,
        base_openapi: OpenAPI | None = None,
    ):
        self.config = config
        self.discovery = discovery
        self.group_name = group_name
        self.customizers = customizers or Customizers()
        self.providers = providers or Providers()
        self.registry = registry or default_registry

        schema_resolver = schema_resolver or SchemaResolver()
        property_resolver = PropertyResolver(config.messages)
        request_body_builder = RequestBodyBuilder(schema_resolver, property_resolver)
        self.service = OpenApiService(config, discovery, property_resolver, base_openapi)
        self.operation_parser = OperationParser(
            schema_resolver, property_resolver, request_body_builder, DocstringProvider()
        )
        self.request_builder = RequestBuilder(schema_resolver, request_body_builder)
        self.response_builder = ResponseBuilder(schema_resolver, property_resolver)
        self.route_filter = RouteFilter(config, group_name, self.customizers.method_filters)
        self.operation_builder = OperationBuilder(
            config,
            self.route_filter,
            self.service,
            self.operation_parser,
            self.request_builder,
            self.response_builder,
            self.customizers,
            discovery,
        )

        self.preload_future: Future | None = None
        if config.pre_loading_enabled:
            self._start_preload()

    def get_openapi(self, locale: str | None = None, server_base_url: str | None = None) -> OpenAPI:
        """The document for ``locale``, built on first use and cached afterwards."""
        with OpenApiResource._build_lock:
            return self._locked_openapi(locale, server_base_url)

    def _locked_openapi(self, locale: str | None, server_base_url: str | None) -> OpenAPI:
        # Caller holds _build_lock.
        locale = locale or self.config.default_locale
        if server_base_url is not None:
            self.service.server_base_url = server_base_url
        cached = self.service.get_cached_openapi(locale)
        if cached is not None and not self.config.cache_disabled:
            logger.debug("Fetching OpenAPI document from cache")
            self.service.update_servers(cached)
            return cached
        openapi = self._build(locale)
        self.service.set_cached_openapi(openapi, locale)
        return openapi

    def _build(self, locale: str) -> OpenAPI:
        start = time.monotonic()
        openapi = self.service.build(locale)
        if self.config.api_docs.version == OPENAPI_3_1:
            openapi.openapi = OPENAPI_3_1

        rest_controllers = {
            name: bean
            for name, bean in self.service.get_mappings_map().items()
            if not bean.hidden and not self.registry.is_hidden_rest_controller(bean)
        }
        if self.config.default_override_with_generic_response:
            advices: dict = dict(self.service.get_controller_advice_map())
            advices.update(rest_controllers)
            self.response_builder.build_generic_response(
                openapi.components, advices, locale, [self.config.default_produces_media_type]
            )

        self.get_paths(rest_controllers, locale, openapi)
        for provider in self.providers.additional_router_providers:
            router_operations = provider(openapi)
            if router_operations:
                self.operation_builder.calculate_router_operations(router_operations, locale, openapi)
        for provider in self.providers.data_rest_router_providers:
            for router_operation in provider(openapi) or []:
                if self.route_filter.is_filter_condition(
                    router_operation.path, router_operation.produces, router_operation.consumes, router_operation.headers
                ):
                    self.operation_builder.calculate_model_path(router_operation, locale, openapi)

        self.service.servers_present = bool(openapi.servers)
        self.service.update_servers(openapi)
        if self.config.remove_broken_reference_definitions:
            remove_broken_reference_definitions(openapi)

        servers_snapshot = _snapshot_servers(openapi.servers)
        for locale_customizer in self.customizers.locale_customizers:
            openapi = locale_customizer(openapi, locale) or openapi
        for customizer in self.customizers.openapi_customizers:
            openapi = customizer(openapi) or openapi
        if servers_snapshot is not None and openapi.servers and openapi.servers != servers_snapshot:
            self.service.servers_present = True

        logger.info("Init duration for OpenAPI document is: %d ms", (time.monotonic() - start) * 1000)
        return openapi

    def get_paths(self, rest_controllers: dict[str, Bean], locale: str, openapi: OpenAPI) -> None:
        candidates = sorted(
            self.discovery.route_candidates(), key=lambda c: c.patterns[0] if c.patterns else "", reverse=True
        )
        for candidate in candidates:
            handler = candidate.handler
            for pattern in candidate.patterns:
                operation_path = parse_path(pattern)
                if (
                    self.is_rest_controller(rest_controllers, handler, operation_path)
                    and self.route_filter.is_filter_condition(
                        operation_path, candidate.produces, candidate.consumes, candidate.headers, handler
                    )
                ) or self.is_actuator_rest_controller(operation_path, handler):
                    router_operation = RouterOperation.from_route(
                        operation_path,
                        sort_methods(candidate.methods or DEFAULT_ALLOWED_METHODS),
                        candidate.consumes,
                        candidate.produces,
                        candidate.headers,
                        candidate.params,
                    )
                    self.operation_builder.calculate_path(handler, router_operation, locale, openapi)

        for router in self.discovery.router_functions():
            self.operation_builder.calculate_router_operations(router_function_operations(router), locale, openapi)

    def is_rest_controller(self, rest_controllers: dict[str, Bean], handler: HandlerMethod, operation_path: str) -> bool:
        documented = handler.response_body or handler.bean.response_body or handler.operation is not None
        return (
            (documented and handler.bean.name in rest_controllers)
            or self.registry.is_additional_rest_controller(handler.bean)
        ) and (
            operation_path.startswith("/")
            and (self.config.model_and_view_allowed or not handler.returns_model_and_view)
        )

    def is_actuator_rest_controller(self, operation_path: str, handler: HandlerMethod) -> bool:
        provider = self.providers.actuator_provider
        return (
            self.config.show_actuator
            and provider is not None
            and provider.is_rest_controller(operation_path, handler)
            and not handler.returns_model_and_view
        )

    def get_actuator_uri(self, scheme: str, host: str) -> str | None:
        """Base URI of the actuator group, or of the application for other groups."""
        provider = self.providers.actuator_provider
        if provider is None:
            return None
        if self.group_name == ACTUATOR_DEFAULT_GROUP:
            port, path = provider.actuator_port, provider.actuator_path
        else:
            port, path = provider.application_port, provider.context_path + provider.servlet_path
        try:
            uri = urlunsplit((scheme, f"{host}:{port}", path, "", ""))
            urlsplit(uri).port
        except ValueError as e:
            logger.error("Unable to build the actuator URI for %s://%s:%s%s: %s", scheme, host, port, path, e)
            return None
        return uri

    def invalidate(self, locale: str | None = None) -> None:
        """Drop the cached document of ``locale``, or every cached document."""
        with OpenApiResource._build_lock:
            self.service.evict(locale)

    def open_api_json(self, locale: str | None = None, server_base_url: str | None = None) -> bytes:
        """Serialize while holding the build lock; the cached document's servers are request-relative."""
        with OpenApiResource._build_lock:
            openapi = self._locked_openapi(locale, server_base_url)
            return write_json_value(openapi, self.config)

    def open_api_yaml(self, locale: str | None = None, server_base_url: str | None = None) -> bytes:
        with OpenApiResource._build_lock:
            openapi = self._locked_openapi(locale, server_base_url)
            return write_yaml_value(openapi, self.config)

    @property
    def ready(self) -> bool:
        """Whether a preload finished successfully."""
        future = self.preload_future
        return future is not None and future.done() and not future.cancelled() and future.exception() is None

    def cancel_preload(self) -> bool:
        return self.preload_future is not None and self.preload_future.cancel()

    def _start_preload(self) -> None:
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="openapi-preload")
        self.preload_future = executor.submit(self.get_openapi)
        self.preload_future.add_done_callback(_log_preload_failure)
        executor.shutdown(wait=False)

    @staticmethod
    def add_rest_controllers(*classes) -> None:
        default_registry.add_rest_controllers(*classes)

    @staticmethod
    def add_hidden_rest_controllers(*classes) -> None:
        default_registry.add_hidden_rest_controllers(*classes)


def _snapshot_servers(servers: list[Server] | None) -> list[Server] | None:
    """A detached copy of the server list, or ``None`` when it cannot be copied."""
    try:
        payload = json.dumps([server.to_dict() for server in servers or []])
        return [Server.model_validate(item) for item in json.loads(payload)]
    except (TypeError, ValueError) as e:
        logger.warning("Unable to snapshot the server list: %s", e)
        return None


def _log_preload_failure(future: Future) -> None:
    if future.cancelled():
        return
    error = future.exception()
    if error is not None:
        logger.error("Preloading of the OpenAPI document failed", exc_info=error)
