import json
import logging
import threading
import time

from api_doc_builder.config import ACTUATOR_DEFAULT_GROUP, OPENAPI_3_1, ApiDocsConfig, DocConfig
from api_doc_builder.customizers import Customizers
from api_doc_builder.discovery.base import StaticDiscovery
from api_doc_builder.models.openapi import ApiResponse, Components, Info, MediaType, OpenAPI, Operation, Server
from api_doc_builder.models.route import (
    Bean,
    ControllerAdvice,
    HandlerMethod,
    HandlerParameter,
    RequestMethod,
    ResponseDoc,
    RouteCandidate,
    RouterFunctionBean,
    RouterFunctionData,
    RouterOperation,
)
from api_doc_builder.providers import ActuatorProvider, Providers
from api_doc_builder.registry import ControllerRegistry
from api_doc_builder.resource import OpenApiResource

ITEM_BEAN = Bean(name="itemController", type_name="shop.items.ItemController")


def _item_discovery(bean: Bean = ITEM_BEAN, **kwargs) -> StaticDiscovery:
    handler = HandlerMethod(
        bean=bean,
        name="get_item",
        parameters=[HandlerParameter(name="id", location="path", type="long")],
        return_type="string",
    )
    candidates = [RouteCandidate(handler=handler, patterns=["/items/{id}"], methods=[RequestMethod.GET])]
    return StaticDiscovery(candidates, **kwargs)


def _resource(config: DocConfig | None = None, discovery: StaticDiscovery | None = None, **kwargs) -> OpenApiResource:
    kwargs.setdefault("registry", ControllerRegistry())
    return OpenApiResource(config or DocConfig(), discovery or _item_discovery(), **kwargs)


class TestBuild:
    def test_handler_route_documented(self):
        openapi = _resource().get_openapi()
        operation = openapi.paths["/items/{id}"].get
        assert operation.parameters[0].in_ == "path"
        assert operation.responses["200"].description == "OK"
        assert openapi.info.title == "OpenAPI definition"
        assert openapi.openapi == "3.0.1"

    def test_openapi_3_1(self):
        config = DocConfig(api_docs=ApiDocsConfig(version=OPENAPI_3_1))
        assert _resource(config).get_openapi().openapi == "3.1.0"

    def test_mapping_without_methods_documents_all_but_trace(self):
        handler = HandlerMethod(bean=ITEM_BEAN, name="any")
        discovery = StaticDiscovery([RouteCandidate(handler=handler, patterns=["/any"])])
        item = _resource(discovery=discovery).get_openapi().paths["/any"]
        assert item.get is not None
        assert item.options is not None
        assert item.trace is None

    def test_path_regex_stripped(self):
        handler = HandlerMethod(bean=ITEM_BEAN, name="get", parameters=[HandlerParameter(name="id", location="path")])
        discovery = StaticDiscovery([RouteCandidate(handler=handler, patterns=[r"/items/{id:\d+}"], methods=["GET"])])
        assert list(_resource(discovery=discovery).get_openapi().paths) == ["/items/{id}"]

    def test_generic_responses_from_advices(self):
        advice = ControllerAdvice(name="errors", exception_handlers={"500": ResponseDoc(description="Boom")})
        openapi = _resource(discovery=_item_discovery(advices=[advice])).get_openapi()
        assert openapi.paths["/items/{id}"].get.responses["500"].description == "Boom"

    def test_generic_responses_disabled(self):
        advice = ControllerAdvice(name="errors", exception_handlers={"500": ResponseDoc(description="Boom")})
        config = DocConfig(default_override_with_generic_response=False)
        openapi = _resource(config, _item_discovery(advices=[advice])).get_openapi()
        assert "500" not in openapi.paths["/items/{id}"].get.responses

    def test_router_functions(self):
        pet_bean = Bean(name="petHandler", type_name="shop.pets.PetHandler", rest_controller=False)
        handler = HandlerMethod(bean=pet_bean, name="list_pets", return_type="list[string]")
        router = RouterFunctionBean(
            name="petRoutes",
            datas=[RouterFunctionData(path="/pets", methods=[RequestMethod.GET])],
            router_operations=[RouterOperation(bean_class="shop.pets.PetHandler", bean_method="list_pets")],
        )
        discovery = StaticDiscovery(handlers=[handler], routers=[router])
        operation = _resource(discovery=discovery).get_openapi().paths["/pets"].get
        assert operation.tags == ["pet-handler"]

    def test_router_providers(self):
        def additional(openapi):
            return [RouterOperation(path="/fn", methods=[RequestMethod.POST], operation_model=Operation(operation_id="fn"))]

        def data_rest(openapi):
            return [RouterOperation(path="/repo", methods=[RequestMethod.GET], operation_model=Operation(operation_id="repo"))]

        providers = Providers(additional_router_providers=[additional], data_rest_router_providers=[data_rest])
        paths = _resource(providers=providers).get_openapi().paths
        assert paths["/fn"].post.operation_id == "fn"
        assert paths["/repo"].get.operation_id == "repo"

    def test_broken_references_removed(self):
        base = OpenAPI(components=Components(schemas={"Orphan": {"type": "object"}, "Item": {"type": "object"}}))
        item_ref = MediaType(schema_={"$ref": "#/components/schemas/Item"})

        def provider(openapi):
            responses = {"200": ApiResponse(description="OK", content={"application/json": item_ref})}
            operation = Operation(operation_id="x", responses=responses)
            return [RouterOperation(path="/x", methods=[RequestMethod.GET], operation_model=operation)]

        providers = Providers(additional_router_providers=[provider])
        openapi = _resource(providers=providers, base_openapi=base).get_openapi()
        assert set(openapi.components.schemas) == {"Item"}

    def test_locale_customizers_run_before_generic(self):
        calls = []

        def by_locale(openapi, locale):
            calls.append(("locale", locale))

        def generic(openapi):
            calls.append(("generic", None))
            return openapi

        customizers = Customizers(locale_customizers=[by_locale], openapi_customizers=[generic])
        _resource(customizers=customizers).get_openapi("fr")
        assert calls == [("locale", "fr"), ("generic", None)]


class TestCache:
    def test_cached_per_locale(self):
        resource = _resource()
        first = resource.get_openapi()
        assert resource.get_openapi() is first
        assert resource.get_openapi("en") is first
        assert resource.get_openapi("fr") is not first

    def test_idempotent_structure(self):
        resource = _resource(DocConfig(cache_disabled=True))
        first = resource.get_openapi()
        second = resource.get_openapi()
        assert first is not second
        assert first.to_dict() == second.to_dict()

    def test_invalidate(self):
        resource = _resource()
        first = resource.get_openapi()
        resource.invalidate()
        assert resource.get_openapi() is not first

    def test_localised_texts(self):
        config = DocConfig(info=Info(title="shop.title"), messages={"fr": {"shop.title": "Boutique"}})
        resource = _resource(config)
        assert resource.get_openapi("fr-CA").info.title == "Boutique"
        assert resource.get_openapi("en").info.title == "shop.title"

    def test_cache_hit_logged(self, caplog):
        resource = _resource()
        resource.get_openapi()
        with caplog.at_level(logging.DEBUG, logger="api_doc_builder.resource"):
            resource.get_openapi()
        assert "from cache" in caplog.text

    def test_concurrent_calls_share_cached_document(self):
        resource = _resource()
        results = []
        threads = [threading.Thread(target=lambda: results.append(resource.get_openapi())) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert all(r is results[0] for r in results)

    def test_builds_never_overlap_across_locales_and_resources(self):
        events = []

        def slow_locale_customizer(openapi, locale):
            events.append("enter")
            time.sleep(0.05)
            events.append("exit")

        customizers = Customizers(locale_customizers=[slow_locale_customizer])
        first = _resource(customizers=customizers)
        second = _resource(group_name="internal", customizers=customizers)
        calls = [(first, "en"), (first, "fr"), (second, "en"), (second, "de")]
        threads = [threading.Thread(target=resource.get_openapi, args=(locale,)) for resource, locale in calls]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert events == ["enter", "exit"] * 4


class TestServers:
    def test_generated_server(self):
        resource = _resource()
        resource.open_api_json(server_base_url="http://localhost:8080")
        openapi = resource.get_openapi()
        assert openapi.servers == [Server(url="http://localhost:8080", description="Generated server url")]
        assert resource.service.servers_present is False

    def test_configured_servers_kept(self):
        resource = _resource(DocConfig(servers=[Server(url="https://api.example.com")]))
        resource.open_api_json(server_base_url="http://localhost:8080")
        assert resource.get_openapi().servers == [Server(url="https://api.example.com")]
        assert resource.service.servers_present is True

    def test_customizer_change_detected(self):
        def set_servers(openapi):
            openapi.servers = [Server(url="https://edge.example.com")]
            return openapi

        resource = _resource(customizers=Customizers(openapi_customizers=[set_servers]))
        resource.open_api_json(server_base_url="http://localhost:8080")
        assert resource.service.servers_present is True
        resource.open_api_json(server_base_url="http://other:9090")
        assert resource.get_openapi().servers == [Server(url="https://edge.example.com")]

    def test_warm_path_updates_servers(self):
        resource = _resource()
        resource.open_api_json(server_base_url="http://a")
        resource.open_api_json(server_base_url="http://b")
        assert resource.get_openapi().servers[0].url == "http://b"

    def test_overlapping_requests_keep_their_own_server(self):
        resource = _resource()
        resource.get_openapi()
        outputs = {}

        def request(url):
            outputs[url] = json.loads(resource.open_api_json(server_base_url=url))

        threads = [threading.Thread(target=request, args=(url,)) for url in ("http://a", "http://b")]
        with OpenApiResource._build_lock:
            for t in threads:
                t.start()
            time.sleep(0.05)
        for t in threads:
            t.join()
        assert outputs["http://a"]["servers"][0]["url"] == "http://a"
        assert outputs["http://b"]["servers"][0]["url"] == "http://b"

    def test_yaml_request_uses_its_server(self):
        resource = _resource()
        resource.open_api_json(server_base_url="http://a")
        assert b"http://b" in resource.open_api_yaml(server_base_url="http://b")


class TestControllers:
    def test_hidden_by_registry(self):
        registry = ControllerRegistry()
        registry.add_hidden_rest_controllers("shop.items.ItemController")
        assert _resource(registry=registry).get_openapi().paths == {}

    def test_hidden_bean(self):
        bean = Bean(name="itemController", type_name="shop.items.ItemController", hidden=True)
        assert _resource(discovery=_item_discovery(bean)).get_openapi().paths == {}

    def test_additional_controller(self):
        bean = Bean(name="itemController", type_name="shop.items.ItemController", rest_controller=False)
        assert _resource(discovery=_item_discovery(bean)).get_openapi().paths == {}

        registry = ControllerRegistry()
        registry.add_rest_controllers("shop.items.ItemController")
        assert "/items/{id}" in _resource(discovery=_item_discovery(bean), registry=registry).get_openapi().paths

    def test_model_and_view_excluded_by_default(self):
        handler = HandlerMethod(bean=ITEM_BEAN, name="page", returns_model_and_view=True)
        discovery = StaticDiscovery([RouteCandidate(handler=handler, patterns=["/page"], methods=["GET"])])
        assert _resource(discovery=discovery).get_openapi().paths == {}
        allowed = _resource(DocConfig(model_and_view_allowed=True), discovery)
        assert "/page" in allowed.get_openapi().paths

    def test_actuator_routes(self):
        bean = Bean(name="healthEndpoint", type_name="ops.Health", rest_controller=False)
        handler = HandlerMethod(bean=bean, name="health")
        discovery = StaticDiscovery([RouteCandidate(handler=handler, patterns=["/actuator/health"], methods=["GET"])])
        providers = Providers(actuator_provider=ActuatorProvider())
        assert _resource(discovery=discovery, providers=providers).get_openapi().paths == {}
        shown = _resource(DocConfig(show_actuator=True), discovery, providers=providers)
        assert "/actuator/health" in shown.get_openapi().paths


class TestActuatorUri:
    def test_actuator_group(self):
        providers = Providers(actuator_provider=ActuatorProvider(actuator_port=9090))
        resource = _resource(group_name=ACTUATOR_DEFAULT_GROUP, providers=providers)
        assert resource.get_actuator_uri("http", "localhost") == "http://localhost:9090/actuator"

    def test_application_group(self):
        providers = Providers(actuator_provider=ActuatorProvider(context_path="/shop"))
        assert _resource(providers=providers).get_actuator_uri("https", "example.com") == "https://example.com:8080/shop"

    def test_malformed_uri_logged(self, caplog):
        providers = Providers(actuator_provider=ActuatorProvider(application_port=70000))
        with caplog.at_level(logging.ERROR):
            assert _resource(providers=providers).get_actuator_uri("http", "localhost") is None
        assert "actuator URI" in caplog.text

    def test_no_provider(self):
        assert _resource().get_actuator_uri("http", "localhost") is None


class TestPreload:
    def test_preload_fills_cache(self):
        resource = _resource(DocConfig(pre_loading_enabled=True))
        openapi = resource.preload_future.result(timeout=10)
        assert resource.ready
        assert resource.get_openapi() is openapi

    def test_preload_failure_logged(self, caplog):
        def broken(openapi):
            raise RuntimeError("boom")

        with caplog.at_level(logging.ERROR):
            resource = _resource(DocConfig(pre_loading_enabled=True), customizers=Customizers(openapi_customizers=[broken]))
            assert isinstance(resource.preload_future.exception(timeout=10), RuntimeError)
            # Done callbacks run after waiters are woken.
            deadline = time.monotonic() + 5
            while "Preloading" not in caplog.text and time.monotonic() < deadline:
                time.sleep(0.01)
        assert not resource.ready
        assert "Preloading of the OpenAPI document failed" in caplog.text

    def test_no_preload_by_default(self):
        resource = _resource()
        assert resource.preload_future is None
        assert not resource.ready
        assert resource.cancel_preload() is False
