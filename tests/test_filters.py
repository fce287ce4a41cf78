from api_doc_builder.config import DEFAULT_GROUP, DocConfig, GroupConfig
from api_doc_builder.engine import pathmatch
from api_doc_builder.engine.filters import ConditionType, RouteFilter
from api_doc_builder.models.route import Bean, HandlerMethod


def _handler(type_name: str = "shop.orders.OrderController") -> HandlerMethod:
    return HandlerMethod(bean=Bean(name="controller", type_name=type_name), name="handle")


class TestPathMatch:
    def test_double_star_matches_any_depth(self):
        assert pathmatch.match("/admin/**", "/admin/users")
        assert pathmatch.match("/admin/**", "/admin/users/1/roles")
        assert pathmatch.match("/admin/**", "/admin")
        assert not pathmatch.match("/admin/**", "/orders")

    def test_single_star_and_question_mark(self):
        assert pathmatch.match("/api/*/items", "/api/v1/items")
        assert not pathmatch.match("/api/*/items", "/api/v1/v2/items")
        assert pathmatch.match("/a?c", "/abc")

    def test_path_variables(self):
        assert pathmatch.match("/items/{id}", "/items/12")
        assert pathmatch.match(r"/items/{id:\d+}", "/items/12")
        assert not pathmatch.match(r"/items/{id:\d+}", "/items/ab")

    def test_leading_separator_must_agree(self):
        assert not pathmatch.match("/items", "items")

    def test_parse_path_strips_regex(self):
        assert pathmatch.parse_path(r"/items/{id:\d+}/lines/{line}") == "/items/{id}/lines/{line}"


class TestPackageFilter:
    def test_no_lists_includes_everything(self):
        assert RouteFilter(DocConfig(), DEFAULT_GROUP).is_package_to_scan("shop.orders")

    def test_scan_uses_dot_boundary(self):
        route_filter = RouteFilter(DocConfig(packages_to_scan=["shop.orders"]), DEFAULT_GROUP)
        assert route_filter.is_package_to_scan("shop.orders")
        assert route_filter.is_package_to_scan("shop.orders.api")
        assert not route_filter.is_package_to_scan("shop.ordersx")

    def test_exclusion_wins(self):
        config = DocConfig(packages_to_scan=["shop"], packages_to_exclude=["shop.internal"])
        route_filter = RouteFilter(config, DEFAULT_GROUP)
        assert route_filter.is_package_to_scan("shop.orders")
        assert not route_filter.is_package_to_scan("shop.internal.jobs")

    def test_group_list_applies_when_global_empty(self):
        config = DocConfig(group_configs=[GroupConfig(group="orders", packages_to_scan=["shop.orders"])])
        assert not RouteFilter(config, "orders").is_package_to_scan("shop.pets")
        assert RouteFilter(config, DEFAULT_GROUP).is_package_to_scan("shop.pets")


class TestPathFilter:
    def test_group_excludes_admin_only_for_that_group(self):
        config = DocConfig(group_configs=[GroupConfig(group="internal", paths_to_exclude=["/admin/**"])])
        assert not RouteFilter(config, "internal").is_path_to_match("/admin/users")
        assert RouteFilter(config, DEFAULT_GROUP).is_path_to_match("/admin/users")

    def test_paths_to_match(self):
        route_filter = RouteFilter(DocConfig(paths_to_match=["/orders/**"]), DEFAULT_GROUP)
        assert route_filter.is_path_to_match("/orders/1")
        assert not route_filter.is_path_to_match("/pets")


class TestConditionFilter:
    def test_unconfigured_passes(self):
        assert RouteFilter(DocConfig(), DEFAULT_GROUP).is_condition_to_match([], ConditionType.PRODUCES)

    def test_order_independent_equality(self):
        route_filter = RouteFilter(DocConfig(produces_to_match=["b", "a"]), DEFAULT_GROUP)
        assert route_filter.is_condition_to_match(["a", "b"], ConditionType.PRODUCES)

    def test_larger_configured_set_excludes(self):
        route_filter = RouteFilter(DocConfig(produces_to_match=["a", "b", "c"]), DEFAULT_GROUP)
        assert not route_filter.is_condition_to_match(["a", "b"], ConditionType.PRODUCES)

    def test_empty_declared_values_excluded(self):
        route_filter = RouteFilter(DocConfig(consumes_to_match=["application/json"]), DEFAULT_GROUP)
        assert not route_filter.is_condition_to_match([], ConditionType.CONSUMES)


class TestFilterCondition:
    def test_method_filters_are_anded(self):
        route_filter = RouteFilter(DocConfig(), DEFAULT_GROUP, [lambda h: True, lambda h: h.name != "handle"])
        assert not route_filter.is_filter_condition("/orders", [], [], [], _handler())

    def test_package_checked_with_handler(self):
        route_filter = RouteFilter(DocConfig(packages_to_exclude=["shop.orders"]), DEFAULT_GROUP)
        assert not route_filter.is_filter_condition("/orders", [], [], [], _handler())
        assert route_filter.is_filter_condition("/orders", [], [], [])

    def test_headers_condition(self):
        route_filter = RouteFilter(DocConfig(headers_to_match=["X-Api=1"]), DEFAULT_GROUP)
        assert route_filter.is_filter_condition("/orders", [], [], ["X-Api=1"])
        assert not route_filter.is_filter_condition("/orders", [], [], [])
