from api_doc_builder.engine.attributes import MethodAttributes
from api_doc_builder.models.openapi import Parameter
from api_doc_builder.models.route import Bean, HandlerMethod


def _handler(bean: Bean | None = None, **kwargs) -> HandlerMethod:
    bean = bean or Bean(name="orderController", type_name="shop.orders.OrderController")
    return HandlerMethod(bean=bean, name="handle", **kwargs)


class TestConsumesProduces:
    def test_defaults_when_nothing_declared(self):
        attrs = MethodAttributes("application/json", "*/*")
        attrs.calculate_consumes_produces(_handler())
        assert attrs.method_produces == ["*/*"]
        assert attrs.method_consumes == ["application/json"]

    def test_method_mapping(self):
        attrs = MethodAttributes("application/json", "*/*")
        attrs.calculate_consumes_produces(_handler(produces=["application/xml"]))
        assert attrs.method_produces == ["application/xml"]

    def test_class_mapping_when_method_silent(self):
        bean = Bean(name="c", type_name="shop.C", produces=["text/csv"])
        attrs = MethodAttributes("application/json", "*/*")
        attrs.set_class_mapping(bean)
        attrs.calculate_consumes_produces(_handler(bean))
        assert attrs.method_produces == ["text/csv"]
        assert attrs.method_consumes == ["application/json"]

    def test_route_values_win(self):
        attrs = MethodAttributes("application/json", "*/*", method_produces=["text/plain"])
        attrs.calculate_consumes_produces(_handler(produces=["application/xml"]))
        assert attrs.method_produces == ["text/plain"]

    def test_without_handler_uses_defaults(self):
        attrs = MethodAttributes("application/json", "*/*", method_consumes=["text/plain"])
        attrs.calculate_consumes_produces()
        assert attrs.method_consumes == ["text/plain"]
        assert attrs.method_produces == ["*/*"]


class TestHeaders:
    def test_header_expressions(self):
        attrs = MethodAttributes("application/json", "*/*", headers=["X-Version=2", "X-Debug!=true", "X-Trace"])
        assert attrs.headers == {"X-Version": "2", "X-Debug": "", "X-Trace": ""}

    def test_class_and_method_headers_union(self):
        bean = Bean(name="c", type_name="shop.C", headers=["X-Tenant"])
        attrs = MethodAttributes("application/json", "*/*", headers=["X-Version=2"])
        attrs.calculate_headers_for_class(bean)
        assert set(attrs.headers) == {"X-Tenant", "X-Version"}

    def test_header_parameters(self):
        attrs = MethodAttributes("application/json", "*/*", headers=["X-Version=2", "X-Trace"])
        parameters = {p.name: p for p in attrs.header_parameters()}
        assert parameters["X-Version"].in_ == "header"
        assert parameters["X-Version"].schema_ == {"type": "string", "enum": ["2"]}
        assert parameters["X-Trace"].schema_ == {"type": "string"}

    def test_header_value_merges_into_existing_enum(self):
        existing = Parameter(name="X-Version", in_="header", schema_={"type": "string", "enum": ["1"]})
        attrs = MethodAttributes("application/json", "*/*", headers=["X-Version=2"])
        parameters = attrs.header_parameters({"X-Version": existing})
        assert parameters == [existing]
        assert existing.schema_["enum"] == ["1", "2"]
