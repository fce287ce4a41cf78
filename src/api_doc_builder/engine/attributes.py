"""Per-handler resolved consumes/produces/headers."""

from api_doc_builder.models.openapi import Parameter
from api_doc_builder.models.route import Bean, HandlerMethod


class MethodAttributes:
    """Effective request attributes of one handler for one build pass.

    Precedence for consumes/produces: values declared on the route, then the
    method mapping, then the class mapping, then the global default. Headers
    from the class and the method are unioned.
    """

    def __init__(
        self,
        default_consumes_media_type: str,
        default_produces_media_type: str,
        method_consumes: list[str] | None = None,
        method_produces: list[str] | None = None,
        headers: list[str] | None = None,
        locale: str | None = None,
    ):
        self.default_consumes_media_type = default_consumes_media_type
        self.default_produces_media_type = default_produces_media_type
        self.method_consumes = list(method_consumes or [])
        self.method_produces = list(method_produces or [])
        self.class_consumes: list[str] = []
        self.class_produces: list[str] = []
        self.headers: dict[str, str] = {}
        self.locale = locale
        self.method_overloaded = False
        self.javadoc_return: str | None = None
        self.json_view: str | None = None
        self.json_view_for_request_body: str | None = None
        self._set_headers(headers)

    def set_class_mapping(self, bean: Bean) -> None:
        self.class_consumes = list(bean.consumes)
        self.class_produces = list(bean.produces)

    def calculate_headers_for_class(self, bean: Bean) -> None:
        if bean.has_class_mapping:
            self._set_headers(bean.headers)

    def calculate_consumes_produces(self, handler: HandlerMethod | None = None) -> None:
        if handler is None:
            self._fill(None, None, None)
        else:
            self._fill(handler.produces, handler.consumes, handler.headers)

    def _fill(self, produces: list[str] | None, consumes: list[str] | None, headers: list[str] | None) -> None:
        if not self.method_produces:
            if produces:
                self.method_produces = list(produces)
            elif self.class_produces:
                self.method_produces = list(self.class_produces)
            else:
                self.method_produces = [self.default_produces_media_type]
        if not self.method_consumes:
            if consumes:
                self.method_consumes = list(consumes)
            elif self.class_consumes:
                self.method_consumes = list(self.class_consumes)
            else:
                self.method_consumes = [self.default_consumes_media_type]
        self._set_headers(headers)

    def _set_headers(self, headers: list[str] | None) -> None:
        for header in headers or []:
            if "!=" in header:
                name = header.split("!=", 1)[0]
                self.headers.setdefault(name, "")
            else:
                name, _, value = header.partition("=")
                self.headers[name] = value

    def header_parameters(self, existing: dict[str, Parameter] | None = None) -> list[Parameter]:
        """Header parameters for the required headers, merged into ``existing`` by name."""
        parameters = dict(existing or {})
        for name, value in self.headers.items():
            if name in parameters:
                parameter = parameters[name]
                schema = parameter.schema_ if parameter.schema_ is not None else {"type": "string"}
                if value:
                    enum = schema.setdefault("enum", [])
                    if value not in enum:
                        enum.append(value)
                parameter.schema_ = schema
            else:
                schema = {"type": "string"}
                if value:
                    schema["enum"] = [value]
                parameter = Parameter(name=name, in_="header", schema_=schema)
            parameters[name] = parameter
        return list(parameters.values())
