"""Route metadata models.

Discovery turns an application's handlers into these descriptors once; the
engine consumes them as plain data.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from api_doc_builder.models.openapi import Operation, Server

# Type references: a type name ("string", "list[Order]", "shop.models:Order"),
# an inline JSON Schema dict, a pydantic model class, or None for no content.
TypeRef = Any


class RequestMethod(str, Enum):
    """HTTP methods, in the framework's natural order."""

    GET = "GET"
    HEAD = "HEAD"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    OPTIONS = "OPTIONS"
    TRACE = "TRACE"


_METHOD_ORDER = {m: i for i, m in enumerate(RequestMethod)}


def sort_methods(methods) -> list[RequestMethod]:
    """De-duplicate and sort methods into natural order."""
    return sorted({RequestMethod(m) for m in methods}, key=_METHOD_ORDER.__getitem__)


class ParameterDoc(BaseModel):
    """A documented parameter."""

    name: str
    location: str = ""  # query / path / header / cookie; empty = unspecified
    description: str = ""
    required: bool | None = None
    deprecated: bool = False
    schema_: TypeRef = Field(default=None, alias="schema")
    example: Any = None
    ref: str = ""

    model_config = ConfigDict(populate_by_name=True)


class ResponseDoc(BaseModel):
    """A documented response; ``schema`` is rendered under every produced media type."""

    description: str = ""
    content: dict[str, TypeRef] = {}  # {media_type: type}
    schema_: TypeRef = Field(default=None, alias="schema")
    headers: dict[str, str] = {}  # {header_name: description}

    model_config = ConfigDict(populate_by_name=True)


class RequestBodyDoc(BaseModel):
    description: str = ""
    required: bool | None = None
    content: dict[str, TypeRef] = {}
    schema_: TypeRef = Field(default=None, alias="schema")

    model_config = ConfigDict(populate_by_name=True)


class OperationDoc(BaseModel):
    """Documentation attached to a handler or a router declaration."""

    operation_id: str = ""
    summary: str = ""
    description: str = ""
    tags: list[str] = []
    deprecated: bool = False
    hidden: bool = False
    ignore_json_view: bool = False
    parameters: list[ParameterDoc] = []
    responses: dict[str, ResponseDoc] = {}
    request_body: RequestBodyDoc | None = None
    security: list[dict[str, list[str]]] = []
    servers: list[Server] = []
    method: str = ""  # only meaningful inside a callback


class CallbackDoc(BaseModel):
    name: str
    callback_url_expression: str
    operations: list[OperationDoc] = []


class Bean(BaseModel):
    """The type owning a set of handler methods."""

    name: str
    type_name: str  # dotted qualified name, e.g. shop.orders.OrderController
    bases: list[str] = []
    rest_controller: bool = True
    response_body: bool = True
    hidden: bool = False
    consumes: list[str] = []  # class-level mapping
    produces: list[str] = []
    headers: list[str] = []
    tags: list[str] = []
    exception_handlers: dict[str, ResponseDoc] = {}

    @property
    def package(self) -> str | None:
        package, _, _ = self.type_name.rpartition(".")
        return package or None

    @property
    def simple_name(self) -> str:
        return self.type_name.rpartition(".")[2]

    @property
    def type_hierarchy(self) -> list[str]:
        return [self.type_name, *self.bases]

    @property
    def has_class_mapping(self) -> bool:
        return bool(self.consumes or self.produces or self.headers)


class HandlerParameter(BaseModel):
    name: str
    location: str = "query"  # path / query / header / cookie / body
    type: TypeRef = "string"
    required: bool | None = None
    description: str = ""
    default: Any = None
    json_view: str | None = None


class HandlerMethod(BaseModel):
    """One handler method of a bean."""

    bean: Bean
    name: str
    parameters: list[HandlerParameter] = []
    return_type: TypeRef = None
    response_status: str | None = None
    response_body: bool = False
    operation: OperationDoc | None = None
    request_body_doc: RequestBodyDoc | None = None
    callbacks: list[CallbackDoc] = []
    json_view: str | None = None
    hidden: bool = False
    deprecated: bool = False
    doc_comment: str = ""
    returns_model_and_view: bool = False
    consumes: list[str] = []  # method-level mapping
    produces: list[str] = []
    headers: list[str] = []

    @property
    def parameter_types(self) -> list[str]:
        return [str(p.type) for p in self.parameters]

    @property
    def qualified_name(self) -> str:
        return f"{self.bean.type_name}.{self.name}"


class RouteCandidate(BaseModel):
    """A discovered handler mapping: one handler, one or more path patterns."""

    handler: HandlerMethod
    patterns: list[str]
    methods: list[RequestMethod] = []
    consumes: list[str] = []
    produces: list[str] = []
    headers: list[str] = []
    params: list[str] = []  # key=value query conditions

    model_config = ConfigDict(frozen=True)


class RouterFunctionData(BaseModel):
    """A raw functional route as seen by the router visitor."""

    path: str
    methods: list[RequestMethod] = []
    consumes: list[str] = []
    produces: list[str] = []
    headers: list[str] = []
    query_params: dict[str, str | None] = {}
    operation_model: Operation | None = None


def parse_query_params(params: list[str]) -> dict[str, str | None]:
    """Turn ``key=value`` request conditions into query parameter defaults."""
    query_params: dict[str, str | None] = {}
    for param in params:
        if param.startswith("!"):
            continue
        key, sep, value = param.partition("=")
        if key.endswith("!"):
            continue
        query_params[key] = value if sep else None
    return query_params


class RouterOperation(BaseModel):
    """Operation metadata declared out of band, or derived from a route."""

    path: str = ""
    methods: list[RequestMethod] = []
    consumes: list[str] = []
    produces: list[str] = []
    headers: list[str] = []
    query_params: dict[str, str | None] = {}
    bean_class: str | None = None
    bean_method: str | None = None
    parameter_types: list[str] = []
    operation: OperationDoc | None = None
    operation_model: Operation | None = None

    def __lt__(self, other: "RouterOperation") -> bool:
        return self.sort_key() < other.sort_key()

    def sort_key(self) -> tuple[str, str]:
        return self.path, "".join(m.value for m in self.methods)

    @classmethod
    def from_route(cls, path: str, methods, consumes, produces, headers, params) -> "RouterOperation":
        return cls(
            path=path,
            methods=list(methods),
            consumes=list(consumes),
            produces=list(produces),
            headers=list(headers),
            query_params=parse_query_params(list(params)),
        )

    @classmethod
    def from_router_function_data(cls, data: RouterFunctionData) -> "RouterOperation":
        return cls(
            path=data.path,
            methods=list(data.methods),
            consumes=list(data.consumes),
            produces=list(data.produces),
            headers=list(data.headers),
            query_params=dict(data.query_params),
            operation_model=data.operation_model,
        )


class RouterFunctionBean(BaseModel):
    """A functional router: its raw routes and any declared operations."""

    name: str
    datas: list[RouterFunctionData] = []
    router_operations: list[RouterOperation] = []


class ControllerAdvice(BaseModel):
    """Global exception handlers contributing generic responses."""

    name: str
    exception_handlers: dict[str, ResponseDoc] = {}
