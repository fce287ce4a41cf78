"""OpenAPI document models.

The assembled document is a tree of these models. Field names follow Python
conventions; the OpenAPI spelling is kept as the alias so that
``to_dict()`` produces a valid document.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class OpenApiModel(BaseModel):
    """Base for all document objects."""

    model_config = ConfigDict(populate_by_name=True)

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class HttpMethod(str, Enum):
    """Operation slots of a path item, in document order."""

    GET = "get"
    PUT = "put"
    POST = "post"
    DELETE = "delete"
    OPTIONS = "options"
    HEAD = "head"
    PATCH = "patch"
    TRACE = "trace"


_SLOTS = {m.value for m in HttpMethod}


class Contact(OpenApiModel):
    name: str | None = None
    url: str | None = None
    email: str | None = None


class License(OpenApiModel):
    name: str
    url: str | None = None


class Info(OpenApiModel):
    title: str = "OpenAPI definition"
    version: str = "v0"
    description: str | None = None
    terms_of_service: str | None = Field(default=None, alias="termsOfService")
    contact: Contact | None = None
    license: License | None = None


class Server(OpenApiModel):
    url: str
    description: str | None = None
    variables: dict[str, Any] | None = None


class ExternalDocs(OpenApiModel):
    url: str
    description: str | None = None


class Tag(OpenApiModel):
    name: str
    description: str | None = None
    external_docs: ExternalDocs | None = Field(default=None, alias="externalDocs")


class MediaType(OpenApiModel):
    schema_: dict[str, Any] | None = Field(default=None, alias="schema")
    example: Any = None
    examples: dict[str, Any] | None = None


class Header(OpenApiModel):
    description: str | None = None
    required: bool | None = None
    schema_: dict[str, Any] | None = Field(default=None, alias="schema")


class Parameter(OpenApiModel):
    """A single operation parameter; ``in_`` is one of path/query/header/cookie."""

    name: str | None = None
    in_: str | None = Field(default=None, alias="in")
    description: str | None = None
    required: bool | None = None
    deprecated: bool | None = None
    schema_: dict[str, Any] | None = Field(default=None, alias="schema")
    example: Any = None
    ref: str | None = Field(default=None, alias="$ref")


class RequestBody(OpenApiModel):
    description: str | None = None
    content: dict[str, MediaType] | None = None
    required: bool | None = None
    ref: str | None = Field(default=None, alias="$ref")

    def is_empty(self) -> bool:
        return not (self.description or self.content or self.required is not None or self.ref)


class ApiResponse(OpenApiModel):
    description: str | None = None
    headers: dict[str, Header] | None = None
    content: dict[str, MediaType] | None = None
    ref: str | None = Field(default=None, alias="$ref")


class Operation(OpenApiModel):
    """OpenAPI operation descriptor for one (path, HTTP method) pair."""

    tags: list[str] | None = None
    summary: str | None = None
    description: str | None = None
    external_docs: ExternalDocs | None = Field(default=None, alias="externalDocs")
    operation_id: str | None = Field(default=None, alias="operationId")
    parameters: list[Parameter] | None = None
    request_body: RequestBody | None = Field(default=None, alias="requestBody")
    responses: dict[str, ApiResponse] | None = None
    callbacks: dict[str, dict[str, "PathItem"]] | None = None
    deprecated: bool | None = None
    security: list[dict[str, list[str]]] | None = None
    servers: list[Server] | None = None

    def add_tag(self, tag: str) -> None:
        if self.tags is None:
            self.tags = []
        if tag not in self.tags:
            self.tags.append(tag)

    def add_parameter(self, parameter: Parameter) -> None:
        if self.parameters is None:
            self.parameters = []
        self.parameters.append(parameter)


class PathItem(OpenApiModel):
    """Operations of one literal path, keyed by HTTP method."""

    summary: str | None = None
    description: str | None = None
    get: Operation | None = None
    put: Operation | None = None
    post: Operation | None = None
    delete: Operation | None = None
    options: Operation | None = None
    head: Operation | None = None
    patch: Operation | None = None
    trace: Operation | None = None
    servers: list[Server] | None = None
    parameters: list[Parameter] | None = None

    def operations_map(self) -> dict[HttpMethod, Operation]:
        result = {}
        for method in HttpMethod:
            operation = getattr(self, method.value)
            if operation is not None:
                result[method] = operation
        return result

    def set_operation(self, method: str, operation: Operation | None) -> None:
        """Attach ``operation`` under ``method``; methods without a slot are ignored."""
        slot = str(getattr(method, "value", method)).lower()
        if slot in _SLOTS:
            setattr(self, slot, operation)


class Components(OpenApiModel):
    schemas: dict[str, dict[str, Any]] | None = None
    responses: dict[str, ApiResponse] | None = None
    parameters: dict[str, Parameter] | None = None
    request_bodies: dict[str, RequestBody] | None = Field(default=None, alias="requestBodies")
    headers: dict[str, Header] | None = None
    security_schemes: dict[str, dict[str, Any]] | None = Field(default=None, alias="securitySchemes")

    def add_schema(self, name: str, schema: dict[str, Any]) -> None:
        if self.schemas is None:
            self.schemas = {}
        self.schemas[name] = schema


class OpenAPI(OpenApiModel):
    """The whole document."""

    openapi: str = "3.0.1"
    info: Info = Field(default_factory=Info)
    external_docs: ExternalDocs | None = Field(default=None, alias="externalDocs")
    servers: list[Server] | None = None
    security: list[dict[str, list[str]]] | None = None
    tags: list[Tag] | None = None
    paths: dict[str, PathItem] = Field(default_factory=dict)
    components: Components = Field(default_factory=Components)

    def add_tag(self, tag: Tag) -> None:
        if self.tags is None:
            self.tags = []
        if all(t.name != tag.name for t in self.tags):
            self.tags.append(tag)


Operation.model_rebuild()
