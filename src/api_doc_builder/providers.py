"""Optional route sources beyond annotated handlers."""

from collections.abc import Callable

from pydantic import BaseModel

from api_doc_builder.models.openapi import OpenAPI
from api_doc_builder.models.route import HandlerMethod, RouterOperation

RouterOperationProvider = Callable[[OpenAPI], list[RouterOperation]]


class ActuatorProvider(BaseModel):
    """Management endpoints exposed next to the application."""

    base_path: str = "/actuator"
    actuator_port: int = 8080
    application_port: int = 8080
    context_path: str = ""
    servlet_path: str = ""

    @property
    def actuator_path(self) -> str:
        return self.context_path + self.base_path

    def is_rest_controller(self, operation_path: str, handler: HandlerMethod) -> bool:
        return operation_path.startswith(self.base_path)


class Providers(BaseModel):
    actuator_provider: ActuatorProvider | None = None
    additional_router_providers: list[RouterOperationProvider] = []
    data_rest_router_providers: list[RouterOperationProvider] = []
