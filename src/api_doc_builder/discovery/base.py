"""Route discovery contract and an in-memory implementation."""

from typing import Protocol

from api_doc_builder.models.route import (
    Bean,
    ControllerAdvice,
    HandlerMethod,
    RouteCandidate,
    RouterFunctionBean,
)


class RouteDiscovery(Protocol):
    """What the builder needs to know about an application's routes."""

    def route_candidates(self) -> list[RouteCandidate]: ...

    def rest_controllers(self) -> list[Bean]: ...

    def controller_advices(self) -> list[ControllerAdvice]: ...

    def router_functions(self) -> list[RouterFunctionBean]: ...

    def handler_methods(self, bean_class: str) -> list[HandlerMethod]: ...


class StaticDiscovery:
    """Discovery over descriptors known up front.

    ``handlers`` lists handler methods that are not mapped to a route
    themselves, such as the targets of functional router declarations.
    """

    def __init__(
        self,
        candidates: list[RouteCandidate] | None = None,
        handlers: list[HandlerMethod] | None = None,
        advices: list[ControllerAdvice] | None = None,
        routers: list[RouterFunctionBean] | None = None,
        schemas: dict[str, dict] | None = None,
    ):
        self.candidates = list(candidates or [])
        self.handlers = list(handlers or [])
        self.advices = list(advices or [])
        self.routers = list(routers or [])
        self.schemas = dict(schemas or {})

    def route_candidates(self) -> list[RouteCandidate]:
        return list(self.candidates)

    def rest_controllers(self) -> list[Bean]:
        beans: dict[str, Bean] = {}
        for handler in self._all_handlers():
            if handler.bean.rest_controller:
                beans.setdefault(handler.bean.name, handler.bean)
        return list(beans.values())

    def controller_advices(self) -> list[ControllerAdvice]:
        return list(self.advices)

    def router_functions(self) -> list[RouterFunctionBean]:
        return list(self.routers)

    def handler_methods(self, bean_class: str) -> list[HandlerMethod]:
        return [h for h in self._all_handlers() if bean_class in (h.bean.type_name, h.bean.name)]

    def _all_handlers(self) -> list[HandlerMethod]:
        handlers = [candidate.handler for candidate in self.candidates]
        handlers.extend(h for h in self.handlers if all(h is not other for other in handlers))
        return handlers
