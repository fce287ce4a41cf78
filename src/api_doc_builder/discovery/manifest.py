"""Application manifest loader.

A manifest describes an application's handlers as data::

    beans:
      - name: orderController
        type_name: shop.orders.OrderController
        handlers:
          - name: get_order
            return_type: Order
            mappings:
              - patterns: [/orders/{id}]
                methods: [GET]
    advices: [...]
    routers: [...]
    schemas:
      Order: {type: object, properties: {...}}

Handlers without ``mappings`` are only reachable from router declarations.
"""

from pathlib import Path

import yaml
from pydantic import ValidationError

from api_doc_builder.discovery.base import StaticDiscovery
from api_doc_builder.errors import ManifestError
from api_doc_builder.models.route import (
    Bean,
    ControllerAdvice,
    HandlerMethod,
    RouteCandidate,
    RouterFunctionBean,
)


def load_manifest(file_path: Path) -> StaticDiscovery:
    """Read a YAML/JSON manifest into a ``StaticDiscovery``."""
    try:
        data = yaml.safe_load(file_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ManifestError(f"{file_path}: invalid YAML: {e}") from e
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ManifestError(f"{file_path}: expected a mapping at the top level")

    try:
        return parse_manifest(data)
    except (ValidationError, KeyError, TypeError) as e:
        raise ManifestError(f"{file_path}: {e}") from e


def parse_manifest(data: dict) -> StaticDiscovery:
    candidates = []
    handlers = []
    for raw_bean in data.get("beans", []):
        raw_bean = dict(raw_bean)
        raw_handlers = raw_bean.pop("handlers", [])
        bean = Bean(**raw_bean)
        for raw_handler in raw_handlers:
            raw_handler = dict(raw_handler)
            mappings = raw_handler.pop("mappings", [])
            handler = HandlerMethod(bean=bean, **raw_handler)
            if not mappings:
                handlers.append(handler)
            for mapping in mappings:
                candidates.append(RouteCandidate(handler=handler, **mapping))

    advices = [ControllerAdvice(**raw) for raw in data.get("advices", [])]
    routers = [RouterFunctionBean(**raw) for raw in data.get("routers", [])]
    schemas = data.get("schemas") or {}
    if not isinstance(schemas, dict):
        raise ManifestError("schemas must be a mapping of name to JSON Schema")
    return StaticDiscovery(candidates, handlers, advices, routers, schemas)
