"""Pruning of component schemas nothing refers to."""

from api_doc_builder.models.openapi import OpenAPI
from api_doc_builder.services.schema import REF_PREFIX


def remove_broken_reference_definitions(openapi: OpenAPI) -> None:
    """Keep only the component schemas reachable from paths and other components."""
    components = openapi.components
    if not components.schemas:
        return

    roots = [item.to_dict() for item in openapi.paths.values()]
    for section in (components.responses, components.parameters, components.request_bodies, components.headers):
        roots.extend(value.to_dict() for value in (section or {}).values())

    referenced: set[str] = set()
    for root in roots:
        _collect_refs(root, referenced)

    pending = list(referenced)
    while pending:
        schema = components.schemas.get(pending.pop())
        if schema is None:
            continue
        found: set[str] = set()
        _collect_refs(schema, found)
        for name in found - referenced:
            referenced.add(name)
            pending.append(name)

    components.schemas = {name: s for name, s in components.schemas.items() if name in referenced} or None


def _collect_refs(node, refs: set[str]) -> None:
    if isinstance(node, dict):
        for key, value in node.items():
            if key == "$ref" and isinstance(value, str) and value.startswith(REF_PREFIX):
                refs.add(value[len(REF_PREFIX):])
            else:
                _collect_refs(value, refs)
    elif isinstance(node, list):
        for item in node:
            _collect_refs(item, refs)
