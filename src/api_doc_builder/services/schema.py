"""Type references to JSON Schema.

Pydantic models are registered as component schemas and referenced with
``$ref``; primitive names map to inline schemas.
"""

import copy
import logging
import pkgutil
import re

from pydantic import BaseModel

from api_doc_builder.models.openapi import Components

logger = logging.getLogger(__name__)

REF_PREFIX = "#/components/schemas/"

PRIMITIVES = {
    "string": {"type": "string"},
    "str": {"type": "string"},
    "integer": {"type": "integer", "format": "int32"},
    "int": {"type": "integer", "format": "int32"},
    "long": {"type": "integer", "format": "int64"},
    "number": {"type": "number"},
    "float": {"type": "number", "format": "float"},
    "double": {"type": "number", "format": "double"},
    "boolean": {"type": "boolean"},
    "bool": {"type": "boolean"},
    "object": {"type": "object"},
    "dict": {"type": "object"},
    "date": {"type": "string", "format": "date"},
    "date-time": {"type": "string", "format": "date-time"},
    "datetime": {"type": "string", "format": "date-time"},
    "uuid": {"type": "string", "format": "uuid"},
    "binary": {"type": "string", "format": "binary"},
    "bytes": {"type": "string", "format": "binary"},
}

VOID_TYPES = {"void", "none", "None"}

_LIST_TYPE = re.compile(r"^(?:list|List|array)\[(.+)\]$|^(.+)\[\]$")


class SchemaResolver:
    """Resolves handler type references against registered models."""

    def __init__(self, models: dict[str, type[BaseModel]] | None = None):
        self.models = dict(models or {})
        self.schemas: dict[str, dict] = {}

    def register(self, model: type[BaseModel], name: str | None = None) -> None:
        self.models[name or model.__name__] = model

    def register_schema(self, name: str, schema: dict) -> None:
        """Register a named JSON Schema; it is added to the components when first referenced."""
        self.schemas[name] = schema

    def resolve(self, type_ref, components: Components, json_view: str | None = None) -> dict | None:
        """Return a schema for ``type_ref``, registering component schemas as a side effect."""
        if type_ref is None:
            return None
        if isinstance(type_ref, dict):
            return copy.deepcopy(type_ref)
        if isinstance(type_ref, type) and issubclass(type_ref, BaseModel):
            return self._resolve_model(type_ref, components, json_view)
        if not isinstance(type_ref, str):
            return self.resolve(getattr(type_ref, "__name__", str(type_ref)), components, json_view)

        name = type_ref.strip()
        if name in VOID_TYPES:
            return None
        list_match = _LIST_TYPE.match(name)
        if list_match:
            items = self.resolve(list_match.group(1) or list_match.group(2), components, json_view)
            return {"type": "array", "items": items or {"type": "object"}}
        if name in PRIMITIVES:
            return dict(PRIMITIVES[name])
        if name in self.models:
            return self._resolve_model(self.models[name], components, json_view)
        if name in self.schemas:
            components.add_schema(name, copy.deepcopy(self.schemas[name]))
            return {"$ref": REF_PREFIX + name}
        if ":" in name:
            try:
                target = pkgutil.resolve_name(name)
            except (ImportError, AttributeError, ValueError) as e:
                logger.warning("Unable to resolve type %s: %s", name, e)
            else:
                if isinstance(target, type) and issubclass(target, BaseModel):
                    return self._resolve_model(target, components, json_view)
        logger.warning("Unknown type %s, documented as a generic object", name)
        return {"type": "object"}

    def _resolve_model(self, model: type[BaseModel], components: Components, json_view: str | None) -> dict:
        schema = model.model_json_schema(ref_template=REF_PREFIX + "{model}")
        for def_name, definition in schema.pop("$defs", {}).items():
            components.add_schema(def_name, definition)
        for value in schema.get("properties", {}).values():
            value.pop("views", None)
        name = model.__name__
        if json_view:
            schema = _apply_view(model, schema, json_view)
            name = f"{name}_{json_view}"
        schema.pop("title", None)
        components.add_schema(name, schema)
        return {"$ref": REF_PREFIX + name}


def _apply_view(model: type[BaseModel], schema: dict, json_view: str) -> dict:
    """Keep the properties visible in ``json_view`` (fields without views are always visible)."""
    hidden = set()
    for field_name, field in model.model_fields.items():
        extra = field.json_schema_extra if isinstance(field.json_schema_extra, dict) else {}
        views = extra.get("views")
        if views and json_view not in views:
            hidden.add(field.alias or field_name)
    schema["properties"] = {k: v for k, v in schema.get("properties", {}).items() if k not in hidden}
    if "required" in schema:
        schema["required"] = [r for r in schema["required"] if r not in hidden]
        if not schema["required"]:
            del schema["required"]
    return schema
