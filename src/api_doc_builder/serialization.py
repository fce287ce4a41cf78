"""Document serialization."""

import json

import yaml

from api_doc_builder.config import DocConfig
from api_doc_builder.models.openapi import OpenAPI


def write_json_value(openapi: OpenAPI, config: DocConfig) -> bytes:
    data = openapi.to_dict()
    if config.writer_with_default_pretty_printer:
        text = json.dumps(data, indent=2, sort_keys=config.writer_with_order_by_keys, ensure_ascii=False)
    else:
        text = json.dumps(
            data, separators=(",", ":"), sort_keys=config.writer_with_order_by_keys, ensure_ascii=False
        )
    return text.encode("utf-8")


def write_yaml_value(openapi: OpenAPI, config: DocConfig) -> bytes:
    """YAML is always written in block style; pretty printing only affects JSON."""
    text = yaml.safe_dump(
        openapi.to_dict(),
        sort_keys=config.writer_with_order_by_keys,
        allow_unicode=True,
        default_flow_style=False,
    )
    return text.encode("utf-8")


def read_openapi(data: bytes | str) -> OpenAPI:
    """Parse a JSON or YAML document back into an ``OpenAPI`` model."""
    return OpenAPI.model_validate(yaml.safe_load(data))
