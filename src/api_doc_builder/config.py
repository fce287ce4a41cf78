"""Document generation settings.

Settings come from a YAML (or JSON) file. Every list left empty at the top
level falls back to the active group's list, see ``engine/filters.py``.
"""

from pathlib import Path

import yaml
from pydantic import BaseModel

from api_doc_builder.models.openapi import Info, Server

DEFAULT_GROUP = "default"
ACTUATOR_DEFAULT_GROUP = "x-actuator"

OPENAPI_3_0 = "3.0.1"
OPENAPI_3_1 = "3.1.0"


class GroupConfig(BaseModel):
    """Named override bundle for one document group."""

    group: str
    display_name: str = ""
    packages_to_scan: list[str] = []
    packages_to_exclude: list[str] = []
    paths_to_match: list[str] = []
    paths_to_exclude: list[str] = []
    produces_to_match: list[str] = []
    consumes_to_match: list[str] = []
    headers_to_match: list[str] = []


class ApiDocsConfig(BaseModel):
    path: str = "/v3/api-docs"
    version: str = OPENAPI_3_0


class DocConfig(BaseModel):
    packages_to_scan: list[str] = []
    packages_to_exclude: list[str] = []
    paths_to_match: list[str] = []
    paths_to_exclude: list[str] = []
    produces_to_match: list[str] = []
    consumes_to_match: list[str] = []
    headers_to_match: list[str] = []
    group_configs: list[GroupConfig] = []

    default_consumes_media_type: str = "application/json"
    default_produces_media_type: str = "*/*"

    cache_disabled: bool = False
    pre_loading_enabled: bool = False
    remove_broken_reference_definitions: bool = True
    writer_with_order_by_keys: bool = False
    writer_with_default_pretty_printer: bool = False
    default_override_with_generic_response: bool = True
    model_and_view_allowed: bool = False
    show_actuator: bool = False
    auto_tag_classes: bool = True

    api_docs: ApiDocsConfig = ApiDocsConfig()
    info: Info = Info()
    servers: list[Server] = []

    default_locale: str = "en"
    messages: dict[str, dict[str, str]] = {}  # {locale: {key: text}}

    def group_config(self, group_name: str) -> GroupConfig | None:
        """Return the override bundle for ``group_name``, if one is configured."""
        for group_config in self.group_configs:
            if group_config.group == group_name:
                return group_config
        return None


def load_config(file_path: Path | None) -> DocConfig:
    """Load settings from a YAML/JSON file; ``None`` or an empty file gives defaults."""
    if file_path is None:
        return DocConfig()
    data = yaml.safe_load(file_path.read_text(encoding="utf-8"))
    return DocConfig(**(data or {}))
