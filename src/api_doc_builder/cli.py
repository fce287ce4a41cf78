"""CLI entry point for api-doc-builder."""

import logging
from pathlib import Path

import click

from api_doc_builder.config import DEFAULT_GROUP, load_config
from api_doc_builder.discovery.manifest import load_manifest
from api_doc_builder.errors import ManifestError
from api_doc_builder.resource import OpenApiResource
from api_doc_builder.services.schema import SchemaResolver


def _build_resource(manifest_path: Path, config_path: Path | None, group: str) -> OpenApiResource:
    """Load settings and the manifest, and wire a resource for ``group``."""
    config = load_config(config_path)
    try:
        discovery = load_manifest(manifest_path)
    except ManifestError as e:
        raise click.ClickException(str(e)) from e

    schema_resolver = SchemaResolver()
    for name, schema in discovery.schemas.items():
        schema_resolver.register_schema(name, schema)
    return OpenApiResource(config, discovery, group_name=group, schema_resolver=schema_resolver)


def _output_format(output: Path, fmt: str) -> str:
    if fmt != "auto":
        return fmt
    return "yaml" if output.suffix.lower() in (".yaml", ".yml") else "json"


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Log build details.")
def main(verbose: bool):
    """API Doc Builder: generate OpenAPI documents from route manifests."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.argument("manifest_path", type=click.Path(exists=True, path_type=Path))
@click.option("-o", "--output", required=True, type=click.Path(path_type=Path), help="Output file for the document.")
@click.option("--format", "fmt", default="auto", type=click.Choice(["auto", "json", "yaml"]), help="Document format.")
@click.option("--group", default=DEFAULT_GROUP, help="Document group to build.")
@click.option("--locale", default=None, help="Locale of the document texts.")
@click.option("--config", "config_path", default=None, envvar="API_DOC_CONFIG",
              type=click.Path(exists=True, path_type=Path), help="Settings file (YAML or JSON).")
@click.option("--server-url", default=None, help="Server URL used when none is configured.")
def generate(
    manifest_path: Path,
    output: Path,
    fmt: str,
    group: str,
    locale: str | None,
    config_path: Path | None,
    server_url: str | None,
):
    """Build the OpenAPI document of a manifest."""
    click.echo(f"Loading {manifest_path}...")
    resource = _build_resource(manifest_path, config_path, group)

    fmt = _output_format(output, fmt)
    if fmt == "yaml":
        content = resource.open_api_yaml(locale, server_url)
    else:
        content = resource.open_api_json(locale, server_url)
    click.echo(f"Found {len(resource.get_openapi(locale).paths)} paths.")

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(content)
    click.echo(f"Document saved to {output}")


@main.command()
@click.argument("manifest_path", type=click.Path(exists=True, path_type=Path))
@click.option("--group", default=DEFAULT_GROUP, help="Document group to build.")
@click.option("--config", "config_path", default=None, envvar="API_DOC_CONFIG",
              type=click.Path(exists=True, path_type=Path), help="Settings file (YAML or JSON).")
def routes(manifest_path: Path, group: str, config_path: Path | None):
    """List the operations the document of a manifest contains."""
    resource = _build_resource(manifest_path, config_path, group)
    openapi = resource.get_openapi()
    for path, path_item in openapi.paths.items():
        for method in path_item.operations_map():
            click.echo(f"{method.value.upper():7} {path}")
