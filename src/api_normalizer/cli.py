"""CLI entry point for api-normalizer."""

import json
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import click
import yaml
from pydantic import ValidationError

from api_normalizer.config import get_settings
from api_normalizer.exceptions import InvalidDocumentError, NormalizerError
from api_normalizer.generator.insomnia import generate_collection
from api_normalizer.mapping.canonical import to_canonical
from api_normalizer.mapping.configs import MAPPING_CONFIGS, get_mapping_config
from api_normalizer.mapping.engine import map_metadata
from api_normalizer.mapping.validator import validate_mapping
from api_normalizer.parser.base import ParsedMetadata
from api_normalizer.parser.detect import detect_format
from api_normalizer.parser.document import load_document
from api_normalizer.parser.loader import parse_metadata

FORMAT_CHOICES = ["auto", "json", "yaml", "openapi", "swagger", "raml"]

doc_argument = click.argument("doc_path", type=click.Path(exists=True, allow_dash=True, path_type=Path))
output_option = click.option("-o", "--output", default=None, type=click.Path(path_type=Path), help="Write JSON here instead of stdout.")
format_option = click.option("--format", "fmt", default="auto", type=click.Choice(FORMAT_CHOICES), help="Document format.")


def _read_doc(doc_path: Path) -> str:
    if str(doc_path) == "-":
        return click.get_text_stream("stdin").read()
    return doc_path.read_text(encoding="utf-8")


def _parse_doc(doc_path: Path, fmt: str) -> ParsedMetadata:
    """Parse API document based on format."""
    return parse_metadata(_read_doc(doc_path), None if fmt == "auto" else fmt)


def _emit(data: Any, output: Path | None) -> None:
    text = json.dumps(data, indent=2, ensure_ascii=False, default=str)
    if output is None:
        click.echo(text)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text + "\n", encoding="utf-8")
    click.echo(f"Saved to {output}", err=True)


@contextmanager
def _user_errors():
    """Turn parse and detection failures into a one-line CLI error."""
    try:
        yield
    except (NormalizerError, ValidationError, json.JSONDecodeError, yaml.YAMLError) as exc:
        raise click.ClickException(str(exc)) from exc


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Log debug output to stderr.")
def main(verbose: bool):
    """API Normalizer: turn API descriptions into canonical OpenAPI documents."""
    try:
        settings = get_settings()
    except ValidationError as exc:
        raise click.ClickException(f"Invalid API_NORMALIZER_* environment settings: {exc}") from exc
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@doc_argument
def detect(doc_path: Path):
    """Print the detected format of a document."""
    with _user_errors():
        click.echo(detect_format(_read_doc(doc_path)).value)


@main.command()
@doc_argument
@format_option
@output_option
def parse(doc_path: Path, fmt: str, output: Path | None):
    """Parse a document into the format-agnostic metadata model."""
    with _user_errors():
        metadata = _parse_doc(doc_path, fmt)
    click.echo(f"Found {len(metadata.endpoints)} endpoints.", err=True)
    _emit(metadata.to_dict(), output)


@main.command()
@doc_argument
@format_option
@output_option
def convert(doc_path: Path, fmt: str, output: Path | None):
    """Convert a document into a canonical OpenAPI 3.0.3 document."""
    with _user_errors():
        metadata = _parse_doc(doc_path, fmt)
    _emit(to_canonical(metadata), output)


@main.command("map")
@doc_argument
@click.option("-c", "--config", "config_name", required=True, type=click.Choice(list(MAPPING_CONFIGS)), help="Built-in mapping config.")
@click.option("--skip-validation", is_flag=True, help="Map without checking required fields first.")
@output_option
def map_command(doc_path: Path, config_name: str, skip_validation: bool, output: Path | None):
    """Map a JSON/YAML source document through a built-in mapping config."""
    mapping_config = get_mapping_config(config_name)
    with _user_errors():
        source = load_document(_read_doc(doc_path))
        if not isinstance(source, (dict, list)):
            raise InvalidDocumentError("Mapping source must be a JSON/YAML object or list")

    if not skip_validation:
        for error in validate_mapping(source, mapping_config):
            click.echo(f"Warning: {error}", err=True)
    _emit(map_metadata(source, mapping_config), output)


@main.command()
def configs():
    """List the built-in mapping configs."""
    for key, mapping_config in MAPPING_CONFIGS.items():
        click.echo(f"{key}\t{mapping_config.name}\t{mapping_config.description}")


@main.command()
@doc_argument
@format_option
@output_option
def collection(doc_path: Path, fmt: str, output: Path | None):
    """Generate an Insomnia collection export from a document."""
    with _user_errors():
        metadata = _parse_doc(doc_path, fmt)
    _emit(generate_collection(metadata), output)
