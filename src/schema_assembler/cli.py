import json
import logging
import sys
from pathlib import Path
from typing import Any

import rich_click as click
import yaml
from ariadne.exceptions import GraphQLFileSyntaxError
from graphql import GraphQLError
from pydantic import ValidationError
from rich.traceback import install

from schema_assembler import __version__, log
from schema_assembler.assembler import TypeSystemModel, assemble_with_config
from schema_assembler.config import AssemblerConfig, load_assembler_config
from schema_assembler.documents import load_graphql_files, resolve_graphql_files
from schema_assembler.errors import AssemblyError
from schema_assembler.schema_builder import print_annotated_schema
from schema_assembler.utils.selection import format_selection_set


class PathResolverOption(click.Option):
    def process_value(self, ctx: click.Context, value: Any) -> list[Path] | None:
        value = super().process_value(ctx, value)
        if not value:
            return None
        return resolve_graphql_files(list(set(value)))


schema_option = click.option(
    "--schema",
    "-s",
    "schemas",
    type=click.Path(exists=True, path_type=Path),
    cls=PathResolverOption,
    required=True,
    multiple=True,
    help="GraphQL file or directory of files to assemble. Can be specified multiple times.",
)

config_option = click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML file with assembler options (strictValidation, skipEntityExtraction)",
)

no_strict_option = click.option(
    "--no-strict",
    "no_strict",
    is_flag=True,
    default=False,
    help="Build the schema without validating it against the GraphQL specification",
)

skip_entity_extraction_option = click.option(
    "--skip-entity-extraction",
    "--no-store",
    "skip_entity_extraction",
    is_flag=True,
    default=False,
    help="Ignore @key directives, for clients generated without a normalized cache",
)


def load_config(config_path: Path | None, no_strict: bool, skip_entity_extraction: bool) -> AssemblerConfig:
    try:
        config = load_assembler_config(config_path)
    except (OSError, yaml.YAMLError, ValidationError, AssemblyError) as e:
        log.error(f"Invalid assembler config: {e}")
        sys.exit(1)

    # Unset flags keep the values from the config file.
    return config.override(
        strict_validation=False if no_strict else None,
        skip_entity_extraction=True if skip_entity_extraction else None,
    )


def assemble_from_paths(schemas: list[Path], config: AssemblerConfig) -> TypeSystemModel:
    try:
        graphql_files = load_graphql_files(schemas)
        return assemble_with_config(graphql_files, config)
    except GraphQLFileSyntaxError as e:
        log.error(f"Invalid GraphQL file: {e}")
        sys.exit(1)
    except AssemblyError as e:
        log.error(str(e))
        sys.exit(1)


def model_report(model: TypeSystemModel) -> dict[str, Any]:
    """Summarize an assembled model as a JSON-serializable dict."""
    return {
        "definitions": len(model.definitions),
        "placeholderScalars": list(model.placeholder_scalars),
        "leafTypes": {
            name: {"runtimeType": info.runtime_type, "serializationType": info.serialization_type}
            for name, info in model.leaf_types.items()
        },
        "entityPatterns": {
            "global": [format_selection_set(pattern) for pattern in model.global_entity_patterns],
            "types": {name: format_selection_set(pattern) for name, pattern in model.type_entity_patterns.items()},
        },
    }


@click.group(context_settings={"auto_envvar_prefix": "SCHEMA_ASSEMBLER"})
@click.option(
    "-l",
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default="INFO",
    help="Log level",
    show_default=True,
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    help="Log file",
)
@click.version_option(__version__)
def cli(log_level: str, log_file: Path | None) -> None:
    if log_file:
        file_handler = logging.FileHandler(log_file, mode="w")
        file_handler.setFormatter(logging.Formatter("%(asctime)s:%(levelname)s:%(message)s"))
        log.addHandler(file_handler)

    log.setLevel(log_level.upper())
    if log_level.upper() == "DEBUG":
        _ = install(show_locals=True)


@cli.command(name="assemble")
@schema_option
@config_option
@no_strict_option
@skip_entity_extraction_option
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    required=False,
    help="JSON file for the leaf type and entity key report (printed if omitted)",
)
def assemble_command(
    schemas: list[Path],
    config_path: Path | None,
    no_strict: bool,
    skip_entity_extraction: bool,
    output: Path | None,
) -> None:
    """Assemble GraphQL documents and report their leaf type and entity key metadata."""
    config = load_config(config_path, no_strict, skip_entity_extraction)
    model = assemble_from_paths(schemas, config)
    report = model_report(model)

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        _ = output.write_text(json.dumps(report, indent=2))
        log.success(f"Wrote assembly report to {output}")
    else:
        log.print_dict(report)

    log.key_value("Leaf types", len(model.leaf_types))
    log.key_value("Entity patterns", len(model.global_entity_patterns) + len(model.type_entity_patterns))


@cli.command()
@schema_option
@config_option
@no_strict_option
@skip_entity_extraction_option
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    required=True,
    help="Output file",
)
def compose(
    schemas: list[Path],
    config_path: Path | None,
    no_strict: bool,
    skip_entity_extraction: bool,
    output: Path,
) -> None:
    """Compose the assembled schema, with its metadata as directives, into a single file."""
    config = load_config(config_path, no_strict, skip_entity_extraction)
    model = assemble_from_paths(schemas, config)

    try:
        annotated_schema = model.build_annotated_schema()
    except AssemblyError as e:
        log.error(str(e))
        sys.exit(1)
    except GraphQLError as e:
        log.error(f"Invalid schema: {e}")
        sys.exit(1)

    output.parent.mkdir(parents=True, exist_ok=True)
    _ = output.write_text(print_annotated_schema(annotated_schema))
    log.success(f"Successfully composed schema to {output}")
    if not config.strict_validation:
        log.hint("Composed without strict validation")


if __name__ == "__main__":
    cli()
