import logging
import sys
from pathlib import Path

import rich_click as click
import yaml
from pydantic import ValidationError
from rich.traceback import install

from entpb import __version__, log
from entpb.config import MAX_BATCH_CREATE_SIZE, MAX_PAGE_SIZE, GeneratorSettings
from entpb.descriptors.service import ServiceAssembler
from entpb.errors import EntpbError, MissingServiceAnnotationError
from entpb.exporters import render_proto, to_descriptor_set
from entpb.generator import GenerationResult, Generator, generate
from entpb.schema.loader import load_schema
from entpb.schema.models import SchemaGraph

DESCRIPTOR_SET_FILENAME = "descriptors.binpb"

schema_option = click.option(
    "--schema",
    "-s",
    "schema_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help="YAML file describing the entities and their protobuf annotations.",
)


def load_schema_or_exit(schema_path: Path) -> SchemaGraph:
    try:
        return load_schema(schema_path)
    except OSError as e:
        log.error(f"File I/O error: {e}")
    except yaml.YAMLError as e:
        log.error(f"Invalid YAML: {e}")
    except (TypeError, EntpbError) as e:
        log.error(f"Invalid schema: {e}")
    except ValidationError as e:
        log.error(f"Invalid schema: {e}")
    sys.exit(1)


def report_errors(result: GenerationResult) -> None:
    for entity_error in result.errors:
        log.error(str(entity_error))
    if result.errors:
        log.error(f"Found {len(result.errors)} failing entit{'y' if len(result.errors) == 1 else 'ies'}.")


@click.group(context_settings={"auto_envvar_prefix": "ENTPB"})
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


@cli.command(name="generate")
@schema_option
@click.option(
    "--output",
    "-o",
    type=click.Path(file_okay=False, writable=True, path_type=Path),
    required=True,
    help="Output directory",
)
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["proto", "json", "descriptor-set"], case_sensitive=False),
    default="proto",
    help="Output format: .proto sources, JSON descriptors or a serialized FileDescriptorSet.",
    show_default=True,
)
@click.option(
    "--max-page-size",
    type=click.IntRange(min=1),
    default=MAX_PAGE_SIZE,
    help="Maximum number of entries returned by a List call.",
    show_default=True,
)
@click.option(
    "--max-batch-size",
    type=click.IntRange(min=1),
    default=MAX_BATCH_CREATE_SIZE,
    help="Maximum number of requests accepted by a BatchCreate call.",
    show_default=True,
)
def generate_command(
    schema_path: Path, output: Path, output_format: str, max_page_size: int, max_batch_size: int
) -> None:
    """Generate protobuf descriptors for every annotated entity of a schema."""
    graph = load_schema_or_exit(schema_path)
    settings = GeneratorSettings(max_page_size=max_page_size, max_batch_create_size=max_batch_size)

    result = generate(graph, settings)
    report_errors(result)

    written: list[Path] = []
    try:
        output.mkdir(parents=True, exist_ok=True)
        output_format = output_format.lower()
        if output_format == "descriptor-set":
            destination = output / DESCRIPTOR_SET_FILENAME
            destination.write_bytes(to_descriptor_set(result.files).SerializeToString())
            written.append(destination)
        else:
            for file_descriptor in result.files:
                if output_format == "json":
                    destination = output / Path(file_descriptor.name).with_suffix(".json")
                    content = file_descriptor.model_dump_json(indent=2)
                else:
                    destination = output / file_descriptor.name
                    content = render_proto(file_descriptor)
                destination.parent.mkdir(parents=True, exist_ok=True)
                destination.write_text(content, encoding="utf-8")
                written.append(destination)
    except OSError as e:
        log.error(f"Failed to write output: {e}")
        sys.exit(1)

    for destination in written:
        log.success(f"Wrote {destination}")

    if not result.ok:
        sys.exit(1)


@cli.command(name="inspect")
@schema_option
@click.option("--entity", "-e", "entity_name", type=str, required=True, help="Entity to inspect.")
def inspect_command(schema_path: Path, entity_name: str) -> None:
    """Show the service and messages generated for one entity."""
    graph = load_schema_or_exit(schema_path)
    try:
        entity = graph.entity(entity_name)
    except KeyError:
        log.error(f"Entity '{entity_name}' not found in {schema_path}")
        sys.exit(1)

    try:
        resources = Generator(graph).generate_entity(entity)
    except EntpbError as e:
        log.error(str(e))
        sys.exit(1)

    log.rule(entity.name)
    log.key_value("Package", Generator(graph).package_of(entity))
    if resources.service is None:
        log.key_value("Service", "none")
    else:
        log.key_value("Service", resources.service.name)
        for method in resources.service.methods:
            log.rpc(method.name, method.input_type, method.output_type)

    log.key_value("Messages", len(resources.messages))
    for message in resources.messages:
        log.list_item(message.name)
        log.print_dict(message.model_dump(mode="json", exclude_none=True))


@cli.command(name="check")
@schema_option
def check_command(schema_path: Path) -> None:
    """Check that descriptors can be generated for every annotated entity."""
    graph = load_schema_or_exit(schema_path)
    result = Generator(graph).generate()

    for entity in graph.entities:
        try:
            ServiceAssembler(entity).service_name()
        except MissingServiceAnnotationError:
            log.hint(f"{entity.name}: no service annotation")

    if not result.ok:
        report_errors(result)
        sys.exit(1)

    log.success(f"All {len(graph.entities)} entities generate cleanly")
