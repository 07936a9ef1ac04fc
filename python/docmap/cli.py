"""CLI commands for inspecting entity mappings."""

from __future__ import annotations

import importlib
import logging
from pathlib import Path

import structlog
import typer

from docmap.exceptions import DocmapError
from docmap.models.descriptors import AccessMode, PropertyDescriptor

app = typer.Typer(
    name="docmap",
    help="docmap - inspect and exercise entity/document mappings",
    no_args_is_help=True,
)


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs")):
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if verbose else logging.WARNING
        ),
        logger_factory=structlog.PrintLoggerFactory(),
    )


def _load_entity(path: str) -> type:
    """Import "package.module:ClassName"."""
    module_name, sep, attr = path.partition(":")
    if not sep or not attr:
        typer.secho(f"❌ Expected module:Class, got '{path}'", fg=typer.colors.RED)
        raise typer.Exit(1)
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        typer.secho(f"❌ Cannot import {module_name}: {e}", fg=typer.colors.RED)
        raise typer.Exit(1)
    entity = getattr(module, attr, None)
    if not isinstance(entity, type):
        typer.secho(f"❌ {path} is not a class", fg=typer.colors.RED)
        raise typer.Exit(1)
    return entity


def _flags(descriptor: PropertyDescriptor) -> str:
    flags = [
        flag
        for flag, enabled in (
            ("id", descriptor.is_id),
            ("enum", descriptor.is_enum),
            ("collection", descriptor.is_collection),
            ("map", descriptor.is_map),
            ("array", descriptor.is_array),
            ("nullable", descriptor.is_nullable),
            ("read-only", descriptor.is_read_only),
        )
        if enabled
    ]
    if not descriptor.is_mappable:
        flags.append("synthetic" if descriptor.is_synthetic else "not mapped")
    return ", ".join(flags)


def _type_name(tp: type | None) -> str:
    return "Any" if tp is None else tp.__name__


@app.command()
def describe(
    entity: str = typer.Argument(..., help="Entity class as module:Class"),
    mode: AccessMode = typer.Option(AccessMode.FIELD, help="Property access mode"),
):
    """
    Print the resolved property descriptors of an entity class.
    """
    from docmap.convert.mapper import DocumentMapper

    entity_type = _load_entity(entity)
    try:
        descriptors = DocumentMapper().describe(entity_type, mode)
    except DocmapError as e:
        typer.secho(f"❌ {e}", fg=typer.colors.RED)
        raise typer.Exit(1)

    typer.echo(f"{entity_type.__module__}.{entity_type.__qualname__} ({mode.value} access)")
    for descriptor in descriptors:
        type_name = _type_name(descriptor.property_type)
        if descriptor.type_args:
            type_name += "[" + ", ".join(_type_name(a) for a in descriptor.type_args) + "]"
        line = f"   {descriptor.name} → '{descriptor.key}': {type_name}"
        flags = _flags(descriptor)
        if flags:
            line += f" ({flags})"
        typer.echo(line)


@app.command()
def roundtrip(
    entity: str = typer.Argument(..., help="Entity class as module:Class"),
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Extended JSON document"),
):
    """
    Read an extended JSON document into an entity and write it back.

    Prints the entity and the re-written document, which shows exactly what
    the mapping keeps and drops.
    """
    from bson import json_util

    from docmap.convert.mapper import DocumentMapper

    entity_type = _load_entity(entity)
    mapper = DocumentMapper()
    try:
        document = json_util.loads(path.read_text())
        instance = mapper.read(entity_type, document)
        written = mapper.write(instance)
    except (DocmapError, ValueError) as e:
        typer.secho(f"❌ {e}", fg=typer.colors.RED)
        raise typer.Exit(1)

    typer.echo(f"Entity:   {instance!r}")
    typer.echo(f"Document: {json_util.dumps(written)}")


if __name__ == "__main__":
    app()
