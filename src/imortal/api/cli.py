"""Command-line interface for imortal.

Usage::

    imortal new "Todo App"
    imortal validate todo_app.imortal --format json
    imortal generate todo_app.imortal --output build/
    imortal components --category data
"""

from __future__ import annotations

import json
from pathlib import Path

import click

from imortal import IR_VERSION, __version__
from imortal.application.codegen.base import GeneratorConfig
from imortal.application.codegen.generator import CodeGenerator
from imortal.application.codegen.naming import to_snake_case
from imortal.application.components.registry import ComponentRegistry
from imortal.application.validation.rules import extended_rules
from imortal.application.validation.validator import Validator
from imortal.config.logging import configure_logging, get_logger
from imortal.config.settings import get_settings
from imortal.domain.entities import ProjectMeta
from imortal.domain.enums import ComponentCategory, Severity
from imortal.domain.exceptions import ConfigurationError, ImortalError
from imortal.domain.graph import ProjectGraph
from imortal.infrastructure.serialization.project_file import (
    PROJECT_SUFFIX,
    FilesystemProjectStore,
)

logger = get_logger(__name__)

_SEVERITY_COLOURS = {Severity.ERROR: "red", Severity.WARNING: "yellow", Severity.INFO: "blue"}


def _load(path: Path) -> ProjectGraph:
    try:
        return FilesystemProjectStore(path).load()
    except ImortalError as exc:
        raise click.ClickException(f"{path}: {exc.message}") from exc


@click.group()
@click.version_option(__version__, prog_name="imortal")
@click.option("--verbose", "-v", is_flag=True, help="Debug logging")
def cli(verbose: bool) -> None:
    """Immortal Engine: design applications as component graphs."""
    settings = get_settings()
    try:
        configure_logging("DEBUG" if verbose else settings.log_level, settings.log_json)
    except ConfigurationError as exc:
        raise click.ClickException(exc.message) from exc


@cli.command()
@click.argument("name")
@click.option("--path", "-p", "directory", type=click.Path(file_okay=False, path_type=Path), default=Path("."), help="Target directory")
@click.option("--description", "-d", default="", help="Project description")
def new(name: str, directory: Path, description: str) -> None:
    """Create an empty project file."""
    target = directory / f"{to_snake_case(name)}{PROJECT_SUFFIX}"
    if target.exists():
        raise click.ClickException(f"{target} already exists")
    graph = ProjectGraph(ProjectMeta(name=name, description=description))
    FilesystemProjectStore(target).save(graph)
    click.echo(f"Created {target}")


@cli.command()
@click.argument("project", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--format", "-f", "output_format", type=click.Choice(["text", "json"]), default="text", help="Output format")
@click.option("--all-rules", is_flag=True, help="Also run the optional rules")
def validate(project: Path, output_format: str, all_rules: bool) -> None:
    """Check a project for structural problems."""
    graph = _load(project)
    report = Validator(extended_rules() if all_rules else None).run(graph)

    if output_format == "json":
        click.echo(json.dumps(report.to_dict(), indent=2))
    else:
        for diagnostic in report.diagnostics:
            click.secho(str(diagnostic), fg=_SEVERITY_COLOURS[diagnostic.severity])
        click.echo(f"{report.errors} error(s), {report.warnings} warning(s)")
    if report.errors:
        raise SystemExit(1)


@cli.command()
@click.argument("project", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--output", "-o", type=click.Path(file_okay=False, path_type=Path), default=None, help="Output directory")
@click.option("--force", is_flag=True, help="Generate even when validation reports errors")
def generate(project: Path, output: Path | None, force: bool) -> None:
    """Generate a Python service from a project."""
    settings = get_settings()
    graph = _load(project)

    report = Validator().run(graph)
    if report.errors and not force:
        for diagnostic in report.diagnostics:
            if diagnostic.is_error:
                click.secho(str(diagnostic), fg="red", err=True)
        raise click.ClickException(
            f"{report.errors} validation error(s); fix them or pass --force"
        )
    if report.errors:
        logger.warning("generating_with_errors", project=graph.meta.name, errors=report.errors)

    try:
        result = CodeGenerator(GeneratorConfig.from_settings(settings)).generate(graph)
    except ImortalError as exc:
        raise click.ClickException(exc.message) from exc

    out_dir = output or Path(settings.output_dir)
    written = FilesystemProjectStore.write_generated(result, out_dir)
    for warning in result.warnings:
        click.secho(f"warning: {warning}", fg="yellow")
    for failure in result.failures:
        click.secho(f"failed: {failure}", fg="red")
    click.echo(f"Wrote {len(written)} file(s) to {out_dir}")


@cli.command()
@click.option("--category", "-c", type=click.Choice([c.value for c in ComponentCategory]), default=None, help="Filter by category")
@click.option("--search", "-s", default=None, help="Match id, name, description or tags")
def components(category: str | None, search: str | None) -> None:
    """List available components."""
    registry = ComponentRegistry.with_builtins()
    if search:
        definitions = registry.search(search)
    elif category:
        definitions = registry.by_category(ComponentCategory(category))
    else:
        definitions = registry.all()
    if search and category:
        definitions = [d for d in definitions if d.category.value == category]

    if not definitions:
        click.echo("No components found")
        return
    for definition in definitions:
        click.echo(f"{definition.id:<20} {definition.name:<18} {definition.description}")


@cli.command()
def info() -> None:
    """Show version and registry information."""
    stats = ComponentRegistry.with_builtins().stats()
    click.echo(f"imortal {__version__}")
    click.echo(f"IR version: {IR_VERSION}")
    click.echo(f"Components: {stats.total}")
    for category, count in stats.by_category.items():
        click.echo(f"  {category.display_name:<10} {count}")


@cli.command()
@click.argument("project", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("output", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--compact", is_flag=True, help="No indentation")
def export(project: Path, output: Path, compact: bool) -> None:
    """Re-serialise a project, checking it on the way."""
    graph = _load(project)
    FilesystemProjectStore(output).save(graph, compact=compact)
    click.echo(f"Exported {graph.meta.name} to {output}")


def main() -> None:
    """Entry point for the ``imortal`` script."""
    cli()


if __name__ == "__main__":
    main()
