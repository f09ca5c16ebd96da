"""Define a command-line interface for inspecting PDDL domains and planning problems."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import NoReturn

import click
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from task_knowledge.io.config_schemata import (
    KnowledgeConfigSchema,
    build_knowledge_service,
    export_knowledge_config,
    populate_knowledge,
)
from task_knowledge.io.logging import console
from task_knowledge.pddl.domain import DomainModel
from task_knowledge.pddl.domain_parser import load_domain_files


def _abort(error: Exception) -> NoReturn:
    """Report an error to the console and exit with a nonzero status."""
    console.print(f"[bold red]Error:[/] {escape(str(error))}", highlight=False)
    raise SystemExit(1)


def _render_types_table(domain: DomainModel) -> Table:
    """Render a table of the domain's types and their parent types."""
    table = Table(title=f"Types: {domain.name}")
    table.add_column("Type", style="bold")
    table.add_column("Parent", style="magenta")

    for type_name in domain.get_types():
        table.add_row(type_name, domain.types.get_parent(type_name) or "-")
    return table


def _render_predicates_table(domain: DomainModel) -> Table:
    """Render a table of the domain's predicates and their typed parameters."""
    table = Table(title=f"Predicates: {domain.name}")
    table.add_column("Predicate", style="bold")
    table.add_column("Parameters", style="magenta")

    for name in domain.get_predicate_names():
        predicate = domain.get_predicate(name)
        params = ", ".join(str(p) for p in predicate.parameters) if predicate else ""
        table.add_row(name, params or "-")
    return table


def _render_actions_table(domain: DomainModel) -> Table:
    """Render a table of the domain's actions and durative actions."""
    table = Table(title=f"Actions: {domain.name}")
    table.add_column("Action", style="bold")
    table.add_column("Kind", style="cyan", no_wrap=True)
    table.add_column("Parameters", style="magenta")

    for name in domain.get_action_names():
        action = domain.get_action(name)
        params = ", ".join(str(p) for p in action.parameters) if action else ""
        table.add_row(name, "action", params or "-")

    for name in domain.get_durative_action_names():
        durative = domain.get_durative_action(name)
        params = ", ".join(str(p) for p in durative.parameters) if durative else ""
        table.add_row(name, "durative-action", params or "-")
    return table


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log debug messages.")
def cli(verbose: bool) -> None:
    """Inspect PDDL domains and the planning problems built from knowledge configs."""
    logging.basicConfig(
        format="%(levelname)s:%(name)s:%(message)s",
        level=logging.DEBUG if verbose else logging.WARNING,
    )


@cli.command()
@click.argument(
    "model_files",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option("--render", is_flag=True, help="Print the PDDL text of the combined domain.")
def domain(model_files: tuple[Path, ...], render: bool) -> None:
    """Load a domain from MODEL_FILES (later files extend the first) and summarize it."""
    try:
        domain_model = load_domain_files(model_files)
    except (RuntimeError, ValueError) as error:
        _abort(error)

    if render:
        click.echo(domain_model.render_domain_text(), nl=False)
        return

    console.print(Panel.fit(f"[bold]{domain_model}[/]", border_style="green"))
    console.print(_render_types_table(domain_model))
    console.print(_render_predicates_table(domain_model))
    console.print(_render_actions_table(domain_model))


@cli.command()
@click.argument("config_yaml", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--export",
    "export_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the accepted problem state to a knowledge config YAML file.",
)
def problem(config_yaml: Path, export_path: Path | None) -> None:
    """Build the problem described by CONFIG_YAML and print it as PDDL."""
    try:
        config = KnowledgeConfigSchema.validate_yaml(config_yaml)
        service = build_knowledge_service(config, populate=False)
    except (RuntimeError, ValueError, FileNotFoundError) as error:
        _abort(error)

    for rejected in populate_knowledge(service, config):
        console.print(f"[yellow]Rejected: {escape(rejected.message)}[/]", highlight=False)

    click.echo(service.get_problem().output, nl=False)

    if export_path is not None:
        export_knowledge_config(service, config, export_path)
        console.print(f"[green]Exported knowledge to {export_path}.[/]")


def main() -> None:
    """Run the command-line interface."""
    cli()
