"""
Lathe CLI - Command-line interface for populating project skeletons

Usage:
    lathe run <recipe_file> <project_dir> [--set key=value ...] [--dry-run]
    lathe validate <recipe_file>
    lathe init <artifact_id>
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import typer
from rich import print as rprint
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

from lathe.config import LatheConfig
from lathe.errors import LatheError
from lathe.logging_config import setup_logging
from lathe.pipeline import PipelineResult, run_recipe
from lathe.recipe import Recipe

app = typer.Typer(
    name="lathe",
    help="Turn an instantiated project skeleton into a concrete project",
    add_completion=False,
)


def _parse_overrides(values: list[str] | None) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for item in values or []:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise typer.BadParameter(f"Expected key=value, got {item!r}", param_hint="--set")
        overrides[key.strip()] = value
    return overrides


@app.command()
def run(
    recipe_file: Path = typer.Argument(
        ...,
        help="Path to lathe.yaml recipe",
        exists=True,
        dir_okay=False,
        resolve_path=True,
    ),
    project_dir: Path = typer.Argument(
        ...,
        help="Directory holding the instantiated skeleton",
        exists=True,
        file_okay=False,
        resolve_path=True,
    ),
    sets: Optional[list[str]] = typer.Option(
        None,
        "--set", "-s",
        help="Override a recipe parameter (key=value); repeatable",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Show what would change without writing files",
    ),
    keep_partial: bool = typer.Option(
        False,
        "--keep-partial",
        help="Save the tree even if a step fails",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every substitution"),
) -> None:
    """Apply a recipe to a project directory."""
    config = LatheConfig.from_env()
    setup_logging(level="DEBUG" if verbose else config.log_level, force=True)

    overrides = _parse_overrides(sets)
    try:
        result = run_recipe(
            recipe_file,
            project_dir,
            overrides=overrides,
            config=config,
            dry_run=dry_run,
            keep_partial=keep_partial,
        )
    except (LatheError, OSError) as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    _show_steps(result)
    _show_changes(result, project_dir)

    if not result.success:
        for error in result.errors:
            rprint(f"[red]✗[/red] {error}")
        if result.saved:
            rprint("[yellow]Partial changes were saved[/yellow]")
        else:
            rprint("[yellow]No files were written[/yellow]")
        raise typer.Exit(1)

    if dry_run:
        rprint(f"\n[yellow]Dry run - nothing written to {project_dir}[/yellow]")
    else:
        rprint(f"[green]✓[/green] Applied {len(result.steps)} steps to {project_dir}")


@app.command()
def validate(
    recipe_file: Path = typer.Argument(
        ...,
        help="Path to lathe.yaml recipe",
        exists=True,
        dir_okay=False,
        resolve_path=True,
    ),
) -> None:
    """Validate a recipe and show its rendered steps."""
    try:
        recipe = Recipe.from_file(recipe_file).render()
    except (LatheError, OSError) as e:
        rprint(f"[red]✗[/red] {e}")
        raise typer.Exit(1)

    rprint(f"[green]✓[/green] Valid: [bold]{recipe.name}[/bold]")

    params = Table(title="Parameters")
    params.add_column("Name", style="cyan")
    params.add_column("Value")
    for key, value in recipe.parameters.items():
        params.add_row(key, str(value))
    rprint(params)

    steps = Table(title="Steps")
    steps.add_column("#", justify="right")
    steps.add_column("Operation", style="cyan")
    steps.add_column("Arguments")
    for i, step in enumerate(recipe.steps, start=1):
        args = step.model_dump(by_alias=True, exclude={"op"}, exclude_none=True)
        steps.add_row(str(i), step.op, ", ".join(f"{k}={v!r}" for k, v in args.items()))
    rprint(steps)


@app.command()
def init(
    artifact_id: str = typer.Argument(..., help="Artifact id of the new project"),
    output_dir: Optional[Path] = typer.Option(None, "--output", "-o", resolve_path=True),
    group_id: str = typer.Option("com.example", "--group-id", "-g"),
    owner: str = typer.Option("my-org", "--owner"),
    template_package: str = typer.Option(
        "com.example.skeleton", "--template-package", help="Package declared by the skeleton"
    ),
    template_class: str = typer.Option(
        "Skeleton", "--template-class", help="Class name prefix used by the skeleton"
    ),
) -> None:
    """Create a starter lathe.yaml recipe."""
    import yaml

    if output_dir is None:
        output_dir = Path.cwd()

    output_file = output_dir / "lathe.yaml"

    if output_file.exists():
        if not typer.confirm(f"{output_file} exists. Overwrite?"):
            raise typer.Exit(0)

    recipe_dict = {
        "recipeVersion": "1.0",
        "name": "{{ artifactId }}",
        "description": "Populate the skeleton for {{ artifactId }}",
        "parameters": {
            "artifactId": artifact_id,
            "groupId": group_id,
            "version": "0.1.0",
            "description": f"The {artifact_id} service",
            "owner": owner,
            "rootPackage": "{{ groupId }}.{{ artifactId | package_segment }}",
            "className": "{{ artifactId | pascal_case }}",
        },
        "steps": [
            {"op": "cleanReadme", "description": "{{ description }}", "owner": "{{ owner }}"},
            {"op": "cleanChangelog", "owner": "{{ owner }}"},
            {"op": "updateCiConfig", "artifactId": "{{ artifactId }}"},
            {"op": "removeUnnecessaryFiles"},
            {
                "op": "updateManifest",
                "artifactId": "{{ artifactId }}",
                "groupId": "{{ groupId }}",
                "name": "{{ artifactId }}",
                "version": "{{ version }}",
                "description": "{{ description }}",
            },
            {"op": "movePackage", "old": template_package, "new": "{{ rootPackage }}"},
            {"op": "renameClass", "old": template_class, "new": "{{ className }}"},
        ],
    }

    output_file.parent.mkdir(parents=True, exist_ok=True)
    with open(output_file, "w") as f:
        yaml.safe_dump(recipe_dict, f, default_flow_style=False, sort_keys=False)

    rprint(f"[green]✓[/green] Created {output_file}")
    rprint(f"\nNext: [cyan]lathe run {output_file} <project_dir>[/cyan]")


@app.command()
def version() -> None:
    """Show version."""
    from lathe import __version__
    rprint(f"lathe {__version__}")


def _show_steps(result: PipelineResult) -> None:
    """Show per-step summaries."""
    table = Table()
    table.add_column("#", justify="right")
    table.add_column("Operation", style="cyan")
    table.add_column("Result")
    for step in result.steps:
        table.add_row(str(step.index), step.op, step.summary)
    rprint(table)


def _show_changes(result: PipelineResult, project_dir: Path) -> None:
    """Show the change set as a tree."""
    changes = result.changes
    if changes is None or changes.empty:
        rprint(Panel("No changes", title=project_dir.name))
        return

    tree = Tree(f"[bold]{project_dir.name}[/bold]")
    for label, style, paths in (
        ("Added", "green", changes.added),
        ("Modified", "yellow", changes.modified),
        ("Deleted", "red", changes.deleted),
    ):
        if paths:
            branch = tree.add(f"[{style}]{label}[/{style}] ({len(paths)})")
            for path in paths:
                branch.add(path)
    rprint(tree)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
