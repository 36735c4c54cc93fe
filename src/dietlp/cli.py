"""CLI interface using Typer."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import typer
import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from dietlp.config import get_settings
from dietlp.data.defaults import WHO_REQUIREMENTS
from dietlp.data.nutrient_ids import (
    AMINO_ACIDS,
    NUTRIENT_IDS,
    get_nutrient_display_name,
    get_nutrient_unit,
)
from dietlp.optimizer.models import DietLPError, RequirementTable

app = typer.Typer(
    help="Least-cost diet optimization with a two-phase simplex solver",
    no_args_is_help=True,
)
console = Console()

profile_app = typer.Typer(help="Inspect requirement profiles")
config_app = typer.Typer(help="Manage dietlp settings")

app.add_typer(profile_app, name="profile")
app.add_typer(config_app, name="config")


# ============================================================================
# Helpers
# ============================================================================


def output_json(response: dict, file=None) -> None:
    """Output JSON response to stdout or file."""
    json_str = json.dumps(response, indent=2, default=str)
    if file:
        file.write(json_str)
    else:
        print(json_str)


def configure_logging(verbose: bool) -> None:
    """Route dietlp log records through Rich when verbose output is requested."""
    if not verbose:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def require_file(path: Path, what: str) -> None:
    """Exit with a friendly message if a required file is missing."""
    if not path.exists():
        console.print(f"[red]{what} not found: {path}[/red]")
        raise typer.Exit(1)


def load_profile(profile_file: Optional[Path]) -> tuple[RequirementTable, str]:
    """Load a requirement profile, falling back to the built-in WHO table."""
    from dietlp.optimizer.constraints import load_requirements_from_yaml

    if profile_file is None:
        profile_file = get_settings().defaults.profile_path
    if profile_file is None:
        return WHO_REQUIREMENTS, "who-default"

    require_file(profile_file, "Profile")
    try:
        return load_requirements_from_yaml(profile_file), profile_file.stem
    except (KeyError, DietLPError) as e:
        console.print(f"[red]Invalid profile: {e}[/red]")
        raise typer.Exit(1)


# ============================================================================
# Main commands
# ============================================================================


@app.command()
def solve(
    foods_file: Path = typer.Argument(..., help="YAML food catalog"),
    profile_file: Optional[Path] = typer.Option(
        None, "--profile", "-p", help="YAML requirement profile (default: built-in WHO table)"
    ),
    output: Optional[str] = typer.Option(
        None, "--output", "-o", help="Output format: table, json, markdown"
    ),
    backend: Optional[str] = typer.Option(
        None, "--backend", "-b", help="LP backend: simplex or highs"
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Log solver progress"
    ),
) -> None:
    """Find the least-cost combination of foods meeting every requirement."""
    from dataclasses import replace

    from dietlp.export.formatters import format_result
    from dietlp.optimizer.constraints import load_catalog_from_yaml
    from dietlp.optimizer.solver import solve_nutrition_optimization

    configure_logging(verbose)
    settings = get_settings()

    require_file(foods_file, "Food catalog")
    try:
        catalog = load_catalog_from_yaml(foods_file)
    except (KeyError, DietLPError) as e:
        console.print(f"[red]Invalid food catalog: {e}[/red]")
        raise typer.Exit(1)

    requirements, profile_name = load_profile(profile_file)

    try:
        config = settings.optimization
        if backend is not None:
            config = replace(config, backend=backend)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    try:
        result = solve_nutrition_optimization(catalog, requirements, config)
    except DietLPError as e:
        console.print(f"[red]Optimization failed: {e}[/red]")
        raise typer.Exit(1)

    output_format = output or settings.defaults.output_format
    try:
        text = format_result(result, output_format, profile_name, console=console)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    if text is not None:
        print(text)


@app.command()
def nutrients(
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """List the nutrient names accepted in profiles and catalogs."""
    if json_output:
        output_json(
            {
                name: {
                    "usda_id": nid,
                    "unit": get_nutrient_unit(name),
                    "display_name": get_nutrient_display_name(name),
                    "amino_acid": name in AMINO_ACIDS,
                }
                for name, nid in NUTRIENT_IDS.items()
            }
        )
        return

    table = Table(title="Nutrients")
    table.add_column("Name", style="cyan")
    table.add_column("Display Name")
    table.add_column("Unit")
    table.add_column("USDA ID", justify="right")

    for name, nid in NUTRIENT_IDS.items():
        table.add_row(name, get_nutrient_display_name(name), get_nutrient_unit(name), str(nid))

    console.print(table)


# ============================================================================
# Profile commands
# ============================================================================


@profile_app.command("show")
def profile_show(
    profile_file: Optional[Path] = typer.Argument(
        None, help="YAML requirement profile (default: built-in WHO table)"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show the requirement table a profile defines."""
    from dietlp.optimizer.serialization import serialize_requirements

    requirements, profile_name = load_profile(profile_file)

    if json_output:
        output_json(serialize_requirements(requirements))
        return

    table = Table(title=f"Requirements: {profile_name}")
    table.add_column("Nutrient", style="cyan")
    table.add_column("Min", justify="right")
    table.add_column("Max", justify="right")
    table.add_column("Unit")

    for name, req in requirements.items():
        table.add_row(
            get_nutrient_display_name(name),
            f"{req.min_value:g}",
            f"{req.max_value:g}" if req.max_value is not None else "-",
            get_nutrient_unit(name),
        )

    console.print(table)


# ============================================================================
# Config commands
# ============================================================================


@config_app.command("show")
def config_show() -> None:
    """Print the active settings as YAML."""
    from dataclasses import asdict

    settings = get_settings()
    data = {
        "optimization": asdict(settings.optimization),
        "defaults": {
            "output_format": settings.defaults.output_format,
            "profile_path": (
                str(settings.defaults.profile_path)
                if settings.defaults.profile_path
                else None
            ),
        },
    }
    print(yaml.dump(data, default_flow_style=False, sort_keys=False), end="")


@config_app.command("init")
def config_init(
    path: Optional[Path] = typer.Option(
        None, "--path", help="Where to write config.yaml (default: ~/.dietlp/config.yaml)"
    ),
) -> None:
    """Write a config file with the default settings."""
    from dietlp.config.settings import Settings

    Settings().save(path)
    console.print("[green]Wrote default settings[/green]")


if __name__ == "__main__":
    app()
