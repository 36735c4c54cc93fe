"""Output formatters for optimization results."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from dietlp.data.nutrient_ids import get_nutrient_display_name
from dietlp.optimizer.models import OptimizationResult
from dietlp.optimizer.serialization import result_to_dict


class TableFormatter:
    """Format results as Rich tables for terminal display."""

    def __init__(self, console: Optional[Console] = None):
        """Initialize the formatter.

        Args:
            console: Rich console for output. If None, creates a new one.
        """
        self.console = console or Console()

    def format(
        self,
        result: OptimizationResult,
        profile_name: Optional[str] = None,
    ) -> None:
        """Print formatted tables to console.

        Args:
            result: Optimization result to format
            profile_name: Optional profile name to display
        """
        status_color = "green" if result.feasible else "red"
        header_lines = [
            f"[bold]OPTIMIZATION RESULT[/bold] - {datetime.now().strftime('%Y-%m-%d %H:%M')}",
        ]
        if profile_name:
            header_lines.append(f"Profile: {profile_name}")
        header_lines.append(f"Status: [{status_color}]{result.status.upper()}[/{status_color}]")

        self.console.print(Panel("\n".join(header_lines), title="Diet Plan"))

        if not result.feasible:
            self.console.print(f"[red]{result.message}[/red]")
            return

        food_table = Table(title="Daily Food Allocation")
        food_table.add_column("Food", style="cyan", max_width=50)
        food_table.add_column("Units", justify="right")
        food_table.add_column("Grams", justify="right")
        food_table.add_column("Cost", justify="right", style="green")

        total_grams = 0.0
        for sel in result.selections:
            food_table.add_row(
                sel.food.description[:50],
                f"{sel.quantity:.2f}",
                f"{sel.grams:.0f}",
                f"${sel.cost:.2f}",
            )
            total_grams += sel.grams

        food_table.add_row(
            "[bold]TOTAL[/bold]",
            "",
            f"[bold]{total_grams:.0f}[/bold]",
            f"[bold]${result.total_cost:.2f}[/bold]",
            style="bold",
        )

        self.console.print(food_table)

        nutrient_table = Table(title="Nutrient Summary")
        nutrient_table.add_column("Nutrient")
        nutrient_table.add_column("Amount", justify="right")
        nutrient_table.add_column("Min", justify="right")
        nutrient_table.add_column("Max", justify="right")
        nutrient_table.add_column("Status", justify="center")

        for nutrient in result.nutrients:
            status = "[green]OK[/green]" if nutrient.satisfied else "[red]![/red]"
            min_str = f"{nutrient.min_value:.1f}" if nutrient.min_value is not None else "-"
            max_str = f"{nutrient.max_value:.1f}" if nutrient.max_value is not None else "-"

            nutrient_table.add_row(
                get_nutrient_display_name(nutrient.name),
                f"{nutrient.amount:.1f} {nutrient.unit}",
                min_str,
                max_str,
                status,
            )

        self.console.print(nutrient_table)

        if result.solver_info:
            info_parts = []
            if "elapsed_seconds" in result.solver_info:
                info_parts.append(f"Time: {result.solver_info['elapsed_seconds']:.3f}s")
            if result.solver_info.get("iterations"):
                info_parts.append(f"Pivots: {result.solver_info['iterations']}")
            if "solver" in result.solver_info:
                info_parts.append(f"Solver: {result.solver_info['solver']}")
            if info_parts:
                self.console.print(f"[dim]{' | '.join(info_parts)}[/dim]")


class JSONFormatter:
    """Format results as JSON for programmatic use."""

    def format(
        self,
        result: OptimizationResult,
        profile_name: Optional[str] = None,
    ) -> str:
        """Return JSON string.

        Args:
            result: Optimization result to format
            profile_name: Optional profile name

        Returns:
            JSON string
        """
        data = {
            "timestamp": datetime.now().isoformat(),
            "profile": profile_name,
        }
        data.update(result_to_dict(result))
        return json.dumps(data, indent=2, default=str)


class MarkdownFormatter:
    """Format results as Markdown for reports and documentation."""

    def format(
        self,
        result: OptimizationResult,
        profile_name: Optional[str] = None,
    ) -> str:
        """Return Markdown string.

        Args:
            result: Optimization result to format
            profile_name: Optional profile name

        Returns:
            Markdown string
        """
        lines = [
            "# Least-Cost Daily Diet",
            "",
        ]

        if profile_name:
            lines.append(f"**Profile:** {profile_name}")

        if not result.feasible:
            lines.append(f"**Status:** infeasible. {result.message}")
            return "\n".join(lines)

        lines.append(f"**Daily Cost:** ${result.total_cost:.2f}")

        lines.extend(["", "## Foods", "", "| Food | Amount | Cost |", "|------|--------|------|"])

        for sel in result.selections:
            lines.append(f"| {sel.food.description} | {sel.grams:.0f}g | ${sel.cost:.2f} |")

        lines.extend(
            [
                "",
                "## Nutrient Summary",
                "",
                "| Nutrient | Amount | Target |",
                "|----------|--------|--------|",
            ]
        )

        for n in result.nutrients:
            target = ""
            if n.min_value is not None and n.max_value is not None:
                target = f"{n.min_value:.0f}-{n.max_value:.0f}"
            elif n.min_value is not None:
                target = f">= {n.min_value:.0f}"
            elif n.max_value is not None:
                target = f"<= {n.max_value:.0f}"

            status = "" if n.satisfied else " (!)"
            name = get_nutrient_display_name(n.name)
            lines.append(f"| {name} | {n.amount:.1f} {n.unit}{status} | {target} |")

        return "\n".join(lines)


def format_result(
    result: OptimizationResult,
    output_format: str = "table",
    profile_name: Optional[str] = None,
    console: Optional[Console] = None,
) -> Optional[str]:
    """Format optimization result in the specified format.

    Args:
        result: Optimization result to format
        output_format: One of 'table', 'json', 'markdown'
        profile_name: Optional profile name
        console: Rich console (for table format)

    Returns:
        Formatted string for json/markdown, None for table (prints directly)
    """
    if output_format == "table":
        TableFormatter(console).format(result, profile_name)
        return None
    elif output_format == "json":
        return JSONFormatter().format(result, profile_name)
    elif output_format == "markdown":
        return MarkdownFormatter().format(result, profile_name)
    else:
        raise ValueError(f"Unknown output format: {output_format}")
