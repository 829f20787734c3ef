"""Output formatters for allocation results."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from dietlp.optimizer.models import AllocationResult

# Quantities below this are shown as not selected
DISPLAY_THRESHOLD = 1e-6

OUTPUT_FORMATS = ("table", "json", "markdown")


def _bound_str(value: Optional[float]) -> str:
    return f"{value:.1f}" if value is not None else "-"


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
        result: AllocationResult,
        problem_name: Optional[str] = None,
        show_all: bool = False,
    ) -> None:
        """Print formatted tables to console.

        Args:
            result: Allocation result to format
            problem_name: Optional problem name to display
            show_all: Also list items with zero quantity
        """
        status_color = "green" if result.success else "red"
        header_lines = [
            f"[bold]ALLOCATION RESULT[/bold] - {datetime.now().strftime('%Y-%m-%d %H:%M')}",
        ]
        if problem_name:
            header_lines.append(f"Problem: {problem_name}")
        header_lines.append(f"Status: [{status_color}]{result.status.upper()}[/{status_color}]")

        self.console.print(Panel("\n".join(header_lines), title="dietlp"))

        if not result.success:
            self.console.print(f"[red]Error: {result.message}[/red]")
            return

        item_table = Table(title="Item Allocation")
        item_table.add_column("Item", style="cyan", max_width=50)
        item_table.add_column("Quantity", justify="right")
        item_table.add_column("Cost", justify="right", style="green")

        for item in result.items:
            if item.quantity <= DISPLAY_THRESHOLD and not show_all:
                continue
            item_table.add_row(item.name, f"{item.quantity:.4f}", f"${item.cost:.2f}")

        item_table.add_row(
            "[bold]TOTAL[/bold]",
            "",
            f"[bold]${result.total_cost:.2f}[/bold]",
            style="bold",
        )
        self.console.print(item_table)

        category_table = Table(title="Category Summary")
        category_table.add_column("Category")
        category_table.add_column("Amount", justify="right")
        category_table.add_column("Min", justify="right")
        category_table.add_column("Max", justify="right")
        category_table.add_column("Status", justify="center")

        for category in result.categories:
            if not category.satisfied:
                status = "[red]![/red]"
            elif category.is_binding:
                status = "[yellow]binding[/yellow]"
            else:
                status = "[green]OK[/green]"
            category_table.add_row(
                category.category,
                f"{category.amount:.2f}",
                _bound_str(category.min_constraint),
                _bound_str(category.max_constraint),
                status,
            )

        self.console.print(category_table)

        info_parts = []
        if "backend" in result.solver_info:
            info_parts.append(f"Solver: {result.solver_info['backend']}")
        if result.solver_info.get("elapsed_seconds") is not None:
            info_parts.append(f"Time: {result.solver_info['elapsed_seconds']:.3f}s")
        if result.solver_info.get("iterations"):
            info_parts.append(f"Iterations: {result.solver_info['iterations']}")
        if info_parts:
            self.console.print(f"[dim]{' | '.join(info_parts)}[/dim]")


class JSONFormatter:
    """Format results as JSON for programmatic use."""

    def to_dict(
        self,
        result: AllocationResult,
        problem_name: Optional[str] = None,
    ) -> dict[str, Any]:
        return {
            "timestamp": datetime.now().isoformat(),
            "problem": problem_name,
            "status": result.status,
            "success": result.success,
            "message": result.message,
            "solution": {
                "items": [
                    {
                        "name": i.name,
                        "quantity": i.quantity,
                        "cost": round(i.cost, 4),
                    }
                    for i in result.items
                ],
                "total_cost": result.total_cost,
                "categories": {
                    c.category: {
                        "amount": round(c.amount, 4),
                        "min": c.min_constraint,
                        "max": c.max_constraint,
                        "satisfied": c.satisfied,
                        "binding": c.is_binding,
                    }
                    for c in result.categories
                },
            },
            "solver_info": result.solver_info,
        }

    def format(
        self,
        result: AllocationResult,
        problem_name: Optional[str] = None,
    ) -> str:
        """Return JSON string."""
        return json.dumps(self.to_dict(result, problem_name), indent=2)


class MarkdownFormatter:
    """Format results as Markdown for reports."""

    def format(
        self,
        result: AllocationResult,
        problem_name: Optional[str] = None,
    ) -> str:
        lines = ["# Optimized Allocation", ""]

        if problem_name:
            lines.append(f"**Problem:** {problem_name}")
        if not result.success:
            lines.append(f"**Status:** {result.status} ({result.message})")
            return "\n".join(lines)

        lines.append(f"**Total Cost:** ${result.total_cost:.2f}")
        lines.extend(["", "## Items", "", "| Item | Quantity | Cost |", "|------|----------|------|"])

        for item in result.items:
            if item.quantity > DISPLAY_THRESHOLD:
                lines.append(f"| {item.name} | {item.quantity:.4f} | ${item.cost:.2f} |")

        lines.extend(
            [
                "",
                "## Category Summary",
                "",
                "| Category | Amount | Target |",
                "|----------|--------|--------|",
            ]
        )

        for c in result.categories:
            target = ""
            if c.min_constraint is not None and c.max_constraint is not None:
                target = f"{c.min_constraint:g}-{c.max_constraint:g}"
            elif c.min_constraint is not None:
                target = f">= {c.min_constraint:g}"
            elif c.max_constraint is not None:
                target = f"<= {c.max_constraint:g}"

            status = "" if c.satisfied else " (!)"
            lines.append(f"| {c.category} | {c.amount:.1f}{status} | {target} |")

        return "\n".join(lines)


def format_result(
    result: AllocationResult,
    output_format: str = "table",
    problem_name: Optional[str] = None,
    console: Optional[Console] = None,
) -> Optional[str]:
    """Format an allocation result in the specified format.

    Args:
        result: Allocation result to format
        output_format: One of 'table', 'json', 'markdown'
        problem_name: Optional problem name
        console: Rich console (for table format)

    Returns:
        Formatted string for json/markdown, None for table (prints directly)
    """
    if output_format == "table":
        TableFormatter(console).format(result, problem_name)
        return None
    elif output_format == "json":
        return JSONFormatter().format(result, problem_name)
    elif output_format == "markdown":
        return MarkdownFormatter().format(result, problem_name)
    else:
        raise ValueError(f"Unknown output format: {output_format}")
