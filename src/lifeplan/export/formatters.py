"""Output formatters for daily plans, adaptation reports and calibration."""

from __future__ import annotations

import json
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from lifeplan.adaptation.engine import AdaptationReport
from lifeplan.advisor.models import DailyPlan
from lifeplan.tracking.calibration import CalibrationResult, CalibrationState

# Adjustments worth showing even when unchanged from the defaults
_ALWAYS_SHOWN = ("workout_intensity", "meal_complexity", "routine_level")


class TableFormatter:
    """Format results as Rich tables for terminal display."""

    def __init__(self, console: Optional[Console] = None):
        """Initialize the formatter.

        Args:
            console: Rich console for output. If None, creates a new one.
        """
        self.console = console or Console()

    def format_plan(self, plan: DailyPlan) -> None:
        """Print a daily plan to the console."""
        header = [
            f"[bold]DAILY PLAN[/bold] - {plan.day.isoformat()}",
            f"Mode: {plan.mode}",
            f"Life score: [bold]{plan.life_score}[/bold]/100",
        ]
        if plan.calorie_target is not None:
            header.append(f"Calories: {plan.calorie_target} kcal")
        self.console.print(Panel("\n".join(header), title="Life Plan"))

        adj = plan.adjustments.to_dict()
        defaults = type(plan.adjustments)().to_dict()
        adj_table = Table(title="Adjustments")
        adj_table.add_column("Setting", style="cyan")
        adj_table.add_column("Value", justify="right")
        for name, value in adj.items():
            if name in _ALWAYS_SHOWN or value != defaults[name]:
                if name == "workout_intensity":
                    value = f"{value * 100:.0f}%"
                adj_table.add_row(name.replace("_", " "), str(value))
        self.console.print(adj_table)

        if plan.explanations:
            why_table = Table(title="Why")
            why_table.add_column("P", justify="right")
            why_table.add_column("Reason", style="bold")
            why_table.add_column("Action")
            for e in plan.explanations:
                why_table.add_row(str(e.priority), e.reason, e.action)
            self.console.print(why_table)

        timeline_table = Table(title="Timeline")
        timeline_table.add_column("Time", style="cyan")
        timeline_table.add_column("Activity")
        timeline_table.add_column("Domain", style="dim")
        for entry in plan.timeline:
            activity = entry.activity
            if entry.why:
                activity += f" [dim]({entry.why})[/dim]"
            timeline_table.add_row(entry.time, activity, entry.domain)
        self.console.print(timeline_table)

        for warning in plan.warnings:
            self.console.print(f"[yellow]Warning: {warning}[/yellow]")

    def format_report(self, report: AdaptationReport) -> None:
        """Print an adaptation report to the console."""
        if not report.has_data:
            self.console.print(f"[yellow]{report.summary}[/yellow]")
            return

        patterns = report.patterns.to_dict()
        table = Table(title=f"Last {patterns['days_logged']} days")
        table.add_column("Metric", style="cyan")
        table.add_column("Value", justify="right")
        for name in ("avg_energy", "avg_sleep", "avg_mood", "avg_stress",
                     "avg_food_compliance", "avg_protein_compliance",
                     "workout_completion_rate", "consecutive_skips", "weight_trend"):
            value = patterns[name]
            table.add_row(name.replace("_", " "), "-" if value is None else str(value))
        self.console.print(table)

        if report.adjustments:
            adj_table = Table(title="Suggested adjustments")
            adj_table.add_column("P", justify="right")
            adj_table.add_column("Type", style="cyan")
            adj_table.add_column("Change", justify="right")
            adj_table.add_column("Reason")
            for a in report.adjustments:
                change = a.action if a.value is None else f"{a.value:+g}"
                adj_table.add_row(str(a.priority), a.type, str(change), a.reason)
            self.console.print(adj_table)
        else:
            self.console.print(f"[green]{report.summary}[/green]")

        if report.next_workout is not None:
            self.console.print(f"[bold]Next workout:[/bold] {report.next_workout.note}")

        if report.streak_break is not None:
            self.console.print(f"\n[bold]{report.streak_break.acknowledgement}[/bold]")
            self.console.print(report.streak_break.mindset)
            for step in report.streak_break.recovery_plan:
                self.console.print(f"  {step.day}: {step.action} [dim]({step.priority})[/dim]")

        for warning in report.warnings:
            self.console.print(f"[yellow]Warning: {warning}[/yellow]")

    def format_calibration(self, state: CalibrationState, result: CalibrationResult) -> None:
        """Print a calibration result and the rolling estimate."""
        if not result.can_calibrate:
            self.console.print(f"[yellow]{result.note}[/yellow] ({len(state.history)} weigh-ins stored)")
        else:
            color = "green" if result.confidence == "high" else "yellow"
            self.console.print(f"[bold]TDEE calibration[/bold] over {result.period_days} days "
                               f"([{color}]{result.confidence}[/{color}] confidence)")
            self.console.print(f"  Expected change: {result.expected_change_kg:+.2f} kg")
            self.console.print(f"  Actual change:   {result.actual_change_kg:+.2f} kg")
            self.console.print(f"  Suggested TDEE:  {result.suggested_estimate:.0f} kcal/day "
                               f"({result.adjustment:+d})")
            self.console.print(f"  {result.note}")
        self.console.print(f"  Formula TDEE: {state.formula_tdee:.0f} kcal/day")
        self.console.print(f"  [bold]Rolling estimate: {state.estimate:.0f} kcal/day[/bold]")


class JSONFormatter:
    """Format results as JSON for programmatic use."""

    def format(self, plan: DailyPlan) -> str:
        """Return the plan as a JSON string with stable key order."""
        return json.dumps(plan.to_dict(), indent=2, sort_keys=True)


class MarkdownFormatter:
    """Format a plan as Markdown for sharing."""

    def format(self, plan: DailyPlan) -> str:
        lines = [
            f"# Plan for {plan.day.isoformat()}",
            "",
            f"**Mode:** {plan.mode}",
            f"**Life score:** {plan.life_score}/100",
        ]
        if plan.calorie_target is not None:
            lines.append(f"**Calories:** {plan.calorie_target} kcal")

        if plan.explanations:
            lines.extend(["", "## Why", ""])
            for e in plan.explanations:
                lines.append(f"- **{e.reason}**: {e.human_explanation}")

        lines.extend(["", "## Timeline", "", "| Time | Activity |", "|------|----------|"])
        for entry in plan.timeline:
            lines.append(f"| {entry.time} | {entry.activity} |")

        return "\n".join(lines)


def format_plan(
    plan: DailyPlan,
    output_format: str = "table",
    console: Optional[Console] = None,
) -> Optional[str]:
    """Format a plan in the specified format.

    Args:
        plan: Plan to format
        output_format: One of 'table', 'json', 'markdown'
        console: Rich console (for table format)

    Returns:
        Formatted string for json/markdown, None for table (prints directly)
    """
    if output_format == "table":
        TableFormatter(console).format_plan(plan)
        return None
    elif output_format == "json":
        return JSONFormatter().format(plan)
    elif output_format == "markdown":
        return MarkdownFormatter().format(plan)
    raise ValueError(f"Unknown output format: {output_format}")
