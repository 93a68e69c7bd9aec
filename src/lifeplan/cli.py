"""CLI interface using Typer."""

from __future__ import annotations

import json
from datetime import date, datetime, time, timedelta
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from lifeplan.config import configure_logging, get_settings
from lifeplan.db import get_db
from lifeplan.db.queries import (
    DailyLogQueries,
    HealthLogQueries,
    LooksLogQueries,
    ModeQueries,
    RoutineLogQueries,
    UserQueries,
    WeightQueries,
)
from lifeplan.tracking.models import Profile

app = typer.Typer(
    help="Daily life planner: one plan from sleep, stress, training and nutrition signals",
    no_args_is_help=True,
)
console = Console()

user_app = typer.Typer(help="Manage the user profile")
log_app = typer.Typer(help="Log daily health, looks, routine and training data")
weight_app = typer.Typer(help="Log and track weight with EMA trend")
mode_app = typer.Typer(help="Set the current life mode (travel, sick, exam, festival)")
tdee_app = typer.Typer(help="TDEE estimates and calibration from observed weight change")
adapt_app = typer.Typer(help="Multi-day pattern analysis and adjustments")
plan_app = typer.Typer(help="Generate the unified daily plan")

app.add_typer(user_app, name="user")
app.add_typer(log_app, name="log")
app.add_typer(weight_app, name="weight")
app.add_typer(mode_app, name="mode")
app.add_typer(tdee_app, name="tdee")
app.add_typer(adapt_app, name="adapt")
app.add_typer(plan_app, name="plan")


@app.callback()
def main_callback() -> None:
    """Configure logging before any command runs."""
    configure_logging(get_settings())


# ============================================================================
# Helpers
# ============================================================================


def output_json(response: dict, file=None) -> None:
    """Output JSON response to stdout or file."""
    json_str = json.dumps(response, indent=2)
    if file:
        file.write(json_str)
    else:
        print(json_str)


def fail(
    command: str,
    message: str,
    json_output: bool,
    suggestions: Optional[list[str]] = None,
) -> None:
    """Report an error in the requested format and exit with status 1."""
    if json_output:
        output_json({
            "success": False,
            "command": command,
            "errors": [message],
            "suggestions": suggestions or [],
        })
    else:
        console.print(f"[red]{message}[/red]")
        for suggestion in suggestions or []:
            console.print(suggestion)
    raise typer.Exit(1)


def parse_date(value: Optional[str], command: str, json_output: bool) -> date:
    """Parse YYYY-MM-DD, defaulting to today."""
    if value is None:
        return date.today()
    try:
        return date.fromisoformat(value)
    except ValueError:
        fail(command, f"Invalid date '{value}'. Use YYYY-MM-DD.", json_output)


def parse_time(value: Optional[str], command: str, json_output: bool) -> Optional[time]:
    if value is None:
        return None
    try:
        return time.fromisoformat(value)
    except ValueError:
        fail(command, f"Invalid time '{value}'. Use HH:MM.", json_output)


def require_user(conn, user_id: Optional[int], command: str, json_output: bool) -> Profile:
    """Load the given or default profile, exiting with a hint when there is none."""
    profile = UserQueries.get_user(conn, user_id) if user_id else UserQueries.get_default_user(conn)
    if profile is None:
        fail(
            command,
            "No user profile found",
            json_output,
            ["Create one with: lifeplan user create --sex male --age 30 --height 178 --weight 80"],
        )
    return profile


def report_saved(command: str, log_date: date, json_output: bool, data: dict) -> None:
    if json_output:
        output_json({
            "success": True,
            "command": command,
            "data": data,
            "human_summary": f"Saved {command.split()[-1]} log for {log_date.isoformat()}",
        })
    else:
        console.print(f"[green]Saved {command.split()[-1]} log for {log_date.isoformat()}[/green]")


# ============================================================================
# User Commands
# ============================================================================


@user_app.command("create")
def user_create(
    sex: str = typer.Option(..., "--sex", help="Sex (male/female)"),
    age: int = typer.Option(..., "--age", help="Age in years"),
    height: float = typer.Option(..., "--height", help="Height in cm"),
    weight: float = typer.Option(..., "--weight", help="Current weight in kg"),
    activity: str = typer.Option(
        "moderate", "--activity", help="Activity level (sedentary/light/moderate/active/very_active)"
    ),
    goal: str = typer.Option("health", "--goal", help="Goal (fat_loss/muscle_gain/recomp/health)"),
    diet: Optional[str] = typer.Option(None, "--diet", help="Diet preference (e.g. vegetarian)"),
    job: Optional[str] = typer.Option(None, "--job", help="Job type (desk_job/standing_job/active_job/...)"),
    conditions: Optional[list[str]] = typer.Option(None, "--condition", help="Health condition (repeatable)"),
    fasting: bool = typer.Option(False, "--fasting", help="Intermittent fasting"),
    tracks_cycle: bool = typer.Option(False, "--tracks-cycle", help="Track menstrual cycle"),
    last_period: Optional[str] = typer.Option(None, "--last-period", help="Last period start (YYYY-MM-DD)"),
    cycle_length: int = typer.Option(28, "--cycle-length", help="Cycle length in days"),
    body_fat: Optional[float] = typer.Option(None, "--body-fat", help="Body fat percent"),
    target_weight: Optional[float] = typer.Option(None, "--target-weight", help="Target weight in kg"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Create a user profile."""
    try:
        profile = Profile(
            user_id=None,
            sex=sex,
            age=age,
            height_cm=height,
            weight_kg=weight,
            activity_level=activity,
            goal_type=goal,
            diet_preference=diet,
            job_type=job,
            conditions=tuple(conditions or ()),
            fasting_mode=fasting,
            tracks_cycle=tracks_cycle,
            last_period_date=parse_date(last_period, "user create", json_output) if last_period else None,
            cycle_length=cycle_length,
            body_fat_percent=body_fat,
            target_weight_kg=target_weight,
        )
    except ValueError as e:
        fail("user create", str(e), json_output)

    db = get_db()
    with db.get_connection() as conn:
        user_id = UserQueries.create_user(conn, profile)

    if json_output:
        output_json({
            "success": True,
            "command": "user create",
            "data": {"user_id": user_id},
            "human_summary": f"Created user profile (ID: {user_id})",
        })
    else:
        console.print(f"[green]Created user profile (ID: {user_id})[/green]")


@user_app.command("show")
def user_show(
    user_id: Optional[int] = typer.Option(None, "--id", help="User ID (default: first user)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show user profile."""
    db = get_db()
    with db.get_connection() as conn:
        profile = require_user(conn, user_id, "user show", json_output)

    if json_output:
        output_json({
            "success": True,
            "command": "user show",
            "data": {
                "user_id": profile.user_id,
                "sex": profile.sex,
                "age": profile.age,
                "height_cm": profile.height_cm,
                "weight_kg": profile.weight_kg,
                "activity_level": profile.activity_level,
                "goal_type": profile.goal_type,
                "conditions": list(profile.conditions),
                "fasting_mode": profile.fasting_mode,
                "tracks_cycle": profile.tracks_cycle,
            },
            "human_summary": f"User {profile.user_id}: {profile.sex}, {profile.age}y, "
                             f"{profile.height_cm}cm, {profile.weight_kg}kg",
        })
    else:
        console.print(f"[bold]User Profile (ID: {profile.user_id})[/bold]")
        console.print(f"  Sex: {profile.sex}")
        console.print(f"  Age: {profile.age}")
        console.print(f"  Height: {profile.height_cm} cm")
        console.print(f"  Weight: {profile.weight_kg} kg")
        console.print(f"  Activity: {profile.activity_level}")
        console.print(f"  Goal: {profile.goal_type}")
        if profile.conditions:
            console.print(f"  Conditions: {', '.join(profile.conditions)}")
        if profile.fasting_mode:
            console.print("  Fasting: on")


@app.command()
def metrics(
    user_id: Optional[int] = typer.Option(None, "--user", help="User ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show BMR, TDEE, calorie target and macros for the profile."""
    from lifeplan.advisor.service import current_targets

    db = get_db()
    with db.get_connection() as conn:
        profile = require_user(conn, user_id, "metrics", json_output)
        targets = current_targets(conn, profile)

    if json_output:
        output_json({
            "success": True,
            "command": "metrics",
            "data": targets.to_dict(),
            "human_summary": f"Target {targets.target_calories} kcal/day, {targets.protein_g}g protein",
        })
    else:
        console.print(targets.summary())
        console.print(f"[dim]{targets.explanation}[/dim]")


# ============================================================================
# Daily Log Commands
# ============================================================================


@log_app.command("health")
def log_health(
    date_str: Optional[str] = typer.Option(None, "--date", "-d", help="Date (YYYY-MM-DD, default: today)"),
    sleep: Optional[float] = typer.Option(None, "--sleep", help="Hours slept"),
    sleep_quality: Optional[str] = typer.Option(None, "--sleep-quality", help="poor/average/good"),
    energy: Optional[int] = typer.Option(None, "--energy", help="Energy 1-10"),
    stress: Optional[int] = typer.Option(None, "--stress", help="Stress 1-10"),
    mood: Optional[int] = typer.Option(None, "--mood", help="Mood 1-10"),
    water: int = typer.Option(0, "--water", help="Glasses of water"),
    screen_time: Optional[float] = typer.Option(None, "--screen-time", help="Screen time in hours"),
    breathing: bool = typer.Option(False, "--breathing", help="Breathing exercise done"),
    notes: str = typer.Option("", "--notes", help="Free-text notes"),
    user_id: Optional[int] = typer.Option(None, "--user", help="User ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Log sleep, energy, stress, mood and water for a day."""
    from lifeplan.tracking.models import HealthLog

    log_date = parse_date(date_str, "log health", json_output)
    log = HealthLog(
        log_date=log_date,
        sleep_hours=sleep,
        sleep_quality=sleep_quality,
        energy_level=energy,
        stress_level=stress,
        mood=mood,
        water_glasses=water,
        screen_time_hours=screen_time,
        breathing_exercise_done=breathing,
        notes=notes,
    )
    errors = log.validate()
    if errors:
        fail("log health", "; ".join(errors), json_output)

    db = get_db()
    with db.get_connection() as conn:
        profile = require_user(conn, user_id, "log health", json_output)
        HealthLogQueries.upsert(conn, profile.user_id, log)

    report_saved("log health", log_date, json_output, {"date": log_date.isoformat()})


@log_app.command("looks")
def log_looks(
    date_str: Optional[str] = typer.Option(None, "--date", "-d", help="Date (YYYY-MM-DD, default: today)"),
    morning: bool = typer.Option(False, "--morning", help="Morning skincare done"),
    evening: bool = typer.Option(False, "--evening", help="Evening skincare done"),
    facial: bool = typer.Option(False, "--facial", help="Facial exercises done"),
    hair: bool = typer.Option(False, "--hair", help="Hair routine done"),
    mewing: int = typer.Option(0, "--mewing", help="Mewing minutes"),
    groomed: Optional[list[str]] = typer.Option(None, "--groomed", help="Grooming task done (repeatable)"),
    user_id: Optional[int] = typer.Option(None, "--user", help="User ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Log skincare, grooming and facial exercise for a day."""
    from lifeplan.tracking.models import LooksLog

    log_date = parse_date(date_str, "log looks", json_output)
    log = LooksLog(
        log_date=log_date,
        morning_routine_done=morning,
        evening_routine_done=evening,
        facial_exercises_done=facial,
        hair_routine_done=hair,
        mewing_minutes=mewing,
    )
    done = {g.lower() for g in groomed or []}
    for task in log.grooming_tasks:
        task.done = task.task.lower() in done

    errors = log.validate()
    if errors:
        fail("log looks", "; ".join(errors), json_output)

    db = get_db()
    with db.get_connection() as conn:
        profile = require_user(conn, user_id, "log looks", json_output)
        LooksLogQueries.upsert(conn, profile.user_id, log)

    report_saved("log looks", log_date, json_output, {"date": log_date.isoformat()})


@log_app.command("routine")
def log_routine(
    date_str: Optional[str] = typer.Option(None, "--date", "-d", help="Date (YYYY-MM-DD, default: today)"),
    wake: Optional[str] = typer.Option(None, "--wake", help="Wake time (HH:MM)"),
    sleep_time: Optional[str] = typer.Option(None, "--sleep-time", help="Bedtime (HH:MM)"),
    habits: Optional[list[str]] = typer.Option(None, "--habit", help="Habit id done (repeatable)"),
    focus: float = typer.Option(0.0, "--focus", help="Focused work hours"),
    no_distractions: bool = typer.Option(False, "--no-distractions", help="Distractions avoided"),
    user_id: Optional[int] = typer.Option(None, "--user", help="User ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Log habits, wake/sleep times and focus for a day."""
    from lifeplan.tracking.models import RoutineLog

    log_date = parse_date(date_str, "log routine", json_output)
    log = RoutineLog(
        log_date=log_date,
        wake_time=wake,
        sleep_time=sleep_time,
        focus_hours=focus,
        distractions_avoided=no_distractions,
    )
    done = set(habits or [])
    for habit in log.habits:
        habit.done = habit.id in done

    errors = log.validate()
    if errors:
        fail("log routine", "; ".join(errors), json_output)

    db = get_db()
    with db.get_connection() as conn:
        profile = require_user(conn, user_id, "log routine", json_output)
        RoutineLogQueries.upsert(conn, profile.user_id, log)

    report_saved("log routine", log_date, json_output, {"date": log_date.isoformat()})


@log_app.command("daily")
def log_daily(
    date_str: Optional[str] = typer.Option(None, "--date", "-d", help="Date (YYYY-MM-DD, default: today)"),
    food: Optional[float] = typer.Option(None, "--food", help="Food compliance percent"),
    protein: Optional[float] = typer.Option(None, "--protein", help="Protein target completion percent"),
    workout: bool = typer.Option(False, "--workout", help="Workout done"),
    skipped: Optional[str] = typer.Option(None, "--skipped", help="Skip reason (fatigue/sick/no_time/...)"),
    energy: Optional[int] = typer.Option(None, "--energy", help="Energy 1-10"),
    sleep: Optional[float] = typer.Option(None, "--sleep", help="Hours slept"),
    sleep_quality: Optional[int] = typer.Option(None, "--sleep-quality", help="Sleep quality 1-5"),
    soreness: Optional[int] = typer.Option(None, "--soreness", help="Soreness 0-5"),
    mood: Optional[int] = typer.Option(None, "--mood", help="Mood 1-10"),
    stress: Optional[int] = typer.Option(None, "--stress", help="Stress 1-10"),
    weight: Optional[float] = typer.Option(None, "--weight", help="Morning weight in kg"),
    user_id: Optional[int] = typer.Option(None, "--user", help="User ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Log training and compliance feedback for a day."""
    from lifeplan.tracking.models import DailyLog

    log_date = parse_date(date_str, "log daily", json_output)
    log = DailyLog(
        log_date=log_date,
        food_compliance_percent=food,
        protein_completion_percent=protein,
        workout_done=workout,
        workout_skipped_reason=None if workout else skipped,
        energy_level=energy,
        sleep_hours=sleep,
        sleep_quality=sleep_quality,
        soreness_level=soreness,
        mood=mood,
        stress_level=stress,
        weight_kg=weight,
    )
    errors = log.validate()
    if errors:
        fail("log daily", "; ".join(errors), json_output)

    db = get_db()
    with db.get_connection() as conn:
        profile = require_user(conn, user_id, "log daily", json_output)
        DailyLogQueries.upsert(conn, profile.user_id, log)

    report_saved("log daily", log_date, json_output, {"date": log_date.isoformat()})


# ============================================================================
# Weight Tracking Commands
# ============================================================================


@weight_app.command("add")
def weight_add(
    weight: float = typer.Argument(..., help="Weight in kg"),
    date_str: Optional[str] = typer.Option(None, "--date", "-d", help="Date (YYYY-MM-DD, default: today)"),
    body_fat: Optional[float] = typer.Option(None, "--body-fat", help="Body fat percent"),
    user_id: Optional[int] = typer.Option(None, "--user", help="User ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Log a weight measurement."""
    measured_at = parse_date(date_str, "weight add", json_output)
    if weight <= 0:
        fail("weight add", "Weight must be positive", json_output)

    db = get_db()
    with db.get_connection() as conn:
        profile = require_user(conn, user_id, "weight add", json_output)
        sample = WeightQueries.add_weight(conn, profile.user_id, weight, measured_at, body_fat)

    if json_output:
        output_json({
            "success": True,
            "command": "weight add",
            "data": {
                "date": measured_at.isoformat(),
                "weight_kg": sample.weight_kg,
                "trend_kg": round(sample.trend_kg, 2),
            },
            "human_summary": f"Logged {weight:.1f} kg (trend: {sample.trend_kg:.1f} kg)",
        })
    else:
        console.print(f"[green]Logged {weight:.1f} kg[/green] (trend: {sample.trend_kg:.1f} kg)")


@weight_app.command("list")
def weight_list(
    limit: int = typer.Option(14, "--limit", "-n", help="Number of entries"),
    user_id: Optional[int] = typer.Option(None, "--user", help="User ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show recent weight samples with trend."""
    db = get_db()
    with db.get_connection() as conn:
        profile = require_user(conn, user_id, "weight list", json_output)
        samples = WeightQueries.get_weight_history(conn, profile.user_id, limit=limit)

    if json_output:
        output_json({
            "success": True,
            "command": "weight list",
            "data": {
                "samples": [
                    {
                        "date": s.measured_at.isoformat(),
                        "weight_kg": s.weight_kg,
                        "trend_kg": round(s.trend_kg, 2),
                        "body_fat_percent": s.body_fat_percent,
                    }
                    for s in samples
                ],
            },
            "human_summary": f"{len(samples)} weight samples",
        })
        return

    if not samples:
        console.print("[yellow]No weight samples yet[/yellow]")
        return

    table = Table(title="Weight History")
    table.add_column("Date", style="cyan")
    table.add_column("Weight (kg)", justify="right")
    table.add_column("Trend (kg)", justify="right")
    for s in samples:
        table.add_row(s.measured_at.isoformat(), f"{s.weight_kg:.1f}", f"{s.trend_kg:.1f}")
    console.print(table)


# ============================================================================
# Mode Commands
# ============================================================================


@mode_app.command("set")
def mode_set(
    mode: str = typer.Argument(..., help="normal/travel/sick/exam/festival"),
    days: Optional[int] = typer.Option(None, "--days", help="Return to normal after N days"),
    reason: str = typer.Option("", "--reason", help="Why the mode was set"),
    user_id: Optional[int] = typer.Option(None, "--user", help="User ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Set the current life mode."""
    from lifeplan.advisor.models import UserMode
    from lifeplan.advisor.modes import MODES

    if mode not in MODES:
        fail("mode set", f"Unknown mode '{mode}'", json_output, [f"Available: {', '.join(MODES)}"])

    today = date.today()
    user_mode = UserMode(
        mode=mode,
        active_since=today,
        auto_expiry=today + timedelta(days=days) if days else None,
        reason=reason,
    )

    db = get_db()
    with db.get_connection() as conn:
        profile = require_user(conn, user_id, "mode set", json_output)
        ModeQueries.set_mode(conn, profile.user_id, user_mode)

    if json_output:
        output_json({
            "success": True,
            "command": "mode set",
            "data": user_mode.to_dict(),
            "human_summary": f"Mode set to {mode}",
        })
    else:
        console.print(f"[green]Mode set to {mode}[/green]")
        if user_mode.auto_expiry:
            console.print(f"  Back to normal after {user_mode.auto_expiry.isoformat()}")


@mode_app.command("show")
def mode_show(
    user_id: Optional[int] = typer.Option(None, "--user", help="User ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show the current life mode."""
    from lifeplan.advisor.modes import MODE_DESCRIPTIONS, effective_mode

    db = get_db()
    with db.get_connection() as conn:
        profile = require_user(conn, user_id, "mode show", json_output)
        user_mode = ModeQueries.get_mode(conn, profile.user_id)

    active, warning = effective_mode(user_mode, date.today())
    if json_output:
        output_json({
            "success": True,
            "command": "mode show",
            "data": {**user_mode.to_dict(), "effective_mode": active},
            "warnings": [warning] if warning else [],
            "human_summary": f"Mode: {active}",
        })
    else:
        console.print(f"[bold]Mode: {active}[/bold] - {MODE_DESCRIPTIONS[active]}")
        if warning:
            console.print(f"[yellow]{warning}[/yellow]")


# ============================================================================
# TDEE Calibration Commands
# ============================================================================


@tdee_app.command("calibrate")
def tdee_calibrate(
    date_str: Optional[str] = typer.Option(None, "--date", "-d", help="Calibrate as of (default: today)"),
    user_id: Optional[int] = typer.Option(None, "--user", help="User ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Compare intended and observed weight change and update the TDEE estimate."""
    from lifeplan.advisor.service import run_calibration
    from lifeplan.export.formatters import TableFormatter

    day = parse_date(date_str, "tdee calibrate", json_output)

    db = get_db()
    with db.get_connection() as conn:
        profile = require_user(conn, user_id, "tdee calibrate", json_output)
        state, result = run_calibration(conn, profile.user_id, day)

    if json_output:
        output_json({
            "success": True,
            "command": "tdee calibrate",
            "data": {
                "result": result.to_dict(),
                "estimate": state.estimate,
                "formula_tdee": state.formula_tdee,
                "history_points": len(state.history),
            },
            "suggestions": [] if result.can_calibrate else ["Log your weight with: lifeplan weight add <kg>"],
            "human_summary": f"TDEE estimate: {state.estimate:.0f} kcal/day ({result.note})",
        })
    else:
        TableFormatter(console).format_calibration(state, result)


@tdee_app.command("show")
def tdee_show(
    user_id: Optional[int] = typer.Option(None, "--user", help="User ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show the stored TDEE estimate."""
    from lifeplan.db.queries import CalibrationQueries
    from lifeplan.profiles.body_calc import calculate_targets
    from lifeplan.tracking.tdee_filter import TDEEFilter

    db = get_db()
    with db.get_connection() as conn:
        profile = require_user(conn, user_id, "tdee show", json_output)
        state = CalibrationQueries.get_state(conn, profile.user_id)

    formula_tdee = calculate_targets(profile).tdee
    if state is None:
        estimate, uncertainty, source = formula_tdee, None, "formula"
    else:
        tdee_filter = TDEEFilter(bias=state.estimate - state.formula_tdee, variance=state.variance)
        estimate, uncertainty = tdee_filter.get_adjusted_tdee(state.formula_tdee)
        source = "calibrated" if state.updated_at else "formula"

    if json_output:
        output_json({
            "success": True,
            "command": "tdee show",
            "data": {
                "formula_tdee": formula_tdee,
                "estimate": round(estimate),
                "uncertainty_95ci": round(uncertainty) if uncertainty is not None else None,
                "source": source,
                "updated_at": state.updated_at.isoformat() if state and state.updated_at else None,
            },
            "human_summary": f"TDEE: {estimate:.0f} kcal/day ({source})",
        })
    else:
        console.print(f"  Formula TDEE: {formula_tdee} kcal/day")
        line = f"  [bold]Your TDEE: {estimate:.0f}"
        if uncertainty is not None:
            line += f" ± {uncertainty:.0f}"
        console.print(line + f" kcal/day[/bold] ({source})")


@tdee_app.command("compare")
def tdee_compare(
    steps: int = typer.Option(0, "--steps", help="Average daily steps"),
    workouts: Optional[list[str]] = typer.Option(
        None, "--workout", "-w", help="Workout as type:minutes, e.g. hiit:30 (repeatable)"
    ),
    user_id: Optional[int] = typer.Option(None, "--user", help="User ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Compare the activity-multiplier TDEE with the component method."""
    from lifeplan.tracking.adaptive_tdee import compare_to_static_tdee

    sessions = []
    for entry in workouts or []:
        kind, _, minutes = entry.partition(":")
        try:
            sessions.append((kind, float(minutes)))
        except ValueError:
            fail("tdee compare", f"Invalid workout '{entry}'. Use type:minutes.", json_output)

    db = get_db()
    with db.get_connection() as conn:
        profile = require_user(conn, user_id, "tdee compare", json_output)

    comparison = compare_to_static_tdee(profile, steps=steps, workouts=sessions)

    if json_output:
        output_json({
            "success": True,
            "command": "tdee compare",
            "data": comparison.to_dict(),
            "human_summary": comparison.recommendation,
        })
        return

    table = Table(title="TDEE: static vs adaptive")
    table.add_column("Component", style="cyan")
    table.add_column("kcal/day", justify="right")
    for name, value in comparison.components.items():
        table.add_row(name.upper(), str(value))
    table.add_row("[bold]Adaptive total[/bold]", f"[bold]{comparison.adaptive}[/bold]")
    table.add_row("Static (activity multiplier)", str(comparison.static))
    table.add_row("Difference", f"{comparison.difference:+d} ({comparison.difference_percent:+d}%)")
    console.print(table)
    console.print(comparison.recommendation)


@tdee_app.command("weekly")
def tdee_weekly(
    date_str: Optional[str] = typer.Option(None, "--date", "-d", help="Last day of the week (default: today)"),
    user_id: Optional[int] = typer.Option(None, "--user", help="User ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Average daily expenditure over the last 7 days of logs."""
    from lifeplan.advisor.service import weekly_tdee

    day = parse_date(date_str, "tdee weekly", json_output)

    db = get_db()
    with db.get_connection() as conn:
        profile = require_user(conn, user_id, "tdee weekly", json_output)
        summary = weekly_tdee(conn, profile.user_id, day)

    if json_output:
        output_json({
            "success": True,
            "command": "tdee weekly",
            "data": summary.to_dict(),
            "human_summary": f"Weekly average TDEE: {summary.average_tdee} kcal/day",
        })
        return

    console.print(f"[bold]Weekly average TDEE: {summary.average_tdee} kcal/day[/bold]")
    if summary.note:
        console.print(f"  [yellow]{summary.note}[/yellow]")
    else:
        console.print(f"  Base: {summary.base} kcal (x{summary.multiplier} from daily feedback)")
        console.print(f"  Exercise: {summary.exercise} kcal/day over {summary.workout_days} workout days")


# ============================================================================
# Adaptation Commands
# ============================================================================


@adapt_app.command("report")
def adapt_report(
    date_str: Optional[str] = typer.Option(None, "--date", "-d", help="Analyze up to (default: today)"),
    user_id: Optional[int] = typer.Option(None, "--user", help="User ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Analyze the last week of daily logs and suggest adjustments."""
    from lifeplan.advisor.service import build_context
    from lifeplan.export.formatters import TableFormatter

    day = parse_date(date_str, "adapt report", json_output)

    db = get_db()
    with db.get_connection() as conn:
        profile = require_user(conn, user_id, "adapt report", json_output)
        report = build_context(conn, profile.user_id, day).adaptation

    if json_output:
        output_json({
            "success": True,
            "command": "adapt report",
            "data": report.to_dict(),
            "warnings": report.warnings,
            "human_summary": report.summary,
        })
    else:
        TableFormatter(console).format_report(report)


@adapt_app.command("plateau")
def adapt_plateau(
    date_str: Optional[str] = typer.Option(None, "--date", "-d", help="Check up to (default: today)"),
    user_id: Optional[int] = typer.Option(None, "--user", help="User ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Check the weight history for a plateau and suggest a refeed or diet break."""
    from lifeplan.advisor.service import check_plateau

    day = parse_date(date_str, "adapt plateau", json_output)

    db = get_db()
    with db.get_connection() as conn:
        profile = require_user(conn, user_id, "adapt plateau", json_output)
        result, plan = check_plateau(conn, profile.user_id, day)

    if result.in_plateau:
        summary = f"{result.severity.capitalize()} plateau for {result.days} days: {result.action.message}"
    elif result.reason == "insufficient_data":
        summary = "Not enough weight history to detect a plateau (need 14 days)."
    else:
        summary = "No plateau. Weight is moving."

    if json_output:
        output_json({
            "success": True,
            "command": "adapt plateau",
            "data": {
                "plateau": result.to_dict(),
                "plan": plan.to_dict() if plan else None,
            },
            "suggestions": [] if result.reason != "insufficient_data" else [
                "Log your weight with: lifeplan weight add <kg>"
            ],
            "human_summary": summary,
        })
        return

    color = "yellow" if result.in_plateau else "green"
    console.print(f"[{color}]{summary}[/{color}]")
    if result.action is not None:
        for option in result.action.options:
            console.print(f"  - {option}")
        if result.action.alternative:
            console.print(f"  {result.action.alternative}")
    if plan is not None:
        console.print(
            f"\n[bold]Plan:[/bold] {plan.calories} kcal "
            f"(P {plan.protein_g}g / C {plan.carbs_g}g / F {plan.fats_g}g)"
        )
        for note in plan.notes:
            console.print(f"  - {note}")


# ============================================================================
# Plan Commands
# ============================================================================


@plan_app.command("today")
def plan_today(
    date_str: Optional[str] = typer.Option(None, "--date", "-d", help="Plan date (default: today)"),
    time_str: Optional[str] = typer.Option(
        None, "--time", "-t", help="Time of day (HH:MM) for time-aware rules; 'now' for the current time"
    ),
    output_format: Optional[str] = typer.Option(None, "--format", "-f", help="table/json/markdown"),
    user_id: Optional[int] = typer.Option(None, "--user", help="User ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON envelope"),
) -> None:
    """Generate and store the unified plan for a day."""
    from lifeplan.advisor.service import compute_daily_plan
    from lifeplan.export.formatters import format_plan

    day = parse_date(date_str, "plan today", json_output)
    if time_str == "now":
        current_time = datetime.now().time().replace(second=0, microsecond=0)
    else:
        current_time = parse_time(time_str, "plan today", json_output)

    db = get_db()
    with db.get_connection() as conn:
        profile = require_user(conn, user_id, "plan today", json_output)
        plan = compute_daily_plan(conn, profile.user_id, day, current_time)

    if json_output:
        output_json({
            "success": True,
            "command": "plan today",
            "data": plan.to_dict(),
            "warnings": plan.warnings,
            "human_summary": f"{plan.mode} plan for {day.isoformat()}, life score {plan.life_score}",
        })
        return

    rendered = format_plan(plan, output_format or get_settings().defaults.output_format, console)
    if rendered is not None:
        print(rendered)


if __name__ == "__main__":
    app()
