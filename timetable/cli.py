"""
Command-line interface for the timetable editor core.

Usage:
    python -m timetable init project.json
    python -m timetable validate project.json
    python -m timetable check project.json --day 월 --period 1 --class 3-1 --subject 영어 --teacher t1
    python -m timetable place project.json --day 월 --period 1 --class 3-1 --subject 영어 --teacher t1
    python -m timetable blocks project.json t1
    python -m timetable view project.json --teacher t1
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .bell import active_schedules, all_period_numbers, blocked_period_label
from .config import get_settings
from .conflicts import Conflict
from .data.defaults import default_document
from .data.loader import DocumentLoadError, load_document, save_document
from .data.models import DAYS, MAX_PERIOD, Day, Placement
from .store import PlacementOutcome, TimetableStore

# Create Typer app
app = typer.Typer(
    name="timetable",
    help="Weekly school timetable editor: placement checks, overlap policy and required blocks.",
    add_completion=False,
)

# Rich console for pretty output
console = Console()

logger = logging.getLogger(__name__)


# =============================================================================
# Helper Functions
# =============================================================================

@app.callback()
def configure(
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Enable debug logging",
    ),
) -> None:
    """Set up logging for every command."""
    level = "DEBUG" if verbose else get_settings().log_level
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def load_store(project: Path) -> TimetableStore:
    """Load a project file into a store, exiting on failure."""
    try:
        return TimetableStore.from_document(load_document(project))
    except DocumentLoadError as e:
        console.print(f"[red]Error loading project:[/red] {escape(str(e))}")
        raise typer.Exit(code=1)


def parse_day(value: str) -> Day:
    try:
        return Day(value)
    except ValueError:
        console.print(f"[red]Error:[/red] Invalid day '{value}'")
        console.print(f"Valid days: {', '.join(d.value for d in DAYS)}")
        raise typer.Exit(code=1)


def build_candidate(
    day: str,
    period: int,
    class_id: str,
    subject: str,
    teacher: Optional[str],
    room: Optional[str],
    placement_id: Optional[str] = None,
) -> Placement:
    fields = dict(
        day=parse_day(day),
        period=period,
        class_id=class_id,
        subject=subject,
        teacher_id=teacher,
        room_id=room,
    )
    if placement_id:
        fields["id"] = placement_id
    return Placement(**fields)


def print_conflict(conflict: Conflict) -> None:
    """Print a conflict report to the console."""
    if not conflict.has_conflict:
        console.print(Panel(Text("NO CONFLICT", style="bold green"), title="Conflict Check"))
        return

    console.print(Panel(Text(conflict.reason, style="bold red"), title="Conflict Check"))

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Kind")
    table.add_column("Placement")
    table.add_column("Class")
    table.add_column("Subject")
    table.add_column("Teacher")
    table.add_column("Room")

    for issue in conflict.issues:
        for p in issue.placements:
            table.add_row(
                issue.kind.value,
                p.id,
                p.class_id,
                p.subject,
                p.teacher_id or "-",
                p.room_id or "-",
            )

    console.print(table)


def _cell(placements: list[Placement], show_class: bool, show_teacher: bool) -> str:
    lines = []
    for p in placements:
        parts = [p.custom_text or p.subject]
        if show_class:
            parts.append(p.class_id)
        if show_teacher and p.teacher_id:
            parts.append(p.teacher_id)
        lines.append(" ".join(parts))
    return "\n".join(lines)


def print_week_grid(
    store: TimetableStore,
    placements: list[Placement],
    title: str,
    show_class: bool = False,
    show_teacher: bool = False,
) -> None:
    """Print placements as a period x weekday grid."""
    table = Table(title=title, show_header=True, header_style="bold cyan", show_lines=True)
    table.add_column("교시", style="dim")
    for day in DAYS:
        table.add_column(day.value, justify="center")

    for period in all_period_numbers(store.school_info):
        blocked = blocked_period_label(store.school_info, period)
        if blocked:
            table.add_row(str(period), *[f"[dim]{blocked}[/dim]"] * len(DAYS))
            continue

        row = [str(period)]
        for day in DAYS:
            cell = [p for p in placements if p.day == day and p.period == period]
            row.append(_cell(cell, show_class, show_teacher) or "-")
        table.add_row(*row)

    console.print(table)


# =============================================================================
# Commands
# =============================================================================

@app.command()
def init(
    output: Path = typer.Argument(..., help="Path of the new project file"),
    name: str = typer.Option("행복초등학교", "--name", "-n", help="School name"),
    classes: int = typer.Option(4, "--classes", "-c", help="Classes per grade", min=1, max=20),
    empty: bool = typer.Option(False, "--empty", help="Start without sample teachers"),
    overwrite: bool = typer.Option(False, "--overwrite", help="Replace an existing file"),
) -> None:
    """
    Create a new project with default rooms, subjects and bell schedules.

    Example:
        python -m timetable init project.json --classes 5
    """
    if output.exists() and not overwrite:
        console.print(f"[red]Error:[/red] File already exists (use --overwrite): {output}")
        raise typer.Exit(code=1)

    document = default_document(name=name, classes_per_grade=classes, with_teachers=not empty)
    save_document(document, output)
    console.print(f"[green]Project created:[/green] {output}")


@app.command()
def validate(
    project: Path = typer.Argument(..., help="Path to project JSON file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="List every conflicting placement"),
) -> None:
    """
    Load a project and report conflicts across the whole timetable.

    Checks for:
    - Valid JSON structure and schema
    - Dangling teacher/room references (warnings)
    - Teacher, class and room conflicts between placements

    Example:
        python -m timetable validate project.json
    """
    console.print(f"\n[bold]Validating:[/bold] {project}\n")

    try:
        document = load_document(project)
    except DocumentLoadError as e:
        console.print("[red]Invalid project:[/red]")
        for line in str(e).split("\n"):
            console.print(f"   {escape(line)}")
        raise typer.Exit(code=1)

    store = TimetableStore.from_document(document)
    report = store.scan()

    warnings = document.reference_warnings()
    if warnings:
        console.print("[yellow]Warnings:[/yellow]")
        for w in warnings:
            console.print(f"   - {w}")

    table = Table(show_header=False, box=None)
    table.add_column("Entity", style="cyan")
    table.add_column("Count", style="white")
    table.add_row("Teachers", str(len(document.teachers)))
    table.add_row("Rooms", str(len(document.rooms)))
    table.add_row("Subjects", str(len(document.subjects)))
    table.add_row("Placements", str(report.total))
    table.add_row("In conflict", str(report.conflict_count))
    console.print(table)

    if verbose:
        for placement_id, conflict in report.conflicts.items():
            placement = store.get_placement(placement_id)
            console.print(f"\n[bold]{placement}[/bold] ({placement_id}): [red]{conflict.reason}[/red]")

    if report.is_clean:
        console.print("\n[green]No conflicts detected.[/green]\n")
    else:
        console.print(f"\n[yellow]{report.conflict_count} placements are in conflict.[/yellow]\n")


@app.command()
def check(
    project: Path = typer.Argument(..., help="Path to project JSON file"),
    day: str = typer.Option(..., "--day", "-d", help="Weekday (월, 화, 수, 목, 금)"),
    period: int = typer.Option(..., "--period", "-p", help="Period number", min=1, max=MAX_PERIOD),
    class_id: str = typer.Option(..., "--class", "-C", help="Class identifier, e.g. 3-1 or 4레벨"),
    subject: str = typer.Option(..., "--subject", "-s", help="Subject name"),
    teacher: Optional[str] = typer.Option(None, "--teacher", "-T", help="Teacher ID"),
    room: Optional[str] = typer.Option(None, "--room", "-R", help="Room ID"),
    as_json: bool = typer.Option(False, "--json", help="Print the report as JSON"),
) -> None:
    """
    Check a proposed placement without writing it.

    Example:
        python -m timetable check project.json -d 월 -p 1 -C 3-1 -s 영어 -T t1
    """
    store = load_store(project)
    candidate = build_candidate(day, period, class_id, subject, teacher, room)
    conflict = store.check_conflict(candidate)

    if as_json:
        console.print_json(json.dumps(conflict.to_dict(), ensure_ascii=False))
    else:
        print_conflict(conflict)


@app.command()
def place(
    project: Path = typer.Argument(..., help="Path to project JSON file"),
    day: str = typer.Option(..., "--day", "-d", help="Weekday (월, 화, 수, 목, 금)"),
    period: int = typer.Option(..., "--period", "-p", help="Period number", min=1, max=MAX_PERIOD),
    class_id: str = typer.Option(..., "--class", "-C", help="Class identifier"),
    subject: str = typer.Option(..., "--subject", "-s", help="Subject name"),
    teacher: Optional[str] = typer.Option(None, "--teacher", "-T", help="Teacher ID"),
    room: Optional[str] = typer.Option(None, "--room", "-R", help="Room ID"),
    placement_id: Optional[str] = typer.Option(None, "--id", help="Move an existing placement"),
    force: bool = typer.Option(False, "--force", "-f", help="Write even if it conflicts"),
) -> None:
    """
    Place a subject into a cell, refusing conflicts unless --force is given.

    Example:
        python -m timetable place project.json -d 월 -p 1 -C 3-1 -s 영어 -T t1
    """
    store = load_store(project)

    if blocked_period_label(store.school_info, period):
        console.print(f"[yellow]Period {period} is a non-class block.[/yellow]")

    candidate = build_candidate(day, period, class_id, subject, teacher, room, placement_id)
    result = store.place(candidate, force=force)

    if result.outcome is PlacementOutcome.REJECTED:
        print_conflict(result.conflict)
        console.print("\n[red]Not placed.[/red] Use --force to place anyway.")
        raise typer.Exit(code=1)

    save_document(store.to_document(), project)

    if result.outcome is PlacementOutcome.OVERRIDDEN:
        print_conflict(result.conflict)
        console.print(f"\n[yellow]Placed with conflict:[/yellow] {candidate.id}")
    else:
        console.print(f"[green]Placed:[/green] {candidate} ({candidate.id})")


@app.command()
def remove(
    project: Path = typer.Argument(..., help="Path to project JSON file"),
    placement_id: str = typer.Argument(..., help="Placement ID to remove"),
) -> None:
    """Remove a placement. Removing an unknown ID changes nothing."""
    store = load_store(project)

    if store.remove_placement(placement_id):
        save_document(store.to_document(), project)
        console.print(f"[green]Removed:[/green] {placement_id}")
    else:
        console.print(f"[dim]No placement {placement_id}; nothing changed.[/dim]")


@app.command()
def grant(
    project: Path = typer.Argument(..., help="Path to project JSON file"),
    subject: str = typer.Argument(..., help="Subject name"),
    grade: int = typer.Argument(..., help="Grade to allow overlap in", min=1),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """
    Allow simultaneous same-subject placements of a subject within a grade.

    Used for leveled classes and co-teaching. A grant cannot be revoked.
    """
    store = load_store(project)

    if store.policies.is_overlap_allowed(subject, grade):
        console.print(f"[dim]{subject} already allows overlap in grade {grade}.[/dim]")
        return

    if not yes:
        typer.confirm(
            f"해당교과({subject}) 해당학년({grade}학년) 중복수업을 허용하시겠습니까?",
            abort=True,
        )

    store.grant_grade_overlap(subject, grade)
    save_document(store.to_document(), project)
    console.print(f"[green]Overlap allowed:[/green] {subject}, grade {grade}")


@app.command()
def blocks(
    project: Path = typer.Argument(..., help="Path to project JSON file"),
    teacher_id: str = typer.Argument(..., help="Teacher ID"),
) -> None:
    """
    List the sessions a teacher still has to place.

    Example:
        python -m timetable blocks project.json t1
    """
    store = load_store(project)
    teacher = store.get_teacher(teacher_id)
    if teacher is None:
        console.print(f"[red]Error:[/red] Teacher '{teacher_id}' not found")
        console.print(f"Available teachers: {', '.join(t.id for t in store.teachers)}")
        raise typer.Exit(code=1)

    remaining = store.unfulfilled_blocks(teacher_id)
    assigned, cap = store.teacher_load(teacher_id)

    console.print(Panel(
        f"[bold]{teacher.name}[/bold] ({teacher.id})  주 {assigned} / {cap}시간",
        title="Required Blocks",
    ))

    if not remaining:
        console.print("[green]Every assignment is fully placed.[/green]")
        return

    # One row per class/subject rather than per unit block
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Class")
    table.add_column("Subject")
    table.add_column("Room")
    table.add_column("Placed", justify="right")
    table.add_column("Required", justify="right")
    table.add_column("Missing", justify="right")

    seen: set[tuple[str, str]] = set()
    for block in remaining:
        key = (block.class_id, block.subject)
        if key in seen:
            continue
        seen.add(key)
        table.add_row(
            block.class_id,
            block.subject,
            block.room_id or "-",
            str(block.assigned_sessions),
            str(block.required_sessions),
            str(block.remaining_sessions),
        )

    console.print(table)
    console.print(f"\n{len(remaining)} sessions left to place.")


@app.command()
def periods(
    project: Path = typer.Argument(..., help="Path to project JSON file"),
) -> None:
    """Show the bell schedules side by side."""
    store = load_store(project)
    school = store.school_info
    schedules = active_schedules(school)

    if not schedules:
        console.print("[yellow]No bell schedules configured[/yellow]")
        return

    table = Table(title="Bell Schedules", show_header=True, header_style="bold cyan")
    table.add_column("교시", style="dim")
    for schedule in schedules:
        grades = ",".join(str(g) for g in schedule.target_grades)
        table.add_column(f"{schedule.name} ({grades})")

    for period in all_period_numbers(school):
        row = [str(period)]
        for schedule in schedules:
            slot = schedule.periods.get(period)
            row.append(str(slot) if slot else "-")
        table.add_row(*row)

    console.print(table)


@app.command()
def view(
    project: Path = typer.Argument(..., help="Path to project JSON file"),
    teacher: Optional[str] = typer.Option(None, "--teacher", "-T", help="Show one teacher's week"),
    class_id: Optional[str] = typer.Option(None, "--class", "-C", help="Show one class's week"),
    room: Optional[str] = typer.Option(None, "--room", "-R", help="Show one room's week"),
) -> None:
    """
    Display a weekly grid for a teacher, class or room.

    Examples:
        python -m timetable view project.json --teacher t1
        python -m timetable view project.json --class 3-1
    """
    store = load_store(project)

    if teacher:
        found = store.get_teacher(teacher)
        if found is None:
            console.print(f"[red]Error:[/red] Teacher '{teacher}' not found")
            raise typer.Exit(code=1)
        print_week_grid(store, store.placements_for_teacher(teacher), f"{found.name} 시간표", show_class=True)
    elif class_id:
        print_week_grid(store, store.placements_for_class(class_id), f"{class_id} 시간표", show_teacher=True)
    elif room:
        found_room = store.get_room(room)
        if found_room is None:
            console.print(f"[red]Error:[/red] Room '{room}' not found")
            raise typer.Exit(code=1)
        print_week_grid(
            store, store.placements_for_room(room), f"{found_room.name} 시간표",
            show_class=True, show_teacher=True,
        )
    else:
        console.print("[red]Error:[/red] Choose one of --teacher, --class or --room")
        raise typer.Exit(code=1)


# =============================================================================
# Main Entry Point
# =============================================================================

def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
