"""
Quiz Grader CLI Application.

Provides a command-line interface for grading submitted answers,
checking attempt status and validating the lesson library.
"""

import json
import logging
from pathlib import Path
from typing import Annotated, Any, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from quizgrade.attempts import AttemptLimitReached, AttemptStore, AttemptStoreError, new_attempt
from quizgrade.config import Settings, get_settings
from quizgrade.grading import score_lesson
from quizgrade.library import (
    LibraryLoadError,
    LibraryParseError,
    LibraryValidator,
    load_library,
)
from quizgrade.models import Lesson, LessonResult, Library, TakeMode

# Create Typer app
app = typer.Typer(
    name="quiz-grader",
    help="Grade lesson quizzes and enforce attempt limits",
    add_completion=False,
)

console = Console()

LibraryOption = Annotated[
    Optional[Path],
    typer.Option("--library", "-l", help="Path to the library JSON (defaults to settings)"),
]
StudentOption = Annotated[str, typer.Option("--student", "-s", help="Student id")]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Show detailed output")]


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load(settings: Settings, library: Path | None) -> Library:
    try:
        return load_library(library, settings)
    except LibraryLoadError as e:
        console.print(f"[red]Load Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    except LibraryParseError as e:
        console.print(f"[red]Library Parse Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)


def _find_lesson(lib: Library, lesson_id: str) -> Lesson:
    lesson = lib.get_lesson(lesson_id)
    if lesson is None:
        console.print(f"[red]Error:[/red] Lesson not found: {escape(lesson_id)}")
        raise typer.Exit(1)
    return lesson


def _read_answers(answers_file: Path) -> dict[str, Any]:
    try:
        data = json.loads(answers_file.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        console.print(
            f"[red]Answers Error:[/red] Could not read {escape(str(answers_file))}: "
            f"{escape(str(e))}"
        )
        raise typer.Exit(1)
    if not isinstance(data, dict):
        console.print("[red]Answers Error:[/red] Expected a JSON object keyed by question id")
        raise typer.Exit(1)
    return data


@app.command()
def grade(
    lesson_id: Annotated[str, typer.Argument(help="Id of the lesson being taken")],
    answers_file: Annotated[
        Path, typer.Argument(help="JSON file mapping question ids to answers")
    ],
    student: StudentOption,
    library: LibraryOption = None,
    record: Annotated[
        bool,
        typer.Option("--record/--no-record", help="Record the attempt in the history"),
    ] = True,
    verbose: VerboseOption = False,
) -> None:
    """
    Grade a submission for a lesson.

    The lesson's attempt policy is checked first; when recording, the
    check and the write happen together so the limit cannot be exceeded.
    """
    _configure_logging(verbose)
    settings = get_settings()

    if not answers_file.exists():
        console.print(f"[red]Error:[/red] Answers file not found: {escape(str(answers_file))}")
        raise typer.Exit(1)

    lesson = _find_lesson(_load(settings, library), lesson_id)
    store = AttemptStore(settings.attempts_path)

    try:
        status = store.status_for(lesson.take_policy, student, lesson.id)
        if not status.can_take:
            console.print(f"[red]No attempts left for this assignment.[/red] {status.status_text}")
            raise typer.Exit(1)

        result = score_lesson(lesson, _read_answers(answers_file))

        if record:
            status = store.record_if_allowed(lesson.take_policy, new_attempt(student, result))

    except AttemptLimitReached as e:
        console.print(f"[red]No attempts left for this assignment.[/red] {e.status.status_text}")
        raise typer.Exit(1)
    except AttemptStoreError as e:
        console.print(f"[red]Attempt History Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    _display_results(result, settings, verbose)
    console.print(f"\n[dim]{status.status_text}[/dim]")


@app.command()
def status(
    student: StudentOption,
    library: LibraryOption = None,
) -> None:
    """
    Show every lesson with the student's attempt status.
    """
    settings = get_settings()
    lib = _load(settings, library)
    store = AttemptStore(settings.attempts_path)

    table = Table(title=f"Assignments for {escape(student)}")
    table.add_column("Lesson", style="cyan")
    table.add_column("Kind")
    table.add_column("Questions", justify="right")
    table.add_column("Attempts")
    table.add_column("Open")

    try:
        for lesson in lib.lessons:
            info = store.status_for(lesson.take_policy, student, lesson.id)
            table.add_row(
                escape(lesson.title),
                lesson.kind.value,
                str(len(lesson.questions)),
                info.status_text,
                "[green]yes[/green]" if info.can_take else "[red]locked[/red]",
            )
    except AttemptStoreError as e:
        console.print(f"[red]Attempt History Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    console.print(table)


@app.command()
def validate_library(
    library: LibraryOption = None,
) -> None:
    """
    Validate the lesson library without grading anything.

    Exits with status 1 when authoring issues are found.
    """
    settings = get_settings()
    lib = _load(settings, library)

    console.print(
        Panel(f"[bold]{escape(lib.app_name)}[/bold] (version {lib.version})", title="Library")
    )

    table = Table(title="Lessons")
    table.add_column("Id", style="cyan")
    table.add_column("Title")
    table.add_column("Kind")
    table.add_column("Questions", justify="right")
    table.add_column("Policy")

    for lesson in lib.lessons:
        policy = lesson.take_policy
        policy_text = policy.mode.value
        if policy.mode is TakeMode.LIMIT:
            policy_text += f" ({max(1, policy.limit)})"
        table.add_row(
            escape(lesson.id),
            escape(lesson.title),
            lesson.kind.value,
            str(len(lesson.questions)),
            policy_text,
        )

    console.print(table)

    is_valid, issues = LibraryValidator().validate(lib)
    if is_valid:
        console.print("\n[green]✓ Library is valid[/green]")
        return

    console.print("\n[yellow]⚠ Validation issues found:[/yellow]")
    for issue in issues:
        console.print(f"  • {escape(issue)}")
    raise typer.Exit(1)


@app.command()
def gradebook(
    student: StudentOption,
) -> None:
    """
    List a student's recorded attempts, newest first.
    """
    settings = get_settings()
    store = AttemptStore(settings.attempts_path)

    try:
        attempts = store.attempts_for(student)
    except AttemptStoreError as e:
        console.print(f"[red]Attempt History Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    if not attempts:
        console.print("No attempts yet.")
        return

    table = Table(title=f"Gradebook: {escape(student)}")
    table.add_column("Taken", style="dim")
    table.add_column("Lesson", style="cyan")
    table.add_column("Kind")
    table.add_column("Score", justify="right")
    table.add_column("Percent", justify="right")

    for attempt in reversed(attempts):
        table.add_row(
            attempt.taken_at.strftime("%Y-%m-%d %H:%M"),
            escape(attempt.lesson_title or attempt.lesson_id),
            attempt.kind.value.upper(),
            f"{attempt.score}/{attempt.total}",
            f"{attempt.percent}%",
        )

    console.print(table)


def _display_results(result: LessonResult, settings: Settings, verbose: bool = False) -> None:
    """Display grading results in a formatted table."""

    threshold = settings.pass_threshold_percent
    score_color = (
        "green" if result.percent >= threshold else "yellow" if result.percent >= threshold / 2 else "red"
    )
    console.print(
        Panel(
            f"[{score_color}][bold]{result.score} / {result.total}[/bold] "
            f"({result.percent}%)[/{score_color}]",
            title=escape(result.lesson_title),
        )
    )

    rows = result.results if verbose else result.wrong
    if not rows:
        console.print("[green]All answers correct[/green]")
        return

    table = Table(title="All Answers" if verbose else "Wrong Answers")
    table.add_column("#", justify="right")
    table.add_column("Question")
    table.add_column("Status")
    table.add_column("Your answer")
    table.add_column("Correct", style="green")

    for r in rows:
        table.add_row(
            f"Q{r.index}",
            escape(r.question.prompt),
            "[green]Correct[/green]" if r.verdict.correct else "[red]Wrong[/red]",
            escape(r.submitted_display) or "—",
            escape(r.expected_display) or "—",
        )

    console.print(table)


if __name__ == "__main__":
    app()
