"""
Quizlo CLI - terminal quiz trainer.

Usage:
    quizlo import bank.json          # Load a question bank (replaces the current one)
    quizlo status                    # Subject, score and review queue sizes
    quizlo practice                  # Untimed practice loop
    quizlo practice --filter errors  # Review only questions answered wrong
    quizlo exam -n 30 -m 45          # Timed mock exam
    quizlo search mitochondria       # Find questions by text or number
    quizlo list --filter bookmarks   # Show the active list
    quizlo reset                     # Forget the bank and all progress
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Annotated

import typer
from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, IntPrompt, Prompt
from rich.table import Table
from rich.text import Text

from quizlo.config import Settings, get_settings
from quizlo.core.errors import QuizError
from quizlo.core.models import AppMode, EngineSnapshot, ExamResult, FilterMode, PracticePhase
from quizlo.db.persistence import PersistenceAdapter
from quizlo.db.store import build_store
from quizlo.ingest.json_bank import BankFormatError, load_question_bank
from quizlo.study.engine import QuizEngine
from quizlo.study.exam import format_clock

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="quizlo",
    help="Quizlo - terminal quiz trainer with adaptive distractors and mock exams",
    add_completion=False,
    rich_markup_mode="rich",
)

console = Console()

PRACTICE_HELP = (
    "[bold]1-9[/] answer  [bold]n[/] next  [bold]p[/] prev  [bold]r[/] retry  "
    "[bold]h[/] hint  [bold]b[/] bookmark  [bold]s[/] shuffle  "
    "[bold]f[/] <all|errors|bookmarks>  [bold]j[/] <id>  [bold]q[/] quit"
)
EXAM_HELP = "[bold]1-9[/] answer  [bold]n[/] next  [bold]p[/] prev  [bold]s[/] submit  [bold]q[/] abandon"


def configure_logging(settings: Settings, verbose: bool = False) -> None:
    """Route loguru to stderr (and an optional file) at the configured level."""
    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG" if verbose else settings.log_level,
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}",
    )
    if settings.log_file:
        logger.add(settings.log_file, level="DEBUG", rotation="1 MB", retention=3)


def get_engine() -> QuizEngine:
    settings = get_settings()
    persistence = PersistenceAdapter(build_store(settings), default_subject=settings.default_subject)
    return QuizEngine(persistence, settings=settings)


def _fail(message: str) -> None:
    console.print(f"[red]{message}[/]")
    raise typer.Exit(1)


# =============================================================================
# Bank Commands
# =============================================================================


@app.command("import")
def import_bank(
    file: Annotated[Path, typer.Argument(help="JSON question bank")],
    subject: Annotated[
        str | None, typer.Option("--subject", "-s", help="Subject label (defaults to the bank's)")
    ] = None,
) -> None:
    """
    Import a question bank, replacing the current one.

    Score, errors and bookmarks from the previous bank are cleared.
    """
    try:
        bank = load_question_bank(file)
    except BankFormatError as e:
        _fail(str(e))

    if not bank.questions:
        console.print("[yellow]No questions found in that file; nothing changed.[/]")
        raise typer.Exit(1)

    engine = get_engine()
    try:
        snap = engine.import_questions(bank.questions, subject or bank.subject)
    except QuizError as e:
        _fail(str(e))
    console.print(
        f"[green]Imported {snap.repository_size} questions[/] for [bold]{snap.subject}[/]"
    )


@app.command()
def status() -> None:
    """Show the current subject and progress."""
    snap = get_engine().snapshot()
    if snap.repository_size == 0:
        console.print("[yellow]No question bank loaded.[/]")
        console.print("[dim]Use 'quizlo import <file>' to load one.[/]")
        return

    table = Table(title=f"[bold cyan]{snap.subject}[/]", show_header=False)
    table.add_column("Metric", style="dim")
    table.add_column("Value", justify="right")
    table.add_row("Questions", str(snap.repository_size))
    table.add_row("Score", f"{snap.score}/{snap.attempts}")
    table.add_row("Accuracy", f"{snap.accuracy}%")
    table.add_row("To review", str(len(snap.wrong_ids)))
    table.add_row("Bookmarked", str(len(snap.bookmark_ids)))
    console.print(table)


@app.command()
def subject(
    label: Annotated[str, typer.Argument(help="New subject label")],
) -> None:
    """Rename the subject of the current bank."""
    snap = get_engine().rename_subject(label)
    console.print(f"Subject set to [bold]{snap.subject}[/]")


@app.command()
def reset(
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation")] = False,
) -> None:
    """Delete the question bank and all progress."""
    if not yes and not Confirm.ask("Delete the question bank and all progress?", default=False):
        console.print("[dim]Cancelled.[/]")
        return
    get_engine().reset()
    console.print("[green]All data cleared.[/]")


@app.command("list")
def list_questions(
    filter_mode: Annotated[
        FilterMode, typer.Option("--filter", "-f", help="all, errors or bookmarks")
    ] = FilterMode.ALL,
) -> None:
    """List the questions in a filtered view."""
    engine = get_engine()
    snap = engine.set_filter_mode(filter_mode)
    if snap.view.is_empty:
        console.print(f"[yellow]No questions in the {filter_mode.value} list.[/]")
        return
    _print_question_table(snap, snap.view.questions, title=f"{snap.subject} ({filter_mode.value})")


@app.command()
def search(
    term: Annotated[str, typer.Argument(help="Text or question number")],
) -> None:
    """Find questions by text or number."""
    engine = get_engine()
    hits = engine.search(term)
    if not hits:
        console.print("[yellow]No matches.[/]")
        return
    _print_question_table(engine.snapshot(), hits, title=f"Matches for '{term}'")


def _print_question_table(snap: EngineSnapshot, questions, title: str) -> None:
    wrong, marked = set(snap.wrong_ids), set(snap.bookmark_ids)
    table = Table(title=title)
    table.add_column("#", justify="right", style="cyan")
    table.add_column("Question")
    table.add_column("", justify="center")
    for q in questions:
        flags = ("[red]✗[/]" if q.id in wrong else "") + ("[yellow]★[/]" if q.id in marked else "")
        text = q.question if len(q.question) <= 90 else q.question[:87] + "..."
        table.add_row(str(q.id), text, flags)
    console.print(table)


# =============================================================================
# Practice
# =============================================================================


@app.command()
def practice(
    filter_mode: Annotated[
        FilterMode, typer.Option("--filter", "-f", help="all, errors or bookmarks")
    ] = FilterMode.ALL,
    shuffle: Annotated[bool, typer.Option("--shuffle", help="Shuffle question order")] = False,
    start_at: Annotated[
        int | None, typer.Option("--question", "-q", help="Start at this question number")
    ] = None,
) -> None:
    """
    Untimed practice loop.

    Examples:
        quizlo practice                  # Whole bank in source order
        quizlo practice -f errors        # Review mistakes until none remain
        quizlo practice --shuffle -q 12  # Shuffled, starting at question 12
    """
    engine = get_engine()
    if engine.repository.is_empty:
        _fail("No question bank loaded. Use 'quizlo import <file>' first.")

    try:
        engine.set_filter_mode(filter_mode)
        if shuffle:
            engine.toggle_shuffle()
        if start_at is not None:
            engine.open_question(start_at)
    except QuizError as e:
        _fail(str(e))

    console.print(f"[dim]{PRACTICE_HELP}[/]")
    while True:
        snap = engine.snapshot()
        _render_practice(snap)
        try:
            raw = Prompt.ask("[bold]>[/bold]", default="n" if snap.practice.phase == PracticePhase.ANSWERED else "")
        except (KeyboardInterrupt, EOFError):
            break
        command, _, arg = raw.strip().partition(" ")
        if command in ("q", "quit"):
            break
        try:
            _practice_command(engine, snap, command.lower(), arg.strip())
        except QuizError as e:
            console.print(f"[red]{e}[/]")

    final = engine.snapshot()
    console.print(f"\n[bold]Score:[/] {final.score}/{final.attempts} ({final.accuracy}%)")


def _practice_command(engine: QuizEngine, snap: EngineSnapshot, command: str, arg: str) -> None:
    if command.isdigit():
        visible = snap.practice.visible_options
        choice = int(command)
        if not 1 <= choice <= len(visible):
            console.print(f"[yellow]Pick 1-{len(visible)}.[/]")
            return
        engine.select_answer(visible[choice - 1])
    elif command in ("n", ""):
        engine.next()
    elif command == "p":
        engine.prev()
    elif command == "r":
        engine.retry()
    elif command == "h":
        engine.hint()
    elif command == "b":
        engine.toggle_bookmark()
    elif command == "s":
        engine.toggle_shuffle()
    elif command == "f":
        try:
            engine.set_filter_mode(FilterMode(arg.lower() or "all"))
        except ValueError:
            console.print("[yellow]Filter must be all, errors or bookmarks.[/]")
    elif command == "j":
        if not arg.isdigit():
            console.print("[yellow]Usage: j <question number>[/]")
            return
        engine.jump_to(int(arg))
    else:
        console.print(f"[dim]{PRACTICE_HELP}[/]")


def _render_practice(snap: EngineSnapshot) -> None:
    view, state = snap.view, snap.practice
    console.print()
    if state.question is None:
        console.print(
            Panel(
                f"No questions in the [bold]{view.filter_mode.value}[/] list.\n"
                "Switch back with [bold]f all[/].",
                border_style="yellow",
            )
        )
        return

    star = " [yellow]★[/]" if state.bookmarked else ""
    position = f"{view.current_index + 1}/{view.size}" if not view.is_empty else "-"
    title = f"[bold cyan]#{state.question.id}[/bold cyan] · {position} · {view.filter_mode.value}{star}"
    console.print(Panel(state.question.question, title=title, border_style="cyan"))

    number = 0
    for option in state.options:
        if option in state.hidden_options:
            console.print(f"     [dim strike]{option}[/]")
            continue
        number += 1
        line = Text(f"  {number}) ")
        if state.phase == PracticePhase.ANSWERED and option == state.question.correct:
            line.append(option, style="bold green")
        elif state.phase == PracticePhase.ANSWERED and option == state.selected:
            line.append(option, style="bold red")
        else:
            line.append(option)
        console.print(line)

    if state.phase == PracticePhase.ANSWERED:
        if state.is_correct:
            console.print("[green]Correct![/]")
        else:
            console.print(f"[red]Wrong.[/] The answer is: [bold]{state.question.correct}[/]")


# =============================================================================
# Exam
# =============================================================================


@app.command()
def exam(
    count: Annotated[
        int | None, typer.Option("--count", "-n", help="Number of questions")
    ] = None,
    minutes: Annotated[
        int | None, typer.Option("--minutes", "-m", help="Time limit in minutes")
    ] = None,
) -> None:
    """
    Timed mock exam. Unanswered questions count as wrong; 60% passes.
    """
    engine = get_engine()
    if engine.repository.is_empty:
        _fail("No question bank loaded. Use 'quizlo import <file>' first.")

    default_count, default_minutes = engine.exam_defaults()
    if count is None:
        count = IntPrompt.ask("Questions", default=default_count)
    if minutes is None:
        minutes = IntPrompt.ask("Minutes", default=default_minutes)

    try:
        engine.start_exam(count, minutes)
    except QuizError as e:
        _fail(str(e))

    console.print(f"[dim]{EXAM_HELP}[/]")
    try:
        while engine.mode == AppMode.EXAM:
            _render_exam(engine.snapshot())
            try:
                raw = Prompt.ask("[bold]>[/bold]", default="n")
            except (KeyboardInterrupt, EOFError):
                engine.abandon_exam()
                console.print("[yellow]Exam abandoned.[/]")
                return
            if engine.mode != AppMode.EXAM:
                console.print("[yellow]Time is up![/]")
                break
            try:
                if not _exam_command(engine, raw.strip().lower()):
                    console.print("[yellow]Exam abandoned.[/]")
                    return
            except QuizError as e:
                console.print(f"[red]{e}[/]")

        result = engine.snapshot().exam.result
        if result is not None:
            _render_result(result)
        engine.finish_exam()
    finally:
        engine.close()


def _exam_command(engine: QuizEngine, command: str) -> bool:
    """Apply one exam input; False when the user abandons."""
    snap = engine.snapshot().exam
    if command.isdigit():
        choice = int(command)
        if not 1 <= choice <= len(snap.options):
            console.print(f"[yellow]Pick 1-{len(snap.options)}.[/]")
            return True
        engine.exam_select_answer(snap.options[choice - 1])
    elif command == "n":
        engine.exam_next()
    elif command == "p":
        engine.exam_prev()
    elif command == "s":
        unanswered = snap.total - snap.answered
        prompt = f"Submit now? {unanswered} unanswered." if unanswered else "Submit now?"
        if Confirm.ask(prompt, default=False):
            engine.submit_exam()
    elif command == "q":
        if Confirm.ask("Abandon the exam?", default=False):
            engine.abandon_exam()
            return False
    else:
        console.print(f"[dim]{EXAM_HELP}[/]")
    return True


def _render_exam(snap: EngineSnapshot) -> None:
    state = snap.exam
    if state is None or state.question is None:
        return
    clock_style = "red" if state.time_remaining < 60 else "cyan"
    title = (
        f"[bold]{state.current_index + 1}/{state.total}[/] · "
        f"[{clock_style}]{format_clock(state.time_remaining)}[/] · answered {state.answered}"
    )
    console.print()
    console.print(Panel(state.question.question, title=title, border_style="magenta"))
    for i, option in enumerate(state.options, 1):
        marker = "[bold magenta]>[/]" if option == state.selected else " "
        console.print(f" {marker} {i}) {option}")
    if state.is_last:
        console.print("[dim]Last question: 'n' submits.[/]")


def _render_result(result: ExamResult) -> None:
    verdict = "[bold green]PASSED[/]" if result.passed else "[bold red]NOT PASSED[/]"
    lines = [
        f"{verdict}  {result.correct_count}/{result.total} ({result.percentage}%)",
        f"Pass mark: {result.pass_mark}",
    ]
    if result.timed_out:
        lines.append("[yellow]Submitted automatically when time ran out.[/]")
    console.print(Panel("\n".join(lines), title="[bold]Exam Result[/]", border_style="green" if result.passed else "red"))

    table = Table(show_lines=False)
    table.add_column("#", justify="right", style="cyan")
    table.add_column("Your answer")
    table.add_column("Correct answer")
    for row in result.review:
        if row.correct:
            continue
        table.add_row(str(row.question.id), row.chosen or "[dim]-[/]", f"[green]{row.question.correct}[/]")
    if table.row_count:
        console.print(table)


# =============================================================================
# Entry Point
# =============================================================================


@app.callback()
def main(
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Verbose output")
    ] = False,
    data_dir: Annotated[
        Path | None, typer.Option("--data-dir", help="Override the state directory")
    ] = None,
) -> None:
    """
    Quizlo - terminal quiz trainer.

    \b
    Quick Start:
      quizlo import bank.json     # Load questions
      quizlo practice             # Practice loop
      quizlo exam -n 20 -m 30     # Timed mock exam
    """
    if data_dir is not None:
        os.environ["QUIZLO_DATA_DIR"] = str(data_dir)
        get_settings.cache_clear()
    configure_logging(get_settings(), verbose)


def run() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    run()
