"""
Commerce Tutor: terminal front end.

Commands:
- commerce-tutor learn 12 accounts ch1 --title "..."   - Study a chapter topic by topic
- commerce-tutor quiz 12 accounts ch1 --title "..."    - Take the chapter quiz
- commerce-tutor glossary 12 accounts ch1 --title "..." - Key terms for a chapter
- commerce-tutor stats 12                              - Progress for a class
- commerce-tutor cache info|clear                      - Inspect or empty the content cache
"""
from __future__ import annotations

import asyncio
import sys
from typing import Optional

import typer
from loguru import logger
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.prompt import Confirm, IntPrompt, Prompt
from rich.table import Table

from config import Settings, get_settings
from commerce_tutor.curriculum import SUBJECTS, Chapter, make_chapter
from commerce_tutor.generation import FetchOrchestrator, GeminiContentProvider
from commerce_tutor.storage import ContentCache, ProgressStore, SQLiteKeyValueStore
from commerce_tutor.study import (
    LearningSession,
    QuizSession,
    QuizState,
    summarize_class,
)

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="commerce-tutor",
    help="GSEB Commerce study companion with AI-generated lessons and quizzes",
    no_args_is_help=True,
)
cache_app = typer.Typer(name="cache", help="Content cache maintenance", no_args_is_help=True)
app.add_typer(cache_app, name="cache")

console = Console()

OPTION_LABELS = "ABCD"


def configure_logging(settings: Settings) -> None:
    """Route loguru output to stderr and, optionally, a log file."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.log_level,
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}",
    )
    if settings.log_file:
        logger.add(settings.log_file, level="DEBUG", rotation="5 MB", retention=3)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    settings = get_settings()
    if verbose:
        settings = settings.model_copy(update={"log_level": "DEBUG"})
    configure_logging(settings)


# =============================================================================
# Service Wiring
# =============================================================================


def _open_substrate(settings: Settings) -> SQLiteKeyValueStore:
    return SQLiteKeyValueStore(settings.state_db_path)


def _build_orchestrator(settings: Settings, substrate: SQLiteKeyValueStore) -> FetchOrchestrator:
    if not settings.has_ai_configured():
        console.print("[red]No Gemini API key configured.[/red] Set GEMINI_API_KEY and try again.")
        raise typer.Exit(1)
    provider = GeminiContentProvider(
        api_key=settings.gemini_api_key,
        model_name=settings.ai_model,
        timeout_seconds=settings.provider_timeout_seconds,
        quiz_question_count=settings.quiz_question_count,
        glossary_term_count=settings.glossary_term_count,
        search_grounding=settings.search_grounding,
    )
    cache = ContentCache(substrate, max_chars=settings.cache_max_chars)
    return FetchOrchestrator(provider, cache)


def _chapter_or_exit(class_level: int, subject_id: str, chapter_id: str, title: str | None) -> Chapter:
    try:
        return make_chapter(class_level, subject_id, chapter_id, title or chapter_id)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(2) from e


# =============================================================================
# Learn
# =============================================================================


def _render_topic(session: LearningSession) -> None:
    console.clear()
    position = f"{session.current_index + 1}/{len(session.topics)}"
    console.print(
        Panel(
            f"[bold]{session.current_topic}[/bold]",
            title=f"{session.chapter.title} - topic {position}",
            border_style="cyan",
        )
    )
    console.print(Markdown(session.content))
    if session.sources:
        console.print("\n[bold]Sources[/bold]")
        for source in session.sources:
            console.print(f"  - {source.title}: [link={source.uri}]{source.uri}[/link]")
    if session.chapter_completed:
        console.print("\n[green][OK] Chapter complete[/green]")


async def _run_learn(session: LearningSession) -> None:
    with console.status("Preparing syllabus..."):
        await session.open()

    while True:
        _render_topic(session)
        choice = Prompt.ask(
            "\n(n)ext  (p)revious  (s)yllabus  (q)uit",
            choices=["n", "p", "s", "q"],
            default="n",
        )
        if choice == "q":
            return
        if choice == "n":
            moved = session.next()
        elif choice == "p":
            moved = session.previous()
        else:
            for i, topic in enumerate(session.topics, 1):
                marker = ">" if i - 1 == session.current_index else " "
                console.print(f" {marker} {i:2}. {topic}")
            moved = session.jump_to(IntPrompt.ask("Topic number", default=session.current_index + 1) - 1)

        if moved:
            with console.status(f"Loading {session.current_topic}..."):
                await session.load_content()


@app.command()
def learn(
    class_level: int = typer.Argument(..., help="Class level (11 or 12)"),
    subject_id: str = typer.Argument(..., help="Subject id: accounts, stats, ba, eco, english"),
    chapter_id: str = typer.Argument(..., help="Chapter id, e.g. ch1"),
    title: Optional[str] = typer.Option(None, "--title", "-t", help="Chapter title used in prompts"),
) -> None:
    """Study a chapter topic by topic."""
    settings = get_settings()
    chapter = _chapter_or_exit(class_level, subject_id, chapter_id, title)
    substrate = _open_substrate(settings)
    try:
        orchestrator = _build_orchestrator(settings, substrate)
        session = LearningSession(chapter, orchestrator, ProgressStore(substrate))
        asyncio.run(_run_learn(session))
    finally:
        substrate.close()


# =============================================================================
# Quiz
# =============================================================================


async def _run_quiz(session: QuizSession) -> None:
    while True:
        with console.status("Generating quiz..."):
            await session.load()

        if session.state is QuizState.NO_QUESTIONS:
            console.print("[red]Could not generate questions.[/red]")
            if Confirm.ask("Retry?", default=True):
                continue
            return

        while session.state is QuizState.IN_PROGRESS:
            question = session.current_question
            console.print(
                f"\n[bold]Question {session.current_index + 1}/{len(session.questions)}[/bold] "
                f"[dim](score {session.score})[/dim]"
            )
            console.print(Markdown(question.question))
            for label, option in zip(OPTION_LABELS, question.options):
                console.print(f"  [cyan]{label}[/cyan]. {option}")

            answer = Prompt.ask("Your answer", choices=list(OPTION_LABELS.lower()))
            session.select_option(OPTION_LABELS.lower().index(answer))
            session.submit_answer()

            if session.answer_correct:
                console.print("[bold green]Correct![/bold green]")
            else:
                right = OPTION_LABELS[question.correct_answer]
                console.print(f"[bold red]Incorrect.[/bold red] The answer is {right}.")
            if question.explanation:
                console.print(Markdown(question.explanation))
            session.advance()

        result = session.result
        console.print(
            Panel(
                f"You scored [bold]{result.score}/{result.total}[/bold] ({result.percentage:.0f}%)",
                title="Quiz complete",
                border_style="green",
            )
        )
        if not Confirm.ask("Try again?", default=False):
            return


@app.command()
def quiz(
    class_level: int = typer.Argument(..., help="Class level (11 or 12)"),
    subject_id: str = typer.Argument(..., help="Subject id: accounts, stats, ba, eco, english"),
    chapter_id: str = typer.Argument(..., help="Chapter id, e.g. ch1"),
    title: Optional[str] = typer.Option(None, "--title", "-t", help="Chapter title used in prompts"),
) -> None:
    """Take the multiple-choice quiz for a chapter."""
    settings = get_settings()
    chapter = _chapter_or_exit(class_level, subject_id, chapter_id, title)
    substrate = _open_substrate(settings)
    try:
        orchestrator = _build_orchestrator(settings, substrate)
        session = QuizSession(chapter, orchestrator, ProgressStore(substrate))
        asyncio.run(_run_quiz(session))
    finally:
        substrate.close()


# =============================================================================
# Glossary
# =============================================================================


def filter_terms(terms, query: str):
    """Terms whose name or definition contains ``query`` (case-insensitive)."""
    needle = query.lower().strip()
    if not needle:
        return list(terms)
    return [t for t in terms if needle in t.term.lower() or needle in t.definition.lower()]


@app.command()
def glossary(
    class_level: int = typer.Argument(..., help="Class level (11 or 12)"),
    subject_id: str = typer.Argument(..., help="Subject id: accounts, stats, ba, eco, english"),
    chapter_id: str = typer.Argument(..., help="Chapter id, e.g. ch1"),
    title: Optional[str] = typer.Option(None, "--title", "-t", help="Chapter title used in prompts"),
    search: str = typer.Option("", "--filter", "-f", help="Only show matching terms"),
) -> None:
    """Show key terms for a chapter."""
    settings = get_settings()
    chapter = _chapter_or_exit(class_level, subject_id, chapter_id, title)
    substrate = _open_substrate(settings)
    try:
        orchestrator = _build_orchestrator(settings, substrate)
        with console.status("Loading glossary..."):
            terms = asyncio.run(orchestrator.get_glossary(chapter))
    finally:
        substrate.close()

    if not terms:
        console.print("[red]Could not generate a glossary. Please try again.[/red]")
        raise typer.Exit(1)

    table = Table(title=f"{chapter.subject_name}: {chapter.title}")
    table.add_column("Term", style="bold cyan")
    table.add_column("Definition")
    for term in filter_terms(terms, search):
        table.add_row(term.term, term.definition)
    console.print(table)


# =============================================================================
# Stats
# =============================================================================


def _progress_bar(percent: float, width: int = 20) -> str:
    filled = int(percent / 100 * width)
    return "#" * filled + "-" * (width - filled)


@app.command()
def stats(
    class_level: int = typer.Argument(..., help="Class level (11 or 12)"),
    chapters: int = typer.Option(0, "--chapters", "-c", help="Chapters offered for the class"),
    subject_chapters: int = typer.Option(
        0, "--subject-chapters", "-s", help="Chapters offered per subject, for per-subject percentages"
    ),
) -> None:
    """Show learning progress for a class."""
    settings = get_settings()
    substrate = _open_substrate(settings)
    try:
        progress = ProgressStore(substrate).current()
    finally:
        substrate.close()

    summary = summarize_class(progress, class_level, total_chapters=chapters)

    console.print(f"\n[bold]Class {class_level} Commerce[/bold]")
    console.print(f"  Chapters completed: {summary.completed_chapters} / {summary.total_chapters}")
    console.print(f"  Overall progress:   {_progress_bar(summary.progress_percent)} {summary.progress_percent}%")
    console.print(f"  Quizzes taken:      {summary.quizzes_taken}")
    if summary.average_quiz_percent is not None:
        console.print(f"  Average quiz score: {summary.average_quiz_percent:.1f}%")

    if summary.subject_completed:
        table = Table(title="Completed chapters by subject")
        table.add_column("Subject")
        table.add_column("Completed", justify="right")
        if subject_chapters > 0:
            table.add_column("Progress", justify="right")
        for subject_id, count in sorted(summary.subject_completed.items()):
            row = [SUBJECTS[subject_id].name, str(count)]
            if subject_chapters > 0:
                row.append(f"{summary.subject_percent(subject_id, subject_chapters):.0f}%")
            table.add_row(*row)
        console.print(table)

    if summary.recent_quizzes:
        table = Table(title="Latest quiz results")
        table.add_column("Chapter")
        table.add_column("Score", justify="right")
        table.add_column("Date")
        for key, result in summary.recent_quizzes:
            table.add_row(key, f"{result.score}/{result.total}", result.date.strftime("%Y-%m-%d"))
        console.print(table)


# =============================================================================
# Cache
# =============================================================================


@cache_app.command("info")
def cache_info() -> None:
    """Show content cache usage."""
    settings = get_settings()
    substrate = _open_substrate(settings)
    try:
        cache = ContentCache(substrate, max_chars=settings.cache_max_chars)
        entries = len(cache)
        size = cache.size_chars()
    finally:
        substrate.close()

    percent = size / settings.cache_max_chars * 100
    console.print(f"Entries: {entries}")
    console.print(f"Size:    {size:,} / {settings.cache_max_chars:,} chars ({percent:.1f}%)")


@cache_app.command("clear")
def cache_clear(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete all cached lessons, quizzes and glossaries."""
    if not yes and not Confirm.ask("Clear the content cache?", default=False):
        raise typer.Exit(0)
    settings = get_settings()
    substrate = _open_substrate(settings)
    try:
        ContentCache(substrate, max_chars=settings.cache_max_chars).clear()
    finally:
        substrate.close()
    console.print("[green]Content cache cleared.[/green]")


def run() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    run()
