"""
Typer CLI for the learnloop companion.

Commands:
    learnloop ask                 - Answer one question now
    learnloop run                 - Deliver questions at random intervals
    learnloop stats               - Show answer statistics and achievements
    learnloop weaknesses          - Show the weakness report and learning path
    learnloop assess              - Run a skill assessment
    learnloop cache stats         - Show generated question cache contents
    learnloop cache clear         - Empty the question cache
    learnloop cache export FILE   - Write the cache to a JSON file
    learnloop cache import FILE   - Merge questions from a JSON file
    learnloop reset               - Clear answers, achievements, assessments and interviews
    learnloop interview types     - List mock interview types
    learnloop interview companies - List company interview profiles
    learnloop interview start T   - Run a timed mock interview
    learnloop interview history   - Show past interview results
    learnloop company download C  - Generate a company question set with AI
    learnloop company list        - Show company question set sizes
    learnloop company export C F  - Write a company question set to a JSON file
    learnloop company import C F  - Merge a company question set from a JSON file
    learnloop company clear       - Delete every company question set

Usage:
    learnloop --help
    learnloop ask --answer 2
    learnloop run --min 60 --max 300 --count 5
    learnloop assess --history interviews.json --json
    learnloop interview start technical-general --company google
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Optional

import typer
from loguru import logger
from rich import print as rprint
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from config import get_settings
from learnloop.adaptive.interview_profiles import COMPANY_PROFILES, INTERVIEW_TYPES
from learnloop.core.errors import InvalidQuestionId, NoQuestionsAvailable, ProviderError, UnknownProfile
from learnloop.core.log_setup import configure_logging
from learnloop.delivery.companion import LearningCompanion, SubmissionResult
from learnloop.delivery.scheduler import QuestionScheduler
from learnloop.quiz.question_selector import DeliveredQuestion
from learnloop.study.interview_session import InterviewResult

app = typer.Typer(
    help="learnloop: adaptive multiple-choice practice with weakness analysis and skill assessment",
    no_args_is_help=True,
)
cache_app = typer.Typer(help="Generated question cache management")
app.add_typer(cache_app, name="cache")
interview_app = typer.Typer(help="Timed mock interviews")
app.add_typer(interview_app, name="interview")
company_app = typer.Typer(help="Company-specific question sets")
app.add_typer(company_app, name="company")

console = Console()

SOURCE_LABELS = {
    "ai": "[green]AI generated[/green]",
    "cached": "[yellow]cached (AI unavailable)[/yellow]",
    "static": "[cyan]question bank[/cyan]",
    "static-fallback": "[yellow]question bank (AI and cache unavailable)[/yellow]",
    "company": "[blue]company question set[/blue]",
}


def _build_companion() -> LearningCompanion:
    return LearningCompanion(get_settings())


def _close(companion: LearningCompanion) -> None:
    asyncio.run(companion.aclose())


# ========================================
# Rendering
# ========================================


def _render_question(delivered: DeliveredQuestion) -> None:
    question = delivered.question
    lines = [f"[bold]{question.question}[/bold]", ""]
    for i, option in enumerate(question.options, start=1):
        lines.append(f"  [cyan]{i}.[/cyan] {option}")
    subtitle = f"{question.topic} / {question.level} / {SOURCE_LABELS.get(delivered.source, delivered.source)}"
    if delivered.targeted is not None:
        subtitle += " / [magenta]targeted[/magenta]"
    console.print(Panel("\n".join(lines), title="Question", subtitle=subtitle))
    if delivered.provider_error:
        rprint(f"[dim]AI provider: {delivered.provider_error}[/dim]")


def _render_result(result: SubmissionResult) -> None:
    answer = result.answer
    if answer.correct:
        rprint(f"\n[bold green]✓ Correct![/bold green] {answer.correct_answer}")
    else:
        rprint(f"\n[bold red]✗ Incorrect.[/bold red] You chose: {answer.user_answer}")
        rprint(f"  Correct answer: [green]{answer.correct_answer}[/green]")
    rprint(f"  [dim]{answer.explanation}[/dim]")
    for achievement in result.achievements:
        rprint(f"\n[bold yellow]🏆 Achievement unlocked:[/bold yellow] {achievement.name} - {achievement.description}")


def _prompt_answer() -> int:
    while True:
        choice = typer.prompt("Your answer (1-4)", type=int)
        if 1 <= choice <= 4:
            return choice - 1
        rprint("[yellow]Pick a number between 1 and 4[/yellow]")


# ========================================
# Questions
# ========================================


@app.command("ask")
def ask(
    answer: Optional[int] = typer.Option(None, "--answer", "-a", min=1, max=4, help="Answer without prompting"),
) -> None:
    """Serve one question and grade the answer."""
    asyncio.run(_ask(answer))


async def _ask(answer: Optional[int]) -> None:
    # Fetch and provider shutdown share one event loop
    companion = _build_companion()
    try:
        try:
            delivered = await companion.next_question()
        except NoQuestionsAvailable as e:
            rprint(f"[red]✗ {e}[/red]")
            raise typer.Exit(1)

        _render_question(delivered)
        index = answer - 1 if answer is not None else _prompt_answer()
        _render_result(companion.submit_answer(delivered.id, index))
    finally:
        await companion.aclose()


@app.command("run")
def run(
    min_seconds: Optional[float] = typer.Option(None, "--min", help="Shortest delay between questions (seconds)"),
    max_seconds: Optional[float] = typer.Option(None, "--max", help="Longest delay between questions (seconds)"),
    count: int = typer.Option(0, "--count", "-n", min=0, help="Stop after this many questions (0 = forever)"),
    now: bool = typer.Option(False, "--now", help="Ask the first question immediately"),
) -> None:
    """
    Deliver questions at random intervals until interrupted.

    Examples:
        learnloop run                    # Configured interval (2-10 minutes)
        learnloop run --min 30 --max 90  # Faster practice
        learnloop run -n 5 --now         # Five questions, first one right away
    """
    settings = get_settings()
    min_ms = int(min_seconds * 1000) if min_seconds is not None else settings.min_interval_ms
    max_ms = int(max_seconds * 1000) if max_seconds is not None else settings.max_interval_ms
    companion = _build_companion()

    rprint("\n[bold cyan]learnloop[/bold cyan] practice session")
    rprint(f"  Interval: {min_ms / 1000:.0f}s - {max_ms / 1000:.0f}s")
    rprint(f"  AI: {'on' if companion.selector.ai_available() else 'off'}")
    rprint("  Press Ctrl+C to stop\n")

    try:
        asyncio.run(_run_session(companion, min_ms, max_ms, count, now))
    except KeyboardInterrupt:
        rprint("\n[dim]Session stopped[/dim]")


async def _run_session(
    companion: LearningCompanion, min_ms: int, max_ms: int, count: int, immediate: bool
) -> None:
    finished = asyncio.Event()
    answered = 0

    async def deliver() -> None:
        nonlocal answered
        try:
            delivered = await companion.next_question()
        except NoQuestionsAvailable as e:
            logger.error(str(e))
            return
        if delivered is None:
            return

        scheduler.pause()
        try:
            _render_question(delivered)
            index = _prompt_answer()
            _render_result(companion.submit_answer(delivered.id, index))
        except InvalidQuestionId as e:
            logger.warning(f"Discarded answer: {e}")
        finally:
            answered += 1
            if count and answered >= count:
                finished.set()
            else:
                scheduler.resume()

    scheduler = QuestionScheduler(
        on_due=deliver,
        min_interval_ms=min_ms,
        max_interval_ms=max_ms,
        is_busy=companion.is_busy,
    )
    scheduler.start()
    if immediate:
        scheduler.schedule_next(0)

    try:
        await finished.wait()
    finally:
        scheduler.stop()
        await companion.aclose()


# ========================================
# Analytics
# ========================================


@app.command("stats")
def stats() -> None:
    """Show answer statistics, the last 7 days and achievements."""
    companion = _build_companion()
    try:
        data = companion.analytics()
    finally:
        _close(companion)

    agg = data["aggregates"]
    if agg.total_questions == 0:
        rprint("[yellow]⚠[/yellow] No answers recorded yet. Try [bold]learnloop ask[/bold].")
        return

    summary = Table(title="Overall", show_header=False)
    summary.add_column("Metric", style="cyan")
    summary.add_column("Value", justify="right", style="green")
    summary.add_row("Questions answered", str(agg.total_questions))
    summary.add_row("Correct", str(agg.correct_answers))
    summary.add_row("Accuracy", f"{agg.overall_accuracy}%")
    summary.add_row("Avg response", f"{agg.average_response_time_ms / 1000:.1f}s")
    summary.add_row("Current streak", f"{agg.streak.current_streak} days")
    summary.add_row("Longest streak", f"{agg.streak.longest_streak} days")
    summary.add_row("Recent trend", data["trend"].trend)
    console.print(summary)

    topics = Table(title="Topics", show_header=True)
    topics.add_column("Topic", style="cyan")
    topics.add_column("Answered", justify="right")
    topics.add_column("Accuracy", justify="right")
    topics.add_column("Status")
    status_style = {"strong": "green", "moderate": "yellow", "weak": "red"}
    for row in data["topics"]:
        style = status_style[row["status"]]
        topics.add_row(row["topic"], str(row["total"]), f"{row['accuracy']}%", f"[{style}]{row['status']}[/{style}]")
    console.print(topics)

    weekly = data["weekly"]
    week = Table(title=f"Last 7 days ({weekly.total_questions} questions, {weekly.accuracy}%)", show_header=True)
    week.add_column("Day", style="cyan")
    week.add_column("Date", style="dim")
    week.add_column("Questions", justify="right")
    week.add_column("Accuracy", justify="right")
    for day in weekly.days:
        week.add_row(day.day, day.date, str(day.questions), f"{day.accuracy}%" if day.questions else "-")
    console.print(week)

    if data["achievements"]:
        rprint("\n[bold]Achievements[/bold]")
        for achievement in data["achievements"]:
            rprint(f"  🏆 {achievement.name} [dim]({achievement.earned_at[:10]})[/dim]")


@app.command("weaknesses")
def weaknesses() -> None:
    """Show weak concepts, recommended actions and the learning path."""
    companion = _build_companion()
    try:
        report = companion.analyze_weaknesses()
    finally:
        _close(companion)

    if not report.overall_weaknesses:
        rprint("[bold green]✓ No weaknesses detected[/bold green]")
    else:
        table = Table(title="Weaknesses", show_header=True)
        table.add_column("Name", style="cyan")
        table.add_column("Type", style="dim")
        table.add_column("Severity")
        table.add_column("Impact")
        table.add_column("Priority", justify="right")
        table.add_column("Details", style="dim")
        for w in report.overall_weaknesses:
            table.add_row(
                w.name,
                w.type,
                f"[{w.severity.color}]{w.severity.value}[/{w.severity.color}]",
                w.impact,
                f"{w.priority:.1f}",
                w.description,
            )
        console.print(table)

    if report.recommended_actions:
        rprint("\n[bold]Recommended actions[/bold]")
        for action in report.recommended_actions:
            rprint(f"  • {action.action} [dim]({action.estimated_time}, {action.difficulty})[/dim]")
            for resource in action.resources:
                rprint(f"      [dim]- {resource}[/dim]")

    if report.learning_path:
        rprint("\n[bold]Learning path[/bold]")
        for i, item in enumerate(report.learning_path, start=1):
            rprint(f"  {i}. {item.title} [dim]({item.estimated_time})[/dim]")

    rprint(
        f"\n[dim]Confidence {report.confidence_scores.overall:.0f}% "
        f"({report.confidence_scores.trend})[/dim]"
    )


@app.command("assess")
def assess(
    history: Optional[Path] = typer.Option(
        None,
        "--history",
        exists=True,
        dir_okay=False,
        help="JSON list of past interviews, each with a 'score' (0-100); defaults to recorded interviews",
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the full assessment as JSON"),
) -> None:
    """Run a skill assessment from the recorded answers."""
    interview_history = json.loads(history.read_text(encoding="utf-8")) if history else None
    companion = _build_companion()
    try:
        assessment = companion.assess_skills(interview_history)
    finally:
        _close(companion)

    if as_json:
        console.print_json(json.dumps(assessment.to_dict()))
        return

    rprint(f"\n[bold cyan]Skill Assessment[/bold cyan] [dim]{assessment.timestamp[:19]}[/dim]")
    rprint(f"  Overall score: [bold]{assessment.overall_score}[/bold]")
    rprint(f"  Experience level: {assessment.experience_level.name} ({assessment.experience_level.confidence} confidence)")
    rprint(f"  Data quality: {assessment.data_quality}")

    if assessment.category_scores:
        table = Table(title="Categories", show_header=True)
        table.add_column("Category", style="cyan")
        table.add_column("Score", justify="right")
        table.add_column("Questions", justify="right")
        table.add_column("Confidence", style="dim")
        for key, group in assessment.category_scores.items():
            table.add_row(key, f"{group.score:.0f}", str(group.total_questions), group.confidence)
        console.print(table)

    bench = Table(title="Benchmarks", show_header=True)
    bench.add_column("Level", style="cyan")
    bench.add_column("Readiness", justify="right")
    bench.add_column("Categories met", justify="right")
    bench.add_column("Salary range", style="dim")
    for comparison in assessment.benchmark_comparison.values():
        bench.add_row(
            comparison.name,
            f"{comparison.readiness:.0f}%",
            f"{comparison.categories_met}/{comparison.total_categories}",
            f"${comparison.salary_min:,} - ${comparison.salary_max:,}",
        )
    console.print(bench)

    readiness = assessment.interview_readiness
    rprint(f"\n[bold]Interview readiness[/bold] {readiness.overall:.0f} (estimated success {readiness.estimated_success_rate}%)")
    for note in readiness.recommendations:
        rprint(f"  • {note}")

    for cert in assessment.certifications:
        rprint(f"  {cert.badge} {cert.name}")

    if assessment.recommendations:
        rprint("\n[bold]Recommendations[/bold]")
        for rec in assessment.recommendations:
            rprint(f"  [{rec.priority}] {rec.title} [dim]({rec.estimated_time})[/dim]")


@app.command("reset")
def reset(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Clear answers, achievements, weakness profiles, assessments and interviews."""
    if not yes and not typer.confirm("Reset all learning analytics?"):
        raise typer.Abort()
    companion = _build_companion()
    try:
        companion.reset_analytics()
    finally:
        _close(companion)
    rprint("[bold green]✓ Analytics reset[/bold green]")


# ========================================
# Cache Commands
# ========================================


@cache_app.command("stats")
def cache_stats() -> None:
    """Show cached question counts by source, topic and level."""
    companion = _build_companion()
    try:
        stats = companion.cache.stats()
    finally:
        _close(companion)

    rprint(f"\n[bold]Cached questions:[/bold] {stats.total}")
    for title, counts in (("Source", stats.by_source), ("Topic", stats.by_topic), ("Level", stats.by_level)):
        if not counts:
            continue
        table = Table(title=f"By {title.lower()}", show_header=True)
        table.add_column(title, style="cyan")
        table.add_column("Count", justify="right", style="green")
        for key, value in sorted(counts.items()):
            table.add_row(key, str(value))
        console.print(table)


@cache_app.command("clear")
def cache_clear(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Remove every cached question."""
    if not yes and not typer.confirm("Delete all cached questions?"):
        raise typer.Abort()
    companion = _build_companion()
    try:
        companion.cache.clear()
    finally:
        _close(companion)
    rprint("[bold green]✓ Cache cleared[/bold green]")


@cache_app.command("export")
def cache_export(
    output: Path = typer.Argument(..., help="Destination JSON file"),
) -> None:
    """Write the cache (metadata and questions) to a JSON file."""
    companion = _build_companion()
    try:
        document = companion.cache.export_all()
    finally:
        _close(companion)
    output.write_text(json.dumps(document, indent=2), encoding="utf-8")
    rprint(f"[bold green]✓ Exported {len(document['questions'])} questions to {output}[/bold green]")


@cache_app.command("import")
def cache_import(
    source: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON file from 'cache export'"),
) -> None:
    """Merge valid, non-duplicate questions from a JSON file."""
    try:
        data = json.loads(source.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        rprint(f"[red]✗ {source} is not valid JSON: {e}[/red]")
        raise typer.Exit(1)

    companion = _build_companion()
    try:
        imported = companion.cache.import_all(data)
    finally:
        _close(companion)
    rprint(f"[bold green]✓ Imported {imported} questions[/bold green]")


# ========================================
# Interview Commands
# ========================================


@interview_app.command("types")
def interview_types() -> None:
    """List mock interview types."""
    table = Table(title="Interview types", show_header=True)
    table.add_column("Key", style="cyan")
    table.add_column("Name")
    table.add_column("Duration", justify="right")
    table.add_column("Questions", justify="right")
    table.add_column("Mix (easy/medium/hard)", style="dim")
    for itype in INTERVIEW_TYPES.values():
        mix = itype.mix
        table.add_row(
            itype.key, itype.name, f"{itype.duration_minutes} min", str(itype.question_count),
            f"{mix.easy}/{mix.medium}/{mix.hard}",
        )
    console.print(table)


@interview_app.command("companies")
def interview_companies() -> None:
    """List company interview profiles."""
    table = Table(title="Companies", show_header=True)
    table.add_column("Key", style="cyan")
    table.add_column("Name")
    table.add_column("Focus", style="dim")
    table.add_column("Difficulty")
    table.add_column("Question types", style="dim")
    for profile in COMPANY_PROFILES.values():
        table.add_row(profile.key, profile.name, profile.focus, profile.difficulty, ", ".join(profile.question_types))
    console.print(table)


@interview_app.command("start")
def interview_start(
    type_key: str = typer.Argument(..., help="Interview type (see 'interview types')"),
    company: Optional[str] = typer.Option(None, "--company", "-c", help="Company profile (see 'interview companies')"),
    answer: Optional[int] = typer.Option(
        None, "--answer", "-a", min=1, max=4, help="Answer every question with this option"
    ),
) -> None:
    """
    Run a timed mock interview and record the result.

    Examples:
        learnloop interview start quick-practice
        learnloop interview start backend-focused --company amazon
    """
    asyncio.run(_interview(type_key, company, answer))


async def _interview(type_key: str, company_key: Optional[str], answer: Optional[int]) -> None:
    companion = _build_companion()
    try:
        try:
            session = companion.start_interview(type_key, company_key)
        except UnknownProfile as e:
            rprint(f"[red]✗ {e}[/red]")
            raise typer.Exit(1)

        title = session.interview_type.name + (f" at {session.company.name}" if session.company else "")
        rprint(f"\n[bold cyan]{title}[/bold cyan]")
        rprint(f"  {len(session.slots)} questions, {session.interview_type.duration_minutes} minutes\n")
        if session.company:
            for tip in session.company.tips:
                rprint(f"  [dim]• {tip}[/dim]")

        while not session.is_finished:
            try:
                delivered = await companion.next_interview_question()
            except NoQuestionsAvailable as e:
                rprint(f"[red]✗ {e}[/red]")
                break
            if delivered is None:
                break
            progress = session.progress()
            rprint(
                f"\n[dim]Question {progress['current_question']}/{progress['total_questions']}"
                f" - {progress['phase']} - {progress['time_remaining_ms'] // 60_000} min left[/dim]"
            )
            _render_question(delivered)
            index = answer - 1 if answer is not None else _prompt_answer()
            result = companion.submit_interview_answer(delivered.id, index)
            rprint("[green]✓ Correct[/green]" if result.correct else f"[red]✗ Incorrect[/red] ({result.correct_answer})")

        _render_interview_result(companion.complete_interview())
    finally:
        await companion.aclose()


def _render_interview_result(result: InterviewResult) -> None:
    summary = Table(title="Interview result", show_header=False)
    summary.add_column("Metric", style="cyan")
    summary.add_column("Value", justify="right", style="green")
    summary.add_row("Score", str(result.score))
    summary.add_row("Answered", f"{result.questions_answered}/{result.questions_total}")
    summary.add_row("Correct", str(result.correct_answers))
    summary.add_row("Accuracy", f"{result.accuracy_score}%")
    summary.add_row("Time score", str(result.time_score))
    summary.add_row("Time", f"{result.total_time_ms / 60_000:.1f} min")
    console.print(summary)


@interview_app.command("history")
def interview_history(
    limit: int = typer.Option(10, "--limit", "-n", min=1, help="How many interviews to show"),
) -> None:
    """Show recent interview results and overall statistics."""
    companion = _build_companion()
    try:
        records = companion.interviews.recent(limit)
        stats = companion.interviews.stats()
    finally:
        _close(companion)

    if not records:
        rprint("[yellow]⚠[/yellow] No interviews recorded yet. Try [bold]learnloop interview start quick-practice[/bold].")
        return

    table = Table(title="Recent interviews", show_header=True)
    table.add_column("Date", style="dim")
    table.add_column("Type", style="cyan")
    table.add_column("Company")
    table.add_column("Answered", justify="right")
    table.add_column("Score", justify="right", style="green")
    for record in records:
        table.add_row(
            str(record.get("completed_at", ""))[:16],
            str(record.get("type_name", record.get("type", ""))),
            str(record.get("company") or "-"),
            f"{record.get('questions_answered', 0)}/{record.get('questions_total', 0)}",
            str(record.get("score", 0)),
        )
    console.print(table)
    rprint(
        f"\n  Interviews: {stats.total_interviews}  Average: {stats.average_score}  "
        f"Best: {stats.best_score}  Completion: {stats.completion_rate}%"
    )


# ========================================
# Company Commands
# ========================================


@company_app.command("download")
def company_download(
    company: str = typer.Argument(..., help="Company profile (see 'interview companies')"),
    count: Optional[int] = typer.Option(None, "--count", "-n", min=1, help="Questions to generate"),
) -> None:
    """Generate a company question set with the configured AI provider."""
    asyncio.run(_company_download(company, count))


async def _company_download(company_key: str, count: Optional[int]) -> None:
    companion = _build_companion()
    try:
        if not companion.selector.ai_available():
            rprint("[red]✗ AI generation is not configured (set LEARNLOOP_USE_AI and an API key)[/red]")
            raise typer.Exit(1)
        try:
            result = await companion.company_sets.download(
                company_key,
                companion.provider,
                count=count,
                on_progress=lambda stage, pct, message: rprint(f"[dim]{pct:5.1f}% {message}[/dim]"),
            )
        except (UnknownProfile, ProviderError) as e:
            rprint(f"[red]✗ {e}[/red]")
            raise typer.Exit(1)
        rprint(f"[bold green]✓ Generated {result.generated}/{result.requested} questions[/bold green]")
    finally:
        await companion.aclose()


@company_app.command("list")
def company_list() -> None:
    """Show the size of every company question set."""
    companion = _build_companion()
    try:
        summary = companion.company_sets.summary()
        stats = companion.company_sets.download_stats()
    finally:
        _close(companion)

    table = Table(title="Company question sets", show_header=True)
    table.add_column("Key", style="cyan")
    table.add_column("Name")
    table.add_column("Questions", justify="right", style="green")
    table.add_column("By type", style="dim")
    table.add_column("Updated", style="dim")
    for key, row in summary.items():
        by_type = ", ".join(f"{kind} {n}" for kind, n in sorted(row["question_types"].items()))
        table.add_row(key, row["name"], str(row["total_questions"]), by_type or "-", (row["last_updated"] or "-")[:16])
    console.print(table)
    rprint(
        f"\n  Downloads: {stats['total_downloads']} "
        f"({stats['successful_downloads']} ok, {stats['failed_downloads']} failed)"
    )


@company_app.command("export")
def company_export(
    company: str = typer.Argument(..., help="Company profile"),
    output: Path = typer.Argument(..., help="Destination JSON file"),
) -> None:
    """Write one company question set to a JSON file."""
    companion = _build_companion()
    try:
        document = companion.company_sets.export(company)
    except UnknownProfile as e:
        rprint(f"[red]✗ {e}[/red]")
        raise typer.Exit(1)
    finally:
        _close(companion)
    output.write_text(json.dumps(document, indent=2), encoding="utf-8")
    rprint(f"[bold green]✓ Exported {document['total_questions']} questions to {output}[/bold green]")


@company_app.command("import")
def company_import(
    company: str = typer.Argument(..., help="Company profile"),
    source: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON file from 'company export'"),
) -> None:
    """Merge valid questions from a JSON file into a company question set."""
    try:
        data = json.loads(source.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        rprint(f"[red]✗ {source} is not valid JSON: {e}[/red]")
        raise typer.Exit(1)

    companion = _build_companion()
    try:
        imported = companion.company_sets.import_data(company, data)
    except (UnknownProfile, ValueError) as e:
        rprint(f"[red]✗ {e}[/red]")
        raise typer.Exit(1)
    finally:
        _close(companion)
    rprint(f"[bold green]✓ Imported {imported} questions[/bold green]")


@company_app.command("clear")
def company_clear(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete every company question set and the download history."""
    if not yes and not typer.confirm("Delete all company question sets?"):
        raise typer.Abort()
    companion = _build_companion()
    try:
        companion.company_sets.clear()
    finally:
        _close(companion)
    rprint("[bold green]✓ Company question sets cleared[/bold green]")


def main() -> None:
    """Entry point for the CLI."""
    configure_logging(get_settings())
    app()


if __name__ == "__main__":
    main()
