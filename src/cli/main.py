"""
Typer CLI for the quiz results analytics toolkit.

Commands:
    quizstats analyze FILE          - Per-question analytics and problem flags
    quizstats concepts FILE         - Concept mastery, dependencies and insights
    quizstats compare FILE FILE...  - Trends across sessions of the same quiz
    quizstats list [DIR]            - Saved sessions with participants and scores

Usage:
    quizstats --help
    quizstats analyze results/results_123456_1700000000000.json
    quizstats analyze results_123456_1700000000000.json --problems-only
    quizstats concepts results/results_123456_1700000000000.json --json
    quizstats compare results/results_123456_*.json
    quizstats list results --search algebra --sort participants-desc
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import typer
from loguru import logger
from rich import box
from rich import print as rprint
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from config import get_settings
from src.analytics import build_session_report, compare_sessions
from src.analytics.models import ConceptMastery, QuestionAnalysis, Severity, TrendDirection
from src.analytics.results_filter import (
    SORT_KEYS,
    calculate_average_score,
    filter_and_sort_results,
    get_score_class,
    get_success_rate_class,
)
from src.analytics.utils import format_scalar
from src.cli.results_loader import (
    ResultsFileError,
    get_saved_result,
    list_session_records,
    load_session_record,
    validate_filename,
)

console = Console()

app = typer.Typer(
    help="quizstats: analytics for saved quiz sessions",
    no_args_is_help=True,
)

RATE_COLORS = {
    "excellent": "green",
    "good": "yellow",
    "fair": "dark_orange",
    "poor": "red",
}

SCORE_COLORS = {
    "score-excellent": "green",
    "score-good": "yellow",
    "score-average": "dark_orange",
    "score-poor": "red",
}

SEVERITY_COLORS = {
    Severity.HIGH: "red",
    Severity.MEDIUM: "yellow",
    Severity.SUCCESS: "green",
}


# ========================================
# Helpers
# ========================================


def _load(path: Path) -> dict[str, Any]:
    """Load a session from a path, or a bare saved filename in the results directory."""
    try:
        if not path.exists() and path.name == str(path) and validate_filename(path.name):
            return get_saved_result(get_settings().results_dir, path.name)
        return load_session_record(path)
    except ResultsFileError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)


def _echo_json(data: Any) -> None:
    typer.echo(json.dumps(data, indent=2, default=str))


def _score(score: int) -> str:
    color = SCORE_COLORS[get_score_class(score)]
    return f"[{color}]{score}%[/{color}]"


def _truncate(text: str, width: int) -> str:
    return text if len(text) <= width else text[: width - 3] + "..."


def _rate(rate: float) -> str:
    color = RATE_COLORS[get_success_rate_class(rate)]
    return f"[{color}]{rate:.1f}%[/{color}]"


def _question_table(analytics: list[QuestionAnalysis], text_width: int) -> Table:
    table = Table(title="Questions", box=box.ROUNDED)
    table.add_column("Q", justify="right", style="bold")
    table.add_column("Question")
    table.add_column("Success", justify="right")
    table.add_column("Avg time", justify="right")
    table.add_column("Responses", justify="right")
    table.add_column("Avg points", justify="right")
    table.add_column("Flags")

    for q in analytics:
        flags = "\n".join(
            f"[{SEVERITY_COLORS[f.severity]}]{escape(f.message)}[/{SEVERITY_COLORS[f.severity]}]"
            for f in q.problem_flags
        )
        table.add_row(
            f"Q{q.question_number}",
            escape(_truncate(q.text or "-", text_width)),
            _rate(q.success_rate),
            f"{q.average_time:.1f}s",
            str(q.total_responses),
            f"{q.average_points:.0f}",
            flags or "[dim]-[/dim]",
        )
    return table


def _concept_table(mastery: ConceptMastery) -> Table:
    table = Table(title="Concept Mastery", box=box.ROUNDED)
    table.add_column("Concept", style="bold")
    table.add_column("Questions", justify="right")
    table.add_column("Responses", justify="right")
    table.add_column("Mastery", justify="right")
    table.add_column("Avg time", justify="right")
    table.add_column("Level")

    for stats in mastery.concepts.values():
        color = stats.mastery_level.color
        table.add_row(
            escape(stats.name),
            str(stats.question_count),
            str(stats.total_responses),
            _rate(stats.mastery_rate),
            f"{stats.average_time:.1f}s",
            f"[{color}]{stats.mastery_level.value}[/{color}]",
        )
    return table


# ========================================
# Commands
# ========================================


@app.command("analyze")
def analyze(
    path: Path = typer.Argument(..., help="Saved session JSON file, or a saved filename in the results directory"),
    json_output: bool = typer.Option(False, "--json", help="Print the raw analytics as JSON"),
    problems_only: bool = typer.Option(
        False, "--problems-only", "-p", help="Only show potentially problematic questions"
    ),
) -> None:
    """Per-question analytics with heuristic problem flags."""
    settings = get_settings()
    report = build_session_report(_load(path), settings.analytics)

    if json_output:
        _echo_json(report.to_dict())
        return

    if not report.question_analytics:
        rprint("[yellow]Analytics not available:[/yellow] no questions or answers in this session")
        return

    header = (
        f"[bold]{escape(report.quiz_title or 'Untitled Quiz')}[/bold]\n"
        f"{report.participant_count} participants | average score {report.average_score}%"
    )
    if report.reconstructed:
        header += "\n[dim]Questions reconstructed from player answers[/dim]"
    console.print(Panel(header, title="Quiz Analytics", border_style="cyan"))

    analytics = report.problematic_questions if problems_only else report.question_analytics
    if analytics:
        console.print(_question_table(analytics, settings.cli_text_width))
    else:
        rprint("[green]No major issues detected. All questions performing well![/green]")

    summary = report.summary
    if summary is None:
        return

    stats = Table(box=box.SIMPLE, show_header=False)
    stats.add_column("Metric", style="dim")
    stats.add_column("Value", justify="right")
    stats.add_row("Average success rate", _rate(summary.avg_success_rate))
    stats.add_row("Average response time", f"{summary.avg_time:.1f}s")
    stats.add_row("Questions need review", str(summary.problematic_count))
    stats.add_row(
        "Hardest question",
        f"Q{summary.hardest_question.number} ({summary.hardest_question.success_rate:.1f}%)",
    )
    stats.add_row(
        "Easiest question",
        f"Q{summary.easiest_question.number} ({summary.easiest_question.success_rate:.1f}%)",
    )
    console.print(stats)

    if summary.needs_review:
        rprint(
            f"[red]Quiz needs review:[/red] {summary.problematic_count} out of "
            f"{summary.total_questions} questions ({summary.problematic_ratio * 100:.1f}%) "
            "may need improvement."
        )


@app.command("concepts")
def concepts(
    path: Path = typer.Argument(..., help="Saved session JSON file, or a saved filename in the results directory"),
    json_output: bool = typer.Option(False, "--json", help="Print the raw concept analytics as JSON"),
) -> None:
    """Concept mastery, inferred dependencies and insights."""
    settings = get_settings()
    report = build_session_report(_load(path), settings.analytics)

    if json_output:
        _echo_json(
            {
                "conceptMastery": report.concept_mastery.to_dict(),
                "conceptDependencies": [d.to_dict() for d in report.concept_dependencies],
                "conceptInsights": [i.to_dict() for i in report.concept_insights],
            }
        )
        return

    if not report.concept_mastery.has_concepts:
        rprint("[yellow]No concept tags in this quiz.[/yellow] Tag questions with concepts to see mastery.")
        return

    console.print(_concept_table(report.concept_mastery))

    if report.concept_dependencies:
        deps = Table(title="Concept Dependencies", box=box.ROUNDED)
        deps.add_column("Foundational", style="bold")
        deps.add_column("Dependent")
        deps.add_column("Confidence", justify="right")
        deps.add_column("Severity")
        for d in report.concept_dependencies:
            color = SEVERITY_COLORS[d.severity]
            deps.add_row(
                escape(d.foundational),
                escape(d.dependent),
                f"{d.confidence}%",
                f"[{color}]{d.severity.value}[/{color}]",
            )
        console.print(deps)

    for insight in report.concept_insights:
        color = SEVERITY_COLORS[insight.severity]
        console.print(Panel(escape(insight.message), title=insight.title, border_style=color))


@app.command("compare")
def compare(
    paths: list[Path] = typer.Argument(..., help="Two or more saved session files of the same quiz"),
    json_output: bool = typer.Option(False, "--json", help="Print the raw comparison as JSON"),
) -> None:
    """Compare sessions of the same quiz over time."""
    settings = get_settings()
    records = [_load(p) for p in paths]
    comparison = compare_sessions(records, settings.analytics)

    if comparison is None:
        rprint("[red]Error:[/red] at least two sessions are needed for a comparison")
        raise typer.Exit(code=1)

    if json_output:
        _echo_json(comparison.to_dict())
        return

    trend_color = {
        TrendDirection.IMPROVING: "green",
        TrendDirection.DECLINING: "red",
        TrendDirection.STABLE: "dim",
    }[comparison.trend_direction]
    console.print(
        Panel(
            f"Sessions compared: {comparison.session_count} | "
            f"average participants: {comparison.average_participants}\n"
            f"Overall trend: [{trend_color}]{comparison.trend_direction.value.title()} "
            f"({comparison.overall_trend:+.1f}%)[/{trend_color}]",
            title="Session Comparison",
            border_style="cyan",
        )
    )

    sessions = Table(title="Sessions", box=box.ROUNDED)
    sessions.add_column("#", justify="right")
    sessions.add_column("Date")
    sessions.add_column("File")
    sessions.add_column("Participants", justify="right")
    sessions.add_column("Success", justify="right")
    for index, s in enumerate(comparison.sessions, start=1):
        sessions.add_row(
            str(index),
            format_scalar(s.date) if s.date is not None else "Unknown",
            s.filename or "-",
            str(s.participant_count),
            _rate(s.overall_success_rate),
        )
    console.print(sessions)

    if comparison.question_trends:
        trends = Table(title="Question Performance Trends", box=box.ROUNDED)
        trends.add_column("Q", justify="right", style="bold")
        trends.add_column("First", justify="right")
        trends.add_column("Last", justify="right")
        trends.add_column("Trend", justify="right")
        band = settings.analytics.trend_band
        for t in comparison.question_trends:
            color = "green" if t.trend > band else "red" if t.trend < -band else "dim"
            trends.add_row(
                f"Q{t.question_number}",
                f"{t.first_rate:.0f}%",
                f"{t.last_rate:.0f}%",
                f"[{color}]{t.trend:+.1f}%[/{color}]",
            )
        console.print(trends)

    if comparison.most_improved:
        rprint(
            f"[green]Most improved:[/green] Q{comparison.most_improved.question_number} "
            f"({comparison.most_improved.trend:+.1f}%)"
        )
    if comparison.most_declined:
        rprint(
            f"[red]Most declined:[/red] Q{comparison.most_declined.question_number} "
            f"({comparison.most_declined.trend:+.1f}%)"
        )


@app.command("list")
def list_results(
    directory: Path | None = typer.Argument(None, help="Results directory (default: from config)"),
    search: str | None = typer.Option(None, "--search", "-s", help="Filter by quiz title or game PIN"),
    sort: str = typer.Option("date-desc", "--sort", help=f"Sort order: {', '.join(SORT_KEYS)}"),
) -> None:
    """List saved sessions."""
    settings = get_settings()
    if sort not in SORT_KEYS:
        rprint(f"[red]Error:[/red] unknown sort '{sort}' (choose from {', '.join(SORT_KEYS)})")
        raise typer.Exit(code=1)

    records = list_session_records(directory or Path(settings.results_dir), settings.results_file_pattern)
    records = filter_and_sort_results(records, search, sort)

    if not records:
        rprint("[yellow]No saved results found.[/yellow]")
        return

    table = Table(title="Saved Results", box=box.ROUNDED)
    table.add_column("File")
    table.add_column("Quiz", style="bold")
    table.add_column("PIN")
    table.add_column("Players", justify="right")
    table.add_column("Avg score", justify="right")
    table.add_column("Saved")
    for record in records:
        table.add_row(
            escape(str(record.get("filename") or "-")),
            escape(str(record.get("quizTitle") or "Untitled Quiz")),
            str(record.get("gamePin") or "-"),
            str(len(record.get("results") or [])),
            _score(calculate_average_score(record)),
            str(record.get("saved") or "Unknown"),
        )
    console.print(table)


# =============================================================================
# Entry Point
# =============================================================================


def main() -> None:
    """CLI entry point."""
    settings = get_settings()

    # Configure logging
    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.log_level,
        format="<level>{level: <8}</level> | {message}",
    )
    if settings.log_file:
        logger.add(
            settings.log_file,
            level="DEBUG",
            rotation="10 MB",
            retention=5,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} - {message}",
        )

    app()


if __name__ == "__main__":
    main()
