"""CLI application for DepGuard."""

import asyncio
import json
import logging
import sys

import typer
from rich.console import Console

from core.advisory import AdvisoryGenerator, static_advice
from core.cascade import ConflictDetector
from core.config import Settings
from core.detect import select_manager
from core.models import AdvisoryResult, ConflictRecord
from core.providers import create_llm_client

console = Console()

GROUPING_THRESHOLD = 10
GROUP_PREVIEW = 3


def group_problems(problems: list[str]) -> dict[str, list[str]]:
    """Bucket problems by the first keyword they mention."""
    groups: dict[str, list[str]] = {}
    for problem in problems:
        if "peer" in problem:
            group = "peer"
        elif "version" in problem:
            group = "version"
        elif "missing" in problem:
            group = "missing"
        elif "invalid" in problem:
            group = "invalid"
        else:
            group = "other"
        groups.setdefault(group, []).append(problem)
    return groups


def read_changed_files(files: list[str]) -> list[str]:
    """Expand '-' into newline-separated paths read from stdin."""
    paths = []
    for file_path in files:
        if file_path == "-":
            paths.extend(line.strip() for line in sys.stdin.read().splitlines() if line.strip())
        else:
            paths.append(file_path)
    return paths


def print_conflict(record: ConflictRecord) -> None:
    console.print(f"{record.kind.title} detected in {record.source_file}:", style="bold red", markup=False)

    problems = list(record.problems)
    if len(problems) <= GROUPING_THRESHOLD:
        for problem in problems:
            console.print(f"  • {problem}", style="yellow", markup=False, highlight=False, soft_wrap=True)
        return

    for group, items in group_problems(problems).items():
        console.print(f"  {group} issues ({len(items)}):", style="yellow")
        for problem in items[:GROUP_PREVIEW]:
            console.print(f"    • {problem}", style="yellow", markup=False, highlight=False, soft_wrap=True)
        if len(items) > GROUP_PREVIEW:
            console.print(f"    • ...and {len(items) - GROUP_PREVIEW} more {group} issues", style="yellow")


def print_advice(analysis: AdvisoryResult | None, advice: list[str]) -> None:
    if analysis:
        console.print("AI Analysis", style="bold cyan")
        console.print("Root Cause:", style="blue")
        console.print(f"  {analysis.explanation}", style="cyan", markup=False)
        console.print("Resolution Strategy:", style="blue")
        for index, step in enumerate(analysis.steps, start=1):
            console.print(f"  {index}. {step}", markup=False)
    else:
        for line in advice:
            console.print(line, style="yellow", markup=False)

    console.print("You can continue anyway, but your build might fail.", style="yellow")


def format_json_output(
    record: ConflictRecord | None, analysis: AdvisoryResult | None, advice: list[str]
) -> str:
    """Format JSON output."""
    return json.dumps(
        {
            "conflict": record.to_dict() if record else None,
            "analysis": analysis.to_dict() if analysis else None,
            "advice": advice,
        },
        indent=2,
    )


app = typer.Typer(
    name="depguard",
    help="DepGuard - Detect dependency conflicts before they are committed",
    add_completion=False,
)


@app.command()
def check(
    files: list[str] | None = typer.Argument(
        None, help="Changed file paths, e.g. package.json, yarn.lock (use '-' for stdin)"
    ),
    cwd: str = typer.Option(".", "--cwd", "-C", help="Project directory"),
    no_ai: bool = typer.Option(False, "--no-ai", help="Skip the LLM analysis"),
    format_type: str = typer.Option("text", "--format", help="Output format: text or json"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """DepGuard - Check changed dependency files for conflicts."""

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        changed_files = read_changed_files(files or [])
        settings = Settings()

        detector = ConflictDetector(cwd=cwd, command_timeout=settings.DEPGUARD_COMMAND_TIMEOUT)
        record = detector.detect(changed_files)

        if record is None:
            if format_type == "json":
                console.print(format_json_output(None, None, []), soft_wrap=True, highlight=False, markup=False)
            else:
                console.print("No dependency conflicts detected", style="green")
            raise typer.Exit(0)

        client = None if no_ai else create_llm_client(settings)
        analysis = asyncio.run(AdvisoryGenerator(client).advise(record)) if client else None
        advice = [] if analysis else static_advice(record.kind, select_manager(cwd))

        if format_type == "json":
            console.print(
                format_json_output(record, analysis, advice),
                soft_wrap=True,
                highlight=False,
                markup=False,
            )
        else:
            print_conflict(record)
            print_advice(analysis, advice)

        # Blocking or continuing is the caller's decision
        raise typer.Exit(1)

    except typer.Exit:
        raise
    except Exception as e:
        console.print(f"Error: {e}", style="red", markup=False)
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
