"""Command-line interface for the stress text classifier.

Provides ``predict``, ``add``, ``train`` and ``info`` commands with rich
terminal output using the ``click`` and ``rich`` libraries. Model state
lives in a directory store (``STRESS_TEXT_STORE_DIR`` or ``--store``).

Usage::

    stress-text predict "Too many deadlines and no sleep"
    stress-text add "Slow morning, coffee on the porch" 10
    stress-text train
    stress-text info --top 15
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .classifier import StressTextClassifier
from .config import load_settings
from .log import configure_logging
from .storage import DirectoryStore, ModelStore

console = Console()


def _get_score_style(score: int) -> str:
    """Return a rich style string for a stress score."""
    if score >= 70:
        return "bold red"
    if score >= 40:
        return "bold yellow"
    return "bold green"


def _build_classifier(ctx: click.Context) -> StressTextClassifier:
    settings = ctx.obj["settings"]
    store_dir = ctx.obj["store_dir"] or settings.store_dir
    classifier = StressTextClassifier(
        ModelStore(DirectoryStore(store_dir)),
        max_features=settings.max_features,
        retrain_threshold=settings.retrain_threshold,
    )
    classifier.initialize()
    return classifier


@click.group()
@click.version_option(package_name="stress-text-classifier")
@click.option("--store", "store_dir", type=click.Path(file_okay=False, path_type=Path),
              default=None, help="Directory holding model state (overrides STRESS_TEXT_STORE_DIR).")
@click.option("--log-level", default=None,
              type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
              help="Log verbosity (overrides STRESS_TEXT_LOG_LEVEL).")
@click.pass_context
def main(ctx: click.Context, store_dir: Path | None, log_level: str | None) -> None:
    """Stress Text Classifier: on-device stress estimation from free text.

    Scores text on a 0-100 stress scale with a TF-IDF + logistic regression
    model that retrains as labeled samples accumulate.
    """
    try:
        settings = load_settings()
    except ValueError as e:
        console.print(f"[bold red]Error:[/] {e}")
        sys.exit(1)

    configure_logging(log_level or settings.log_level)
    ctx.obj = {"settings": settings, "store_dir": store_dir}


@main.command()
@click.argument("text")
@click.option("--output", "-o", type=click.Choice(["rich", "json"]), default="rich",
              help="Output format.")
@click.pass_context
def predict(ctx: click.Context, text: str, output: str) -> None:
    """Estimate the stress level of TEXT.

    Example: stress-text predict "I'm overwhelmed by deadlines"
    """
    classifier = _build_classifier(ctx)
    score = classifier.predict(text)

    if output == "json":
        click.echo(json.dumps({"text": text, "stress_level": score}, indent=2))
    else:
        style = _get_score_style(score)
        console.print(f"Stress level: [{style}]{score}[/] / 100")


@main.command()
@click.argument("text")
@click.argument("level", type=click.IntRange(0, 100))
@click.pass_context
def add(ctx: click.Context, text: str, level: int) -> None:
    """Record TEXT with a human-provided stress LEVEL (0-100).

    Example: stress-text add "Calm evening with a book" 10
    """
    classifier = _build_classifier(ctx)

    try:
        retrained = classifier.add_training_data(text, level)
    except ValueError as e:
        console.print(f"[bold red]Error:[/] {e}")
        sys.exit(1)

    console.print(f"Recorded sample ({classifier.sample_count} in log).")
    if retrained:
        console.print("[green]Classifier retrained on the full sample log.[/]")


@main.command()
@click.option("--output", "-o", type=click.Choice(["rich", "json"]), default="rich",
              help="Output format.")
@click.pass_context
def train(ctx: click.Context, output: str) -> None:
    """Retrain on the recorded samples (synthetic data if too few).

    Example: stress-text train
    """
    classifier = _build_classifier(ctx)

    if output == "json":
        report = classifier.retrain_from_log()
        click.echo(json.dumps(report.to_dict(), indent=2))
        return

    with console.status("[bold blue]Training classifier...", spinner="dots"):
        report = classifier.retrain_from_log()

    style = "green" if report.success else "bold red"
    console.print(Panel(
        f"{report.message}\nData points: {report.data_points}",
        title="Training",
        border_style=style,
    ))
    if not report.success:
        sys.exit(1)


@main.command()
@click.option("--top", "top_n", type=click.IntRange(min=1), default=10,
              help="Number of terms to list.")
@click.pass_context
def info(ctx: click.Context, top_n: int) -> None:
    """Show model status and the most informative terms."""
    classifier = _build_classifier(ctx)

    console.print(Panel(
        f"Ready: {'yes' if classifier.is_ready else 'no'} | "
        f"Vocabulary: {classifier.vocabulary_size} terms | "
        f"Samples: {classifier.sample_count}",
        title="Stress Text Classifier",
        border_style="blue",
    ))

    terms = classifier.most_informative_terms(top_n)
    if not terms:
        return

    table = Table(title="Most informative terms", show_lines=False)
    table.add_column("#", justify="right", width=4)
    table.add_column("Term", style="cyan")
    table.add_column("Weight", justify="right")

    for i, (term, weight) in enumerate(terms, 1):
        style = "red" if weight > 0 else "green"
        table.add_row(str(i), term, f"[{style}]{weight:+.4f}[/]")

    console.print(table)


if __name__ == "__main__":
    main()
