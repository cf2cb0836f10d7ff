"""Command-line interface for spam-tree.

Provides ``train``, ``classify``, ``accuracy``, ``predict`` and
``interactive`` commands with rich terminal output using the ``click``
and ``rich`` libraries.

Usage::

    spam-tree train data/emails/train.csv --save model.txt
    spam-tree accuracy data/emails/test.csv --model model.txt
    spam-tree predict "win a free prize now" --model model.txt
    spam-tree interactive
"""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional

import click
import pandas as pd
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import IntPrompt, Prompt
from rich.table import Table

from .config import Settings
from .dataset import DataLoader
from .exceptions import SpamTreeError
from .features import FeatureVector
from .tree import OVERALL, DecisionTree

console = Console()

_HANDLED_ERRORS = (
    SpamTreeError,
    OSError,
    UnicodeDecodeError,
    pd.errors.ParserError,
    pd.errors.EmptyDataError,
)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _fail(error: Exception) -> None:
    console.print(f"[bold red]Error:[/] {escape(str(error))}")
    sys.exit(1)


def _get_settings(ctx: click.Context) -> Settings:
    return ctx.obj["settings"]


def _load_model(path: Path) -> DecisionTree:
    with open(path, "r", encoding="utf-8") as f:
        return DecisionTree.load(f)


def _save_model(tree: DecisionTree, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        tree.save(f)


def _load_csv(settings: Settings, file: Path | str) -> DataLoader:
    return DataLoader(
        file,
        label_index=settings.label_index,
        content_index=settings.content_index,
        rng=settings.make_rng(),
    )


def _train_model(settings: Settings) -> DecisionTree:
    loader = _load_csv(settings, settings.train_file)
    return DecisionTree.train(loader.dataset)


def _model_or_train(settings: Settings, model: Optional[Path]) -> DecisionTree:
    if model is not None:
        return _load_model(model)
    return _train_model(settings)


@click.group()
@click.version_option(package_name="spam-tree")
@click.option("--log-level", default=None,
              type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
              help="Logging level (defaults to SPAM_TREE_LOG_LEVEL).")
@click.pass_context
def main(ctx: click.Context, log_level: str | None) -> None:
    """🌳 spam-tree — decision-tree text classifier.

    Train a word-frequency decision tree on labelled CSV data, save it,
    and use it to classify new documents.
    """
    try:
        settings = Settings.from_env()
    except SpamTreeError as e:
        _fail(e)
    _configure_logging(log_level or settings.log_level)
    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings


@main.command()
@click.argument("data", type=click.Path(exists=True, dir_okay=False, path_type=Path),
                required=False)
@click.option("--save", "-s", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Write the trained tree to this file.")
@click.option("--label-index", type=int, default=None, help="CSV column of the label.")
@click.option("--content-index", type=int, default=None, help="CSV column of the text.")
@click.option("--seed", type=int, default=None, help="Shuffle seed.")
@click.pass_context
def train(
    ctx: click.Context,
    data: Path | None,
    save: Path | None,
    label_index: int | None,
    content_index: int | None,
    seed: int | None,
) -> None:
    """Train a tree from a labelled CSV file.

    Example: spam-tree train data/emails/train.csv --save model.txt
    """
    settings = _get_settings(ctx)
    overrides = {
        key: value
        for key, value in (
            ("label_index", label_index),
            ("content_index", content_index),
            ("seed", seed),
        )
        if value is not None
    }
    if overrides:
        settings = replace(settings, **overrides)

    with console.status("[bold blue]Training tree...", spinner="dots"):
        try:
            loader = _load_csv(settings, data or settings.train_file)
            tree = DecisionTree.train(loader.dataset)
            scores = tree.accuracy(loader.dataset)
        except _HANDLED_ERRORS as e:
            _fail(e)

    console.print(Panel(
        f"Documents: {len(loader.data)} | "
        f"Leaves: {tree.leaf_count} | "
        f"Depth: {tree.depth} | "
        f"Labels: {', '.join(sorted(tree.labels()))}",
        title="🌳 Trained Tree",
        border_style="blue",
    ))
    _render_accuracy(scores, "Training Accuracy")

    if save:
        try:
            _save_model(tree, save)
        except OSError as e:
            _fail(e)
        console.print(f"[dim]Tree saved to {escape(str(save))}[/]")


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--model", "-m", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              default=None, help="Saved tree (trains from the default file if omitted).")
@click.option("--output", "-o", type=click.Choice(["rich", "json"]), default="rich",
              help="Output format.")
@click.pass_context
def classify(ctx: click.Context, file: Path, model: Path | None, output: str) -> None:
    """Classify every document in a CSV file.

    Example: spam-tree classify inbox.csv --model model.txt
    """
    settings = _get_settings(ctx)
    try:
        tree = _model_or_train(settings, model)
        loader = _load_csv(settings, file)
        results = tree.classify_all(loader.data)
    except _HANDLED_ERRORS as e:
        _fail(e)

    if output == "json":
        click.echo(json.dumps(results, indent=2))
    else:
        click.echo(f"Results: {results}")


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path),
                required=False)
@click.option("--model", "-m", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              default=None, help="Saved tree (trains from the default file if omitted).")
@click.option("--output", "-o", type=click.Choice(["rich", "json"]), default="rich",
              help="Output format.")
@click.pass_context
def accuracy(ctx: click.Context, file: Path | None, model: Path | None, output: str) -> None:
    """Measure per-label accuracy on a labelled CSV file.

    Example: spam-tree accuracy data/emails/test.csv --model model.txt
    """
    settings = _get_settings(ctx)
    try:
        tree = _model_or_train(settings, model)
        loader = _load_csv(settings, file or settings.test_file)
        scores = tree.accuracy(loader.dataset)
    except _HANDLED_ERRORS as e:
        _fail(e)

    if output == "json":
        click.echo(json.dumps(scores, indent=2, sort_keys=True))
    else:
        _render_accuracy(scores, f"Accuracy — {Path(file or settings.test_file).name}")


@main.command()
@click.argument("text")
@click.option("--model", "-m", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              default=None, help="Saved tree (trains from the default file if omitted).")
@click.pass_context
def predict(ctx: click.Context, text: str, model: Path | None) -> None:
    """Classify a single piece of text.

    Example: spam-tree predict "claim your free prize" --model model.txt
    """
    settings = _get_settings(ctx)
    try:
        tree = _model_or_train(settings, model)
    except _HANDLED_ERRORS as e:
        _fail(e)
    click.echo(tree.classify(FeatureVector(text)))


@main.command()
@click.pass_context
def interactive(ctx: click.Context) -> None:
    """Menu-driven session: train or load, then test, measure, or save."""
    settings = _get_settings(ctx)
    console.print("Welcome to the spam-tree classifier! "
                  "To begin, enter your desired mode of operation:")
    console.print()
    console.print("1) Train classification model")
    console.print("2) Load model from file")
    mode = IntPrompt.ask("Enter your choice here", choices=["1", "2"], console=console)

    try:
        if mode == 1:
            with console.status("[bold blue]Training tree...", spinner="dots"):
                tree = _train_model(settings)
        else:
            path = Prompt.ask("Please enter the path to the file you'd like to load",
                              console=console)
            tree = _load_model(Path(path))
    except _HANDLED_ERRORS as e:
        _fail(e)

    console.print()
    console.print("What would you like to do with your model?")
    while True:
        console.print()
        console.print("1) Test with an input file")
        console.print("2) Get testing accuracy")
        console.print("3) Save to a file")
        console.print("4) Quit")
        choice = IntPrompt.ask("Enter your choice here", choices=["1", "2", "3", "4"],
                               console=console)
        if choice == 4:
            break
        try:
            if choice == 1:
                name = Prompt.ask("Please enter the file you'd like to test", console=console)
                results = tree.classify_all(_load_csv(settings, name).data)
                click.echo(f"Results: {results}")
            elif choice == 2:
                loader = _load_csv(settings, settings.test_file)
                _render_accuracy(tree.accuracy(loader.dataset), "Testing Accuracy")
            else:
                name = Prompt.ask("Please enter the file name you'd like to save to",
                                  console=console)
                _save_model(tree, Path(name + ".txt"))
                console.print(f"[dim]Tree saved to {escape(name)}.txt[/]")
        except _HANDLED_ERRORS as e:
            console.print(f"[bold red]Error:[/] {escape(str(e))}")


# ------------------------------------------------------------------
# Rich rendering helpers
# ------------------------------------------------------------------

def _render_accuracy(scores: dict[str, float], title: str) -> None:
    """Render label accuracies as a rich table, overall last."""
    table = Table(title=title, show_lines=False)
    table.add_column("Label", style="cyan")
    table.add_column("Accuracy", justify="right")

    for label in sorted(k for k in scores if k != OVERALL):
        table.add_row(escape(label), f"{scores[label]:.2%}")
    table.add_row(f"[bold]{OVERALL}[/]", f"[bold]{scores[OVERALL]:.2%}[/]")

    console.print(table)
    console.print()


if __name__ == "__main__":
    main()
