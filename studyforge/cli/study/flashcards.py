"""Flashcards command - Question/answer cards for memorisation."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import typer
from rich.markup import escape
from rich.table import Table

from studyforge.cli.console import run_with_spinner
from studyforge.cli.study.base import StudyCommand
from studyforge.study.artifacts import Artifact, FlashcardsArtifact
from studyforge.study.models import ArtifactKind, StudyLevel
from studyforge.study.orchestrator import GenerationOrchestrator


class FlashcardsCommand(StudyCommand):
    """Generate a set of flashcards."""

    def run(
        self, orchestrator: GenerationOrchestrator, level: StudyLevel, **options: Any
    ) -> Artifact:
        return run_with_spinner(
            lambda: orchestrator.generate(ArtifactKind.FLASHCARDS, level),
            "Creating flashcards...",
            "Flashcards generated",
        )

    def render(self, artifact: Artifact) -> None:
        assert isinstance(artifact, FlashcardsArtifact)

        table = Table(title=f"Flashcards ({len(artifact.cards)})", show_lines=True)
        table.add_column("#", style="dim", width=4)
        table.add_column("Front", style="cyan")
        table.add_column("Back", style="green")
        for number, card in enumerate(artifact.cards, 1):
            table.add_row(str(number), escape(card.front), escape(card.back))

        self.console.print()
        self.console.print(table)


def command(
    document: Path = typer.Argument(..., help="Document to read (.pdf, .docx, .txt, .md)"),
    level: Optional[str] = typer.Option(
        None, "--level", "-l", help="Study level YEAR_1..YEAR_6 (or 1-6)"
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Save the flashcards as JSON"
    ),
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Config file (default: ./studyforge.yaml)"
    ),
    debug: bool = typer.Option(False, "--debug", help="Show debug logs and tracebacks"),
) -> None:
    """Generate flashcards from a document.

    Examples:
        studyforge study flashcards chapter1.pdf

        studyforge study flashcards chapter1.pdf --level 5 -o cards.json
    """
    cmd = FlashcardsCommand()
    exit_code = cmd.execute(document, level, output, config, debug)
    if exit_code != 0:
        raise typer.Exit(code=exit_code)
