"""Glossary command - Key terms and definitions from the document."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import typer
from rich.markup import escape
from rich.table import Table

from studyforge.cli.console import run_with_spinner
from studyforge.cli.study.base import StudyCommand
from studyforge.study.artifacts import Artifact, GlossaryArtifact
from studyforge.study.models import ArtifactKind, StudyLevel
from studyforge.study.orchestrator import GenerationOrchestrator


class GlossaryCommand(StudyCommand):
    """Generate a glossary of key terms."""

    def run(
        self, orchestrator: GenerationOrchestrator, level: StudyLevel, **options: Any
    ) -> Artifact:
        return run_with_spinner(
            lambda: orchestrator.generate(ArtifactKind.GLOSSARY, level),
            "Collecting key terms...",
            "Glossary generated",
        )

    def render(self, artifact: Artifact) -> None:
        assert isinstance(artifact, GlossaryArtifact)

        table = Table(title=f"Glossary ({len(artifact.items)} terms)", show_lines=True)
        table.add_column("Term", style="cyan", no_wrap=True)
        table.add_column("Definition", style="white")
        for item in artifact.items:
            table.add_row(escape(item.term), escape(item.definition))

        self.console.print()
        self.console.print(table)


def command(
    document: Path = typer.Argument(..., help="Document to read (.pdf, .docx, .txt, .md)"),
    level: Optional[str] = typer.Option(
        None, "--level", "-l", help="Study level YEAR_1..YEAR_6 (or 1-6)"
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Save the glossary as JSON"
    ),
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Config file (default: ./studyforge.yaml)"
    ),
    debug: bool = typer.Option(False, "--debug", help="Show debug logs and tracebacks"),
) -> None:
    """Generate a glossary of key terms and definitions.

    Examples:
        studyforge study glossary biology.pdf --level YEAR_2

        studyforge study glossary history.md -o terms.json
    """
    cmd = GlossaryCommand()
    exit_code = cmd.execute(document, level, output, config, debug)
    if exit_code != 0:
        raise typer.Exit(code=exit_code)
