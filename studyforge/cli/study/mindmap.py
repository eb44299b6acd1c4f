"""Mindmap command - Themes and sub-themes as a tree."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import typer
from rich.markup import escape
from rich.tree import Tree

from studyforge.cli.console import run_with_spinner
from studyforge.cli.study.base import StudyCommand
from studyforge.study.artifacts import Artifact, MindmapArtifact
from studyforge.study.models import ArtifactKind, MindmapNode, StudyLevel
from studyforge.study.orchestrator import GenerationOrchestrator


def build_tree(node: MindmapNode, tree: Optional[Tree] = None) -> Tree:
    """Mirror a mindmap node into a rich Tree."""
    if tree is None:
        tree = Tree(f"[bold cyan]{escape(node.name)}[/bold cyan]")
    for child in node.children:
        build_tree(child, tree.add(escape(child.name)))
    return tree


class MindmapCommand(StudyCommand):
    """Generate a mindmap of the document."""

    def run(
        self, orchestrator: GenerationOrchestrator, level: StudyLevel, **options: Any
    ) -> Artifact:
        return run_with_spinner(
            lambda: orchestrator.generate(ArtifactKind.MINDMAP, level),
            "Mapping themes...",
            "Mindmap generated",
        )

    def render(self, artifact: Artifact) -> None:
        assert isinstance(artifact, MindmapArtifact)
        self.console.print()
        self.console.print(build_tree(artifact.root))


def command(
    document: Path = typer.Argument(..., help="Document to read (.pdf, .docx, .txt, .md)"),
    level: Optional[str] = typer.Option(
        None, "--level", "-l", help="Study level YEAR_1..YEAR_6 (or 1-6)"
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Save the mindmap as JSON"
    ),
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Config file (default: ./studyforge.yaml)"
    ),
    debug: bool = typer.Option(False, "--debug", help="Show debug logs and tracebacks"),
) -> None:
    """Generate a mindmap of the main themes.

    Examples:
        studyforge study mindmap biology.pdf --level 4
    """
    cmd = MindmapCommand()
    exit_code = cmd.execute(document, level, output, config, debug)
    if exit_code != 0:
        raise typer.Exit(code=exit_code)
