"""Summary command - Structured summary with section illustrations.

Generates the summary, then waits for the per-section illustrations that
are produced in the background. Sections whose illustration failed are
still shown in full.
"""

from __future__ import annotations

import base64
import binascii
import mimetypes
from pathlib import Path
from typing import Any, Optional

import typer
from rich.markdown import Markdown
from rich.markup import escape
from rich.panel import Panel

from studyforge.cli.console import print_info, print_warning, run_with_spinner
from studyforge.cli.study.base import StudyCommand
from studyforge.core.logging import get_logger
from studyforge.study.artifacts import Artifact, IllustrationStatus, SummaryArtifact
from studyforge.study.models import ArtifactKind, StudyLevel
from studyforge.study.orchestrator import GenerationOrchestrator

logger = get_logger(__name__)

_STATUS_LABELS = {
    IllustrationStatus.PENDING: "[yellow]illustration pending[/yellow]",
    IllustrationStatus.READY: "[green]illustration ready[/green]",
    IllustrationStatus.FAILED: "[red]illustration failed[/red]",
    IllustrationStatus.NO_IMAGE: "[dim]no illustration[/dim]",
}


def decode_data_url(data_url: str) -> tuple[str, bytes]:
    """Split a data:<mime>;base64,<data> reference into (mime, bytes)."""
    header, _, payload = data_url.partition(",")
    if not header.startswith("data:") or ";base64" not in header:
        raise ValueError("Not a base64 data URL")
    mime_type = header[len("data:") :].split(";", 1)[0] or "application/octet-stream"
    try:
        return mime_type, base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 image data: {e}") from e


class SummaryCommand(StudyCommand):
    """Generate a structured, illustrated summary."""

    def run(
        self,
        orchestrator: GenerationOrchestrator,
        level: StudyLevel,
        images_dir: Optional[Path] = None,
        **options: Any,
    ) -> Artifact:
        run_with_spinner(
            lambda: orchestrator.generate(ArtifactKind.SUMMARY, level),
            "Writing summary...",
            "Summary generated",
        )
        # Illustrations keep arriving after generate() returns
        settled = run_with_spinner(
            lambda: orchestrator.wait_for_illustrations(
                timeout=self.config.llm.request_timeout
            ),
            "Drawing illustrations...",
        )
        if not settled:
            print_warning("Some illustrations are still pending")

        artifact = orchestrator.artifact(ArtifactKind.SUMMARY)
        assert isinstance(artifact, SummaryArtifact)
        if images_dir is not None:
            self.save_images(artifact, images_dir)
        return artifact

    def render(self, artifact: Artifact) -> None:
        assert isinstance(artifact, SummaryArtifact)
        summary = artifact.summary

        self.console.print()
        self.console.print(
            Panel(
                escape(summary.introduction),
                title=f"[bold cyan]{escape(summary.title)}[/bold cyan]",
            )
        )
        for index, section in enumerate(summary.sections):
            status = artifact.illustration(index).status
            self.console.print()
            self.console.print(
                f"[bold]{index + 1}. {escape(section.title)}[/bold]  "
                f"{_STATUS_LABELS[status]}"
            )
            self.console.print(Markdown(section.content))
            for point in section.key_points:
                self.console.print(f"  • {point}", markup=False)

        self.console.print()
        self.console.print(
            Panel(escape(summary.conclusion), title="Conclusion", border_style="green")
        )

        failed = [
            i + 1
            for i, ill in sorted(artifact.illustrations.items())
            if ill.status is IllustrationStatus.FAILED
        ]
        if failed:
            print_warning(
                f"Illustrations failed for section(s): {', '.join(map(str, failed))}"
            )

    def save_images(self, artifact: SummaryArtifact, images_dir: Path) -> None:
        """Write every ready illustration as section_<n>.<ext>."""
        images_dir.mkdir(parents=True, exist_ok=True)
        saved = 0
        for index, ill in sorted(artifact.illustrations.items()):
            if ill.status is not IllustrationStatus.READY or not ill.image:
                continue
            try:
                mime_type, data = decode_data_url(ill.image)
            except ValueError as e:
                logger.warning("Skipping unreadable illustration", index=index, error=str(e))
                continue
            ext = mimetypes.guess_extension(mime_type) or ".bin"
            (images_dir / f"section_{index + 1}{ext}").write_bytes(data)
            saved += 1
        print_info(f"Saved {saved} illustration(s) to {images_dir}")


def command(
    document: Path = typer.Argument(..., help="Document to summarise (.pdf, .docx, .txt, .md)"),
    level: Optional[str] = typer.Option(
        None, "--level", "-l", help="Study level YEAR_1..YEAR_6 (or 1-6)"
    ),
    images: Optional[Path] = typer.Option(
        None, "--images", help="Directory to save the section illustrations in"
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Save the summary as JSON"
    ),
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Config file (default: ./studyforge.yaml)"
    ),
    debug: bool = typer.Option(False, "--debug", help="Show debug logs and tracebacks"),
) -> None:
    """Generate a structured summary with section illustrations.

    Examples:
        studyforge study summary biology.pdf --level 3

        studyforge study summary notes.docx --images ./img -o summary.json
    """
    cmd = SummaryCommand()
    exit_code = cmd.execute(
        document, level, output, config, debug, images_dir=images
    )
    if exit_code != 0:
        raise typer.Exit(code=exit_code)
