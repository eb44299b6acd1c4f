"""Base class for study commands.

Every study command follows the same path:

    load config -> extract document text -> build orchestrator
        -> generate artifact -> render -> optional JSON export

Subclasses implement run() (the orchestrator calls) and render().
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

from rich.console import Console

from studyforge.cli.console import (
    ErrorRenderer,
    get_console,
    print_success,
    run_with_spinner,
    set_verbose_mode,
)
from studyforge.core.config import Config, load_config
from studyforge.core.logging import configure_logging, get_logger
from studyforge.ingest import TextExtractor
from studyforge.llm.factory import get_llm_client
from studyforge.study.artifacts import (
    Artifact,
    FlashcardsArtifact,
    GlossaryArtifact,
    MindmapArtifact,
    SummaryArtifact,
    TestArtifact,
)
from studyforge.study.models import StudyLevel
from studyforge.study.orchestrator import GenerationOrchestrator
from studyforge.study.provider import LLMContentProvider

logger = get_logger(__name__)


def artifact_to_dict(artifact: Artifact) -> Dict[str, Any]:
    """JSON-ready representation of an artifact (camelCase payload keys)."""
    data: Dict[str, Any] = {"kind": artifact.kind.value}

    if isinstance(artifact, SummaryArtifact):
        data["summary"] = artifact.summary.model_dump(by_alias=True, mode="json")
        data["illustrations"] = {
            str(index): {"status": ill.status.value, "image": ill.image}
            for index, ill in sorted(artifact.illustrations.items())
        }
    elif isinstance(artifact, GlossaryArtifact):
        data["items"] = [item.model_dump(by_alias=True) for item in artifact.items]
    elif isinstance(artifact, FlashcardsArtifact):
        data["cards"] = [card.model_dump(by_alias=True) for card in artifact.cards]
    elif isinstance(artifact, MindmapArtifact):
        data["root"] = artifact.root.model_dump(by_alias=True)
    elif isinstance(artifact, TestArtifact):
        test = artifact.test
        data["testType"] = test.test_type.value
        data["level"] = test.level.value
        data["questions"] = [
            q.model_dump(by_alias=True, mode="json") for q in test.questions
        ]
    else:
        raise TypeError(f"Unknown artifact type: {type(artifact).__name__}")

    return data


class StudyCommand(ABC):
    """Shared plumbing for the study commands."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or get_console()
        self.config: Config = Config()

    def execute(
        self,
        document: Path,
        level: Optional[str] = None,
        output: Optional[Path] = None,
        config_path: Optional[Path] = None,
        debug: bool = False,
        **options: Any,
    ) -> int:
        """
        Run the command end to end.

        Returns:
            Exit code (0 = success, 1 = error)
        """
        try:
            self.config = self.setup(config_path, debug)
            study_level = self.resolve_level(level)
            text = self.load_document(document)

            with self.create_orchestrator() as orchestrator:
                orchestrator.load_document(text, name=document.name)
                artifact = self.run(orchestrator, study_level, **options)
                self.render(artifact)
                if output:
                    self.save_json(output, self.export(orchestrator, artifact))

            return 0

        except Exception as e:
            return self.handle_error(e, f"{type(self).__name__} failed")

    def setup(self, config_path: Optional[Path], debug: bool) -> Config:
        """Load configuration and configure logging."""
        set_verbose_mode(debug)
        config = load_config(config_path)
        configure_logging(
            level="DEBUG" if debug else config.logging.level,
            log_file=config.log_path,
            console=True,
        )
        return config

    def resolve_level(self, level: Optional[str]) -> StudyLevel:
        return StudyLevel.parse(level or self.config.study.default_level)

    def load_document(self, document: Path) -> str:
        return run_with_spinner(
            lambda: TextExtractor().extract(document),
            f"Reading {document.name}...",
        )

    def create_orchestrator(self) -> GenerationOrchestrator:
        client = get_llm_client(self.config)
        provider = LLMContentProvider(client, self.config)
        return GenerationOrchestrator(provider, self.config)

    @abstractmethod
    def run(
        self, orchestrator: GenerationOrchestrator, level: StudyLevel, **options: Any
    ) -> Artifact:
        """Generate the artifact this command is about."""

    @abstractmethod
    def render(self, artifact: Artifact) -> None:
        """Print the artifact."""

    def export(
        self, orchestrator: GenerationOrchestrator, artifact: Artifact
    ) -> Dict[str, Any]:
        data = artifact_to_dict(artifact)
        data["document"] = orchestrator.document_name
        return data

    def save_json(self, output: Path, data: Dict[str, Any]) -> None:
        output.parent.mkdir(parents=True, exist_ok=True)
        with open(output, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        print_success(f"Saved to {output}")

    def handle_error(self, error: Exception, context: str = "") -> int:
        logger.debug("Command failed", error=type(error).__name__)
        ErrorRenderer.render(error, context=context)
        return 1
