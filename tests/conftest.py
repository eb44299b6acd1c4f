"""
Shared pytest fixtures and configuration for StudyForge tests.

This file is automatically discovered by pytest and provides fixtures
that can be used across all test files.

Fixture Organization
--------------------
- **temp_dir**: Temporary directory for file operations
- **config**: Default Config (no file, no API key needed)
- **source_text**: A short source document
- **provider**: ScriptedProvider with a payload for every artifact kind
- **orchestrator**: GenerationOrchestrator over `provider`, document loaded

No fixture touches the network; the generative service is always replaced
by a double from tests.fixtures.providers.
"""

import tempfile
from pathlib import Path
from typing import Generator

import pytest

from studyforge.core.config import Config
from studyforge.study.models import (
    ArtifactKind,
    Flashcard,
    GlossaryItem,
    MindmapNode,
)
from studyforge.study.orchestrator import GenerationOrchestrator
from tests.fixtures.providers import ScriptedProvider, make_summary, make_test

SOURCE_TEXT = "Photosynthesis converts light into energy."


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory (cleaned up after test)
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def config() -> Config:
    """Default configuration."""
    return Config()


@pytest.fixture
def source_text() -> str:
    return SOURCE_TEXT


@pytest.fixture
def provider() -> ScriptedProvider:
    """Provider with a valid payload for every kind."""
    return ScriptedProvider(
        payloads={
            ArtifactKind.SUMMARY: make_summary(3),
            ArtifactKind.GLOSSARY: (
                GlossaryItem(term="Photosynthesis", definition="Turning light into energy"),
            ),
            ArtifactKind.FLASHCARDS: (
                Flashcard(front="What powers photosynthesis?", back="Light"),
            ),
            ArtifactKind.MINDMAP: MindmapNode(
                name="Photosynthesis",
                children=[MindmapNode(name="Light"), MindmapNode(name="Energy")],
            ),
            ArtifactKind.TEST: make_test(5),
        }
    )


@pytest.fixture
def orchestrator(
    provider: ScriptedProvider, config: Config, source_text: str
) -> Generator[GenerationOrchestrator, None, None]:
    """Orchestrator with the sample document loaded."""
    orch = GenerationOrchestrator(provider, config)
    orch.load_document(source_text, name="photosynthesis.txt")
    yield orch
    orch.close()
