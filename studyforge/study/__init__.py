"""
Study material generation.

The orchestrator turns one source document into five kinds of study
artifact and runs the test-taking cycle:

    provider = LLMContentProvider(get_llm_client(config), config)
    with GenerationOrchestrator(provider, config) as orchestrator:
        orchestrator.load_document(text)
        orchestrator.generate(ArtifactKind.GLOSSARY, StudyLevel.YEAR_3)

        orchestrator.generate(ArtifactKind.TEST, StudyLevel.YEAR_3, TestType.OPEN_QUESTIONS)
        session = orchestrator.test_session
        session.record_answer("q1", "Chlorophyll")
        result = session.submit()
"""

from studyforge.study.artifacts import (
    Artifact,
    FlashcardsArtifact,
    GeneratedTest,
    GlossaryArtifact,
    Illustration,
    IllustrationStatus,
    MindmapArtifact,
    SummaryArtifact,
    TestArtifact,
)
from studyforge.study.models import (
    ArtifactKind,
    Flashcard,
    GlossaryItem,
    GradedQuestion,
    GradeResult,
    MindmapNode,
    Question,
    StructuredSummary,
    StudyLevel,
    SummarySection,
    TestType,
)
from studyforge.study.orchestrator import GenerationOrchestrator
from studyforge.study.provider import ContentProvider, LLMContentProvider
from studyforge.study.store import ArtifactStore
from studyforge.study.test_session import TestSessionController, TestState

__all__ = [
    "Artifact",
    "ArtifactKind",
    "ArtifactStore",
    "ContentProvider",
    "Flashcard",
    "FlashcardsArtifact",
    "GeneratedTest",
    "GenerationOrchestrator",
    "GlossaryArtifact",
    "GlossaryItem",
    "GradeResult",
    "GradedQuestion",
    "Illustration",
    "IllustrationStatus",
    "LLMContentProvider",
    "MindmapArtifact",
    "MindmapNode",
    "Question",
    "StructuredSummary",
    "StudyLevel",
    "SummaryArtifact",
    "SummarySection",
    "TestArtifact",
    "TestSessionController",
    "TestState",
    "TestType",
]
