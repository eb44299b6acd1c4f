"""Artifact sum type.

Each generated study artifact is one of five frozen dataclasses, all
carrying their ``kind``. The presentation layer dispatches on the concrete
type; there is never an "artifact with optional fields".
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

from studyforge.study.models import (
    ArtifactKind,
    Flashcard,
    GlossaryItem,
    MindmapNode,
    Question,
    StructuredSummary,
    StudyLevel,
    TestType,
)


class IllustrationStatus(str, Enum):
    """Per-section illustration state."""

    PENDING = "pending"
    READY = "ready"
    FAILED = "failed"
    NO_IMAGE = "no_image"

    @property
    def settled(self) -> bool:
        return self is not IllustrationStatus.PENDING


@dataclass(frozen=True)
class Illustration:
    """Illustration state of one summary section.

    ``image`` is only set when the status is READY.
    """

    status: IllustrationStatus = IllustrationStatus.PENDING
    image: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def pending(cls) -> "Illustration":
        return cls()

    @classmethod
    def ready(cls, image: str) -> "Illustration":
        return cls(status=IllustrationStatus.READY, image=image)

    @classmethod
    def no_image(cls) -> "Illustration":
        return cls(status=IllustrationStatus.NO_IMAGE)

    @classmethod
    def failed(cls, error: str) -> "Illustration":
        return cls(status=IllustrationStatus.FAILED, error=error)


@dataclass(frozen=True)
class GeneratedTest:
    """Questions of one generated test plus what they were generated for."""

    test_type: TestType
    level: StudyLevel
    questions: Tuple[Question, ...]

    def __post_init__(self) -> None:
        # Accept any sequence but store a tuple
        object.__setattr__(self, "questions", tuple(self.questions))

    @property
    def question_ids(self) -> List[str]:
        return [q.id for q in self.questions]

    def get(self, question_id: str) -> Optional[Question]:
        for question in self.questions:
            if question.id == question_id:
                return question
        return None


@dataclass(frozen=True)
class SummaryArtifact:
    summary: StructuredSummary
    illustrations: Dict[int, Illustration] = field(default_factory=dict)
    kind: ArtifactKind = field(default=ArtifactKind.SUMMARY, init=False)

    def illustration(self, index: int) -> Illustration:
        return self.illustrations.get(index, Illustration.pending())


@dataclass(frozen=True)
class GlossaryArtifact:
    items: Tuple[GlossaryItem, ...]
    kind: ArtifactKind = field(default=ArtifactKind.GLOSSARY, init=False)


@dataclass(frozen=True)
class FlashcardsArtifact:
    cards: Tuple[Flashcard, ...]
    kind: ArtifactKind = field(default=ArtifactKind.FLASHCARDS, init=False)


@dataclass(frozen=True)
class MindmapArtifact:
    root: MindmapNode
    kind: ArtifactKind = field(default=ArtifactKind.MINDMAP, init=False)


@dataclass(frozen=True)
class TestArtifact:
    test: GeneratedTest
    kind: ArtifactKind = field(default=ArtifactKind.TEST, init=False)


Artifact = Union[
    SummaryArtifact,
    GlossaryArtifact,
    FlashcardsArtifact,
    MindmapArtifact,
    TestArtifact,
]
