"""Typed payloads exchanged with the content provider.

The provider answers in JSON with camelCase keys (keyPoints, imagePrompt,
correctAnswer, ...). Every model below accepts those keys as well as the
Python field names, and dumps back to camelCase with by_alias=True.

A payload is either validated completely or rejected; callers never see a
half-parsed artifact.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class StudyLevel(str, Enum):
    """The six grade levels of secondary school, in order."""

    YEAR_1 = "YEAR_1"
    YEAR_2 = "YEAR_2"
    YEAR_3 = "YEAR_3"
    YEAR_4 = "YEAR_4"
    YEAR_5 = "YEAR_5"
    YEAR_6 = "YEAR_6"

    @property
    def year(self) -> int:
        return int(self.value.rsplit("_", 1)[1])

    @property
    def label(self) -> str:
        """Human-readable level used in prompts and the CLI."""
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(self.year, "th")
        return f"{self.year}{suffix} year of secondary school"

    @classmethod
    def parse(cls, value: str) -> "StudyLevel":
        """Accept 'YEAR_3', 'year_3' or just '3'."""
        text = str(value).strip().upper()
        if text.isdigit():
            text = f"YEAR_{text}"
        try:
            return cls(text)
        except ValueError:
            valid = ", ".join(level.value for level in cls)
            raise ValueError(f"Unknown study level {value!r} (expected one of {valid})")


class ArtifactKind(str, Enum):
    """The five kinds of generated study material."""

    SUMMARY = "summary"
    GLOSSARY = "glossary"
    FLASHCARDS = "flashcards"
    MINDMAP = "mindmap"
    TEST = "test"


class TestType(str, Enum):
    """Question style of a generated test."""

    MULTIPLE_CHOICE = "multiple_choice"
    OPEN_QUESTIONS = "open_questions"


class _WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


def _normalise_id(value: str) -> str:
    """Question ids join questions, answers and grades; compare them stripped."""
    value = value.strip()
    if not value:
        raise ValueError("question id must not be empty")
    return value


class SummarySection(_WireModel):
    """One chapter of a structured summary."""

    title: str
    content: str
    key_points: List[str] = Field(default_factory=list)
    image_prompt: str


class StructuredSummary(_WireModel):
    """A summary split into ordered sections.

    Section order is stable; the index of a section is the key of its
    illustration.
    """

    title: str
    introduction: str
    sections: List[SummarySection]
    conclusion: str


class GlossaryItem(_WireModel):
    term: str
    definition: str


class Flashcard(_WireModel):
    front: str
    back: str


class MindmapNode(_WireModel):
    """A node of the mindmap tree; leaves have no children."""

    name: str
    children: List["MindmapNode"] = Field(default_factory=list)

    @field_validator("children", mode="before")
    @classmethod
    def _none_is_leaf(cls, value: Any) -> Any:
        return [] if value is None else value

    def walk(self, depth: int = 0):
        """Yield (depth, node) pairs in pre-order."""
        yield depth, self
        for child in self.children:
            yield from child.walk(depth + 1)

    @property
    def size(self) -> int:
        return sum(1 for _ in self.walk())


class Question(_WireModel):
    """A test question.

    The id is assigned by the provider and joins the question to the user's
    answer and to its graded result.
    """

    id: str
    question: str
    type: TestType
    options: List[str] = Field(default_factory=list)
    correct_answer: str

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("id")
    @classmethod
    def _id_not_blank(cls, value: str) -> str:
        return _normalise_id(value)

    @field_validator("options", mode="before")
    @classmethod
    def _none_is_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @model_validator(mode="after")
    def _choices_for_multiple_choice(self) -> "Question":
        if self.type is TestType.MULTIPLE_CHOICE and len(self.options) < 2:
            raise ValueError(
                f"multiple-choice question {self.id!r} needs at least two options"
            )
        return self

    @property
    def is_multiple_choice(self) -> bool:
        return self.type is TestType.MULTIPLE_CHOICE


class GradedQuestion(_WireModel):
    question_id: str
    user_answer: str = ""
    is_correct: bool
    correct_answer: str
    feedback: str = ""

    @field_validator("question_id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("question_id")
    @classmethod
    def _id_not_blank(cls, value: str) -> str:
        return _normalise_id(value)

    @field_validator("user_answer", "feedback", mode="before")
    @classmethod
    def _none_is_blank(cls, value: Any) -> Any:
        return "" if value is None else value


class GradeResult(_WireModel):
    """Outcome of grading one test attempt."""

    score: float = Field(ge=0)
    max_score: float = Field(ge=0)
    feedback: str
    graded_questions: List[GradedQuestion]

    @model_validator(mode="after")
    def _score_within_max(self) -> "GradeResult":
        if self.score > self.max_score:
            raise ValueError(
                f"score {self.score} exceeds max score {self.max_score}"
            )
        return self

    @property
    def percentage(self) -> float:
        if self.max_score == 0:
            return 0.0
        return self.score / self.max_score * 100

    def by_question(self) -> Dict[str, GradedQuestion]:
        return {graded.question_id: graded for graded in self.graded_questions}

    def for_question(self, question_id: str) -> Optional[GradedQuestion]:
        return self.by_question().get(question_id)
