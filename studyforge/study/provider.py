"""
Content Provider contract and its LLM-backed implementation.

The orchestrator only talks to a ContentProvider:

    generate_primary(kind, source_text, level, test_type=None) -> payload
    generate_illustration(prompt) -> data URL | None
    grade_test(source_text, questions, answers, level) -> GradeResult

Payload types per kind:

    SUMMARY     StructuredSummary
    GLOSSARY    tuple of GlossaryItem
    FLASHCARDS  tuple of Flashcard
    MINDMAP     MindmapNode
    TEST        GeneratedTest

Every failure (transport, malformed JSON, schema violation, incomplete
grading) is a ProviderError. A payload is never returned half-valid.
"""

from __future__ import annotations

import base64
import json
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

from pydantic import TypeAdapter, ValidationError

from studyforge.core.config import Config
from studyforge.core.exceptions import ProviderError
from studyforge.core.logging import get_logger
from studyforge.llm.base import LLMClient, LLMError
from studyforge.llm.factory import get_generation_config
from studyforge.study.artifacts import GeneratedTest
from studyforge.study.models import (
    ArtifactKind,
    Flashcard,
    GlossaryItem,
    GradeResult,
    MindmapNode,
    Question,
    StructuredSummary,
    StudyLevel,
    TestType,
)
from studyforge.study.prompts import (
    build_grading_prompt,
    build_illustration_prompt,
    build_primary_prompt,
    build_system_prompt,
)

logger = get_logger(__name__)

_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*\n?|\n?\s*```$")

_GLOSSARY_ADAPTER = TypeAdapter(List[GlossaryItem])
_FLASHCARDS_ADAPTER = TypeAdapter(List[Flashcard])
_QUESTIONS_ADAPTER = TypeAdapter(List[Question])


class ContentProvider(ABC):
    """Typed request/response contract of the generative backend."""

    @abstractmethod
    def generate_primary(
        self,
        kind: ArtifactKind,
        source_text: str,
        level: StudyLevel,
        test_type: Optional[TestType] = None,
    ) -> Any:
        """Generate the main payload of one artifact kind."""

    @abstractmethod
    def generate_illustration(self, prompt: str) -> Optional[str]:
        """
        Generate one section illustration.

        Returns:
            An image reference, or None when the service produced no image
            (a valid outcome, distinct from failure)
        """

    @abstractmethod
    def grade_test(
        self,
        source_text: str,
        questions: Sequence[Question],
        answers: Dict[str, str],
        level: StudyLevel,
    ) -> GradeResult:
        """Grade one attempt; one graded entry per question id."""


def strip_code_fences(text: str) -> str:
    """Remove a surrounding ```json ... ``` block if present."""
    return _FENCE_RE.sub("", text.strip()).strip()


def parse_json_payload(text: str) -> Any:
    """
    Decode a JSON response body.

    Raises:
        ProviderError: If the text is empty or not valid JSON
    """
    body = strip_code_fences(text or "")
    if not body:
        raise ProviderError("The service returned an empty response")
    try:
        return json.loads(body)
    except json.JSONDecodeError as e:
        raise ProviderError(f"The service returned invalid JSON: {e.msg}") from e


def check_unique_ids(questions: Sequence[Question]) -> None:
    """Reject a question set with repeated ids."""
    seen = set()
    for question in questions:
        if question.id in seen:
            raise ProviderError(f"Duplicate question id: {question.id!r}")
        seen.add(question.id)


def check_grade_completeness(
    questions: Sequence[Question], result: GradeResult
) -> None:
    """
    Enforce one graded entry per question id, no more, no less.

    Raises:
        ProviderError: If ids are missing, repeated or unknown
    """
    expected = [q.id for q in questions]
    graded = [g.question_id for g in result.graded_questions]

    duplicates = sorted({qid for qid in graded if graded.count(qid) > 1})
    missing = sorted(set(expected) - set(graded))
    unknown = sorted(set(graded) - set(expected))
    if duplicates or missing or unknown:
        raise ProviderError(
            "Grading result does not match the question set "
            f"(missing={missing}, unknown={unknown}, duplicated={duplicates})"
        )


def _unwrap_list(data: Any, key: str) -> Any:
    """Accept {"<key>": [...]} as well as a bare list."""
    if isinstance(data, dict) and isinstance(data.get(key), list):
        return data[key]
    return data


class LLMContentProvider(ContentProvider):
    """
    ContentProvider backed by an LLMClient.

    Args:
        client: Text and image capable LLM client
        config: StudyForge configuration (counts, language, temperatures)
    """

    def __init__(self, client: LLMClient, config: Optional[Config] = None) -> None:
        self.client = client
        self.config = config or Config()

    def generate_primary(
        self,
        kind: ArtifactKind,
        source_text: str,
        level: StudyLevel,
        test_type: Optional[TestType] = None,
    ) -> Any:
        if kind is ArtifactKind.TEST and test_type is None:
            raise ValueError("A test type is required to generate a test")

        study = self.config.study
        user_prompt = build_primary_prompt(
            kind,
            level,
            test_type=test_type or TestType.MULTIPLE_CHOICE,
            flashcard_count=study.flashcard_count,
            question_count=study.question_count,
            option_count=study.option_count,
        )
        text = self._call(kind.value, level, user_prompt, source_text)
        data = parse_json_payload(text)

        try:
            payload = self._validate(kind, data, level, test_type)
        except ValidationError as e:
            raise ProviderError(
                f"Malformed {kind.value} payload: {e.error_count()} validation error(s)"
            ) from e

        logger.debug("Parsed primary payload", kind=kind.value)
        return payload

    def _validate(
        self,
        kind: ArtifactKind,
        data: Any,
        level: StudyLevel,
        test_type: Optional[TestType],
    ) -> Any:
        if kind is ArtifactKind.SUMMARY:
            return StructuredSummary.model_validate(data)
        if kind is ArtifactKind.MINDMAP:
            return MindmapNode.model_validate(data)
        if kind is ArtifactKind.GLOSSARY:
            items = _GLOSSARY_ADAPTER.validate_python(_unwrap_list(data, "glossary"))
            return tuple(self._require_items(items, kind))
        if kind is ArtifactKind.FLASHCARDS:
            cards = _FLASHCARDS_ADAPTER.validate_python(_unwrap_list(data, "flashcards"))
            return tuple(self._require_items(cards, kind))

        raw = _unwrap_list(data, "questions")
        if not isinstance(raw, list):
            raise ProviderError("Expected a list of questions")
        # The service does not echo the type; every question is of the requested one
        tagged = [
            {**item, "type": test_type.value} if isinstance(item, dict) else item
            for item in raw
        ]
        questions = self._require_items(_QUESTIONS_ADAPTER.validate_python(tagged), kind)
        check_unique_ids(questions)
        return GeneratedTest(test_type=test_type, level=level, questions=questions)

    @staticmethod
    def _require_items(items: List[Any], kind: ArtifactKind) -> List[Any]:
        if not items:
            raise ProviderError(f"The service returned an empty {kind.value} list")
        return items

    def generate_illustration(self, prompt: str) -> Optional[str]:
        gen_config = get_generation_config(self.config, "summary")
        try:
            image = self.client.generate_image(build_illustration_prompt(prompt), gen_config)
        except LLMError as e:
            raise ProviderError(f"Illustration request failed: {e}") from e

        if image is None:
            return None
        encoded = base64.b64encode(image.data).decode("ascii")
        return f"data:{image.mime_type};base64,{encoded}"

    def grade_test(
        self,
        source_text: str,
        questions: Sequence[Question],
        answers: Dict[str, str],
        level: StudyLevel,
    ) -> GradeResult:
        user_prompt = build_grading_prompt(questions, answers, level)
        text = self._call("grading", level, user_prompt, source_text)
        data = parse_json_payload(text)

        try:
            result = GradeResult.model_validate(data)
        except ValidationError as e:
            raise ProviderError(
                f"Malformed grading payload: {e.error_count()} validation error(s)"
            ) from e

        check_grade_completeness(questions, result)
        return result

    def _call(
        self, command: str, level: StudyLevel, user_prompt: str, source_text: str
    ) -> str:
        gen_config = get_generation_config(self.config, command, json_mode=True)
        system_prompt = build_system_prompt(level, self.config.study.language)
        try:
            return self.client.generate_with_context(
                system_prompt, user_prompt, context=source_text, config=gen_config
            )
        except LLMError as e:
            raise ProviderError(f"{command} request failed: {e}") from e
