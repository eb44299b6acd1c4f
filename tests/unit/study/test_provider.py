"""
Tests for LLMContentProvider.

FakeLLMClient returns queued JSON bodies, so these tests cover the
parsing and validation path without touching the network.

Organization
------------
- TestPrimaryPayloads: one test per artifact kind
- TestMalformedResponses: fences, invalid JSON, schema violations
- TestIllustration: data URL encoding and the "no image" outcome
- TestGrading: prompt contents and completeness checks
"""

import json

import pytest

from studyforge.core.config import Config
from studyforge.core.exceptions import ProviderError
from studyforge.llm.base import GeneratedImage, LLMError, RateLimitError
from studyforge.study.artifacts import GeneratedTest
from studyforge.study.models import (
    ArtifactKind,
    Flashcard,
    GlossaryItem,
    MindmapNode,
    StructuredSummary,
    StudyLevel,
    TestType,
)
from studyforge.study.provider import (
    LLMContentProvider,
    check_grade_completeness,
    parse_json_payload,
    strip_code_fences,
)
from tests.fixtures.providers import FakeLLMClient, make_grade, make_test

SOURCE = "Photosynthesis converts light into energy."

SUMMARY_JSON = json.dumps(
    {
        "title": "Photosynthesis",
        "introduction": "Intro",
        "sections": [
            {"title": "Light", "content": "Light is absorbed.",
             "keyPoints": ["chlorophyll"], "imagePrompt": "a green leaf"},
            {"title": "Sugar", "content": "Glucose is made.",
             "keyPoints": [], "imagePrompt": "a sugar molecule"},
        ],
        "conclusion": "Plants feed themselves.",
    }
)

QUESTIONS_JSON = json.dumps(
    [
        {"id": "q1", "question": "What is absorbed?",
         "options": ["Light", "Sound", "Heat", "Salt"], "correctAnswer": "Light"},
        {"id": 2, "question": "What is made?",
         "options": ["Glucose", "Iron"], "correctAnswer": "Glucose"},
    ]
)


def make_provider(*responses, image=None, config=None):
    client = FakeLLMClient(list(responses), image=image)
    return LLMContentProvider(client, config), client


# ============================================================================
# Primary payloads
# ============================================================================


class TestPrimaryPayloads:
    """Each kind is parsed into its typed payload."""

    def test_summary(self):
        provider, client = make_provider(SUMMARY_JSON)

        summary = provider.generate_primary(ArtifactKind.SUMMARY, SOURCE, StudyLevel.YEAR_2)

        assert isinstance(summary, StructuredSummary)
        assert [s.image_prompt for s in summary.sections] == ["a green leaf", "a sugar molecule"]
        call = client.calls[0]
        assert call["context"] == SOURCE
        assert "2nd year of secondary school" in call["system"]
        assert "EXCLUSIVELY" in call["system"]
        assert call["config"].json_mode is True

    def test_glossary(self):
        provider, _ = make_provider(json.dumps([{"term": "ATP", "definition": "Energy carrier"}]))

        items = provider.generate_primary(ArtifactKind.GLOSSARY, SOURCE, StudyLevel.YEAR_1)

        assert items == (GlossaryItem(term="ATP", definition="Energy carrier"),)

    def test_glossary_wrapped_in_object(self):
        body = json.dumps({"glossary": [{"term": "ATP", "definition": "Energy"}]})
        provider, _ = make_provider(body)

        items = provider.generate_primary(ArtifactKind.GLOSSARY, SOURCE, StudyLevel.YEAR_1)

        assert len(items) == 1

    def test_flashcards_use_configured_count(self):
        config = Config()
        config.study.flashcard_count = 7
        provider, client = make_provider(
            json.dumps([{"front": "Q", "back": "A"}]), config=config
        )

        cards = provider.generate_primary(ArtifactKind.FLASHCARDS, SOURCE, StudyLevel.YEAR_1)

        assert cards == (Flashcard(front="Q", back="A"),)
        assert "Generate 7 effective flashcards" in client.calls[0]["user"]

    def test_mindmap(self):
        body = json.dumps(
            {"name": "Photosynthesis", "children": [{"name": "Light"}, {"name": "Sugar", "children": []}]}
        )
        provider, _ = make_provider(body)

        root = provider.generate_primary(ArtifactKind.MINDMAP, SOURCE, StudyLevel.YEAR_1)

        assert isinstance(root, MindmapNode)
        assert root.size == 3

    def test_multiple_choice_test(self):
        provider, client = make_provider(QUESTIONS_JSON)

        test = provider.generate_primary(
            ArtifactKind.TEST, SOURCE, StudyLevel.YEAR_5, TestType.MULTIPLE_CHOICE
        )

        assert isinstance(test, GeneratedTest)
        assert test.level is StudyLevel.YEAR_5
        assert test.question_ids == ["q1", "2"]
        assert all(q.type is TestType.MULTIPLE_CHOICE for q in test.questions)
        assert "multiple-choice" in client.calls[0]["user"]

    def test_open_questions_test(self):
        body = json.dumps([{"id": "a", "question": "Explain.", "correctAnswer": "Because"}])
        provider, client = make_provider(body)

        test = provider.generate_primary(
            ArtifactKind.TEST, SOURCE, StudyLevel.YEAR_1, TestType.OPEN_QUESTIONS
        )

        assert test.questions[0].type is TestType.OPEN_QUESTIONS
        assert test.questions[0].options == []
        assert "open questions" in client.calls[0]["user"]

    def test_test_requires_type(self):
        provider, client = make_provider()
        with pytest.raises(ValueError):
            provider.generate_primary(ArtifactKind.TEST, SOURCE, StudyLevel.YEAR_1)
        assert client.calls == []

    def test_language_in_system_prompt(self):
        config = Config()
        config.study.language = "Dutch"
        provider, client = make_provider(json.dumps([{"term": "a", "definition": "b"}]), config=config)

        provider.generate_primary(ArtifactKind.GLOSSARY, SOURCE, StudyLevel.YEAR_1)

        assert "Always answer in Dutch" in client.calls[0]["system"]


# ============================================================================
# Malformed responses
# ============================================================================


class TestMalformedResponses:
    """Anything that is not a complete valid payload is a ProviderError."""

    def test_fenced_json_accepted(self):
        body = "```json\n" + json.dumps([{"front": "Q", "back": "A"}]) + "\n```"
        provider, _ = make_provider(body)

        cards = provider.generate_primary(ArtifactKind.FLASHCARDS, SOURCE, StudyLevel.YEAR_1)

        assert len(cards) == 1

    @pytest.mark.parametrize("body", ["", "   ", "not json", "{\"title\": "])
    def test_invalid_json(self, body):
        provider, _ = make_provider(body)
        with pytest.raises(ProviderError):
            provider.generate_primary(ArtifactKind.SUMMARY, SOURCE, StudyLevel.YEAR_1)

    def test_schema_violation(self):
        provider, _ = make_provider(json.dumps({"title": "only a title"}))
        with pytest.raises(ProviderError) as exc_info:
            provider.generate_primary(ArtifactKind.SUMMARY, SOURCE, StudyLevel.YEAR_1)
        assert "Malformed summary payload" in str(exc_info.value)

    def test_empty_list_rejected(self):
        provider, _ = make_provider("[]")
        with pytest.raises(ProviderError):
            provider.generate_primary(ArtifactKind.GLOSSARY, SOURCE, StudyLevel.YEAR_1)

    def test_duplicate_question_ids_rejected(self):
        body = json.dumps(
            [
                {"id": "q1", "question": "A?", "correctAnswer": "a"},
                {"id": "q1", "question": "B?", "correctAnswer": "b"},
            ]
        )
        provider, _ = make_provider(body)
        with pytest.raises(ProviderError) as exc_info:
            provider.generate_primary(
                ArtifactKind.TEST, SOURCE, StudyLevel.YEAR_1, TestType.OPEN_QUESTIONS
            )
        assert "Duplicate question id" in str(exc_info.value)

    def test_multiple_choice_without_options_rejected(self):
        body = json.dumps([{"id": "q1", "question": "A?", "correctAnswer": "a"}])
        provider, _ = make_provider(body)
        with pytest.raises(ProviderError):
            provider.generate_primary(
                ArtifactKind.TEST, SOURCE, StudyLevel.YEAR_1, TestType.MULTIPLE_CHOICE
            )

    def test_questions_not_a_list(self):
        provider, _ = make_provider(json.dumps({"questions": "none"}))
        with pytest.raises(ProviderError):
            provider.generate_primary(
                ArtifactKind.TEST, SOURCE, StudyLevel.YEAR_1, TestType.OPEN_QUESTIONS
            )

    def test_transport_error_wrapped(self):
        provider, _ = make_provider(RateLimitError("quota exceeded"))
        with pytest.raises(ProviderError) as exc_info:
            provider.generate_primary(ArtifactKind.MINDMAP, SOURCE, StudyLevel.YEAR_1)
        assert isinstance(exc_info.value.__cause__, LLMError)

    def test_strip_code_fences(self):
        assert strip_code_fences("```json\n[1]\n```") == "[1]"
        assert strip_code_fences("```\n{}\n```") == "{}"
        assert strip_code_fences("  [2]  ") == "[2]"

    def test_parse_json_payload(self):
        assert parse_json_payload('{"a": 1}') == {"a": 1}
        with pytest.raises(ProviderError):
            parse_json_payload(None)


# ============================================================================
# Illustration
# ============================================================================


class TestIllustration:
    """Tests for generate_illustration()."""

    def test_image_becomes_data_url(self):
        image = GeneratedImage(mime_type="image/png", data=b"\x89PNG")
        provider, client = make_provider(image=image)

        url = provider.generate_illustration("a green leaf")

        assert url == "data:image/png;base64,iVBORw=="
        assert "a green leaf" in client.image_prompts[0]
        assert "educational illustration" in client.image_prompts[0]

    def test_no_image_is_none(self):
        provider, _ = make_provider(image=None)
        assert provider.generate_illustration("anything") is None

    def test_client_error_raises_provider_error(self):
        provider, client = make_provider()

        def refuse(prompt, config=None):
            raise LLMError("no images here")

        client.generate_image = refuse
        with pytest.raises(ProviderError):
            provider.generate_illustration("x")


# ============================================================================
# Grading
# ============================================================================


class TestGrading:
    """Tests for grade_test()."""

    def test_grading_request(self):
        test = make_test(3)
        answers = {"q1": "Option 1A"}
        grade = make_grade(test.questions, answers)
        provider, client = make_provider(grade.model_dump_json(by_alias=True))

        result = provider.grade_test(SOURCE, test.questions, answers, StudyLevel.YEAR_6)

        assert result == grade
        call = client.calls[0]
        assert call["context"] == SOURCE
        assert '"q1": "Option 1A"' in call["user"]
        assert "q2" in call["user"]
        assert "6th year of secondary school" in call["user"]
        assert "score out of 3" in call["user"]

    def test_incomplete_grading_rejected(self):
        test = make_test(3)
        grade = make_grade(test.questions[:2], {})
        provider, _ = make_provider(grade.model_dump_json(by_alias=True))

        with pytest.raises(ProviderError) as exc_info:
            provider.grade_test(SOURCE, test.questions, {}, StudyLevel.YEAR_1)
        assert "q3" in str(exc_info.value)

    def test_malformed_grade_rejected(self):
        body = json.dumps({"score": 5, "maxScore": 2, "feedback": "", "gradedQuestions": []})
        provider, _ = make_provider(body)
        with pytest.raises(ProviderError):
            provider.grade_test(SOURCE, make_test(1).questions, {}, StudyLevel.YEAR_1)

    def test_completeness_unknown_id(self):
        test = make_test(1)
        grade = make_grade(make_test(2).questions, {})
        with pytest.raises(ProviderError) as exc_info:
            check_grade_completeness(test.questions, grade)
        assert "unknown=['q2']" in str(exc_info.value)

    def test_padded_grade_ids_match_questions(self):
        test = make_test(2)
        body = json.dumps({
            "score": 1, "maxScore": 2, "feedback": "",
            "gradedQuestions": [
                {"questionId": f" {q.id} ", "userAnswer": "", "isCorrect": False,
                 "correctAnswer": q.correct_answer, "feedback": ""}
                for q in test.questions
            ],
        })
        provider, _ = make_provider(body)

        result = provider.grade_test(SOURCE, test.questions, {}, StudyLevel.YEAR_1)

        check_grade_completeness(test.questions, result)
        assert result.for_question("q1").question_id == "q1"
