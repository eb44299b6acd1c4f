"""Prompt templates for the study material generator."""

import json
from typing import Dict, Iterable

from studyforge.study.models import ArtifactKind, Question, StudyLevel, TestType

SYSTEM_INSTRUCTION = """You are an educational assistant for secondary school students.
MOST IMPORTANT RULE: use EXCLUSIVELY the source text provided to generate study material. Do not invent information that is not in the text.
Always answer in {language}. Adapt vocabulary and complexity to the given level ({level})."""

JSON_RULE = "Return ONLY valid JSON, without markdown fences or commentary."

SUMMARY_PROMPT = """Write a well-organised, structured summary of the source text for a student in the {level}.
Split the summary into logical sections with titles. Give each section a list of key points.
For each section also write a description of an educational illustration that clarifies the topic visually.

JSON shape:
{{"title": str, "introduction": str, "sections": [{{"title": str, "content": str, "keyPoints": [str], "imagePrompt": str}}], "conclusion": str}}"""

GLOSSARY_PROMPT = """Make a glossary of the most important terms in the source text for the {level}.
Give each term a clear definition based on the context of the text.

JSON shape:
[{{"term": str, "definition": str}}]"""

FLASHCARDS_PROMPT = """Generate {count} effective flashcards based on the source text for the {level}.
Each card has a relevant question or term on the front and an answer or explanation on the back, based on the text.

JSON shape:
[{{"front": str, "back": str}}]"""

MINDMAP_PROMPT = """Generate a hierarchical structure for a mindmap of the source text for the {level}.
The structure shows the main themes and sub-themes of the text.

JSON shape (nested, leaves omit "children"):
{{"name": str, "children": [{{"name": str, "children": [...]}}]}}"""

MULTIPLE_CHOICE_PROMPT = """Generate a multiple-choice test with {count} questions about the source text for the {level}.
Use only facts from the text. Give every question {options} options; correctAnswer is the exact text of the right option.
Give every question a unique id.

JSON shape:
[{{"id": str, "question": str, "options": [str], "correctAnswer": str}}]"""

OPEN_QUESTIONS_PROMPT = """Generate a test with {count} open questions about the source text for the {level}.
The questions should check understanding of the text. Give every question a unique id.

JSON shape:
[{{"id": str, "question": str, "correctAnswer": str}}]"""

GRADING_PROMPT = """Grade the following test for a student in the {level}, based on the source text.

QUESTIONS AND CORRECT ANSWERS:
{questions}

STUDENT ANSWERS (a missing id means the question was not answered):
{answers}

Give a score out of {max_score}, overall feedback and detailed feedback per question.
Include exactly one entry per question id. When an answer is wrong, explain the right answer based on the text.

JSON shape:
{{"score": number, "maxScore": number, "feedback": str, "gradedQuestions": [{{"questionId": str, "userAnswer": str, "isCorrect": bool, "correctAnswer": str, "feedback": str}}]}}"""

ILLUSTRATION_PROMPT = (
    "A clean, professional educational illustration or diagram for a school "
    "textbook about: {prompt}. Minimalist style, clear labels if necessary, "
    "bright and engaging colors, no text if possible, white background."
)


def build_system_prompt(level: StudyLevel, language: str) -> str:
    return SYSTEM_INSTRUCTION.format(language=language, level=level.label) + "\n" + JSON_RULE


def build_primary_prompt(
    kind: ArtifactKind,
    level: StudyLevel,
    *,
    test_type: TestType = TestType.MULTIPLE_CHOICE,
    flashcard_count: int = 10,
    question_count: int = 5,
    option_count: int = 4,
) -> str:
    """Request text for one primary artifact."""
    if kind is ArtifactKind.SUMMARY:
        return SUMMARY_PROMPT.format(level=level.label)
    if kind is ArtifactKind.GLOSSARY:
        return GLOSSARY_PROMPT.format(level=level.label)
    if kind is ArtifactKind.FLASHCARDS:
        return FLASHCARDS_PROMPT.format(level=level.label, count=flashcard_count)
    if kind is ArtifactKind.MINDMAP:
        return MINDMAP_PROMPT.format(level=level.label)
    if test_type is TestType.MULTIPLE_CHOICE:
        return MULTIPLE_CHOICE_PROMPT.format(
            level=level.label, count=question_count, options=option_count
        )
    return OPEN_QUESTIONS_PROMPT.format(level=level.label, count=question_count)


def build_grading_prompt(
    questions: Iterable[Question],
    answers: Dict[str, str],
    level: StudyLevel,
) -> str:
    questions = list(questions)
    question_data = [q.model_dump(by_alias=True, mode="json") for q in questions]
    return GRADING_PROMPT.format(
        level=level.label,
        questions=json.dumps(question_data, ensure_ascii=False, indent=2),
        answers=json.dumps(answers, ensure_ascii=False, indent=2),
        max_score=len(questions),
    )


def build_illustration_prompt(prompt: str) -> str:
    return ILLUSTRATION_PROMPT.format(prompt=prompt.strip())
