"""
Centralized Exception Hierarchy for StudyForge.

All custom exceptions inherit from StudyForgeError for easy catching. Each
exception carries:
- user_message: Human-readable description of what went wrong
- why_it_happened: Explanation of the root cause
- how_to_fix: Actionable steps to resolve the issue
- error_code: Unique identifier (e.g., "SF-GEN-001")

Exception Hierarchy
-------------------
    StudyForgeError (base)
    ├── NoDocumentError                 # generation requested without text
    ├── ExtractionError                 # document could not be read
    ├── ProviderError                   # malformed/failed provider response
    ├── GenerationFailedError           # primary generation failed
    ├── GradingFailedError              # grading failed, attempt kept
    ├── IllustrationError               # per-section, never fatal
    └── TestSessionError
        ├── InvalidTransitionError      # action not allowed in this state
        ├── ConcurrentSubmitRejectedError
        └── UnknownQuestionError

Propagation
-----------
NoDocumentError, GenerationFailedError and GradingFailedError reach the
caller of the request that failed; there is no automatic retry at this
level. IllustrationError is absorbed into the section's illustration state
and logged.
"""

import re
from typing import List, Optional

_SECRET_PATTERNS = [
    (r"(api_key[=:][\s]*)[a-zA-Z0-9_-]{20,}", r"\1<api-key>"),
    (r"(GEMINI_API_KEY|GOOGLE_API_KEY|API_KEY)[=:]\s*[^\s]+", r"\1=<hidden>"),
    (r"AIza[0-9A-Za-z_-]{20,}", "<api-key>"),
    (r"[?&]key=[^&\s]+", "?key=<hidden>"),
]


def sanitize_message(message: str) -> str:
    """Mask API keys that provider SDKs sometimes echo in error text.

    Args:
        message: Original error message

    Returns:
        Message with key material replaced
    """
    if not message:
        return message

    result = message
    for pattern, replacement in _SECRET_PATTERNS:
        result = re.sub(pattern, replacement, result)
    return result


def get_root_cause(exc: BaseException) -> BaseException:
    """Follow __cause__/__context__ to the exception that started the chain."""
    seen = set()
    current = exc

    while current is not None:
        if id(current) in seen:
            break
        seen.add(id(current))

        if current.__cause__ is not None:
            current = current.__cause__
        elif current.__context__ is not None:
            current = current.__context__
        else:
            break

    return current


class StudyForgeError(Exception):
    """
    Base exception for all StudyForge errors.

    Example
    -------
        try:
            orchestrator.generate(ArtifactKind.GLOSSARY, StudyLevel.YEAR_3)
        except StudyForgeError as e:
            console.print(e.user_message)
            for fix in e.how_to_fix:
                console.print(f"  - {fix}")
    """

    error_code: str = "SF-ERR-000"
    why_it_happened: str = "An unexpected error occurred"
    how_to_fix: List[str] = ["Check the error message for details"]

    def __init__(
        self,
        message: str,
        *,
        error_code: Optional[str] = None,
        why_it_happened: Optional[str] = None,
        how_to_fix: Optional[List[str]] = None,
    ) -> None:
        super().__init__(sanitize_message(message))

        if error_code is not None:
            self.error_code = error_code
        if why_it_happened is not None:
            self.why_it_happened = why_it_happened
        if how_to_fix is not None:
            self.how_to_fix = how_to_fix

    @property
    def user_message(self) -> str:
        """Get the user-friendly error message."""
        return str(self)

    def get_root_cause(self) -> BaseException:
        """Get the root cause of this exception chain."""
        return get_root_cause(self)


class NoDocumentError(StudyForgeError):
    """Raised when generation is requested while no source text is loaded.

    Empty or whitespace-only extracted text counts as "no document".
    """

    error_code = "SF-DOC-001"
    why_it_happened = "There is no source text to generate study material from"
    how_to_fix = [
        "Load a document first",
        "Check that the document contains selectable text (not only images)",
    ]


class ExtractionError(StudyForgeError):
    """Raised when a document cannot be turned into plain text."""

    error_code = "SF-DOC-002"
    why_it_happened = "The document format is unsupported or the file is corrupt"
    how_to_fix = [
        "Use a .pdf, .docx, .txt or .md file",
        "Re-export the document and try again",
    ]


class ProviderError(StudyForgeError):
    """Raised when the content provider fails or returns an unusable payload.

    Any response that cannot be parsed into the full typed payload is a
    ProviderError; partially valid payloads are never passed through.
    """

    error_code = "SF-GEN-000"
    why_it_happened = "The generative service failed or returned malformed data"
    how_to_fix = [
        "Try the request again",
        "Check your API key and network connection",
    ]


class GenerationFailedError(StudyForgeError):
    """Raised when the primary generation call for an artifact fails.

    The store slot for that artifact kind is left untouched.
    """

    error_code = "SF-GEN-001"
    why_it_happened = "The study material could not be generated"
    how_to_fix = [
        "Try generating again",
        "Shorten very long documents",
    ]

    def __init__(self, message: str, *, kind: Optional[str] = None, **kwargs) -> None:
        super().__init__(message, **kwargs)
        self.kind = kind


class GradingFailedError(StudyForgeError):
    """Raised when grading fails; the answers stay editable."""

    error_code = "SF-GEN-002"
    why_it_happened = "The test could not be graded"
    how_to_fix = ["Your answers were kept; submit the test again"]


class IllustrationError(StudyForgeError):
    """Raised for a single failed section illustration (never fatal)."""

    error_code = "SF-GEN-003"
    why_it_happened = "The image service could not illustrate this section"
    how_to_fix = ["Regenerate the summary to try the illustrations again"]

    def __init__(self, message: str, *, index: int = -1, **kwargs) -> None:
        super().__init__(message, **kwargs)
        self.index = index


class TestSessionError(StudyForgeError):
    """Base exception for test session state errors."""

    error_code = "SF-TEST-000"
    why_it_happened = "The test is not in a state that allows this action"
    how_to_fix = ["Generate a new test"]


class InvalidTransitionError(TestSessionError):
    """Raised when an action is not allowed in the current test state."""

    error_code = "SF-TEST-001"

    def __init__(self, action: str, state: str) -> None:
        super().__init__(f"Cannot {action} while the test is {state}")
        self.action = action
        self.state = state


class ConcurrentSubmitRejectedError(TestSessionError):
    """Raised when submit() is called while a grading call is in flight."""

    error_code = "SF-TEST-002"
    why_it_happened = "The test is already being graded"
    how_to_fix = ["Wait for the current grading to finish"]


class UnknownQuestionError(TestSessionError):
    """Raised when an answer is recorded for a question id not in the test."""

    error_code = "SF-TEST-003"
    why_it_happened = "The question id does not belong to the current test"
    how_to_fix = ["Answer one of the questions of the current test"]

    def __init__(self, question_id: str) -> None:
        super().__init__(f"Unknown question id: {question_id!r}")
        self.question_id = question_id
