"""
Study material configuration.

Controls the language of generated material, how many items each artifact
asks for, and how many illustration requests may run at once.
"""

from dataclasses import dataclass


@dataclass
class StudyConfig:
    """Study artifact generation settings."""

    language: str = "English"
    default_level: str = "YEAR_1"
    flashcard_count: int = 10
    question_count: int = 5
    option_count: int = 4

    # Upper bound on concurrent illustration requests per summary
    max_illustration_workers: int = 4

    def __post_init__(self) -> None:
        if self.flashcard_count < 1:
            raise ValueError("study.flashcard_count must be at least 1")
        if self.question_count < 1:
            raise ValueError("study.question_count must be at least 1")
        if self.option_count < 2:
            raise ValueError("study.option_count must be at least 2")
        if self.max_illustration_workers < 1:
            raise ValueError("study.max_illustration_workers must be at least 1")
