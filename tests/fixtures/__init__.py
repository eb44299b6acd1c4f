"""
Fixture modules for StudyForge tests.

Modules
-------
- providers: scripted ContentProvider and LLMClient doubles plus payload
  builders (summaries, tests, grade results)
"""

from tests.fixtures.providers import (
    FakeLLMClient,
    ScriptedProvider,
    make_grade,
    make_summary,
    make_test,
)

__all__ = [
    "FakeLLMClient",
    "ScriptedProvider",
    "make_grade",
    "make_summary",
    "make_test",
]
