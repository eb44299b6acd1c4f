"""StudyForge - Study material generation from a single source document.

Turns one document into a structured summary with illustrations, a
glossary, flashcards, a mindmap and a gradable test.
"""

__version__ = "0.4.0"
__all__ = ["__version__"]
