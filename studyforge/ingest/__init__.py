"""Document loading: turns a source file into plain text."""

from studyforge.ingest.text_extractor import (
    SUPPORTED_SUFFIXES,
    TextExtractor,
    clean_text,
)

__all__ = ["SUPPORTED_SUFFIXES", "TextExtractor", "clean_text"]
