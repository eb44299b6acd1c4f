"""Command-line interface for StudyForge."""
