"""Core layer: configuration, logging, retry and the exception hierarchy.

Every other StudyForge package depends on this one; nothing here imports
from the feature packages (llm, ingest, study, cli).
"""
