"""Study command group."""

from studyforge.cli.study.main import app as study_app

__all__ = ["study_app"]
