"""Test command - Interactive test with grading and retry.

Generates a test, asks every question on the terminal, submits the answers
for grading and shows the result. A failed grading call keeps the answers
and offers to submit again; after grading the same questions can be
retried.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

import typer
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from studyforge.cli.console import ErrorRenderer, print_info, run_with_spinner
from studyforge.cli.study.base import StudyCommand
from studyforge.core.exceptions import GradingFailedError
from studyforge.study.artifacts import Artifact, TestArtifact
from studyforge.study.models import (
    ArtifactKind,
    GradeResult,
    Question,
    StudyLevel,
    TestType,
)
from studyforge.study.orchestrator import GenerationOrchestrator
from studyforge.study.test_session import TestSessionController


def resolve_choice(question: Question, answer: str) -> str:
    """Map an option number to the option text for multiple choice."""
    answer = answer.strip()
    if question.is_multiple_choice and answer.isdigit():
        number = int(answer)
        if 1 <= number <= len(question.options):
            return question.options[number - 1]
    return answer


class QuizCommand(StudyCommand):
    """Generate, take and grade a test."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.session: Optional[TestSessionController] = None

    def run(
        self,
        orchestrator: GenerationOrchestrator,
        level: StudyLevel,
        test_type: TestType = TestType.MULTIPLE_CHOICE,
        **options: Any,
    ) -> Artifact:
        artifact = run_with_spinner(
            lambda: orchestrator.generate(ArtifactKind.TEST, level, test_type),
            "Writing test questions...",
            "Test generated",
        )
        assert isinstance(artifact, TestArtifact)
        self.session = orchestrator.test_session

        while True:
            self.collect_answers(self.session)
            result = self.submit(self.session)
            if result is None:
                break
            self.render_result(self.session, result)
            if not typer.confirm("Try again with the same questions?", default=False):
                break
            self.session.retry()

        return artifact

    def collect_answers(self, session: TestSessionController) -> None:
        """Ask every question once; an empty answer leaves it unanswered."""
        questions = session.questions
        self.console.print()
        for number, question in enumerate(questions, 1):
            self.console.print(f"[bold]Q{number}.[/bold] {escape(question.question)}")
            if question.is_multiple_choice:
                for index, option in enumerate(question.options, 1):
                    self.console.print(f"    {index}) {escape(option)}")
                prompt = "Your answer (option number)"
            else:
                prompt = "Your answer"

            answer = typer.prompt(prompt, default="", show_default=False)
            session.record_answer(question.id, resolve_choice(question, answer))

        print_info(f"Answered {session.answered_count} of {len(questions)} questions")

    def submit(self, session: TestSessionController) -> Optional[GradeResult]:
        """Submit until grading succeeds or the user gives up."""
        while True:
            try:
                return run_with_spinner(session.submit, "Grading your answers...")
            except GradingFailedError as e:
                ErrorRenderer.render(e)
                if not typer.confirm("Submit again?", default=True):
                    return None

    def render_result(self, session: TestSessionController, result: GradeResult) -> None:
        graded = result.by_question()

        table = Table(title="Results", show_lines=True)
        table.add_column("#", style="dim", width=4)
        table.add_column("Question")
        table.add_column("Your answer")
        table.add_column("Correct answer", style="green")
        table.add_column("", width=3)
        table.add_column("Feedback", style="dim")

        for number, question in enumerate(session.questions, 1):
            entry = graded[question.id]
            mark = "[green]✓[/green]" if entry.is_correct else "[red]✗[/red]"
            table.add_row(
                str(number),
                escape(question.question),
                escape(entry.user_answer) or "[dim](no answer)[/dim]",
                escape(entry.correct_answer),
                mark,
                escape(entry.feedback),
            )

        self.console.print()
        self.console.print(table)
        self.console.print(
            Panel(
                escape(result.feedback),
                title=(
                    f"[bold]Score: {result.score:g} / {result.max_score:g} "
                    f"({result.percentage:.0f}%)[/bold]"
                ),
                border_style="cyan",
            )
        )

    def render(self, artifact: Artifact) -> None:
        assert isinstance(artifact, TestArtifact)
        if self.session is None or self.session.result is None:
            print_info("Test not graded")

    def export(
        self, orchestrator: GenerationOrchestrator, artifact: Artifact
    ) -> Dict[str, Any]:
        data = super().export(orchestrator, artifact)
        session = orchestrator.test_session
        data["answers"] = session.answers
        result = session.result
        data["result"] = result.model_dump(by_alias=True) if result else None
        return data


def command(
    document: Path = typer.Argument(..., help="Document to read (.pdf, .docx, .txt, .md)"),
    test_type: TestType = typer.Option(
        TestType.MULTIPLE_CHOICE,
        "--type",
        "-t",
        help="Question style",
        case_sensitive=False,
    ),
    level: Optional[str] = typer.Option(
        None, "--level", "-l", help="Study level YEAR_1..YEAR_6 (or 1-6)"
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Save questions, answers and grade as JSON"
    ),
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Config file (default: ./studyforge.yaml)"
    ),
    debug: bool = typer.Option(False, "--debug", help="Show debug logs and tracebacks"),
) -> None:
    """Take a generated test and get it graded.

    Examples:
        studyforge study test biology.pdf --level 3

        studyforge study test biology.pdf --type open_questions -o attempt.json
    """
    cmd = QuizCommand()
    exit_code = cmd.execute(document, level, output, config, debug, test_type=test_type)
    if exit_code != 0:
        raise typer.Exit(code=exit_code)
