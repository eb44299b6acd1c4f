"""Console output helpers.

Provides consistent formatting for CLI output messages and renders
StudyForge errors with "Why it happened" and "How to fix" sections.
"""

from __future__ import annotations

import traceback
from typing import Any, Callable, List, Optional, TypeVar

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

T = TypeVar("T")

# Shared console instance
_console: Console | None = None

# Set by the --debug flag
_verbose_mode: bool = False


def get_console() -> Console:
    """Get shared console instance (lazy-loaded)."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_verbose_mode(enabled: bool) -> None:
    """Show full tracebacks under error panels when enabled."""
    global _verbose_mode
    _verbose_mode = enabled


def is_verbose_mode() -> bool:
    return _verbose_mode


def print_success(message: str) -> None:
    get_console().print(f"[green][OK][/green] {message}")


def print_warning(message: str) -> None:
    get_console().print(f"[yellow][WARN][/yellow] {message}")


def print_info(message: str) -> None:
    get_console().print(f"[blue][INFO][/blue] {message}")


def run_with_spinner(
    func: Callable[[], T],
    description: str,
    success_message: Optional[str] = None,
) -> T:
    """Run func while a status spinner is shown."""
    console = get_console()
    with console.status(description):
        result = func()
    if success_message:
        print_success(success_message)
    return result


class ErrorRenderer:
    """Renders exceptions as panels with "Why" and "How to fix" sections.

    Example
    -------
        try:
            orchestrator.generate(ArtifactKind.SUMMARY, level)
        except Exception as e:
            ErrorRenderer.render(e)
            raise SystemExit(1)
    """

    @staticmethod
    def render(
        exc: BaseException,
        context: str = "",
        show_traceback: Optional[bool] = None,
    ) -> None:
        """Render an exception as a helpful error panel.

        Args:
            exc: Exception to render
            context: Optional context line (e.g. "While generating the glossary")
            show_traceback: Override for verbose mode (None = global setting)
        """
        from studyforge.core.exceptions import get_root_cause

        info = ErrorRenderer._error_info(exc)

        root_cause = get_root_cause(exc)
        root_message = str(root_cause) if root_cause is not exc else None

        content = ErrorRenderer._build_error_content(
            message=str(exc) or type(exc).__name__,
            context=context,
            why=info["why_it_happened"],
            how_to_fix=info["how_to_fix"],
            root_message=root_message,
        )
        panel = Panel(
            content,
            title=f"[bold red]Error: {info['error_code']}[/bold red]",
            border_style="red",
            padding=(1, 2),
        )
        get_console().print(panel)

        should_show_traceback = (
            show_traceback if show_traceback is not None else is_verbose_mode()
        )
        if should_show_traceback:
            ErrorRenderer._render_traceback(exc)

    @staticmethod
    def _error_info(exc: BaseException) -> dict[str, Any]:
        """Error code and help text from a StudyForgeError, or generic text."""
        from studyforge.core.exceptions import StudyForgeError

        if isinstance(exc, StudyForgeError):
            return {
                "error_code": exc.error_code,
                "why_it_happened": exc.why_it_happened,
                "how_to_fix": list(exc.how_to_fix),
            }
        if isinstance(exc, FileNotFoundError):
            return {
                "error_code": "SF-FILE-001",
                "why_it_happened": "A file given on the command line does not exist",
                "how_to_fix": ["Check the path and try again"],
            }
        if isinstance(exc, ValueError):
            return {
                "error_code": "SF-VAL-001",
                "why_it_happened": "An option or configuration value is invalid",
                "how_to_fix": ["Check the command options and studyforge.yaml"],
            }
        return {
            "error_code": "SF-ERR-999",
            "why_it_happened": "An unexpected error occurred",
            "how_to_fix": ["Run again with --debug for details"],
        }

    @staticmethod
    def _build_error_content(
        message: str,
        context: str,
        why: str,
        how_to_fix: List[str],
        root_message: Optional[str],
    ) -> Text:
        text = Text()

        if context:
            text.append(f"{context}\n\n", style="dim")

        text.append(message, style="bold red")
        text.append("\n\n")

        if root_message and root_message != message:
            text.append("Root cause: ", style="bold yellow")
            text.append(root_message, style="yellow")
            text.append("\n\n")

        text.append("Why it happened:\n", style="bold cyan")
        text.append(f"  {why}\n\n", style="cyan")

        text.append("How to fix:\n", style="bold green")
        for fix in how_to_fix:
            text.append(f"  - {fix}\n", style="green")

        return text

    @staticmethod
    def _render_traceback(exc: BaseException) -> None:
        console = get_console()
        console.print()
        console.print("[dim]--- Traceback (--debug mode) ---[/dim]")
        tb_text = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        # markup=False: tracebacks may contain [brackets]
        console.print(tb_text, style="dim", markup=False)
