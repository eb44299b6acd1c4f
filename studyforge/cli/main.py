"""StudyForge CLI - Main application entry point.

Registers the command groups and wires up version output.
"""

from __future__ import annotations

import typer

from studyforge.cli.study import study_app

app = typer.Typer(
    name="studyforge",
    help="Study material generation from a single document",
    add_completion=True,
    pretty_exceptions_enable=False,
)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", "-v", help="Show version and exit"
    ),
) -> None:
    """StudyForge - Study material generation from a single document."""
    if version:
        from studyforge import __version__

        typer.echo(f"StudyForge {__version__}")
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


app.add_typer(study_app, name="study", rich_help_panel="Study")


def cli_main() -> None:
    """Console script entry point."""
    app()


if __name__ == "__main__":
    cli_main()
