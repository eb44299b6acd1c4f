"""Study subcommands.

Turns one document into study material:
- summary: structured summary with section illustrations
- glossary: key terms and definitions
- flashcards: question/answer cards
- mindmap: themes and sub-themes as a tree
- test: interactive test with grading and retry
"""

from __future__ import annotations

import typer

from studyforge.cli.study import flashcards, glossary, mindmap, quiz, summary

app = typer.Typer(
    name="study",
    help="Generate study material from a document",
    add_completion=False,
)

app.command("summary")(summary.command)
app.command("glossary")(glossary.command)
app.command("flashcards")(flashcards.command)
app.command("mindmap")(mindmap.command)
app.command("test")(quiz.command)


@app.callback()
def main() -> None:
    """Generate study material from a single document.

    Every command reads the document, asks the generative service for one
    kind of study material at the chosen level, and prints it.

    Examples:
        studyforge study summary biology.pdf --level 3

        studyforge study glossary biology.pdf -o glossary.json

        studyforge study test biology.pdf --type open_questions

    For help on specific commands:
        studyforge study <command> --help
    """
