"""
Command line interface for quizlo (Typer + Rich).
"""

from quizlo.cli.app import app, run

__all__ = ["app", "run"]
