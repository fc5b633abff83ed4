"""Allow `python -m quizlo.cli`."""

from quizlo.cli.app import run

if __name__ == "__main__":
    run()
