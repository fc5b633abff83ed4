"""
Setup script for quizlo-cli.

Quizlo is a terminal self-study quiz tool driven by an imported
question bank. It serves three roles:

1. Practice Loop - Untimed study with hints, retries and bookmarks
2. Error Review - A self-healing queue of questions answered wrong
3. Mock Exam - Timed, fixed-size exams with a 60% pass mark

The 'quizlo' command is the entry point.
"""

from setuptools import find_packages, setup

setup(
    name="quizlo-cli",
    version="1.0.0",
    description="Terminal quiz trainer with adaptive distractors and timed mock exams",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    author="Quizlo",
    packages=find_packages(exclude=("tests", "tests.*")),
    python_requires=">=3.10",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # State storage
        "sqlalchemy>=2.0.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "quizlo=quizlo.cli.app:run",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Education",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Education :: Computer Aided Instruction (CAI)",
    ],
    keywords="quiz exam-prep cli education multiple-choice",
)
