"""
Quizlo - terminal quiz trainer.

Adaptive quiz session engine: distractor synthesis, filtered views over a
question bank, and the practice and timed-exam state machines.
"""

__version__ = "1.0.0"
