"""quizrank - broker quiz scoring and ranking engine."""

__version__ = "1.0.0"
