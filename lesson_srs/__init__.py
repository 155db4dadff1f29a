"""Spaced-repetition scheduling engine for lesson quizzes."""

__version__ = "0.1.0"
