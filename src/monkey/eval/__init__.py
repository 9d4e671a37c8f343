"""Evaluator helper modules for the Monkey runtime."""

__all__ = [
    "helpers",
    "expr",
    "calls",
    "containers",
]
