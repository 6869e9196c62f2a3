"""Evaluator helper modules for the Avii runtime."""

__all__ = [
    "blocks",
    "chains",
    "common",
    "expr",
    "fn",
    "objects",
]
