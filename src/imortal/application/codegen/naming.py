"""Identifier helpers for generated code."""

from __future__ import annotations

import keyword
import re

_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")
_NON_WORD = re.compile(r"[^0-9a-zA-Z]+")


def _words(name: str) -> list[str]:
    spaced = _BOUNDARY.sub(" ", name)
    return [w for w in _NON_WORD.split(spaced) if w]


def to_snake_case(name: str) -> str:
    """``"TodoItem"`` / ``"todo item"`` / ``"HTTPServer"`` → ``todo_item`` / ``http_server``."""
    snake = "_".join(w.lower() for w in _words(name)) or "unnamed"
    if snake[0].isdigit():
        snake = f"_{snake}"
    if keyword.iskeyword(snake):
        snake = f"{snake}_"
    return snake


def to_pascal_case(name: str) -> str:
    pascal = "".join(w[:1].upper() + w[1:] for w in _words(name)) or "Unnamed"
    if pascal[0].isdigit():
        pascal = f"_{pascal}"
    return pascal


def pluralize(word: str) -> str:
    if re.search(r"[^aeiou]y$", word):
        return word[:-1] + "ies"
    if re.search(r"(s|x|z|ch|sh)$", word):
        return word + "es"
    return word + "s"


def to_table_name(name: str) -> str:
    """Snake-case plural: ``"Category"`` → ``categories``."""
    return pluralize(to_snake_case(name))
