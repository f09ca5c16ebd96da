"""Define utility functions for reducing and splitting parenthesized PDDL text.

Definitions:

    form - A balanced, parenthesized run of text, e.g. `(robot_at ?0 ?1)`.

    body - The text of a form with its outer parentheses removed, e.g. `robot_at ?0 ?1`.

    reduced - Text with newlines and tabs removed and no spaces directly inside any parenthesis.
"""

from __future__ import annotations

import re

from task_knowledge.pddl.errors import MalformedExpression

_NEWLINES_AND_TABS = re.compile(r"[\n\t]")
_SPACE_AFTER_OPEN = re.compile(r"\( +")
_SPACE_BEFORE_CLOSE = re.compile(r" +\)")
_COMMENT = re.compile(r";[^\n]*")


def normalize(text: str) -> str:
    """Reduce PDDL text by removing newlines, tabs, and spaces directly inside parentheses.

    Spacing between tokens is left untouched, so `normalize(normalize(s)) == normalize(s)`.

    :param text: PDDL text to be reduced
    :return: Reduced text, e.g. `"( and\\n)"` becomes `"(and)"`
    """
    reduced = _NEWLINES_AND_TABS.sub("", text)
    reduced = _SPACE_AFTER_OPEN.sub("(", reduced)
    return _SPACE_BEFORE_CLOSE.sub(")", reduced)


def strip_comments(text: str) -> str:
    """Remove PDDL comments, which last from a semicolon to the end of the line."""
    return _COMMENT.sub("", text)


def collapse_whitespace(text: str) -> str:
    """Replace every run of whitespace (including newlines and tabs) with a single space."""
    return " ".join(text.split())


def split_top_level(body: str) -> list[str]:
    """Split the body of a form into its top-level elements.

    Elements are separated by whitespace or by adjacency to a parenthesized form, and each
    parenthesized form is kept whole: `split_top_level("at start(p ?x)")` is
    `["at", "start", "(p ?x)"]`.

    :param body: Text of a form with its outer parentheses already removed
    :return: Ordered list of top-level elements
    :raises MalformedExpression: If the parentheses in the body are unbalanced
    """
    elements: list[str] = []
    current: list[str] = []
    depth = 0

    def flush() -> None:
        if current:
            elements.append("".join(current))
            current.clear()

    for char in body:
        if depth == 0:
            if char.isspace():
                flush()
            elif char == "(":
                flush()  # A form begins a new element even without a preceding space
                current.append(char)
                depth = 1
            elif char == ")":
                raise MalformedExpression(f"Unbalanced ')' in expression: '{body}'")
            else:
                current.append(char)
            continue

        current.append(char)
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                flush()

    if depth != 0:
        raise MalformedExpression(f"Unbalanced '(' in expression: '{body}'")

    flush()
    return elements


def unwrap(form: str) -> str:
    """Remove the outer parentheses of a single parenthesized form.

    :param form: Text expected to be exactly one balanced form, e.g. `(and (p ?x))`
    :return: Body of the form, e.g. `and (p ?x)`
    :raises MalformedExpression: If the text is not exactly one parenthesized form
    """
    stripped = form.strip()
    elements = split_top_level(stripped)
    if len(elements) != 1 or not elements[0].startswith("("):
        raise MalformedExpression(f"Expected a single parenthesized form but found: '{form}'")

    return stripped[1:-1]
