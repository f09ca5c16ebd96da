"""Implement a scanner for the Planning Domain Definition Language (PDDL).

Reference: PDDL - The Planning Domain Definition Language (Version 1.2) (Ghallab et al., 1998)
"""

from __future__ import annotations

import re
from collections.abc import Generator
from dataclasses import dataclass
from enum import StrEnum

from task_knowledge.pddl.errors import MalformedExpression

PDDL_NAME_REGEX = r"[a-zA-Z]{1}[a-zA-Z0-9\-_]*"
"""Names in PDDL begin with a letter and contain only letters, digits, hyphens, and underscores."""


class PDDLTokenType(StrEnum):
    """Enumeration of token types when scanning PDDL."""

    NAME = PDDL_NAME_REGEX
    """Name of a PDDL domain, type, predicate, action, object, etc."""

    VARIABLE = r"\?[a-zA-Z0-9][a-zA-Z0-9\-_]*"
    """Name of a PDDL variable (e.g., '?r', '?duration', or the positional '?0')."""

    KEYWORD = r":" + PDDL_NAME_REGEX
    """A PDDL keyword starts with a colon (e.g., ':types')."""

    NUMBER = r"[0-9]+(?:\.[0-9]+)?"
    """A numeric literal, as used in duration constraints."""

    MINUS = r"-"
    """Separates PDDL entities from their types in typed lists."""

    COMPARATOR = r"<=|>=|[=<>*/+]"
    """Comparison or arithmetic operator, as used in duration constraints."""

    OPEN_PAREN = r"\("
    """An open parenthesis."""

    CLOSE_PAREN = r"\)"
    """A close parenthesis."""

    COMMENT = r";[^\n]*"
    """Comments in PDDL begin with a semicolon and end with the next newline."""

    NEWLINE = r"\n"

    SKIP = r"[ \t\r]+"
    """Whitespace to be ignored."""

    MISMATCH = r"."
    """Any other character is a mismatch."""

    @property
    def named_group_regex(self) -> str:
        """Retrieve the named group regular expression for the token type."""
        return f"(?P<{self.name}>{self.value})"


@dataclass(frozen=True)
class PDDLToken:
    """A token scanned from a string of PDDL.

    Reference: https://docs.python.org/3/library/re.html#writing-a-tokenizer
    """

    type_: PDDLTokenType
    value: str
    line: int
    column: int


PDDL_REQ_FLAGS = {
    ":strips": "Basic STRIPS-style adds and deletes",
    ":typing": "Allow type names in declarations of variables",
    ":negative-preconditions": "Allow `not` in goal descriptions",
    ":disjunctive-preconditions": "Allow `or` in goal descriptions",
    ":equality": "Support `=` as built-in predicate",
    ":existential-preconditions": "Allow `exists` in goal descriptions",
    ":universal-preconditions": "Allow `forall` in goal descriptions",
    ":quantified-preconditions": "Allow existential and universal preconditions",
    ":conditional-effects": "Allow `when` in action effects",
    ":fluents": "Allow function definitions and use of effects using assignment operators",
    ":numeric-fluents": "Allow numeric function definitions",
    ":durative-actions": "Allow durative actions with start and end phases",
    ":duration-inequalities": "Allow duration constraints using inequalities",
    ":timed-initial-literals": "Allow facts that become true at given times",
    ":action-costs": "Allow actions to increase a total-cost function",
    ":adl": (
        "Support :strips + :typing + :disjunctive-preconditions + "
        ":equality + :quantified-preconditions + :conditional-effects"
    ),
}
"""Definitions for recognized PDDL requirements flags.

Any flag may appear within a `:requirements` section; flags not listed here are still scanned.

Reference: Section 15 ("Current Requirement Flags") of Ghallab et al. (1998).
"""

PDDL_SECTION_KEYWORDS = {
    ":requirements",
    ":types",
    ":constants",
    ":predicates",
    ":functions",
    ":action",
    ":durative-action",
}
"""Keywords that may open a section of a PDDL domain."""

PDDL_ACTION_KEYWORDS = {
    ":parameters",
    ":precondition",
    ":effect",
    ":duration",
    ":condition",
}
"""Keywords that may appear within an action or durative action definition."""


class PDDLScanner:
    """A scanner for a subset of the Planning Domain Definition Language (PDDL)."""

    def __init__(self) -> None:
        """Initialize regular expressions for scanning tokens of PDDL.

        Reference: https://docs.python.org/3/library/re.html#writing-a-tokenizer
        """
        self.token_regex = "|".join(tt.named_group_regex for tt in PDDLTokenType)

        self.keywords = PDDL_SECTION_KEYWORDS | PDDL_ACTION_KEYWORDS

    def tokenize(self, string: str) -> Generator[PDDLToken]:
        """Tokenize a string of PDDL into an iterator over tokens.

        :param string: String containing PDDL to be tokenized
        :yield: Iterator over PDDL tokens in the string
        :raises MalformedExpression: If the string contains an unknown keyword or character
        """
        line_num = 1
        line_start = 0
        in_requirements = False  # Requirement flags are not checked against the keywords
        for mo in re.finditer(self.token_regex, string):
            if mo.lastgroup is None:
                raise MalformedExpression(f"Failed to tokenize string into PDDL:\n{string}")

            token_type: PDDLTokenType = getattr(PDDLTokenType, mo.lastgroup)
            value = mo.group()
            column = mo.start() - line_start

            match token_type:
                case PDDLTokenType.KEYWORD if in_requirements:
                    pass

                case PDDLTokenType.KEYWORD:
                    in_requirements = value.lower() == ":requirements"
                    if value.lower() not in self.keywords:
                        raise MalformedExpression(
                            f"Unknown PDDL keyword '{value}' on line {line_num}, column {column}.",
                        )

                case PDDLTokenType.MISMATCH:
                    raise MalformedExpression(
                        f"Cannot tokenize '{value}' on line {line_num}, column {column}.",
                    )

                case PDDLTokenType.COMMENT | PDDLTokenType.SKIP:
                    continue  # Skip comments and whitespace

                case PDDLTokenType.CLOSE_PAREN:
                    in_requirements = False

                case PDDLTokenType.NEWLINE:
                    line_start = mo.end()
                    line_num += 1
                    continue

                case _:
                    pass

            yield PDDLToken(token_type, value, line_num, column)

    def validate(self, string: str) -> int:
        """Scan an entire string of PDDL, raising an error at the first invalid token.

        :param string: String containing PDDL to be validated
        :return: Number of tokens scanned
        :raises MalformedExpression: If the string contains an unknown keyword or character
        """
        return sum(1 for _ in self.tokenize(string))
