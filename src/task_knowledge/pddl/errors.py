"""Define exceptions raised while reading PDDL domains and logical expressions."""


class PDDLError(RuntimeError):
    """Base class for errors raised when PDDL text cannot be interpreted."""


class MalformedExpression(PDDLError):
    """Raised when PDDL text is syntactically invalid.

    Examples: unbalanced parentheses, a `not` without exactly one operand, or an unknown keyword.
    """


class DomainParseError(PDDLError):
    """Raised when a PDDL domain is missing structure it requires (e.g., its `:predicates`)."""
