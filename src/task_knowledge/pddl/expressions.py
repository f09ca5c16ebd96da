"""Define classes to represent logical expressions over PDDL predicates.

An expression is a tree whose leaves are predicates and whose internal nodes are negations,
conjunctions, or disjunctions. Expressions are used for action conditions and effects and for
the goal of a planning problem.

Two string forms are supported:

    compact - The wire form exchanged with planners and executors, e.g.
        `(and (robot_at r2d2 bedroom)(not (person_at paco kitchen)))`. Siblings are concatenated
        without a separator, while a boolean keyword is always followed by one space.

    problem - The indented form written under the `:goal` section of a PDDL problem.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass

from task_knowledge.pddl.errors import MalformedExpression
from task_knowledge.pddl.text_codec import normalize, split_top_level, unwrap


@dataclass(frozen=True)
class Param:
    """A parameter of a predicate or action: a variable (e.g., `?0`) or a concrete object name."""

    name: str
    type: str = ""  # Empty when the type is unknown (e.g., parsed from an expression)

    def __str__(self) -> str:
        """Create a readable string representation of the parameter."""
        return f"{self.name}: {self.type}" if self.type else self.name


@dataclass(frozen=True)
class Predicate:
    """A named predicate with ordered, possibly typed parameters."""

    name: str
    parameters: tuple[Param, ...] = ()

    def __str__(self) -> str:
        """Return the compact PDDL form of the predicate, e.g. `(robot_at r2d2 bedroom)`."""
        return "(" + self.name + " " + " ".join(p.name for p in self.parameters) + ")"

    @classmethod
    def from_string(cls, text: str) -> Predicate:
        """Construct an untyped predicate from its compact PDDL form.

        :param text: PDDL string such as `(robot_at r2d2 bedroom)`
        :return: Constructed Predicate instance
        :raises MalformedExpression: If the text is not a single predicate
        """
        tree = parse_expression(text)
        if not isinstance(tree.root, PredicateLeaf):
            raise MalformedExpression(f"Expected a single predicate but found: '{text}'")
        return tree.root.predicate

    @property
    def arity(self) -> int:
        """Retrieve the number of parameters of the predicate."""
        return len(self.parameters)

    @property
    def key(self) -> tuple[str, tuple[str, ...]]:
        """Retrieve the identity of the predicate: its lowercased name and parameter names."""
        return self.name.lower(), tuple(p.name for p in self.parameters)

    def to_typed_pddl(self) -> str:
        """Return the typed PDDL declaration, e.g. `(at ?robot0 - robot ?room1 - room)`."""
        typed_params = [f"{p.name} - {p.type}" if p.type else p.name for p in self.parameters]
        return f"({' '.join([self.name, *typed_params])})"

    def to_problem_text(self) -> str:
        """Return the spaced form used in PDDL problem files, e.g. `( robot_at r2d2 bedroom )`."""
        return "( " + " ".join([self.name, *(p.name for p in self.parameters)]) + " )"


def matches(predicate_a: Predicate, predicate_b: Predicate) -> bool:
    """Evaluate whether two predicates denote the same fact.

    Names are compared case-insensitively and parameters by name only; their types are ignored.
    """
    return predicate_a.key == predicate_b.key


@dataclass(frozen=True)
class PredicateLeaf:
    """A leaf of an expression tree holding a single predicate."""

    predicate: Predicate


@dataclass(frozen=True)
class Negation:
    """A negation holds exactly one operand."""

    operand: ExpressionNode


@dataclass(frozen=True)
class Conjunction:
    """A conjunction (i.e., AND) over an ordered sequence of operands."""

    operands: tuple[ExpressionNode, ...] = ()


@dataclass(frozen=True)
class Disjunction:
    """A disjunction (i.e., OR) over an ordered sequence of operands."""

    operands: tuple[ExpressionNode, ...] = ()


ExpressionNode = PredicateLeaf | Negation | Conjunction | Disjunction
"""Any node of an expression tree."""

Not = Negation
And = Conjunction
Or = Disjunction

_KEYWORDS = {Conjunction: "and", Disjunction: "or"}


@dataclass(frozen=True)
class ExpressionTree:
    """A logical expression owning a root node, or the empty expression if the root is None."""

    root: ExpressionNode | None = None

    def __str__(self) -> str:
        """Return the compact PDDL form of the expression (empty string if empty)."""
        return serialize(self)

    @classmethod
    def from_string(cls, text: str) -> ExpressionTree:
        """Construct an expression tree from its compact PDDL form."""
        return parse_expression(text)

    def is_empty(self) -> bool:
        """Check whether the expression has no root node."""
        return self.root is None

    def predicates(self) -> Iterator[Predicate]:
        """Iterate over the predicates at the leaves of the expression, in document order."""
        if self.root is not None:
            yield from _leaf_predicates(self.root)

    def substitute(self, binding: Mapping[str, str]) -> ExpressionTree:
        """Create a copy of the expression with parameter names replaced per the given binding."""
        return substitute(self, binding)

    def to_problem_text(self, indent: int = 1) -> str:
        """Return the indented form of the expression used in PDDL problem files."""
        return to_problem_text(self, indent)


def is_empty(tree: ExpressionTree) -> bool:
    """Check whether the given expression tree is empty."""
    return tree.is_empty()


def parse_expression(text: str) -> ExpressionTree:
    """Parse the compact PDDL form of a logical expression.

    :param text: PDDL text such as `(and (robot_at ?0 ?1)(not (robot_at ?0 ?2)))`
    :return: Parsed expression tree (empty if the text is blank)
    :raises MalformedExpression: If the text is not a single well-formed expression
    """
    reduced = normalize(text).strip()
    if not reduced:
        return ExpressionTree()

    return ExpressionTree(_parse_node(reduced))


def _parse_node(form: str) -> ExpressionNode:
    """Recursively parse a single parenthesized form into an expression node."""
    elements = split_top_level(unwrap(form))
    if not elements:
        raise MalformedExpression(f"Found an empty form in expression: '{form}'")

    head, *rest = elements
    if head.startswith("("):
        raise MalformedExpression(f"Expected a keyword or predicate name in '{form}'")

    match head.lower():
        case "and":
            return Conjunction(tuple(_parse_node(op) for op in rest))

        case "or":
            return Disjunction(tuple(_parse_node(op) for op in rest))

        case "not":
            if len(rest) != 1:
                raise MalformedExpression(f"Negation expects one operand but found {len(rest)}")
            return Negation(_parse_node(rest[0]))

        case _:
            for arg in rest:
                if arg.startswith("("):
                    raise MalformedExpression(f"Unexpected nested form '{arg}' in '{form}'")
            return PredicateLeaf(Predicate(head, tuple(Param(arg) for arg in rest)))


def serialize(tree: ExpressionTree) -> str:
    """Render an expression tree in its compact PDDL form (see module docstring)."""
    if tree.root is None:
        return ""
    return _serialize_node(tree.root)


def _serialize_node(node: ExpressionNode) -> str:
    match node:
        case PredicateLeaf(predicate=predicate):
            return str(predicate)
        case Negation(operand=operand):
            return "(not " + _serialize_node(operand) + ")"
        case Conjunction(operands=operands) | Disjunction(operands=operands):
            children = "".join(_serialize_node(op) for op in operands)
            return "(" + _KEYWORDS[type(node)] + " " + children + ")"

    raise TypeError(f"Unexpected expression node: {node!r}")


def substitute(tree: ExpressionTree, binding: Mapping[str, str]) -> ExpressionTree:
    """Create a new expression tree with leaf parameter names replaced per the binding.

    :param tree: Expression tree to be rewritten (not modified)
    :param binding: Map from parameter names to replacement names; absent names are kept
    :return: Rewritten expression tree
    """
    if tree.root is None:
        return ExpressionTree()
    return ExpressionTree(_substitute_node(tree.root, binding))


def _substitute_node(node: ExpressionNode, binding: Mapping[str, str]) -> ExpressionNode:
    match node:
        case PredicateLeaf(predicate=predicate):
            new_params = tuple(
                Param(binding.get(p.name, p.name), p.type) for p in predicate.parameters
            )
            return PredicateLeaf(Predicate(predicate.name, new_params))
        case Negation(operand=operand):
            return Negation(_substitute_node(operand, binding))
        case Conjunction(operands=operands):
            return Conjunction(tuple(_substitute_node(op, binding) for op in operands))
        case Disjunction(operands=operands):
            return Disjunction(tuple(_substitute_node(op, binding) for op in operands))

    raise TypeError(f"Unexpected expression node: {node!r}")


def _leaf_predicates(node: ExpressionNode) -> Iterator[Predicate]:
    match node:
        case PredicateLeaf(predicate=predicate):
            yield predicate
        case Negation(operand=operand):
            yield from _leaf_predicates(operand)
        case Conjunction(operands=operands) | Disjunction(operands=operands):
            for op in operands:
                yield from _leaf_predicates(op)


def to_problem_text(tree: ExpressionTree, indent: int = 1) -> str:
    """Render an expression tree in the indented form used in PDDL problem files.

    Each boolean node opens on its own line, places every child one tab deeper, and closes with
    `)` at its own indentation. Every line ends with a newline.

    :param tree: Expression tree to be rendered
    :param indent: Number of tabs preceding the root node (defaults to 1)
    :return: Indented text, or the empty string for an empty tree
    """
    if tree.root is None:
        return ""
    return _problem_text_node(tree.root, indent)


def _problem_text_node(node: ExpressionNode, depth: int) -> str:
    tabs = "\t" * depth
    match node:
        case PredicateLeaf(predicate=predicate):
            return tabs + predicate.to_problem_text() + "\n"
        case Negation(operand=operand):
            return tabs + "( not\n" + _problem_text_node(operand, depth + 1) + tabs + ")\n"
        case Conjunction(operands=operands) | Disjunction(operands=operands):
            children = "".join(_problem_text_node(op, depth + 1) for op in operands)
            return tabs + "( " + _KEYWORDS[type(node)] + "\n" + children + tabs + ")\n"

    raise TypeError(f"Unexpected expression node: {node!r}")
