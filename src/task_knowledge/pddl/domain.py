"""Define classes to represent PDDL domains: types, predicate signatures, and actions."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from task_knowledge.io.logging import log_debug
from task_knowledge.pddl.expressions import Conjunction, ExpressionTree, Param, Predicate
from task_knowledge.pddl.type_hierarchy import TypeHierarchy


def params_to_pddl(parameters: tuple[Param, ...]) -> str:
    """Return a PDDL parameter list such as `(?0 - robot ?1 - room)`."""
    return "(" + " ".join(f"{p.name} - {p.type}" if p.type else p.name for p in parameters) + ")"


@dataclass(frozen=True)
class ActionSignature:
    """An instantaneous PDDL action with preconditions and effects."""

    name: str
    parameters: tuple[Param, ...] = ()
    preconditions: ExpressionTree = field(default_factory=ExpressionTree)
    effects: ExpressionTree = field(default_factory=ExpressionTree)

    def to_pddl(self) -> str:
        """Return the PDDL definition of the action."""
        lines = [f"(:action {self.name}", f"  :parameters {params_to_pddl(self.parameters)}"]
        if not self.preconditions.is_empty():
            lines.append(f"  :precondition {self.preconditions}")
        if not self.effects.is_empty():
            lines.append(f"  :effect {self.effects}")
        lines.append(")")
        return "\n".join(lines)


@dataclass(frozen=True)
class DurativeActionSignature:
    """A PDDL durative action, whose conditions and effects are split into temporal phases."""

    name: str
    parameters: tuple[Param, ...] = ()
    at_start_requirements: ExpressionTree = field(default_factory=ExpressionTree)
    over_all_requirements: ExpressionTree = field(default_factory=ExpressionTree)
    at_end_requirements: ExpressionTree = field(default_factory=ExpressionTree)
    at_start_effects: ExpressionTree = field(default_factory=ExpressionTree)
    at_end_effects: ExpressionTree = field(default_factory=ExpressionTree)
    duration: str = ""
    """Duration constraint exactly as declared, e.g. `(= ?duration 5)` (empty if undeclared)."""

    @property
    def requirements(self) -> dict[str, ExpressionTree]:
        """Retrieve the condition of each temporal phase, keyed by its time specifier."""
        return {
            "at start": self.at_start_requirements,
            "over all": self.over_all_requirements,
            "at end": self.at_end_requirements,
        }

    @property
    def effects(self) -> dict[str, ExpressionTree]:
        """Retrieve the effects of each temporal phase, keyed by its time specifier."""
        return {"at start": self.at_start_effects, "at end": self.at_end_effects}

    def to_pddl(self) -> str:
        """Return the PDDL definition of the durative action."""
        lines = [
            f"(:durative-action {self.name}",
            f"  :parameters {params_to_pddl(self.parameters)}",
        ]
        if self.duration:
            lines.append(f"  :duration {self.duration}")

        condition = _timed_body(self.requirements)
        if condition:
            lines.append(f"  :condition {condition}")

        effect = _timed_body(self.effects)
        if effect:
            lines.append(f"  :effect {effect}")

        lines.append(")")
        return "\n".join(lines)


def _timed_body(phases: dict[str, ExpressionTree]) -> str:
    """Combine the per-phase trees of a durative action into one timed PDDL expression."""
    terms: list[str] = []
    for time_spec, tree in phases.items():
        if tree.root is None:
            continue
        operands = tree.root.operands if isinstance(tree.root, Conjunction) else (tree.root,)
        terms.extend(f"({time_spec} {ExpressionTree(op)})" for op in operands)

    return f"(and {''.join(terms)})" if terms else ""


class DomainModel:
    """A PDDL domain: the types, predicates, and actions shared by a class of planning problems.

    Predicates, functions, and actions are keyed by lowercased name, so lookups are
    case-insensitive while each signature keeps the name as it was declared.
    """

    def __init__(self, name: str) -> None:
        """Initialize an empty domain with the given name."""
        self.name = name
        self.requirements: list[str] = []
        self.types = TypeHierarchy()
        self.constants: dict[str, str] = {}
        """Map from the name of each domain constant to its type."""

        self._predicates: dict[str, Predicate] = {}
        self._functions: dict[str, Predicate] = {}
        self._actions: dict[str, ActionSignature] = {}
        self._durative_actions: dict[str, DurativeActionSignature] = {}

    def __str__(self) -> str:
        """Create a readable summary of the domain."""
        return (
            f"DomainModel({self.name}: {len(self.types)} types, {len(self._predicates)} "
            f"predicates, {len(self._actions)} actions, "
            f"{len(self._durative_actions)} durative actions)"
        )

    @classmethod
    def from_files(cls, paths: Iterable[Path]) -> DomainModel:
        """Load a domain from one or more PDDL files; later files extend the first.

        :param paths: Paths to PDDL domain files (at least one)
        :return: Domain model combining the definitions of all files
        """
        from task_knowledge.pddl.domain_parser import load_domain_files

        return load_domain_files(paths)

    def extend(self, domain_text: str) -> None:
        """Parse a domain fragment (`:predicates` optional) and merge it into this domain."""
        from task_knowledge.pddl.domain_parser import extend_domain

        extend_domain(self, domain_text)

    def add_requirement(self, requirement: str) -> None:
        """Record a requirement flag (e.g., `:typing`) unless it is already present."""
        if requirement not in self.requirements:
            self.requirements.append(requirement)

    def add_predicate(self, predicate: Predicate) -> None:
        """Add a predicate signature, replacing any existing predicate with the same name."""
        self._predicates[predicate.name.lower()] = predicate

    def add_function(self, function: Predicate) -> None:
        """Add a numeric function signature, replacing any existing function with the same name."""
        self._functions[function.name.lower()] = function

    def add_action(self, action: ActionSignature) -> None:
        """Add an action, replacing any existing action with the same name."""
        self._actions[action.name.lower()] = action

    def add_durative_action(self, action: DurativeActionSignature) -> None:
        """Add a durative action, replacing any existing durative action with the same name."""
        self._durative_actions[action.name.lower()] = action

    def merge(self, other: DomainModel) -> None:
        """Merge another domain into this one in place.

        New types and requirements are appended in first-seen order. A predicate, function, or
        action whose name already exists is replaced by the definition from `other` but keeps its
        position; new names are appended. The name of this domain is unchanged.

        :param other: Domain whose definitions are merged into this one
        :raises ValueError: If the combined types are cyclic (this domain is then unchanged)
        """
        merged_types = self.types.copy()
        merged_types.merge(other.types)
        self.types = merged_types

        for requirement in other.requirements:
            self.add_requirement(requirement)

        self.constants.update(other.constants)

        for predicate in other._predicates.values():
            if predicate.name.lower() in self._predicates:
                log_debug(f"Predicate '{predicate.name}' redefined while extending {self.name}.")
            self.add_predicate(predicate)

        for function in other._functions.values():
            self.add_function(function)

        for action in other._actions.values():
            if action.name.lower() in self._actions:
                log_debug(f"Action '{action.name}' redefined while extending {self.name}.")
            self.add_action(action)

        for durative_action in other._durative_actions.values():
            if durative_action.name.lower() in self._durative_actions:
                log_debug(f"Durative action '{durative_action.name}' redefined in {self.name}.")
            self.add_durative_action(durative_action)

    def get_types(self) -> list[str]:
        """Retrieve the types of the domain in declaration order."""
        return self.types.types

    def get_predicate_names(self) -> list[str]:
        """Retrieve the names of all predicates of the domain in declaration order."""
        return [predicate.name for predicate in self._predicates.values()]

    def get_predicate(self, name: str) -> Predicate | None:
        """Retrieve the signature of the named predicate (case-insensitive), or None if absent."""
        return self._predicates.get(name.lower())

    def get_function_names(self) -> list[str]:
        """Retrieve the names of all numeric functions of the domain in declaration order."""
        return [function.name for function in self._functions.values()]

    def get_function(self, name: str) -> Predicate | None:
        """Retrieve the signature of the named function (case-insensitive), or None if absent."""
        return self._functions.get(name.lower())

    def get_action_names(self) -> list[str]:
        """Retrieve the names of the domain's (non-durative) actions in declaration order."""
        return [action.name for action in self._actions.values()]

    def get_durative_action_names(self) -> list[str]:
        """Retrieve the names of the domain's durative actions in declaration order."""
        return [action.name for action in self._durative_actions.values()]

    def get_action(self, name: str) -> ActionSignature | None:
        """Retrieve the named (non-durative) action, or None if absent."""
        return self._actions.get(name.lower())

    def get_durative_action(self, name: str) -> DurativeActionSignature | None:
        """Retrieve the named durative action, or None if absent."""
        return self._durative_actions.get(name.lower())

    def render_domain_text(self) -> str:
        """Reconstruct a PDDL domain definition equivalent to this domain model."""
        sections = [f"(define (domain {self.name})"]

        if self.requirements:
            sections.append(f"(:requirements {' '.join(self.requirements)})")

        if len(self.types):
            sections.append(f"(:types\n{self.types.to_pddl()}\n)")

        if self.constants:
            constants = " ".join(f"{name} - {type_}" for name, type_ in self.constants.items())
            sections.append(f"(:constants {constants})")

        predicates = "\n".join(p.to_typed_pddl() for p in self._predicates.values())
        sections.append(f"(:predicates\n{predicates}\n)")

        if self._functions:
            functions = "\n".join(f.to_typed_pddl() for f in self._functions.values())
            sections.append(f"(:functions\n{functions}\n)")

        sections.extend(action.to_pddl() for action in self._actions.values())
        sections.extend(action.to_pddl() for action in self._durative_actions.values())
        sections.append(")")

        return "\n".join(sections) + "\n"
