"""Define a knowledge base holding the mutable state of a PDDL planning problem.

The knowledge base stores typed object instances, ground facts (predicates), and a goal
expression, each validated against a DomainModel, and renders them as PDDL problem text.
"""

from __future__ import annotations

from dataclasses import dataclass

from task_knowledge.io.logging import log_debug
from task_knowledge.pddl.domain import DomainModel
from task_knowledge.pddl.expressions import ExpressionTree, Predicate, matches
from task_knowledge.pddl.type_hierarchy import ROOT_TYPE

DEFAULT_PROBLEM_NAME = "problem_1"


@dataclass(frozen=True)
class Instance:
    """A named, typed object in a planning problem."""

    name: str
    type: str

    def __str__(self) -> str:
        """Create a readable string representation of the instance."""
        return f"{self.name}: {self.type}"


class ProblemKnowledgeBase:
    """A collection of instances, facts, and a goal describing a planning problem in some domain.

    Mutations that would violate the domain (e.g., an instance of an unknown type) are rejected
    by returning False; they never raise.
    """

    def __init__(
        self,
        domain: DomainModel,
        problem_name: str = DEFAULT_PROBLEM_NAME,
        check_argument_types: bool = False,
    ) -> None:
        """Initialize an empty knowledge base for problems in the given domain.

        :param domain: Domain against which instances, facts, and goals are validated
        :param problem_name: Name used in the rendered problem (defaults to "problem_1")
        :param check_argument_types: Whether each fact argument must name a known instance (or
            domain constant) of the corresponding parameter type (defaults to False)
        """
        self.domain = domain
        self.problem_name = problem_name
        self.check_argument_types = check_argument_types

        self._instances: list[Instance] = []
        self._facts: list[Predicate] = []
        self._goal = ExpressionTree()

    def __str__(self) -> str:
        """Create a readable summary of the knowledge base."""
        return (
            f"ProblemKnowledgeBase({self.problem_name}: {len(self._instances)} instances, "
            f"{len(self._facts)} facts, goal: '{self._goal}')"
        )

    # =========================================================================
    # Instances
    # =========================================================================

    def add_instance(self, instance: Instance) -> bool:
        """Add an object instance to the problem.

        :param instance: Instance to be added
        :return: True if added, or False if the name is taken or the type is not in the domain
            (the implicit root type `object` is always in the domain)
        """
        if self.get_instance(instance.name) is not None:
            log_debug(f"Rejected instance {instance}: name already exists.")
            return False

        if instance.type not in self.domain.types:
            log_debug(f"Rejected instance {instance}: unknown type '{instance.type}'.")
            return False

        self._instances.append(instance)
        return True

    def remove_instance(self, name: str) -> bool:
        """Remove the named instance; facts mentioning the instance are kept.

        :param name: Name of the instance to be removed (case-sensitive)
        :return: True if an instance was removed, else False
        """
        instance = self.get_instance(name)
        if instance is None:
            return False

        self._instances.remove(instance)
        return True

    def get_instance(self, name: str) -> Instance | None:
        """Retrieve the instance with the given name, or None if there is none."""
        return next((instance for instance in self._instances if instance.name == name), None)

    def get_instances(self) -> list[Instance]:
        """Retrieve all instances in the order they were added."""
        return list(self._instances)

    # =========================================================================
    # Facts
    # =========================================================================

    def add_predicate(self, predicate: Predicate) -> bool:
        """Add a ground fact to the problem.

        :param predicate: Fact to be added, e.g. `(robot_at r2d2 bedroom)`
        :return: True if added, or False if the fact is invalid in the domain or already present
        """
        if not self.is_valid_predicate(predicate):
            return False

        if self.exist_predicate(predicate):
            log_debug(f"Rejected fact {predicate}: already present.")
            return False

        self._facts.append(predicate)
        return True

    def remove_predicate(self, predicate: Predicate) -> bool:
        """Remove the fact matching the given predicate (ignoring parameter types).

        :return: True if a fact was removed, else False
        """
        for idx, fact in enumerate(self._facts):
            if matches(fact, predicate):
                del self._facts[idx]
                return True
        return False

    def exist_predicate(self, predicate: Predicate) -> bool:
        """Evaluate whether a fact matching the given predicate is present."""
        return any(matches(fact, predicate) for fact in self._facts)

    def get_predicates(self) -> list[Predicate]:
        """Retrieve all facts in the order they were added."""
        return list(self._facts)

    def is_valid_predicate(self, predicate: Predicate) -> bool:
        """Evaluate whether a predicate is a valid fact in the domain of the knowledge base.

        The predicate must be declared in the domain with the same number of parameters. If
        argument types are checked, each argument must also name a known object whose type is
        (a subtype of) the declared parameter type.
        """
        signature = self.domain.get_predicate(predicate.name)
        if signature is None:
            log_debug(f"Rejected fact {predicate}: predicate is not in the domain.")
            return False

        if signature.arity != predicate.arity:
            log_debug(f"Rejected fact {predicate}: expected {signature.arity} arguments.")
            return False

        if self.check_argument_types:
            for arg, param in zip(predicate.parameters, signature.parameters):
                if not self._is_object_of_type(arg.name, param.type):
                    log_debug(f"Rejected fact {predicate}: '{arg.name}' is not a {param.type}.")
                    return False

        return True

    def _is_object_of_type(self, name: str, pddl_type: str) -> bool:
        """Evaluate whether the named instance or domain constant has the given type."""
        instance = self.get_instance(name)
        object_type = instance.type if instance is not None else self.domain.constants.get(name)
        if object_type is None:
            return False

        return not pddl_type or self.domain.types.is_subtype(object_type, pddl_type)

    # =========================================================================
    # Goal
    # =========================================================================

    def set_goal(self, goal: ExpressionTree) -> bool:
        """Replace the goal of the problem; always returns True."""
        self._goal = goal
        return True

    def get_goal(self) -> ExpressionTree:
        """Retrieve the current goal (empty if none has been set)."""
        return self._goal

    def clear_goal(self) -> bool:
        """Reset the goal to the empty expression; always returns True."""
        self._goal = ExpressionTree()
        return True

    def clear(self) -> None:
        """Remove all instances, facts, and the goal, e.g. between planning episodes."""
        self._instances.clear()
        self._facts.clear()
        self._goal = ExpressionTree()

    # =========================================================================
    # Problem text
    # =========================================================================

    def get_problem(self) -> str:
        """Render the knowledge base as the text of a PDDL problem.

        Objects are grouped by type in domain type order, followed by objects of the implicit
        type `object`. Types without instances are omitted, as is the goal section when the goal
        is empty.
        """
        text = f"( define ( problem {self.problem_name} )\n"
        text += f"( :domain {self.domain.name} )\n"

        text += "( :objects\n"
        for pddl_type in [*self.domain.get_types(), ROOT_TYPE]:
            names = [instance.name for instance in self._instances if instance.type == pddl_type]
            if names:
                text += f"\t{' '.join(names)} - {pddl_type}\n"
        text += ")\n"

        text += "( :init\n"
        for fact in self._facts:
            text += f"\t{fact.to_problem_text()}\n"
        text += ")\n"

        if not self._goal.is_empty():
            text += "( :goal\n"
            text += self._goal.to_problem_text(indent=1)
            text += ")\n"

        text += ")\n"
        return text
