"""Define a thread-safe query boundary over a PDDL domain and its problem knowledge base.

Every query returns an Outcome: on success its message is empty and its output carries the
result; on failure its message describes the error (e.g., "Action not found").
"""

from __future__ import annotations

import threading
from dataclasses import dataclass

from task_knowledge.io.logging import log_warning
from task_knowledge.knowledge.outcome import Outcome
from task_knowledge.knowledge.problem import Instance, ProblemKnowledgeBase
from task_knowledge.pddl.domain import DomainModel
from task_knowledge.pddl.errors import MalformedExpression
from task_knowledge.pddl.expressions import ExpressionTree, Predicate, parse_expression

ACTION = "action"
DURATIVE_ACTION = "durative-action"


@dataclass(frozen=True)
class PredicateDetails:
    """The name and parameters of a predicate declared in the domain."""

    name: str
    param_names: list[str]
    param_types: list[str]


@dataclass(frozen=True)
class ActionDetails:
    """The parameters and serialized condition and effect bodies of a domain action.

    Instantaneous actions report their preconditions as `at_start_requirements` and their
    effects as `at_start_effects`, leaving the other bodies empty.
    """

    name: str
    type: str
    """Either "action" or "durative-action"."""

    param_names: list[str]
    param_types: list[str]
    at_start_requirements: str = ""
    over_all_requirements: str = ""
    at_end_requirements: str = ""
    at_start_effects: str = ""
    at_end_effects: str = ""


class KnowledgeService:
    """Serve queries and updates against a domain model and its problem knowledge base.

    A single reentrant lock serializes every call, so compound checks such as "reject
    duplicate facts" remain atomic when the service is shared between threads.
    """

    def __init__(self, domain: DomainModel, knowledge_base: ProblemKnowledgeBase | None = None):
        """Initialize the service for the given domain.

        :param domain: Domain model queried by the service (read-only)
        :param knowledge_base: Optional problem knowledge base (created for the domain if None)
        """
        self.domain = domain
        self.knowledge_base = knowledge_base or ProblemKnowledgeBase(domain)
        self._lock = threading.RLock()

    def _fail(self, message: str, detail: str | None = None) -> Outcome:
        """Log a warning and construct a failed outcome with the given message."""
        log_warning(detail or message)
        return Outcome.failure(message)

    # =========================================================================
    # Domain queries
    # =========================================================================

    def get_types(self) -> Outcome[list[str]]:
        """Retrieve the types of the domain in declaration order."""
        with self._lock:
            return Outcome.ok(self.domain.get_types())

    def get_predicates(self) -> Outcome[list[str]]:
        """Retrieve the names of the predicates of the domain."""
        with self._lock:
            return Outcome.ok(self.domain.get_predicate_names())

    def get_predicate_details(self, name: str) -> Outcome[PredicateDetails]:
        """Retrieve the parameters of the named predicate."""
        with self._lock:
            predicate = self.domain.get_predicate(name)
            if predicate is None:
                return self._fail("Predicate not found", f"Requested unknown predicate [{name}]")

            return Outcome.ok(
                PredicateDetails(
                    name,
                    [p.name for p in predicate.parameters],
                    [p.type for p in predicate.parameters],
                ),
            )

    def get_actions(self) -> Outcome[list[tuple[str, str]]]:
        """Retrieve (name, kind) pairs of all actions; kind is "action" or "durative-action"."""
        with self._lock:
            actions = [(name, ACTION) for name in self.domain.get_action_names()]
            durative_names = self.domain.get_durative_action_names()
            actions.extend((name, DURATIVE_ACTION) for name in durative_names)
            return Outcome.ok(actions)

    def get_action_details(self, name: str) -> Outcome[ActionDetails]:
        """Retrieve the parameters and serialized bodies of the named (durative) action."""
        with self._lock:
            action = self.domain.get_action(name)
            if action is not None:
                return Outcome.ok(
                    ActionDetails(
                        name,
                        ACTION,
                        [p.name for p in action.parameters],
                        [p.type for p in action.parameters],
                        at_start_requirements=str(action.preconditions),
                        at_start_effects=str(action.effects),
                    ),
                )

            durative = self.domain.get_durative_action(name)
            if durative is not None:
                return Outcome.ok(
                    ActionDetails(
                        name,
                        DURATIVE_ACTION,
                        [p.name for p in durative.parameters],
                        [p.type for p in durative.parameters],
                        at_start_requirements=str(durative.at_start_requirements),
                        over_all_requirements=str(durative.over_all_requirements),
                        at_end_requirements=str(durative.at_end_requirements),
                        at_start_effects=str(durative.at_start_effects),
                        at_end_effects=str(durative.at_end_effects),
                    ),
                )

            return self._fail("Action not found", f"Requested unknown action [{name}]")

    def get_domain(self) -> Outcome[str]:
        """Retrieve the PDDL text of the domain."""
        with self._lock:
            return Outcome.ok(self.domain.render_domain_text())

    # =========================================================================
    # Problem queries and updates
    # =========================================================================

    def add_instance(self, instance: Instance) -> Outcome[None]:
        """Add an instance to the problem."""
        with self._lock:
            if not self.knowledge_base.add_instance(instance):
                return self._fail(f"Cannot add instance {instance}")
            return Outcome.ok()

    def remove_instance(self, name: str) -> Outcome[None]:
        """Remove the named instance from the problem."""
        with self._lock:
            if not self.knowledge_base.remove_instance(name):
                return self._fail("Instance not found", f"Removing unknown instance [{name}]")
            return Outcome.ok()

    def get_instance(self, name: str) -> Outcome[Instance]:
        """Retrieve the named instance."""
        with self._lock:
            instance = self.knowledge_base.get_instance(name)
            if instance is None:
                return self._fail("Instance not found", f"Requested unknown instance [{name}]")
            return Outcome.ok(instance)

    def get_instances(self) -> Outcome[list[Instance]]:
        """Retrieve all instances of the problem."""
        with self._lock:
            return Outcome.ok(self.knowledge_base.get_instances())

    def add_predicate(self, predicate: Predicate | str) -> Outcome[None]:
        """Add a fact to the problem, given as a Predicate or in its compact PDDL form."""
        with self._lock:
            try:
                fact = Predicate.from_string(predicate) if isinstance(predicate, str) else predicate
            except MalformedExpression as error:
                return self._fail(str(error))

            if not self.knowledge_base.add_predicate(fact):
                return self._fail(f"Cannot add predicate {fact}")
            return Outcome.ok()

    def remove_predicate(self, predicate: Predicate | str) -> Outcome[None]:
        """Remove a fact from the problem, given as a Predicate or in its compact PDDL form."""
        with self._lock:
            try:
                fact = Predicate.from_string(predicate) if isinstance(predicate, str) else predicate
            except MalformedExpression as error:
                return self._fail(str(error))

            if not self.knowledge_base.remove_predicate(fact):
                return self._fail("Predicate not found", f"Removing unknown fact {fact}")
            return Outcome.ok()

    def get_problem_predicates(self) -> Outcome[list[Predicate]]:
        """Retrieve all facts of the problem."""
        with self._lock:
            return Outcome.ok(self.knowledge_base.get_predicates())

    def set_goal(self, goal: ExpressionTree | str) -> Outcome[None]:
        """Replace the goal of the problem, given as a tree or in its compact PDDL form."""
        with self._lock:
            try:
                tree = parse_expression(goal) if isinstance(goal, str) else goal
            except MalformedExpression as error:
                return self._fail(str(error))

            self.knowledge_base.set_goal(tree)
            return Outcome.ok()

    def get_goal(self) -> Outcome[str]:
        """Retrieve the compact PDDL form of the goal (empty if there is none)."""
        with self._lock:
            return Outcome.ok(str(self.knowledge_base.get_goal()))

    def clear_goal(self) -> Outcome[None]:
        """Reset the goal of the problem."""
        with self._lock:
            self.knowledge_base.clear_goal()
            return Outcome.ok()

    def clear_knowledge(self) -> Outcome[None]:
        """Remove all instances, facts, and the goal of the problem."""
        with self._lock:
            self.knowledge_base.clear()
            return Outcome.ok()

    def get_problem(self) -> Outcome[str]:
        """Retrieve the PDDL text of the current problem."""
        with self._lock:
            return Outcome.ok(self.knowledge_base.get_problem())
