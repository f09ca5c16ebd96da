"""Implement a parser for PDDL domain definitions.

Reference: PDDL - The Planning Domain Definition Language (Version 1.2) (Ghallab et al., 1998)

Declared parameter names are replaced with canonical positional names: predicate parameters
become `?<type><index>` (e.g., `?robot0`) and action parameters become `?<index>` (e.g., `?0`),
with every condition and effect body rewritten to match.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from task_knowledge.io.logging import log_debug, log_info
from task_knowledge.pddl.domain import ActionSignature, DomainModel, DurativeActionSignature
from task_knowledge.pddl.errors import DomainParseError, MalformedExpression
from task_knowledge.pddl.expressions import (
    Conjunction,
    ExpressionNode,
    ExpressionTree,
    Param,
    Predicate,
    parse_expression,
)
from task_knowledge.pddl.pddl_scanner import PDDL_REQ_FLAGS, PDDLScanner
from task_knowledge.pddl.text_codec import (
    collapse_whitespace,
    normalize,
    split_top_level,
    strip_comments,
    unwrap,
)
from task_knowledge.pddl.type_hierarchy import ROOT_TYPE

CONDITION_TIME_SPECIFIERS = ("at start", "over all", "at end")
EFFECT_TIME_SPECIFIERS = ("at start", "at end")


@dataclass(frozen=True)
class TypedNames:
    """A list of names parsed from a PDDL typed list, along with their PDDL types."""

    names: list[str]
    pddl_types: list[str]

    def __post_init__(self) -> None:
        """Verify that there are an equal number of names and PDDL types."""
        if len(self.names) != len(self.pddl_types):
            raise RuntimeError(
                f"Found {len(self.names)} names but {len(self.pddl_types)} PDDL types.",
            )

    def __iter__(self):
        """Iterate over (name, type) pairs in declaration order."""
        return zip(self.names, self.pddl_types)


def _is_form(element: str) -> bool:
    return element.startswith("(")


class DomainParser:
    """A parser for PDDL domains consisting of types, predicates, actions, and durative actions."""

    def __init__(self, domain_text: str) -> None:
        """Validate the tokens of the given domain text and reduce it for structural parsing.

        :param domain_text: Full PDDL domain definition, e.g. `(define (domain simple) ...)`
        :raises MalformedExpression: If the text has an unknown keyword or unscannable character
        """
        self.scanner = PDDLScanner()
        self.scanner.validate(domain_text)
        self.reduced_text = normalize(collapse_whitespace(strip_comments(domain_text)))

    def domain(self, require_predicates: bool = True) -> DomainModel:
        """Parse the domain definition into a DomainModel.

        :param require_predicates: Whether a `:predicates` section is mandatory (default: True)
        :return: Parsed domain model
        :raises DomainParseError: If the domain header or a mandatory section is missing
        :raises MalformedExpression: If any section is syntactically invalid
        """
        if not self.reduced_text:
            raise DomainParseError("Cannot parse a domain from empty text.")

        elements = split_top_level(unwrap(self.reduced_text))
        if len(elements) < 2 or elements[0].lower() != "define" or not _is_form(elements[1]):
            raise DomainParseError("Expected a domain of the form '(define (domain <name>) ...)'.")

        header = split_top_level(unwrap(elements[1]))
        if len(header) != 2 or header[0].lower() != "domain" or _is_form(header[1]):
            raise DomainParseError(f"Invalid domain header: '{elements[1]}'.")

        model = DomainModel(header[1])
        found_predicates = False

        # Sections may appear in any order
        for section in elements[2:]:
            if not _is_form(section):
                raise MalformedExpression(f"Unexpected token '{section}' in domain {model.name}.")

            contents = split_top_level(unwrap(section))
            if not contents:
                raise MalformedExpression(f"Found an empty section in domain {model.name}.")

            keyword, *rest = contents
            match keyword.lower():
                case ":requirements":
                    for requirement in rest:
                        if requirement.lower() not in PDDL_REQ_FLAGS:
                            log_debug(f"Domain {model.name} uses unrecognized flag {requirement}.")
                        model.add_requirement(requirement.lower())

                case ":types":
                    self.types(rest, model)

                case ":constants":
                    for name, type_name in self.typed_list(rest):
                        model.constants[name] = type_name

                case ":predicates":
                    found_predicates = True
                    for predicate in self.predicate_defs(rest):
                        model.add_predicate(predicate)

                case ":functions":
                    for function in self.function_defs(rest):
                        model.add_function(function)

                case ":action":
                    model.add_action(self.action(rest))

                case ":durative-action":
                    model.add_durative_action(self.durative_action(rest))

                case _:
                    raise MalformedExpression(f"Unknown section '{keyword}' in {model.name}.")

        if require_predicates and not found_predicates:
            raise DomainParseError(f"Domain {model.name} has no :predicates section.")

        return model

    def typed_list(self, elements: list[str]) -> TypedNames:
        """Parse a PDDL typed list, such as `?r - robot ?r1 ?r2 - room`.

        Names without a trailing `- <type>` receive the default PDDL type `object`.

        :param elements: Top-level elements of the typed list
        :return: Parsed names and their corresponding PDDL types
        :raises MalformedExpression: If a minus is misplaced or the list contains a nested form
        """
        names: list[str] = []
        types: list[str] = []
        names_awaiting_types = 0

        idx = 0
        while idx < len(elements):
            element = elements[idx]

            if element == "-":  # Match "-" and the following type
                if not names_awaiting_types or idx + 1 >= len(elements):
                    raise MalformedExpression(f"Unexpected minus in typed list: {elements}")

                parent_type = elements[idx + 1]
                if _is_form(parent_type):
                    raise MalformedExpression(f"Unsupported type expression '{parent_type}'.")

                types.extend([parent_type] * names_awaiting_types)
                names_awaiting_types = 0
                idx += 2
                continue

            if _is_form(element):
                raise MalformedExpression(f"Unexpected form '{element}' in typed list.")

            names.append(element)
            names_awaiting_types += 1
            idx += 1

        types.extend([ROOT_TYPE] * names_awaiting_types)  # Default parent type in PDDL
        return TypedNames(names, types)

    def types(self, elements: list[str], model: DomainModel) -> None:
        """Parse the body of a `:types` section into the model's type hierarchy.

        :raises DomainParseError: If the declared types form a cycle
        """
        typed_types = self.typed_list(elements)
        for type_name in typed_types.names:  # Record the types in declaration order first
            model.types.add_type(type_name)

        for type_name, parent in typed_types:
            try:
                model.types.add_type(type_name, None if parent == ROOT_TYPE else parent)
            except ValueError as error:
                raise DomainParseError(f"Invalid :types in domain {model.name}: {error}") from error

    def predicate_defs(self, elements: Iterable[str]) -> list[Predicate]:
        """Parse PDDL predicate definitions, assigning canonical parameter names.

        :param elements: Top-level elements of a `:predicates` section
        :return: List of parsed predicate signatures
        """
        return [self.predicate_def(element) for element in elements]

    def predicate_def(self, form: str) -> Predicate:
        """Parse a single PDDL predicate definition, e.g. `(robot_at ?r - robot ?ro - room)`."""
        if not _is_form(form):
            raise MalformedExpression(f"Expected a predicate definition but found '{form}'.")

        contents = split_top_level(unwrap(form))
        if not contents or _is_form(contents[0]):
            raise MalformedExpression(f"Predicate definition '{form}' is missing its name.")

        name, *param_elements = contents
        typed_params = self.typed_list(param_elements)
        parameters = tuple(
            Param(f"?{p_type}{idx}", p_type) for idx, p_type in enumerate(typed_params.pddl_types)
        )
        return Predicate(name, parameters)

    def function_defs(self, elements: list[str]) -> list[Predicate]:
        """Parse PDDL function definitions, ignoring any declared return type (e.g., `- number`)."""
        functions: list[Predicate] = []
        idx = 0
        while idx < len(elements):
            if elements[idx] == "-":  # Skip the return type following a function
                idx += 2
                continue
            functions.append(self.predicate_def(elements[idx]))
            idx += 1
        return functions

    def action_fields(self, elements: list[str], allowed: set[str]) -> dict[str, str]:
        """Parse the `:keyword value` pairs of an action definition.

        :param elements: Top-level elements following the action's name
        :param allowed: Keywords permitted in this kind of action
        :return: Map from each keyword to its (reduced) value
        """
        fields: dict[str, str] = {}
        if len(elements) % 2 != 0:
            raise MalformedExpression(f"Expected keyword-value pairs but found {elements}")

        for keyword, value in zip(elements[::2], elements[1::2]):
            if keyword.lower() not in allowed:
                raise MalformedExpression(f"Unexpected keyword '{keyword}' in action definition.")
            fields[keyword.lower()] = value

        return fields

    def action_parameters(self, form: str | None) -> tuple[tuple[Param, ...], dict[str, str]]:
        """Parse an action's parameter list, assigning canonical names `?0`, `?1`, ...

        :param form: Parenthesized parameter list, or None if the action has no parameters
        :return: Tuple of canonical parameters and the binding from declared to canonical names
        """
        if form is None:
            return (), {}

        typed_params = self.typed_list(split_top_level(unwrap(form)))
        parameters: list[Param] = []
        binding: dict[str, str] = {}
        for idx, (declared_name, p_type) in enumerate(typed_params):
            binding[declared_name] = f"?{idx}"
            parameters.append(Param(f"?{idx}", p_type))

        return tuple(parameters), binding

    def body(self, text: str | None) -> ExpressionTree:
        """Parse a condition or effect body, treating a missing body or `()` as empty."""
        if text is None or text == "()":
            return ExpressionTree()
        return parse_expression(text)

    def action(self, elements: list[str]) -> ActionSignature:
        """Parse the contents of an `(:action ...)` section following the keyword."""
        if not elements or _is_form(elements[0]) or elements[0].startswith(":"):
            raise DomainParseError("Action definition is missing its name.")

        name = elements[0]
        fields = self.action_fields(elements[1:], {":parameters", ":precondition", ":effect"})
        parameters, binding = self.action_parameters(fields.get(":parameters"))

        return ActionSignature(
            name,
            parameters,
            preconditions=self.body(fields.get(":precondition")).substitute(binding),
            effects=self.body(fields.get(":effect")).substitute(binding),
        )

    def durative_action(self, elements: list[str]) -> DurativeActionSignature:
        """Parse the contents of a `(:durative-action ...)` section following the keyword."""
        if not elements or _is_form(elements[0]) or elements[0].startswith(":"):
            raise DomainParseError("Durative action definition is missing its name.")

        name = elements[0]
        fields = self.action_fields(
            elements[1:],
            {":parameters", ":duration", ":condition", ":effect"},
        )
        parameters, binding = self.action_parameters(fields.get(":parameters"))

        conditions = self.timed_phases(fields.get(":condition"), CONDITION_TIME_SPECIFIERS)
        effects = self.timed_phases(fields.get(":effect"), EFFECT_TIME_SPECIFIERS)

        return DurativeActionSignature(
            name,
            parameters,
            at_start_requirements=conditions["at start"].substitute(binding),
            over_all_requirements=conditions["over all"].substitute(binding),
            at_end_requirements=conditions["at end"].substitute(binding),
            at_start_effects=effects["at start"].substitute(binding),
            at_end_effects=effects["at end"].substitute(binding),
            duration=fields.get(":duration", ""),
        )

    def timed_phases(
        self,
        text: str | None,
        time_specifiers: tuple[str, ...],
    ) -> dict[str, ExpressionTree]:
        """Split a timed condition or effect into one expression tree per temporal phase.

        Example: `(and (at start (p ?x))(at end (q ?x)))` yields `(and (p ?x))` for "at start"
        and `(and (q ?x))` for "at end"; phases without terms yield empty trees.

        :param text: Timed expression, or None if the durative action omits it
        :param time_specifiers: Permitted time specifiers (e.g., "at start", "over all")
        :return: Map from each time specifier to a conjunction of its terms (or an empty tree)
        :raises MalformedExpression: If a term lacks a valid time specifier
        """
        phase_terms: dict[str, list[ExpressionNode]] = {spec: [] for spec in time_specifiers}

        if text is not None and text != "()":
            elements = split_top_level(unwrap(text))
            timed_terms = elements[1:] if elements and elements[0].lower() == "and" else [text]

            for term in timed_terms:
                parts = split_top_level(unwrap(term))
                if len(parts) != 3 or not _is_form(parts[2]):
                    raise MalformedExpression(f"Expected a timed expression but found '{term}'.")

                time_spec = f"{parts[0].lower()} {parts[1].lower()}"
                if time_spec not in phase_terms:
                    raise MalformedExpression(f"Unexpected time specifier in '{term}'.")

                root = parse_expression(parts[2]).root
                if isinstance(root, Conjunction):  # Flatten `(at start (and ...))`
                    phase_terms[time_spec].extend(root.operands)
                elif root is not None:
                    phase_terms[time_spec].append(root)

        return {
            spec: ExpressionTree(Conjunction(tuple(terms))) if terms else ExpressionTree()
            for spec, terms in phase_terms.items()
        }


def parse_domain(domain_text: str) -> DomainModel:
    """Parse a PDDL domain definition into a DomainModel.

    :param domain_text: Full PDDL domain definition
    :return: Parsed domain model
    :raises DomainParseError: If the header or `:predicates` section is missing
    :raises MalformedExpression: If the text is syntactically invalid
    """
    model = DomainParser(domain_text).domain()
    log_info(f"Parsed {model}.")
    return model


def extend_domain(model: DomainModel, domain_text: str) -> DomainModel:
    """Parse an additional domain definition and merge it into the given model in place.

    Definitions whose names already exist in the model are replaced (last-write-wins), which
    supports multi-file domains where later files refine earlier ones.

    :param model: Domain model to be extended
    :param domain_text: PDDL domain definition to merge into the model
    :return: The extended domain model
    :raises DomainParseError: If the fragment's types would make the domain's types cyclic
    """
    fragment = DomainParser(domain_text).domain(require_predicates=False)
    try:
        model.merge(fragment)
    except ValueError as error:
        raise DomainParseError(f"Cannot extend domain {model.name}: {error}") from error
    log_info(f"Extended domain {model.name} using domain {fragment.name}.")
    return model


def load_domain_files(paths: Iterable[Path]) -> DomainModel:
    """Load a domain from one or more PDDL files; later files extend the first.

    :param paths: Paths to PDDL domain files (at least one)
    :return: Domain model combining all of the files
    """
    paths = list(paths)
    if not paths:
        raise ValueError("At least one PDDL domain file is required.")

    for path in paths:
        if not path.exists():
            raise FileNotFoundError(f"Cannot load nonexistent PDDL domain file: {path}")

    model = parse_domain(paths[0].read_text())
    for path in paths[1:]:
        extend_domain(model, path.read_text())

    return model
