"""Define test fixtures providing example PDDL domains, knowledge bases, and configs."""

from pathlib import Path
from textwrap import dedent

import pytest

from task_knowledge.knowledge import Instance, ProblemKnowledgeBase
from task_knowledge.pddl import DomainModel, parse_domain


@pytest.fixture
def domain_simple() -> str:
    """Return a string containing a domain of a robot that moves between rooms and talks."""
    return dedent("""\
        (define (domain simple)
        (:requirements :strips :typing :adl :fluents :durative-actions)

        ;; Types ;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;
        (:types
        person
        message
        robot
        room
        );; end Types ;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;

        ;; Predicates ;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;
        (:predicates

        (robot_talk ?r - robot ?m - message ?p - person)
        (robot_near_person ?r - robot ?p - person)
        (robot_at ?r - robot ?ro - room)
        (person_at ?p - person ?ro - room)

        );; end Predicates ;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;
        ;; Functions ;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;
        (:functions

        );; end Functions ;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;
        ;; Actions ;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;
        (:durative-action move
            :parameters (?r - robot ?r1 ?r2 - room)
            :duration ( = ?duration 5)
            :condition (and
                (at start(robot_at ?r ?r1))
                )
            :effect (and
                (at start(not(robot_at ?r ?r1)))
                (at end(robot_at ?r ?r2))
            )
        )

        (:durative-action talk
            :parameters (?r - robot ?from ?p - person ?m - message)
            :duration ( = ?duration 5)
            :condition (and
                (over all(robot_near_person ?r ?p))
            )
            :effect (and
                (at end(robot_talk ?r ?m ?p))
            )
        )

        (:durative-action approach
            :parameters (?r - robot ?r1 ?r2 - room ?p - person)
            :duration ( = ?duration 5)
            :condition (and
                (over all(robot_at ?r ?r1))
                (over all(person_at ?p ?r2))
            )
            :effect (and
                (at end(robot_near_person ?r ?p))
            )
        )

        (:action move_person
            :parameters (?p - person ?r1 ?r2 - room)
            :precondition (and
                (person_at ?p ?r1)
            )
            :effect (and
                (person_at ?p ?r2)
                (not(person_at ?p ?r1))
            )
        )

        ;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;;
        )
        """)


@pytest.fixture
def domain_charging() -> str:
    """Return a string containing a domain fragment that extends the `simple` domain."""
    return dedent("""\
        (define (domain charging)
        (:requirements :strips :typing :negative-preconditions)
        (:types
            station - room
            charger
        )
        (:predicates
            (robot_at ?r - robot ?s - station)
            (battery_full ?r - robot)
        )
        (:action charge
            :parameters (?r - robot ?s - station)
            :precondition (and (robot_at ?r ?s) (not (battery_full ?r)))
            :effect (battery_full ?r)
        )
        )
        """)


@pytest.fixture
def simple_domain(domain_simple: str) -> DomainModel:
    """Return the parsed `simple` domain."""
    return parse_domain(domain_simple)


@pytest.fixture
def simple_knowledge_base(simple_domain: DomainModel) -> ProblemKnowledgeBase:
    """Return a knowledge base for the `simple` domain containing a person, robot, and rooms."""
    knowledge_base = ProblemKnowledgeBase(simple_domain)
    for name, pddl_type in [
        ("paco", "person"),
        ("r2d2", "robot"),
        ("bedroom", "room"),
        ("kitchen", "room"),
    ]:
        assert knowledge_base.add_instance(Instance(name, pddl_type))
    return knowledge_base


@pytest.fixture
def knowledge_config_yaml(tmp_path: Path, domain_simple: str) -> Path:
    """Write the `simple` domain and a knowledge config using it to a temporary directory."""
    (tmp_path / "domain_simple.pddl").write_text(domain_simple)

    config_path = tmp_path / "knowledge.yaml"
    config_path.write_text(
        dedent("""\
            model_files: [domain_simple.pddl]
            instances:
              paco: person
              r2d2: robot
              bedroom: room
              kitchen: room
            facts:
              - (robot_at r2d2 bedroom)
              - (person_at paco kitchen)
            goal: (and (robot_at r2d2 kitchen))
            """),
    )
    return config_path
