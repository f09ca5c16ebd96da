"""Define Pydantic models for validating knowledge configuration YAML files.

A knowledge config names the PDDL files defining a domain and, optionally, the initial
contents of a planning problem in that domain:

    model_files: [domain.pddl, extra.pddl]
    problem_name: problem_1
    check_argument_types: false
    instances: {paco: person, r2d2: robot}
    facts: ["(robot_at r2d2 bedroom)"]
    goal: "(and (robot_at r2d2 bedroom))"
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, ValidationError

from task_knowledge.io.logging import log_info
from task_knowledge.io.yaml_utils import export_yaml_data, load_yaml_data
from task_knowledge.knowledge.knowledge_service import KnowledgeService
from task_knowledge.knowledge.outcome import Outcome
from task_knowledge.knowledge.problem import DEFAULT_PROBLEM_NAME, Instance, ProblemKnowledgeBase
from task_knowledge.pddl.domain_parser import load_domain_files


class KnowledgeConfigSchema(BaseModel):
    """Schema for a domain (given as PDDL files) and the initial state of a problem."""

    model_files: List[str] = Field(min_length=1)
    """Paths to PDDL domain files; the first is the base domain and the rest extend it."""

    problem_name: str = DEFAULT_PROBLEM_NAME
    check_argument_types: bool = False

    instances: Dict[str, str] = Field(default_factory=dict)
    """Map from the name of each object instance to its type (in insertion order)."""

    facts: List[str] = Field(default_factory=list)
    """Initial facts in compact PDDL form, e.g. "(robot_at r2d2 bedroom)"."""

    goal: Optional[str] = None
    """Goal expression in compact PDDL form (no goal if omitted)."""

    model_config = ConfigDict(extra="forbid")

    _base_dir: Path = PrivateAttr(default_factory=Path.cwd)

    @classmethod
    def validate_yaml(cls, yaml_path: Path) -> KnowledgeConfigSchema:
        """Validate a knowledge config YAML file and return the resulting schema.

        :param yaml_path: Path to a YAML file to be validated by the schema
        :return: Validated KnowledgeConfigSchema instance
        """
        yaml_data = load_yaml_data(yaml_path)

        try:
            config = KnowledgeConfigSchema.model_validate(yaml_data)
        except ValidationError as v_err:
            raise RuntimeError(f"Validation error in {yaml_path}: {v_err}") from v_err

        config._base_dir = yaml_path.resolve().parent
        return config

    @property
    def model_paths(self) -> list[Path]:
        """Retrieve the paths of the model files, resolving relative paths from the YAML file."""
        return [self._base_dir / Path(model_file) for model_file in self.model_files]


def populate_knowledge(service: KnowledgeService, config: KnowledgeConfigSchema) -> list[Outcome]:
    """Apply the instances, facts, and goal of a knowledge config to a knowledge service.

    :param service: Knowledge service to be updated
    :param config: Validated knowledge config
    :return: List of failed outcomes, one per rejected entry (empty if everything was accepted)
    """
    outcomes = [service.add_instance(Instance(name, t)) for name, t in config.instances.items()]
    outcomes.extend(service.add_predicate(fact) for fact in config.facts)
    if config.goal is not None:
        outcomes.append(service.set_goal(config.goal))

    return [outcome for outcome in outcomes if not outcome.success]


def build_knowledge_service(
    config: KnowledgeConfigSchema,
    populate: bool = True,
) -> KnowledgeService:
    """Construct a knowledge service from a validated knowledge config.

    :param config: Validated knowledge config
    :param populate: Whether to apply the config's instances, facts, and goal (default: True)
    :return: Knowledge service over the configured domain and problem
    """
    domain = load_domain_files(config.model_paths)
    knowledge_base = ProblemKnowledgeBase(
        domain,
        problem_name=config.problem_name,
        check_argument_types=config.check_argument_types,
    )
    service = KnowledgeService(domain, knowledge_base)

    if populate:
        rejected = populate_knowledge(service, config)
        log_info(f"Loaded {knowledge_base} ({len(rejected)} entries rejected).")

    return service


def export_knowledge_config(
    service: KnowledgeService,
    config: KnowledgeConfigSchema,
    yaml_path: Path,
) -> None:
    """Export the current problem state of a knowledge service as a knowledge config YAML file.

    :param service: Knowledge service whose instances, facts, and goal are exported
    :param config: Config from which the service was built (provides the model files)
    :param yaml_path: Path to the output YAML file
    """
    knowledge_base = service.knowledge_base
    data = {
        "model_files": [str(path) for path in config.model_paths],
        "problem_name": knowledge_base.problem_name,
        "check_argument_types": knowledge_base.check_argument_types,
        "instances": {i.name: i.type for i in knowledge_base.get_instances()},
        "facts": [str(fact) for fact in knowledge_base.get_predicates()],
    }

    goal = knowledge_base.get_goal()
    if not goal.is_empty():
        data["goal"] = str(goal)

    export_yaml_data(data, yaml_path)
