"""Unit tests for loading knowledge configs from YAML files."""

from __future__ import annotations

from pathlib import Path

import pytest

from task_knowledge.io.config_schemata import (
    KnowledgeConfigSchema,
    build_knowledge_service,
    export_knowledge_config,
    populate_knowledge,
)
from task_knowledge.knowledge import Instance


def test_validate_yaml(knowledge_config_yaml: Path) -> None:
    """Verify that a knowledge config is validated and its model paths are resolved."""
    # Act - Validate the config provided by the test fixture
    config = KnowledgeConfigSchema.validate_yaml(knowledge_config_yaml)

    # Assert - Expect defaults for omitted fields and paths relative to the YAML file
    assert config.problem_name == "problem_1"
    assert not config.check_argument_types
    assert list(config.instances) == ["paco", "r2d2", "bedroom", "kitchen"]
    assert config.model_paths == [knowledge_config_yaml.resolve().parent / "domain_simple.pddl"]


def test_build_knowledge_service(knowledge_config_yaml: Path) -> None:
    """Verify that a knowledge service is populated with the configured problem."""
    # Arrange - Validate the config provided by the test fixture
    config = KnowledgeConfigSchema.validate_yaml(knowledge_config_yaml)

    # Act - Build the knowledge service
    service = build_knowledge_service(config)

    # Assert - Expect the configured instances, facts, and goal
    assert service.get_instance("paco").output == Instance("paco", "person")
    assert len(service.get_problem_predicates().output) == 2
    assert service.get_goal().output == "(and (robot_at r2d2 kitchen))"


def test_populate_knowledge_reports_rejections(tmp_path: Path, domain_simple: str) -> None:
    """Verify that rejected instances and facts are reported as failed outcomes."""
    # Arrange - A config with an unknown type and an unknown predicate
    (tmp_path / "domain.pddl").write_text(domain_simple)
    config = KnowledgeConfigSchema(
        model_files=["domain.pddl"],
        instances={"r2d2": "robot", "hal": "computer"},
        facts=["(robot_at r2d2 bedroom)", "(robot_flies r2d2)"],
    )
    config._base_dir = tmp_path
    service = build_knowledge_service(config, populate=False)

    # Act - Apply the config to the service
    rejected = populate_knowledge(service, config)

    # Assert - Expect two rejections, leaving one instance and one fact
    assert len(rejected) == 2
    assert [i.name for i in service.get_instances().output] == ["r2d2"]
    assert len(service.get_problem_predicates().output) == 1


@pytest.mark.parametrize(
    "contents",
    [
        "model_files: []\n",
        "model_files: [domain.pddl]\nunknown_field: 3\n",
        "problem_name: problem_2\n",
        "model_files: [domain.pddl\n",
    ],
)
def test_invalid_config_is_rejected(tmp_path: Path, contents: str) -> None:
    """Verify that invalid YAML and configs violating the schema raise a RuntimeError."""
    # Arrange - Write the invalid config to a file
    yaml_path = tmp_path / "invalid.yaml"
    yaml_path.write_text(contents)

    # Act/Assert - Expect a RuntimeError wrapping the YAML or validation error
    with pytest.raises(RuntimeError):
        KnowledgeConfigSchema.validate_yaml(yaml_path)


def test_missing_config_is_rejected(tmp_path: Path) -> None:
    """Verify that loading a nonexistent config raises a FileNotFoundError."""
    # Act/Assert - Expect a FileNotFoundError
    with pytest.raises(FileNotFoundError):
        KnowledgeConfigSchema.validate_yaml(tmp_path / "missing.yaml")


def test_export_knowledge_config(knowledge_config_yaml: Path, tmp_path: Path) -> None:
    """Verify that an exported knowledge config rebuilds an identical problem."""
    # Arrange - Build a service from the config provided by the test fixture
    config = KnowledgeConfigSchema.validate_yaml(knowledge_config_yaml)
    service = build_knowledge_service(config)
    export_path = tmp_path / "exports" / "exported.yaml"  # Directory is created on export

    # Act - Export the service's knowledge and rebuild a service from the exported config
    export_knowledge_config(service, config, export_path)
    rebuilt = build_knowledge_service(KnowledgeConfigSchema.validate_yaml(export_path))

    # Assert - Expect the same problem text
    assert rebuilt.get_problem().output == service.get_problem().output
