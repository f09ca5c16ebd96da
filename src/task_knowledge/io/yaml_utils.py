"""Define utility functions for importing and exporting to/from YAML files."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml


def export_yaml_data(data: dict[str, Any], filepath: Path) -> None:
    """Write a YAML mapping to the given file, creating its directory if necessary.

    Mapping keys keep their insertion order, so exported configs read like hand-written ones.
    """
    filepath.parent.mkdir(parents=True, exist_ok=True)
    with filepath.open("w") as file:
        yaml.safe_dump(data, file, sort_keys=False)


def load_yaml_data(yaml_path: Path) -> Any:
    """Load the document of a YAML file, such as a knowledge config.

    :param yaml_path: Path to the YAML file to be loaded
    :return: Loaded document (None if the file is empty)
    :raises FileNotFoundError: If the file does not exist
    :raises RuntimeError: If the file is not valid YAML
    """
    if not yaml_path.exists():
        raise FileNotFoundError(f"Cannot load data from nonexistent YAML file: {yaml_path}")

    try:
        with yaml_path.open() as yaml_file:
            return yaml.safe_load(yaml_file)
    except yaml.YAMLError as error:
        raise RuntimeError(f"Invalid YAML in knowledge file {yaml_path}: {error}") from error
