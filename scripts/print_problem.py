"""Build a planning problem from a knowledge config YAML file and print it as PDDL."""

import sys
from pathlib import Path

from task_knowledge.io.config_schemata import KnowledgeConfigSchema, build_knowledge_service
from task_knowledge.io.logging import console


def main() -> None:
    """Load the knowledge config given on the command line and print the domain and problem."""
    if len(sys.argv) != 2:
        console.print("[red]Usage: print_problem.py CONFIG_YAML[/]")
        sys.exit(1)

    config = KnowledgeConfigSchema.validate_yaml(Path(sys.argv[1]))
    service = build_knowledge_service(config)

    print(service.get_domain().output)
    print(service.get_problem().output)


if __name__ == "__main__":
    main()
