"""Symbolic knowledge layer for task planning: PDDL domains, expressions, and problem state."""
