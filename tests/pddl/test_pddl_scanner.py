"""Unit tests for the PDDLScanner class."""

import pytest

from task_knowledge.pddl import MalformedExpression, PDDLScanner, PDDLTokenType


def test_scan_simple_domain(domain_simple: str) -> None:
    """Verify that the PDDLScanner class can scan the `simple` PDDL domain."""
    # Arrange - PDDL text is provided by the test fixture
    scanner = PDDLScanner()

    # Act/Assert - Scan the PDDL domain and expect that no token is a mismatch or comment
    for token in scanner.tokenize(domain_simple):
        assert token.type_ != PDDLTokenType.MISMATCH, f"Mismatched token: {token}."
        assert token.type_ != PDDLTokenType.COMMENT, f"Unskipped comment: {token}."


def test_scan_duration_constraint() -> None:
    """Verify that a duration constraint is scanned into the expected token types."""
    # Arrange - A duration constraint from a durative action
    scanner = PDDLScanner()

    # Act - Scan the constraint
    token_types = [token.type_ for token in scanner.tokenize("(= ?duration 5.5)")]

    # Assert - Expect a comparator, a variable, and a number within parentheses
    assert token_types == [
        PDDLTokenType.OPEN_PAREN,
        PDDLTokenType.COMPARATOR,
        PDDLTokenType.VARIABLE,
        PDDLTokenType.NUMBER,
        PDDLTokenType.CLOSE_PAREN,
    ]


def test_scan_tracks_lines_and_columns() -> None:
    """Verify that scanned tokens record the line and column where they begin."""
    # Arrange - PDDL text spanning two lines
    scanner = PDDLScanner()

    # Act - Scan the text
    tokens = list(scanner.tokenize("(:types\n  robot)"))

    # Assert - Expect the name `robot` to begin on line 2, column 2
    robot = tokens[2]
    assert robot.value == "robot"
    assert (robot.line, robot.column) == (2, 2)


@pytest.mark.parametrize(
    "text",
    ["(:unknown-section robot)", "(robot_at r2d2 #bedroom)", "(:types person\n robot & room)"],
)
def test_validate_rejects_invalid_text(text: str) -> None:
    """Verify that unknown keywords and unscannable characters are rejected."""
    # Arrange - Create a scanner for the invalid text
    scanner = PDDLScanner()

    # Act/Assert - Expect that validating the text raises an error
    with pytest.raises(MalformedExpression):
        scanner.validate(text)


def test_validate_counts_tokens() -> None:
    """Verify that validate() returns the number of tokens scanned."""
    # Act/Assert - Expect five tokens: two parentheses and three names
    assert PDDLScanner().validate("(robot_at r2d2 bedroom) ; comment") == 5


def test_validate_accepts_any_requirement_flag() -> None:
    """Verify that requirement flags are scanned even when they are not recognized."""
    # Arrange - A requirements section followed by an unknown section keyword
    scanner = PDDLScanner()
    requirements = "(:requirements :strips :derived-predicates :preferences)"

    # Act/Assert - Expect the flags to be accepted, but not an unknown keyword after the section
    assert scanner.validate(requirements) == 6

    with pytest.raises(MalformedExpression):
        scanner.validate(requirements + " (:constraints (p))")
