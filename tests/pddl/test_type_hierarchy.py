"""Unit tests for the TypeHierarchy class."""

import pytest

from task_knowledge.pddl import TypeHierarchy


@pytest.fixture
def vehicle_types() -> TypeHierarchy:
    """Construct a hierarchy in which `car` and `truck` are kinds of `vehicle`."""
    hierarchy = TypeHierarchy()
    hierarchy.add_type("car", "vehicle")
    hierarchy.add_type("truck", "vehicle")
    hierarchy.add_type("location")
    return hierarchy


def test_add_type_keeps_first_seen_order(vehicle_types: TypeHierarchy) -> None:
    """Verify that parent types are appended after the first child that names them."""
    # Act/Assert - Expect each type once, in the order it was first seen
    assert vehicle_types.types == ["car", "vehicle", "truck", "location"]
    assert len(vehicle_types) == 4
    assert "vehicle" in vehicle_types
    assert "object" in vehicle_types  # Implicit root type, never listed
    assert "boat" not in vehicle_types


def test_add_type_reports_new_types(vehicle_types: TypeHierarchy) -> None:
    """Verify that add_type() returns True only for previously unknown types."""
    # Act/Assert - Expect False for a known type and for the implicit root type
    assert not vehicle_types.add_type("car")
    assert not vehicle_types.add_type("object")
    assert vehicle_types.add_type("bicycle", "vehicle")


def test_parents_and_children(vehicle_types: TypeHierarchy) -> None:
    """Verify that parent and child relationships are recorded."""
    # Act/Assert - Expect the declared parents and children
    assert vehicle_types.get_parent("car") == "vehicle"
    assert vehicle_types.get_parent("vehicle") is None
    assert vehicle_types.get_children("vehicle") == ["car", "truck"]

    with pytest.raises(KeyError):
        vehicle_types.get_parent("boat")


def test_cyclic_types_are_rejected(vehicle_types: TypeHierarchy) -> None:
    """Verify that a type cannot become its own ancestor, leaving the hierarchy unchanged."""
    # Act/Assert - Expect an error when `vehicle` is made a subtype of `car`
    with pytest.raises(ValueError):
        vehicle_types.add_type("vehicle", "car")

    with pytest.raises(ValueError):
        vehicle_types.add_type("car", "car")

    # Assert - Expect the earlier relationships to remain intact
    assert vehicle_types.get_parent("vehicle") is None
    assert vehicle_types.get_parent("car") == "vehicle"
    assert vehicle_types.get_children("car") == []
    vehicle_types.validate()


def test_is_subtype(vehicle_types: TypeHierarchy) -> None:
    """Verify that subtype checks walk up the hierarchy to the implicit root type."""
    # Act/Assert - Expect every type to be a subtype of itself, its ancestors, and `object`
    assert vehicle_types.is_subtype("car", "car")
    assert vehicle_types.is_subtype("car", "vehicle")
    assert vehicle_types.is_subtype("location", "object")
    assert not vehicle_types.is_subtype("vehicle", "car")
    assert not vehicle_types.is_subtype("truck", "location")


def test_copy_is_independent(vehicle_types: TypeHierarchy) -> None:
    """Verify that changes to a copied hierarchy do not affect the original."""
    # Act - Add a type to a copy of the hierarchy
    copied = vehicle_types.copy()
    copied.add_type("van", "vehicle")

    # Assert - Expect only the copy to contain the new type
    assert "van" in copied
    assert copied.get_children("vehicle") == ["car", "truck", "van"]
    assert "van" not in vehicle_types
    assert vehicle_types.get_children("vehicle") == ["car", "truck"]


def test_merge_appends_new_types(vehicle_types: TypeHierarchy) -> None:
    """Verify that merging hierarchies appends unknown types after existing ones."""
    # Arrange - Another hierarchy sharing the `vehicle` type
    other = TypeHierarchy()
    other.add_type("van", "vehicle")
    other.add_type("location")

    # Act - Merge the other hierarchy into the first
    vehicle_types.merge(other)

    # Assert - Expect the new type at the end, under its declared parent
    assert vehicle_types.types == ["car", "vehicle", "truck", "location", "van"]
    assert vehicle_types.get_parent("van") == "vehicle"


def test_to_pddl_lists_root_types_last(vehicle_types: TypeHierarchy) -> None:
    """Verify that the PDDL `:types` body groups children and lists root types last."""
    # Act/Assert - Expect a typed list that assigns no parent to the root types
    assert vehicle_types.to_pddl() == "car truck - vehicle\nvehicle location"
