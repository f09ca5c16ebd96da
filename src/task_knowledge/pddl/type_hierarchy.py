"""Define a class to represent hierarchies of object types."""

from __future__ import annotations

from collections import defaultdict

ROOT_TYPE = "object"
"""Every PDDL type without a declared parent is implicitly a subtype of `object`."""


class TypeHierarchy:
    """An ordered collection of object types, permitting types to have a parent type."""

    def __init__(self) -> None:
        """Initialize an empty type hierarchy."""
        self._to_parent: dict[str, str | None] = {}
        """A map from each type (in first-seen order) to its parent type, or None if it has none."""

        self._to_children: dict[str, list[str]] = defaultdict(list)
        """A map from each parent type to its child types (in first-seen order)."""

    def __contains__(self, type_name: str) -> bool:
        """Evaluate whether the named type belongs to the hierarchy (`object` always does)."""
        return type_name == ROOT_TYPE or type_name in self._to_parent

    def __len__(self) -> int:
        """Retrieve the number of types in the hierarchy."""
        return len(self._to_parent)

    @property
    def types(self) -> list[str]:
        """Retrieve all types in the hierarchy, in first-seen order."""
        return list(self._to_parent)

    def add_type(self, type_name: str, parent: str | None = None) -> bool:
        """Add a type to the hierarchy, or set the parent of an already-known type.

        :param type_name: Name of the type to be added
        :param parent: Optional parent type, added after the child if not yet known
        :return: True if the type was not previously in the hierarchy, else False
        :raises ValueError: If the parent would make the type its own ancestor
        """
        if type_name == ROOT_TYPE:
            return False

        if parent is not None and self.is_subtype(parent, type_name):
            raise ValueError(f"Type '{type_name}' cannot have parent '{parent}': cyclic hierarchy.")

        is_new = type_name not in self._to_parent
        if is_new:
            self._to_parent[type_name] = None

        if parent is not None and parent != ROOT_TYPE:
            self.add_type(parent)
            self._set_parent(type_name, parent)

        return is_new

    def _set_parent(self, child: str, parent: str) -> None:
        """Record the parent of a type, replacing any earlier parent."""
        previous = self._to_parent[child]
        if previous == parent:
            return

        if previous is not None:
            self._to_children[previous].remove(child)

        self._to_parent[child] = parent
        self._to_children[parent].append(child)
        self.validate()

    def get_parent(self, type_name: str) -> str | None:
        """Retrieve the parent of the named type, or None if it has no declared parent."""
        if type_name == ROOT_TYPE:
            return None
        if type_name not in self._to_parent:
            raise KeyError(f"Unknown object type: '{type_name}'.")
        return self._to_parent[type_name]

    def get_children(self, type_name: str) -> list[str]:
        """Retrieve the declared child types of the named type."""
        return list(self._to_children.get(type_name, []))

    def is_subtype(self, type_name: str, ancestor: str) -> bool:
        """Evaluate whether a type equals or descends from the given ancestor type.

        Every type descends from `object`; unknown types descend only from themselves.
        """
        if ancestor == ROOT_TYPE:
            return True

        current: str | None = type_name
        while current is not None:
            if current == ancestor:
                return True
            current = self._to_parent.get(current)
        return False

    def copy(self) -> TypeHierarchy:
        """Create an independent copy of the type hierarchy."""
        hierarchy = TypeHierarchy()
        hierarchy._to_parent = dict(self._to_parent)
        for parent, children in self._to_children.items():
            hierarchy._to_children[parent] = list(children)
        return hierarchy

    def merge(self, other: TypeHierarchy) -> None:
        """Add all types of another hierarchy to this one, keeping first-seen order overall."""
        for type_name in other.types:
            self.add_type(type_name, other.get_parent(type_name))

    def to_pddl(self) -> str:
        """Return the body of a PDDL `:types` section, grouping child types by their parent.

        Types without a parent are listed last, since any untyped names preceding a `- parent`
        in a PDDL typed list would be assigned that parent.
        """
        groups: dict[str, list[str]] = {}
        roots: list[str] = []
        for type_name, parent in self._to_parent.items():
            if parent is None:
                roots.append(type_name)
            else:
                groups.setdefault(parent, []).append(type_name)

        lines = [f"{' '.join(children)} - {parent}" for parent, children in groups.items()]
        if roots:
            lines.append(" ".join(roots))
        return "\n".join(lines)

    def validate(self) -> None:
        """Verify that the current contents of the type hierarchy are consistent.

        :raises ValueError: If the hierarchy contains contradictory or cyclic relationships
        """
        for parent_type, children in self._to_children.items():
            for child_type in children:
                if self._to_parent.get(child_type) != parent_type:
                    raise ValueError(
                        f"Parent type {parent_type} has child {child_type} but the "
                        f"parent of {child_type} is {self._to_parent.get(child_type)}",
                    )

        for type_name in self._to_parent:
            seen = {type_name}
            ancestor = self._to_parent[type_name]
            while ancestor is not None:
                if ancestor in seen:
                    raise ValueError(f"Type '{type_name}' is its own ancestor.")
                seen.add(ancestor)
                ancestor = self._to_parent.get(ancestor)
