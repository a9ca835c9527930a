"""
Lexical environments for the rinha evaluator.
"""

from typing import Any, Dict, Optional


class Scope:
    """Represents a rinha scope: its own bindings plus a lexical parent.

    Lookups walk the parent chain; writes always land in this scope. `let`
    and calls create a fresh child scope per frame, and each closure owns a
    child of the scope it was created in, so a name patched into a closure's
    scope is visible to the closure and never to its siblings.
    """
    def __init__(self, parent: Optional['Scope'] = None):
        self.bindings: Dict[str, Any] = {}
        self.parent = parent

    def __setitem__(self, key: str, value: Any):
        if not isinstance(key, str):
            raise TypeError(f"Scope key must be a str, not {type(key)}")
        self.bindings[key] = value

    def __getitem__(self, key: str) -> Any:
        owner = self.find_owner(key)
        if owner is not None:
            return owner.bindings[key]
        raise KeyError(key)

    def find_owner(self, key: str) -> Optional['Scope']:
        """Finds the Scope in the lookup chain that owns key."""
        scope = self
        while scope is not None:
            if key in scope.bindings:
                return scope
            scope = scope.parent
        return None

    def child(self) -> 'Scope':
        return Scope(parent=self)

    def visible_names(self) -> set:
        """Every name visible from this scope, parents included."""
        names = set()
        scope = self
        while scope is not None:
            names.update(scope.bindings)
            scope = scope.parent
        return names

    def __repr__(self) -> str:
        keys = ', '.join(self.bindings.keys())
        parent_id = f", parent=#{id(self.parent)}" if self.parent else ""
        return f"<Scope bindings=[{keys}]{parent_id}>"
