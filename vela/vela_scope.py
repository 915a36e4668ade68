"""
Scopes and the ScopeManager that owns them.

Scopes are addressed by integer handles. A scope keeps its own bindings and
the handle of its parent; lookup walks the parent chain, binding never does.
Scopes are never destroyed or reparented.
"""
import itertools
from typing import Dict, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from vela.vela_datatypes import Value


class Scope:
    """A single namespace: local bindings plus an optional parent handle."""
    def __init__(self, handle: int, parent: Optional[int] = None):
        self.handle = handle
        self.parent = parent
        self.bindings: Dict[str, 'Value'] = {}

    def __contains__(self, name: str) -> bool:
        return name in self.bindings

    def __repr__(self) -> str:
        keys = ', '.join(self.bindings.keys())
        parent = f", parent=#{self.parent}" if self.parent is not None else ""
        return f"<Scope #{self.handle} bindings=[{keys}]{parent}>"


class ScopeManager:
    """Registry of every scope created during a run, keyed by handle."""
    def __init__(self):
        self._scopes: Dict[int, Scope] = {}
        self._handles = itertools.count()

    def create_scope(self, parent: Optional[int] = None) -> int:
        """Allocates a new empty scope under `parent` and returns its handle."""
        if parent is not None and parent not in self._scopes:
            raise KeyError(f"Unknown parent scope #{parent}")
        handle = next(self._handles)
        self._scopes[handle] = Scope(handle, parent)
        return handle

    def set_binding(self, handle: int, name: str, value: 'Value'):
        """Binds `name` in the scope `handle` itself; parents are never searched."""
        self.get_scope(handle).bindings[name] = value

    def find_owner(self, handle: int, name: str) -> Optional[Scope]:
        """Returns the nearest scope on the chain starting at `handle` that binds `name`."""
        current: Optional[int] = handle
        while current is not None:
            scope = self.get_scope(current)
            if name in scope.bindings:
                return scope
            current = scope.parent
        return None

    def lookup(self, handle: int, name: str) -> Optional['Value']:
        """Returns the value bound to `name` on the chain starting at `handle`, or None."""
        owner = self.find_owner(handle, name)
        if owner is None:
            return None
        return owner.bindings[name]

    def get_scope(self, handle: int) -> Scope:
        try:
            return self._scopes[handle]
        except KeyError:
            raise KeyError(f"Unknown scope #{handle}") from None

    def __contains__(self, handle: int) -> bool:
        return handle in self._scopes

    def __len__(self) -> int:
        return len(self._scopes)
