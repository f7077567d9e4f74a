"""Lexically-scoped environments. An Environment is one scope: a mapping of names to Bindings plus an optional parent
scope. Scopes form chains from the innermost scope out to the root.

Lookups and assignments search the entire chain, declarations only ever touch the current scope. That asymmetry is
what makes a name declared inside a block invisible once the block is done.

Several child scopes and closures may share the same parent. Python's reference counting keeps a scope alive for as
long as a child scope or a Function value still refers to it, even after the block that created it has finished.
"""

from typing import Any, NamedTuple

from rascal.lang.error import ImmutableAssignmentError, RedeclarationError, UndefinedVariableError


class Binding(NamedTuple):
    value: Any
    mutable: bool


class Environment:
    """A single scope in a scope chain."""

    def __init__(self, parent=None):
        self.parent = parent
        self.bindings = {}  # name: Binding

    def declare(self, name, value, mutable):
        """Binds name in this scope. Redeclaring a name that already exists in this very scope is an error; a
        same-named binding in an enclosing scope is shadowed.
        """
        if name in self.bindings:
            raise RedeclarationError(name)
        self.bindings[name] = Binding(value, mutable)

    def assign(self, name, value):
        """Rebinds the nearest binding of name in the scope chain."""
        scope = self._resolve(name)
        if not scope.bindings[name].mutable:
            raise ImmutableAssignmentError(name)
        scope.bindings[name] = Binding(value, True)

    def lookup(self, name):
        """Value of the nearest binding of name in the scope chain."""
        return self._resolve(name).bindings[name].value

    def child_scope(self):
        """New empty scope whose parent is this one."""
        return Environment(self)

    def _resolve(self, name):
        """Returns the nearest scope (walking outward from this one) in which name is bound."""
        scope = self
        while scope is not None:
            if name in scope.bindings:
                return scope
            scope = scope.parent
        raise UndefinedVariableError(name)

    def snapshot(self):
        """Copy of this scope's own bindings (not its parents'). Bindings are immutable tuples, so a shallow copy is
        enough to restore the scope later.
        """
        return dict(self.bindings)

    def restore(self, snapshot):
        """Resets this scope's bindings to those of a previous snapshot."""
        self.bindings = dict(snapshot)

    def __contains__(self, name):
        try:
            self._resolve(name)
        except UndefinedVariableError:
            return False
        return True

    def __repr__(self):
        depth = 0
        scope = self.parent
        while scope is not None:
            depth += 1
            scope = scope.parent
        return f"Environment(names={sorted(self.bindings)}, depth={depth})"
