"""Runtime values of the rascal language.

Integers and Booleans are plain Python ints and bools (note that bool is a subclass of int: use kind_of rather than
isinstance to tell them apart). Functions capture the Environment they were defined in by reference. UNIT is the
result of statements that have no useful value.
"""

from dataclasses import dataclass
from typing import Any, Callable, Tuple


class Unit:
    """Type of UNIT. There is exactly one instance."""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "UNIT"


UNIT = Unit()


@dataclass(frozen=True, eq=False)
class Function:
    """Closure: parameter names and body of a function literal, plus the Environment active where it was evaluated.
    Compared by identity.
    """
    params: Tuple[str, ...]
    body: Any  # syntax.Block
    closure: Any  # environment.Environment, shared with every other holder

    @property
    def arity(self):
        return len(self.params)

    def __repr__(self):
        return f"Function(params={self.params})"


@dataclass(frozen=True, eq=False)
class Builtin:
    """Function implemented in Python. func receives the evaluated arguments."""
    name: str
    params: Tuple[str, ...]
    func: Callable

    @property
    def arity(self):
        return len(self.params)


INTEGER = "integer"
BOOLEAN = "boolean"
FUNCTION = "function"
UNIT_KIND = "unit"


def kind_of(value):
    """Name of the kind of value: 'integer', 'boolean', 'function' or 'unit'."""
    if isinstance(value, bool):
        return BOOLEAN
    elif isinstance(value, int):
        return INTEGER
    elif isinstance(value, (Function, Builtin)):
        return FUNCTION
    elif value is UNIT:
        return UNIT_KIND
    raise ValueError(f"{value!r} is not a rascal value")


def render(value):
    """Text representation of value, as printed by the print builtin and the shell."""
    kind = kind_of(value)
    if kind == BOOLEAN:
        return "true" if value else "false"
    elif kind == INTEGER:
        return str(value)
    elif isinstance(value, Builtin):
        return f"<builtin {value.name}>"
    elif kind == FUNCTION:
        return f"<fn [{', '.join(value.params)}]>"
    return "unit"
