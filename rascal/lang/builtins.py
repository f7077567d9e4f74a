"""Built-in functions, bound in a prelude scope that sits above a program's root scope (so programs may shadow them).

The engine doesn't decide where printed text goes: print hands rendered values to a write(text) sink supplied by the
caller.
"""

from rascal.lang.environment import Environment
from rascal.lang.values import UNIT, Builtin, render


def make_print(write):
    """print(value): writes render(value) through write and evaluates to unit."""

    def _print(value):
        write(render(value))
        return UNIT

    return Builtin("print", ("value",), _print)


def prelude(write=print):
    """New scope holding every builtin. write is the sink used by print."""
    environment = Environment()
    for builtin in (make_print(write),):
        environment.declare(builtin.name, builtin, mutable=False)
    return environment
