"""Error handling for the rascal language. Only RascalErrors should be encountered while running a program: if another
type of error is raised and makes it all the way to ErrorHandler, it is assumed to be an internal issue.

Taxonomy:

```
RascalError
 |-- LexError                      ; unrecognized character
 |-- ParseError                    ; unexpected or missing token
 +-- EvaluationError
      |-- UndefinedVariableError
      |-- ImmutableAssignmentError
      |-- RedeclarationError
      |-- TypeMismatchError        ; operand/operator/condition/callee kind mismatch
      |-- ArityError
      |-- DivisionByZeroError
      +-- RecursionDepthError
```
"""

import sys

from termcolor import colored


class RascalError(Exception):
    """Templates a rascal error message. msg is a str.format template whose fields are filled in with exprs, the
    offending snippets of source (these get highlighted when displayed by ErrorHandler).
    """

    def __init__(self, msg, exprs=None, position=None, length=1):
        if exprs is None:
            exprs = ()
        if isinstance(exprs, str):
            exprs = [exprs]

        self.template = msg
        self.exprs = tuple(str(expr) for expr in exprs)
        self.position = position  # None if the error can't be tied to a place in the source
        self.length = max(length, 1)  # number of characters to highlight, starting at position
        super().__init__(self.msg)

    @property
    def msg(self):
        return self.template.format(*self.exprs)

    def colored_msg(self):
        """Message with expr snippets bolded."""
        return self.template.format(*(colored(expr, attrs=["bold"]) for expr in self.exprs))

    def __str__(self):
        if self.position is None:
            return self.msg
        return f"{self.msg} (at {self.position.line}:{self.position.column})"


class LexError(RascalError):
    """Raised by the Lexer on a character that cannot start any token."""

    def __init__(self, char, position):
        self.char = char
        super().__init__("unrecognized character '{}'", char, position)


class ParseError(RascalError):
    """Raised by the Parser when the token sequence doesn't match the grammar."""

    @classmethod
    def unexpected(cls, expected, token):
        """Error naming the expected vs. found token."""
        return cls("expected {}, found {}", (expected, token.describe()), token.position, len(token.text))


class EvaluationError(RascalError):
    """Superclass of every error raised while evaluating a syntax tree."""


class UndefinedVariableError(EvaluationError):

    def __init__(self, name, position=None):
        self.name = name
        super().__init__("'{}' is not declared", name, position, len(name))


class ImmutableAssignmentError(EvaluationError):

    def __init__(self, name, position=None):
        self.name = name
        super().__init__("immutable '{}' cannot be reassigned", name, position, len(name))


class RedeclarationError(EvaluationError):

    def __init__(self, name, position=None):
        self.name = name
        super().__init__("'{}' is already declared in this scope", name, position, len(name))


class TypeMismatchError(EvaluationError):
    """Operand, condition or callee of the wrong kind."""


class ArityError(EvaluationError):

    def __init__(self, name, expected, got, position=None):
        self.expected = expected
        self.got = got
        super().__init__("{} expects {} argument(s), got {}", (name, expected, got), position)


class DivisionByZeroError(EvaluationError):

    def __init__(self, operator, position=None):
        super().__init__("'{}' by zero", operator, position)


class RecursionDepthError(EvaluationError):

    def __init__(self):
        super().__init__("maximum recursion depth exceeded")


class ErrorHandler:
    """Context manager that will silently suppress Python errors and report rascal errors."""
    ERROR = "red"

    def __init__(self, fatal=True):
        self.fatal = fatal
        self.traceback = {}  # path: source being run (None if nothing is running from path)

    def register_file(self, path):
        """Registers path in traceback."""
        self.traceback[path] = None

    def register_source(self, path, source):
        """Registers source in traceback given path. Should be called prior to Session add/run."""
        self.traceback[path] = source

    def remove_source(self, path):
        """Removes source from traceback given path. Should be called after successful Session add/run."""
        self.traceback[path] = None

    @staticmethod
    def diagnose(error, source):
        """Returns the offending line of source with the offending part highlighted, bolded and underlined."""
        lines = source.splitlines()
        line = lines[error.position.line - 1] if error.position.line <= len(lines) else ""
        start = min(error.position.column - 1, len(line))
        end = start + error.length

        diagnosis = "  " + line[:start]
        diagnosis += colored(line[start:end], ErrorHandler.ERROR, attrs=["bold"])
        diagnosis += line[end:] + "\n"

        diagnosis += "  " + " " * start
        diagnosis += colored("^" + "~" * (error.length - 1), ErrorHandler.ERROR, attrs=["bold"])

        return diagnosis

    def _origin(self):
        """(path, source) of the most recently registered source, or (None, None)."""
        for path, source in reversed(list(self.traceback.items())):  # assumes dict is insertion-ordered
            if source is not None:
                return path, source
        return None, None

    def throw(self, error):
        """Prints error, which must be a RascalError, using self.traceback to locate it. Exits if self.fatal."""
        self._report(error)

        if self.fatal:
            sys.exit(1)
        self.traceback = {path: None for path in self.traceback}  # if error occurred, reset traceback

    def _report(self, error, internal=False):
        path, source = self._origin()

        error_msg = ""
        if path is not None and error.position is not None:
            error_msg += colored(f"{path}:{error.position.line}:{error.position.column}: ", attrs=["bold"])
        if internal:
            error_msg += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])

        error_msg += colored("error: ", ErrorHandler.ERROR, attrs=["bold"]) + error.colored_msg()
        print(error_msg)

        if source is not None and error.position is not None:
            print(ErrorHandler.diagnose(error, source))

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(RascalError("keyboard interrupt"))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(RecursionDepthError())
        elif exc_type is not None and issubclass(exc_type, RascalError):
            self.throw(exc_val)
        elif exc_type is not None:
            self._report(RascalError("unknown error: '{}: {}'", (exc_type.__name__, exc_val)), internal=True)
            do_exit = True

        return not do_exit
