"""rascal: interpreter for a small, dynamically-evaluated, statically-scoped scripting language with integers,
booleans, mutable/immutable bindings, block scoping, conditionals, loops, first-class functions and closures.

Basic program flow:
    1. Lexer (grammar/lexical.py): source text -> lazy sequence of Tokens
    2. Parser (grammar/parser.py): Tokens -> syntax tree rooted at a Block of top-level statements
    3. Evaluator (lang/evaluator.py): walks the tree against a chain of Environments (lang/environment.py) and
       produces a value. Not a compiler: the tree is executed directly.

This module is the interface offered to the command line and the interactive shell. Every failure is raised as a
RascalError; nothing here ends the process.
"""

import logging
import sys
import threading

from rascal.grammar.parser import Parser
from rascal.lang.builtins import prelude
from rascal.lang.error import ParseError, RecursionDepthError
from rascal.lang.evaluator import Evaluator

logger = logging.getLogger(__name__)

RECURSION_LIMIT = 50000              # nested Python frames; each rascal call takes about ten
STACK_SIZE = 512 * 1024 * 1024       # bytes, enough for RECURSION_LIMIT frames


def _on_large_stack(func, *args, on_interrupt=None):
    """Calls func(*args) in a worker thread with room for RECURSION_LIMIT nested frames, then returns its result or
    raises its exception. If the caller is interrupted while waiting, on_interrupt is called to stop the worker and
    the KeyboardInterrupt is raised once the worker has finished.
    """
    if sys.getrecursionlimit() < RECURSION_LIMIT:
        sys.setrecursionlimit(RECURSION_LIMIT)

    outcome = {}

    def target():
        try:
            outcome["value"] = func(*args)
        except BaseException as error:
            outcome["error"] = error

    previous = threading.stack_size(STACK_SIZE)
    try:
        worker = threading.Thread(target=target, daemon=True)
        worker.start()
    finally:
        threading.stack_size(previous)

    try:
        worker.join()
    except KeyboardInterrupt:
        if on_interrupt is not None:
            on_interrupt()
        worker.join()
        raise

    if "error" in outcome:
        raise outcome["error"]
    return outcome["value"]


def new_environment(write=print):
    """Fresh root Environment for a program. Its parent holds the builtins; print writes through write."""
    return prelude(write).child_scope()


def parse(source):
    """Lexes and parses source. Raises LexError or ParseError."""
    try:
        tree = _on_large_stack(lambda: Parser.from_source(source).parse())
    except RecursionError:
        raise ParseError("expression is nested too deeply") from None

    logger.debug("parsed %d top-level statement(s)", len(tree.statements))
    return tree


def execute(tree, environment):
    """Evaluates a parsed program in environment. Raises an EvaluationError on failure, or KeyboardInterrupt if
    interrupted (evaluation stops at the next loop iteration or call).
    """
    evaluator = Evaluator()
    try:
        value = _on_large_stack(evaluator.run, tree, environment, on_interrupt=evaluator.interrupt)
    except RecursionError:
        raise RecursionDepthError() from None

    logger.debug("evaluated to %r", value)
    return value


def run_in(source, environment):
    """Runs source in a caller-supplied root Environment, so that top-level bindings outlive this call (as in the
    interactive shell). environment may be left partially updated if an error is raised: see Session.run.
    """
    return execute(parse(source), environment)


def run(source, write=print):
    """Runs source in a fresh root Environment and returns the resulting value."""
    return run_in(source, new_environment(write))
