"""Tree-walking evaluator for the rascal language.

Each node is evaluated against the Environment in scope at that point and results in either a plain value or a
Returning signal. A Returning signal is produced by a `return` statement and is passed straight up through every
enclosing Block/If/While (and any expression containing them) without evaluating anything else, until the nearest
enclosing function call unwraps it. At top level it ends the program.

Evaluation order is strictly left to right: statements in order, left operand before right operand, callee before
arguments, arguments in order. `and`/`or` short-circuit: the right operand is only evaluated when the left one
doesn't already decide the result.
"""

import threading
from dataclasses import dataclass
from typing import Any

from rascal.grammar.syntax import (Assignment, BinaryOp, Block, Call, Declaration, FunctionLiteral, Identifier, If,
                                   Literal, Return, UnaryOp, While)
from rascal.lang.error import ArityError, DivisionByZeroError, EvaluationError, TypeMismatchError
from rascal.lang.values import BOOLEAN, FUNCTION, INTEGER, UNIT, Builtin, Function, kind_of


@dataclass(frozen=True)
class Returning:
    """Signal carrying the value of an evaluated `return` statement."""
    value: Any


def _divide(left, right):
    """Integer division truncating toward zero."""
    quotient = abs(left) // abs(right)
    return quotient if (left < 0) == (right < 0) else -quotient


def _remainder(left, right):
    """Remainder with the sign of the dividend, consistent with _divide."""
    return left - right * _divide(left, right)


class Evaluator:
    """Evaluates syntax trees. Holds no state besides its dispatch table and an interrupt flag, which another thread
    may set to stop a running program.
    """
    ARITHMETIC = {
        "+": lambda left, right: left + right,
        "-": lambda left, right: left - right,
        "*": lambda left, right: left * right,
        "/": _divide,
        "%": _remainder
    }
    ORDERING = {
        ">": lambda left, right: left > right,
        "<": lambda left, right: left < right
    }
    EQUALITY = ("==", "!=")
    LOGICAL = ("and", "or")

    def __init__(self):
        self.interrupted = threading.Event()
        self._dispatch = {
            Literal: self._literal,
            Identifier: self._identifier,
            UnaryOp: self._unary_op,
            BinaryOp: self._binary_op,
            Assignment: self._assignment,
            Declaration: self._declaration,
            Block: self._block,
            If: self._if,
            While: self._while,
            FunctionLiteral: self._function_literal,
            Call: self._call,
            Return: self._return
        }

    def interrupt(self):
        """Stops evaluation with a KeyboardInterrupt at the next loop iteration or function call."""
        self.interrupted.set()

    def run(self, program, environment):
        """Evaluates the top-level statements of program (a Block) directly in environment, so that top-level
        declarations stay in it. Returns the value of the last statement, the value of a top-level `return`, or UNIT
        for an empty program.
        """
        result = UNIT
        for statement in program.statements:
            result = self.evaluate(statement, environment)
            if isinstance(result, Returning):
                return result.value
        return result

    def evaluate(self, node, environment):
        """Returns the value of node, or a Returning signal."""
        try:
            return self._dispatch[type(node)](node, environment)
        except EvaluationError as error:
            if error.position is None:  # innermost node gets to locate the error
                error.position = node.position
            raise

    @staticmethod
    def _require(value, kind, what, operator=None):
        """Raises a TypeMismatchError unless value is of kind."""
        if kind_of(value) != kind:
            if operator is None:
                raise TypeMismatchError("{} must be {}, got {}", (what, kind, kind_of(value)))
            raise TypeMismatchError("{} of '{}' must be {}, got {}", (what, operator, kind, kind_of(value)))
        return value

    def _check_interrupt(self):
        if self.interrupted.is_set():
            raise KeyboardInterrupt

    def _literal(self, node, environment):
        return node.value

    def _identifier(self, node, environment):
        return environment.lookup(node.name)

    def _unary_op(self, node, environment):
        operand = self.evaluate(node.operand, environment)
        if isinstance(operand, Returning):
            return operand

        self._require(operand, INTEGER, "operand", node.operator)
        return -operand if node.operator == "-" else operand

    def _binary_op(self, node, environment):
        operator = node.operator

        left = self.evaluate(node.left, environment)
        if isinstance(left, Returning):
            return left

        if operator in Evaluator.LOGICAL:
            self._require(left, BOOLEAN, "left operand", operator)
            if left == (operator == "or"):  # true or ..., false and ...
                return left
            right = self.evaluate(node.right, environment)
            if isinstance(right, Returning):
                return right
            return self._require(right, BOOLEAN, "right operand", operator)

        right = self.evaluate(node.right, environment)
        if isinstance(right, Returning):
            return right

        if operator in Evaluator.EQUALITY:
            if kind_of(left) != kind_of(right):
                raise TypeMismatchError("cannot compare {} to {} with '{}'", (kind_of(left), kind_of(right), operator))
            equal = left is right if kind_of(left) == FUNCTION else left == right
            return equal if operator == "==" else not equal

        self._require(left, INTEGER, "left operand", operator)
        self._require(right, INTEGER, "right operand", operator)

        if operator in Evaluator.ORDERING:
            return Evaluator.ORDERING[operator](left, right)

        if operator in ("/", "%") and right == 0:
            raise DivisionByZeroError(operator)
        return Evaluator.ARITHMETIC[operator](left, right)

    def _assignment(self, node, environment):
        value = self.evaluate(node.value, environment)
        if isinstance(value, Returning):
            return value

        environment.assign(node.name, value)
        return UNIT

    def _declaration(self, node, environment):
        value = self.evaluate(node.initializer, environment)
        if isinstance(value, Returning):
            return value

        environment.declare(node.name, value, node.mutable)
        return UNIT

    def _block(self, node, environment):
        scope = environment.child_scope()

        result = UNIT
        for statement in node.statements:
            result = self.evaluate(statement, scope)
            if isinstance(result, Returning):
                break
        return result

    def _condition(self, node, environment, construct):
        condition = self.evaluate(node, environment)
        if isinstance(condition, Returning):
            return condition
        return self._require(condition, BOOLEAN, f"condition of '{construct}'")

    def _if(self, node, environment):
        condition = self._condition(node.condition, environment, "if")
        if isinstance(condition, Returning):
            return condition

        if condition:
            return self.evaluate(node.then_branch, environment)
        elif node.else_branch is not None:
            return self.evaluate(node.else_branch, environment)
        return UNIT

    def _while(self, node, environment):
        while True:
            self._check_interrupt()
            condition = self._condition(node.condition, environment, "while")
            if isinstance(condition, Returning):
                return condition
            if not condition:
                return UNIT

            result = self.evaluate(node.body, environment)
            if isinstance(result, Returning):
                return result

    def _function_literal(self, node, environment):
        return Function(node.params, node.body, environment)

    def _call(self, node, environment):
        self._check_interrupt()

        callee = self.evaluate(node.callee, environment)
        if isinstance(callee, Returning):
            return callee

        if not isinstance(callee, (Function, Builtin)):
            raise TypeMismatchError("{} is not callable", kind_of(callee))

        args = []
        for arg in node.args:
            value = self.evaluate(arg, environment)
            if isinstance(value, Returning):
                return value
            args.append(value)

        if len(args) != callee.arity:
            name = f"builtin '{callee.name}'" if isinstance(callee, Builtin) else "function"
            raise ArityError(name, callee.arity, len(args))

        if isinstance(callee, Builtin):
            return callee.func(*args)

        scope = callee.closure.child_scope()
        for param, value in zip(callee.params, args):
            scope.declare(param, value, mutable=True)

        result = self.evaluate(callee.body, scope)
        return result.value if isinstance(result, Returning) else result

    def _return(self, node, environment):
        value = self.evaluate(node.value, environment)
        if isinstance(value, Returning):
            return value
        return Returning(value)
