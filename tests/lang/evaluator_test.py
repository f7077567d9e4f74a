import unittest

from rascal.engine import new_environment, run, run_in
from rascal.grammar.syntax import Node
from rascal.lang.error import (ArityError, DivisionByZeroError, EvaluationError, ImmutableAssignmentError,
                               RecursionDepthError, RedeclarationError, TypeMismatchError, UndefinedVariableError)
from rascal.lang.evaluator import Evaluator
from rascal.lang.values import UNIT, Function


class ArithmeticTestCase(unittest.TestCase):

    def test_arithmetic(self):
        cases = {
            "5+1": 6,
            "5-1": 4,
            "5*2": 10,
            "4/2": 2,
            "10+5-4-1": 10,
            "1+1*2": 3,
            "2 + 3 * 4": 14,
            "4+(1+(1+1)*2)+1": 10,
            "(4+-1)--2": 5,
            "+3": 3,
            "7 / 2": 3,
            "-7 / 2": -3,
            "7 / -2": -3,
            "-7 / -2": 3,
            "7 % 3": 1,
            "-7 % 2": -1,
            "7 % -2": 1,
            "2 * 3 % 4": 2,
            "100000000000 * 100000000000": 10000000000000000000000,
        }
        for case, expected in cases.items():
            self.assertEqual(expected, run(case), case)

    def test_comparison(self):
        cases = {
            "1 < 2": True,
            "2 < 1": False,
            "2 > 1": True,
            "1 == 1": True,
            "1 != 1": False,
            "true == false": False,
            "true != false": True,
            "1 + 1 == 2": True,
            "1 < 2 == true": True,
            "true and true == false": False,
            "true and false or true": True,
            "false or true and false": False,
            "true && true": True,
            "false || false": False,
        }
        for case, expected in cases.items():
            self.assertIs(expected, run(case), case)

    def test_division_by_zero(self):
        should_raise = ["1 / 0", "1 % 0", "let zero = 0; 10 / zero", "5 / (2 - 2)"]
        for case in should_raise:
            self.assertRaises(DivisionByZeroError, run, case)

    def test_type_mismatch(self):
        should_raise = [
            "1 + true",
            "true * 2",
            "1 == true",
            "false != 0",
            "1 < false",
            "-true",
            "1 and true",
            "true and 1",
            "false or 0",
            "if 1 { 2 }",
            "while 0 { 1 }",
            "5(1)",
            "let f = fn [] { 1 }; f + 1",
            "let f = fn [] { 1 }; f == 1",
            "print == 1",
        ]
        for case in should_raise:
            self.assertRaises(TypeMismatchError, run, case)

    def test_not_callable_message(self):
        with self.assertRaises(TypeMismatchError) as context:
            run("let x = true;\nx(1)")
        self.assertEqual("boolean is not callable", context.exception.msg)
        self.assertEqual(2, context.exception.position.line)


class BindingTestCase(unittest.TestCase):

    def test_declarations(self):
        cases = {
            "let x = 20; let y = 15; let z = x + y; z - 5": 30,
            "var y = 0; y = 1; y": 1,
            "mut y = 0; y = y + 1; y = y * 10; y": 10,
            "var x = 10; var y = x + 5; return y + 5": 20,
            "let x = 1; let y = 2; y == x": False,
        }
        for case, expected in cases.items():
            self.assertEqual(expected, run(case), case)

    def test_statement_values(self):
        cases = ["let x = 1", "var x = 1; x = 2", "var y = 0; while y < 4 { y = y + 1 }", "if false { 1 }", "",
                 "{ var x = 1 }", "print(1)"]
        for case in cases:
            self.assertIs(UNIT, run(case, write=lambda text: None), case)

    def test_immutable_assignment(self):
        with self.assertRaises(ImmutableAssignmentError) as context:
            run("let y = 0;\ny = 1;\ny")
        self.assertEqual("y", context.exception.name)
        self.assertEqual((2, 1), (context.exception.position.line, context.exception.position.column))

        self.assertRaises(ImmutableAssignmentError, run, "fn f = [] { 1 }; f = fn [] { 2 }")
        self.assertRaises(ImmutableAssignmentError, run, "let x = 1; { x = 2 }")

    def test_undefined_variable(self):
        should_raise = [
            "undeclared_name",
            "let y = 0; x = 1; x",
            "{ var x = 1 }; x",
            "var x = 0; begin let y = 1 end; y",
            "var x = 0; begin var y = x; begin var z = 0 end; x = z end; x",
            "let f = fn [a] { a }; f(1); a",
            "if true { let inner = 1 }; inner",
            "while false { 1 }; let z = z; z",
        ]
        for case in should_raise:
            self.assertRaises(UndefinedVariableError, run, case)

    def test_redeclaration(self):
        should_raise = [
            "let x = 1; let x = 2",
            "var x = 1; let x = 2",
            "let x = 1; fn x = [] { 1 }",
            "{ var y = 1; var y = 2 }",
        ]
        for case in should_raise:
            self.assertRaises(RedeclarationError, run, case)

    def test_shadowing_in_nested_scope(self):
        cases = {
            "let x = 1; { let x = 2; x } + x": 3,
            "var x = 0; begin var x = 10; x = 15 end; x": 0,
            "let x = 1; let f = fn [x] { x * 2 }; f(5) + x": 11,
            "let print = 5; print": 5,
        }
        for case, expected in cases.items():
            self.assertEqual(expected, run(case), case)


class ControlFlowTestCase(unittest.TestCase):

    def test_if(self):
        cases = {
            "var y = 0; if y < 4 { y = 4 }; y == 4": True,
            "var y = 0; if y > 4 begin y = 4 else y = 10 end; y == 10": True,
            "let v = if 1 < 2 { 10 } else { 20 }; v": 10,
            "let v = if 1 > 2 { 10 } else if 2 > 1 { 20 } else { 30 }; v": 20,
            "if false { 1 } else { let a = 2; a * 3 }": 6,
        }
        for case, expected in cases.items():
            self.assertEqual(expected, run(case), case)

    def test_while(self):
        cases = {
            "var y = 0; while y < 4 { y = y + 1 }; y == 4": True,
            "var y = 0; while y < 4 begin y = y + 1 end; y": 4,
            "var n = 0; while false { n = n + 1 }; n": 0,
            "var i = 0; var total = 0; while i < 5 { let sq = i * i; total = total + sq; i = i + 1 }; total": 30,
        }
        for case, expected in cases.items():
            self.assertEqual(expected, run(case), case)

    def test_while_body_runs_once_per_true_condition(self):
        source = "var checks = 0; var runs = 0; fn more = [] { checks = checks + 1; checks < 4 }; " \
                 "while more() { runs = runs + 1 }; runs * 10 + checks"
        self.assertEqual(34, run(source))

    def test_short_circuit(self):
        prefix = "var hits = 0; fn bump = [] { hits = hits + 1; true }; "
        cases = {
            "false and bump(); hits": 0,
            "true or bump(); hits": 0,
            "true and bump(); hits": 1,
            "false or bump(); hits": 1,
            "bump() and bump() or bump(); hits": 2,
        }
        for case, expected in cases.items():
            self.assertEqual(expected, run(prefix + case), case)

        self.assertIs(False, run("false and 1"))  # right operand never evaluated, so never checked

    def test_left_to_right_order(self):
        prefix = "var s = 0; fn f = [v] { s = s * 10 + v; v }; "
        cases = {
            "f(1) + f(2); s": 12,
            "f(2) - f(1); s": 21,
            "f(1) < f(2); s": 12,
            "f(2) == f(1); s": 21,
            "fn g = [a, b] { a }; g(f(3), f(4)); s": 34,
            "fn pick = [] { s = s * 10 + 5; fn [a] { a } }; pick()(f(6)); s": 56,
            "f(1) * (f(2) + f(3)); s": 123,
        }
        for case, expected in cases.items():
            self.assertEqual(expected, run(prefix + case), case)

    def test_return(self):
        cases = {
            "fn f = [x] { if x > 0 { return 1 }; 0 }; f(5)": 1,
            "fn f = [x] { if x > 0 { return 1 }; 0 }; f(-1)": 0,
            "fn first = [limit] { var i = 0; while true { i = i + 1; if i == limit { return i } }; 0 }; first(3)": 3,
            "fn f = [] { { { return 7 }; 8 }; 9 }; f() + 1": 8,
            "fn f = [] { let x = { return 2 }; 3 }; f()": 2,
            "fn f = [] { return 1 + { return 5 } }; f()": 5,
            "return 5; 10": 5,
            "var x = 0; while true { x = x + 1; if x == 3 { return x * 100 } }": 300,
            "let foo = fn [x, y] { return x + y }; foo((8 + 1), (1 + 1))": 11,
        }
        for case, expected in cases.items():
            self.assertEqual(expected, run(case), case)

    def test_return_stops_evaluation(self):
        written = []
        self.assertEqual(1, run("fn f = [] { print(1); return 1; print(2) }; f()", write=written.append))
        self.assertEqual(["1"], written)


class FunctionTestCase(unittest.TestCase):

    def test_functions(self):
        cases = {
            "let add = fn [] { 2 + 2 }; add()": 4,
            "let add = fn [x] { x + 2 }; add(2)": 4,
            "let add = fn [x,y,z] { x + y + z + 1 }; add(2,2,2)": 7,
            "var y = 0; let foo = fn [x] { if x < 10 { y = x + 1 }; y }; foo(6)": 7,
            "let foo = fn [x] { x + 1 }; let other = foo; other(6)": 7,
            "let composed = fn [f] { f(10) }; let foo = fn [x] { x + 1 }; composed(foo)": 11,
            "fn foo = [x]{ x + 1 }; fn composed = [f]{ f(10) }; composed(foo)": 11,
            "fn adder = [x] { fn [y] { x + y } }; adder(3)(4)": 7,
            "(fn [x] { x * x })(9)": 81,
            "fn f = [x] { x = x + 1; x }; f(1)": 2,
            "fn fact = [n] { if n < 2 { 1 } else { n * fact(n - 1) } }; fact(10)": 3628800,
            "fn even = [n] { if n == 0 { true } else { odd(n - 1) } }; "
            "fn odd = [n] { if n == 0 { false } else { even(n - 1) } }; even(10)": True,
        }
        for case, expected in cases.items():
            self.assertEqual(expected, run(case), case)

    def test_function_value(self):
        value = run("fn [a, b] { a }")
        self.assertIsInstance(value, Function)
        self.assertEqual(("a", "b"), value.params)
        self.assertIs(True, run("let f = fn [] { 1 }; let g = f; f == g"))
        self.assertIs(False, run("fn [] { 1 } == fn [] { 1 }"))

    def test_arity(self):
        should_raise = ["fn f = [x] { x }; f(1, 2)", "fn f = [x] { x }; f()", "fn f = [] { 1 }; f(1)", "print()",
                        "print(1, 2)"]
        for case in should_raise:
            self.assertRaises(ArityError, run, case)

    def test_closures_capture_by_reference(self):
        environment = new_environment()
        run_in("var state = 0; let bump = fn[x]{ state = state + x }; bump(10); bump(5);", environment)
        self.assertEqual(15, environment.lookup("state"))

    def test_closures_keep_scope_alive(self):
        source = "fn make_counter = [] { var count = 0; fn [] { count = count + 1; count } }; " \
                 "let a = make_counter(); let b = make_counter(); a(); a(); b(); a() * 10 + b()"
        self.assertEqual(32, run(source))

    def test_lexical_scoping(self):
        source = "let x = 1; fn get_x = [] { x }; fn caller = [] { let x = 100; get_x() }; caller()"
        self.assertEqual(1, run(source))

        source = "fn get_y = [] { y }; fn caller = [] { let y = 100; get_y() }; caller()"
        self.assertRaises(UndefinedVariableError, run, source)

    def test_recursion_depth(self):
        self.assertRaises(RecursionDepthError, run, "fn forever = [n] { forever(n + 1) }; forever(0)")


class PrintTestCase(unittest.TestCase):

    def test_print(self):
        written = []
        run("print(1 + 2); print(true); print(fn [a] { a }); print(print); print(print(0))", write=written.append)
        self.assertEqual(["3", "true", "<fn [a]>", "<builtin print>", "0", "unit"], written)


class EvaluatorTestCase(unittest.TestCase):

    def test_every_node_kind_has_a_handler(self):
        def subclasses(cls):
            for subclass in cls.__subclasses__():
                yield subclass
                yield from subclasses(subclass)

        self.assertEqual(set(subclasses(Node)), set(Evaluator()._dispatch))

    def test_errors_are_evaluation_errors(self):
        should_raise = ["x", "1 / 0", "1 + true", "let x = 1; x = 2", "let x = 1; let x = 1", "fn [] { 1 }(1)"]
        for case in should_raise:
            self.assertRaises(EvaluationError, run, case)


if __name__ == '__main__':
    unittest.main()
