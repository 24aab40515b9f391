import unittest

from pygrus.parser import Parser
from pygrus.scanner import Scanner
from pygrus.syntax import Expr, Stmt


def parse(source):
    errors = []
    tokens = Scanner(source, lambda line, column, message: errors.append(message)).scan_tokens()
    statements = Parser(tokens, lambda token, message: errors.append(message)).parse()
    return statements, errors


def parse_expression(source):
    statements, errors = parse(source + ";")
    assert errors == [], errors
    assert len(statements) == 1 and isinstance(statements[0], Stmt.Expression)
    return statements[0].expression


def show(expr):
    """Lisp-style rendering used to check tree shape."""
    match expr:
        case Expr.Literal(): return "nil" if expr.value is None else str(expr.value)
        case Expr.Variable(): return expr.name.lexeme
        case Expr.Grouping(): return f"(group {show(expr.expression)})"
        case Expr.Unary(): return f"({expr.operator.lexeme} {show(expr.right)})"
        case Expr.Postfix(): return f"(post{expr.operator.lexeme} {show(expr.operand)})"
        case Expr.Binary() | Expr.Logical():
            return f"({expr.operator.lexeme} {show(expr.left)} {show(expr.right)})"
        case Expr.Conditional():
            return f"(? {show(expr.condition)} {show(expr.then_branch)} {show(expr.else_branch)})"
        case Expr.Assign(): return f"(= {expr.name.lexeme} {show(expr.value)})"
        case Expr.Call():
            return f"(call {show(expr.callee)}{''.join(' ' + show(a) for a in expr.arguments)})"
        case Expr.Get(): return f"(. {show(expr.object)} {expr.name.lexeme})"
        case Expr.Set(): return f"(.= {show(expr.object)} {expr.name.lexeme} {show(expr.value)})"
        case Expr.This(): return "this"


class TestExpressionParsing(unittest.TestCase):
    def assertParses(self, source, expected):
        self.assertEqual(show(parse_expression(source)), expected)

    def test_multiplicative_binds_tighter_than_additive(self):
        self.assertParses("1 + 2 * 3", "(+ 1.0 (* 2.0 3.0))")
        self.assertParses("(1 + 2) * 3", "(* (group (+ 1.0 2.0)) 3.0)")

    def test_additive_binds_tighter_than_shift(self):
        self.assertParses("2 + 3 << 1", "(<< (+ 2.0 3.0) 1.0)")

    def test_binary_operators_are_left_associative(self):
        self.assertParses("1 - 2 - 3", "(- (- 1.0 2.0) 3.0)")
        self.assertParses("8 / 4 / 2", "(/ (/ 8.0 4.0) 2.0)")

    def test_full_precedence_ladder(self):
        self.assertParses(
            "a || b && c | d ^ e & f == g < h << i + j * k",
            "(|| a (&& b (| c (^ d (& e (== f (< g (<< h (+ i (* j k))))))))))")

    def test_logical_operators_build_logical_nodes(self):
        expr = parse_expression("a && b || c")
        self.assertIsInstance(expr, Expr.Logical)
        self.assertIsInstance(expr.left, Expr.Logical)
        self.assertEqual(expr.operator.type, "OR")

    def test_assignment_is_right_associative(self):
        self.assertParses("a = b = 5", "(= a (= b 5.0))")

    def test_compound_assignment_desugars(self):
        self.assertParses("a += 2", "(= a (+ a 2.0))")
        self.assertParses("a <<= 1", "(= a (<< a 1.0))")

    def test_comma_is_lowest(self):
        self.assertParses("a = 1, b = 2", "(, (= a 1.0) (= b 2.0))")

    def test_conditional(self):
        self.assertParses("a ? b : c", "(? a b c)")
        self.assertParses("a ? b : c ? d : e", "(? a b (? c d e))")
        self.assertParses("x = a || b ? 1 : 2", "(= x (? (|| a b) 1.0 2.0))")

    def test_prefix_operators(self):
        self.assertParses("!-a", "(! (- a))")
        self.assertParses("-a * b", "(* (- a) b)")
        self.assertParses("~a", "(~ a)")
        self.assertParses("++a", "(++ a)")
        self.assertParses("new Point(1, 2)", "(new (call Point 1.0 2.0))")

    def test_postfix_operators(self):
        self.assertParses("a++", "(post++ a)")
        self.assertParses("a + b--", "(+ a (post-- b))")
        self.assertParses("-a++", "(- (post++ a))")

    def test_calls_and_properties(self):
        self.assertParses("f(1)(2)", "(call (call f 1.0) 2.0)")
        self.assertParses("a.b.c()", "(call (. (. a b) c))")
        self.assertParses("f(a, b = 1)", "(call f a (= b 1.0))")
        self.assertParses("this.x = 3", "(.= this x 3.0)")

    def test_literals(self):
        self.assertParses("true", "True")
        self.assertParses("null", "nil")
        self.assertEqual(parse_expression('"hi"').value, "hi")


class TestExpressionErrors(unittest.TestCase):
    def test_invalid_assignment_target_is_reported_not_fatal(self):
        statements, errors = parse("a + b = 3; var ok = 1;")
        self.assertEqual(errors, ["Invalid assignment target."])
        self.assertEqual(len(statements), 2)
        self.assertIsInstance(statements[1], Stmt.Var)

    def test_compound_assignment_to_property_is_rejected(self):
        _, errors = parse("a.b += 1;")
        self.assertEqual(errors, ["Invalid assignment target."])

    def test_increment_requires_variable(self):
        _, errors = parse("1++; ++(a);")
        self.assertEqual(errors, ["Invalid increment/decrement target."] * 2)

    def test_missing_operand(self):
        _, errors = parse("1 + ;")
        self.assertEqual(errors, ["Expected expression."])

    def test_missing_closing_paren(self):
        _, errors = parse("(1 + 2;")
        self.assertEqual(errors, ["Expected ')' after expression."])

    def test_conditional_requires_colon(self):
        _, errors = parse("a ? b;")
        self.assertEqual(errors, ["Expected ':' after then branch of conditional expression."])


class TestStatementParsing(unittest.TestCase):
    def parse_one(self, source):
        statements, errors = parse(source)
        self.assertEqual(errors, [])
        self.assertEqual(len(statements), 1)
        return statements[0]

    def test_var_declaration(self):
        stmt = self.parse_one("var a: number = 1;")
        self.assertIsInstance(stmt, Stmt.Var)
        self.assertEqual(stmt.name.lexeme, "a")
        self.assertEqual(stmt.type.lexeme, "number")
        self.assertEqual(stmt.initializer.value, 1.0)
        stmt = self.parse_one("var b;")
        self.assertIsNone(stmt.type)
        self.assertIsNone(stmt.initializer)

    def test_function_declaration(self):
        stmt = self.parse_one("fun add(a, b) { return a + b; }")
        self.assertIsInstance(stmt, Stmt.Function)
        self.assertEqual([p.lexeme for p in stmt.params], ["a", "b"])
        self.assertIsInstance(stmt.body[0], Stmt.Return)

    def test_class_declaration(self):
        stmt = self.parse_one("""
            class Point {
                x = 0;
                y;
                init(x, y) { this.x = x; this.y = y; }
                sum() { return this.x + this.y; }
            }
        """)
        self.assertIsInstance(stmt, Stmt.Class)
        self.assertEqual(list(stmt.fields), ["x", "y"])
        self.assertEqual(stmt.fields["x"].value, 0.0)
        self.assertIsNone(stmt.fields["y"])
        self.assertEqual(list(stmt.methods), ["init", "sum"])
        self.assertEqual(len(stmt.methods["init"].params), 2)

    def test_duplicate_class_member(self):
        _, errors = parse("class A { x; x() {} }")
        self.assertEqual(errors, ["Already a member named 'x' in this class."])

    def test_for_wraps_loop_in_block(self):
        stmt = self.parse_one("for (var i = 0; i < 3; i++) {}")
        self.assertIsInstance(stmt, Stmt.Block)
        (loop,) = stmt.statements
        self.assertIsInstance(loop, Stmt.For)
        self.assertIsInstance(loop.initializer, Stmt.Var)
        self.assertIsInstance(loop.increment, Expr.Postfix)

    def test_for_clauses_are_optional(self):
        stmt = self.parse_one("for (;;) break;")
        (loop,) = stmt.statements
        self.assertIsNone(loop.initializer)
        self.assertIsNone(loop.condition)
        self.assertIsNone(loop.increment)
        self.assertIsInstance(loop.body, Stmt.Break)

    def test_loops(self):
        self.assertIsInstance(self.parse_one("while (true) continue;"), Stmt.While)
        stmt = self.parse_one("do { } while (false);")
        self.assertIsInstance(stmt, Stmt.DoWhile)
        stmt = self.parse_one("loop break;")
        self.assertIsInstance(stmt, Stmt.While)
        self.assertIs(stmt.condition.value, True)

    def test_dangling_else_binds_to_nearest_if(self):
        stmt = self.parse_one("if (a) if (b) x; else y;")
        self.assertIsNone(stmt.else_branch)
        self.assertIsNotNone(stmt.then_branch.else_branch)

    def test_parameter_limit_is_reported(self):
        params = ", ".join(f"p{i}" for i in range(256))
        statements, errors = parse(f"fun f({params}) {{}}")
        self.assertEqual(errors, ["Can't have more than 255 parameters."])
        self.assertEqual(len(statements[0].params), 256)


class TestSynchronization(unittest.TestCase):
    def test_recovers_at_next_statement(self):
        statements, errors = parse("var = 1; var b = 2;")
        self.assertEqual(errors, ["Expected variable name."])
        self.assertEqual([s.name.lexeme for s in statements], ["b"])

    def test_recovers_at_declaration_keyword(self):
        statements, errors = parse("print(1 2) fun f() {} var c = 3;")
        self.assertEqual(errors, ["Expected ')' after arguments."])
        self.assertEqual(len(statements), 2)
        self.assertIsInstance(statements[0], Stmt.Function)

    def test_one_error_per_bad_statement(self):
        _, errors = parse("var a = ; var b = ; var c = 1;")
        self.assertEqual(errors, ["Expected expression.", "Expected expression."])


if __name__ == "__main__":
    unittest.main()
