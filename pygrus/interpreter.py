import math
import sys
import time

from .callables import GrusCallable, GrusClass, GrusFunction, GrusInstance, NativeFunction
from .environment import Environment
from .errors import BreakSignal, ContinueSignal, GrusRuntimeError, ReturnSignal
from .scanner import Token
from .syntax import Expr, Stmt


RECURSION_LIMIT = 10000


def to_int32(value):
    if not math.isfinite(value):
        return 0
    value = int(value) & 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def type_name(value):
    match value:
        case None: return "null"
        case bool(): return "boolean"
        case float(): return "number"
        case str(): return "string"
        case GrusClass(): return "class"
        case GrusCallable(): return "function"
        case GrusInstance(): return "instance"
        case _: return type(value).__name__


def stringify(value):
    match value:
        case None: return "null"
        case True: return "true"
        case False: return "false"
        case float() if math.isnan(value): return "NaN"
        case float() if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        case float() if value.is_integer() and abs(value) < 1e21:
            # int() also folds -0.0 into 0.
            return str(int(value))
        case float(): return repr(value)
        case _: return str(value)


class Interpreter(Expr.Visitor, Stmt.Visitor):
    def __init__(self, on_error=None, out=None):
        self.globals = Environment()
        self.environment = self.globals
        self.locals = {}
        self.on_error = on_error
        self.out = out if out is not None else sys.stdout

        def clock(interpreter):
            return time.time() * 1000.0

        def print_(interpreter, *values):
            print(" ".join(map(stringify, values)), file=interpreter.out)

        self.globals.define("clock", NativeFunction("clock", 0, clock))
        self.globals.define("print", NativeFunction("print", None, print_))

    def interpret(self, stmts, locals=None):
        # Every Grus call costs a dozen or so Python frames.
        if sys.getrecursionlimit() < RECURSION_LIMIT:
            sys.setrecursionlimit(RECURSION_LIMIT)
        if locals:
            self.locals.update(locals)
        entry = Token("IDENTIFIER", "main", None, 0, 0)
        main = Expr.Call(Expr.Variable(entry), entry, [])
        try:
            for stmt in stmts:
                self.execute(stmt)
            self.evaluate(main)
        except GrusRuntimeError as error:
            if self.on_error is None:
                raise
            self.on_error(error.token, error.message)

    def evaluate(self, expr):
        return expr.accept(self)

    def evaluate_in(self, expr, environment):
        previous = self.environment
        try:
            self.environment = environment
            return self.evaluate(expr)
        finally:
            self.environment = previous

    def execute(self, stmt):
        return stmt.accept(self)

    def execute_block(self, statements, environment):
        previous = self.environment
        try:
            self.environment = environment
            for statement in statements:
                self.execute(statement)
        finally:
            self.environment = previous

    def visit_block_stmt(self, stmt):
        self.execute_block(stmt.statements, Environment(self.environment))

    def visit_break_stmt(self, stmt):
        raise BreakSignal()

    def visit_class_stmt(self, stmt):
        methods = {
            name: GrusFunction(method, self.environment)
            for name, method in stmt.methods.items()}
        klass = GrusClass(stmt.name.lexeme, stmt.fields, methods, self.environment)
        self.environment.define(stmt.name.lexeme, klass)

    def visit_continue_stmt(self, stmt):
        raise ContinueSignal()

    def visit_dowhile_stmt(self, stmt):
        while True:
            try:
                self.execute(stmt.body)
            except BreakSignal:
                break
            except ContinueSignal:
                pass
            if not self.is_truthy(self.evaluate(stmt.condition)):
                break

    def visit_expression_stmt(self, stmt):
        self.evaluate(stmt.expression)

    def visit_for_stmt(self, stmt):
        if stmt.initializer:
            self.execute(stmt.initializer)
        while stmt.condition is None or self.is_truthy(self.evaluate(stmt.condition)):
            try:
                self.execute(stmt.body)
            except BreakSignal:
                break
            except ContinueSignal:
                pass
            if stmt.increment:
                self.evaluate(stmt.increment)

    def visit_function_stmt(self, stmt):
        func = GrusFunction(stmt, self.environment)
        self.environment.define(stmt.name.lexeme, func)

    def visit_if_stmt(self, stmt):
        if self.is_truthy(self.evaluate(stmt.condition)):
            self.execute(stmt.then_branch)
        elif stmt.else_branch:
            self.execute(stmt.else_branch)

    def visit_return_stmt(self, stmt):
        value = None
        if stmt.value:
            value = self.evaluate(stmt.value)
        raise ReturnSignal(value)

    def visit_var_stmt(self, stmt):
        value = None
        if stmt.initializer:
            value = self.evaluate(stmt.initializer)
        self.environment.define(stmt.name.lexeme, value)

    def visit_while_stmt(self, stmt):
        while self.is_truthy(self.evaluate(stmt.condition)):
            try:
                self.execute(stmt.body)
            except BreakSignal:
                break
            except ContinueSignal:
                pass

    def visit_assign_expr(self, expr):
        value = self.evaluate(expr.value)
        self.assign_variable(expr.name, expr, value)
        return value

    def visit_binary_expr(self, expr):
        left = self.evaluate(expr.left)
        right = self.evaluate(expr.right)
        operator = expr.operator
        match operator.type:
            case "COMMA": return right
            case "BANG_EQUAL": return not self.is_equal(left, right)
            case "EQUAL_EQUAL": return self.is_equal(left, right)
            case "PLUS":
                if isinstance(left, str) and isinstance(right, str):
                    return left + right
                self.check_numbers(operator, left, right)
                return left + right

        self.check_numbers(operator, left, right)
        match operator.type:
            case "GREATER": return left > right
            case "GREATER_EQUAL": return left >= right
            case "LESS": return left < right
            case "LESS_EQUAL": return left <= right
            case "MINUS": return left - right
            case "STAR": return left * right
            case "SLASH":
                self.check_divisor(operator, right)
                return left / right
            case "PERCENT":
                self.check_divisor(operator, right)
                return math.fmod(left, right)
            case "BIT_AND": return float(to_int32(left) & to_int32(right))
            case "BIT_OR": return float(to_int32(left) | to_int32(right))
            case "CARET": return float(to_int32(left) ^ to_int32(right))
            case "LESS_LESS":
                return float(to_int32(to_int32(left) << (to_int32(right) & 31)))
            case "GREATER_GREATER":
                return float(to_int32(left) >> (to_int32(right) & 31))
        raise GrusRuntimeError(
            operator, f"Unknown binary operator '{operator.lexeme}'.")

    def visit_call_expr(self, expr):
        callee = self.evaluate(expr.callee)
        arguments = [self.evaluate(argument) for argument in expr.arguments]
        if not isinstance(callee, GrusCallable):
            raise GrusRuntimeError(
                expr.paren, "Can only call functions and classes.")
        self.check_arity(expr.paren, callee, arguments)
        try:
            return callee.call(self, arguments)
        except RecursionError:
            raise GrusRuntimeError(expr.paren, "Stack overflow.") from None

    def visit_conditional_expr(self, expr):
        if self.is_truthy(self.evaluate(expr.condition)):
            return self.evaluate(expr.then_branch)
        return self.evaluate(expr.else_branch)

    def visit_get_expr(self, expr):
        obj = self.evaluate(expr.object)
        if isinstance(obj, GrusInstance):
            return obj.get(expr.name)
        raise GrusRuntimeError(
            expr.name, f"Only instances have properties, got {type_name(obj)}.")

    def visit_grouping_expr(self, expr):
        return self.evaluate(expr.expression)

    def visit_literal_expr(self, expr):
        return expr.value

    def visit_logical_expr(self, expr):
        left = self.evaluate(expr.left)
        if expr.operator.type == "OR":
            if self.is_truthy(left):
                return left
        else:
            if not self.is_truthy(left):
                return left
        return self.evaluate(expr.right)

    def visit_postfix_expr(self, expr):
        before, _ = self.increment(expr.operator, expr.operand)
        return before

    def visit_set_expr(self, expr):
        obj = self.evaluate(expr.object)
        if not isinstance(obj, GrusInstance):
            raise GrusRuntimeError(
                expr.name, f"Only instances have fields, got {type_name(obj)}.")
        value = self.evaluate(expr.value)
        obj.set(expr.name, value)
        return value

    def visit_this_expr(self, expr):
        return self.lookup_variable(expr.keyword, expr)

    def visit_unary_expr(self, expr):
        operator = expr.operator
        if operator.type in ("PLUS_PLUS", "MINUS_MINUS"):
            _, after = self.increment(operator, expr.right)
            return after

        right = self.evaluate(expr.right)
        match operator.type:
            case "BANG": return not self.is_truthy(right)
            case "NEW": return self.instantiate(operator, right)
        self.check_number(operator, right)
        match operator.type:
            case "MINUS": return -right
            case "TILDE": return float(~to_int32(right))
        raise GrusRuntimeError(
            operator, f"Unknown unary operator '{operator.lexeme}'.")

    def visit_variable_expr(self, expr):
        return self.lookup_variable(expr.name, expr)

    def increment(self, operator, operand):
        """Apply ++ or -- to a variable; returns the values before and after."""
        if not isinstance(operand, Expr.Variable):
            raise GrusRuntimeError(
                operator, f"Operand of '{operator.lexeme}' must be a variable.")
        before = self.lookup_variable(operand.name, operand)
        self.check_number(operator, before)
        after = before + 1 if operator.type == "PLUS_PLUS" else before - 1
        self.assign_variable(operand.name, operand, after)
        return before, after

    def instantiate(self, operator, value):
        if isinstance(value, GrusClass):
            self.check_arity(operator, value, [])
            return value.call(self, [])
        if isinstance(value, GrusInstance):
            return value
        raise GrusRuntimeError(
            operator, f"Operand of 'new' must be a class or an instance, got {type_name(value)}.")

    def lookup_variable(self, name, expr):
        if expr in self.locals:
            return self.environment.get_at(self.locals[expr], name.lexeme)
        return self.globals.get(name)

    def assign_variable(self, name, expr, value):
        if expr in self.locals:
            self.environment.assign_at(self.locals[expr], name.lexeme, value)
        else:
            self.globals.assign(name, value)

    def is_truthy(self, object):
        if object is None:
            return False
        if isinstance(object, bool):
            return object
        return True

    def is_equal(self, left, right):
        # bool is an int subclass in Python, so compare kinds first.
        if type(left) is not type(right):
            return False
        return left == right

    def check_arity(self, token, callee, arguments):
        arity = callee.arity()
        if arity is not None and len(arguments) != arity:
            raise GrusRuntimeError(
                token, f"Expected {arity} arguments but got {len(arguments)}.")

    def check_number(self, operator, operand):
        if not isinstance(operand, float):
            raise GrusRuntimeError(
                operator,
                f"Unary operator '{operator.lexeme}' cannot be applied to {type_name(operand)}.")

    def check_numbers(self, operator, left, right):
        if not isinstance(left, float) or not isinstance(right, float):
            raise GrusRuntimeError(
                operator,
                f"Binary operator '{operator.lexeme}' cannot be applied to "
                f"{type_name(left)} and {type_name(right)}.")

    def check_divisor(self, operator, right):
        if right == 0.0:
            raise GrusRuntimeError(operator, "Division by zero.")
