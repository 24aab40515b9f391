import enum
from collections import namedtuple

from .scanner import Token
from .syntax import Expr, Stmt


class Precedence(enum.IntEnum):
    NONE = 0
    COMMA = enum.auto()       # ,
    ASSIGNMENT = enum.auto()  # = += -= *= /= %= ^= &= |= <<= >>=  ?:
    OR = enum.auto()          # ||
    AND = enum.auto()         # &&
    BIT_OR = enum.auto()      # |
    BIT_XOR = enum.auto()     # ^
    BIT_AND = enum.auto()     # &
    EQUALITY = enum.auto()    # == !=
    COMPARISON = enum.auto()  # < > <= >=
    SHIFT = enum.auto()       # << >>
    TERM = enum.auto()        # + -
    FACTOR = enum.auto()      # * / %
    UNARY = enum.auto()       # ! - ~ ++ -- new
    CALL = enum.auto()        # . () and postfix ++ --


# Compound assignment operator -> the binary operator it applies.
COMPOUND_ASSIGNMENTS = {
    "PLUS_EQUAL": ("PLUS", "+"),
    "MINUS_EQUAL": ("MINUS", "-"),
    "STAR_EQUAL": ("STAR", "*"),
    "SLASH_EQUAL": ("SLASH", "/"),
    "PERCENT_EQUAL": ("PERCENT", "%"),
    "CARET_EQUAL": ("CARET", "^"),
    "BIT_AND_EQUAL": ("BIT_AND", "&"),
    "BIT_OR_EQUAL": ("BIT_OR", "|"),
    "LESS_LESS_EQUAL": ("LESS_LESS", "<<"),
    "GREATER_GREATER_EQUAL": ("GREATER_GREATER", ">>"),
}

ParseRule = namedtuple("ParseRule", ["prefix", "infix", "precedence"])

NO_RULE = ParseRule(None, None, Precedence.NONE)


class Parser:
    class Error(RuntimeError):
        pass

    def __init__(self, tokens, on_error):
        self.tokens = tokens
        self.on_error = on_error
        self.current = 0

        binary = (None, self.binary)
        rules = {
            "LEFT_PAREN": (self.grouping, self.call, Precedence.CALL),
            "DOT": (None, self.get, Precedence.CALL),
            "PLUS_PLUS": (self.increment, self.postfix, Precedence.CALL),
            "MINUS_MINUS": (self.increment, self.postfix, Precedence.CALL),

            "BANG": (self.unary, None, Precedence.NONE),
            "TILDE": (self.unary, None, Precedence.NONE),
            "NEW": (self.unary, None, Precedence.NONE),
            "MINUS": (self.unary, self.binary, Precedence.TERM),

            "STAR": (*binary, Precedence.FACTOR),
            "SLASH": (*binary, Precedence.FACTOR),
            "PERCENT": (*binary, Precedence.FACTOR),
            "PLUS": (*binary, Precedence.TERM),
            "LESS_LESS": (*binary, Precedence.SHIFT),
            "GREATER_GREATER": (*binary, Precedence.SHIFT),
            "GREATER": (*binary, Precedence.COMPARISON),
            "GREATER_EQUAL": (*binary, Precedence.COMPARISON),
            "LESS": (*binary, Precedence.COMPARISON),
            "LESS_EQUAL": (*binary, Precedence.COMPARISON),
            "EQUAL_EQUAL": (*binary, Precedence.EQUALITY),
            "BANG_EQUAL": (*binary, Precedence.EQUALITY),
            "BIT_AND": (*binary, Precedence.BIT_AND),
            "CARET": (*binary, Precedence.BIT_XOR),
            "BIT_OR": (*binary, Precedence.BIT_OR),
            "COMMA": (*binary, Precedence.COMMA),

            "AND": (None, self.logical, Precedence.AND),
            "OR": (None, self.logical, Precedence.OR),
            "QUESTION": (None, self.conditional, Precedence.ASSIGNMENT),
            "EQUAL": (None, self.assignment, Precedence.ASSIGNMENT),

            "NUMBER": (self.literal, None, Precedence.NONE),
            "STRING": (self.literal, None, Precedence.NONE),
            "TRUE": (self.literal, None, Precedence.NONE),
            "FALSE": (self.literal, None, Precedence.NONE),
            "NULL": (self.literal, None, Precedence.NONE),
            "IDENTIFIER": (self.variable, None, Precedence.NONE),
            "THIS": (self.this, None, Precedence.NONE),
        }
        for compound in COMPOUND_ASSIGNMENTS:
            rules[compound] = (None, self.assignment, Precedence.ASSIGNMENT)
        self.rules = {type: ParseRule(*rule) for type, rule in rules.items()}

    def parse(self):
        statements = []
        while not self.at_end():
            if (statement := self.declaration()) is not None:
                statements.append(statement)
        return statements

    # Declarations and statements

    def declaration(self):
        try:
            if self.match("CLASS"):
                return self.class_declaration()
            if self.match("FUN"):
                return self.function("function")
            if self.match("VAR"):
                return self.var_declaration()
            return self.statement()
        except Parser.Error:
            self.synchronize()
            return None

    def class_declaration(self):
        name = self.consume("IDENTIFIER", "Expected class name.")
        self.consume("LEFT_BRACE", "Expected '{' before class body.")

        fields = {}
        methods = {}
        while not self.at_end() and self.peek().type != "RIGHT_BRACE":
            member = self.consume("IDENTIFIER", "Expected field or method name.")
            if member.lexeme in fields or member.lexeme in methods:
                self.error(member, f"Already a member named '{member.lexeme}' in this class.")
            if self.match("LEFT_PAREN"):
                methods[member.lexeme] = self.finish_function(member, "method")
            else:
                initializer = None
                if self.match("EQUAL"):
                    initializer = self.expression(Precedence.ASSIGNMENT)
                self.consume("SEMICOLON", "Expected ';' after field declaration.")
                fields[member.lexeme] = initializer

        self.consume("RIGHT_BRACE", "Expected '}' after class body.")
        return Stmt.Class(name, fields, methods)

    def function(self, kind):
        name = self.consume("IDENTIFIER", f"Expected {kind} name.")
        self.consume("LEFT_PAREN", f"Expected '(' after {kind} name.")
        return self.finish_function(name, kind)

    def finish_function(self, name, kind):
        params = []
        if self.peek().type != "RIGHT_PAREN":
            params.append(self.consume(
                "IDENTIFIER", "Expected parameter name."))
            while self.match("COMMA"):
                if len(params) >= 255:
                    self.error(
                        self.peek(), "Can't have more than 255 parameters.")
                params.append(self.consume(
                    "IDENTIFIER", "Expected parameter name."))

        self.consume("RIGHT_PAREN", "Expected ')' after parameters.")
        self.consume("LEFT_BRACE", f"Expected '{{' before {kind} body.")
        return Stmt.Function(name, params, self.block())

    def statement(self):
        if self.match("FOR"):
            return self.for_statement()
        if self.match("IF"):
            return self.if_statement()
        if self.match("LEFT_BRACE"):
            return Stmt.Block(self.block())
        if keyword := self.match("RETURN"):
            return self.return_statement(keyword)
        if self.match("WHILE"):
            return self.while_statement()
        if self.match("DO"):
            return self.do_while_statement()
        if self.match("LOOP"):
            return Stmt.While(Expr.Literal(True), self.statement())
        if keyword := self.match("BREAK"):
            self.consume("SEMICOLON", "Expected ';' after 'break'.")
            return Stmt.Break(keyword)
        if keyword := self.match("CONTINUE"):
            self.consume("SEMICOLON", "Expected ';' after 'continue'.")
            return Stmt.Continue(keyword)
        return self.expression_statement()

    def block(self):
        statements = []
        while self.peek().type != "RIGHT_BRACE" and not self.at_end():
            if (statement := self.declaration()) is not None:
                statements.append(statement)
        self.consume("RIGHT_BRACE", "Expected '}' after block.")
        return statements

    def for_statement(self):
        self.consume("LEFT_PAREN", "Expected '(' after 'for'.")

        initializer = None
        if self.match("VAR"):
            initializer = self.var_declaration()
        elif not self.match("SEMICOLON"):
            initializer = self.expression_statement()

        condition = None
        if self.peek().type != "SEMICOLON":
            condition = self.expression()
        self.consume("SEMICOLON", "Expected ';' after loop condition.")

        increment = None
        if self.peek().type != "RIGHT_PAREN":
            increment = self.expression()
        self.consume("RIGHT_PAREN", "Expected ')' after for clauses.")

        body = self.statement()
        # The surrounding block owns the initializer's scope.
        return Stmt.Block([Stmt.For(initializer, condition, increment, body)])

    def if_statement(self):
        self.consume("LEFT_PAREN", "Expected '(' after 'if'.")
        condition = self.expression()
        self.consume("RIGHT_PAREN", "Expected ')' after condition.")
        then_branch = self.statement()
        else_branch = None
        if self.match("ELSE"):
            else_branch = self.statement()
        return Stmt.If(condition, then_branch, else_branch)

    def expression_statement(self):
        expression = self.expression()
        self.consume("SEMICOLON", "Expected ';' after expression.")
        return Stmt.Expression(expression)

    def return_statement(self, keyword):
        value = None
        if self.peek().type != "SEMICOLON":
            value = self.expression()
        self.consume("SEMICOLON", "Expected ';' after return value.")
        return Stmt.Return(keyword, value)

    def var_declaration(self):
        name = self.consume("IDENTIFIER", "Expected variable name.")
        type = None
        if self.match("COLON"):
            type = self.consume("IDENTIFIER", "Expected type name after ':'.")
        initializer = None
        if self.match("EQUAL"):
            initializer = self.expression()
        self.consume("SEMICOLON", "Expected ';' after variable declaration.")
        return Stmt.Var(name, type, initializer)

    def while_statement(self):
        self.consume("LEFT_PAREN", "Expected '(' after 'while'.")
        condition = self.expression()
        self.consume("RIGHT_PAREN", "Expected ')' after condition.")
        body = self.statement()
        return Stmt.While(condition, body)

    def do_while_statement(self):
        body = self.statement()
        self.consume("WHILE", "Expected 'while' after do body.")
        self.consume("LEFT_PAREN", "Expected '(' after 'while'.")
        condition = self.expression()
        self.consume("RIGHT_PAREN", "Expected ')' after condition.")
        self.consume("SEMICOLON", "Expected ';' after do-while condition.")
        return Stmt.DoWhile(body, condition)

    # Expressions

    def expression(self, precedence=Precedence.COMMA):
        return self.parse_precedence(precedence)

    def parse_precedence(self, precedence):
        token = self.advance()
        prefix = self.rule(token).prefix
        if prefix is None:
            raise self.error(token, "Expected expression.")
        expr = prefix(token)

        while precedence <= self.rule(self.peek()).precedence:
            token = self.advance()
            expr = self.rule(token).infix(expr, token)
        return expr

    def rule(self, token):
        return self.rules.get(token.type, NO_RULE)

    def binary(self, left, operator):
        # One level tighter on the right keeps binary operators left-associative.
        right = self.parse_precedence(self.rule(operator).precedence + 1)
        return Expr.Binary(left, operator, right)

    def logical(self, left, operator):
        right = self.parse_precedence(self.rule(operator).precedence + 1)
        return Expr.Logical(left, operator, right)

    def assignment(self, left, operator):
        value = self.parse_precedence(Precedence.ASSIGNMENT)
        if isinstance(left, Expr.Variable):
            if operator.type in COMPOUND_ASSIGNMENTS:
                type, lexeme = COMPOUND_ASSIGNMENTS[operator.type]
                binary = Token(type, lexeme, None, operator.line, operator.column - 1)
                value = Expr.Binary(Expr.Variable(left.name), binary, value)
            return Expr.Assign(left.name, value)
        if isinstance(left, Expr.Get) and operator.type == "EQUAL":
            return Expr.Set(left.object, left.name, value)
        self.error(operator, "Invalid assignment target.")
        return left

    def conditional(self, condition, question):
        then_branch = self.parse_precedence(Precedence.ASSIGNMENT)
        self.consume("COLON", "Expected ':' after then branch of conditional expression.")
        else_branch = self.parse_precedence(Precedence.ASSIGNMENT)
        return Expr.Conditional(condition, then_branch, else_branch)

    def unary(self, operator):
        return Expr.Unary(operator, self.parse_precedence(Precedence.UNARY))

    def increment(self, operator):
        operand = self.parse_precedence(Precedence.UNARY)
        if not isinstance(operand, Expr.Variable):
            self.error(operator, "Invalid increment/decrement target.")
        return Expr.Unary(operator, operand)

    def postfix(self, operand, operator):
        if not isinstance(operand, Expr.Variable):
            self.error(operator, "Invalid increment/decrement target.")
        return Expr.Postfix(operand, operator)

    def call(self, callee, paren):
        arguments = []
        if self.peek().type != "RIGHT_PAREN":
            arguments.append(self.expression(Precedence.ASSIGNMENT))
            while self.match("COMMA"):
                if len(arguments) >= 255:
                    self.error(
                        self.peek(), "Can't have more than 255 arguments.")
                arguments.append(self.expression(Precedence.ASSIGNMENT))
        paren = self.consume("RIGHT_PAREN", "Expected ')' after arguments.")
        return Expr.Call(callee, paren, arguments)

    def get(self, object, dot):
        name = self.consume(
            "IDENTIFIER", "Expected property name after '.'.")
        return Expr.Get(object, name)

    def grouping(self, paren):
        expr = self.expression()
        self.consume("RIGHT_PAREN", "Expected ')' after expression.")
        return Expr.Grouping(expr)

    def literal(self, token):
        match token.type:
            case "TRUE": return Expr.Literal(True)
            case "FALSE": return Expr.Literal(False)
            case "NULL": return Expr.Literal(None)
            case _: return Expr.Literal(token.literal)

    def variable(self, token):
        return Expr.Variable(token)

    def this(self, keyword):
        return Expr.This(keyword)

    # Helpers

    def synchronize(self):
        while not self.at_end():
            match self.peek().type:
                case "SEMICOLON":
                    self.advance()
                    return
                case "CLASS" | "FUN" | "VAR" | "FOR" | "IF" | "WHILE" | "RETURN":
                    return
            self.advance()

    def consume(self, token_type, message):
        if token := self.match(token_type):
            return token
        raise self.error(self.peek(), message)

    def match(self, *token_types):
        if self.peek().type in token_types:
            return self.advance()
        return None

    def advance(self):
        token = self.peek()
        if not self.at_end():
            self.current += 1
        return token

    def at_end(self):
        return self.peek().type == "EOF"

    def peek(self):
        return self.tokens[self.current]

    def error(self, token, message):
        self.on_error(token, message)
        return Parser.Error(message)
