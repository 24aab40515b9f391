from .syntax import Expr, Stmt


class Resolver(Expr.Visitor, Stmt.Visitor):
    """Computes how many environments separate each local variable use from
    its declaration, and reports scope errors along the way.

    The outermost scope stands for the globals. It is tracked so that
    duplicate and self-referencing global declarations are caught, but names
    found there get no distance: the interpreter looks them up dynamically.

    `natives` names the globals the host defines before the program runs.
    """

    def __init__(self, on_error, natives=()):
        self.on_error = on_error
        self.scopes = [{}]
        self.locals = {}
        self.globals = set(natives)
        self.loop_depth = 0
        self.current_function = "NONE"
        self.current_class = "NONE"

    def resolve(self, statements):
        if len(self.scopes) == 1:
            # Functions may refer to globals declared further down the file.
            self.globals.update(
                statement.name.lexeme for statement in statements
                if isinstance(statement, (Stmt.Var, Stmt.Function, Stmt.Class)))
        for statement in statements:
            self.resolve_node(statement)
        return self.locals

    def resolve_node(self, expr_or_stmt):
        expr_or_stmt.accept(self)

    def visit_block_stmt(self, stmt):
        self.begin_scope()
        self.resolve(stmt.statements)
        self.end_scope()

    def visit_break_stmt(self, stmt):
        if self.loop_depth == 0:
            self.on_error(stmt.keyword, "Unexpected 'break' outside of a loop.")

    def visit_class_stmt(self, stmt):
        self.declare(stmt.name)
        self.define(stmt.name)

        for initializer in stmt.fields.values():
            if initializer:
                self.resolve_node(initializer)

        enclosing_class = self.current_class
        self.current_class = "CLASS"

        self.begin_scope()
        self.scopes[-1]["this"] = True
        for method in stmt.methods.values():
            self.resolve_function(method, "METHOD")
        self.end_scope()

        self.current_class = enclosing_class

    def visit_continue_stmt(self, stmt):
        if self.loop_depth == 0:
            self.on_error(stmt.keyword, "Unexpected 'continue' outside of a loop.")

    def visit_dowhile_stmt(self, stmt):
        self.resolve_loop_body(stmt.body)
        self.resolve_node(stmt.condition)

    def visit_expression_stmt(self, stmt):
        self.resolve_node(stmt.expression)

    def visit_for_stmt(self, stmt):
        if stmt.initializer:
            self.resolve_node(stmt.initializer)
        if stmt.condition:
            self.resolve_node(stmt.condition)
        if stmt.increment:
            self.resolve_node(stmt.increment)
        self.resolve_loop_body(stmt.body)

    def visit_function_stmt(self, stmt):
        self.declare(stmt.name)
        self.define(stmt.name)
        self.resolve_function(stmt, "FUNCTION")

    def visit_if_stmt(self, stmt):
        self.resolve_node(stmt.condition)
        self.resolve_node(stmt.then_branch)
        if stmt.else_branch:
            self.resolve_node(stmt.else_branch)

    def visit_return_stmt(self, stmt):
        if self.current_function == "NONE":
            self.on_error(stmt.keyword, "Can't return from top-level code.")
        if stmt.value:
            self.resolve_node(stmt.value)

    def visit_var_stmt(self, stmt):
        self.declare(stmt.name)
        if stmt.initializer:
            self.resolve_node(stmt.initializer)
        self.define(stmt.name)

    def visit_while_stmt(self, stmt):
        self.resolve_node(stmt.condition)
        self.resolve_loop_body(stmt.body)

    def visit_assign_expr(self, expr):
        self.resolve_node(expr.value)
        self.resolve_local(expr, expr.name)

    def visit_binary_expr(self, expr):
        self.resolve_node(expr.left)
        self.resolve_node(expr.right)

    def visit_call_expr(self, expr):
        self.resolve_node(expr.callee)
        for argument in expr.arguments:
            self.resolve_node(argument)

    def visit_conditional_expr(self, expr):
        self.resolve_node(expr.condition)
        self.resolve_node(expr.then_branch)
        self.resolve_node(expr.else_branch)

    def visit_get_expr(self, expr):
        self.resolve_node(expr.object)

    def visit_grouping_expr(self, expr):
        self.resolve_node(expr.expression)

    def visit_literal_expr(self, expr):
        pass

    def visit_logical_expr(self, expr):
        self.resolve_node(expr.left)
        self.resolve_node(expr.right)

    def visit_postfix_expr(self, expr):
        self.resolve_node(expr.operand)

    def visit_set_expr(self, expr):
        self.resolve_node(expr.value)
        self.resolve_node(expr.object)

    def visit_this_expr(self, expr):
        if self.current_class == "NONE":
            self.on_error(expr.keyword, "Can't use 'this' outside of a class.")
            return
        self.resolve_local(expr, expr.keyword)

    def visit_unary_expr(self, expr):
        self.resolve_node(expr.right)

    def visit_variable_expr(self, expr):
        innermost = len(self.scopes) - 1
        if self.scopes[-1].get(expr.name.lexeme, None) is False:
            # Skip the binding being initialized; an outer one may be meant.
            innermost -= 1
            if not self.declared_outside(expr.name.lexeme):
                self.on_error(
                    expr.name, "Can't read local variable in its own initializer.")
        self.resolve_local(expr, expr.name, innermost)

    def declared_outside(self, name):
        """Whether a scope enclosing the innermost one can supply `name`."""
        if len(self.scopes) > 1 and name in self.globals:
            return True
        return any(name in scope for scope in self.scopes[:-1])

    def begin_scope(self):
        self.scopes.append({})

    def end_scope(self):
        self.scopes.pop()

    def declare(self, name):
        if name.lexeme in self.scopes[-1]:
            self.on_error(
                name, f"Variable '{name.lexeme}' already declared in this scope.")
        self.scopes[-1][name.lexeme] = False

    def define(self, name):
        self.scopes[-1][name.lexeme] = True

    def resolve_function(self, function, kind):
        enclosing_function = self.current_function
        enclosing_loop_depth = self.loop_depth
        self.current_function = kind
        self.loop_depth = 0

        self.begin_scope()
        for param in function.params:
            self.declare(param)
            self.define(param)
        self.resolve(function.body)
        self.end_scope()

        self.loop_depth = enclosing_loop_depth
        self.current_function = enclosing_function

    def resolve_loop_body(self, body):
        self.loop_depth += 1
        self.resolve_node(body)
        self.loop_depth -= 1

    def resolve_local(self, expr, name, innermost=None):
        if innermost is None:
            innermost = len(self.scopes) - 1
        # Index 0 is the global scope, left to dynamic lookup.
        for i in range(innermost, 0, -1):
            if name.lexeme in self.scopes[i]:
                self.locals[expr] = len(self.scopes) - 1 - i
                return
