def make_syntax_tree_node(base_class, name, *attrs):
    def __init__(self, *values):
        if len(values) != len(attrs):
            message = f"{name}.__init__() takes {len(attrs)} positional arguments but {len(values)} were given"
            raise TypeError(message)

        for attr, value in zip(attrs, values):
            object.__setattr__(self, attr, value)

    def __setattr__(self, attr, value):
        raise AttributeError(f"{name} nodes are immutable")

    def __repr__(self):
        fields = ", ".join(f"{attr}={getattr(self, attr)!r}" for attr in attrs)
        return f"{base_class.__name__}.{name}({fields})"

    visit_fn_name = f"visit_{name.lower()}_{base_class.__name__.lower()}"

    def accept(self, visitor):
        return getattr(visitor, visit_fn_name)(self)

    # Nodes hash and compare by identity; the resolver's side-table depends on it.
    subclass = type(
        name, (base_class,),
        {"__init__": __init__, "__setattr__": __setattr__, "__repr__": __repr__,
         "__slots__": attrs, "accept": accept})

    setattr(base_class, name, subclass)

    def visit(self, node):
        raise NotImplementedError(visit_fn_name)

    setattr(base_class.Visitor, visit_fn_name, visit)


class Expr:
    __slots__ = ()

    def accept(self, visitor):
        raise NotImplementedError()

    class Visitor:
        pass


class Stmt:
    __slots__ = ()

    def accept(self, visitor):
        raise NotImplementedError()

    class Visitor:
        pass


# Expr subclasses
make_syntax_tree_node(Expr, "Assign", "name", "value")
make_syntax_tree_node(Expr, "Binary", "left", "operator", "right")
make_syntax_tree_node(Expr, "Call", "callee", "paren", "arguments")
make_syntax_tree_node(Expr, "Conditional", "condition", "then_branch", "else_branch")
make_syntax_tree_node(Expr, "Get", "object", "name")
make_syntax_tree_node(Expr, "Grouping", "expression")
make_syntax_tree_node(Expr, "Literal", "value")
make_syntax_tree_node(Expr, "Logical", "left", "operator", "right")
make_syntax_tree_node(Expr, "Postfix", "operand", "operator")
make_syntax_tree_node(Expr, "Set", "object", "name", "value")
make_syntax_tree_node(Expr, "This", "keyword")
make_syntax_tree_node(Expr, "Unary", "operator", "right")
make_syntax_tree_node(Expr, "Variable", "name")

# Stmt subclasses
make_syntax_tree_node(Stmt, "Block", "statements")
make_syntax_tree_node(Stmt, "Break", "keyword")
make_syntax_tree_node(Stmt, "Class", "name", "fields", "methods")
make_syntax_tree_node(Stmt, "Continue", "keyword")
make_syntax_tree_node(Stmt, "DoWhile", "body", "condition")
make_syntax_tree_node(Stmt, "Expression", "expression")
make_syntax_tree_node(Stmt, "For", "initializer", "condition", "increment", "body")
make_syntax_tree_node(Stmt, "Function", "name", "params", "body")
make_syntax_tree_node(Stmt, "If", "condition", "then_branch", "else_branch")
make_syntax_tree_node(Stmt, "Return", "keyword", "value")
make_syntax_tree_node(Stmt, "Var", "name", "type", "initializer")
make_syntax_tree_node(Stmt, "While", "condition", "body")
