from .errors import GrusRuntimeError


class Environment:
    """One scope of variable bindings, chained to the scope that encloses it."""

    def __init__(self, enclosing=None):
        self.values = {}
        self.enclosing = enclosing

    def define(self, name, value):
        self.values[name] = value

    def get(self, name):
        return self.owner(name).values[name.lexeme]

    def assign(self, name, value):
        self.owner(name).values[name.lexeme] = value

    def owner(self, name):
        """The nearest environment binding `name`, searching outward."""
        environment = self
        while environment is not None:
            if name.lexeme in environment.values:
                return environment
            environment = environment.enclosing
        raise GrusRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

    # Resolved lookups trust the distance and never search.

    def get_at(self, distance, name):
        return self.ancestor(distance).values[name]

    def assign_at(self, distance, name, value):
        self.ancestor(distance).values[name] = value

    def ancestor(self, distance):
        environment = self
        for _ in range(distance):
            environment = environment.enclosing
        return environment
