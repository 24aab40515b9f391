from .environment import Environment
from .errors import GrusRuntimeError, ReturnSignal


class GrusCallable:
    def arity(self):
        """Number of expected arguments, or None when any count is accepted."""
        raise NotImplementedError()

    def call(self, interpreter, arguments):
        raise NotImplementedError()


class NativeFunction(GrusCallable):
    def __init__(self, name, arity, function):
        self.name = name
        self._arity = arity
        self.function = function

    def arity(self):
        return self._arity

    def call(self, interpreter, arguments):
        return self.function(interpreter, *arguments)

    def __str__(self):
        return "<native fn>"


class GrusFunction(GrusCallable):
    def __init__(self, declaration, closure):
        self.declaration = declaration
        self.closure = closure

    def arity(self):
        return len(self.declaration.params)

    def bind(self, instance):
        environment = Environment(self.closure)
        environment.define("this", instance)
        return GrusFunction(self.declaration, environment)

    def call(self, interpreter, arguments):
        environment = Environment(self.closure)
        for param, argument in zip(self.declaration.params, arguments):
            environment.define(param.lexeme, argument)
        try:
            interpreter.execute_block(self.declaration.body, environment)
        except ReturnSignal as returned:
            return returned.value
        return None

    def __str__(self):
        return f"<fn {self.declaration.name.lexeme}>"


class GrusClass(GrusCallable):
    def __init__(self, name, fields, methods, closure):
        self.name = name
        self.fields = fields
        self.methods = methods
        self.closure = closure

    def arity(self):
        if initializer := self.find_method("init"):
            return initializer.arity()
        return 0

    def call(self, interpreter, arguments):
        # Field initializers run in the scope the class was declared in, so
        # they cannot see constructor arguments.
        fields = {}
        for name, initializer in self.fields.items():
            value = None
            if initializer:
                value = interpreter.evaluate_in(initializer, self.closure)
            fields[name] = value

        instance = GrusInstance(self, fields)
        if initializer := self.find_method("init"):
            result = initializer.bind(instance).call(interpreter, arguments)
            if result is not None:
                return result
        return instance

    def find_method(self, name):
        return self.methods.get(name, None)

    def __str__(self):
        return f"<class {self.name}>"


class GrusInstance:
    def __init__(self, klass, fields):
        self.klass = klass
        self.fields = fields

    def get(self, name):
        if name.lexeme in self.fields:
            return self.fields[name.lexeme]
        if method := self.klass.find_method(name.lexeme):
            return method.bind(self)
        raise GrusRuntimeError(
            name, f"Undefined property '{name.lexeme}'.")

    def set(self, name, value):
        self.fields[name.lexeme] = value

    def __str__(self):
        return f"{self.klass.name} instance"
