class GrusRuntimeError(RuntimeError):
    def __init__(self, token, message):
        super().__init__(message)
        self.token = token
        self.message = message


# Control transfer signals. They are not RuntimeErrors so that a handler for
# runtime faults never swallows a return, break or continue in flight.

class ReturnSignal(Exception):
    def __init__(self, value):
        super().__init__("return")
        self.value = value


class BreakSignal(Exception):
    pass


class ContinueSignal(Exception):
    pass
