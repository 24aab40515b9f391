import argparse
import sys

from .interpreter import Interpreter
from .parser import Parser
from .resolver import Resolver
from .scanner import Scanner


class Grus:
    def __init__(self, out=None, err=None):
        self.out = out if out is not None else sys.stdout
        self.err = err if err is not None else sys.stderr
        self.had_error = False
        self.had_runtime_error = False

    def run_file(self, filename):
        with open(filename, "r") as file:
            self.run(file.read())

    def run(self, source):
        self.had_error = False
        self.had_runtime_error = False

        scanner = Scanner(source, self.lex_error)
        tokens = scanner.scan_tokens()

        parser = Parser(tokens, self.error)
        statements = parser.parse()

        if self.had_error:
            return

        interpreter = Interpreter(self.runtime_error, self.out)

        resolver = Resolver(self.error, interpreter.globals.values)
        locals = resolver.resolve(statements)

        if self.had_error:
            return

        interpreter.interpret(statements, locals)

    def lex_error(self, line, column, message):
        self.report(line, column, "", message)

    def error(self, token, message):
        if token.type == "EOF":
            self.report(token.line, token.column, " at end", message)
        else:
            self.report(token.line, token.column, f" at '{token.lexeme}'", message)

    def runtime_error(self, token, message):
        print(f"{message}\n[line {token.line}:{token.column}]", file=self.err)
        self.had_runtime_error = True

    def report(self, line, column, where, message):
        print(f"[line {line}:{column}] Error{where}: {message}", file=self.err)
        self.had_error = True

    def exit_code(self):
        if self.had_error:
            return 65
        if self.had_runtime_error:
            return 70
        return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="pygrus", description="Run Grus scripts")
    parser.add_argument(
        "filename", nargs="?",
        help="script to run; the program is read from standard input when omitted")
    args = parser.parse_args(argv)

    grus = Grus()
    if args.filename is not None:
        grus.run_file(args.filename)
    else:
        grus.run(sys.stdin.read())
    return grus.exit_code()
