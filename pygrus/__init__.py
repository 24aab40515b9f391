from .grus import Grus, main
from .interpreter import Interpreter
from .parser import Parser
from .resolver import Resolver
from .scanner import Scanner, Token

__all__ = ["Grus", "Interpreter", "Parser", "Resolver", "Scanner", "Token", "main"]
