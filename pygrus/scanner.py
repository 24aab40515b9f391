class Token:
    def __init__(self, type, lexeme, literal, line, column):
        self.type = type
        self.lexeme = lexeme
        self.literal = literal
        self.line = line
        self.column = column

    def __str__(self):
        return f"{self.type} {self.lexeme} {self.literal}"

    def __repr__(self):
        return f"Token({self.type!r}, {self.lexeme!r}, {self.literal!r}, {self.line}, {self.column})"


def is_digit(c):
    return "0" <= c <= "9"


def is_alpha(c):
    return "a" <= c <= "z" or "A" <= c <= "Z" or c == "_"


def is_alphanumeric(c):
    return is_alpha(c) or is_digit(c)


class Scanner:
    KEYWORDS = {
        "break",
        "class",
        "continue",
        "do",
        "else",
        "false",
        "for",
        "fun",
        "if",
        "loop",
        "new",
        "null",
        "return",
        "super",
        "this",
        "true",
        "var",
        "while",
    }

    def __init__(self, source, on_error):
        self.source = source
        self.on_error = on_error
        self.start = 0
        self.current = 0
        self.line = 1
        self.column = 0
        self.tokens = []

    def scan_tokens(self):
        while not self.at_end():
            self.start = self.current
            self.scan_token()
        self.tokens.append(Token("EOF", "", None, self.line, self.column))
        return self.tokens

    def scan_token(self):
        match c := self.advance():
            case "(": self.add_token("LEFT_PAREN")
            case ")": self.add_token("RIGHT_PAREN")
            case "{": self.add_token("LEFT_BRACE")
            case "}": self.add_token("RIGHT_BRACE")
            case ",": self.add_token("COMMA")
            case ".": self.add_token("DOT")
            case ";": self.add_token("SEMICOLON")
            case "?": self.add_token("QUESTION")
            case ":": self.add_token("COLON")
            case "~": self.add_token("TILDE")
            case "-":
                if self.match("-"):
                    self.add_token("MINUS_MINUS")
                else:
                    self.add_token("MINUS_EQUAL" if self.match("=") else "MINUS")
            case "+":
                if self.match("+"):
                    self.add_token("PLUS_PLUS")
                else:
                    self.add_token("PLUS_EQUAL" if self.match("=") else "PLUS")
            case "*": self.add_token("STAR_EQUAL" if self.match("=") else "STAR")
            case "%": self.add_token("PERCENT_EQUAL" if self.match("=") else "PERCENT")
            case "^": self.add_token("CARET_EQUAL" if self.match("=") else "CARET")
            case "&":
                if self.match("&"):
                    self.add_token("AND")
                else:
                    self.add_token("BIT_AND_EQUAL" if self.match("=") else "BIT_AND")
            case "|":
                if self.match("|"):
                    self.add_token("OR")
                else:
                    self.add_token("BIT_OR_EQUAL" if self.match("=") else "BIT_OR")
            case "!": self.add_token("BANG_EQUAL" if self.match("=") else "BANG")
            case "=": self.add_token("EQUAL_EQUAL" if self.match("=") else "EQUAL")
            case "<":
                if self.match("="):
                    self.add_token("LESS_EQUAL")
                elif self.match("<"):
                    self.add_token("LESS_LESS_EQUAL" if self.match("=") else "LESS_LESS")
                else:
                    self.add_token("LESS")
            case ">":
                if self.match("="):
                    self.add_token("GREATER_EQUAL")
                elif self.match(">"):
                    self.add_token("GREATER_GREATER_EQUAL" if self.match("=") else "GREATER_GREATER")
                else:
                    self.add_token("GREATER")
            case "/":
                if self.match("/"):
                    self.comment()
                elif self.match("*"):
                    self.block_comment()
                else:
                    self.add_token("SLASH_EQUAL" if self.match("=") else "SLASH")
            case " " | "\r" | "\t": pass
            case "\n":
                self.line += 1
                self.column = 0
            case "\"": self.string()
            case _:
                if is_digit(c):
                    self.number()
                elif is_alpha(c):
                    self.identifier()
                else:
                    self.on_error(self.line, self.column, f"Unexpected character: {c}")

    def comment(self):
        while self.peek() != "\n" and not self.at_end():
            self.advance()

    def block_comment(self):
        while not self.at_end():
            if self.peek() == "*" and self.peek_next() == "/":
                self.advance()
                self.advance()
                return
            self.newline_in_token()
            self.advance()
        self.on_error(self.line, self.column, "Unterminated block comment.")

    def string(self):
        while self.peek() != "\"" and not self.at_end():
            self.newline_in_token()
            self.advance()

        if self.at_end():
            self.on_error(self.line, self.column, "Unterminated string.")
            return

        self.advance()  # Closing "
        value = self.source[self.start + 1: self.current - 1]
        self.add_token("STRING", value)

    def newline_in_token(self):
        # The newline itself is about to be counted by advance().
        if self.peek() == "\n":
            self.line += 1
            self.column = -1

    def number(self):
        while is_digit(self.peek()):
            self.advance()

        if self.peek() == "." and is_digit(self.peek_next()):
            self.advance()
            while is_digit(self.peek()):
                self.advance()

        value = float(self.source[self.start:self.current])
        self.add_token("NUMBER", value)

    def identifier(self):
        while is_alphanumeric(self.peek()):
            self.advance()

        text = self.source[self.start:self.current]
        if text in Scanner.KEYWORDS:
            self.add_token(text.upper())
        else:
            self.add_token("IDENTIFIER")

    def add_token(self, type, literal=None):
        lexeme = self.source[self.start:self.current]
        self.tokens.append(Token(type, lexeme, literal, self.line, self.column))

    def match(self, expected):
        if not self.at_end():
            if self.source[self.current] == expected:
                self.current += 1
                self.column += 1
                return True
        return False

    def advance(self):
        c = self.source[self.current]
        self.current += 1
        self.column += 1
        return c

    def peek(self):
        if self.at_end():
            return "\0"
        return self.source[self.current]

    def peek_next(self):
        if self.current + 1 >= len(self.source):
            return "\0"
        return self.source[self.current + 1]

    def at_end(self):
        return not self.current < len(self.source)
