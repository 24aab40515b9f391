import unittest

from pygrus.scanner import Scanner


def scan(source):
    errors = []
    tokens = Scanner(source, lambda line, column, message: errors.append((line, column, message))).scan_tokens()
    return tokens, errors


def types(source):
    tokens, _ = scan(source)
    return [token.type for token in tokens]


class TestScanner(unittest.TestCase):
    def test_single_character_tokens(self):
        self.assertEqual(
            types("(){},.;?:~"),
            ["LEFT_PAREN", "RIGHT_PAREN", "LEFT_BRACE", "RIGHT_BRACE", "COMMA",
             "DOT", "SEMICOLON", "QUESTION", "COLON", "TILDE", "EOF"])

    def test_two_character_operators(self):
        self.assertEqual(
            types("== != <= >= && || ++ -- << >>"),
            ["EQUAL_EQUAL", "BANG_EQUAL", "LESS_EQUAL", "GREATER_EQUAL", "AND", "OR",
             "PLUS_PLUS", "MINUS_MINUS", "LESS_LESS", "GREATER_GREATER", "EOF"])

    def test_compound_assignment_operators(self):
        self.assertEqual(
            types("+= -= *= /= %= ^= &= |= <<= >>="),
            ["PLUS_EQUAL", "MINUS_EQUAL", "STAR_EQUAL", "SLASH_EQUAL", "PERCENT_EQUAL",
             "CARET_EQUAL", "BIT_AND_EQUAL", "BIT_OR_EQUAL", "LESS_LESS_EQUAL",
             "GREATER_GREATER_EQUAL", "EOF"])

    def test_single_bitwise_operators(self):
        self.assertEqual(
            types("a & b | c ^ d"),
            ["IDENTIFIER", "BIT_AND", "IDENTIFIER", "BIT_OR", "IDENTIFIER",
             "CARET", "IDENTIFIER", "EOF"])

    def test_keywords_and_identifiers(self):
        self.assertEqual(
            types("var class fun return null true false new this while do loop break continue"),
            ["VAR", "CLASS", "FUN", "RETURN", "NULL", "TRUE", "FALSE", "NEW", "THIS",
             "WHILE", "DO", "LOOP", "BREAK", "CONTINUE", "EOF"])
        tokens, _ = scan("print _under score9 classy")
        self.assertEqual([t.type for t in tokens[:-1]], ["IDENTIFIER"] * 4)
        self.assertEqual([t.lexeme for t in tokens[:-1]], ["print", "_under", "score9", "classy"])

    def test_numbers(self):
        tokens, errors = scan("12 3.25 7.")
        self.assertEqual(errors, [])
        self.assertEqual(tokens[0].literal, 12.0)
        self.assertEqual(tokens[1].literal, 3.25)
        # A trailing dot is not part of the number.
        self.assertEqual([t.type for t in tokens[2:]], ["NUMBER", "DOT", "EOF"])
        self.assertEqual(tokens[2].literal, 7.0)

    def test_string_keeps_raw_text(self):
        tokens, errors = scan('"hello\\n world"')
        self.assertEqual(errors, [])
        self.assertEqual(tokens[0].type, "STRING")
        self.assertEqual(tokens[0].literal, "hello\\n world")
        self.assertEqual(tokens[0].lexeme, '"hello\\n world"')

    def test_unterminated_string_is_reported(self):
        tokens, errors = scan('var s = "open')
        self.assertEqual(len(errors), 1)
        self.assertEqual(errors[0][2], "Unterminated string.")
        self.assertNotIn("STRING", [t.type for t in tokens])
        self.assertEqual(tokens[-1].type, "EOF")

    def test_comments_are_skipped(self):
        self.assertEqual(types("a // rest of line\nb"), ["IDENTIFIER", "IDENTIFIER", "EOF"])
        self.assertEqual(types("a /* one\ntwo */ b"), ["IDENTIFIER", "IDENTIFIER", "EOF"])

    def test_unterminated_block_comment_is_reported(self):
        tokens, errors = scan("a /* never closed")
        self.assertEqual([message for _, _, message in errors], ["Unterminated block comment."])
        self.assertEqual([t.type for t in tokens], ["IDENTIFIER", "EOF"])

    def test_unexpected_character_does_not_stop_scanning(self):
        tokens, errors = scan("a @ b # c")
        self.assertEqual(
            [message for _, _, message in errors],
            ["Unexpected character: @", "Unexpected character: #"])
        self.assertEqual([t.lexeme for t in tokens[:-1]], ["a", "b", "c"])

    def test_lines_and_columns(self):
        tokens, _ = scan("var a\n  = 10;")
        var, a, equal, ten, semicolon, eof = tokens
        self.assertEqual((var.line, var.column), (1, 3))
        self.assertEqual((a.line, a.column), (1, 5))
        self.assertEqual((equal.line, equal.column), (2, 3))
        self.assertEqual((ten.line, ten.column), (2, 6))
        self.assertEqual((semicolon.line, semicolon.column), (2, 7))
        self.assertEqual(eof.line, 2)

    def test_columns_after_multiline_string_and_comment(self):
        tokens, _ = scan('"a\nbc" x /*\n*/ y')
        string, x, y, _ = tokens
        self.assertEqual((string.line, string.column), (2, 3))
        self.assertEqual((x.line, x.column), (2, 5))
        self.assertEqual((y.line, y.column), (3, 4))

    def test_error_location(self):
        _, errors = scan("ok\n  $")
        self.assertEqual(errors, [(2, 3, "Unexpected character: $")])


if __name__ == "__main__":
    unittest.main()
