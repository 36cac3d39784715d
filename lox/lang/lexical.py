"""Lexical analysis for the lox language: a single left-to-right pass turning source text into a list of Tokens.

Lexical grammar, loosely:

```
<token>      ::= <operator> | <number> | <string> | <identifier> | <keyword>
<operator>   ::= "(" | ")" | "{" | "}" | "," | "." | "-" | "+" | ";" | "/" | "*"
               | "!" | "!=" | "=" | "==" | ">" | ">=" | "<" | "<="   ; two-character forms are tried first
<number>     ::= <digit>+ ( "." <digit>+ )?                           ; always a float
<string>     ::= '"' ( <char> | "\" <char> )* '"'                    ; may span lines
<identifier> ::= ( <alpha> | "_" ) ( <alpha> | <digit> | "_" )*

<comment>    ::= "//" <char>*                                         ; runs to end of line
```

Bad characters and unterminated strings are reported on the Context and scanning carries on, so several lexical errors
can surface in one pass.
"""

from lox.lang.tokens import KEYWORDS, Token, TokenType


SINGLE = {
    "(": TokenType.LEFT_PAREN,
    ")": TokenType.RIGHT_PAREN,
    "{": TokenType.LEFT_BRACE,
    "}": TokenType.RIGHT_BRACE,
    ",": TokenType.COMMA,
    ".": TokenType.DOT,
    "-": TokenType.MINUS,
    "+": TokenType.PLUS,
    ";": TokenType.SEMICOLON,
    "*": TokenType.STAR,
}

# first character: (type if followed by "=", type otherwise)
DOUBLE = {
    "!": (TokenType.BANG_EQUAL, TokenType.BANG),
    "=": (TokenType.EQUAL_EQUAL, TokenType.EQUAL),
    "<": (TokenType.LESS_EQUAL, TokenType.LESS),
    ">": (TokenType.GREATER_EQUAL, TokenType.GREATER),
}

ESCAPES = {"\"": "\"", "\\": "\\", "n": "\n", "t": "\t"}


class Scanner:
    """Turns lox source into tokens. Errors are reported to context."""

    def __init__(self, source, context):
        self.source = source
        self.context = context
        self.tokens = []

        self.start = 0    # offset of the first character of the lexeme being scanned
        self.current = 0  # offset of the character about to be consumed
        self.line = 1

    def scan_tokens(self):
        """Scans the whole source. The result always ends with exactly one EOF token."""
        while not self.is_at_end():
            self.start = self.current
            self.scan_token()

        self.tokens.append(Token(TokenType.EOF, "", None, self.line))
        return self.tokens

    def scan_token(self):
        char = self.advance()

        if char in SINGLE:
            self.add_token(SINGLE[char])
        elif char in DOUBLE:
            matched, single = DOUBLE[char]
            self.add_token(matched if self.match("=") else single)
        elif char == "/":
            if self.match("/"):
                while self.peek() != "\n" and not self.is_at_end():
                    self.advance()
            else:
                self.add_token(TokenType.SLASH)
        elif char in " \r\t":
            pass
        elif char == "\n":
            self.line += 1
        elif char == "\"":
            self.string()
        elif self.is_digit(char):
            self.number()
        elif self.is_alpha(char):
            self.identifier()
        else:
            self.context.report(self.line, "", f"Unexpected character '{char}'.")

    def string(self):
        """Scans a string literal; the opening quote has been consumed."""
        start_line = self.line
        chars = []

        while self.peek() != "\"" and not self.is_at_end():
            char = self.advance()
            if char == "\n":
                self.line += 1
            elif char == "\\" and not self.is_at_end():
                escaped = self.advance()
                if escaped == "\n":
                    self.line += 1
                char = ESCAPES.get(escaped, char + escaped)
            chars.append(char)

        if self.is_at_end():
            self.context.report(start_line, "", "Unterminated string.")
            return

        self.advance()  # closing "
        self.add_token(TokenType.STRING, "".join(chars))

    def number(self):
        while self.is_digit(self.peek()):
            self.advance()

        # a dot only belongs to the number if a digit follows it, so "1.foo" stays a property access
        if self.peek() == "." and self.is_digit(self.peek_next()):
            self.advance()
            while self.is_digit(self.peek()):
                self.advance()

        self.add_token(TokenType.NUMBER, float(self.source[self.start:self.current]))

    def identifier(self):
        while self.is_alpha_numeric(self.peek()):
            self.advance()

        text = self.source[self.start:self.current]
        self.add_token(KEYWORDS.get(text, TokenType.IDENTIFIER))

    def add_token(self, token_type, literal=None):
        text = self.source[self.start:self.current]
        self.tokens.append(Token(token_type, text, literal, self.line))

    def advance(self):
        char = self.source[self.current]
        self.current += 1
        return char

    def match(self, expected):
        """Consumes the next character only if it is expected."""
        if self.is_at_end() or self.source[self.current] != expected:
            return False
        self.current += 1
        return True

    def peek(self):
        return "" if self.is_at_end() else self.source[self.current]

    def peek_next(self):
        if self.current + 1 >= len(self.source):
            return ""
        return self.source[self.current + 1]

    def is_at_end(self):
        return self.current >= len(self.source)

    @staticmethod
    def is_alpha(char):
        return ("a" <= char <= "z") or ("A" <= char <= "Z") or char == "_"

    @staticmethod
    def is_alpha_numeric(char):
        return Scanner.is_alpha(char) or Scanner.is_digit(char)

    @staticmethod
    def is_digit(char):
        return "0" <= char <= "9"
