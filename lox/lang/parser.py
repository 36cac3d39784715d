"""Recursive-descent parser for the lox language. For the grammar, see lox/grammar/expr.py and lox/grammar/stmt.py.

Syntax errors are reported on the Context. After an error the parser skips to the next statement boundary and keeps
going, so one run can surface several independent syntax errors.
"""

from lox.grammar import expr as ex
from lox.grammar import stmt as st
from lox.lang.tokens import TokenType


MAX_ARGS = 255

# tokens that plausibly start a new statement, used to resynchronize after an error
STATEMENT_STARTS = {
    TokenType.CLASS,
    TokenType.FUN,
    TokenType.VAR,
    TokenType.FOR,
    TokenType.IF,
    TokenType.WHILE,
    TokenType.PRINT,
    TokenType.RETURN,
}


class ParseError(Exception):
    """Unwinds out of the current declaration. Only ever raised and caught inside Parser."""


class Parser:
    """Turns a list of Tokens into a list of statements."""

    def __init__(self, tokens, context):
        self.tokens = tokens
        self.context = context
        self.current = 0

    def parse(self):
        """Parses declarations until EOF. Declarations that failed to parse are left out of the result.

        Input nested deeper than the host stack allows is reported once, at the token where parsing gave up, and ends
        the parse. Every later phase recurses less per nesting level than the parser does, so a tree the parser
        finishes can always be resolved and evaluated.
        """
        statements = []
        while not self.is_at_end():
            try:
                declaration = self.declaration()
            except RecursionError:
                self.context.error(self.peek(), "Expression nesting too deep.")
                break
            if declaration is not None:
                statements.append(declaration)
        return statements

    # ---- statements -------------------------------------------------------------------------------------------------

    def declaration(self):
        try:
            if self.match(TokenType.CLASS):
                return self.class_declaration()
            if self.match(TokenType.FUN):
                return self.function("function")
            if self.match(TokenType.VAR):
                return self.var_declaration()
            return self.statement()
        except ParseError:
            self.synchronize()
            return None

    def class_declaration(self):
        name = self.consume(TokenType.IDENTIFIER, "Expect class name.")
        self.consume(TokenType.LEFT_BRACE, "Expect '{' before class body.")

        methods = []
        while not self.check(TokenType.RIGHT_BRACE) and not self.is_at_end():
            methods.append(self.function("method"))

        self.consume(TokenType.RIGHT_BRACE, "Expect '}' after class body.")
        return st.Class(name, tuple(methods))

    def function(self, kind):
        """Parses the part of a function or method declaration after `fun` (if any). kind is used for messages."""
        name = self.consume(TokenType.IDENTIFIER, f"Expect {kind} name.")
        self.consume(TokenType.LEFT_PAREN, f"Expect '(' after {kind} name.")

        params = []
        if not self.check(TokenType.RIGHT_PAREN):
            while True:
                if len(params) >= MAX_ARGS:
                    self.error(self.peek(), f"Can't have more than {MAX_ARGS} parameters.")
                params.append(self.consume(TokenType.IDENTIFIER, "Expect parameter name."))
                if not self.match(TokenType.COMMA):
                    break
        self.consume(TokenType.RIGHT_PAREN, "Expect ')' after parameters.")

        self.consume(TokenType.LEFT_BRACE, f"Expect '{{' before {kind} body.")
        body = self.block()
        return st.Function(name, tuple(params), tuple(body))

    def var_declaration(self):
        name = self.consume(TokenType.IDENTIFIER, "Expect variable name.")

        initializer = None
        if self.match(TokenType.EQUAL):
            initializer = self.expression()

        self.consume(TokenType.SEMICOLON, "Expect ';' after variable declaration.")
        return st.Var(name, initializer)

    def statement(self):
        if self.match(TokenType.FOR):
            return self.for_statement()
        if self.match(TokenType.IF):
            return self.if_statement()
        if self.match(TokenType.PRINT):
            return self.print_statement()
        if self.match(TokenType.RETURN):
            return self.return_statement()
        if self.match(TokenType.WHILE):
            return self.while_statement()
        if self.match(TokenType.LEFT_BRACE):
            return st.Block(tuple(self.block()))
        return self.expression_statement()

    def for_statement(self):
        """Desugars `for (init; cond; incr) body` into `{ init; while (cond) { body; incr; } }`."""
        self.consume(TokenType.LEFT_PAREN, "Expect '(' after 'for'.")

        if self.match(TokenType.SEMICOLON):
            initializer = None
        elif self.match(TokenType.VAR):
            initializer = self.var_declaration()
        else:
            initializer = self.expression_statement()

        condition = None
        if not self.check(TokenType.SEMICOLON):
            condition = self.expression()
        self.consume(TokenType.SEMICOLON, "Expect ';' after loop condition.")

        increment = None
        if not self.check(TokenType.RIGHT_PAREN):
            increment = self.expression()
        self.consume(TokenType.RIGHT_PAREN, "Expect ')' after for clauses.")

        body = self.statement()

        if increment is not None:
            body = st.Block((body, st.Expression(increment)))
        if condition is None:
            condition = ex.Literal(True)
        body = st.While(condition, body)
        if initializer is not None:
            body = st.Block((initializer, body))

        return body

    def if_statement(self):
        self.consume(TokenType.LEFT_PAREN, "Expect '(' after 'if'.")
        condition = self.expression()
        self.consume(TokenType.RIGHT_PAREN, "Expect ')' after if condition.")

        then_branch = self.statement()
        else_branch = None
        if self.match(TokenType.ELSE):
            else_branch = self.statement()

        return st.If(condition, then_branch, else_branch)

    def print_statement(self):
        value = self.expression()
        self.consume(TokenType.SEMICOLON, "Expect ';' after value.")
        return st.Print(value)

    def return_statement(self):
        keyword = self.previous()
        value = None
        if not self.check(TokenType.SEMICOLON):
            value = self.expression()

        self.consume(TokenType.SEMICOLON, "Expect ';' after return value.")
        return st.Return(keyword, value)

    def while_statement(self):
        self.consume(TokenType.LEFT_PAREN, "Expect '(' after 'while'.")
        condition = self.expression()
        self.consume(TokenType.RIGHT_PAREN, "Expect ')' after condition.")
        return st.While(condition, self.statement())

    def block(self):
        """Parses declarations up to and including the closing '}'. The opening '{' has been consumed."""
        statements = []
        while not self.check(TokenType.RIGHT_BRACE) and not self.is_at_end():
            declaration = self.declaration()
            if declaration is not None:
                statements.append(declaration)

        self.consume(TokenType.RIGHT_BRACE, "Expect '}' after block.")
        return statements

    def expression_statement(self):
        expression = self.expression()
        self.consume(TokenType.SEMICOLON, "Expect ';' after expression.")
        return st.Expression(expression)

    # ---- expressions ------------------------------------------------------------------------------------------------

    def expression(self):
        return self.assignment()

    def assignment(self):
        expression = self.logic_or()

        if self.match(TokenType.EQUAL):
            equals = self.previous()
            value = self.assignment()

            if isinstance(expression, ex.Variable):
                return ex.Assign(expression.name, value)
            elif isinstance(expression, ex.Get):
                return ex.Set(expression.object, expression.name, value)

            self.error(equals, "Invalid assignment target.")  # reported, but parsing carries on

        return expression

    def logic_or(self):
        expression = self.logic_and()
        while self.match(TokenType.OR):
            operator = self.previous()
            expression = ex.Logical(expression, operator, self.logic_and())
        return expression

    def logic_and(self):
        expression = self.equality()
        while self.match(TokenType.AND):
            operator = self.previous()
            expression = ex.Logical(expression, operator, self.equality())
        return expression

    def binary(self, operand, *operators):
        """Parses a left-associative chain of operand separated by any of operators."""
        expression = operand()
        while self.match(*operators):
            operator = self.previous()
            expression = ex.Binary(expression, operator, operand())
        return expression

    def equality(self):
        return self.binary(self.comparison, TokenType.BANG_EQUAL, TokenType.EQUAL_EQUAL)

    def comparison(self):
        return self.binary(self.term, TokenType.GREATER, TokenType.GREATER_EQUAL, TokenType.LESS, TokenType.LESS_EQUAL)

    def term(self):
        return self.binary(self.factor, TokenType.MINUS, TokenType.PLUS)

    def factor(self):
        return self.binary(self.unary, TokenType.SLASH, TokenType.STAR)

    def unary(self):
        if self.match(TokenType.BANG, TokenType.MINUS):
            operator = self.previous()
            return ex.Unary(operator, self.unary())
        return self.call()

    def call(self):
        expression = self.primary()

        while True:
            if self.match(TokenType.LEFT_PAREN):
                expression = self.finish_call(expression)
            elif self.match(TokenType.DOT):
                name = self.consume(TokenType.IDENTIFIER, "Expect property name after '.'.")
                expression = ex.Get(expression, name)
            else:
                break

        return expression

    def finish_call(self, callee):
        arguments = []
        if not self.check(TokenType.RIGHT_PAREN):
            while True:
                if len(arguments) >= MAX_ARGS:
                    self.error(self.peek(), f"Can't have more than {MAX_ARGS} arguments.")
                arguments.append(self.expression())
                if not self.match(TokenType.COMMA):
                    break

        paren = self.consume(TokenType.RIGHT_PAREN, "Expect ')' after arguments.")
        return ex.Call(callee, paren, tuple(arguments))

    def primary(self):
        if self.match(TokenType.FALSE):
            return ex.Literal(False)
        if self.match(TokenType.TRUE):
            return ex.Literal(True)
        if self.match(TokenType.NIL):
            return ex.Literal(None)

        if self.match(TokenType.NUMBER, TokenType.STRING):
            return ex.Literal(self.previous().literal)

        if self.match(TokenType.THIS):
            return ex.This(self.previous())

        if self.match(TokenType.IDENTIFIER):
            return ex.Variable(self.previous())

        if self.match(TokenType.LEFT_PAREN):
            expression = self.expression()
            self.consume(TokenType.RIGHT_PAREN, "Expect ')' after expression.")
            return ex.Grouping(expression)

        raise self.error(self.peek(), "Expect expression.")

    # ---- helpers ----------------------------------------------------------------------------------------------------

    def match(self, *types):
        """Consumes the current token if it is any of types."""
        for token_type in types:
            if self.check(token_type):
                self.advance()
                return True
        return False

    def consume(self, token_type, message):
        if self.check(token_type):
            return self.advance()
        raise self.error(self.peek(), message)

    def error(self, token, message):
        """Reports message at token. Returns (does not raise) a ParseError so callers decide whether to unwind."""
        self.context.error(token, message)
        return ParseError()

    def synchronize(self):
        """Discards tokens until just after a ';' or just before a token that starts a statement."""
        self.advance()

        while not self.is_at_end():
            if self.previous().type is TokenType.SEMICOLON:
                return
            if self.peek().type in STATEMENT_STARTS:
                return
            self.advance()

    def check(self, token_type):
        if self.is_at_end():
            return False
        return self.peek().type is token_type

    def advance(self):
        if not self.is_at_end():
            self.current += 1
        return self.previous()

    def is_at_end(self):
        return self.peek().type is TokenType.EOF

    def peek(self):
        return self.tokens[self.current]

    def previous(self):
        return self.tokens[self.current - 1]
