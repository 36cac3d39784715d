"""Expression nodes of the lox abstract syntax tree.

```
<expression> ::= <assignment>
<assignment> ::= ( <call> "." )? IDENTIFIER "=" <assignment> | <logic_or>
<logic_or>   ::= <logic_and> ( "or" <logic_and> )*
<logic_and>  ::= <equality> ( "and" <equality> )*
<equality>   ::= <comparison> ( ( "!=" | "==" ) <comparison> )*
<comparison> ::= <term> ( ( ">" | ">=" | "<" | "<=" ) <term> )*
<term>       ::= <factor> ( ( "-" | "+" ) <factor> )*
<factor>     ::= <unary> ( ( "/" | "*" ) <unary> )*
<unary>      ::= ( "!" | "-" ) <unary> | <call>
<call>       ::= <primary> ( "(" <arguments>? ")" | "." IDENTIFIER )*
<primary>    ::= "true" | "false" | "nil" | "this" | NUMBER | STRING | IDENTIFIER | "(" <expression> ")"
```

Nodes are immutable. Two nodes are never equal unless they are the same object: every node is stamped with a unique
node_id when it is built, and the resolver keys its side-table by that id.
"""

from dataclasses import dataclass, field
from itertools import count

from lox.lang.tokens import Token


_ids = count()


@dataclass(frozen=True, eq=False)
class Expr:
    """Superclass of every expression node."""
    node_id: int = field(default_factory=lambda: next(_ids), init=False, repr=False)


@dataclass(frozen=True, eq=False)
class Literal(Expr):
    value: object


@dataclass(frozen=True, eq=False)
class Grouping(Expr):
    expression: Expr


@dataclass(frozen=True, eq=False)
class Unary(Expr):
    operator: Token
    right: Expr


@dataclass(frozen=True, eq=False)
class Binary(Expr):
    left: Expr
    operator: Token
    right: Expr


@dataclass(frozen=True, eq=False)
class Logical(Expr):
    """`and`/`or`: kept apart from Binary because the right operand may never be evaluated."""
    left: Expr
    operator: Token
    right: Expr


@dataclass(frozen=True, eq=False)
class Variable(Expr):
    name: Token


@dataclass(frozen=True, eq=False)
class Assign(Expr):
    name: Token
    value: Expr


@dataclass(frozen=True, eq=False)
class Call(Expr):
    callee: Expr
    paren: Token  # closing parenthesis, used to locate runtime faults
    arguments: tuple


@dataclass(frozen=True, eq=False)
class Get(Expr):
    object: Expr
    name: Token


@dataclass(frozen=True, eq=False)
class Set(Expr):
    object: Expr
    name: Token
    value: Expr


@dataclass(frozen=True, eq=False)
class This(Expr):
    keyword: Token
