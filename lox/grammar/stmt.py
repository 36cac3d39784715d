"""Statement nodes of the lox abstract syntax tree.

```
<program>     ::= <declaration>* EOF
<declaration> ::= <class_decl> | <fun_decl> | <var_decl> | <statement>
<class_decl>  ::= "class" IDENTIFIER "{" <function>* "}"
<fun_decl>    ::= "fun" <function>
<function>    ::= IDENTIFIER "(" <parameters>? ")" <block>
<var_decl>    ::= "var" IDENTIFIER ( "=" <expression> )? ";"
<statement>   ::= <expr_stmt> | <for_stmt> | <if_stmt> | <print_stmt> | <return_stmt> | <while_stmt> | <block>
<for_stmt>    ::= "for" "(" ( <var_decl> | <expr_stmt> | ";" ) <expression>? ";" <expression>? ")" <statement>
```

There is no For node: the parser desugars `for` loops into a Block holding the initializer and a While.
"""

from dataclasses import dataclass, field

from lox.grammar.expr import Expr
from lox.lang.tokens import Token


@dataclass(frozen=True, eq=False)
class Stmt:
    """Superclass of every statement node."""


@dataclass(frozen=True, eq=False)
class Expression(Stmt):
    expression: Expr


@dataclass(frozen=True, eq=False)
class Print(Stmt):
    expression: Expr


@dataclass(frozen=True, eq=False)
class Var(Stmt):
    name: Token
    initializer: Expr = None


@dataclass(frozen=True, eq=False)
class Block(Stmt):
    statements: tuple = field(default_factory=tuple)


@dataclass(frozen=True, eq=False)
class If(Stmt):
    condition: Expr
    then_branch: Stmt
    else_branch: Stmt = None


@dataclass(frozen=True, eq=False)
class While(Stmt):
    condition: Expr
    body: Stmt


@dataclass(frozen=True, eq=False)
class Function(Stmt):
    name: Token
    params: tuple
    body: tuple


@dataclass(frozen=True, eq=False)
class Return(Stmt):
    keyword: Token
    value: Expr = None


@dataclass(frozen=True, eq=False)
class Class(Stmt):
    name: Token
    methods: tuple
