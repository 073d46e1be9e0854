"""Recursive-descent parser for TinyLua.

The parser reads the token list produced by :mod:`tinylua.lexer` with a
single token of lookahead and never backtracks. Binary operators form one
flat, left-associative chain: there are no precedence tiers, so
``1 + 2 * 3`` groups as ``(1 + 2) * 3``. Unary operators bind tighter than
any binary operator.

A statement that cannot be completed is dropped and reported as a
:class:`~tinylua.errors.Diagnostic`; parsing then resumes at the next
statement boundary, so a single mistake does not hide later ones.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from .ast import (
    Program, Block, Literal, Ident, UnaryOp, BinaryOp, Call, Index,
    TableField, TableConstructor, ExprStmt, Assign, LocalAssign, IfStmt,
    WhileStmt, RepeatStmt, ForStmt, FunctionDecl, ReturnStmt, BreakStmt, Node,
)
from .errors import Diagnostic, LuaSyntaxError, ParseError
from .lexer import Lexer, Token

BINARY_OPERATORS = frozenset({
    '+', '-', '*', '/', '%', '^', '..',
    '==', '~=', '<', '<=', '>', '>=',
    'and', 'or',
})
UNARY_OPERATORS = frozenset({'not', '-', '#'})

STATEMENT_STARTS = frozenset({
    'if', 'while', 'repeat', 'for', 'function', 'local', 'return', 'break', ';',
})
BLOCK_ENDS = frozenset({'end', 'else', 'elseif', 'until', 'EOF'})


def describe(token: Token) -> str:
    if token.type == 'EOF':
        return 'end of input'
    if token.type == 'NUMBER':
        return f"number {token.value:g}"
    if token.type == 'STRING':
        return f"string {token.value!r}"
    if token.type == 'IDENT':
        return f"identifier '{token.value}'"
    return f"'{token.type}'"


class Parser:
    def __init__(self, tokens: List[Token]):
        self.tokens = list(tokens)
        if not self.tokens or self.tokens[-1].type != 'EOF':
            last = self.tokens[-1] if self.tokens else None
            line = last.line if last else 1
            column = last.column if last else 1
            self.tokens.append(Token('EOF', None, line, column))
        self.pos = 0
        self.loop_depth = 0
        self.diagnostics: List[Diagnostic] = []

    # Token helpers

    def peek(self) -> Token:
        return self.tokens[self.pos]

    def advance(self) -> Token:
        token = self.tokens[self.pos]
        if token.type != 'EOF':
            self.pos += 1
        return token

    def match(self, *types: str) -> bool:
        return self.peek().type in types

    def accept(self, type_: str) -> Optional[Token]:
        if self.match(type_):
            return self.advance()
        return None

    def consume(self, type_: str) -> Token:
        if self.match(type_):
            return self.advance()
        expected = 'identifier' if type_ == 'IDENT' else f"'{type_}'"
        raise self.error(f"expected {expected}", (expected,))

    def error(self, message: str, expected: Tuple[str, ...] = ()) -> ParseError:
        token = self.peek()
        return ParseError(Diagnostic(
            'parse', message, token.line, token.column, tuple(expected), describe(token),
        ))

    # Statements

    def parse(self) -> Program:
        return Program(self.parse_block())

    def parse_block(self, *terminators: str) -> Block:
        statements: List[Node] = []
        while not self.match('EOF', *terminators):
            stmt = self.parse_statement_or_recover()
            if stmt is not None:
                statements.append(stmt)
        return Block(statements)

    def parse_statement_or_recover(self) -> Optional[Node]:
        start = self.pos
        try:
            return self.parse_statement()
        except ParseError as err:
            self.diagnostics.append(err.diagnostic)
            self.synchronize(start)
            return None

    def synchronize(self, start: int):
        if self.pos == start:
            self.advance()
        while not self.match('EOF'):
            kind = self.peek().type
            if kind in STATEMENT_STARTS or kind in BLOCK_ENDS:
                return
            # an identifier opening a new line most likely starts a statement
            if kind == 'IDENT' and self.tokens[self.pos - 1].line < self.peek().line:
                return
            self.advance()

    def parse_statement(self) -> Optional[Node]:
        kind = self.peek().type
        if kind == ';':
            self.advance()
            return None
        if kind == 'if':
            return self.parse_if_stmt()
        if kind == 'while':
            return self.parse_while_stmt()
        if kind == 'repeat':
            return self.parse_repeat_stmt()
        if kind == 'for':
            return self.parse_for_stmt()
        if kind == 'function':
            return self.parse_function_decl()
        if kind == 'local':
            return self.parse_local()
        if kind == 'return':
            return self.parse_return_stmt()
        if kind == 'break':
            if self.loop_depth == 0:
                raise self.error("'break' outside a loop")
            self.advance()
            return BreakStmt()
        return self.parse_expr_stmt()

    def parse_expr_stmt(self) -> Node:
        expr = self.parse_expression()
        if not self.match(',', '='):
            return ExprStmt(expr)
        targets = [self.check_target(expr)]
        while self.accept(','):
            targets.append(self.check_target(self.parse_expression()))
        self.consume('=')
        values = self.parse_expression_list()
        return Assign(targets, values)

    def check_target(self, expr: Node) -> Node:
        if isinstance(expr, (Ident, Index)):
            return expr
        raise self.error('cannot assign to this expression', ('identifier', 'indexed target'))

    def parse_local(self) -> Node:
        self.consume('local')
        if self.accept('function'):
            name = self.consume('IDENT').value
            params, body = self.parse_function_body()
            return FunctionDecl(name, params, body, is_local=True)
        names = [self.consume('IDENT').value]
        while self.accept(','):
            names.append(self.consume('IDENT').value)
        values: List[Node] = []
        if self.accept('='):
            values = self.parse_expression_list()
        return LocalAssign(names, values)

    def parse_function_decl(self) -> FunctionDecl:
        self.consume('function')
        name = self.consume('IDENT').value
        params, body = self.parse_function_body()
        return FunctionDecl(name, params, body)

    def parse_function_body(self) -> Tuple[List[str], Block]:
        self.consume('(')
        params: List[str] = []
        if not self.match(')'):
            params.append(self.consume('IDENT').value)
            while self.accept(','):
                params.append(self.consume('IDENT').value)
        self.consume(')')
        # a function body starts a fresh loop context for 'break'
        saved_depth = self.loop_depth
        self.loop_depth = 0
        try:
            body = self.parse_block('end')
        finally:
            self.loop_depth = saved_depth
        self.consume('end')
        return params, body

    def parse_loop_body(self, *terminators: str) -> Block:
        self.loop_depth += 1
        try:
            return self.parse_block(*terminators)
        finally:
            self.loop_depth -= 1

    def parse_if_stmt(self) -> IfStmt:
        self.consume('if')
        condition = self.parse_expression()
        self.consume('then')
        then_block = self.parse_block('elseif', 'else', 'end')
        elseif_blocks: List[Tuple[Node, Block]] = []
        while self.accept('elseif'):
            cond = self.parse_expression()
            self.consume('then')
            elseif_blocks.append((cond, self.parse_block('elseif', 'else', 'end')))
        else_block = None
        if self.accept('else'):
            else_block = self.parse_block('end')
        self.consume('end')
        return IfStmt(condition, then_block, elseif_blocks, else_block)

    def parse_while_stmt(self) -> WhileStmt:
        self.consume('while')
        condition = self.parse_expression()
        self.consume('do')
        body = self.parse_loop_body('end')
        self.consume('end')
        return WhileStmt(condition, body)

    def parse_repeat_stmt(self) -> RepeatStmt:
        self.consume('repeat')
        body = self.parse_loop_body('until')
        self.consume('until')
        condition = self.parse_expression()
        return RepeatStmt(body, condition)

    def parse_for_stmt(self) -> ForStmt:
        self.consume('for')
        var = self.consume('IDENT').value
        self.consume('=')
        start = self.parse_expression()
        self.consume(',')
        end = self.parse_expression()
        step = None
        if self.accept(','):
            step = self.parse_expression()
        self.consume('do')
        body = self.parse_loop_body('end')
        self.consume('end')
        return ForStmt(var, start, end, step, body)

    def parse_return_stmt(self) -> ReturnStmt:
        self.consume('return')
        values: List[Node] = []
        if not self.match(';', *BLOCK_ENDS):
            values = self.parse_expression_list()
        self.accept(';')
        return ReturnStmt(values)

    # Expressions

    def parse_expression_list(self) -> List[Node]:
        exprs = [self.parse_expression()]
        while self.accept(','):
            exprs.append(self.parse_expression())
        return exprs

    def parse_expression(self) -> Node:
        node = self.parse_unary()
        while self.peek().type in BINARY_OPERATORS:
            op = self.advance().type
            right = self.parse_unary()
            node = BinaryOp(op, node, right)
        return node

    def parse_unary(self) -> Node:
        if self.peek().type in UNARY_OPERATORS:
            op = self.advance().type
            return UnaryOp(op, self.parse_unary())
        return self.parse_postfix()

    def parse_postfix(self) -> Node:
        node = self.parse_primary()
        while True:
            if self.accept('['):
                key = self.parse_expression()
                self.consume(']')
                node = Index(node, key)
                continue
            if self.accept('.'):
                name = self.consume('IDENT').value
                node = Index(node, Literal(name))
                continue
            # a bare name followed by '(' was already taken as a call
            if self.match('('):
                raise self.error('only named functions can be called', ('identifier',))
            return node

    def parse_primary(self) -> Node:
        token = self.peek()
        kind = token.type
        if kind in ('NUMBER', 'STRING'):
            self.advance()
            return Literal(token.value)
        if kind == 'true':
            self.advance()
            return Literal(True)
        if kind == 'false':
            self.advance()
            return Literal(False)
        if kind == 'nil':
            self.advance()
            return Literal(None)
        if kind == 'IDENT':
            self.advance()
            if self.match('('):
                return Call(token.value, self.parse_call_args())
            return Ident(token.value)
        if kind == '(':
            self.advance()
            expr = self.parse_expression()
            self.consume(')')
            return expr
        if kind == '{':
            return self.parse_table_constructor()
        raise self.error(f"unexpected {describe(token)}", ('expression',))

    def parse_call_args(self) -> List[Node]:
        self.consume('(')
        args: List[Node] = []
        if not self.match(')'):
            args = self.parse_expression_list()
        self.consume(')')
        return args

    def parse_table_constructor(self) -> TableConstructor:
        self.consume('{')
        fields: List[TableField] = []
        while not self.match('}'):
            if self.accept('['):
                key = self.parse_expression()
                self.consume(']')
                self.consume('=')
                fields.append(TableField(key, self.parse_expression()))
            else:
                value = self.parse_expression()
                if isinstance(value, Ident) and self.accept('='):
                    fields.append(TableField(Literal(value.name), self.parse_expression()))
                else:
                    fields.append(TableField(None, value))
            if not (self.accept(',') or self.accept(';')):
                break
        self.consume('}')
        return TableConstructor(fields)


def parse_chunk(source: str) -> Tuple[Program, List[Diagnostic]]:
    """Lex and parse ``source`` without raising.

    Returns the program built from every statement that parsed together
    with all lexer and parser diagnostics, in that order.
    """
    lexer = Lexer(source)
    tokens = lexer.tokenize()
    parser = Parser(tokens)
    program = parser.parse()
    return program, lexer.diagnostics + parser.diagnostics


def parse_program(source: str) -> Program:
    """Parse TinyLua source into a Program, raising LuaSyntaxError on any diagnostic."""
    program, diagnostics = parse_chunk(source)
    if diagnostics:
        raise LuaSyntaxError(diagnostics)
    return program
