import pytest

from tinylua.ast import (
    Assign, BinaryOp, BreakStmt, Call, ExprStmt, ForStmt, FunctionDecl, Ident,
    IfStmt, Index, Literal, LocalAssign, RepeatStmt, ReturnStmt, TableConstructor,
    TableField, UnaryOp, WhileStmt,
)
from tinylua.errors import LuaSyntaxError
from tinylua.interpreter import parse_chunk, parse_program


def statements(source):
    return parse_program(source).body.statements


def expr(source):
    (stmt,) = statements(source)
    assert isinstance(stmt, ExprStmt)
    return stmt.expr


def test_binary_operators_chain_left_to_right_without_precedence():
    assert expr('1 + 2 * 3') == BinaryOp('*', BinaryOp('+', Literal(1.0), Literal(2.0)), Literal(3.0))
    assert expr('a == b and c') == BinaryOp('and', BinaryOp('==', Ident('a'), Ident('b')), Ident('c'))


def test_unary_operators_bind_tighter_and_nest():
    assert expr('- - x') == UnaryOp('-', UnaryOp('-', Ident('x')))
    assert expr('not a == b') == BinaryOp('==', UnaryOp('not', Ident('a')), Ident('b'))
    assert expr('#t + 1') == BinaryOp('+', UnaryOp('#', Ident('t')), Literal(1.0))


def test_parentheses_group():
    assert expr('1 + (2 * 3)') == BinaryOp('+', Literal(1.0), BinaryOp('*', Literal(2.0), Literal(3.0)))


def test_literals():
    assert expr('true') == Literal(True)
    assert expr('false') == Literal(False)
    assert expr('nil') == Literal(None)
    assert expr('"hi"') == Literal('hi')


def test_calls_and_indexing():
    assert expr('f(1, x)') == Call('f', [Literal(1.0), Ident('x')])
    assert expr('g()') == Call('g', [])
    assert expr('t.a[1]') == Index(Index(Ident('t'), Literal('a')), Literal(1.0))


def test_table_constructor_fields():
    node = expr('{1, x = 2; [3] = "c", y,}')
    assert node == TableConstructor([
        TableField(None, Literal(1.0)),
        TableField(Literal('x'), Literal(2.0)),
        TableField(Literal(3.0), Literal('c')),
        TableField(None, Ident('y')),
    ])


def test_assignment_with_multiple_targets():
    (stmt,) = statements('a, t[1], t.b = 1, 2')
    assert stmt == Assign(
        [Ident('a'), Index(Ident('t'), Literal(1.0)), Index(Ident('t'), Literal('b'))],
        [Literal(1.0), Literal(2.0)],
    )


def test_local_declarations():
    (plain, bare, func) = statements('local a, b = 1 local c local function f(x, y) return x end')
    assert plain == LocalAssign(['a', 'b'], [Literal(1.0)])
    assert bare == LocalAssign(['c'], [])
    assert isinstance(func, FunctionDecl)
    assert func.is_local and func.name == 'f' and func.params == ['x', 'y']
    assert func.body.statements == [ReturnStmt([Ident('x')])]


def test_if_elseif_else():
    (stmt,) = statements('if a then x() elseif b then y() elseif c then else z() end')
    assert isinstance(stmt, IfStmt)
    assert stmt.condition == Ident('a')
    assert [cond for cond, _ in stmt.elseif_blocks] == [Ident('b'), Ident('c')]
    assert stmt.elseif_blocks[1][1].statements == []
    assert stmt.else_block.statements == [ExprStmt(Call('z', []))]


def test_loops():
    (w, r, f, g) = statements(
        'while x do break end '
        'repeat x = x - 1 until x == 0 '
        'for i = 1, 10 do end '
        'for i = 10, 1, -1 do print(i) end'
    )
    assert isinstance(w, WhileStmt) and w.body.statements == [BreakStmt()]
    assert isinstance(r, RepeatStmt) and r.condition == BinaryOp('==', Ident('x'), Literal(0.0))
    assert isinstance(f, ForStmt) and f.var == 'i' and f.step is None
    assert isinstance(g, ForStmt) and g.step == UnaryOp('-', Literal(1.0))


def test_return_forms():
    (func,) = statements('function f() return end')
    assert func.body.statements == [ReturnStmt([])]
    (stmt,) = statements('return 1, 2;')
    assert stmt == ReturnStmt([Literal(1.0), Literal(2.0)])
    (stmt,) = statements('return')
    assert stmt == ReturnStmt([])


def test_semicolons_are_empty_statements():
    assert len(statements(';;x = 1;;y = 2;')) == 2


def test_break_outside_loop_is_rejected():
    program, diagnostics = parse_chunk('break')
    assert program.body.statements == []
    assert "'break' outside a loop" in diagnostics[0].message


def test_break_inside_function_inside_loop_is_rejected():
    _, diagnostics = parse_chunk('while true do function f() break end end')
    assert len(diagnostics) == 1


def test_invalid_assignment_target():
    _, diagnostics = parse_chunk('f() = 1')
    assert diagnostics[0].message == 'cannot assign to this expression'


def test_diagnostic_reports_position_and_expectation():
    _, diagnostics = parse_chunk('x = 1\nwhile x do\n  y = \nend')
    (diag,) = diagnostics
    assert diag.stage == 'parse'
    assert (diag.line, diag.column) == (4, 1)
    assert diag.expected == ('expression',)
    assert diag.found == "'end'"


def test_parser_recovers_at_next_statement():
    program, diagnostics = parse_chunk('a = 1\nb = = 2\nc = 3\nend\nd = 4')
    names = [s.targets[0].name for s in program.body.statements]
    assert names == ['a', 'c', 'd']
    assert len(diagnostics) == 2


def test_lexer_diagnostics_come_first():
    _, diagnostics = parse_chunk('x = @ 1\ny = )')
    assert [d.stage for d in diagnostics] == ['lex', 'parse']


def test_parse_program_raises_with_all_diagnostics():
    with pytest.raises(LuaSyntaxError) as excinfo:
        parse_program('x = )\ny = )')
    assert len(excinfo.value.diagnostics) == 2
    assert '1:5: unexpected' in str(excinfo.value)
    assert '2:5: unexpected' in str(excinfo.value)


@pytest.mark.parametrize('source', ['t = {} t.f(1)', 'f(1)(2)', 'x = t[1]("a")', '(f)(1)'])
def test_only_bare_names_can_be_called(source):
    _, diagnostics = parse_chunk(source)
    (diag,) = diagnostics
    assert diag.message == 'only named functions can be called'
    assert diag.found == "'('"


def test_rejected_call_does_not_run_its_arguments():
    program, diagnostics = parse_chunk('t = {} t.f = 1 x = t.f(print("hi"))')
    assert len(diagnostics) == 1
    assert len(program.body.statements) == 2
