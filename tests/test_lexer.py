import pytest

from tinylua.errors import LuaSyntaxError
from tinylua.lexer import Lexer, tokenize


def kinds(source):
    return [(t.type, t.value) for t in tokenize(source)]


def test_if_statement_tokens():
    assert kinds('if x then y else z end') == [
        ('if', 'if'),
        ('IDENT', 'x'),
        ('then', 'then'),
        ('IDENT', 'y'),
        ('else', 'else'),
        ('IDENT', 'z'),
        ('end', 'end'),
        ('EOF', None),
    ]


def test_empty_source_is_just_eof():
    tokens = tokenize('')
    assert len(tokens) == 1
    assert tokens[0].type == 'EOF'


@pytest.mark.parametrize('text', ['0.5', '3.25', '12.0', '1024.125', '7.'])
def test_decimal_literals_round_trip(text):
    (token, eof) = tokenize(text)
    assert token.type == 'NUMBER'
    assert token.value == pytest.approx(float(text))
    assert eof.type == 'EOF'


def test_operators_and_dots():
    assert [t.type for t in tokenize('a == b ~= c <= d >= e < f > g = h')] == [
        'IDENT', '==', 'IDENT', '~=', 'IDENT', '<=', 'IDENT', '>=', 'IDENT',
        '<', 'IDENT', '>', 'IDENT', '=', 'IDENT', 'EOF',
    ]
    assert [t.type for t in tokenize('a.b .. c ...')] == ['IDENT', '.', 'IDENT', '..', 'IDENT', '...', 'EOF']
    assert [t.type for t in tokenize('#t + -1 * 2 / 3 % 4 ^ 5')] == [
        '#', 'IDENT', '+', '-', 'NUMBER', '*', 'NUMBER', '/', 'NUMBER', '%', 'NUMBER', '^', 'NUMBER', 'EOF',
    ]


def test_string_escapes():
    tokens = tokenize(r'"a\nb\tc\\d\"e" ' + r"'it\'s' " + r'"\q"')
    assert [t.value for t in tokens[:-1]] == ['a\nb\tc\\d"e', "it's", 'q']


def test_string_ends_only_at_matching_quote():
    (token, _) = tokenize('"don\'t"')
    assert token.value == "don't"


def test_comments_are_skipped_and_lines_tracked():
    tokens = tokenize('x = 1 -- set x\n-- whole line\ny = 2')
    assert [t.type for t in tokens] == ['IDENT', '=', 'NUMBER', 'IDENT', '=', 'NUMBER', 'EOF']
    y = tokens[3]
    assert (y.line, y.column) == (3, 1)


def test_keywords_versus_identifiers():
    tokens = tokenize('local function_name = nil')
    assert [(t.type, t.value) for t in tokens[:-1]] == [
        ('local', 'local'), ('IDENT', 'function_name'), ('=', '='), ('nil', 'nil'),
    ]


def test_unknown_characters_are_dropped_and_reported():
    lexer = Lexer('a @ b ~ c')
    tokens = lexer.tokenize()
    assert [t.value for t in tokens if t.type == 'IDENT'] == ['a', 'b', 'c']
    assert [d.found for d in lexer.diagnostics] == ['@', '~']
    assert all(d.stage == 'lex' for d in lexer.diagnostics)


def test_malformed_number_produces_no_token():
    lexer = Lexer('x = 1.2.3')
    tokens = lexer.tokenize()
    assert [t.type for t in tokens] == ['IDENT', '=', 'EOF']
    assert 'malformed number' in lexer.diagnostics[0].message


def test_unterminated_string_is_reported():
    lexer = Lexer('print("oops)')
    lexer.tokenize()
    assert lexer.diagnostics[0].message == 'unterminated string literal'


def test_tokenize_raises_on_diagnostics():
    with pytest.raises(LuaSyntaxError) as excinfo:
        tokenize('x = $')
    assert excinfo.value.diagnostics[0].column == 5
