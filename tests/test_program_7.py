from pathlib import Path

from tinylua.interpreter import parse_program, Interpreter

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_7_dynamic_scope(capsys):
    with open(EXAMPLES / 'program_7.lua', 'r', encoding='utf-8') as f:
        source = f.read()
    ast = parse_program(source)
    interp = Interpreter()
    interp.run(ast)
    out = capsys.readouterr().out.strip()
    assert out == 'global\nfrom outer\nglobal'
