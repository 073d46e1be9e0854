from pathlib import Path

from tinylua.interpreter import parse_program, Interpreter

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_3_fibonacci(capsys):
    with open(EXAMPLES / 'program_3.lua', 'r', encoding='utf-8') as f:
        source = f.read()
    ast = parse_program(source)
    interp = Interpreter()
    interp.run(ast)
    out = capsys.readouterr().out.strip()
    assert out == '\n'.join(f'{i}\t{v}' for i, v in enumerate([0, 1, 1, 2, 3, 5, 8, 13, 21, 34, 55]))
