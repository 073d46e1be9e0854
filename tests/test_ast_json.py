import json

from tinylua.ast_json import ast_from_obj, ast_to_obj
from tinylua.interpreter import Interpreter, parse_program

SOURCE = '''
local t = {1, 2, key = "v"}
function describe(x)
  if x == nil then return "none" elseif x then return "some" else return "no" end
end
for i = 1, 2 do print(i, describe(t[i])) end
repeat t.key = nil until true
while #t > 0 do t[#t] = nil break end
print(describe(nil), describe(false), #t, -t[1], not true)
'''


def test_round_trip_through_json_preserves_program():
    program = parse_program(SOURCE)
    loaded = ast_from_obj(json.loads(json.dumps(ast_to_obj(program))))
    assert loaded == program


def test_loaded_program_runs_the_same(capsys):
    program = parse_program(SOURCE)
    Interpreter().run(program)
    direct = capsys.readouterr().out

    loaded = ast_from_obj(json.loads(json.dumps(ast_to_obj(program))))
    Interpreter().run(loaded)
    assert capsys.readouterr().out == direct
    assert direct == '1\tsome\n2\tsome\nnone\tno\t1\t-1\tfalse\n'


def test_integer_literals_load_as_numbers():
    node = ast_from_obj({'type': 'Literal', 'value': 3})
    assert isinstance(node.value, float)
    assert ast_from_obj({'type': 'Literal', 'value': True}).value is True
