"""CLI entry point for the TinyLua interpreter.

Usage:
    python -m tinylua [-v|-vv|-vvv] [program_file]
    python -m tinylua [-v...] --emit-ast <program_file>
    python -m tinylua [-v...] --ast <ast_json_file>

Options:
  -v            Increase debug verbosity (can be repeated)
  --emit-ast    Parse the given .lua file and emit an AST JSON file
  --ast         Execute a previously emitted AST JSON file

Without a program file an interactive session is started. Each line is
run against the same interpreter, so globals and top-level locals carry
over, and a non-nil result is echoed back.

Debug information is written to `debug.txt` in the current directory when
verbosity is greater than zero.
"""

import argparse
import json
import sys
from pathlib import Path

from .ast_json import ast_to_obj, ast_from_obj
from .errors import LuaError, LuaSyntaxError
from .interpreter import parse_program, Interpreter
from .types import repr_value


def read_source(path: Path) -> str:
    if not path.exists():
        print(f"Error: file {path} not found", file=sys.stderr)
        sys.exit(1)
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def parse_or_exit(source: str):
    try:
        return parse_program(source)
    except LuaSyntaxError as e:
        print(f"Syntax error: {e}", file=sys.stderr)
        sys.exit(1)


def load_ast_or_exit(path: Path):
    try:
        return ast_from_obj(json.loads(read_source(path)))
    except (ValueError, KeyError, TypeError) as e:
        print(f"Error: invalid AST file {path}: {e}", file=sys.stderr)
        sys.exit(1)


def execute_or_exit(interpreter: Interpreter, program) -> None:
    try:
        interpreter.run(program)
    except LuaError as e:
        print(f"Runtime error: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        interpreter.close()


def repl(interpreter: Interpreter) -> None:
    print("TinyLua interpreter")
    print("Type 'exit' to quit")
    while True:
        try:
            line = input('> ')
        except EOFError:
            print()
            break
        line = line.strip()
        if line in ('exit', 'quit'):
            break
        if not line:
            continue
        try:
            result = interpreter.run(parse_program(line))
        except LuaError as e:
            print(e, file=sys.stderr)
            continue
        if result is not None:
            print(repr_value(result))


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="TinyLua interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--emit-ast', metavar='LUA_FILE', help='emit AST JSON for the given .lua file')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    parser.add_argument('program', nargs='?', help='TinyLua program file to execute; omit for a REPL')
    args = parser.parse_args(argv)

    # Emit AST mode
    if args.emit_ast:
        program_file = Path(args.emit_ast)
        ast_program = parse_or_exit(read_source(program_file))
        obj = ast_to_obj(ast_program)
        out_path = program_file.with_name(program_file.name + '.ast.json')
        with open(out_path, 'w', encoding='utf-8') as out:
            json.dump(obj, out, ensure_ascii=False, indent=2)
        print(str(out_path))
        return

    # Execute from AST JSON
    if args.ast:
        ast_program = load_ast_or_exit(Path(args.ast))
        execute_or_exit(Interpreter(debug_level=args.v), ast_program)
        return

    if not args.program:
        interpreter = Interpreter(debug_level=args.v)
        try:
            repl(interpreter)
        finally:
            interpreter.close()
        return

    ast_program = parse_or_exit(read_source(Path(args.program)))
    execute_or_exit(Interpreter(debug_level=args.v), ast_program)


if __name__ == '__main__':
    main()
