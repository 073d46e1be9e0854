# TinyLua package
# This package provides a lexer, parser and tree-walking interpreter for a
# subset of the Lua language.
from .errors import LuaError, LuaRuntimeError, LuaSyntaxError
from .interpreter import Interpreter, parse_chunk, parse_program, run_program

__all__ = [
    'Interpreter',
    'LuaError',
    'LuaRuntimeError',
    'LuaSyntaxError',
    'parse_chunk',
    'parse_program',
    'run_program',
]
