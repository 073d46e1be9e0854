"""Tree-walking interpreter for TinyLua.

The interpreter executes the AST produced by :mod:`tinylua.parser`
directly. It keeps a global table and a stack of call frames (see
:class:`~tinylua.environment.Environment`); both survive across calls to
:meth:`Interpreter.run`, which is what the REPL relies on.

Scoping is dynamic: a function's free names are looked up in whatever
frames are live when it is called, not where it was defined. Statement
execution returns either a plain value or a :class:`BreakSignal` /
:class:`ReturnSignal`; blocks stop at the first signal and hand it up to
the nearest loop or function call.
"""

from __future__ import annotations

import sys
from typing import Any, List, Optional, TextIO, Union

from .ast import (
    Program, Block, Literal, Ident, UnaryOp, BinaryOp, Call, Index,
    TableConstructor, ExprStmt, Assign, LocalAssign, IfStmt, WhileStmt,
    RepeatStmt, ForStmt, FunctionDecl, ReturnStmt, BreakStmt, Node,
)
from .builtin_function import BuiltinFunction
from .environment import Environment
from .errors import BreakSignal, LuaRuntimeError, ReturnSignal
from .parser import parse_chunk, parse_program
from .std import populate_base_environment
from .types import (
    ARITHMETIC_OPERATORS, FunctionValue, TableVal, apply_binary_op,
    apply_unary_op, is_truthy, to_number, type_name,
)

Signal = Union[BreakSignal, ReturnSignal]

PYTHON_RECURSION_LIMIT = 50_000


class Interpreter:
    """Core interpreter that executes TinyLua ASTs."""
    def __init__(self, debug_level: int = 0, debug_file: Optional[str] = 'debug.txt',
                 output: Optional[TextIO] = None):
        self.env = Environment()
        self.output = output
        self.debug_level = debug_level
        self.debug_fp = open(debug_file, 'w') if debug_level > 0 and debug_file else None
        self.load_standard_module()

    def debug(self, msg: str, level: int = 1):
        if self.debug_level >= level:
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg, file=sys.stderr)

    def close(self):
        if self.debug_fp:
            self.debug_fp.close()
            self.debug_fp = None

    def write_line(self, text: str):
        stream = self.output if self.output is not None else sys.stdout
        stream.write(text + '\n')

    def load_standard_module(self):
        for name, fn in populate_base_environment().items():
            self.env.set_global(name, fn)

    # Public API
    def run(self, program: Program) -> Any:
        """Execute ``program`` and return its result.

        The result is the value of a top-level ``return`` if one ran,
        otherwise the value of the last executed top-level statement.
        """
        # every TinyLua call costs a handful of Python frames
        saved_limit = sys.getrecursionlimit()
        sys.setrecursionlimit(max(saved_limit, PYTHON_RECURSION_LIMIT))
        try:
            result = self.execute_block(program.body)
        except RecursionError:
            raise LuaRuntimeError('stack overflow') from None
        finally:
            sys.setrecursionlimit(saved_limit)
        if isinstance(result, ReturnSignal):
            return result.value
        if isinstance(result, BreakSignal):
            return None
        return result

    def execute_block(self, block: Block) -> Union[Any, Signal]:
        result = None
        for stmt in block.statements:
            result = self.execute(stmt)
            if isinstance(result, (BreakSignal, ReturnSignal)):
                return result
        return result

    def execute(self, node: Node) -> Union[Any, Signal]:
        if isinstance(node, ExprStmt):
            return self.evaluate(node.expr)
        if isinstance(node, Assign):
            values = self.evaluate_list(node.values, len(node.targets))
            for target, value in zip(node.targets, values):
                self.assign(target, value)
            return None
        if isinstance(node, LocalAssign):
            values = self.evaluate_list(node.values, len(node.names))
            for name, value in zip(node.names, values):
                self.env.declare(name, value)
                self.debug(f"local {name} = {value!r}", 2)
            return None
        if isinstance(node, IfStmt):
            cond = self.evaluate(node.condition)
            self.debug(f"if condition {cond!r}", 3)
            if is_truthy(cond):
                return self.execute_block(node.then_block)
            for condition, block in node.elseif_blocks:
                if is_truthy(self.evaluate(condition)):
                    return self.execute_block(block)
            if node.else_block is not None:
                return self.execute_block(node.else_block)
            return None
        if isinstance(node, WhileStmt):
            while True:
                cond = self.evaluate(node.condition)
                self.debug(f"while condition {cond!r}", 3)
                if not is_truthy(cond):
                    break
                res = self.execute_block(node.body)
                if isinstance(res, BreakSignal):
                    break
                if isinstance(res, ReturnSignal):
                    return res
            return None
        if isinstance(node, RepeatStmt):
            while True:
                res = self.execute_block(node.body)
                if isinstance(res, BreakSignal):
                    break
                if isinstance(res, ReturnSignal):
                    return res
                cond = self.evaluate(node.condition)
                self.debug(f"until condition {cond!r}", 3)
                if is_truthy(cond):
                    break
            return None
        if isinstance(node, ForStmt):
            return self.execute_for(node)
        if isinstance(node, FunctionDecl):
            func = FunctionValue(node.name, node.params, node.body, self.env.current_frame)
            if node.is_local:
                self.env.declare(node.name, func)
            else:
                self.env.set_global(node.name, func)
            self.debug(f"define function {node.name}({', '.join(node.params)})", 2)
            return None
        if isinstance(node, ReturnStmt):
            values = [self.evaluate(v) for v in node.values]
            return ReturnSignal(values[0] if values else None)
        if isinstance(node, BreakStmt):
            return BreakSignal()
        raise NotImplementedError(f"execute: unexpected node type {type(node)}")

    def execute_for(self, node: ForStmt) -> Union[Any, Signal]:
        start = to_number(self.evaluate(node.start))
        end = to_number(self.evaluate(node.end))
        step = to_number(self.evaluate(node.step)) if node.step is not None else None
        current = start if start is not None else 0.0
        end = end if end is not None else 0.0
        step = step if step is not None else 1.0
        while (step > 0 and current <= end) or (step < 0 and current >= end):
            self.env.declare(node.var, current)
            self.debug(f"for {node.var} = {current!r}", 3)
            res = self.execute_block(node.body)
            if isinstance(res, BreakSignal):
                break
            if isinstance(res, ReturnSignal):
                return res
            current += step
        return None

    def evaluate_list(self, exprs: List[Node], count: int) -> List[Any]:
        """Evaluate every expression, then pad with nil or truncate to ``count``."""
        values = [self.evaluate(e) for e in exprs]
        if len(values) < count:
            values.extend([None] * (count - len(values)))
        return values[:count]

    def assign(self, target: Node, value: Any):
        if isinstance(target, Ident):
            self.env.set_global(target.name, value)
            self.debug(f"global {target.name} = {value!r}", 2)
            return
        if isinstance(target, Index):
            table = self.evaluate(target.target)
            key = self.evaluate(target.key)
            if not isinstance(table, TableVal):
                self.debug(f"cannot index-assign into {type_name(table)}; ignored")
                return
            if not table.set(key, value):
                self.debug(f"{type_name(key)} is not a valid table key; assignment ignored")
            return
        raise NotImplementedError(f"assign: unexpected target type {type(target)}")

    def evaluate(self, node: Node) -> Any:
        if isinstance(node, Literal):
            return node.value
        if isinstance(node, Ident):
            return self.env.get(node.name)
        if isinstance(node, UnaryOp):
            operand = self.evaluate(node.operand)
            result = apply_unary_op(node.op, operand)
            if result is None and node.op != 'not':
                self.debug(f"unary {node.op} on {type_name(operand)} yields nil")
            return result
        if isinstance(node, BinaryOp):
            left = self.evaluate(node.left)
            # 'and'/'or' short-circuit but always produce a boolean
            if node.op == 'and':
                return is_truthy(left) and is_truthy(self.evaluate(node.right))
            if node.op == 'or':
                return is_truthy(left) or is_truthy(self.evaluate(node.right))
            right = self.evaluate(node.right)
            result = apply_binary_op(node.op, left, right)
            if result is None and node.op in ARITHMETIC_OPERATORS:
                self.debug(f"arithmetic {node.op} on {type_name(left)} and {type_name(right)} yields nil")
            return result
        if isinstance(node, Call):
            func = self.env.get(node.name)
            args = [self.evaluate(arg) for arg in node.args]
            return self.call_function(node.name, func, args)
        if isinstance(node, Index):
            table = self.evaluate(node.target)
            key = self.evaluate(node.key)
            if not isinstance(table, TableVal):
                self.debug(f"cannot index {type_name(table)}; yields nil")
                return None
            return table.get(key)
        if isinstance(node, TableConstructor):
            table = TableVal()
            position = 0
            for field in node.fields:
                if field.key is None:
                    position += 1
                    table.set(float(position), self.evaluate(field.value))
                    continue
                key = self.evaluate(field.key)
                value = self.evaluate(field.value)
                if not table.set(key, value):
                    self.debug(f"{type_name(key)} is not a valid table key; field ignored")
            return table
        raise NotImplementedError(f"evaluate: unexpected node type {type(node)}")

    def call_function(self, name: str, func: Any, args: List[Any]) -> Any:
        if isinstance(func, BuiltinFunction):
            self.debug(f"call builtin {func.name} with {len(args)} argument(s)", 2)
            return func.fn(self, args)
        if isinstance(func, FunctionValue):
            self.debug(f"call {func.name} with {len(args)} argument(s)", 2)
            # missing arguments are nil, extra ones are dropped
            values = {}
            for i, param in enumerate(func.params):
                values[param] = args[i] if i < len(args) else None
            with self.env.call_frame(func.name, values):
                res = self.execute_block(func.body)
            if isinstance(res, ReturnSignal):
                return res.value
            return None
        self.debug(f"attempt to call {name} ({type_name(func)}); yields nil")
        return None


def run_program(source: str, interpreter: Optional[Interpreter] = None) -> Any:
    """Parse and execute ``source``, returning the program's result."""
    if interpreter is None:
        interpreter = Interpreter()
    return interpreter.run(parse_program(source))


__all__ = ['Interpreter', 'parse_chunk', 'parse_program', 'run_program']
