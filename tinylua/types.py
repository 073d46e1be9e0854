"""Runtime values and operators for TinyLua.

Lua values map onto Python objects as follows:

========  ==============================================
nil       ``None``
boolean   ``bool``
number    ``float`` (always a float, never an ``int``)
string    ``str``
table     :class:`TableVal`
function  :class:`FunctionValue` or ``BuiltinFunction``
========  ==============================================

Operators never raise. Arithmetic on values without a numeric form yields
``None`` (nil), relational comparisons between such values yield
``False``. Tables and functions never compare equal to anything, not even
themselves.
"""

from __future__ import annotations

import math
import re
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from .builtin_function import BuiltinFunction

_NUMBER_RE = re.compile(
    r'[+-]?(?:\d+\.?\d*(?:[eE][+-]?\d+)?|\.\d+(?:[eE][+-]?\d+)?|inf|infinity|nan)',
    re.IGNORECASE | re.ASCII,
)

ARITHMETIC_OPERATORS = frozenset({'+', '-', '*', '/', '%', '^'})
RELATIONAL_OPERATORS = frozenset({'<', '<=', '>', '>='})


class TableVal:
    """A shared, mutable associative table.

    Keys are restricted to nil, booleans, numbers and strings. They are
    stored type-tagged so that ``true`` and ``1`` stay distinct keys even
    though Python considers them equal. Storing nil under a key removes it.
    """
    def __init__(self):
        self.entries: Dict[Tuple[str, Any], Tuple[Any, Any]] = {}

    @staticmethod
    def key_of(key: Any) -> Optional[Tuple[str, Any]]:
        if key is None or isinstance(key, (bool, float, str)):
            return (type_name(key), key)
        return None

    def get(self, key: Any) -> Any:
        tagged = self.key_of(key)
        if tagged is None or tagged not in self.entries:
            return None
        return self.entries[tagged][1]

    def set(self, key: Any, value: Any) -> bool:
        """Store ``value`` under ``key``; returns False when the key is not usable."""
        tagged = self.key_of(key)
        if tagged is None:
            return False
        if value is None:
            self.entries.pop(tagged, None)
        else:
            self.entries[tagged] = (key, value)
        return True

    def __len__(self) -> int:
        return len(self.entries)

    # Tables use identity, never structural equality.
    __eq__ = object.__eq__
    __hash__ = object.__hash__

    def __repr__(self) -> str:
        return f"<table {len(self.entries)} entries>"


class FunctionValue:
    """A user-defined TinyLua function.

    ``closure`` is the frame that was innermost when the definition ran. It is
    kept for introspection only: free names inside the body resolve against
    the frames live at call time.
    """
    def __init__(self, name: str, params: List[str], body: Any, closure: Any = None):
        self.name = name
        self.params = params
        self.body = body
        self.closure = closure

    def __repr__(self) -> str:
        return f"<function {self.name}>"


def type_name(value: Any) -> str:
    if value is None:
        return 'nil'
    if isinstance(value, bool):
        return 'boolean'
    if isinstance(value, float):
        return 'number'
    if isinstance(value, str):
        return 'string'
    if isinstance(value, TableVal):
        return 'table'
    if isinstance(value, (FunctionValue, BuiltinFunction)):
        return 'function'
    raise TypeError(f"not a TinyLua value: {value!r}")


def is_truthy(value: Any) -> bool:
    return value is not None and value is not False


def parse_number(text: str) -> Optional[float]:
    if not _NUMBER_RE.fullmatch(text):
        return None
    return float(text)


def to_number(value: Any) -> Optional[float]:
    """Numeric form of ``value``, or None when it has none."""
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, float):
        return value
    if isinstance(value, str):
        return parse_number(value)
    return None


def format_number(n: float) -> str:
    """Render a number as plain decimal text without an exponent."""
    if math.isnan(n):
        return 'NaN'
    if math.isinf(n):
        return 'inf' if n > 0 else '-inf'
    text = format(Decimal(repr(n)), 'f')
    if '.' in text:
        text = text.rstrip('0').rstrip('.')
    return text


def to_string(value: Any) -> str:
    if value is None:
        return 'nil'
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, float):
        return format_number(value)
    if isinstance(value, str):
        return value
    if isinstance(value, TableVal):
        return 'table'
    return 'function'


def repr_value(value: Any) -> str:
    """Display form used by the REPL: like to_string, but strings are quoted."""
    if isinstance(value, str):
        return f'"{value}"'
    return to_string(value)


def values_equal(a: Any, b: Any) -> bool:
    if isinstance(a, (TableVal, FunctionValue, BuiltinFunction)):
        return False
    if type(a) is not type(b):
        return False
    return a == b


def _divide(a: float, b: float) -> float:
    if b == 0:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


def _modulo(a: float, b: float) -> float:
    if b == 0 or math.isinf(a):
        return math.nan
    return math.fmod(a, b)


def _power(a: float, b: float) -> float:
    try:
        return math.pow(a, b)
    except OverflowError:
        if a < 0 and b.is_integer() and int(b) % 2 == 1:
            return -math.inf
        return math.inf
    except ValueError:
        if a == 0:
            # zero to a negative power keeps the sign of zero for odd exponents
            if b.is_integer() and int(b) % 2 == 1:
                return math.copysign(math.inf, a)
            return math.inf
        return math.nan


def arithmetic(op: str, a: Any, b: Any) -> Optional[float]:
    x = to_number(a)
    y = to_number(b)
    if x is None or y is None:
        return None
    if op == '+':
        return x + y
    if op == '-':
        return x - y
    if op == '*':
        return x * y
    if op == '/':
        return _divide(x, y)
    if op == '%':
        return _modulo(x, y)
    if op == '^':
        return _power(x, y)
    raise ValueError(f"unknown arithmetic operator {op}")


def compare(op: str, a: Any, b: Any) -> bool:
    x = to_number(a)
    y = to_number(b)
    if x is None or y is None:
        return False
    if op == '<':
        return x < y
    if op == '<=':
        return x <= y
    if op == '>':
        return x > y
    if op == '>=':
        return x >= y
    raise ValueError(f"unknown relational operator {op}")


def apply_binary_op(op: str, a: Any, b: Any) -> Any:
    """Apply a non short-circuit binary operator to two evaluated operands."""
    if op in ARITHMETIC_OPERATORS:
        return arithmetic(op, a, b)
    if op in RELATIONAL_OPERATORS:
        return compare(op, a, b)
    if op == '==':
        return values_equal(a, b)
    if op == '~=':
        return not values_equal(a, b)
    if op == '..':
        return to_string(a) + to_string(b)
    raise ValueError(f"unknown binary operator {op}")


def length(value: Any) -> Optional[float]:
    if isinstance(value, str):
        return float(len(value.encode('utf-8')))
    if isinstance(value, TableVal):
        return float(len(value))
    return None


def negate(value: Any) -> Optional[float]:
    n = to_number(value)
    if n is None:
        return None
    return -n


def apply_unary_op(op: str, value: Any) -> Any:
    if op == 'not':
        return not is_truthy(value)
    if op == '-':
        return negate(value)
    if op == '#':
        return length(value)
    raise ValueError(f"unknown unary operator {op}")
