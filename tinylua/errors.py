from dataclasses import dataclass
from typing import Any, List, Optional, Tuple


@dataclass(frozen=True)
class Diagnostic:
    """A syntax problem found while lexing or parsing."""
    stage: str  # 'lex' or 'parse'
    message: str
    line: int
    column: int
    expected: Tuple[str, ...] = ()
    found: Optional[str] = None

    def format(self) -> str:
        text = f"{self.line}:{self.column}: {self.message}"
        if self.expected:
            text += f"; expected {', '.join(self.expected)}"
        if self.found is not None:
            text += f"; found {self.found}"
        return text

    def __str__(self) -> str:
        return self.format()


class LuaError(Exception):
    """Base class for errors surfaced by the interpreter."""


class ParseError(LuaError):
    """Raised inside the parser when a statement cannot be completed."""
    def __init__(self, diagnostic: Diagnostic):
        super().__init__(diagnostic.format())
        self.diagnostic = diagnostic


class LuaSyntaxError(LuaError):
    """Source text could not be turned into a program."""
    def __init__(self, diagnostics: List[Diagnostic]):
        lines = '\n'.join(d.format() for d in diagnostics)
        super().__init__(f"syntax error:\n{lines}")
        self.diagnostics = diagnostics


class LuaRuntimeError(LuaError):
    """Internal invariant violation or resource exhaustion during execution."""


class ReturnSignal:
    """Result of executing a return statement; carries the returned value."""
    def __init__(self, value: Any):
        self.value = value

    def __repr__(self) -> str:
        return f"ReturnSignal({self.value!r})"


class BreakSignal:
    """Result of executing a break statement."""
    def __repr__(self) -> str:
        return 'BreakSignal()'
