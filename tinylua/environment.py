from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from .errors import LuaRuntimeError


class Frame:
    """Local bindings for one function invocation (or the implicit root)."""
    def __init__(self, name: str, values: Optional[Dict[str, Any]] = None):
        self.name = name
        self.values: Dict[str, Any] = values if values is not None else {}

    def __repr__(self) -> str:
        return f"<frame {self.name}>"


class Environment:
    """Global table plus the stack of call frames.

    Reads search frames innermost first, then the globals, and yield nil
    when nothing matches. Plain assignment always targets the globals;
    ``declare`` targets the innermost frame.
    """
    def __init__(self):
        self.globals: Dict[str, Any] = {}
        self.frames: List[Frame] = [Frame('main')]

    @property
    def depth(self) -> int:
        return len(self.frames)

    @property
    def current_frame(self) -> Frame:
        if not self.frames:
            raise LuaRuntimeError('no call frame is open')
        return self.frames[-1]

    def get(self, name: str) -> Any:
        for frame in reversed(self.frames):
            if name in frame.values:
                return frame.values[name]
        return self.globals.get(name)

    def set_global(self, name: str, value: Any):
        self.globals[name] = value

    def declare(self, name: str, value: Any):
        self.current_frame.values[name] = value

    @contextmanager
    def call_frame(self, name: str, values: Dict[str, Any]) -> Iterator[Frame]:
        frame = Frame(name, values)
        self.frames.append(frame)
        try:
            yield frame
        finally:
            self.frames.pop()
