from dataclasses import dataclass
from typing import Any, Callable, List


@dataclass(eq=False)
class BuiltinFunction:
    name: str
    fn: Callable[[Any, List[Any]], Any]  # (interpreter, args) -> value

    def __repr__(self) -> str:
        return f"<builtin {self.name}>"
