from typing import Any, Dict, List

from tinylua.builtin_function import BuiltinFunction
from tinylua.types import to_number, to_string, type_name


def populate_base_environment() -> Dict[str, BuiltinFunction]:
    """Build the builtins installed into the globals of every interpreter."""

    def std_print(interp: Any, args: List[Any]) -> Any:
        interp.write_line('\t'.join(to_string(a) for a in args))
        return None

    def std_type(interp: Any, args: List[Any]) -> Any:
        if len(args) != 1:
            return None
        return type_name(args[0])

    def std_tonumber(interp: Any, args: List[Any]) -> Any:
        if not args:
            return None
        return to_number(args[0])

    def std_tostring(interp: Any, args: List[Any]) -> Any:
        if not args:
            return ''
        return to_string(args[0])

    return {
        'print': BuiltinFunction('print', std_print),
        'type': BuiltinFunction('type', std_type),
        'tonumber': BuiltinFunction('tonumber', std_tonumber),
        'tostring': BuiltinFunction('tostring', std_tostring),
    }
