"""JSON serialization/deserialization for TinyLua ASTs.

This module converts between the AST dataclasses and plain Python
dict/list structures suitable for JSON encoding. Every node type
round-trips, so a program can be parsed once, saved with ``--emit-ast``
and executed later with ``--ast``.
"""

from __future__ import annotations

from typing import Any, List

from .ast import (
    Program,
    Block,
    Literal,
    Ident,
    UnaryOp,
    BinaryOp,
    Call,
    Index,
    TableField,
    TableConstructor,
    ExprStmt,
    Assign,
    LocalAssign,
    IfStmt,
    WhileStmt,
    RepeatStmt,
    ForStmt,
    FunctionDecl,
    ReturnStmt,
    BreakStmt,
)


def _block(block: Block) -> List[Any]:
    return [ast_to_obj(s) for s in block.statements]


def ast_to_obj(node: Any) -> Any:
    if node is None:
        return None

    if isinstance(node, Program):
        return {"type": "Program", "body": _block(node.body)}
    if isinstance(node, Literal):
        return {"type": "Literal", "value": node.value}
    if isinstance(node, Ident):
        return {"type": "Ident", "name": node.name}
    if isinstance(node, UnaryOp):
        return {"type": "UnaryOp", "op": node.op, "operand": ast_to_obj(node.operand)}
    if isinstance(node, BinaryOp):
        return {
            "type": "BinaryOp",
            "op": node.op,
            "left": ast_to_obj(node.left),
            "right": ast_to_obj(node.right),
        }
    if isinstance(node, Call):
        return {"type": "Call", "name": node.name, "args": [ast_to_obj(a) for a in node.args]}
    if isinstance(node, Index):
        return {"type": "Index", "target": ast_to_obj(node.target), "key": ast_to_obj(node.key)}
    if isinstance(node, TableConstructor):
        return {
            "type": "TableConstructor",
            "fields": [
                {"key": ast_to_obj(f.key), "value": ast_to_obj(f.value)} for f in node.fields
            ],
        }
    if isinstance(node, ExprStmt):
        return {"type": "ExprStmt", "expr": ast_to_obj(node.expr)}
    if isinstance(node, Assign):
        return {
            "type": "Assign",
            "targets": [ast_to_obj(t) for t in node.targets],
            "values": [ast_to_obj(v) for v in node.values],
        }
    if isinstance(node, LocalAssign):
        return {
            "type": "LocalAssign",
            "names": list(node.names),
            "values": [ast_to_obj(v) for v in node.values],
        }
    if isinstance(node, IfStmt):
        return {
            "type": "IfStmt",
            "condition": ast_to_obj(node.condition),
            "then_block": _block(node.then_block),
            "elseif_blocks": [
                {"condition": ast_to_obj(c), "block": _block(b)} for c, b in node.elseif_blocks
            ],
            "else_block": _block(node.else_block) if node.else_block is not None else None,
        }
    if isinstance(node, WhileStmt):
        return {"type": "WhileStmt", "condition": ast_to_obj(node.condition), "body": _block(node.body)}
    if isinstance(node, RepeatStmt):
        return {"type": "RepeatStmt", "body": _block(node.body), "condition": ast_to_obj(node.condition)}
    if isinstance(node, ForStmt):
        return {
            "type": "ForStmt",
            "var": node.var,
            "start": ast_to_obj(node.start),
            "end": ast_to_obj(node.end),
            "step": ast_to_obj(node.step),
            "body": _block(node.body),
        }
    if isinstance(node, FunctionDecl):
        return {
            "type": "FunctionDecl",
            "name": node.name,
            "params": list(node.params),
            "body": _block(node.body),
            "is_local": node.is_local,
        }
    if isinstance(node, ReturnStmt):
        return {"type": "ReturnStmt", "values": [ast_to_obj(v) for v in node.values]}
    if isinstance(node, BreakStmt):
        return {"type": "BreakStmt"}

    raise TypeError(f"Unsupported AST node for serialization: {type(node)!r}")


def _from_block(items: List[Any]) -> Block:
    return Block([ast_from_obj(s) for s in items])


def ast_from_obj(obj: Any) -> Any:
    if obj is None:
        return None
    if not isinstance(obj, dict) or "type" not in obj:
        raise ValueError(f"Invalid AST object: {obj!r}")

    t = obj["type"]
    if t == "Program":
        return Program(_from_block(obj["body"]))
    if t == "Literal":
        value = obj["value"]
        # JSON has no float/int split; numbers are always floats at runtime
        if isinstance(value, int) and not isinstance(value, bool):
            value = float(value)
        return Literal(value)
    if t == "Ident":
        return Ident(obj["name"])
    if t == "UnaryOp":
        return UnaryOp(obj["op"], ast_from_obj(obj["operand"]))
    if t == "BinaryOp":
        return BinaryOp(obj["op"], ast_from_obj(obj["left"]), ast_from_obj(obj["right"]))
    if t == "Call":
        return Call(obj["name"], [ast_from_obj(a) for a in obj.get("args", [])])
    if t == "Index":
        return Index(ast_from_obj(obj["target"]), ast_from_obj(obj["key"]))
    if t == "TableConstructor":
        return TableConstructor([
            TableField(ast_from_obj(f.get("key")), ast_from_obj(f["value"])) for f in obj.get("fields", [])
        ])
    if t == "ExprStmt":
        return ExprStmt(ast_from_obj(obj["expr"]))
    if t == "Assign":
        return Assign(
            [ast_from_obj(x) for x in obj["targets"]],
            [ast_from_obj(x) for x in obj.get("values", [])],
        )
    if t == "LocalAssign":
        return LocalAssign(list(obj["names"]), [ast_from_obj(x) for x in obj.get("values", [])])
    if t == "IfStmt":
        else_block = obj.get("else_block")
        return IfStmt(
            ast_from_obj(obj["condition"]),
            _from_block(obj["then_block"]),
            [(ast_from_obj(e["condition"]), _from_block(e["block"])) for e in obj.get("elseif_blocks", [])],
            _from_block(else_block) if else_block is not None else None,
        )
    if t == "WhileStmt":
        return WhileStmt(ast_from_obj(obj["condition"]), _from_block(obj["body"]))
    if t == "RepeatStmt":
        return RepeatStmt(_from_block(obj["body"]), ast_from_obj(obj["condition"]))
    if t == "ForStmt":
        return ForStmt(
            obj["var"],
            ast_from_obj(obj["start"]),
            ast_from_obj(obj["end"]),
            ast_from_obj(obj.get("step")),
            _from_block(obj["body"]),
        )
    if t == "FunctionDecl":
        return FunctionDecl(
            obj["name"],
            list(obj.get("params", [])),
            _from_block(obj["body"]),
            bool(obj.get("is_local", False)),
        )
    if t == "ReturnStmt":
        return ReturnStmt([ast_from_obj(v) for v in obj.get("values", [])])
    if t == "BreakStmt":
        return BreakStmt()

    raise ValueError(f"Unknown AST node type: {t}")
