from __future__ import annotations

from ..objects import (
    Integer,
    Object,
    String,
    native_bool,
    new_error,
    type_name,
)
from ..utils import to_int64, trunc_div
from .helpers import is_truthy

def eval_prefix(op: str, right: Object) -> Object:
    match op:
        case '!':
            return native_bool(not is_truthy(right))
        case '-':
            if not isinstance(right, Integer):
                return new_error(f"unknown operator: -{type_name(right)}")
            return Integer(to_int64(-right.value))
        case _:
            return new_error(f"unknown operator: {op}{type_name(right)}")

def eval_infix(op: str, left: Object, right: Object) -> Object:
    if isinstance(left, Integer) and isinstance(right, Integer):
        return _integer_infix(op, left.value, right.value)

    if isinstance(left, String) and isinstance(right, String):
        return _string_infix(op, left.value, right.value)

    # Booleans and null are singletons, so identity is value equality here.
    if op == '==':
        return native_bool(left is right)
    if op == '!=':
        return native_bool(left is not right)

    if left.type != right.type:
        return new_error(f"type mismatch: {type_name(left)} {op} {type_name(right)}")

    return new_error(f"unknown operator: {type_name(left)} {op} {type_name(right)}")

def _integer_infix(op: str, lhs: int, rhs: int) -> Object:
    match op:
        case '+':
            return Integer(to_int64(lhs + rhs))
        case '-':
            return Integer(to_int64(lhs - rhs))
        case '*':
            return Integer(to_int64(lhs * rhs))
        case '/':
            if rhs == 0:
                return new_error("division by zero")
            return Integer(to_int64(trunc_div(lhs, rhs)))
        case '<':
            return native_bool(lhs < rhs)
        case '>':
            return native_bool(lhs > rhs)
        case '==':
            return native_bool(lhs == rhs)
        case '!=':
            return native_bool(lhs != rhs)
        case _:
            return new_error(f"unknown operator: INTEGER {op} INTEGER")

def _string_infix(op: str, lhs: str, rhs: str) -> Object:
    match op:
        case '+':
            return String(lhs + rhs)
        case '==':
            return native_bool(lhs == rhs)
        case '!=':
            return native_bool(lhs != rhs)
        case _:
            return new_error(f"unknown operator: STRING {op} STRING")
