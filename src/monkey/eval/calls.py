from __future__ import annotations

from typing import Callable, List, Sequence, Union

from ..environment import Environment
from ..objects import Builtin, Error, Function, Object, is_error, new_error, type_name
from ..tree import BlockStatement, Expression
from .helpers import unwrap_return_value

EvalFunc = Callable[[Expression, Environment], Object]
BlockFunc = Callable[[BlockStatement, Environment], Object]

def eval_expressions(nodes: Sequence[Expression], env: Environment, eval_func: EvalFunc) -> Union[List[Object], Error]:
    """Evaluate left to right; the first Error is returned instead of a list."""
    values: List[Object] = []

    for node in nodes:
        val = eval_func(node, env)
        if is_error(val):
            return val
        values.append(val)

    return values

def apply_function(fn: Object, args: List[Object], eval_block: BlockFunc) -> Object:
    match fn:
        case Function():
            if len(args) != len(fn.parameters):
                return new_error(
                    f"wrong number of arguments: want={len(fn.parameters)}, got={len(args)}"
                )
            call_env = extend_function_env(fn, args)
            return unwrap_return_value(eval_block(fn.body, call_env))
        case Builtin():
            if fn.arity is not None and len(args) != fn.arity:
                return new_error(f"wrong number of arguments. got={len(args)}, want={fn.arity}")
            return fn.fn(args)
        case _:
            return new_error(f"not a function: {type_name(fn)}")

def extend_function_env(fn: Function, args: List[Object]) -> Environment:
    env = fn.env.new_child()

    for param, arg in zip(fn.parameters, args):
        env.set(param.value, arg)

    return env
