from __future__ import annotations

from typing import Optional

from typing_extensions import assert_never

from . import tree as ast
from .environment import Environment
from .objects import (
    NULL,
    Array,
    Error,
    Function,
    Integer,
    Object,
    ReturnValue,
    String,
    is_error,
    native_bool,
    new_error,
)
from .stdlib import lookup_builtin

from .eval.helpers import is_truthy
from .eval.expr import eval_prefix, eval_infix
from .eval.calls import apply_function, eval_expressions
from .eval.containers import eval_hash_literal, eval_index

# ---------------- Public API ----------------

def eval_program(program: ast.Program, env: Optional[Environment]=None) -> Object:
    """Evaluate a whole program; a top-level `return` ends it early."""
    if env is None:
        env = Environment()

    result: Object = NULL

    for stmt in program.statements:
        result = eval_node(stmt, env)

        if isinstance(result, ReturnValue):
            return result.value
        if isinstance(result, Error):
            return result

    return result

# ---------------- Core evaluator ----------------

def eval_node(node: ast.AnyNode, env: Environment) -> Object:
    match node:
        # statements
        case ast.Program():
            return eval_program(node, env)
        case ast.BlockStatement():
            return eval_block(node, env)
        case ast.ExpressionStatement():
            return eval_node(node.expression, env)
        case ast.LetStatement():
            val = eval_node(node.value, env)
            if is_error(val):
                return val
            env.set(node.name.value, val)
            return NULL
        case ast.ReturnStatement():
            val = eval_node(node.return_value, env)
            if is_error(val):
                return val
            return ReturnValue(val)

        # literals
        case ast.IntegerLiteral():
            return Integer(node.value)
        case ast.Boolean():
            return native_bool(node.value)
        case ast.StringLiteral():
            return String(node.value)
        case ast.ArrayLiteral():
            elements = eval_expressions(node.elements, env, eval_node)
            if is_error(elements):
                return elements
            return Array(elements)
        case ast.HashLiteral():
            return eval_hash_literal(node, env, eval_node)
        case ast.FunctionLiteral():
            return Function(node.parameters, node.body, env)

        # operators
        case ast.Identifier():
            return eval_identifier(node, env)
        case ast.PrefixExpression():
            right = eval_node(node.right, env)
            if is_error(right):
                return right
            return eval_prefix(node.operator, right)
        case ast.InfixExpression():
            left = eval_node(node.left, env)
            if is_error(left):
                return left
            right = eval_node(node.right, env)
            if is_error(right):
                return right
            return eval_infix(node.operator, left, right)
        case ast.IfExpression():
            return eval_if(node, env)
        case ast.CallExpression():
            fn = eval_node(node.function, env)
            if is_error(fn):
                return fn
            args = eval_expressions(node.arguments, env, eval_node)
            if is_error(args):
                return args
            return apply_function(fn, args, eval_block)
        case ast.IndexExpression():
            left = eval_node(node.left, env)
            if is_error(left):
                return left
            index = eval_node(node.index, env)
            if is_error(index):
                return index
            return eval_index(left, index)
        case _:
            assert_never(node)

def eval_block(block: ast.BlockStatement, env: Environment) -> Object:
    """Run statements in `env`; ReturnValue and Error pass through still wrapped."""
    result: Object = NULL

    for stmt in block.statements:
        result = eval_node(stmt, env)

        if isinstance(result, (ReturnValue, Error)):
            return result

    return result

def eval_identifier(node: ast.Identifier, env: Environment) -> Object:
    val = env.get(node.value)
    if val is not None:
        return val

    builtin = lookup_builtin(node.value)
    if builtin is not None:
        return builtin

    return new_error(f"identifier not found: {node.value}")

def eval_if(node: ast.IfExpression, env: Environment) -> Object:
    condition = eval_node(node.condition, env)
    if is_error(condition):
        return condition

    # Branch bodies get their own scope; `let` inside them stays local.
    if is_truthy(condition):
        return eval_block(node.consequence, env.new_child())

    if node.alternative is not None:
        return eval_block(node.alternative, env.new_child())

    return NULL
