from __future__ import annotations

from typing import Callable, Dict

from ..environment import Environment
from ..objects import (
    NULL,
    Array,
    Hash,
    HashKey,
    HashPair,
    Integer,
    Object,
    is_error,
    is_hashable,
    new_error,
    type_name,
)
from ..tree import Expression, HashLiteral

EvalFunc = Callable[[Expression, Environment], Object]

def eval_hash_literal(node: HashLiteral, env: Environment, eval_func: EvalFunc) -> Object:
    pairs: Dict[HashKey, HashPair] = {}

    for key_node, value_node in node.pairs:
        key = eval_func(key_node, env)
        if is_error(key):
            return key

        if not is_hashable(key):
            return new_error(f"unusable as hash key: {type_name(key)}")

        value = eval_func(value_node, env)
        if is_error(value):
            return value

        # Duplicate keys: the later pair replaces the earlier one.
        pairs[key.hash_key()] = HashPair(key, value)

    return Hash(pairs)

def eval_index(left: Object, index: Object) -> Object:
    if isinstance(left, Array) and isinstance(index, Integer):
        return _array_index(left, index.value)

    if isinstance(left, Hash):
        return _hash_index(left, index)

    return new_error(f"index operator not supported: {type_name(left)}")

def _array_index(array: Array, idx: int) -> Object:
    if idx < 0 or idx >= len(array.elements):
        return NULL

    return array.elements[idx]

def _hash_index(hash_obj: Hash, key: Object) -> Object:
    if not is_hashable(key):
        return new_error(f"unusable as hash key: {type_name(key)}")

    pair = hash_obj.pairs.get(key.hash_key())
    if pair is None:
        return NULL

    return pair.value
