"""Built-in functions (len, puts, etc.) reachable from Monkey programs."""

from __future__ import annotations

from typing import Dict, List, Optional

from .objects import (
    NULL,
    Array,
    Builtin,
    BuiltinFn,
    Object,
    String,
    Integer,
    new_error,
    type_name,
)

BUILTINS: Dict[str, Builtin] = {}

def register_builtin(name: str, *, arity: Optional[int] = None):
    def dec(fn: BuiltinFn):
        BUILTINS[name] = Builtin(name=name, fn=fn, arity=arity)
        return fn

    return dec

def lookup_builtin(name: str) -> Optional[Builtin]:
    return BUILTINS.get(name)

def _expect_array(name: str, arg: Object) -> Optional[Object]:
    if isinstance(arg, Array):
        return None

    return new_error(f"argument to `{name}` must be ARRAY, got {type_name(arg)}")

@register_builtin("len", arity=1)
def builtin_len(args: List[Object]) -> Object:
    arg = args[0]

    if isinstance(arg, String):
        return Integer(len(arg.value))

    if isinstance(arg, Array):
        return Integer(len(arg.elements))

    return new_error(f"argument to `len` not supported, got {type_name(arg)}")

@register_builtin("first", arity=1)
def builtin_first(args: List[Object]) -> Object:
    err = _expect_array("first", args[0])
    if err is not None:
        return err

    elements = args[0].elements
    return elements[0] if elements else NULL

@register_builtin("last", arity=1)
def builtin_last(args: List[Object]) -> Object:
    err = _expect_array("last", args[0])
    if err is not None:
        return err

    elements = args[0].elements
    return elements[-1] if elements else NULL

@register_builtin("rest", arity=1)
def builtin_rest(args: List[Object]) -> Object:
    err = _expect_array("rest", args[0])
    if err is not None:
        return err

    elements = args[0].elements
    if not elements:
        return NULL

    return Array(list(elements[1:]))

@register_builtin("push", arity=2)
def builtin_push(args: List[Object]) -> Object:
    err = _expect_array("push", args[0])
    if err is not None:
        return err

    # Arrays are values in Monkey; push returns a copy.
    return Array(list(args[0].elements) + [args[1]])

@register_builtin("puts")
def builtin_puts(args: List[Object]) -> Object:
    for arg in args:
        print(arg.inspect())

    return NULL
