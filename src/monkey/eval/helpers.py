from __future__ import annotations

from ..objects import Boolean, Null, Object, ReturnValue

def is_truthy(val: Object) -> bool:
    # Only false and null are falsy; 0, "" and [] are all truthy.
    match val:
        case Boolean(value=b):
            return b
        case Null():
            return False
        case _:
            return True

def unwrap_return_value(val: Object) -> Object:
    if isinstance(val, ReturnValue):
        return val.value

    return val
