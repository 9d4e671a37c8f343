from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Callable, ClassVar, Dict, List, Optional, Tuple, Union
from typing_extensions import TypeAlias, TypeGuard

from .tree import BlockStatement, Identifier

if TYPE_CHECKING:
    from .environment import Environment

# ---------- Value Model ----------

class ObjectType(Enum):
    INTEGER = "INTEGER"
    BOOLEAN = "BOOLEAN"
    STRING = "STRING"
    NULL = "NULL"
    ARRAY = "ARRAY"
    HASH = "HASH"
    FUNCTION = "FUNCTION"
    BUILTIN = "BUILTIN"
    RETURN_VALUE = "RETURN_VALUE"
    ERROR = "ERROR"

@dataclass(frozen=True)
class HashKey:
    type: ObjectType
    value: Union[int, bool, str]

@dataclass
class Integer:
    value: int
    type: ClassVar[ObjectType] = ObjectType.INTEGER
    def inspect(self) -> str:
        return str(self.value)
    def hash_key(self) -> HashKey:
        return HashKey(self.type, self.value)
    def __repr__(self) -> str:
        return self.inspect()

@dataclass
class Boolean:
    value: bool
    type: ClassVar[ObjectType] = ObjectType.BOOLEAN
    def inspect(self) -> str:
        return "true" if self.value else "false"
    def hash_key(self) -> HashKey:
        return HashKey(self.type, self.value)
    def __repr__(self) -> str:
        return self.inspect()

@dataclass
class String:
    value: str
    type: ClassVar[ObjectType] = ObjectType.STRING
    def inspect(self) -> str:
        return self.value
    def hash_key(self) -> HashKey:
        return HashKey(self.type, self.value)
    def __repr__(self) -> str:
        return f'"{self.value}"'

@dataclass
class Null:
    type: ClassVar[ObjectType] = ObjectType.NULL
    def inspect(self) -> str:
        return "null"
    def __repr__(self) -> str:
        return self.inspect()

@dataclass
class Array:
    elements: List['Object']
    type: ClassVar[ObjectType] = ObjectType.ARRAY
    def inspect(self) -> str:
        return "[" + ", ".join(repr(x) for x in self.elements) + "]"
    def __repr__(self) -> str:
        return self.inspect()

@dataclass
class HashPair:
    key: 'Object'
    value: 'Object'

@dataclass
class Hash:
    pairs: Dict[HashKey, HashPair] = field(default_factory=dict)
    type: ClassVar[ObjectType] = ObjectType.HASH
    def inspect(self) -> str:
        items = []

        for pair in self.pairs.values():
            items.append(f"{pair.key!r}: {pair.value!r}")

        return "{" + ", ".join(items) + "}"
    def __repr__(self) -> str:
        return self.inspect()

@dataclass(eq=False)
class Function:
    parameters: Tuple[Identifier, ...]
    body: BlockStatement
    env: 'Environment'                 # Closure scope, shared not copied
    type: ClassVar[ObjectType] = ObjectType.FUNCTION
    def inspect(self) -> str:
        params = ", ".join(str(p) for p in self.parameters)
        return f"fn({params}) {self.body}"
    def __repr__(self) -> str:
        return self.inspect()

BuiltinFn = Callable[[List['Object']], 'Object']

@dataclass(frozen=True)
class Builtin:
    name: str
    fn: BuiltinFn
    arity: Optional[int] = None
    type: ClassVar[ObjectType] = ObjectType.BUILTIN
    def inspect(self) -> str:
        return f"builtin function {self.name}"
    def __repr__(self) -> str:
        return self.inspect()

@dataclass
class ReturnValue:
    """Internal wrapper that unwinds blocks up to the enclosing call."""
    value: 'Object'
    type: ClassVar[ObjectType] = ObjectType.RETURN_VALUE
    def inspect(self) -> str:
        return self.value.inspect()
    def __repr__(self) -> str:
        return self.inspect()

@dataclass
class Error:
    message: str
    type: ClassVar[ObjectType] = ObjectType.ERROR
    def inspect(self) -> str:
        return f"ERROR: {self.message}"
    def __repr__(self) -> str:
        return self.inspect()

Object: TypeAlias = (
    Integer
    | Boolean
    | String
    | Null
    | Array
    | Hash
    | Function
    | Builtin
    | ReturnValue
    | Error
)

Hashable: TypeAlias = Integer | Boolean | String

# Singletons: identity comparison of booleans and null depends on these.
TRUE = Boolean(True)
FALSE = Boolean(False)
NULL = Null()

def native_bool(value: bool) -> Boolean:
    return TRUE if value else FALSE

def new_error(message: str) -> Error:
    return Error(message)

def is_error(value: Optional[Object]) -> TypeGuard[Error]:
    return isinstance(value, Error)

def is_hashable(value: Object) -> TypeGuard[Hashable]:
    return isinstance(value, (Integer, Boolean, String))

def type_name(value: Object) -> str:
    return value.type.value
