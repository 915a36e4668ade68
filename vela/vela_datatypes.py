"""
Defines the runtime value types of the Vela language and their operators.

Every operator method takes the other operand (if any) and the
ScopeManager, so that Pointer operands can be resolved before the type
rules are applied. Pointers are resolved afresh on every use.
"""
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, List as PyList, Optional, Tuple, TYPE_CHECKING

from vela.vela_errors import VelaRuntimeError

if TYPE_CHECKING:
    from vela.vela_ast import StatementsNode
    from vela.vela_scope import ScopeManager


# =================================================================
# Value base class
# =================================================================

class Value(ABC):
    """Abstract base class for every Vela runtime value."""
    type_name = "value"

    def resolve(self, scopes: 'ScopeManager') -> 'Value':
        """Returns the concrete value behind this one (itself, unless a Pointer)."""
        return self

    @abstractmethod
    def is_true(self, scopes: 'ScopeManager') -> bool: raise NotImplementedError

    def printable(self, scopes: Optional['ScopeManager'] = None) -> str:
        from vela.vela_printer import Printer
        return Printer(scopes).pformat(self)

    @abstractmethod
    def to_python(self, scopes: Optional['ScopeManager'] = None) -> Any: raise NotImplementedError

    # --- arithmetic ---
    def add(self, other: 'Value', scopes: 'ScopeManager') -> 'Value':
        return _binary("+", self, other, scopes, _add)

    def subtract(self, other: 'Value', scopes: 'ScopeManager') -> 'Value':
        return _binary("-", self, other, scopes, _arithmetic(lambda a, b: a - b))

    def multiply(self, other: 'Value', scopes: 'ScopeManager') -> 'Value':
        return _binary("*", self, other, scopes, _arithmetic(lambda a, b: a * b))

    def divide(self, other: 'Value', scopes: 'ScopeManager') -> 'Value':
        return _binary("/", self, other, scopes, _divide)

    def raise_to(self, other: 'Value', scopes: 'ScopeManager') -> 'Value':
        return _binary("^", self, other, scopes, _power)

    # --- comparison ---
    def equals(self, other: 'Value', scopes: 'ScopeManager') -> 'Boolean':
        return _binary("==", self, other, scopes, _equals)

    def not_equals(self, other: 'Value', scopes: 'ScopeManager') -> 'Boolean':
        return Boolean(not self.equals(other, scopes).value)

    def greater_than(self, other: 'Value', scopes: 'ScopeManager') -> 'Boolean':
        return _binary(">", self, other, scopes, _comparison(lambda a, b: a > b))

    def greater_equal(self, other: 'Value', scopes: 'ScopeManager') -> 'Boolean':
        return _binary(">=", self, other, scopes, _comparison(lambda a, b: a >= b))

    def less_than(self, other: 'Value', scopes: 'ScopeManager') -> 'Boolean':
        return _binary("<", self, other, scopes, _comparison(lambda a, b: a < b))

    def less_equal(self, other: 'Value', scopes: 'ScopeManager') -> 'Boolean':
        return _binary("<=", self, other, scopes, _comparison(lambda a, b: a <= b))

    # --- logical ---
    def logical_and(self, other: 'Value', scopes: 'ScopeManager') -> 'Value':
        return other if self.is_true(scopes) else self

    def logical_or(self, other: 'Value', scopes: 'ScopeManager') -> 'Value':
        return self if self.is_true(scopes) else other

    def logical_not(self, scopes: 'ScopeManager') -> 'Boolean':
        return Boolean(not self.is_true(scopes))

    # --- bitwise ---
    def bitwise_and(self, other: 'Value', scopes: 'ScopeManager') -> 'Int':
        return _binary("&", self, other, scopes, _bitwise(lambda a, b: a & b))

    def bitwise_or(self, other: 'Value', scopes: 'ScopeManager') -> 'Int':
        return _binary("|", self, other, scopes, _bitwise(lambda a, b: a | b))

    def bitwise_xor(self, other: 'Value', scopes: 'ScopeManager') -> 'Int':
        return _binary("^^", self, other, scopes, _bitwise(lambda a, b: a ^ b))

    def shift_left(self, other: 'Value', scopes: 'ScopeManager') -> 'Int':
        return _binary("<<", self, other, scopes, _bitwise(lambda a, b: a << b))

    def shift_right(self, other: 'Value', scopes: 'ScopeManager') -> 'Int':
        return _binary(">>", self, other, scopes, _bitwise(lambda a, b: a >> b))

    def bitwise_not(self, scopes: 'ScopeManager') -> 'Int':
        value = self.resolve(scopes)
        if isinstance(value, Int):
            return Int(~value.value)
        raise _illegal("~", scopes, value)


# =================================================================
# Concrete value types
# =================================================================

@dataclass
class Int(Value):
    value: int
    type_name = "int"

    def is_true(self, scopes):
        return self.value != 0

    def to_python(self, scopes=None):
        return self.value


@dataclass
class Float(Value):
    value: float
    type_name = "float"

    def is_true(self, scopes):
        return self.value != 0.0

    def to_python(self, scopes=None):
        return self.value


@dataclass
class Str(Value):
    value: str
    type_name = "string"

    def is_true(self, scopes):
        return len(self.value) > 0

    def to_python(self, scopes=None):
        return self.value


@dataclass
class Boolean(Value):
    value: bool
    type_name = "boolean"

    def is_true(self, scopes):
        return self.value

    def to_python(self, scopes=None):
        return self.value


@dataclass
class Null(Value):
    type_name = "null"

    def is_true(self, scopes):
        return False

    def to_python(self, scopes=None):
        return None


@dataclass
class List(Value):
    elements: PyList[Value] = field(default_factory=list)
    type_name = "list"

    def is_true(self, scopes):
        return len(self.elements) > 0

    def to_python(self, scopes=None):
        return [e.to_python(scopes) for e in self.elements]


@dataclass
class Func(Value):
    """A function defined in Vela, closed over the scope it was defined in."""
    name: str
    params: Tuple[str, ...]
    body: 'StatementsNode'
    closure: int
    type_name = "function"

    def is_true(self, scopes):
        return True

    def to_python(self, scopes=None):
        return self


@dataclass
class Pointer(Value):
    """A reference to the binding `name` as seen from scope `scope`.

    Resolution walks the scope chain again on every use, so the pointer
    always sees the binding's current value.
    """
    scope: int
    name: str
    type_name = "pointer"

    def resolve(self, scopes):
        value = scopes.lookup(self.scope, self.name)
        if value is None:
            raise VelaRuntimeError(f"'{self.name}' is not defined")
        return value.resolve(scopes)

    def is_true(self, scopes):
        return self.resolve(scopes).is_true(scopes)

    def to_python(self, scopes=None):
        return self.resolve(scopes).to_python(scopes)


# =================================================================
# Operator rules
# =================================================================
# A rule receives two resolved operands and returns the result, or None when
# the combination of types is not supported.

Rule = Callable[[Value, Value, 'ScopeManager'], Optional[Value]]


def _is_number(v: Value) -> bool:
    return isinstance(v, (Int, Float))


def _illegal(op: str, scopes, *operands: Value) -> VelaRuntimeError:
    shown = " and ".join(f"'{v.printable(scopes)}'" for v in operands)
    return VelaRuntimeError(f"Illegal operation '{op}' for {shown}")


def _binary(op: str, left: Value, right: Value, scopes, rule: Rule) -> Value:
    left = left.resolve(scopes)
    right = right.resolve(scopes)
    try:
        result = rule(left, right, scopes)
    except ZeroDivisionError:
        raise VelaRuntimeError(f"Division by zero in '{left.printable(scopes)} {op} {right.printable(scopes)}'") from None
    except (OverflowError, ValueError) as e:
        raise VelaRuntimeError(f"{_illegal(op, scopes, left, right)}: {e}") from None
    if result is None:
        raise _illegal(op, scopes, left, right)
    return result


def _add(l, r, scopes):
    if isinstance(l, Str):
        return Str(l.value + r.printable(scopes))
    return _arithmetic(lambda a, b: a + b)(l, r, scopes)


def _finite(result: float, a: float, b: float) -> float:
    # Float operators return inf/nan instead of raising; only finite inputs count as overflow.
    if not math.isfinite(result) and math.isfinite(a) and math.isfinite(b):
        raise OverflowError("float result out of range")
    return result


def _arithmetic(fn):
    def rule(l, r, scopes):
        if isinstance(l, Int) and isinstance(r, Int):
            return Int(fn(l.value, r.value))
        if _is_number(l) and _is_number(r):
            a, b = float(l.value), float(r.value)
            return Float(_finite(fn(a, b), a, b))
        return None
    return rule


def _divide(l, r, scopes):
    if isinstance(l, Int) and isinstance(r, Int):
        quotient, remainder = divmod(l.value, r.value)
        if remainder == 0:
            return Int(quotient)
        return Float(l.value / r.value)
    if _is_number(l) and _is_number(r):
        a, b = float(l.value), float(r.value)
        return Float(_finite(a / b, a, b))
    return None


def _power(l, r, scopes):
    if isinstance(l, Int) and isinstance(r, Int):
        if r.value >= 0:
            return Int(l.value ** r.value)
        return Float(float(l.value ** r.value))
    if _is_number(l) and _is_number(r):
        return Float(math.pow(float(l.value), float(r.value)))
    return None


def _comparison(fn):
    def rule(l, r, scopes):
        if _is_number(l) and _is_number(r):
            return Boolean(fn(l.value, r.value))
        return None
    return rule


def _equals(l, r, scopes):
    if _is_number(l) and _is_number(r):
        return Boolean(l.value == r.value)
    if isinstance(l, Boolean) and isinstance(r, Boolean):
        return Boolean(l.value == r.value)
    if isinstance(l, Str) and isinstance(r, Str):
        return Boolean(l.value == r.value)
    if isinstance(l, Null) and isinstance(r, Null):
        return Boolean(True)
    return None


def _bitwise(fn):
    def rule(l, r, scopes):
        if isinstance(l, Int) and isinstance(r, Int):
            return Int(fn(l.value, r.value))
        return None
    return rule


# =================================================================
# Conversions
# =================================================================

def to_value(obj: Any) -> Value:
    """Converts a plain Python object (e.g. loaded from YAML) into a Vela value."""
    match obj:
        case Value():
            return obj
        case None:
            return Null()
        case bool():
            return Boolean(obj)
        case int():
            return Int(obj)
        case float():
            return Float(obj)
        case str():
            return Str(obj)
        case list() | tuple():
            return List([to_value(x) for x in obj])
    raise TypeError(f"Cannot convert {type(obj).__name__} to a Vela value")
