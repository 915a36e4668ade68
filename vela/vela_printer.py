"""
Renders Vela values in their printable form.

This is the text the REPL shows, the text `"str" + value` concatenates, and
the text quoted in runtime error messages.
"""
from decimal import Decimal
from typing import Optional

from vela.vela_datatypes import Int, Float, Str, Boolean, Null, List, Func, Pointer
from vela.vela_errors import VelaRuntimeError
from vela.vela_scope import ScopeManager


class Printer:
    """Formats Vela values; Pointers are resolved through `scopes`."""

    def __init__(self, scopes: Optional[ScopeManager] = None):
        self.scopes = scopes
        self._handlers = self._create_handlers()

    def pformat(self, obj) -> str:
        """Public entry point to format a value."""
        handler = self._handlers.get(type(obj))
        if handler is None:
            # Non-Vela objects only show up here through host bindings or bugs.
            return repr(obj)
        return handler(obj)

    def _create_handlers(self):
        return {
            Int: self._pformat_primitive,
            Float: self._pformat_float,
            Str: self._pformat_str,
            Boolean: self._pformat_bool,
            Null: self._pformat_null,
            List: self._pformat_list,
            Func: self._pformat_func,
            Pointer: self._pformat_pointer,
        }

    def _pformat_primitive(self, obj):
        return str(obj.value)

    def _pformat_float(self, obj):
        text = repr(obj.value)
        if 'e' not in text:
            return text
        # Exponent forms (1e+16, 1e-07) are spelled out in plain decimal.
        text = format(Decimal(text), 'f')
        return text if '.' in text else text + '.0'

    def _pformat_str(self, obj):
        return obj.value

    def _pformat_bool(self, obj):
        return 'true' if obj.value else 'false'

    def _pformat_null(self, obj):
        return 'null'

    def _pformat_list(self, obj):
        return "[" + ", ".join(self.pformat(e) for e in obj.elements) + "]"

    def _pformat_func(self, obj):
        return f"{obj.name}({', '.join(obj.params)})"

    def _pformat_pointer(self, obj):
        if self.scopes is None:
            return 'null'
        try:
            return self.pformat(obj.resolve(self.scopes))
        except VelaRuntimeError:
            return 'null'
