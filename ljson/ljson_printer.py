"""
Renders LJSON terms as text.

`format` produces the canonical compact wire form; `pformat` produces an
indented form for people. Both re-parse to the same term.
"""
import json
import math

from ljson.ljson_datatypes import (
    Term, Literal, Sequence, Record, Lambda, Variable, FreeVariable, Application
)


class Printer:
    """Formats LJSON terms into valid LJSON source strings."""

    def __init__(self, indent_width=2):
        self._indent_char = " " * indent_width
        self._handlers = self._create_handlers()

    def format(self, term: Term) -> str:
        """Compact rendering with no whitespace: the wire format."""
        match term:
            case Literal():
                return self._format_literal(term.value)
            case Variable() | FreeVariable():
                return term.name
            case Sequence():
                return "[" + ",".join(self.format(t) for t in term.items) + "]"
            case Record():
                fields = (f"{self._format_literal(k)}:{self.format(v)}" for k, v in term.fields.items())
                return "{" + ",".join(fields) + "}"
            case Lambda():
                return f"({','.join(term.params)})=>({self.format(term.body)})"
            case Application():
                args = ",".join(self.format(t) for t in term.args)
                return f"{self.format(term.head)}({args})"
        raise TypeError(f"Cannot format {type(term).__name__} as an LJSON term")

    def pformat(self, term: Term, level=0) -> str:
        """Indented rendering; simple sub-terms stay on one line."""
        handler = self._handlers.get(type(term))
        if handler is None:
            raise TypeError(f"Cannot format {type(term).__name__} as an LJSON term")
        return handler(term, level)

    def _create_handlers(self):
        return {
            Literal: self._pformat_atom,
            Variable: self._pformat_atom,
            FreeVariable: self._pformat_atom,
            Sequence: self._pformat_sequence,
            Record: self._pformat_record,
            Lambda: self._pformat_lambda,
            Application: self._pformat_application,
        }

    def _format_literal(self, value) -> str:
        if isinstance(value, float) and not math.isfinite(value):
            return "null"
        return json.dumps(value, ensure_ascii=False)

    def _is_simple(self, term: Term) -> bool:
        match term:
            case Literal() | Variable() | FreeVariable():
                return True
            case Sequence() | Record():
                return len(term) == 0
            case Application():
                return self._is_simple(term.head) and all(self._is_simple(a) for a in term.args)
        return False

    def _pformat_atom(self, obj, level):
        return self.format(obj)

    def _pformat_block(self, parts, level, open_char, close_char):
        if not parts:
            return f"{open_char}{close_char}"
        outer_indent = self._indent_char * level
        inner_indent = self._indent_char * (level + 1)
        # Sub-blocks are already indented relative to their own first line.
        lines = [inner_indent + p for p in parts]
        return f"{open_char}\n" + ",\n".join(lines) + f"\n{outer_indent}{close_char}"

    def _pformat_sequence(self, obj, level):
        if all(self._is_simple(t) for t in obj.items):
            return self.format(obj)
        parts = [self.pformat(t, level + 1) for t in obj.items]
        return self._pformat_block(parts, level, "[", "]")

    def _pformat_record(self, obj, level):
        if not obj.fields:
            return "{}"
        parts = [
            f"{self._format_literal(k)}: {self.pformat(v, level + 1)}"
            for k, v in obj.fields.items()
        ]
        return self._pformat_block(parts, level, "{", "}")

    def _pformat_lambda(self, obj, level):
        head = f"({', '.join(obj.params)}) =>"
        if self._is_simple(obj.body):
            return f"{head} ({self.format(obj.body)})"
        outer_indent = self._indent_char * level
        inner_indent = self._indent_char * (level + 1)
        body = self.pformat(obj.body, level + 1)
        return f"{head} (\n{inner_indent}{body}\n{outer_indent})"

    def _pformat_application(self, obj, level):
        if self._is_simple(obj):
            return self.format(obj)
        head = self.pformat(obj.head, level)
        parts = [self.pformat(a, level + 1) for a in obj.args]
        return head + self._pformat_block(parts, level, "(", ")")
