"""
Turns live Python values, functions included, into LJSON terms.

A function is reified by calling it once with one probe per parameter and
normalizing whatever it returns. The probes record how the parameters are
applied, so the body comes back as a tree of applications over fresh
variable names. Nothing but probes is ever passed to the function: a pure
function runs deterministically and without side effects here.
"""
import collections.abc
import inspect
import math
from typing import Any, Optional

from ljson.ljson_datatypes import (
    Term, Literal, Sequence, Record, Lambda, dbg
)
from ljson.ljson_probe import Probe
from ljson.ljson_printer import Printer

_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


def arity_of(fn) -> Optional[int]:
    """Number of leading positional parameters without defaults.

    An explicit integer `arity` attribute takes precedence. Returns None
    when the signature cannot be introspected.
    """
    arity = getattr(fn, "arity", None)
    if isinstance(arity, int) and not isinstance(arity, bool):
        return arity
    try:
        sig = inspect.signature(fn)
    except (TypeError, ValueError):
        return None
    count = 0
    for param in sig.parameters.values():
        if param.kind not in _POSITIONAL or param.default is not param.empty:
            break
        count += 1
    return count


class Reifier:
    """Normalizes values into terms, naming bound variables v0, v1, ...

    One instance covers one top-level reification: the fresh-name counter
    lives on the instance, never at module level.
    """

    def __init__(self):
        self._next_var_id = 0
        # ids of containers on the current path, for cycle detection
        self._active: set = set()

    def fresh_name(self) -> str:
        name = f"v{self._next_var_id}"
        self._next_var_id += 1
        return name

    def stringify(self, value: Any) -> str:
        return Printer().format(self.normalize(value))

    def normalize(self, value: Any) -> Term:
        """Return the term for `value`; unsupported values become null."""
        if isinstance(value, Probe):
            return value.resolve()
        if callable(value) and not isinstance(value, type):
            return self._normalize_function(value)
        if isinstance(value, (list, tuple, collections.abc.Mapping)) and id(value) in self._active:
            dbg("REIFY skip (circular reference)", type(value).__name__)
            return Literal(None)
        if isinstance(value, (list, tuple)):
            with self._entering(value):
                return Sequence([self.normalize(item) for item in value])
        if isinstance(value, collections.abc.Mapping):
            with self._entering(value):
                return self._normalize_mapping(value)
        if isinstance(value, bool):
            return Literal(bool(value))
        if isinstance(value, int):
            return Literal(int(value))
        if isinstance(value, float):
            if not math.isfinite(value):
                return Literal(None)
            return Literal(float(value))
        if isinstance(value, str):
            return Literal(str(value))
        if value is not None:
            dbg("REIFY skip", type(value).__name__)
        return Literal(None)

    def _normalize_function(self, fn) -> Term:
        n = arity_of(fn)
        if n is None:
            dbg("REIFY skip (no signature)", getattr(fn, "__name__", type(fn).__name__))
            return Literal(None)
        params = [self.fresh_name() for _ in range(n)]
        probes = [Probe(name, self.normalize) for name in params]
        try:
            result = fn(*probes)
        except Exception as e:
            # The function did more than apply its parameters.
            name = getattr(fn, "__name__", type(fn).__name__)
            dbg("REIFY skip", name, f"({type(e).__name__}: {e})")
            return Literal(None)
        return Lambda(params, self.normalize(result))

    def _normalize_mapping(self, value) -> Record:
        fields = {}
        for k, v in value.items():
            key = k if isinstance(k, str) else str(k)
            if key in fields:
                dbg("REIFY key collision", repr(k), "replaces an earlier", repr(key))
            fields[key] = self.normalize(v)
        return Record(fields)

    def _entering(self, container):
        return _Visit(self._active, container)


class _Visit:
    """Marks a container as being walked, for cycle detection."""
    def __init__(self, active: set, container):
        self.active = active
        self.key = id(container)

    def __enter__(self):
        self.active.add(self.key)

    def __exit__(self, *exc):
        self.active.discard(self.key)
        return False


def reify(value: Any) -> Term:
    """Term for `value`, with its own fresh-name counter."""
    return Reifier().normalize(value)


def stringify(value: Any) -> str:
    """LJSON text for `value`, with its own fresh-name counter."""
    return Reifier().stringify(value)
