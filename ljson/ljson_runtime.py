# ljson_runtime.py

import inspect
import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, Literal, Mapping, Optional

from ljson.ljson_datatypes import (
    Term, ParseError, UnknownPrimitiveError, dbg
)
from ljson.ljson_parser import Parser
from ljson.ljson_interpreter import Evaluator
from ljson.ljson_printer import Printer
from ljson.ljson_reifier import arity_of

# ===================================================================
# 1. Parsing entry points
# ===================================================================


@dataclass
class ParseResult:
    """The structured result of parsing and materializing LJSON text."""
    status: Literal['success', 'error']
    value: Any = None
    term: Optional[Term] = None
    text: Optional[str] = None
    error_message: Optional[str] = None
    error_offset: Optional[int] = None
    error_token: Optional[str] = None
    error: Optional[ParseError] = None

    def format_error(self) -> str:
        """Formats an error message with its offset and token if available."""
        if self.status != 'error':
            return ""
        msg = str(self.error_message or "Unknown error")
        if self.error_offset is not None and not msg.startswith("Error at offset "):
            return f"Error at offset {self.error_offset}: {msg}"
        return msg


def try_parse(text: str, max_depth: Optional[int] = None) -> ParseResult:
    """Parse and materialize `text`, reporting failure as a result instead of raising."""
    try:
        term = Parser(max_depth=max_depth).parse(text)
    except ParseError as e:
        return ParseResult(
            status='error',
            error_message=f"{type(e).__name__}: {e.message}",
            error_offset=e.offset,
            error_token=e.token,
            error=e,
        )
    return ParseResult(
        status='success',
        value=Evaluator().eval(term),
        term=term,
        text=Printer().format(term),
    )


def parse(text: str, max_depth: Optional[int] = None) -> Any:
    """Parse LJSON text into a Python value.

    Every function in the result is pure and can reach nothing but its own
    arguments: any unbound name in `text` is an UnresolvedVariableError.
    """
    result = try_parse(text, max_depth=max_depth)
    if result.status == 'error':
        raise result.error
    return result.value


def unsafe_parse(text: str, env: Optional[Mapping[str, Any]] = None) -> Any:
    """Parse LJSON text WITHOUT the scope check.

    Unbound names resolve in `env` and then in the Python builtins, so the
    resulting functions can do anything those objects can. Only use this on
    text you trust.
    """
    term = Parser(check_scope=False).parse(text)
    return Evaluator(host=env, unsafe=True).eval(term)


# ===================================================================
# 2. Libraries
# ===================================================================


def library_accessor(lib: Mapping[str, Callable]) -> Callable:
    """The function handed to library-using code as its first argument.

    `accessor(name, *args)` calls `lib[name](*args)`.
    """
    def accessor(name, *args):
        try:
            prim = lib[name]
        except (KeyError, TypeError):
            raise UnknownPrimitiveError(name) from None
        dbg("PRIM", name, args)
        return prim(*args)
    return accessor


class LibraryFunction:
    """A function whose first parameter is bound to a library accessor."""
    def __init__(self, lib: Mapping[str, Callable], fn: Callable):
        self.lib = lib
        self.fn = fn
        self.accessor = library_accessor(lib)
        inner = arity_of(fn)
        self.arity = None if inner is None else inner - 1

    def __call__(self, *args):
        return self.fn(self.accessor, *args)

    def __repr__(self) -> str:
        return f"<LibraryFunction arity={self.arity} fn={self.fn!r}>"


def with_lib(lib: Mapping[str, Callable], fn: Callable) -> LibraryFunction:
    """Give `fn` access to the primitives in `lib` through its first argument.

    LJSON defines no primitives of its own: a parsed function can receive
    numbers but not add them. Write the function with an extra leading
    parameter and call primitives through it:

        def double(L, a):
            return L("*", a, 2)

        double_val = with_lib({"*": lambda a, b: a * b}, parse(stringify(double)))
        double_val(4)  # 8
    """
    if arity_of(fn) == 0:
        raise TypeError("with_lib needs a function whose first parameter receives the library")
    return LibraryFunction(lib, fn)


class StdLib:
    """Python implementations of the standard LJSON primitives."""

    # Operator spellings for the word-named primitives
    SYMBOLS = {
        "add": "+", "sub": "-", "mul": "*", "div": "/", "mod": "%", "pow": "**",
        "eq": "==", "neq": "!=", "lt": "<", "lte": "<=", "gt": ">", "gte": ">=",
        "not": "!", "and": "&&", "or": "||",
    }

    # --- Math and Logic ---
    def _add(self, a, b): return a + b
    def _sub(self, a, b): return a - b
    def _mul(self, a, b): return a * b
    def _div(self, a, b): return a / b
    def _mod(self, a, b): return a % b
    def _pow(self, b, e): return b ** e
    def _eq(self, a, b): return a == b
    def _neq(self, a, b): return a != b
    def _lt(self, a, b): return a < b
    def _lte(self, a, b): return a <= b
    def _gt(self, a, b): return a > b
    def _gte(self, a, b): return a >= b
    def _not(self, x): return not x
    def _and(self, a, b): return a and b
    def _or(self, a, b): return a or b
    def _sqrt(self, x): return math.sqrt(x)
    def _floor(self, x): return math.floor(x)
    def _ceil(self, x): return math.ceil(x)
    def _abs(self, x): return abs(x)
    def _exp(self, x): return math.exp(x)
    def _log(self, x): return math.log(x)
    def _log10(self, x): return math.log10(x)
    def _min(self, a, b): return min(a, b)
    def _max(self, a, b): return max(a, b)

    # --- Containers ---
    def _len(self, collection): return len(collection)
    def _get(self, container, key): return container[key]
    def _concat(self, a, b): return a + b

    # Both branches are already evaluated; this only selects one.
    def _if(self, cond, then, otherwise): return then if cond else otherwise

    def as_library(self) -> Dict[str, Callable]:
        """Name → primitive table, with operator aliases (e.g. both 'add' and '+')."""
        lib: Dict[str, Callable] = {}
        for name, member in inspect.getmembers(self):
            if name.startswith('_') and not name.startswith('__') and callable(member):
                prim_name = name[1:]
                lib[prim_name] = member
                if prim_name in self.SYMBOLS:
                    lib[self.SYMBOLS[prim_name]] = member
        return lib


def with_std_lib(fn: Callable) -> LibraryFunction:
    """`with_lib` using the standard library (`+ - * / sqrt` and friends)."""
    return with_lib(StdLib().as_library(), fn)


def parse_with_lib(lib: Mapping[str, Callable], text: str) -> LibraryFunction:
    """Parse `text` and attach `lib` to the resulting function."""
    return with_lib(lib, parse(text))


def parse_with_std_lib(text: str) -> LibraryFunction:
    """Parse `text` and attach the standard library to the resulting function."""
    return with_std_lib(parse(text))
