"""
Defines the term model and error types shared by the LJSON codec.

A term is the symbolic form of an LJSON value: JSON literals, arrays and
objects, extended with lambdas, bound variables and applications. The
reifier builds terms from live Python values, the parser builds them from
text, and the evaluator turns them back into Python values.
"""

from abc import ABC
from typing import List, Dict, Any, Optional


# =================================================================
# Errors
# =================================================================

class LJSONError(Exception):
    """Base class for every error raised by the LJSON codec."""
    pass


class ParseError(LJSONError):
    """A text could not be turned into a validated term.

    `offset` is the character position where parsing stopped and `token`
    the text found there (empty at end of input).
    """
    def __init__(self, message: str, offset: Optional[int] = None, token: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.offset = offset
        self.token = token


class ParseSyntaxError(ParseError):
    """The text does not follow the LJSON grammar."""
    pass


class UnresolvedVariableError(ParseError):
    """A name is referenced outside of any lambda that binds it."""
    def __init__(self, name: str, offset: Optional[int] = None):
        super().__init__(f"'{name}' is not defined", offset, name)
        self.name = name


class ReificationError(LJSONError):
    """A function did something to a probe other than applying it."""
    pass


class UnknownPrimitiveError(LJSONError, KeyError):
    """A library accessor was called with a name the library does not define."""
    def __init__(self, name: str):
        super().__init__(f"unknown primitive: {name!r}")
        self.name = name

    def __str__(self) -> str:
        return self.args[0]


# =================================================================
# Terms
# =================================================================

class Term(ABC):
    """Abstract base class for all LJSON terms.

    Terms are built once and never mutated; equality is structural.
    """

    def __repr__(self) -> str:
        from ljson.ljson_printer import Printer
        return f"<{type(self).__name__} {Printer().format(self)}>"


class Literal(Term):
    """A JSON unit value: None, a bool, a number or a string."""
    def __init__(self, value: Any):
        self.value = value

    def __eq__(self, other):
        # bool is an int subclass; True must not equal Literal(1)
        return (
            isinstance(other, Literal)
            and type(self.value) is type(other.value)
            and self.value == other.value
        )

    def __hash__(self):
        return hash((Literal, type(self.value), self.value))


class Sequence(Term):
    """An ordered list of terms (`[a, b, ...]`)."""
    def __init__(self, items: List[Term]):
        self.items = list(items)

    def __len__(self) -> int:
        return len(self.items)

    def __eq__(self, other):
        return isinstance(other, Sequence) and self.items == other.items


class Record(Term):
    """String keys mapped to terms (`{"k": v, ...}`), in insertion order."""
    def __init__(self, fields: Dict[str, Term]):
        self.fields = dict(fields)

    def __len__(self) -> int:
        return len(self.fields)

    def __eq__(self, other):
        # Key order is kept for printing but does not affect equality.
        return isinstance(other, Record) and self.fields == other.fields


class Variable(Term):
    """A reference to a parameter of an enclosing lambda.

    `index` is the positional binder index assigned by the parser; terms
    built by the reifier carry only the fresh name.
    """
    def __init__(self, name: str, index: Optional[int] = None):
        self.name = name
        self.index = index

    def __eq__(self, other):
        return isinstance(other, Variable) and self.name == other.name

    def __hash__(self):
        return hash((Variable, self.name))


class FreeVariable(Term):
    """A name with no enclosing binder.

    Only the unchecked parse mode used by `unsafe_parse` produces these.
    """
    def __init__(self, name: str):
        self.name = name

    def __eq__(self, other):
        return isinstance(other, FreeVariable) and self.name == other.name

    def __hash__(self):
        return hash((FreeVariable, self.name))


class Lambda(Term):
    """A function term: parameter names bound over a body."""
    def __init__(self, params: List[str], body: Term):
        self.params = list(params)
        self.body = body

    @property
    def arity(self) -> int:
        return len(self.params)

    def __eq__(self, other):
        return isinstance(other, Lambda) and self.params == other.params and self.body == other.body


class Application(Term):
    """A call: a variable (or another application) applied to one argument list.

    Curried calls nest to the left, so `f(a,b)(c)` is
    `Application(Application(Variable('f'), [a, b]), [c])`.
    """
    def __init__(self, head: Term, args: List[Term]):
        if not isinstance(head, (Variable, FreeVariable, Application)):
            raise TypeError(f"Application head must be a variable or application, not {type(head).__name__}")
        self.head = head
        self.args = list(args)

    def __eq__(self, other):
        return isinstance(other, Application) and self.head == other.head and self.args == other.args


# Names that parse as literals and can never be bound.
KEYWORDS: Dict[str, Any] = {"true": True, "false": False, "null": None}


# =================================================================
# Diagnostics
# =================================================================

def dbg(*parts):
    """Print a debug line to stderr when LJSON_DEBUG is set."""
    import os, sys
    if os.environ.get("LJSON_DEBUG"):
        print("[DBG]", *parts, file=sys.stderr)
