"""
The LJSON evaluator: turns a validated term into a live Python value.

This is a small tree-walking interpreter. Lambdas become LJSONFunction
closures over a lexical Scope; applications call whatever their head
evaluates to. No host source text is ever compiled, so a term can only
reach what it was given as arguments.
"""
import builtins
import inspect
from typing import Any, Dict, List, Optional, Mapping

from ljson.ljson_datatypes import (
    Term, Literal, Sequence, Record, Lambda, Variable, FreeVariable, Application,
    UnresolvedVariableError
)


class Scope:
    """A lexical environment: bound names to values, with an enclosing parent."""
    def __init__(self, bindings: Optional[Dict[str, Any]] = None, parent: Optional['Scope'] = None):
        self.bindings: Dict[str, Any] = dict(bindings or {})
        self.parent = parent

    def find_owner(self, name: str) -> Optional['Scope']:
        """Finds the Scope in the chain (self → parent → ...) that binds name."""
        scope = self
        while scope is not None:
            if name in scope.bindings:
                return scope
            scope = scope.parent
        return None

    def __getitem__(self, name: str) -> Any:
        owner = self.find_owner(name)
        if owner is None:
            raise KeyError(name)
        return owner.bindings[name]

    def __contains__(self, name: str) -> bool:
        return self.find_owner(name) is not None

    def __repr__(self) -> str:
        keys = ', '.join(self.bindings.keys())
        parent_id = f", parent=#{id(self.parent)}" if self.parent else ""
        return f"<Scope bindings=[{keys}]{parent_id}>"


class LJSONFunction:
    """A materialized LJSON lambda.

    This is a closure, bundling the lambda's parameter names, its body term,
    and the scope in which it was evaluated.
    """
    def __init__(self, params: List[str], body: Term, closure: Scope, evaluator: 'Evaluator'):
        self.params = list(params)
        self.body = body
        self.closure = closure
        self._evaluator = evaluator

    @property
    def arity(self) -> int:
        return len(self.params)

    @property
    def __signature__(self) -> inspect.Signature:
        return inspect.Signature([
            inspect.Parameter(name, inspect.Parameter.POSITIONAL_ONLY) for name in self.params
        ])

    @property
    def term(self) -> Lambda:
        return Lambda(self.params, self.body)

    def __call__(self, *args, **kwargs):
        if kwargs:
            raise TypeError("LJSON functions take positional arguments only")
        if len(args) != len(self.params):
            raise TypeError(
                f"LJSON function takes {len(self.params)} positional argument(s) but {len(args)} were given"
            )
        scope = Scope(dict(zip(self.params, args)), parent=self.closure)
        return self._evaluator.eval(self.body, scope)

    def __repr__(self) -> str:
        from ljson.ljson_printer import Printer
        return f"<LJSONFunction {Printer().format(self.term)}>"


class Evaluator:
    """The LJSON execution engine.

    FreeVariable terms, which only the unchecked parser produces, are
    rejected unless `unsafe` is set. Then they resolve in `host` and after
    that in the Python builtins.
    """
    def __init__(self, host: Optional[Mapping[str, Any]] = None, unsafe: bool = False):
        self.host = host
        self.unsafe = unsafe

    def eval(self, term: Term, scope: Optional[Scope] = None) -> Any:
        if scope is None:
            scope = Scope()
        match term:
            case Literal():
                return term.value
            case Sequence():
                return [self.eval(item, scope) for item in term.items]
            case Record():
                return {key: self.eval(value, scope) for key, value in term.fields.items()}
            case Lambda():
                return LJSONFunction(term.params, term.body, scope, self)
            case Variable():
                owner = scope.find_owner(term.name)
                if owner is None:
                    raise UnresolvedVariableError(term.name)
                return owner.bindings[term.name]
            case FreeVariable():
                return self._lookup_free(term.name)
            case Application():
                fn = self.eval(term.head, scope)
                args = [self.eval(arg, scope) for arg in term.args]
                return fn(*args)
        raise TypeError(f"Cannot evaluate {type(term).__name__}")

    def _lookup_free(self, name: str) -> Any:
        if not self.unsafe:
            raise UnresolvedVariableError(name)
        if self.host is not None and name in self.host:
            return self.host[name]
        try:
            return getattr(builtins, name)
        except AttributeError:
            raise NameError(f"name {name!r} is not defined") from None


def materialize(term: Term) -> Any:
    """Evaluate a validated term with an empty environment."""
    return Evaluator().eval(term)
