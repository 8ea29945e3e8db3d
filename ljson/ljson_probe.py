"""
Probes: placeholder arguments used to observe how a function applies its
parameters without running any real logic.

A probe is an immutable value holding a bound name and the argument lists
it has been applied to so far. Applying it returns a new probe with one
more argument list; the receiving probe is left untouched, so two call sites on
the same parameter never see each other's arguments. Forcing a probe, by
calling `resolve()` or by applying it to the STOP sentinel, yields the
accumulated application.
"""

from typing import Any, Callable, Tuple, Optional

from ljson.ljson_datatypes import Term, Variable, Application, ReificationError


class _Stop:
    """Sentinel that ends argument collection on a probe."""
    __slots__ = ()

    def __repr__(self):
        return "<STOP>"

STOP = _Stop()


class Probe:
    """A parameter stand-in that records every application made to it.

    Only application is observable. Arithmetic, attribute access or
    iteration on a probe raise the usual Python errors; comparisons and
    truth tests do not fail but cannot be captured.
    """
    __slots__ = ("name", "applied", "_normalize")

    def __init__(self, name: str, normalize: Callable[[Any], Term], applied: Tuple[Tuple[Term, ...], ...] = ()):
        self.name = name
        self.applied = applied
        self._normalize = normalize

    def __call__(self, *args, **kwargs):
        if len(args) == 1 and args[0] is STOP and not kwargs:
            from ljson.ljson_printer import Printer
            return Printer().format(self.resolve())
        if kwargs:
            raise ReificationError(
                f"keyword arguments cannot be captured (applied {sorted(kwargs)} to '{self.name}')"
            )
        arg_list = tuple(self._normalize(arg) for arg in args)
        return Probe(self.name, self._normalize, self.applied + (arg_list,))

    def resolve(self) -> Term:
        """The variable applied to each collected argument list, in call order."""
        term: Term = Variable(self.name)
        for arg_list in self.applied:
            term = Application(term, list(arg_list))
        return term

    def __repr__(self) -> str:
        return f"<Probe {self(STOP)}>"


def make_probe(name: str, normalize: Optional[Callable[[Any], Term]] = None) -> Probe:
    """Create a probe bound to `name`.

    Arguments applied to the probe are turned into terms with `normalize`;
    by default a fresh reifier is used.
    """
    if normalize is None:
        from ljson.ljson_reifier import Reifier
        normalize = Reifier().normalize
    return Probe(name, normalize)
