"""LJSON: JSON extended with pure functions."""

from ljson.ljson_datatypes import (
    Term, Literal, Sequence, Record, Lambda, Variable, FreeVariable, Application,
    LJSONError, ParseError, ParseSyntaxError, UnresolvedVariableError,
    ReificationError, UnknownPrimitiveError,
)
from ljson.ljson_probe import Probe, STOP, make_probe
from ljson.ljson_reifier import Reifier, reify, stringify
from ljson.ljson_parser import Parser, validate
from ljson.ljson_interpreter import Evaluator, LJSONFunction, Scope, materialize
from ljson.ljson_printer import Printer
from ljson.ljson_runtime import (
    ParseResult, try_parse, parse, unsafe_parse,
    LibraryFunction, StdLib, with_lib, with_std_lib, parse_with_lib, parse_with_std_lib,
)

__all__ = [
    "Term", "Literal", "Sequence", "Record", "Lambda", "Variable", "FreeVariable", "Application",
    "LJSONError", "ParseError", "ParseSyntaxError", "UnresolvedVariableError",
    "ReificationError", "UnknownPrimitiveError",
    "Probe", "STOP", "make_probe",
    "Reifier", "reify", "stringify",
    "Parser", "validate",
    "Evaluator", "LJSONFunction", "Scope", "materialize",
    "Printer",
    "ParseResult", "try_parse", "parse", "unsafe_parse",
    "LibraryFunction", "StdLib", "with_lib", "with_std_lib", "parse_with_lib", "parse_with_std_lib",
]
