"""
The scope-checked LJSON parser.

Text is tokenized and shaped into a parse tree by Lark (LALR). A second,
top-down pass over that tree builds the term. It threads two pieces of
state through the tree: `binders`, the next positional index to hand out,
and `scope`, the mapping from source names to the indices of the lambdas
that bind them. Entering a lambda extends a copy of the scope and the
previous one is restored on the way out.

A name that is not in scope is a terminal error. There is no global or
default fallback, so a validated term can only ever reach values that
were passed in as arguments. Bound names are renamed to `v<index>` on the
way through, so the validated text never mentions a source name.

Grammar:

    value       := number | string | keyword | array | object | function | application
    keyword     := 'true' | 'false' | 'null'
    array       := '[' (value (',' value)*)? ']'
    object      := '{' (string ':' value (',' string ':' value)*)? '}'
    function    := '(' (name (',' name)*)? ')' '=>' '(' value ')'
    application := name ('(' (value (',' value)*)? ')')*     -- name must be bound

Numbers and strings follow JSON. Between tokens any run of spaces, tabs,
carriage returns or newlines is skipped, so indented output re-parses.
"""
import json
import math
import os
from typing import Dict, Optional

from lark import Lark, Token, Tree
from lark.exceptions import UnexpectedInput, UnexpectedToken, UnexpectedEOF
from lark.visitors import Interpreter

from ljson.ljson_datatypes import (
    Term, Literal, Sequence, Record, Lambda, Variable, FreeVariable, Application,
    ParseSyntaxError, UnresolvedVariableError, KEYWORDS, dbg
)
from ljson.ljson_printer import Printer

GRAMMAR = r"""
    ?start: value

    ?value: number
          | string
          | array
          | object
          | function
          | application

    number: NUMBER
    string: STRING
    array: "[" (value ("," value)*)? "]"
    object: "{" (pair ("," pair)*)? "}"
    pair: STRING ":" value
    function: "(" (NAME ("," NAME)*)? ")" "=>" "(" value ")"
    application: NAME call*
    call: "(" (value ("," value)*)? ")"

    NAME: /[A-Za-z_$][A-Za-z0-9_$]*/
    NUMBER: /-?(?:0|[1-9][0-9]*)(?:\.[0-9]+)?(?:[eE][+-]?[0-9]+)?/
    STRING: /"(?:[^"\\]|\\(?:["\\\/bfnrt]|u[0-9A-Fa-f]{4}))*"/

    %ignore /[ \t\r\n]+/
"""

_lark = Lark(GRAMMAR, parser="lalr", propagate_positions=True)

Scope = Dict[str, int]


def _decode_string(tok: Token) -> str:
    # The token is already a valid JSON string; surrogate pairs are joined here.
    return json.loads(str(tok), strict=False)


class _TermBuilder(Interpreter):
    """Builds the term for one parse tree, checking every name against scope."""

    def __init__(self, check_scope: bool, max_depth: Optional[int]):
        self.check_scope = check_scope
        self.max_depth = max_depth
        self.binders = 0
        self.scope: Scope = {}
        self.depth = 0

    def _nested(self, tree: Tree) -> Term:
        """Visit a value one level deeper than the current one."""
        self.depth += 1
        try:
            if self.max_depth is not None and self.depth > self.max_depth:
                pos = getattr(tree.meta, "start_pos", None)
                raise ParseSyntaxError(f"nesting deeper than {self.max_depth}", pos)
            return self.visit(tree)
        finally:
            self.depth -= 1

    def number(self, tree):
        tok = tree.children[0]
        text = str(tok)
        if not any(c in text for c in ".eE"):
            return Literal(int(text))
        value = float(text)
        if not math.isfinite(value):
            raise ParseSyntaxError(f"number out of range near {text!r}", tok.start_pos, text)
        return Literal(value)

    def string(self, tree):
        return Literal(_decode_string(tree.children[0]))

    def array(self, tree):
        return Sequence([self._nested(item) for item in tree.children])

    def object(self, tree):
        fields = {}
        for pair in tree.children:
            key_tok, value = pair.children
            fields[_decode_string(key_tok)] = self._nested(value)
        return Record(fields)

    def function(self, tree):
        *names, body = tree.children
        for name in names:
            if name in KEYWORDS:
                raise ParseSyntaxError(
                    f"{str(name)!r} cannot be used as a parameter name", name.start_pos, str(name)
                )
        outer_binders, outer_scope = self.binders, self.scope
        self.scope = dict(outer_scope)
        for i, name in enumerate(names):
            self.scope[str(name)] = outer_binders + i
        self.binders = outer_binders + len(names)
        try:
            term = self._nested(body)
        finally:
            self.binders, self.scope = outer_binders, outer_scope
        return Lambda([f"v{outer_binders + i}" for i in range(len(names))], term)

    def application(self, tree):
        head, *calls = tree.children
        term = self._variable(head)
        if isinstance(term, Literal):
            if calls:
                raise ParseSyntaxError(f"{str(head)!r} cannot be applied", head.end_pos, str(head))
            return term
        for call in calls:
            term = Application(term, [self._nested(arg) for arg in call.children])
        return term

    def _variable(self, tok: Token) -> Term:
        name = str(tok)
        if name in KEYWORDS:
            return Literal(KEYWORDS[name])
        if name in self.scope:
            index = self.scope[name]
            return Variable(f"v{index}", index)
        if self.check_scope:
            dbg("PARSE unbound", name, "at", tok.start_pos)
            raise UnresolvedVariableError(name, tok.start_pos)
        return FreeVariable(name)


def _syntax_error(e: UnexpectedInput, text: str) -> ParseSyntaxError:
    """Translate a Lark error into a ParseSyntaxError with offset and token."""
    if isinstance(e, UnexpectedEOF) or (isinstance(e, UnexpectedToken) and e.token.type == "$END"):
        return ParseSyntaxError("unexpected end of input", len(text), "")
    if isinstance(e, UnexpectedToken):
        token = str(e.token)
        return ParseSyntaxError(f"unexpected token near {token!r}", e.token.start_pos, token)
    pos = e.pos_in_stream
    token = text[pos:pos + 1] if pos is not None else ""
    return ParseSyntaxError(f"unexpected character near {token!r}", pos, token)


class Parser:
    """Parses LJSON text into a validated term.

    With `check_scope=False` unbound names become FreeVariable terms
    instead of errors; only `unsafe_parse` uses that mode.
    """

    def __init__(self, max_depth: Optional[int] = None, check_scope: bool = True):
        if max_depth is None:
            env_depth = os.environ.get("LJSON_MAX_DEPTH")
            max_depth = int(env_depth) if env_depth else None
        self.max_depth = max_depth
        self.check_scope = check_scope

    def parse(self, text: str) -> Term:
        try:
            try:
                tree = _lark.parse(text)
            except UnexpectedInput as e:
                raise _syntax_error(e, text) from None
            return _TermBuilder(self.check_scope, self.max_depth).visit(tree)
        except RecursionError:
            raise ParseSyntaxError("term is nested too deeply", 0) from None
        except ParseSyntaxError as e:
            dbg("PARSE fail", e.offset, e.message)
            raise

    def validate(self, text: str) -> str:
        """The compact, renamed rendering of `text`."""
        return Printer().format(self.parse(text))


def parse(text: str, max_depth: Optional[int] = None) -> Term:
    """Parse `text` into a validated term; unbound names are errors."""
    return Parser(max_depth=max_depth).parse(text)


def validate(text: str, max_depth: Optional[int] = None) -> str:
    """Parse `text` and return its compact rendering with positional names."""
    return Parser(max_depth=max_depth).validate(text)
