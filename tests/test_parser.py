import pytest

from ljson.ljson_datatypes import (
    Lambda, Variable, FreeVariable, Application, Literal, Sequence,
    ParseSyntaxError, UnresolvedVariableError
)
from ljson.ljson_parser import Parser, parse, validate


# ===================================================================
# Accepted input and its validated rendering
# ===================================================================

VALID_CASES = [
    ("identity", "(a)=>(a)", "(v0)=>(v0)"),
    ("spaces_everywhere", "( a , b ) => ( a ( b ) )", "(v0,v1)=>(v0(v1))"),
    ("nested_levels", "(x)=>((y)=>(x(y)))", "(v0)=>((v1)=>(v0(v1)))"),
    ("siblings_reuse_indices", "[(a)=>(a),(b)=>(b)]", "[(v0)=>(v0),(v0)=>(v0)]"),
    ("shadowing", "(x)=>((x)=>(x))", "(v0)=>((v1)=>(v1))"),
    ("duplicate_params_last_wins", "(a,a)=>(a)", "(v0,v1)=>(v1)"),
    ("curried_call", "(f)=>(f(1,2)(3))", "(v0)=>(v0(1,2)(3))"),
    ("zero_arg_call", "(f)=>(f())", "(v0)=>(v0())"),
    ("zero_params", "()=>(1)", "()=>(1)"),
    ("space_before_call", "(f)=>(f (1))", "(v0)=>(v0(1))"),
    ("nested_call_args", "(f,g)=>(f(g(1)))", "(v0,v1)=>(v0(v1(1)))"),
    ("dollar_names", '($, x)=>($("*", x, x))', '(v0,v1)=>(v0("*",v1,v1))'),
    ("keywords", "[null,true,false]", "[null,true,false]"),
    ("keyword_in_body", "(x)=>(null)", "(v0)=>(null)"),
    ("object", '{"a": 1, "b": [2, 3]}', '{"a":1,"b":[2,3]}'),
    ("object_with_lambda", '{"greet": (m)=>(m)}', '{"greet":(v0)=>(v0)}'),
    ("duplicate_keys_last_wins", '{"a": 1, "a": 2}', '{"a":2}'),
    ("empty_array", "[ ]", "[]"),
    ("empty_object", "{ }", "{}"),
    ("numbers", "[0,-1,1.5,2e3,-0.5E-2]", "[0,-1,1.5,2000.0,-0.005]"),
    ("string_escapes", r'"a\"b\\c\/d\n\tA"', r'"a\"b\\c/d\n\tA"'),
    ("surrogate_pair", r'"\ud83d\ude00"', '"\U0001F600"'),
    ("multiline", "(a)=>\n(\n  a\n)", "(v0)=>(v0)"),
    ("tabs_and_crlf", "[1,\t2,\r\n3]", "[1,2,3]"),
    ("surrounding_whitespace", "  [1]  ", "[1]"),
]


@pytest.mark.parametrize("name, text, expected", VALID_CASES, ids=[c[0] for c in VALID_CASES])
def test_validate(name, text, expected):
    assert validate(text) == expected


def test_validate_is_a_fixed_point():
    for _, text, expected in VALID_CASES:
        assert validate(expected) == expected


def test_parse_produces_indexed_variables():
    term = parse("(f,x)=>(f(x))")
    assert term == Lambda(["v0", "v1"], Application(Variable("v0"), [Variable("v1")]))
    assert term.body.head.index == 0
    assert term.body.args[0].index == 1


def test_number_types():
    assert parse("1") == Literal(1)
    assert parse("1.0") == Literal(1.0)
    assert parse("1e2") == Literal(100.0)


def test_keywords_are_literals():
    assert parse("[true,false,null]") == Sequence([Literal(True), Literal(False), Literal(None)])


# ===================================================================
# Syntax errors
# ===================================================================

SYNTAX_ERRORS = [
    ("empty", ""),
    ("only_spaces", "   "),
    ("trailing_comma_array", "[1,]"),
    ("trailing_comma_call", "(f)=>(f(1,))"),
    ("missing_comma", "[1 2]"),
    ("bare_key", "{a:1}"),
    ("missing_colon", '{"a" 1}'),
    ("body_without_parens", "(a)=>a"),
    ("wrong_arrow", "(a)->(a)"),
    ("number_param", "(1)=>(1)"),
    ("keyword_param", "(true)=>(1)"),
    ("leading_zero", "01"),
    ("bare_dot", "1."),
    ("bare_exponent", "1e"),
    ("lone_minus", "-"),
    ("unterminated_string", '"abc'),
    ("bad_escape", r'"\x"'),
    ("bad_unicode", r'"\u12G4"'),
    ("extra_bracket", "[1]]"),
    ("extra_paren", "(a)=>(a))"),
    ("unknown_char", "@"),
    ("keyword_applied", "true(1)"),
    ("unclosed_array", "[1, 2"),
]


@pytest.mark.parametrize("name, text", SYNTAX_ERRORS, ids=[c[0] for c in SYNTAX_ERRORS])
def test_syntax_errors(name, text):
    with pytest.raises(ParseSyntaxError):
        parse(text)


def test_syntax_error_reports_offset_and_token():
    with pytest.raises(ParseSyntaxError) as excinfo:
        parse("[1 2]")
    err = excinfo.value
    assert err.offset == 3
    assert err.token == "2"
    assert "near '2'" in err.message


def test_syntax_error_at_end_of_input():
    with pytest.raises(ParseSyntaxError) as excinfo:
        parse("[1,")
    assert excinfo.value.offset == 3
    assert "end of input" in excinfo.value.message


def test_keyword_param_message():
    with pytest.raises(ParseSyntaxError, match="cannot be used as a parameter name"):
        parse("(null)=>(1)")


@pytest.mark.parametrize("text", ["1e999", "[1e999]", "-1e400", "{\"k\": 2E308}"])
def test_out_of_range_numbers_are_rejected(text):
    with pytest.raises(ParseSyntaxError, match="number out of range"):
        validate(text)


def test_large_but_finite_numbers_round_trip():
    text = validate("[1e308,-1e-400]")
    assert text == "[1e+308,-0.0]"
    assert validate(text) == text


# ===================================================================
# Scope checking
# ===================================================================

UNRESOLVED = [
    ("unbound_body", "(a)=>(b)", "b", 6),
    ("bare_name", "x", "x", 0),
    ("out_of_scope_sibling", "[(a)=>(a), a]", "a", 11),
    ("unbound_head", "(f)=>(g(f))", "g", 6),
    ("deeply_unbound", "(a)=>((b)=>(c))", "c", 12),
    ("unbound_in_object", '{"k": z}', "z", 6),
    ("unbound_argument", "(x)=>(x(y))", "y", 8),
]


@pytest.mark.parametrize("name, text, var, offset", UNRESOLVED, ids=[c[0] for c in UNRESOLVED])
def test_unbound_names_are_rejected(name, text, var, offset):
    with pytest.raises(UnresolvedVariableError) as excinfo:
        parse(text)
    assert excinfo.value.name == var
    assert excinfo.value.offset == offset


@pytest.mark.parametrize("name", ["print", "__import__", "open", "os", "self", "eval", "globals", "v0"])
def test_host_names_are_never_reachable(name):
    with pytest.raises(UnresolvedVariableError):
        parse(f"(a)=>({name}(a))")


def test_unchecked_mode_keeps_free_names():
    term = Parser(check_scope=False).parse("(a)=>(print(a))")
    assert term == Lambda(["v0"], Application(FreeVariable("print"), [Variable("v0")]))


# ===================================================================
# Nesting limits
# ===================================================================

def test_max_depth():
    text = "[[[[[1]]]]]"
    assert Parser(max_depth=10).validate(text) == text
    with pytest.raises(ParseSyntaxError, match="nesting deeper than 3"):
        Parser(max_depth=3).parse(text)


def test_max_depth_from_environment(monkeypatch):
    monkeypatch.setenv("LJSON_MAX_DEPTH", "2")
    assert Parser().max_depth == 2
    with pytest.raises(ParseSyntaxError):
        parse("[[[[1]]]]")


def test_runaway_nesting_is_a_syntax_error(monkeypatch):
    monkeypatch.delenv("LJSON_MAX_DEPTH", raising=False)
    text = "[" * 20000 + "]" * 20000
    with pytest.raises(ParseSyntaxError, match="nested too deeply"):
        parse(text)
