"""Tests for the text helpers the scorers are built on."""

from teamforge.services.similarity import (
    clamp,
    has_function_definition,
    has_return,
    is_comment_line,
    is_statement_line,
    normalize,
    round_half_up,
    token_similarity,
    tokenize,
    unterminated_statements,
)


def test_normalize_collapses_whitespace_and_case():
    assert normalize("  Foo \n\tBar  ") == "foo bar"
    assert normalize("") == ""
    assert normalize(None) == ""


def test_tokenize_drops_empty_tokens():
    assert tokenize("items[i].price;") == ["items", "i", "price"]
    assert tokenize("!!!") == []


def test_token_similarity_identical_after_normalization():
    assert token_similarity("Return  X;", "return x;") == 1.0


def test_token_similarity_partial_overlap():
    assert token_similarity("a b", "a c") == 0.5
    # repeated tokens each count against the longer list
    assert token_similarity("x x y", "x") == 2 / 3


def test_token_similarity_empty_inputs():
    assert token_similarity("", "") == 0.0
    assert token_similarity("!!!", "???") == 0.0
    assert token_similarity("x = 1", "") == 0.0


def test_round_half_up():
    assert round_half_up(74.5) == 75
    assert round_half_up(2.5) == 3
    assert round_half_up(2.4) == 2
    assert isinstance(round_half_up(10.0), int)


def test_clamp():
    assert clamp(120) == 100
    assert clamp(-5) == 0
    assert clamp(42.5) == 42.5


def test_line_detectors():
    assert is_comment_line("// let x = 1")
    assert is_comment_line("# note")
    assert not is_comment_line("let x = 1")

    assert is_statement_line("total += 1")
    assert is_statement_line("const b = 2")
    assert not is_statement_line("if (x) {")


def test_function_and_return_detection():
    assert has_function_definition("def f():\n    return 1")
    assert has_function_definition("function f() {}")
    assert not has_function_definition("const x = 1;")

    assert has_return("return total;")
    assert not has_return("returned = true;")


def test_unterminated_statements_skip_comments():
    code = "let a = 1\nconst b = 2;\n// let c = 3\nreturn a"
    assert unterminated_statements(code) == ["let a = 1", "return a"]
