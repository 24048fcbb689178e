import pytest
from loguru import logger

from lexautomata.automata import reg
from lexautomata.automata.reg import (
    CONCAT,
    MalformedRegexError,
    RegexBuilder,
    RegexError,
    UnknownOperatorError,
    build_nfa_from_postfix,
    insert_concatenation,
    regex_to_nfa,
    to_postfix,
)


def _c(text):
    # Spell the concatenation marker as "." to keep expectations readable
    return text.replace(".", CONCAT)


def test_insert_concatenation():
    assert insert_concatenation("ab") == _c("a.b")
    assert insert_concatenation("abc") == _c("a.b.c")
    assert insert_concatenation("a(b)") == _c("a.(b)")
    assert insert_concatenation("(a)b") == _c("(a).b")
    assert insert_concatenation("a*b") == _c("a*.b")
    assert insert_concatenation("a+(b)") == _c("a+.(b)")
    assert insert_concatenation("(a)(b)") == _c("(a).(b)")
    assert insert_concatenation("a(b|c)*d") == _c("a.(b|c)*.d")


def test_insert_concatenation_leaves_operators_alone():
    assert insert_concatenation("") == ""
    assert insert_concatenation("a") == "a"
    assert insert_concatenation("a|b") == "a|b"
    assert insert_concatenation("a*?") == "a*?"
    assert insert_concatenation("(a|b)") == "(a|b)"
    assert insert_concatenation(_c("a.b")) == _c("a.b")


def test_operand():
    assert reg.is_operand("a")
    assert reg.is_operand("0")
    assert reg.is_operand(".")
    for char in "|*?+()" + CONCAT:
        assert not reg.is_operand(char)


def test_postfix():
    assert to_postfix("a") == "a"
    assert to_postfix("a|b") == "ab|"
    assert to_postfix("ab") == _c("ab.")
    assert to_postfix("a*b") == _c("a*b.")
    assert to_postfix("a|bc") == _c("abc.|")
    assert to_postfix("ab|c") == _c("ab.c|")
    assert to_postfix("a+b?") == _c("a+b?.")
    assert to_postfix("a(b|c)*d") == _c("abc|*.d.")


def test_postfix_parentheses():
    assert to_postfix("((a))") == "a"
    assert to_postfix("(a|b)c") == _c("ab|c.")
    assert to_postfix("a|(b|c)") == "abc||"
    assert to_postfix("(a|b)|c") == "ab|c|"


def test_postfix_unbalanced():
    with pytest.raises(MalformedRegexError):
        to_postfix("(a|b")
    with pytest.raises(MalformedRegexError):
        to_postfix("a|b)")
    with pytest.raises(MalformedRegexError):
        to_postfix(")(")
    with pytest.raises(RegexError):
        to_postfix("((a)")


def test_char_fragment():
    nfa = RegexBuilder().char("a")
    assert len(nfa) == 2
    assert not nfa.initial.accepting
    assert nfa.final.accepting
    [trans] = nfa.initial.transitions
    assert trans.label == "a"
    assert trans.dest is nfa.final
    assert not trans.is_epsilon


def test_fragment_sizes():
    assert len(regex_to_nfa("ab")) == 4
    assert len(regex_to_nfa("a|b")) == 6
    assert len(regex_to_nfa("a*")) == 4
    assert len(regex_to_nfa("a+")) == 4
    assert len(regex_to_nfa("a?")) == 4


def test_state_numbers_are_unique():
    nfa = regex_to_nfa("(ab|c)*d+")
    nums = [s.num for s in nfa.states]
    assert len(nums) == len(set(nums))


@pytest.mark.parametrize(
    "pattern", ["a", "ab", "a|b", "a*", "a+", "a?", "(a|b)*abb", "((a|b)+)|(def)*", "a**", "(a?)+"]
)
def test_single_accepting_state(pattern):
    nfa = regex_to_nfa(pattern)
    assert nfa.final_states == {nfa.final}


def test_star_edges():
    rb = RegexBuilder()
    inner = rb.char("a")
    nfa = rb.star(inner)
    targets = {t.dest for t in nfa.initial.transitions}
    assert targets == {inner.initial, nfa.final}
    assert set(inner.final.epsilon_targets()) == {inner.initial, nfa.final}
    assert not inner.final.accepting


def test_plus_edges():
    rb = RegexBuilder()
    inner = rb.char("a")
    nfa = rb.plus(inner)
    assert nfa.initial.epsilon_targets() == [inner.initial]
    assert set(inner.final.epsilon_targets()) == {inner.initial, nfa.final}


def test_question_edges():
    rb = RegexBuilder()
    inner = rb.char("a")
    nfa = rb.question(inner)
    assert set(nfa.initial.epsilon_targets()) == {inner.initial, nfa.final}
    assert inner.final.epsilon_targets() == [nfa.final]


def test_kleene_star():
    nfa = regex_to_nfa("a*")
    for s in ["", "a", "aaaa"]:
        assert nfa.accept(s)
    for s in ["b", "ab"]:
        assert not nfa.accept(s)


def test_plus():
    nfa = regex_to_nfa("a+")
    for s in ["a", "aaa"]:
        assert nfa.accept(s)
    for s in ["", "b"]:
        assert not nfa.accept(s)


def test_optional():
    nfa = regex_to_nfa("ab?c")
    assert nfa.accept("ac")
    assert nfa.accept("abc")
    assert not nfa.accept("abbc")
    assert not nfa.accept("a")


def test_union():
    nfa = regex_to_nfa("a|b")
    assert nfa.accept("a")
    assert nfa.accept("b")
    assert not nfa.accept("ab")
    assert not nfa.accept("")


def test_union_of_concatenations():
    nfa = regex_to_nfa("ab|cd")
    assert nfa.accept("ab")
    assert nfa.accept("cd")
    assert not nfa.accept("ad")
    assert not nfa.accept("abcd")


def test_nested_repetition():
    nfa = regex_to_nfa("(a*)*b")
    assert nfa.accept("b")
    assert nfa.accept("aaab")
    assert not nfa.accept("aa")

    nfa = regex_to_nfa("((a|b)+)|(def)*")
    assert nfa.accept("")
    assert nfa.accept("abba")
    assert nfa.accept("defdef")
    assert not nfa.accept("abdef")


def test_build_from_postfix():
    nfa = build_nfa_from_postfix(_c("ab.c|"))
    assert nfa.accept("ab")
    assert nfa.accept("c")
    assert not nfa.accept("abc")


def test_missing_operands():
    with pytest.raises(MalformedRegexError):
        build_nfa_from_postfix("")
    with pytest.raises(MalformedRegexError):
        build_nfa_from_postfix("*")
    with pytest.raises(MalformedRegexError):
        build_nfa_from_postfix("a|")
    with pytest.raises(MalformedRegexError):
        build_nfa_from_postfix(_c("a."))


def test_leftover_fragments():
    with pytest.raises(MalformedRegexError):
        build_nfa_from_postfix("ab")
    with pytest.raises(MalformedRegexError):
        build_nfa_from_postfix("abc|")


def test_unknown_operator():
    with pytest.raises(UnknownOperatorError):
        build_nfa_from_postfix("a(")
    with pytest.raises(UnknownOperatorError):
        build_nfa_from_postfix(")")
    assert issubclass(UnknownOperatorError, RegexError)


def test_malformed_infix():
    for pattern in ["", "()", "a|", "|a", "*a", "(|)", "a||b"]:
        with pytest.raises(MalformedRegexError):
            regex_to_nfa(pattern)


def test_debug_logging():
    messages = []
    handler_id = logger.add(messages.append, level="DEBUG", format="{message}")
    try:
        to_postfix("ab")
        assert messages == []

        logger.enable("lexautomata")
        try:
            regex_to_nfa("ab")
        finally:
            logger.disable("lexautomata")
    finally:
        logger.remove(handler_id)

    assert any(_c("'ab.'") in m for m in messages)
    assert any("Built NFA with 4 states" in m for m in messages)
