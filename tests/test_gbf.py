import pytest

from conftest import build
from gbf import (
    WellFormedTransformer,
    generating_symbols,
    has_lambda_productions,
    has_unit_productions,
    has_useless_productions,
    has_useless_symbols,
    is_well_formed,
    nullable_symbols,
    reachable_symbols,
    remove_lambda_productions,
    remove_unit_productions,
    remove_useless_productions,
    remove_useless_symbols,
    transform_to_well_formed_grammar,
    unit_closure,
)
from gic import Grammar, GrammarError


# ---- Reglas innecesarias ----
def test_remove_useless_productions_noop():
    g = build("S::=AA|a,\nA::=a,")
    assert not has_useless_productions(g)
    ng, eliminated = remove_useless_productions(g)
    assert eliminated == []
    assert ng == g


def test_remove_useless_productions_self_rule():
    g = build("S::=AA|a,\nA::=a,")
    g.add_production("A", "A")
    assert has_useless_productions(g)
    ng, eliminated = remove_useless_productions(g)
    assert eliminated == ["A::=A"]
    assert ng.get_productions("A") == ["a"]
    # la gramática original no se toca
    assert g.get_productions("A") == ["A", "a"]


def test_indirect_cycles_are_not_useless_productions():
    g = build("S::=A|a,\nA::=S|a,")
    assert not has_useless_productions(g)


# ---- Lambda ----
def test_nullable_fixed_point():
    g = build("S::=AB,\nA::=l,\nB::=b,")
    assert nullable_symbols(g) == {"A"}
    g = build("S::=AB,\nA::=l,\nB::=A|b,")
    assert nullable_symbols(g) == {"S", "A", "B"}


def test_remove_lambda_productions():
    g = build("S::=AB,\nA::=l,\nB::=b,")
    assert has_lambda_productions(g)
    ng, treated = remove_lambda_productions(g)
    assert treated == ["A"]
    assert ng.get_productions("S") == ["B"]
    assert ng.get_productions("A") == []
    assert not has_lambda_productions(ng)


def test_start_lambda_is_not_a_defect():
    assert not has_lambda_productions(build("S::=aA|l,\nA::=a,"))
    assert has_lambda_productions(build("S::=aS|l,"))


def test_remove_lambda_keeps_start_lambda():
    g = build("S::=AB|l,\nA::=a|l,\nB::=b,")
    ng, treated = remove_lambda_productions(g)
    assert treated == ["A"]
    assert ng.to_txt() == "A::=a,\nB::=b,\nS::=AB|B|l,\n"


def test_remove_lambda_nullable_start_without_own_lambda():
    ng, treated = remove_lambda_productions(build("S::=AA,\nA::=a|l,"))
    assert treated == ["A"]
    assert ng.get_productions("S") == ["A", "AA", "l"]


def test_remove_lambda_introduces_new_start():
    g = build("S::=aSb|l,")
    ng, treated = remove_lambda_productions(g)
    assert treated == ["S"]
    assert ng.start == "Z"
    assert ng.to_txt() == "S::=aSb|ab,\nZ::=S|l,\n"
    assert not has_lambda_productions(ng)


def test_remove_lambda_prunes_symbols_deriving_only_lambda():
    ng, treated = remove_lambda_productions(build("S::=aB,\nB::=C,\nC::=l,"))
    assert treated == ["C"]
    assert ng.to_txt() == "S::=a,\n"


def test_remove_lambda_requires_start():
    g = Grammar()
    g.add_nonterminal("A")
    g.add_production("A", "l")
    with pytest.raises(GrammarError):
        remove_lambda_productions(g)


# ---- Unitarias ----
def test_unit_closure():
    g = build("S::=A,\nA::=B,\nB::=b,")
    closure = unit_closure(g)
    assert closure["S"] == {"S", "A", "B"}
    assert closure["B"] == {"B"}


def test_remove_unit_productions():
    g = build("S::=A,\nA::=B,\nB::=b,")
    assert has_unit_productions(g)
    ng, eliminated = remove_unit_productions(g)
    assert eliminated == ["A::=B", "S::=A"]
    assert ng.to_txt() == "A::=b,\nB::=b,\nS::=b,\n"
    assert not has_unit_productions(ng)


def test_remove_unit_productions_with_cycle():
    ng, eliminated = remove_unit_productions(build("S::=A|a,\nA::=S|b,"))
    assert eliminated == ["A::=S", "S::=A"]
    assert ng.to_txt() == "A::=a|b,\nS::=a|b,\n"


# ---- Símbolos inútiles ----
def test_generating_and_reachable():
    g = build("S::=a|AB,\nA::=a,\nB::=bB,\nC::=c,")
    assert generating_symbols(g) == {"S", "A", "C"}
    assert reachable_symbols(g) == {"S", "A", "B", "a", "b"}


def test_remove_useless_symbols_generating_first():
    g = build("S::=a|AB,\nA::=a,\nB::=bB,\nC::=c,")
    assert has_useless_symbols(g)
    ng, eliminated = remove_useless_symbols(g)
    # A sólo es inalcanzable después de quitar el no generativo B
    assert eliminated == ["B", "A", "C", "b", "c"]
    assert ng.to_txt() == "S::=a,\n"
    assert ng.get_nonterminals() == {"S"}
    assert ng.get_terminals() == {"a"}
    assert not has_useless_symbols(ng)


def test_non_generating_start_is_kept():
    ng, eliminated = remove_useless_symbols(build("S::=aS,"))
    assert eliminated == ["a"]
    assert ng.start == "S"
    assert ng.rules == {}


# ---- Gramática bien formada ----
def test_transform_to_well_formed(messy_grammar):
    before = messy_grammar.clone()
    wf = transform_to_well_formed_grammar(messy_grammar)
    assert messy_grammar == before
    assert wf.start == "Z"
    assert wf.to_txt() == "A::=aA|b,\nS::=aA|aSb|ab|b,\nZ::=aA|aSb|ab|b|l,\n"
    assert wf.get_terminals() == {"a", "b"}
    assert is_well_formed(wf)
    assert not is_well_formed(messy_grammar)


def test_transformer_report(messy_grammar):
    t = WellFormedTransformer(messy_grammar)
    t.transform()
    assert t.mappings["removed_lambda"]["new_start"] == "Z"
    assert t.mappings["removed_unit"]["removed"] == ["A::=B", "A::=C", "S::=A", "Z::=S"]
    assert t.mappings["removed_useless_symbols"] == {
        "non_generating": ["C"],
        "unreachable": ["B", "D", "E", "d", "e"],
    }
    assert t.report[0].startswith("==")


def test_well_formed_is_idempotent(messy_grammar):
    wf = transform_to_well_formed_grammar(messy_grammar)
    assert transform_to_well_formed_grammar(wf) == wf
    assert remove_useless_productions(wf)[1] == []
    assert remove_lambda_productions(wf)[1] == []
    assert remove_unit_productions(wf)[1] == []
    assert remove_useless_symbols(wf)[1] == []


def test_transform_requires_start():
    g = Grammar()
    g.add_nonterminal("S")
    with pytest.raises(GrammarError) as err:
        transform_to_well_formed_grammar(g)
    assert err.value.reason == "no_start_symbol"


def test_non_generating_start_with_rules_is_not_well_formed():
    g = build("S::=aS|AS,\nA::=a,")
    assert has_useless_symbols(g)
    assert not is_well_formed(g)
    ng, eliminated = remove_useless_symbols(g)
    assert eliminated == ["A", "a"]
    assert ng.rules == {}
    assert is_well_formed(ng)
