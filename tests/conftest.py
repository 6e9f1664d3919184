import pytest

from gic import Grammar


def build(text, start=None):
    return Grammar.parse_txt(text, start_hint=start)


@pytest.fixture
def cnf_grammar():
    # S::=AB|a, A::=a, B::=b
    g = Grammar()
    for nt in "SAB":
        g.add_nonterminal(nt)
    for t in "ab":
        g.add_terminal(t)
    g.set_start_symbol("S")
    g.add_production("S", "AB")
    g.add_production("S", "a")
    g.add_production("A", "a")
    g.add_production("B", "b")
    return g


@pytest.fixture
def messy_grammar():
    return build(
        """
        # lambda, unitarias, un no generativo (C) y no alcanzables (E, d, e)
        S::=aSb|A|l,
        A::=aA|B|C,
        B::=b,
        C::=CD,
        D::=d,
        E::=e,
        """
    )
