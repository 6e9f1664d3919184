#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
fnc.py — Conversión de una gramática bien formada a Forma Normal de Chomsky (FNC/CNF).

Entrada: archivo de gramática en formato textual (ver gic.py):
  S::=aSb|ab,
  A::=a,

CLI:
  fnc --in grammar.txt [--start S]

Salida:
  - la gramática bien formada equivalente
  - la gramática en FNC
  - resumen de pasos

Notas:
  - Sólo se aceptan reglas A::=BC, A::=a y S::=l (sólo el axioma).
  - La entrada de transform_into_cnf debe ser bien formada; el CLI aplica antes gbf.
  - "Terminal lifting": un no terminal nuevo X::=a por terminal usado en reglas de longitud >= 2.
  - Binarización por la izquierda: A::=BCD pasa a A::=BY, Y::=CD.
  - Los no terminales nuevos son mayúsculas libres; se emiten "mappings" para rastrear la transformación.
"""

from __future__ import annotations
import argparse
from typing import Dict, List, Set

from gic import LAMBDA, RULE_ARROW, Grammar, GrammarError
from gbf import WellFormedTransformer, fresh_nonterminal, is_well_formed


# ------------------------------ Comprobaciones FNC ------------------------------
def check_cnf_production(g: Grammar, nonterminal: str, production: str):
    """Lanza GrammarError si nonterminal::=production no está en FNC."""
    if nonterminal not in g.nonterminals:
        raise GrammarError("unknown_symbol", f"No terminal no declarado: {nonterminal}")
    if production == LAMBDA:
        if nonterminal == g.start:
            return
        raise GrammarError("not_cnf", f"Sólo el axioma puede producir lambda en FNC: {nonterminal}{RULE_ARROW}{LAMBDA}")
    if len(production) == 1 and production in g.terminals:
        return
    if len(production) == 2 and all(s in g.nonterminals for s in production):
        return
    raise GrammarError("not_cnf", f"FNC inválida: {nonterminal}{RULE_ARROW}{production}")


def is_cnf(g: Grammar) -> bool:
    try:
        for A, rhs in g.iter_productions():
            check_cnf_production(g, A, rhs)
    except GrammarError:
        return False
    return True


# ------------------------------ Transformaciones CNF ------------------------------
class CNFConverter:
    def __init__(self, g: Grammar):
        if not is_well_formed(g):
            raise GrammarError("not_well_formed", "La gramática de partida no es una gramática bien formada")
        self.g = g.clone()
        self.report: List[str] = []
        # Mapeos para reconstrucción
        self.mappings = {
            "terminal_lifting": {},  # terminal -> NewNT
            "binarization": {},      # NewNT -> rhs
        }
        self._term_nt_cache: Dict[str, str] = {}
        self._suffix_nt_cache: Dict[str, str] = {}

    def _fresh_nt(self, preferred: str = "") -> str:
        cand = fresh_nonterminal(self.g, preferred)
        self.g.nonterminals.add(cand)
        return cand

    # ---- Terminal lifting: reemplaza terminales en RHS de longitud >= 2 ----
    def _lift(self, a: str) -> str:
        if a not in self._term_nt_cache:
            X = self._fresh_nt(a.upper())
            self._term_nt_cache[a] = X
            self.mappings["terminal_lifting"][a] = X
        return self._term_nt_cache[a]

    def terminal_lifting(self):
        new_rules: Dict[str, Set[str]] = {}
        for A, rhs in list(self.g.iter_productions()):
            if len(rhs) >= 2:
                rhs = "".join(self._lift(s) if s in self.g.terminals else s for s in rhs)
            new_rules.setdefault(A, set()).add(rhs)
        for a, X in self._term_nt_cache.items():
            new_rules.setdefault(X, set()).add(a)
        self.g.replace_rules(new_rules)
        self.report.append(
            f"Terminal lifting aplicado. Introducidos {len(self._term_nt_cache)} preterminales: "
            f"{dict(sorted(self._term_nt_cache.items()))}."
        )

    # ---- Binarización: descompone RHS de longitud > 2 a binario ----
    def _suffix_nt(self, suffix: str, new_rules: Dict[str, Set[str]]) -> str:
        # no terminal que deriva exactamente `suffix`; sufijos iguales lo comparten
        if suffix not in self._suffix_nt_cache:
            X = self._fresh_nt()
            self._suffix_nt_cache[suffix] = X
            rhs = suffix if len(suffix) == 2 else suffix[0] + self._suffix_nt(suffix[1:], new_rules)
            new_rules.setdefault(X, set()).add(rhs)
            self.mappings["binarization"][X] = rhs
        return self._suffix_nt_cache[suffix]

    def binarize(self):
        new_rules: Dict[str, Set[str]] = {}
        for A, rhs in list(self.g.iter_productions()):
            if len(rhs) > 2:
                rhs = rhs[0] + self._suffix_nt(rhs[1:], new_rules)
            new_rules.setdefault(A, set()).add(rhs)
        self.g.replace_rules(new_rules)
        self.report.append(
            f"Binarización aplicada. Introducidos {len(self._suffix_nt_cache)} no terminales intermedios."
        )

    def ensure_cnf_forms(self):
        for A, rhs in self.g.iter_productions():
            check_cnf_production(self.g, A, rhs)

    def convert(self) -> Grammar:
        self.report.append("== Conversión a FNC/CNF iniciada ==")
        self.terminal_lifting()
        self.binarize()
        self.ensure_cnf_forms()
        self.report.append("== Conversión finalizada ==")
        return self.g


def transform_into_cnf(g: Grammar) -> Grammar:
    return CNFConverter(g).convert()


# ------------------------------ CLI ------------------------------

def main(argv=None):
    ap = argparse.ArgumentParser(description="Convertir una GIC a gramática bien formada y a FNC/CNF.")
    ap.add_argument("--in", dest="infile", required=True, help="Ruta del archivo de gramática (txt)")
    ap.add_argument("--start", dest="start", default=None, help="Símbolo inicial (por defecto, primer LHS)")
    args = ap.parse_args(argv)

    with open(args.infile, "r", encoding="utf-8") as f:
        text = f.read()
    g = Grammar.parse_txt(text, start_hint=args.start)

    wf = WellFormedTransformer(g)
    wf_g = wf.transform()
    conv = CNFConverter(wf_g)
    cnf_g = conv.convert()

    print("# Gramática bien formada")
    print(wf_g.to_txt())
    print("# Gramática en FNC")
    print(cnf_g.to_txt())
    print("# Resumen")
    for line in wf.report + conv.report:
        print(f"- {line}")
    print(f"- No terminales: {len(cnf_g.nonterminals)}")
    print(f"- Terminales: {len(cnf_g.terminals)}")
    print(f"- Reglas: {sum(len(rhss) for rhss in cnf_g.rules.values())}")


if __name__ == "__main__":
    main()
