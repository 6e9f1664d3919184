#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
gbf.py — Transformación de una GIC en una gramática bien formada (GBF).

Pasos, en este orden fijo:
  1. Reglas innecesarias (A::=A)
  2. Reglas no generativas (lambda); sólo puede quedar S::=l si S no aparece en ningún RHS
  3. Reglas unitarias (A::=B)
  4. Símbolos inútiles: primero no generativos, después no alcanzables

Cada paso trabaja sobre una copia: la gramática recibida nunca se modifica.
La eliminación de lambda puede introducir unitarias y la de unitarias puede dejar
símbolos inútiles, de ahí el orden.
"""

from __future__ import annotations
import string
from collections import deque
from typing import Dict, List, Set, Tuple

from gic import LAMBDA, RULE_ARROW, Grammar, GrammarError


# ------------------------------ Conjuntos derivados ------------------------------
def nullable_symbols(g: Grammar) -> Set[str]:
    """No terminales que derivan lambda (punto fijo)."""
    nullable: Set[str] = set()
    changed = True
    while changed:
        changed = False
        for A, rhss in g.rules.items():
            if A in nullable:
                continue
            for rhs in rhss:
                if rhs == LAMBDA or all(sym in nullable for sym in rhs):
                    nullable.add(A)
                    changed = True
                    break
    return nullable


def is_unit_production(g: Grammar, rhs: str) -> bool:
    return len(rhs) == 1 and rhs in g.nonterminals


def unit_closure(g: Grammar) -> Dict[str, Set[str]]:
    """U(A): no terminales alcanzables desde A sólo con reglas unitarias (incluye A)."""
    closure = {A: {A} for A in g.nonterminals}
    changed = True
    while changed:
        changed = False
        for A, reach in closure.items():
            for B in list(reach):
                for rhs in g.rules.get(B, ()):
                    if is_unit_production(g, rhs) and rhs not in reach:
                        reach.add(rhs)
                        changed = True
    return closure


def generating_symbols(g: Grammar) -> Set[str]:
    """No terminales que derivan alguna cadena de terminales."""
    generating: Set[str] = set()
    changed = True
    while changed:
        changed = False
        for A, rhss in g.rules.items():
            if A in generating:
                continue
            for rhs in rhss:
                if rhs == LAMBDA or all(s in g.terminals or s in generating for s in rhs):
                    generating.add(A)
                    changed = True
                    break
    return generating


def reachable_symbols(g: Grammar) -> Set[str]:
    """Símbolos (terminales y no terminales) alcanzables desde el axioma."""
    start = g.get_start_symbol()
    reachable: Set[str] = set()
    queue = deque([start])
    while queue:
        A = queue.popleft()
        if A in reachable:
            continue
        reachable.add(A)
        for rhs in g.rules.get(A, ()):
            if rhs == LAMBDA:
                continue
            for s in rhs:
                if s in g.nonterminals:
                    if s not in reachable:
                        queue.append(s)
                else:
                    reachable.add(s)
    return reachable


def _nullable_variants(rhs: str, nullable: Set[str]) -> Set[str]:
    # todas las combinaciones de mantener/quitar los símbolos anulables
    positions = [i for i, s in enumerate(rhs) if s in nullable]
    variants = set()
    for mask in range(1 << len(positions)):
        removed = {pos for bit, pos in enumerate(positions) if (mask >> bit) & 1}
        variants.add("".join(s for i, s in enumerate(rhs) if i not in removed))
    return variants


def fresh_nonterminal(g: Grammar, preferred: str = "") -> str:
    """Primera mayúscula libre (la preferida si lo está, si no desde la Z hacia atrás)."""
    for cand in list(preferred) + list(reversed(string.ascii_uppercase)):
        if cand not in g.nonterminals:
            return cand
    raise GrammarError("no_free_nonterminal", "No quedan letras mayúsculas libres para nuevos no terminales")


# ------------------------------ Comprobaciones ------------------------------
def has_useless_productions(g: Grammar) -> bool:
    return any(A in rhss for A, rhss in g.rules.items())


def has_lambda_productions(g: Grammar) -> bool:
    for A, rhss in g.rules.items():
        if LAMBDA not in rhss:
            continue
        # S::=l sólo sirve para reconocer la palabra vacía si S no aparece en ningún RHS
        if A == g.start and not g.appears_in_rhs(A):
            continue
        return True
    return False


def has_unit_productions(g: Grammar) -> bool:
    return any(is_unit_production(g, rhs) for rhss in g.rules.values() for rhs in rhss)


def has_useless_symbols(g: Grammar) -> bool:
    start = g.get_start_symbol()
    non_generating = g.nonterminals - generating_symbols(g)
    if non_generating - {start}:
        return True
    # axioma no generativo: sólo vale si ya no tiene reglas ni aparece en ningún RHS
    if start in non_generating and (g.rules.get(start) or g.appears_in_rhs(start)):
        return True
    reachable = reachable_symbols(g)
    return bool((g.nonterminals | g.terminals) - reachable)


def is_well_formed(g: Grammar) -> bool:
    return not (has_useless_productions(g) or has_lambda_productions(g)
                or has_unit_productions(g) or has_useless_symbols(g))


# ------------------------------ Transformaciones GBF ------------------------------
class WellFormedTransformer:
    def __init__(self, g: Grammar):
        self.g = g.clone()
        self.report: List[str] = []
        self.mappings = {
            "removed_useless_productions": [],
            "removed_lambda": {"nullable": [], "treated": [], "new_start": None},
            "removed_unit": {"unit_pairs": [], "removed": []},
            "removed_useless_symbols": {"non_generating": [], "unreachable": []},
        }

    # ---- Reglas innecesarias A::=A ----
    def remove_useless_productions(self) -> List[str]:
        eliminated = []
        new_rules = {}
        for A, rhss in self.g.rules.items():
            snapshot = frozenset(rhss)
            if A in snapshot:
                eliminated.append(f"{A}{RULE_ARROW}{A}")
            new_rules[A] = {rhs for rhs in snapshot if rhs != A}
        self.g.replace_rules(new_rules)
        eliminated.sort()
        self.mappings["removed_useless_productions"] = eliminated
        self.report.append(f"Reglas innecesarias eliminadas: {eliminated}.")
        return eliminated

    # ---- Reglas no generativas (lambda) ----
    def remove_lambda_productions(self) -> List[str]:
        start = self.g.get_start_symbol()
        nullable = nullable_symbols(self.g)
        had_lambda = {A for A, rhss in self.g.rules.items() if LAMBDA in rhss}

        new_rules: Dict[str, Set[str]] = {}
        for A, rhss in self.g.rules.items():
            out: Set[str] = set()
            for rhs in rhss:
                if rhs == LAMBDA:
                    continue
                out |= {v for v in _nullable_variants(rhs, nullable) if v}
            new_rules[A] = out

        # los no terminales que sólo derivaban lambda se quedan sin reglas:
        # cualquier producción que los mencione ya no genera nada
        pruned: Set[str] = set()
        emptied = {A for A, out in new_rules.items() if not out}
        while emptied - pruned:
            pruned |= emptied
            for A in new_rules:
                new_rules[A] = {rhs for rhs in new_rules[A] if not pruned.intersection(rhs)}
            emptied = {A for A, out in new_rules.items() if not out}

        new_start = None
        if start in nullable:
            if any(start in rhs for rhss in new_rules.values() for rhs in rhss):
                # en vez de descartar S::=l se crea un axioma nuevo Z::=S|l para no perder la palabra vacía
                new_start = fresh_nonterminal(self.g)
                self.g.nonterminals.add(new_start)
                self.g.start = new_start
                new_rules[new_start] = {start, LAMBDA}
            else:
                new_rules.setdefault(start, set()).add(LAMBDA)
        self.g.replace_rules(new_rules)

        treated = had_lambda - ({start} if new_start is None else set())
        treated = sorted(treated)
        self.mappings["removed_lambda"] = {"nullable": sorted(nullable), "treated": treated, "new_start": new_start}
        self.report.append(
            f"Reglas lambda eliminadas. Anulables: {sorted(nullable)}. Tratados: {treated}."
            + (f" Nuevo axioma: {new_start}{RULE_ARROW}{start}|{LAMBDA}." if new_start else "")
        )
        return treated

    # ---- Reglas unitarias A::=B ----
    def remove_unit_productions(self) -> List[str]:
        closure = unit_closure(self.g)
        eliminated = sorted(
            f"{A}{RULE_ARROW}{rhs}" for A, rhss in self.g.rules.items() for rhs in rhss
            if is_unit_production(self.g, rhs)
        )
        new_rules: Dict[str, Set[str]] = {}
        for A in self.g.nonterminals:
            out: Set[str] = set()
            for B in closure[A]:
                out |= {rhs for rhs in self.g.rules.get(B, ()) if not is_unit_production(self.g, rhs)}
            new_rules[A] = out
        self.g.replace_rules(new_rules)
        pairs = sorted((A, B) for A, reach in closure.items() for B in reach if A != B)
        self.mappings["removed_unit"] = {"unit_pairs": pairs, "removed": eliminated}
        self.report.append(f"Reglas unitarias eliminadas: {eliminated}. Pares: {pairs}.")
        return eliminated

    # ---- Símbolos inútiles ----
    def remove_useless_symbols(self) -> List[str]:
        start = self.g.get_start_symbol()

        # 1) Generativos; el axioma se conserva aunque no lo sea (lenguaje vacío)
        generating = generating_symbols(self.g)
        non_generating = sorted(self.g.nonterminals - generating - {start})
        keep = generating | {start}
        self.g.nonterminals &= keep
        self.g.replace_rules({
            A: {rhs for rhs in rhss if rhs == LAMBDA or all(s in self.g.terminals or s in generating for s in rhs)}
            for A, rhss in self.g.rules.items() if A in keep
        })

        # 2) Alcanzables desde el axioma
        reachable = reachable_symbols(self.g)
        unreachable_nt = sorted(self.g.nonterminals - reachable)
        unreachable_t = sorted(self.g.terminals - reachable)
        self.g.nonterminals &= reachable
        self.g.terminals &= reachable
        self.g.replace_rules({A: rhss for A, rhss in self.g.rules.items() if A in reachable})

        self.mappings["removed_useless_symbols"] = {
            "non_generating": non_generating,
            "unreachable": unreachable_nt + unreachable_t,
        }
        self.report.append(
            f"Símbolos inútiles eliminados. No generativos: {non_generating}. "
            f"No alcanzables: {unreachable_nt + unreachable_t}."
        )
        return non_generating + unreachable_nt + unreachable_t

    def transform(self) -> Grammar:
        self.g.get_start_symbol()
        self.report.append("== Transformación a gramática bien formada iniciada ==")
        self.remove_useless_productions()
        self.remove_lambda_productions()
        self.remove_unit_productions()
        self.remove_useless_symbols()
        self.report.append("== Transformación finalizada ==")
        return self.g


# ------------------------------ API funcional ------------------------------
def remove_useless_productions(g: Grammar) -> Tuple[Grammar, List[str]]:
    t = WellFormedTransformer(g)
    eliminated = t.remove_useless_productions()
    return t.g, eliminated


def remove_lambda_productions(g: Grammar) -> Tuple[Grammar, List[str]]:
    t = WellFormedTransformer(g)
    treated = t.remove_lambda_productions()
    return t.g, treated


def remove_unit_productions(g: Grammar) -> Tuple[Grammar, List[str]]:
    t = WellFormedTransformer(g)
    eliminated = t.remove_unit_productions()
    return t.g, eliminated


def remove_useless_symbols(g: Grammar) -> Tuple[Grammar, List[str]]:
    t = WellFormedTransformer(g)
    eliminated = t.remove_useless_symbols()
    return t.g, eliminated


def transform_to_well_formed_grammar(g: Grammar) -> Grammar:
    return WellFormedTransformer(g).transform()
