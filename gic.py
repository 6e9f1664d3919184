#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
gic.py — Gramática independiente del contexto (GIC/CFG) y su API de edición.

Símbolos de un solo carácter:
  - No terminales: letras mayúsculas (A-Z)
  - Terminales: letras minúsculas (a-z), excepto 'l'
  - 'l' (ele minúscula) representa lambda (la palabra vacía) y no puede declararse

Formato textual (mismo que produce to_txt):
  S::=AB|a,
  A::=a|l,
  B::=b,

  - Una línea por no terminal, ordenadas alfabéticamente
  - Alternativas separadas únicamente por "|", ordenadas alfabéticamente
  - La coma final es opcional al leer; se admiten comentarios con "#" y líneas en blanco

Todas las violaciones de contrato lanzan GrammarError; la operación no deja la
gramática a medio modificar.
"""

from __future__ import annotations
import re
from typing import Dict, Iterable, List, Optional, Set

LAMBDA = "l"
RULE_ARROW = "::="
NT_PATTERN = re.compile(r"^[A-Z]$")
T_PATTERN = re.compile(r"^[a-z]$")


class GrammarError(ValueError):
    """Único tipo de error de la librería. `reason` identifica la causa."""

    def __init__(self, reason: str, message: str = ""):
        super().__init__(message or reason)
        self.reason = reason


def is_nonterminal_symbol(sym: str) -> bool:
    return bool(NT_PATTERN.match(sym))


def is_terminal_symbol(sym: str) -> bool:
    return bool(T_PATTERN.match(sym)) and sym != LAMBDA


# ------------------------------ Gramática ------------------------------
class Grammar:
    def __init__(self, start: Optional[str] = None):
        self.nonterminals: Set[str] = set()
        self.terminals: Set[str] = set()
        self.rules: Dict[str, Set[str]] = {}  # A -> {rhs, ...}
        self.start: Optional[str] = start

    # ---- No terminales ----
    def add_nonterminal(self, nonterminal: str):
        if not is_nonterminal_symbol(nonterminal):
            raise GrammarError("invalid_symbol", f"No terminal inválido: {nonterminal!r}")
        if nonterminal in self.nonterminals:
            raise GrammarError("duplicate_symbol", f"No terminal repetido: {nonterminal}")
        self.nonterminals.add(nonterminal)

    def remove_nonterminal(self, nonterminal: str):
        """Elimina el no terminal, sus reglas y todas las producciones en las que aparece."""
        if nonterminal not in self.nonterminals:
            raise GrammarError("unknown_symbol", f"No terminal no declarado: {nonterminal}")
        self._remove_mentions(nonterminal)
        self.rules.pop(nonterminal, None)
        self.nonterminals.discard(nonterminal)
        if self.start == nonterminal:
            self.start = None

    def get_nonterminals(self) -> Set[str]:
        return set(self.nonterminals)

    # ---- Terminales ----
    def add_terminal(self, terminal: str):
        if not is_terminal_symbol(terminal):
            raise GrammarError("invalid_symbol", f"Terminal inválido: {terminal!r}")
        if terminal in self.terminals:
            raise GrammarError("duplicate_symbol", f"Terminal repetido: {terminal}")
        self.terminals.add(terminal)

    def remove_terminal(self, terminal: str):
        if terminal not in self.terminals:
            raise GrammarError("unknown_symbol", f"Terminal no declarado: {terminal}")
        self._remove_mentions(terminal)
        self.terminals.discard(terminal)

    def get_terminals(self) -> Set[str]:
        return set(self.terminals)

    def _remove_mentions(self, sym: str):
        # se construyen conjuntos nuevos, nunca se borra sobre el que se itera
        self.replace_rules({A: {rhs for rhs in rhss if sym not in rhs} for A, rhss in self.rules.items()})

    # ---- Axioma ----
    def set_start_symbol(self, nonterminal: str):
        if nonterminal not in self.nonterminals:
            raise GrammarError("unknown_symbol", f"El axioma debe ser un no terminal declarado: {nonterminal}")
        self.start = nonterminal

    def get_start_symbol(self) -> str:
        if self.start is None:
            raise GrammarError("no_start_symbol", "La gramática no tiene axioma")
        return self.start

    # ---- Producciones ----
    def is_valid_production(self, production: str) -> bool:
        if production == LAMBDA:
            return True
        return bool(production) and all(s in self.nonterminals or s in self.terminals for s in production)

    def add_production(self, nonterminal: str, production: str):
        if nonterminal not in self.nonterminals:
            raise GrammarError("unknown_symbol", f"No terminal no declarado: {nonterminal}")
        if not self.is_valid_production(production):
            raise GrammarError("undefined_symbol", f"Producción con símbolos no definidos: {nonterminal}{RULE_ARROW}{production}")
        if production in self.rules.get(nonterminal, ()):
            raise GrammarError("duplicate_production", f"Producción repetida: {nonterminal}{RULE_ARROW}{production}")
        self.rules.setdefault(nonterminal, set()).add(production)

    def remove_production(self, nonterminal: str, production: str) -> bool:
        if production not in self.rules.get(nonterminal, ()):
            raise GrammarError("unknown_production", f"No existe la producción {nonterminal}{RULE_ARROW}{production}")
        self.rules[nonterminal].discard(production)
        if not self.rules[nonterminal]:
            del self.rules[nonterminal]
        return True

    def get_productions(self, nonterminal: str) -> List[str]:
        return sorted(self.rules.get(nonterminal, ()))

    def iter_productions(self):
        """Recorre (A, rhs) en orden determinista."""
        for A in sorted(self.rules):
            for rhs in sorted(self.rules[A]):
                yield A, rhs

    def replace_rules(self, new_rules: Dict[str, Iterable[str]]):
        """Sustituye el mapa de reglas por uno construido aparte (se descartan los vacíos)."""
        self.rules = {A: set(rhss) for A, rhss in new_rules.items() if rhss}

    def appears_in_rhs(self, sym: str) -> bool:
        return any(sym in rhs for rhss in self.rules.values() for rhs in rhss if rhs != LAMBDA)

    # ---- Representación textual ----
    def productions_to_string(self, nonterminal: str) -> str:
        if nonterminal not in self.nonterminals or not self.rules.get(nonterminal):
            return ""
        return f"{nonterminal}{RULE_ARROW}" + "|".join(self.get_productions(nonterminal))

    def to_txt(self) -> str:
        return "".join(self.productions_to_string(A) + ",\n" for A in sorted(self.rules))

    @staticmethod
    def parse_txt(text: str, start_hint: Optional[str] = None) -> "Grammar":
        """Parsea el formato A::=p1|p2, declarando los símbolos que aparezcan."""
        g = Grammar()
        first_lhs = None
        pending = []
        for raw in text.splitlines():
            line = raw.split("#", 1)[0].strip()
            if not line:
                continue
            if RULE_ARROW not in line:
                raise GrammarError("malformed_text", f"Línea inválida (no se encontró {RULE_ARROW}): {raw}")
            lhs, rhs_str = line.split(RULE_ARROW, 1)
            lhs = lhs.strip()
            rhs_str = rhs_str.strip().rstrip(",").replace(" ", "")
            if not is_nonterminal_symbol(lhs):
                raise GrammarError("invalid_symbol", f"Lado izquierdo inválido: {raw}")
            if first_lhs is None:
                first_lhs = lhs
            for sym in lhs + rhs_str.replace("|", ""):
                if sym in g.nonterminals or sym in g.terminals or sym == LAMBDA:
                    continue
                if is_nonterminal_symbol(sym):
                    g.add_nonterminal(sym)
                else:
                    g.add_terminal(sym)
            pending.extend((lhs, alt) for alt in rhs_str.split("|"))
        for lhs, alt in pending:
            if alt in g.rules.get(lhs, ()):
                continue  # tolerar alternativas repetidas en el texto
            g.add_production(lhs, alt)
        start = start_hint or first_lhs
        if start is not None:
            g.set_start_symbol(start)
        return g

    # ---- Utilidades ----
    def delete_grammar(self):
        self.rules.clear()
        self.nonterminals.clear()
        self.terminals.clear()
        self.start = None

    def is_cfg(self) -> bool:
        """Sólo el axioma puede tener producción lambda."""
        return all(A == self.start for A, rhss in self.rules.items() if LAMBDA in rhss)

    def is_empty(self) -> bool:
        return not self.nonterminals or not self.rules

    def clone(self) -> "Grammar":
        ng = Grammar(self.start)
        ng.nonterminals = set(self.nonterminals)
        ng.terminals = set(self.terminals)
        ng.rules = {A: set(rhss) for A, rhss in self.rules.items()}
        return ng

    def __eq__(self, other):
        if not isinstance(other, Grammar):
            return NotImplemented
        return (self.start == other.start and self.nonterminals == other.nonterminals
                and self.terminals == other.terminals and self.rules == other.rules)

    def __repr__(self):
        return (f"Grammar(start={self.start!r}, nonterminals={sorted(self.nonterminals)}, "
                f"terminals={sorted(self.terminals)}, rules={self.to_txt()!r})")
