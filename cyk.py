#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
cyk.py — Reconocimiento y árbol(es) de parseo con el algoritmo CYK sobre una FNC.

Recibe una gramática en FNC y una palabra (un terminal por carácter) y decide pertenencia.
Además, muestra la tabla calculada y reconstruye al menos un árbol sintáctico
(y opcionalmente todos hasta un límite).

CLI:
  cyk --grammar grammar.txt --word aabb [--word ab ...] [--table] [--all] [--max-trees 20] [--dot arboles/]

Salida:
  - Imprime SI/NO, tiempo de ejecución y, si pertenece, un árbol en forma parentizada.
  - Con --table imprime todas las celdas calculadas.
  - Con --all imprime hasta --max-trees árboles.
  - Con --dot exporta los árboles como PNG con Graphviz.

Notas:
  - La gramática debe contener reglas A::=a o A::=BC exclusivamente (salvo S::=l en el axioma).
    El CLI convierte antes a gramática bien formada y FNC si no lo está.
  - T[i][l] guarda los no terminales que derivan word[i:i+l]; i = inicio, l = longitud.
"""

from __future__ import annotations
import argparse
import os
import time
from collections import defaultdict
from typing import Any, Dict, List, Optional, Set, Tuple

from graphviz import Digraph

from gic import LAMBDA, Grammar, GrammarError
from gbf import transform_to_well_formed_grammar
from fnc import is_cnf, transform_into_cnf


def tree_to_graphviz_obj(t) -> Digraph:
    g = Digraph('G', node_attr={'shape': 'plain'})
    counter = {'i': 0}

    def new_id():
        i = counter['i']
        counter['i'] += 1
        return f"n{i}"

    def walk(node):
        # Hoja: (A, a)
        if len(node) == 2 and isinstance(node[1], str):
            A, w = node
            nA = new_id()
            nw = new_id()
            g.node(nA, A)
            g.node(nw, w)
            g.edge(nA, nw)
            return nA
        # Interno: (A, L, R)
        A, L, R = node
        nA = new_id()
        g.node(nA, A)
        nL = walk(L)
        nR = walk(R)
        g.edge(nA, nL)
        g.edge(nA, nR)
        return nA

    if t:
        walk(t)
    return g


# --------------------------- CYK + Backpointers ---------------------------
class Backptr:
    """Representa cómo se obtuvo A en T[i][l].
       - Si terminal: kind='T', token=a
       - Si binaria:  kind='B', split=k, left=B, right=C
    """
    __slots__ = ('kind', 'token', 'split', 'left', 'right')

    def __init__(self, kind: str, token: Optional[str] = None, split: Optional[int] = None,
                 left: Optional[str] = None, right: Optional[str] = None):
        self.kind = kind
        self.token = token
        self.split = split
        self.left = left
        self.right = right


Table = List[List[Dict[str, List[Backptr]]]]


def check_word(g: Grammar, word: str):
    for a in word:
        if a not in g.terminals:
            raise GrammarError("undefined_terminal", f"La palabra contiene un símbolo que no es terminal: {a!r}")


class CYKParser:
    def __init__(self, g: Grammar):
        if g.start is None:
            raise GrammarError("no_start_symbol", "La gramática carece de axioma")
        if g.is_empty():
            raise GrammarError("empty_grammar", "La gramática es vacía")
        if not is_cnf(g):
            raise GrammarError("not_cnf", "La gramática no está en Forma Normal de Chomsky")
        self.g = g
        self.start = g.start
        self.terminal_rules: Dict[str, Set[str]] = defaultdict(set)             # a -> {A}
        self.binary_rules: Dict[Tuple[str, str], Set[str]] = defaultdict(set)   # (B,C) -> {A}
        for A, rhs in g.iter_productions():
            if len(rhs) == 2:
                self.binary_rules[(rhs[0], rhs[1])].add(A)
            elif rhs != LAMBDA:
                self.terminal_rules[rhs].add(A)
        self.accepts_empty = LAMBDA in g.rules.get(self.start, ())

    def check_word(self, word: str):
        check_word(self.g, word)

    def parse(self, word: str) -> Table:
        self.check_word(word)
        n = len(word)
        # T[i][l]: dict NT -> list[Backptr]; la columna 0 no se usa
        T: Table = [[defaultdict(list) for _ in range(n + 1)] for _ in range(n)]

        # Base: longitud 1
        for i, a in enumerate(word):
            for A in self.terminal_rules.get(a, ()):
                T[i][1][A].append(Backptr('T', token=a))

        # Longitudes 2..n
        for l in range(2, n + 1):          # l = longitud de la subcadena
            for i in range(0, n - l + 1):  # i = inicio
                for k in range(1, l):      # split en k (left length = k)
                    left_cell = T[i][k]
                    right_cell = T[i + k][l - k]
                    if not left_cell or not right_cell:
                        continue
                    for B in left_cell.keys():
                        for C in right_cell.keys():
                            for A in self.binary_rules.get((B, C), ()):
                                T[i][l][A].append(Backptr('B', split=k, left=B, right=C))
        return T

    def accepts(self, word: str) -> bool:
        if word == "":
            return self.accepts_empty
        T = self.parse(word)
        return self.start in T[0][len(word)]

    # Representación de la tabla ---------------------------------------------------
    def table_to_string(self, word: str) -> str:
        if word == "":
            belongs = self.accepts(word)
            return f"Palabra: {LAMBDA} (n=0)\nResultado: {'SI' if belongs else 'NO'}"
        T = self.parse(word)
        n = len(word)
        lines = [f"Palabra: {word} (n={n})"]
        for l in range(1, n + 1):
            cells = []
            for i in range(0, n - l + 1):
                nts = ",".join(sorted(T[i][l].keys()))
                cells.append(f"T[{i},{l}] {word[i:i + l]}={{{nts}}}")
            lines.append(f"l={l} | " + " | ".join(cells))
        lines.append(f"Resultado: {'SI' if self.start in T[0][n] else 'NO'}")
        return "\n".join(lines)

    # Reconstrucción de árboles ----------------------------------------------------
    def build_trees(self, word: str, max_trees: int = 20) -> List[Any]:
        if word == "":
            return [(self.start, LAMBDA)] if self.accepts(word) else []
        T = self.parse(word)
        return self._collect_trees(T, word, self.start, max_trees)

    def _collect_trees(self, T: Table, word: str, A0: str, max_trees: int) -> List[Any]:
        n = len(word)
        res: List[Any] = []

        def gen(i, l, A):
            for bp in T[i][l][A]:
                if bp.kind == 'T':
                    yield (A, word[i])
                else:
                    k = bp.split
                    for L in gen(i, k, bp.left):
                        for R in gen(i + k, l - k, bp.right):
                            yield (A, L, R)
        if A0 not in T[0][n]:
            return []
        g = gen(0, n, A0)
        for tree in g:
            if len(res) >= max_trees:
                break
            res.append(tree)
        return res

    # Pretty-printers -------------------------------------------------------------
    def tree_to_parenthesized(self, t) -> str:
        if isinstance(t, tuple):
            if len(t) == 2 and isinstance(t[1], str):
                A, w = t
                return f"({A} {w})"
            elif len(t) == 3:
                A, L, R = t
                return f"({A} {self.tree_to_parenthesized(L)} {self.tree_to_parenthesized(R)})"
        return str(t)

    def tree_to_graphviz(self, t) -> Digraph:
        return tree_to_graphviz_obj(t)


def is_derived_using_cyk(g: Grammar, word: str) -> bool:
    # primero la palabra, después axioma, gramática vacía y FNC
    check_word(g, word)
    parser = CYKParser(g)
    return parser.accepts(word)


def algorithm_cyk_state_to_string(g: Grammar, word: str) -> str:
    check_word(g, word)
    parser = CYKParser(g)
    return parser.table_to_string(word)


# --------------------------- CLI ---------------------------

def load_cnf(path: str, start: Optional[str]) -> Grammar:
    with open(path, 'r', encoding='utf-8') as f:
        g = Grammar.parse_txt(f.read(), start_hint=start)
    if not is_cnf(g):
        g = transform_into_cnf(transform_to_well_formed_grammar(g))
    return g


def run_once(g: Grammar, word: str, table: bool, all_trees: bool, max_trees: int, dot_path: Optional[str]):
    parser = CYKParser(g)
    t0 = time.perf_counter()
    belongs = parser.accepts(word)
    dt = time.perf_counter() - t0

    print(f"Palabra: {word or LAMBDA}")
    print(f"Resultado: {'SI' if belongs else 'NO'}")
    print(f"Tiempo: {dt*1000:.3f} ms\n")

    if table:
        print(parser.table_to_string(word))
        print()

    if belongs:
        trees = parser.build_trees(word, max_trees if all_trees else 1)
        if all_trees:
            print(f"Árboles ({len(trees)} mostrados, límite {max_trees}):")
            for i, tr in enumerate(trees, 1):
                print(f"[{i}] {parser.tree_to_parenthesized(tr)}")
        else:
            print("Árbol:")
            print(parser.tree_to_parenthesized(trees[0]))

        if dot_path:
            for i, tr in enumerate(trees, 0):
                base = os.path.join(dot_path, f"arbol_{word or LAMBDA}" + (f"_{i+1}" if all_trees else ""))
                png_path = parser.tree_to_graphviz(tr).render(filename=base, format='png', cleanup=True)
                print(f"Imagen exportada a: {png_path}")


def main(argv=None):
    ap = argparse.ArgumentParser(description="Algoritmo CYK con reconstrucción de árboles (FNC)")
    ap.add_argument('--grammar', required=True, help='Ruta al archivo de gramática (formato A::=p1|p2)')
    ap.add_argument('--start', default=None, help='Símbolo inicial (por defecto, primer LHS)')
    ap.add_argument('--word', action='append', required=True, help='Palabra a verificar (repetible)')
    ap.add_argument('--table', action='store_true', help='Imprimir la tabla CYK completa')
    ap.add_argument('--all', dest='all_trees', action='store_true', help='Imprimir todos los árboles hasta --max-trees')
    ap.add_argument('--max-trees', type=int, default=20, help='Límite de árboles a imprimir cuando --all')
    ap.add_argument('--dot', help='Carpeta de salida para exportar los árboles como PNG')
    args = ap.parse_args(argv)

    g = load_cnf(args.grammar, args.start)
    for word in args.word:
        run_once(g, word, args.table, args.all_trees, args.max_trees, args.dot)
        print('-' * 60)


if __name__ == '__main__':
    main()
