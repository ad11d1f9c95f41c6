from typing import List, Tuple

from alphabet import inverse
from coset_table import CosetTable
from equation import CosetEquation, EquationStore


def simplify(
    table: CosetTable, store: EquationStore, equation: CosetEquation
) -> Tuple[bool, bool]:
    # The left edge advances while base * word[left] is known, the right edge
    # retracts while target * word[right - 1]^-1 is known. Minimal means at most
    # one letter is left, ready to discharge.
    word = store.word(equation)
    changed = False
    while equation.left < equation.right:
        progress = False

        nxt = table.lookup(equation.base, word[equation.left])
        if nxt is not None:
            equation.base = nxt
            equation.left += 1
            progress = True

        if equation.left < equation.right:
            prev = table.lookup(equation.target, inverse(word[equation.right - 1]))
            if prev is not None:
                equation.target = prev
                equation.right -= 1
                progress = True

        if not progress:
            break
        changed = True

    return equation.right - equation.left <= 1, changed


def discharge(table: CosetTable, store: EquationStore, equation: CosetEquation):
    # A single letter left is a deduction, nothing left is a coincidence.
    if equation.left == equation.right:
        table.union(equation.base, equation.target)
    elif equation.right - equation.left == 1:
        letter = store.word(equation)[equation.left]
        table.define_both(equation.base, letter, equation.target)
    else:
        raise ValueError(f"{equation} is not minimal")


def _simplify_all(
    table: CosetTable, store: EquationStore, equations: List[CosetEquation]
) -> Tuple[List[CosetEquation], int, bool]:
    survivors: List[CosetEquation] = []
    discharged = 0
    changed = False
    for equation in equations:
        minimal, trimmed = simplify(table, store, equation)
        if minimal:
            discharge(table, store, equation)
            discharged += 1
        else:
            survivors.append(equation)
            changed = changed or trimmed
    return survivors, discharged, changed


def simplify_until_fixed_point(table: CosetTable, store: EquationStore) -> int:
    # Returns the number of equations discharged.
    total = 0
    while True:
        store.relator_equations, relators_done, relators_changed = _simplify_all(
            table, store, store.relator_equations
        )
        store.subgroup_equations, subgroup_done, subgroup_changed = _simplify_all(
            table, store, store.subgroup_equations
        )
        done = relators_done + subgroup_done
        total += done
        if not (done or relators_changed or subgroup_changed):
            return total
