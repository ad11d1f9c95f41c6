import logging
from typing import List, Sequence, Tuple

import pytest
from sympy.combinatorics import PermutationGroup

from alphabet import Alphabet, inverse
from coset_table import CosetTable, CosetTableCorrupted
from enumeration import EnumerationAborted, EnumerationState, enumerate_cosets
from equation import CosetEquation, EquationStore
from finitely_presented_group import FinitelyPresentedGroup
from free_group import FreeGroup, FreeGroupElement, commutator
from simplify import discharge, simplify, simplify_until_fixed_point

Syllables = List[Tuple[str, int]]


def assert_symmetric(table: CosetTable):
    for coset in table.roots():
        for letter in range(table.width):
            target = table.lookup(coset, letter)
            if target is not None:
                assert table.is_live(target)
                assert table.lookup(target, inverse(letter)) == coset


def assert_complete(table: CosetTable):
    assert table.is_complete()
    for coset in table.roots():
        assert table.first_undefined_column(coset) is None
    assert_symmetric(table)


def s3() -> Tuple[List[str], List[Syllables]]:
    return ["a", "b"], [[("a", 2)], [("b", 2)], [("a", 1), ("b", 1)] * 3]


def test_free_group():
    F = FreeGroup(("a", "b", "c"))
    a, b, c = F.gens()
    x = a * b * ~a * b * c**2
    y = b ** (-3) * c * a * b
    z = a * b * c
    e = F.identity()

    assert x * e == e * x == x
    assert x * ~x == ~x * x == e
    assert (x * y) * z == x * (y * z)
    assert (x * y) ** (-1) == y ** (-1) * x ** (-1)
    assert x**5 == x * x * x * x * x
    assert x**13 == x**6 * x**7
    assert x**0 == e
    assert x**-3 == ~x * ~x * ~x
    assert x.conjugate(y) == y * x * ~y
    assert commutator(x, y) == x * y * ~x * ~y
    assert commutator(x, y) == ~commutator(y, x)
    assert list((a**2 * ~b).letters()) == [(a, 1), (a, 1), (b, -1)]


def test_parse():
    F = FreeGroup(("a", "b"))
    a, b = F.gens()

    assert F.parse("(ab)^3") == (a * b) ** 3
    assert F.parse("aB") == a * ~b
    assert F.parse("a^-2 * b") == a**-2 * b
    assert F.parse("(a b^2)^-1") == ~(a * b**2)
    assert F.parse("") == F.identity()

    for bad in ["c", "a^", "(ab", "ab)"]:
        with pytest.raises(ValueError):
            F.parse(bad)

    G = FreeGroup(("x1", "x2"))
    x1, x2 = G.gens()
    assert G.parse("x1 x2^-1 x1") == x1 * ~x2 * x1
    with pytest.raises(ValueError):
        G.parse("X1")


def test_alphabet():
    alphabet = Alphabet(["a", "b"])
    assert len(alphabet) == 4
    assert alphabet.rank() == 2
    assert alphabet.letter("a") == 0
    assert alphabet.letter("a", -1) == 1
    assert alphabet.letter("b", 1) == 2
    assert alphabet.generator(3) == ("b", -1)
    for letter in range(len(alphabet)):
        assert inverse(inverse(letter)) == letter
        gen, s = alphabet.generator(letter)
        assert alphabet.generator(inverse(letter)) == (gen, -s)

    # Words are expanded letter by letter and never reduced.
    assert alphabet.translate([("a", 2), ("b", -1), ("b", 1)]) == (0, 0, 3, 2)
    assert alphabet.render_word((0, 3)) == "a b^-1"

    F = FreeGroup(("x", "y"))
    x, y = F.gens()
    assert Alphabet(F.gens()).translate(x * y**-2) == (0, 3, 3)

    with pytest.raises(ValueError):
        alphabet.translate([("c", 1)])
    with pytest.raises(ValueError):
        alphabet.translate([("a", 0)])
    with pytest.raises(ValueError):
        alphabet.generator(4)
    with pytest.raises(ValueError):
        Alphabet(["a", "a"])


def test_coset_table_allocation():
    table = CosetTable(Alphabet(["a"]))
    assert table.allocate(0) == [None, None]
    assert table.new_coset() == 1
    assert table.allocated() == 2
    assert table.roots() == [0, 1]

    with pytest.raises(CosetTableCorrupted):
        table.allocate(1)
    with pytest.raises(CosetTableCorrupted):
        table.allocate(5)
    with pytest.raises(CosetTableCorrupted):
        table.find(7)


def test_coset_table_define_and_lookup():
    table = CosetTable(Alphabet(["a"]))
    for _ in range(3):
        table.new_coset()

    table.define_both(0, 0, 1)
    assert table.lookup(0, 0) == 1
    assert table.lookup(1, 1) == 0
    assert table.lookup(0, 1) is None
    assert table.first_undefined_column(0) == 1

    # A second, different value for a defined cell is a coincidence.
    table.define(0, 0, 2)
    assert table.find(2) == 1
    assert table.roots() == [0, 1]
    assert table.lookup(0, 0) == 1

    with pytest.raises(CosetTableCorrupted):
        table._assign(1, 1, 1)


def test_union_keeps_smallest_coset_row():
    table = CosetTable(Alphabet(["a"]))
    for _ in range(5):
        table.new_coset()
    table.define(1, 0, 3)
    table.define(2, 0, 0)
    table.define(4, 1, 2)

    live = len(table)
    assert table.union(2, 1)
    assert len(table) < live

    # Both rows defined column `a`, so their targets coincide as well.
    assert table.find(2) == 1
    assert table.find(3) == 0
    assert table.roots() == [0, 1, 4]
    assert table.lookup(1, 0) == 0
    assert table.lookup(4, 1) == 1

    assert not table.union(3, 0)
    assert table.union(4, 3)
    assert table.roots() == [0, 1]
    assert table.find(4) == 0
    assert all(table.find(c) in (0, 1) for c in range(5))


def test_union_monotonicity():
    table = CosetTable(Alphabet(["a", "b"]))
    for _ in range(8):
        table.new_coset()
    pairs = [(7, 6), (5, 4), (6, 4), (3, 2), (2, 7), (1, 0), (0, 3)]
    live = len(table)
    for x, y in pairs:
        table.union(x, y)
        assert len(table) <= live
        live = len(table)
        classes = {}
        for c in range(table.allocated()):
            classes.setdefault(table.find(c), []).append(c)
        for rep, members in classes.items():
            assert rep == min(members)
        assert sorted(classes) == table.roots()
    assert table.roots() == [0]
    assert table.allocated() == 8


def test_simplify_and_discharge():
    table = CosetTable(Alphabet(["a"]))
    table.new_coset()
    table.new_coset()
    table.define_both(0, 0, 1)

    store = EquationStore([(0, 0)], [])
    store.seed_coset(0)
    (equation,) = store.relator_equations
    minimal, changed = simplify(table, store, equation)
    assert minimal and changed
    assert len(equation) == 1
    assert (equation.base, equation.target) == (1, 0)

    discharge(table, store, equation)
    assert table.lookup(1, 0) == 0
    assert table.lookup(0, 1) == 1
    assert_complete(table)


def test_simplify_without_information():
    table = CosetTable(Alphabet(["a", "b"]))
    table.new_coset()
    store = EquationStore([(0, 2, 1, 3)], [])
    store.seed_coset(0)
    (equation,) = store.relator_equations
    assert simplify(table, store, equation) == (False, False)
    assert (equation.left, equation.right) == (0, 4)
    with pytest.raises(ValueError):
        discharge(table, store, equation)
    with pytest.raises(ValueError):
        CosetEquation(0, 3, 2, 0, 0)


def test_simplify_on_complete_table():
    generators, relators = s3()
    table = enumerate_cosets(generators, relators)
    store = EquationStore([table.alphabet.translate(r) for r in relators], [])
    for coset in table.roots():
        store.seed_coset(coset)
    for equation in store.relator_equations:
        length = len(equation)
        minimal, changed = simplify(table, store, equation)
        assert minimal and changed
        assert len(equation) == 0
        assert equation.base == equation.target
        assert equation.right - equation.left <= length


def test_cyclic_group_of_order_3():
    table = enumerate_cosets(["a"], [[("a", 3)]])
    assert table.index() == 3
    assert table.roots() == [0, 1, 2]
    assert_complete(table)
    assert table.compact() == [(1, 2), (2, 0), (0, 1)]

    # `a` permutes the cosets in a single 3-cycle.
    orbit = [0]
    for _ in range(2):
        orbit.append(table.lookup(orbit[-1], 0))
    assert sorted(orbit) == [0, 1, 2]
    assert table.lookup(orbit[-1], 0) == 0


def test_symmetric_group_s3():
    generators, relators = s3()
    table = enumerate_cosets(generators, relators)
    assert table.index() == 6
    assert_complete(table)

    table = enumerate_cosets(generators, relators, [[("a", 1)]])
    assert table.index() == 3
    assert_complete(table)
    assert table.lookup(0, 0) == 0


@pytest.mark.parametrize(
    "relators, subgroup, index",
    [
        ([[("a", 1)]], [], 1),
        ([], [[("a", 5)]], 5),
        ([[("a", 4)]], [[("a", 2)]], 2),
        ([[("a", 2)], [("b", 2)]], [[("a", 1)], [("b", 1)]], 1),
        # Non-reduced relator for the cyclic group of order 3.
        ([[("a", 1), ("a", -1), ("a", 3)]], [], 3),
    ],
)
def test_small_indices(relators, subgroup, index):
    generators = ["a", "b"] if any(g == "b" for r in relators for g, _ in r) else ["a"]
    table = enumerate_cosets(generators, relators, subgroup)
    assert table.index() == index
    assert_complete(table)


def test_no_generators():
    table = enumerate_cosets([], [])
    assert table.index() == 1
    assert table.compact() == [()]


def test_row_symmetry_after_every_step():
    generators = ["a", "b"]
    relators = [[("a", 2)], [("b", 3)], [("a", 1), ("b", 1)] * 4]
    state = EnumerationState(generators, relators)
    assert_symmetric(state.table)
    allocated = state.table.allocated()
    while state.step():
        assert_symmetric(state.table)
        assert state.table.allocated() == allocated + 1
        allocated = state.table.allocated()
        assert 0 in state.table.roots()
    assert state.is_done()
    assert state.table.index() == 24
    assert_complete(state.table)


def test_fixed_point_is_idempotent():
    generators, relators = s3()
    state = EnumerationState(generators, relators, [[("a", 1), ("b", 1)]])
    while True:
        rows = state.table.rows()
        equations = state.store.snapshot()
        assert simplify_until_fixed_point(state.table, state.store) == 0
        assert state.table.rows() == rows
        assert state.store.snapshot() == equations
        if not state.step():
            break
    assert state.table.index() == 2


def test_coincidences_collapse_to_trivial_group():
    # b^-1 a b = a^2 and a^-1 b a = b^2 force a = b = 1.
    relators = [
        [("b", -1), ("a", 1), ("b", 1), ("a", -2)],
        [("a", -1), ("b", 1), ("a", 1), ("b", -2)],
    ]
    table = enumerate_cosets(["a", "b"], relators, max_cosets=100000)
    assert table.index() == 1
    assert table.roots() == [0]
    assert table.allocated() > 1
    assert_complete(table)


def test_bounds_abort_enumeration():
    infinite_dihedral = [[("a", 2)], [("b", 2)]]
    with pytest.raises(EnumerationAborted) as info:
        enumerate_cosets(["a", "b"], infinite_dihedral, max_cosets=50)
    assert info.value.allocated == 50

    with pytest.raises(EnumerationAborted) as info:
        enumerate_cosets(["a"], [], max_definitions=10)
    assert info.value.definitions == 10

    # A finite enumeration within the bounds is unaffected.
    assert enumerate_cosets(["a"], [[("a", 3)]], max_cosets=3).index() == 3


def test_malformed_input():
    with pytest.raises(ValueError):
        enumerate_cosets(["a"], [[]])
    with pytest.raises(ValueError):
        enumerate_cosets(["a"], [[("b", 1)]])
    with pytest.raises(ValueError):
        enumerate_cosets(["a"], [[("a", 2)]], [[("c", 1)]])
    with pytest.raises(ValueError):
        enumerate_cosets(["a"], [[("a", 0)]])
    with pytest.raises(ValueError):
        enumerate_cosets(["a", "a"], [[("a", 2)]])
    with pytest.raises(ValueError):
        enumerate_cosets(["a"], [[("a", 2)]], max_cosets=0)


def test_render():
    table = enumerate_cosets(["a"], [[("a", 3)]])
    lines = table.render().splitlines()
    assert lines[0].split("\t") == ["coset", "a", "a^-1"]
    assert len(lines) == 4
    assert "3 live cosets" in repr(table)


def test_logs_completion(caplog: pytest.LogCaptureFixture):
    caplog.set_level(logging.INFO, logger="enumeration")
    enumerate_cosets(["a"], [[("a", 3)]])
    assert "index 3" in caplog.text


def presentations() -> Sequence[Tuple[str, int]]:
    return [
        ("a^2, b^2, (ab)^3", 6),
        ("a^4, b^2, (ab)^2", 8),
        ("a^4, a^-2 b^2, a b a B", 8),
        ("a^2, b^3, (ab)^3", 12),
        ("a^2, b^3, (ab)^4", 24),
        ("a^3, b^3, (ab)^2", 12),
    ]


@pytest.mark.parametrize("relators, order", presentations())
def test_group_orders(relators: str, order: int):
    F = FreeGroup(("a", "b"))
    G = F / [r.strip() for r in relators.split(",")]
    assert G.order() == order
    assert len(G.right_coset_representatives()) == order

    perms = G.permutation_representation()
    assert PermutationGroup(list(perms)).order() == order


def test_finitely_presented_group():
    F = FreeGroup(("a", "b"))
    a, b = F.gens()
    G = F / [a**2, b**2, (a * b) ** 3]

    assert G.order() == 6
    assert not G.is_trivial()
    assert G.index_of([a]) == 3
    assert G.index_of([a * b]) == 2
    assert G.index_of([a, b]) == 1

    H: List[FreeGroupElement] = [a]
    assert G.contains_element(H, a)
    assert G.contains_element(H, b * b * a)
    assert not G.contains_element(H, b)
    assert not G.contains_element(H, b * a * ~b)
    assert G.are_equal(a * b * a, b * a * b)
    assert not G.are_equal(a, b)

    assert not G.is_normal(H)
    assert G.is_normal([a * b])

    reps = G.right_coset_representatives(H)
    assert reps[0] == F.identity()
    assert set(reps) == {F.identity(), b, b * a}

    perms = G.permutation_representation(H)
    assert len(perms) == 2
    assert PermutationGroup(list(perms)).order() == 6
    assert perms[0](0) == 0


def test_finitely_presented_group_bounds():
    F = FreeGroup(("a", "b"))
    a, b = F.gens()
    G = FinitelyPresentedGroup(F, [a**2, b**2], max_cosets=200)
    with pytest.raises(EnumerationAborted):
        G.order()
    assert G.index_of([a, b]) == 1

    with pytest.raises(ValueError):
        F / [FreeGroup(("x",)).gens()[0]]
    with pytest.raises(ValueError):
        G.index_of([FreeGroup(("x",)).gens()[0]])


def test_quaternion_subgroups():
    F = FreeGroup(2)
    a, b = F.gens()
    Q8 = F / [a**4, a ** (-2) * b**2, a * b * a * ~b]
    assert Q8.order() == 8
    assert Q8.index_of([a]) == 2
    assert Q8.index_of([a**2]) == 4
    # Every subgroup of Q8 is normal.
    assert Q8.is_normal([a**2])
    assert Q8.is_normal([b])
    assert Q8.contains_element([a], a**2 * b**2)


def test_coset_table_follows_subgroup_contents():
    F = FreeGroup(("a", "b"))
    a, b = F.gens()
    G = F / [a**2, b**2, (a * b) ** 3]

    H = [a]
    assert G.index_of(H) == 3
    H.append(b)
    assert G.index_of(H) == 1
    assert G.contains_element(H, b)

    # Equal generators share one table, whatever container they arrive in.
    assert G.coset_table([a]) is G.coset_table((a,))


def test_limits_per_call():
    F = FreeGroup(("a", "b"))
    a, b = F.gens()
    infinite_dihedral = F / [a**2, b**2]
    with pytest.raises(EnumerationAborted) as info:
        infinite_dihedral.index_of([], max_cosets=50)
    assert info.value.allocated == 50
    with pytest.raises(EnumerationAborted) as info:
        infinite_dihedral.contains_element([a], b, max_definitions=20)
    assert info.value.definitions == 20
    with pytest.raises(EnumerationAborted):
        infinite_dihedral.right_coset_representatives([b], max_cosets=30)
    assert infinite_dihedral.index_of([a, b], max_cosets=5) == 1

    # A per-call limit overrides the one given at construction.
    s3 = FinitelyPresentedGroup(F, [a**2, b**2, (a * b) ** 3], max_cosets=1)
    with pytest.raises(EnumerationAborted):
        s3.is_normal([a * b])
    assert s3.is_normal([a * b], max_cosets=100)
    assert s3.index_of([], max_cosets=100) == 6
    assert s3.order() == 6


def test_identity_relators_are_dropped():
    F = FreeGroup(("a",))
    (a,) = F.gens()
    G = F / ["aA", "a^3", a * ~a]
    assert G.relators() == (a**3,)
    assert G.order() == 3

    # At the enumeration level an empty relator is still malformed.
    with pytest.raises(ValueError):
        enumerate_cosets(["a"], [F.parse("aA")])
