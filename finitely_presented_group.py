from collections import deque
from typing import TYPE_CHECKING, Deque, Dict, List, Optional, Sequence, Tuple

from coset_table import CosetTable
from enumeration import IDENTITY_COSET, enumerate_cosets
from free_group import FreeGroup, FreeGroupElement, FreeGroupGenerator
from utils import Cached, cached_value, unwrap


if TYPE_CHECKING:

    class Permutation:
        def __init__(self, array_form: List[int]) -> None: ...
        def __call__(self, i: int) -> int: ...

else:
    from sympy.combinatorics import Permutation


class FinitelyPresentedGroup(Cached):
    # The group <gens | relators>, studied through its coset tables.
    # Subgroups are given by generating elements of the underlying free group.
    # Every method that needs a coset table runs a coset enumeration, which does
    # not terminate when the subgroup has infinite index. The `max_cosets` and
    # `max_definitions` limits given at construction bound every enumeration;
    # each method also takes them per call, overriding the defaults.

    def __init__(
        self,
        free_group: FreeGroup,
        relators: Sequence[FreeGroupElement],
        name: Optional[str] = None,
        *,
        max_cosets: Optional[int] = None,
        max_definitions: Optional[int] = None,
    ):
        for relator in relators:
            if relator.free_group != free_group:
                raise ValueError(f"Relator {relator} not in free group {free_group}")
        self.free_group = free_group
        # Relators that freely reduce to the identity say nothing.
        self._relators = tuple(r for r in relators if not r.is_identity())
        self._name = name
        self.max_cosets = max_cosets
        self.max_definitions = max_definitions
        # Completed tables by subgroup generators. A complete table does not
        # depend on the limits it was enumerated under.
        self._tables: Dict[Tuple[FreeGroupElement, ...], CosetTable] = {}
        super().__init__()

    def gens(self) -> Tuple[FreeGroupGenerator, ...]:
        return self.free_group.gens()

    def relators(self) -> Tuple[FreeGroupElement, ...]:
        return self._relators

    def __repr__(self) -> str:
        if self._name is not None:
            return self._name
        return (
            f"<{', '.join(repr(gen) for gen in self.gens())} | "
            f"{', '.join(repr(r) for r in self._relators)}>"
        )

    def _check_subgroup(self, subgroup: Sequence[FreeGroupElement]):
        for elem in subgroup:
            if elem.free_group != self.free_group:
                raise ValueError(f"Element {elem} not in free group {self.free_group}")

    def coset_table(
        self,
        subgroup: Sequence[FreeGroupElement] = (),
        *,
        max_cosets: Optional[int] = None,
        max_definitions: Optional[int] = None,
    ) -> CosetTable:
        # Keyed on the generators themselves, so mutating the caller's list later
        # does not alias an old table.
        key = tuple(subgroup)
        table = self._tables.get(key)
        if table is not None:
            return table
        self._check_subgroup(key)
        table = enumerate_cosets(
            self.gens(),
            self._relators,
            key,
            max_cosets=self.max_cosets if max_cosets is None else max_cosets,
            max_definitions=(
                self.max_definitions if max_definitions is None else max_definitions
            ),
        )
        self._tables[key] = table
        return table

    def index_of(
        self,
        subgroup: Sequence[FreeGroupElement],
        *,
        max_cosets: Optional[int] = None,
        max_definitions: Optional[int] = None,
    ) -> int:
        return self.coset_table(
            subgroup, max_cosets=max_cosets, max_definitions=max_definitions
        ).index()

    @cached_value
    def order(self) -> int:
        return self.coset_table(()).index()

    def is_trivial(self) -> bool:
        return self.order() == 1

    def contains_element(
        self,
        subgroup: Sequence[FreeGroupElement],
        elem: FreeGroupElement,
        *,
        max_cosets: Optional[int] = None,
        max_definitions: Optional[int] = None,
    ) -> bool:
        self._check_subgroup([elem])
        table = self.coset_table(
            subgroup, max_cosets=max_cosets, max_definitions=max_definitions
        )
        end = unwrap(table.trace(IDENTITY_COSET, table.alphabet.translate(elem)))
        return end == IDENTITY_COSET

    def are_equal(
        self,
        x: FreeGroupElement,
        y: FreeGroupElement,
        *,
        max_cosets: Optional[int] = None,
        max_definitions: Optional[int] = None,
    ) -> bool:
        return self.contains_element(
            (), x * ~y, max_cosets=max_cosets, max_definitions=max_definitions
        )

    def is_normal(
        self,
        subgroup: Sequence[FreeGroupElement],
        *,
        max_cosets: Optional[int] = None,
        max_definitions: Optional[int] = None,
    ) -> bool:
        # Normal iff every generator of the subgroup fixes every coset.
        table = self.coset_table(
            subgroup, max_cosets=max_cosets, max_definitions=max_definitions
        )
        words = [table.alphabet.translate(elem) for elem in subgroup]
        return all(
            table.trace(coset, letters) == coset
            for coset in table.roots()
            for letters in words
        )

    def right_coset_representatives(
        self,
        subgroup: Sequence[FreeGroupElement] = (),
        *,
        max_cosets: Optional[int] = None,
        max_definitions: Optional[int] = None,
    ) -> List[FreeGroupElement]:
        # Breadth first from the identity coset, letters in alphabet order, so each
        # coset gets its shortest, then lexicographically least, representative.
        table = self.coset_table(
            subgroup, max_cosets=max_cosets, max_definitions=max_definitions
        )
        reps: Dict[int, FreeGroupElement] = {IDENTITY_COSET: self.free_group.identity()}
        queue: Deque[int] = deque([IDENTITY_COSET])
        while queue:
            coset = queue.popleft()
            for letter in range(table.width):
                target = unwrap(table.lookup(coset, letter))
                if target in reps:
                    continue
                gen, s = table.alphabet.generator(letter)
                reps[target] = reps[coset] * gen**s
                queue.append(target)
        return [reps[coset] for coset in table.roots()]

    def permutation_representation(
        self,
        subgroup: Sequence[FreeGroupElement] = (),
        *,
        max_cosets: Optional[int] = None,
        max_definitions: Optional[int] = None,
    ) -> Tuple[Permutation, ...]:
        # The action of each generator on the right cosets, numbered 0..index-1.
        rows = self.coset_table(
            subgroup, max_cosets=max_cosets, max_definitions=max_definitions
        ).compact()
        return tuple(
            Permutation([row[2 * i] for row in rows]) for i in range(len(self.gens()))
        )
