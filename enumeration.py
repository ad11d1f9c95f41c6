import logging
from typing import (
    Any,
    Hashable,
    Iterable,
    Optional,
    Sequence,
    Tuple,
    TypeVar,
)

from alphabet import Alphabet, inverse
from coset_table import CosetTable
from equation import EquationStore
from simplify import simplify_until_fixed_point

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Hashable)

PROGRESS_INTERVAL = 1000

IDENTITY_COSET = 0


class EnumerationAborted(RuntimeError):
    # A resource bound was hit. The presentation may still have finite index.

    def __init__(self, reason: str, allocated: int, definitions: int):
        super().__init__(
            f"Coset enumeration aborted: {reason} "
            f"({allocated} cosets allocated, {definitions} definitions made)"
        )
        self.reason = reason
        self.allocated = allocated
        self.definitions = definitions


class EnumerationState:
    # Either filling the first undefined entry of the oldest coset that has one,
    # or done. Each step defines a fresh coset for that entry and then closes
    # over the relators and subgroup generators. All words are validated before
    # the table exists.

    def __init__(
        self,
        generators: Sequence[T],
        relators: Iterable[Iterable[Tuple[T, int]]],
        subgroup_words: Iterable[Iterable[Tuple[T, int]]] = (),
        *,
        max_cosets: Optional[int] = None,
        max_definitions: Optional[int] = None,
    ):
        self.alphabet: Alphabet[T] = Alphabet(generators)
        relator_letters = [self.alphabet.translate(r) for r in relators]
        for letters in relator_letters:
            if not letters:
                raise ValueError("Relators must be non-empty words")
        subgroup_letters = [self.alphabet.translate(w) for w in subgroup_words]
        # The identity generates nothing.
        subgroup_letters = [letters for letters in subgroup_letters if letters]

        if max_cosets is not None and max_cosets < 1:
            raise ValueError(f"max_cosets must be positive, got {max_cosets}")
        if max_definitions is not None and max_definitions < 0:
            raise ValueError(f"max_definitions must be non-negative, got {max_definitions}")
        self.max_cosets = max_cosets
        self.max_definitions = max_definitions

        self.table = CosetTable(self.alphabet)
        self.store = EquationStore(relator_letters, subgroup_letters)
        self.definitions = 0
        self._cursor = IDENTITY_COSET

        logger.debug(
            "Enumerating cosets: %d generators, %d relators, %d subgroup words",
            self.alphabet.rank(),
            len(relator_letters),
            len(subgroup_letters),
        )

        self.table.allocate(IDENTITY_COSET)
        self.store.seed_coset(IDENTITY_COSET)
        self.store.seed_subgroup(IDENTITY_COSET)
        simplify_until_fixed_point(self.table, self.store)

    def next_gap(self) -> Optional[Tuple[int, int]]:
        # Cosets below the cursor are complete or dead, and stay that way.
        while self._cursor < self.table.allocated():
            coset = self._cursor
            if self.table.is_live(coset):
                column = self.table.first_undefined_column(coset)
                if column is not None:
                    return coset, column
            self._cursor += 1
        return None

    def is_done(self) -> bool:
        return self.next_gap() is None

    def _abort(self, reason: str):
        logger.debug("Aborting enumeration: %s", reason)
        raise EnumerationAborted(reason, self.table.allocated(), self.definitions)

    def step(self) -> bool:
        # Returns False once the table is complete.
        gap = self.next_gap()
        if gap is None:
            return False
        coset, column = gap

        if self.max_cosets is not None and self.table.allocated() >= self.max_cosets:
            self._abort(f"more than {self.max_cosets} cosets needed")
        if self.max_definitions is not None and self.definitions >= self.max_definitions:
            self._abort(f"more than {self.max_definitions} definitions needed")

        fresh = self.table.new_coset()
        self.store.seed_coset(fresh)
        self.table.define(coset, column, fresh)
        self.table.define(fresh, inverse(column), coset)
        self.definitions += 1
        simplify_until_fixed_point(self.table, self.store)

        if self.table.allocated() % PROGRESS_INTERVAL == 0:
            logger.debug(
                "%d cosets allocated, %d live, %d equations pending",
                self.table.allocated(),
                self.table.live_count(),
                len(self.store),
            )
        return True

    def run(self) -> CosetTable:
        while self.step():
            pass
        logger.info(
            "Coset enumeration finished: index %d, %d cosets allocated",
            self.table.index(),
            self.table.allocated(),
        )
        return self.table


def enumerate_cosets(
    generators: Sequence[Any],
    relators: Iterable[Iterable[Tuple[Any, int]]],
    subgroup_words: Iterable[Iterable[Tuple[Any, int]]] = (),
    *,
    max_cosets: Optional[int] = None,
    max_definitions: Optional[int] = None,
) -> CosetTable:
    # Words are iterables of (generator, power) syllables, such as a
    # FreeGroupElement or [("a", 1), ("b", -1)]. Without bounds this does not
    # return when the index is infinite.
    state = EnumerationState(
        generators,
        relators,
        subgroup_words,
        max_cosets=max_cosets,
        max_definitions=max_definitions,
    )
    return state.run()
