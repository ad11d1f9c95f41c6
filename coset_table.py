from collections import deque
from typing import Any, Deque, Dict, Iterable, List, Optional, Tuple

from alphabet import Alphabet, inverse

Row = List[Optional[int]]


class CosetTableCorrupted(RuntimeError):
    # Raised on a broken table invariant. The table must not be used afterwards.
    pass


class CosetTable:
    # Coset ids are handed out densely from 0. Each class of coincident cosets
    # keeps exactly one row, stored under the least coset id of the class, and
    # that least id is what `find` returns. Union by rank only decides the shape
    # of the forest; the surviving row is always the smaller one, so the
    # identity coset 0 stays its own representative.
    # Row entries may name cosets merged away since; `find` resolves them on read.

    def __init__(self, alphabet: Alphabet[Any]):
        self.alphabet = alphabet
        self.width = len(alphabet)
        self._rows: List[Optional[Row]] = []
        self._parent: List[int] = []
        self._rank: List[int] = []
        # Least coset id of the class, valid at forest roots only.
        self._least: List[int] = []
        self._live = 0

    # Allocation.

    def allocated(self) -> int:
        return len(self._rows)

    def allocate(self, coset: int) -> Row:
        if coset < len(self._rows):
            raise CosetTableCorrupted(f"Coset {coset} already has a row")
        if coset > len(self._rows):
            raise CosetTableCorrupted(
                f"Coset {coset} allocated out of order, next id is {len(self._rows)}"
            )
        row: Row = [None] * self.width
        self._rows.append(row)
        self._parent.append(coset)
        self._rank.append(0)
        self._least.append(coset)
        self._live += 1
        return row

    def new_coset(self) -> int:
        coset = len(self._rows)
        self.allocate(coset)
        return coset

    # Union-find.

    def _root(self, coset: int) -> int:
        root = coset
        while self._parent[root] != root:
            root = self._parent[root]
        while self._parent[coset] != root:
            self._parent[coset], coset = root, self._parent[coset]
        return root

    def find(self, coset: int) -> int:
        if not 0 <= coset < len(self._rows):
            raise CosetTableCorrupted(f"Coset {coset} was never allocated")
        return self._least[self._root(coset)]

    def is_live(self, coset: int) -> bool:
        return self.find(coset) == coset

    def _row(self, coset: int) -> Row:
        row = self._rows[self.find(coset)]
        if row is None:
            raise CosetTableCorrupted(f"Representative of {coset} has no row")
        return row

    def union(self, a: int, b: int) -> bool:
        # Returns whether any classes were merged.
        merged = False
        pending: Deque[Tuple[int, int]] = deque([(a, b)])
        while pending:
            x, y = pending.popleft()
            rx, ry = self._root(x), self._root(y)
            if rx == ry:
                continue
            keep, drop = self._least[rx], self._least[ry]
            if drop < keep:
                keep, drop = drop, keep

            if self._rank[rx] < self._rank[ry]:
                rx, ry = ry, rx
            self._parent[ry] = rx
            if self._rank[rx] == self._rank[ry]:
                self._rank[rx] += 1
            self._least[rx] = keep

            survivor, retired = self._rows[keep], self._rows[drop]
            if survivor is None or retired is None:
                raise CosetTableCorrupted(f"Merging {keep} and {drop} without rows")
            self._rows[drop] = None
            self._live -= 1
            merged = True

            for letter, target in enumerate(retired):
                if target is None:
                    continue
                current = survivor[letter]
                if current is None:
                    survivor[letter] = target
                elif current != target:
                    pending.append((current, target))
        return merged

    # Table access.

    def lookup(self, coset: int, letter: int) -> Optional[int]:
        target = self._row(coset)[letter]
        return None if target is None else self.find(target)

    def _assign(self, coset: int, letter: int, target: int):
        row = self._row(coset)
        current = row[letter]
        if current is not None and self.find(current) != self.find(target):
            raise CosetTableCorrupted(
                f"Overwriting {coset} * {self.alphabet.render(letter)} = {current} with {target}"
            )
        row[letter] = target

    def define(self, coset: int, letter: int, target: int):
        # One direction only; callers close the inverse entry themselves.
        current = self.lookup(coset, letter)
        if current is None:
            self._assign(coset, letter, self.find(target))
        elif current != self.find(target):
            self.union(current, target)

    def define_both(self, coset: int, letter: int, target: int):
        self.define(coset, letter, target)
        self.define(target, inverse(letter), coset)

    def trace(self, coset: int, letters: Iterable[int]) -> Optional[int]:
        current = self.find(coset)
        for letter in letters:
            nxt = self.lookup(current, letter)
            if nxt is None:
                return None
            current = nxt
        return current

    # Whole-table views.

    def roots(self) -> List[int]:
        return [coset for coset, row in enumerate(self._rows) if row is not None]

    def live_count(self) -> int:
        return self._live

    def index(self) -> int:
        return self._live

    def __len__(self) -> int:
        return self._live

    def first_undefined_column(self, coset: int) -> Optional[int]:
        for letter, target in enumerate(self._row(coset)):
            if target is None:
                return letter
        return None

    def is_complete(self) -> bool:
        return all(None not in row for row in self._rows if row is not None)

    def rows(self) -> Dict[int, Tuple[Optional[int], ...]]:
        return {
            coset: tuple(None if t is None else self.find(t) for t in row)
            for coset, row in enumerate(self._rows)
            if row is not None
        }

    def compact(self) -> List[Tuple[int, ...]]:
        # Live cosets renumbered 0..n-1 in ascending order. Needs a complete table.
        if not self.is_complete():
            raise ValueError("Only a complete coset table can be compacted")
        numbering = {coset: i for i, coset in enumerate(self.roots())}
        return [
            tuple(numbering[target] for target in row if target is not None)
            for row in self.rows().values()
        ]

    def render(self) -> str:
        header = ["coset"] + [self.alphabet.render(l) for l in range(self.width)]
        lines = ["\t".join(header)]
        for coset, row in self.rows().items():
            cells = ["-" if t is None else str(t) for t in row]
            lines.append("\t".join([str(coset)] + cells))
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"CosetTable over {self.alphabet} with {self._live} live cosets "
            f"of {len(self._rows)} allocated"
        )
