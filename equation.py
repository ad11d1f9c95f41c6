from typing import List, Sequence, Tuple

Letters = Tuple[int, ...]


class CosetEquation:
    # Asserts base * word[left:right] == target. The backing word is shared by
    # every equation seeded from the same relator or subgroup generator.

    def __init__(self, word: int, left: int, right: int, base: int, target: int):
        if not 0 <= left <= right:
            raise ValueError(f"Invalid window [{left}, {right})")
        self.word = word
        self.left = left
        self.right = right
        self.base = base
        self.target = target

    def __len__(self) -> int:
        return self.right - self.left

    def __repr__(self) -> str:
        return (
            f"CosetEquation({self.base} * w{self.word}[{self.left}:{self.right}]"
            f" = {self.target})"
        )


class EquationStore:
    # Every allocated coset contributes one equation per relator. The subgroup
    # generators contribute one equation each, anchored at the identity coset.
    # Equations are dropped once they have been turned into table facts.

    def __init__(self, relators: Sequence[Letters], subgroup_words: Sequence[Letters]):
        self._words: Tuple[Letters, ...] = tuple(relators) + tuple(subgroup_words)
        self._relator_ids = range(len(relators))
        self._subgroup_ids = range(len(relators), len(self._words))
        self.relator_equations: List[CosetEquation] = []
        self.subgroup_equations: List[CosetEquation] = []

    def word(self, equation: CosetEquation) -> Letters:
        return self._words[equation.word]

    def seed_coset(self, coset: int):
        for i in self._relator_ids:
            self.relator_equations.append(
                CosetEquation(i, 0, len(self._words[i]), coset, coset)
            )

    def seed_subgroup(self, coset: int):
        for i in self._subgroup_ids:
            self.subgroup_equations.append(
                CosetEquation(i, 0, len(self._words[i]), coset, coset)
            )

    def __len__(self) -> int:
        return len(self.relator_equations) + len(self.subgroup_equations)

    def snapshot(self) -> List[Tuple[int, int, int, int, int]]:
        return [
            (eq.word, eq.left, eq.right, eq.base, eq.target)
            for eq in self.relator_equations + self.subgroup_equations
        ]
