from typing import (
    Dict,
    Generic,
    Hashable,
    Iterable,
    Literal,
    Sequence,
    Tuple,
    TypeVar,
)

from utils import sign

T = TypeVar("T", bound=Hashable)

Sign = Literal[-1, 1]


def inverse(letter: int) -> int:
    return letter ^ 1


class Alphabet(Generic[T]):
    # Generator number `i` becomes letter `2i` and its formal inverse becomes
    # letter `2i + 1`, so inverting a letter flips its lowest bit. Coset table
    # columns are indexed by these letters.

    def __init__(self, generators: Sequence[T]):
        self._generators: Tuple[T, ...] = tuple(generators)
        self._index: Dict[T, int] = {}
        for i, gen in enumerate(self._generators):
            if gen in self._index:
                raise ValueError(f"Generator {gen!r} appears twice")
            self._index[gen] = i

    def rank(self) -> int:
        return len(self._generators)

    def __len__(self) -> int:
        return 2 * len(self._generators)

    def letter(self, gen: T, s: int = 1) -> int:
        i = self._index.get(gen)
        if i is None:
            raise ValueError(f"Generator {gen!r} is not in the alphabet {self}")
        return 2 * i if sign(s) == 1 else 2 * i + 1

    def generator(self, letter: int) -> Tuple[T, Sign]:
        if not 0 <= letter < len(self):
            raise ValueError(f"Letter {letter} out of range for {self}")
        return self._generators[letter >> 1], (-1 if letter & 1 else 1)

    def translate(self, word: Iterable[Tuple[T, int]]) -> Tuple[int, ...]:
        # Syllables are expanded, not reduced: `a a^-1` stays two letters.
        letters = []
        for gen, pow in word:
            if pow == 0:
                raise ValueError(f"Syllable {gen!r}^0 in word {word!r}")
            letters.extend([self.letter(gen, pow)] * abs(pow))
        return tuple(letters)

    def render(self, letter: int) -> str:
        gen, s = self.generator(letter)
        return str(gen) if s == 1 else f"{gen}^-1"

    def render_word(self, letters: Iterable[int]) -> str:
        rendered = " ".join(self.render(letter) for letter in letters)
        return rendered or "identity"

    def __repr__(self) -> str:
        return f"Alphabet({', '.join(str(gen) for gen in self._generators)})"
