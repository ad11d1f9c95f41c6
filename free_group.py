import re
from typing import (
    TYPE_CHECKING,
    Any,
    Dict,
    Iterator,
    NoReturn,
    Optional,
    Sequence,
    Tuple,
)

from word import Word

if TYPE_CHECKING:
    from finitely_presented_group import FinitelyPresentedGroup


_EXPONENT = re.compile(r"\s*(-?\d+)")


class FreeGroup:
    def __init__(self, _gens: Tuple[str, ...] | int, name: Optional[str] = None):
        self._name = name
        if isinstance(_gens, int):
            gen_names: Tuple[str, ...] = tuple(chr(ord("a") + i) for i in range(_gens))
        else:
            gen_names = tuple(_gens)
        if len(set(gen_names)) != len(gen_names):
            raise ValueError(f"Generator names must be distinct, got {gen_names}")
        self._gens = tuple(
            object.__new__(FreeGroupGenerator) for _ in range(len(gen_names))
        )
        for _letter, _name in zip(self._gens, gen_names):
            _letter.__init__(self, _name)

    def gens(self) -> Tuple["FreeGroupGenerator", ...]:
        return self._gens

    def __repr__(self):
        return (
            f"Free Group over {', '.join(repr(gen) for gen in self._gens)}"
            if self._name is None
            else self._name
        )

    def __hash__(self):
        return hash(("Free Group", tuple((gen.name for gen in self._gens))))

    def identity(self) -> "FreeGroupElement":
        return FreeGroupElement(self)

    def rank(self) -> int:
        return len(self.gens())

    def parse(self, text: str) -> "FreeGroupElement":
        # Accepts juxtaposed or `*`-separated generators, `^n` powers and
        # parentheses, e.g. "(a b)^3", "a^2*b^-1". When every generator is a
        # single lowercase letter, an uppercase letter denotes the inverse.
        by_name: Dict[str, FreeGroupGenerator] = {gen.name: gen for gen in self._gens}
        names = sorted(by_name, key=len, reverse=True)
        capitals = all(len(name) == 1 and name.islower() for name in names)
        pos = 0

        def fail(reason: str) -> NoReturn:
            raise ValueError(f"Cannot parse {text!r} at position {pos}: {reason}")

        def skip():
            nonlocal pos
            while pos < len(text) and (text[pos].isspace() or text[pos] == "*"):
                pos += 1

        def exponent() -> int:
            nonlocal pos
            skip()
            if pos < len(text) and text[pos] == "^":
                match = _EXPONENT.match(text, pos + 1)
                if match is None:
                    fail("expected an integer exponent")
                pos = match.end()
                return int(match.group(1))
            return 1

        def atom() -> FreeGroupElement:
            nonlocal pos
            if text[pos] == "(":
                pos += 1
                inner = sequence()
                if pos >= len(text) or text[pos] != ")":
                    fail("unbalanced parenthesis")
                pos += 1
                return inner
            for name in names:
                if text.startswith(name, pos):
                    pos += len(name)
                    return by_name[name]
            char = text[pos]
            if capitals and char.isupper() and char.lower() in by_name:
                pos += 1
                return ~by_name[char.lower()]
            fail("unknown generator")

        def sequence() -> FreeGroupElement:
            res = self.identity()
            skip()
            while pos < len(text) and text[pos] != ")":
                base = atom()
                res *= base ** exponent()
                skip()
            return res

        res = sequence()
        if pos < len(text):
            fail("unbalanced parenthesis")
        return res

    def __truediv__(
        self, relators: Sequence["FreeGroupElement | str"]
    ) -> "FinitelyPresentedGroup":
        from finitely_presented_group import FinitelyPresentedGroup

        return FinitelyPresentedGroup(
            self, [self.parse(r) if isinstance(r, str) else r for r in relators]
        )


class FreeGroupElement(Word["FreeGroupGenerator"]):
    def __init__(self, free_group: FreeGroup):
        self.free_group = free_group
        super().__init__()

    def identity(self) -> "FreeGroupElement":
        # Overrides Word.identity, to make sure computations return the correct type.
        return FreeGroupElement(self.free_group)

    def add(self, let: "FreeGroupGenerator", pow: int = 1):
        if not let in self.free_group.gens():
            raise ValueError(f"Generator {let} not in free group {self.free_group}")
        super().add(let, pow)

    if TYPE_CHECKING:

        def __mul__(self, other: Word["FreeGroupGenerator"]) -> "FreeGroupElement": ...
        def __pow__(self, n: int) -> "FreeGroupElement": ...
        def __invert__(self) -> "FreeGroupElement": ...
        def copy(self) -> "FreeGroupElement": ...
        def conjugate(
            self, other: "Word[FreeGroupGenerator]"
        ) -> "FreeGroupElement": ...
        def letters(self) -> Iterator[Tuple["FreeGroupGenerator", int]]: ...

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, FreeGroupElement):
            return False
        return self.free_group == other.free_group and self.word == other.word

    def __hash__(self) -> int:
        return hash((self.free_group, tuple((let.name, pow) for let, pow in self.word)))


class FreeGroupGenerator(FreeGroupElement):
    def __init__(self, free_group: FreeGroup, name: str):
        for gen in free_group.gens():
            if self is gen:
                break
        else:
            raise ValueError(f"Generator {name} not in free group {free_group}")
        self.name = name

        super().__init__(free_group)
        self.add(self)

    def __eq__(self, other: "FreeGroupGenerator | FreeGroupElement") -> bool:
        if isinstance(other, FreeGroupGenerator):
            return self is other
        return super().__eq__(other)

    # Equal to the one-letter element, so it must hash like one.
    __hash__ = FreeGroupElement.__hash__

    def __repr__(self):
        return self.name


if TYPE_CHECKING:

    def commutator(a: FreeGroupElement, b: FreeGroupElement) -> FreeGroupElement: ...

else:
    from word import commutator
