from collections import Counter
from typing import Iterable


def normalize_word(word: str) -> str:
    """Trim and upper-case a candidate word."""
    return word.strip().upper()


class LetterBag:
    """Multiset of rack letters used to test whether a word can be built.

    Comparisons are made on upper-cased characters, and counts are exact:
    a rack with a single "О" cannot build a word that needs two.
    """

    def __init__(self, letters: Iterable[str]):
        self._counts = Counter(ch.upper() for ch in letters)

    def can_build(self, word: str) -> bool:
        remaining = dict(self._counts)
        for ch in word.upper():
            if remaining.get(ch, 0) == 0:
                return False
            remaining[ch] -= 1
        return True

    def count(self, letter: str) -> int:
        return self._counts.get(letter.upper(), 0)

    def __len__(self):
        return sum(self._counts.values())
