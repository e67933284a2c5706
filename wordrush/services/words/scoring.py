from typing import Iterable

POINTS_PER_LETTER = 50


def score_words(words: Iterable[str]) -> int:
    """Score a filtered word list: 50 points per letter of every word."""
    return sum(len(word) * POINTS_PER_LETTER for word in words)


def reward_words(words: Iterable[str]) -> int:
    """Gems earned for a filtered word list: one gem per letter, never negative."""
    return max(0, sum(len(word) for word in words))
