"""Rack generation policies.

Two policies share one interface (``generate`` and ``swap``):

- ``PresetRackGenerator`` picks from curated letter sets whose sample words
  are known to be buildable from the rack.
- ``RandomRackGenerator`` draws letters with a minimum-vowel constraint. It
  does not check that any dictionary word can be built from the result, so
  an occasional unsolvable round is possible with this policy.
"""

import random
from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple, Union

VOWELS = 'АЕИОУЫЭЮЯ'
CONSONANTS = 'БВГДЖЗЙКЛМНПРСТФХЦЧШЩ'


@dataclass(frozen=True)
class Preset:
    letters: str
    sample_words: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Rack:
    letters: str
    sample_words: Tuple[str, ...] = ()

    def as_list(self):
        return list(self.letters)


PRESETS: Tuple[Preset, ...] = (
    Preset('СТЕКЛО', ('СТОЛ', 'ЛЕС', 'СЕТ', 'ЛОТ', 'КОЛ', 'ТЕСЛО')),
    Preset('РАДИУС', ('РАД', 'СУД', 'РИС', 'ДУРА', 'УДАР', 'РАДИУС')),
    Preset('ПАРТОК', ('ПАР', 'ТОП', 'РОТ', 'ТОР', 'ПОТ', 'ПОРТ', 'КРОТ', 'ПАРК')),
    Preset('ЛАМПАД', ('ЛАД', 'ПАЛ', 'ЛАПА', 'ДАМА', 'ЛАМПА')),
    Preset('ГРУШАН', ('ШАР', 'УГАР', 'РАНГ', 'РУНА', 'ГРУША')),
    Preset('ПЕСЧАН', ('ПЕС', 'ПАН', 'САН', 'ЧАН', 'ПЕНА', 'СЕНА')),
    Preset('МОДЕЛЬ', ('ДОМ', 'ЛОМ', 'ЛЕД', 'МЕД', 'МЕЛ', 'ДЕЛО', 'МОДЕЛЬ')),
    Preset('ПРИМОР', ('ПИР', 'МИР', 'МОР', 'РОМ', 'ПРИОР')),
    Preset('ГОЛУБЬ', ('ГОЛ', 'ЛУГ', 'ЛОБ', 'ГУЛ', 'БОЛЬ', 'ГОЛУБЬ')),
    Preset('КЛЕВЕР', ('ЛЕВ', 'ВЕК', 'РЕВ', 'КЛЕВ', 'КЛЕВЕР')),
)


class PresetRackGenerator:
    """Uniform choice from a pool of curated presets."""

    def __init__(self, presets: Sequence[Preset] = PRESETS, rng: Optional[random.Random] = None):
        if not presets:
            raise ValueError('preset pool must not be empty')
        self.presets = tuple(presets)
        self._rng = rng or random.Random()

    def generate(self, exclude: Optional[str] = None) -> Rack:
        pool = [p for p in self.presets if p.letters != exclude] if exclude else list(self.presets)
        if not pool:
            # Single-preset pool: repeating the rack is the only option
            pool = list(self.presets)
        preset = self._rng.choice(pool)
        return Rack(preset.letters, preset.sample_words)

    def swap(self, previous: str) -> Rack:
        return self.generate(exclude=previous)

    def sample_words_for(self, letters: str) -> Tuple[str, ...]:
        for preset in self.presets:
            if preset.letters == letters:
                return preset.sample_words
        return ()


class RandomRackGenerator:
    """Random racks with at least ``min_vowels`` vowels.

    The remaining slots are drawn from a pool where each consonant appears
    twice and each vowel once, then the whole rack is shuffled.
    """

    def __init__(
        self,
        length: int = 6,
        min_vowels: int = 2,
        swap_attempts: int = 5,
        rng: Optional[random.Random] = None,
        vowels: str = VOWELS,
        consonants: str = CONSONANTS,
    ):
        if length < min_vowels:
            raise ValueError('rack length must cover the minimum vowel count')
        self.length = length
        self.min_vowels = min_vowels
        self.swap_attempts = max(1, swap_attempts)
        self.vowels = vowels
        self.consonants = consonants
        self._pool = consonants * 2 + vowels
        self._rng = rng or random.Random()

    def generate(self, exclude: Optional[str] = None) -> Rack:
        letters = [self._rng.choice(self.vowels) for _ in range(self.min_vowels)]
        letters += [self._rng.choice(self._pool) for _ in range(self.length - self.min_vowels)]
        self._rng.shuffle(letters)
        return Rack(''.join(letters))

    def swap(self, previous: str) -> Rack:
        rack = self.generate()
        attempts = 1
        while rack.letters == previous and attempts < self.swap_attempts:
            rack = self.generate()
            attempts += 1
        return rack

    def sample_words_for(self, letters: str) -> Tuple[str, ...]:
        return ()


def build_rack_generator(config) -> Union[PresetRackGenerator, RandomRackGenerator]:
    policy = (config.get('RACK_POLICY') or 'preset').lower()
    if policy == 'random':
        return RandomRackGenerator(
            length=int(config.get('RACK_LENGTH', 6)),
            swap_attempts=int(config.get('RACK_SWAP_ATTEMPTS', 5)),
        )
    if policy != 'preset':
        raise ValueError(f'Unknown RACK_POLICY: {policy}')
    return PresetRackGenerator()
