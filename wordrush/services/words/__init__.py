"""Word round domain services: racks, dictionary, scoring and the round engine.

Imported by HTTP routes and socket handlers, keeping transport concerns
separated from the game mechanics.
"""

from .letters import LetterBag, normalize_word
from .racks import PRESETS, Preset, PresetRackGenerator, RandomRackGenerator, Rack, build_rack_generator
from .scoring import reward_words, score_words
from .dictionary import (
    CachedLookup,
    MemoryDictionaryCache,
    RemoteWordLookup,
    StaticWordLookup,
    WordListLookup,
    WordOracle,
    build_oracle,
)

__all__ = [
    'LetterBag',
    'normalize_word',
    'PRESETS',
    'Preset',
    'PresetRackGenerator',
    'RandomRackGenerator',
    'Rack',
    'build_rack_generator',
    'reward_words',
    'score_words',
    'CachedLookup',
    'MemoryDictionaryCache',
    'RemoteWordLookup',
    'StaticWordLookup',
    'WordListLookup',
    'WordOracle',
    'build_oracle',
]
