"""Layered Russian dictionary.

``WordOracle`` holds an ordered list of lookups and accepts a word as soon as
one of them does. The layers built by ``build_oracle`` are, in order:

1. curated words (preset sample words plus a small built-in vocabulary),
2. a local word list loaded once from disk,
3. remote dictionaries behind a time-limited cache (optional).

Remote failures (timeouts, HTTP errors, malformed JSON) resolve to "not
found" and never propagate to the caller.
"""

import logging
import os
from datetime import datetime, timedelta
from urllib.parse import quote
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional, Sequence, Set, Tuple

import requests

from .racks import PRESETS

logger = logging.getLogger(__name__)

BUILTIN_WORDS = (
    'СТОЛ', 'ЛЕС', 'СЕТ', 'ЛОТ', 'КОЛ', 'ТЕСЛО', 'СЕЛО', 'СТОК', 'СОЛО', 'СЕКТ',
    'РАД', 'ДАР', 'СУД', 'РИС', 'ДУРА', 'ДАРЫ', 'САД', 'УДАР',
    'ПАР', 'РОТ', 'ТОР', 'ПОТ', 'КОРТ', 'ПОРТ', 'ТОП', 'ПАРК', 'КРОТ', 'ТРОП',
    'ДОМ', 'МОРЕ', 'НОС', 'СОН', 'ЛИС', 'СИЛА', 'ЛИСТ', 'СЛОН', 'ТАРА', 'РЯД', 'МЯЧ', 'КОТ', 'ТОК',
    'СОЛЬ', 'МЕЛ', 'ЛОМ', 'МОСТ', 'ЛЕН', 'ТЕЛО', 'КЛЁВ',
)

DICTIONARYAPI_URL = 'https://api.dictionaryapi.dev/api/v2/entries/ru/{word}'
WIKTIONARY_URL = 'https://ru.wiktionary.org/w/api.php'


def _normalize(word: str) -> str:
    return word.strip().upper()


class StaticWordLookup:
    """Fixed in-memory word set."""

    name = 'static'

    def __init__(self, words: Iterable[str]):
        self.words: FrozenSet[str] = frozenset(_normalize(w) for w in words if w and w.strip())

    def check(self, word: str) -> bool:
        return _normalize(word) in self.words


def load_word_list(path: str) -> Set[str]:
    """Read a line-oriented word list.

    Each line is either ``word`` or ``word frequency``; only the word is kept.
    A missing file yields an empty set.
    """
    if not path or not os.path.exists(path):
        logger.warning('[dictionary] word list not found path=%s, local layer is empty', path)
        return set()
    words = set()
    with open(path, encoding='utf-8-sig') as fh:
        for line in fh:
            token = line.strip().split(' ', 1)[0]
            token = token.strip().upper()
            if token:
                words.add(token)
    logger.info('[dictionary] loaded %d words from %s', len(words), path)
    return words


class WordListLookup(StaticWordLookup):
    name = 'word_list'

    def __init__(self, path: str):
        self.path = path
        super().__init__(load_word_list(path))


class MemoryDictionaryCache:
    """Process-local cache of remote answers with a fixed time to live.

    Holds at most ``max_entries`` words: when full, expired entries are
    dropped first and then the oldest insertions.
    """

    def __init__(self, ttl: timedelta = timedelta(days=7), clock: Callable[[], datetime] = datetime.utcnow,
                 max_entries: int = 10000):
        self.ttl = ttl
        self.max_entries = max_entries
        self._clock = clock
        self._entries: Dict[str, Tuple[bool, datetime]] = {}

    def __len__(self):
        return len(self._entries)

    def get(self, word: str) -> Optional[bool]:
        entry = self._entries.get(word)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at <= self._clock():
            self._entries.pop(word, None)
            return None
        return value

    def set(self, word: str, value: bool) -> None:
        now = self._clock()
        self._entries.pop(word, None)
        if len(self._entries) >= self.max_entries:
            self._entries = {w: e for w, e in self._entries.items() if e[1] > now}
        while len(self._entries) >= self.max_entries:
            self._entries.pop(next(iter(self._entries)))
        self._entries[word] = (value, now + self.ttl)


class RemoteWordLookup:
    """Queries public dictionaries over HTTP.

    ``lookup`` returns True/False when at least one source gave a definite
    answer and None when every source failed, so callers can avoid caching
    outages as negative results.
    """

    name = 'remote'

    def __init__(self, timeout: float = 5.0, user_agent: str = 'WordRush/1.0', session: Optional[requests.Session] = None):
        self.timeout = timeout
        self.user_agent = user_agent
        self.http = session or requests.Session()
        self.sources: List[Callable[[str], Optional[bool]]] = [self._dictionaryapi, self._wiktionary]

    def _get(self, url: str, params: Optional[dict] = None):
        return self.http.get(
            url,
            params=params,
            timeout=self.timeout,
            headers={'User-Agent': self.user_agent, 'Accept': 'application/json'},
        )

    def _dictionaryapi(self, word: str) -> Optional[bool]:
        response = self._get(DICTIONARYAPI_URL.format(word=quote(word.lower())))
        if response.status_code == 404:
            return False
        if not response.ok:
            return None
        data = response.json()
        return isinstance(data, list) and len(data) > 0

    def _wiktionary(self, word: str) -> Optional[bool]:
        response = self._get(WIKTIONARY_URL, params={'action': 'query', 'titles': word.lower(), 'format': 'json'})
        if not response.ok:
            return None
        pages = (response.json().get('query') or {}).get('pages') or {}
        return any('missing' not in page for page in pages.values())

    def lookup(self, word: str) -> Optional[bool]:
        word = _normalize(word)
        answered = False
        for source in self.sources:
            try:
                found = source(word)
            except (requests.RequestException, ValueError, AttributeError) as exc:
                logger.debug('[dictionary-remote] source=%s word=%s failed: %s', source.__name__, word, exc)
                continue
            if found:
                return True
            if found is not None:
                answered = True
        return False if answered else None

    def check(self, word: str) -> bool:
        return bool(self.lookup(word))


class CachedLookup:
    """Wraps a remote lookup with a cache keyed by the upper-cased word."""

    def __init__(self, inner: RemoteWordLookup, cache):
        self.inner = inner
        self.cache = cache
        self.name = f'cached_{inner.name}'

    def check(self, word: str) -> bool:
        key = _normalize(word)
        cached = self.cache.get(key)
        if cached is not None:
            return cached
        result = self.inner.lookup(key)
        if result is None:
            return False
        self.cache.set(key, result)
        return result


class WordOracle:
    """Short-circuit OR over an ordered list of lookups."""

    def __init__(self, lookups: Sequence):
        self.lookups = list(lookups)
        words: Set[str] = set()
        for lookup in self.lookups:
            if isinstance(lookup, StaticWordLookup):
                words |= lookup.words
        self._local_words = frozenset(words)

    def exists(self, word: str) -> bool:
        word = _normalize(word)
        if not word:
            return False
        for lookup in self.lookups:
            if lookup.check(word):
                return True
        return False

    def local_words(self) -> FrozenSet[str]:
        """All words held in memory by static layers (used for hints)."""
        return self._local_words


def curated_words(presets=PRESETS) -> Set[str]:
    words = {w for preset in presets for w in preset.sample_words}
    words.update(BUILTIN_WORDS)
    return words


def build_oracle(config, cache=None) -> WordOracle:
    """Assemble the dictionary layers from application config."""
    lookups: list = [
        StaticWordLookup(curated_words()),
        WordListLookup(config.get('WORDLIST_PATH')),
    ]
    if config.get('REMOTE_DICTIONARY_ENABLED'):
        if cache is None:
            cache = MemoryDictionaryCache(ttl=timedelta(days=int(config.get('DICTIONARY_CACHE_DAYS', 7))))
        remote = RemoteWordLookup(
            timeout=float(config.get('REMOTE_DICTIONARY_TIMEOUT_SEC', 5)),
            user_agent=config.get('DICTIONARY_USER_AGENT', 'WordRush/1.0'),
        )
        lookups.append(CachedLookup(remote, cache))
    return WordOracle(lookups)
