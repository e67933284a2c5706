from datetime import datetime, timedelta
from typing import Callable, Optional

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from wordrush import db
from wordrush.models import DictionaryCacheEntry


class DatabaseDictionaryCache:
    """Remote dictionary answers stored in the ``dictionary_cache`` table.

    Entries are shared by all players. Concurrent writers for the same word
    simply overwrite each other; a failed write is logged and ignored.
    """

    def __init__(self, ttl: timedelta = timedelta(days=7), clock: Callable[[], datetime] = datetime.utcnow):
        self.ttl = ttl
        self._clock = clock

    def get(self, word: str) -> Optional[bool]:
        entry = db.session.get(DictionaryCacheEntry, word)
        if entry is None or entry.expires_at <= self._clock():
            return None
        return entry.is_valid

    def set(self, word: str, value: bool) -> None:
        try:
            db.session.merge(DictionaryCacheEntry(word=word, is_valid=value, expires_at=self._clock() + self.ttl))
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            current_app.logger.warning(f"[dictionary-cache] write failed word={word}: {exc}")

    def purge_expired(self) -> int:
        removed = DictionaryCacheEntry.query.filter(DictionaryCacheEntry.expires_at <= self._clock()).delete()
        db.session.commit()
        return removed
