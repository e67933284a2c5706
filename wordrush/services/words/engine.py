"""Round engine: the lifecycle of one timed word round.

A session is ``active`` from start until it is finalized, either by the
player's submit or by the round timeout, after which it is ``completed`` and
never changes again. Every operation is scoped to the owning player.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Callable, Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from wordrush import db
from wordrush.errors import InvalidInput, SessionCompleted, SessionNotFound, TransientFailure, WordRejected
from wordrush.models import GameSession, User
from .dictionary import WordOracle
from .ledger import AccountLedger
from .letters import LetterBag, normalize_word
from .scoring import reward_words, score_words


@dataclass
class RoundView:
    session: GameSession
    user: User
    hint_words: List[str] = field(default_factory=list)
    frozen: bool = False

    def account_dict(self):
        return {'free_swaps_left': self.user.free_swaps_left, 'gems': self.user.gems}


class RoundEngine:
    def __init__(
        self,
        oracle: WordOracle,
        racks,
        ledger: AccountLedger,
        hint_cost: int = 100,
        min_word_length: int = 3,
        check_min_length: int = 2,
        max_word_length: int = 20,
        round_seconds: int = 100,
        hint_limit: int = 6,
        clock: Callable[[], datetime] = datetime.utcnow,
        logger: Optional[logging.Logger] = None,
    ):
        self.oracle = oracle
        self.racks = racks
        self.ledger = ledger
        self.hint_cost = hint_cost
        self.min_word_length = min_word_length
        self.check_min_length = check_min_length
        self.max_word_length = max_word_length
        self.round_seconds = round_seconds
        self.hint_limit = hint_limit
        self.clock = clock
        self.log = logger or logging.getLogger(__name__)

    @classmethod
    def from_app(cls, app) -> 'RoundEngine':
        cfg = app.config
        ext = app.extensions['wordrush']
        return cls(
            oracle=ext['oracle'],
            racks=ext['racks'],
            ledger=AccountLedger(free_swaps_per_day=int(cfg.get('FREE_SWAPS_PER_DAY', 3))),
            hint_cost=int(cfg.get('HINT_COST', 100)),
            min_word_length=int(cfg.get('MIN_WORD_LENGTH', 3)),
            check_min_length=int(cfg.get('CHECK_MIN_WORD_LENGTH', 2)),
            max_word_length=int(cfg.get('MAX_WORD_LENGTH', 20)),
            round_seconds=int(cfg.get('ROUND_SECONDS', 100)),
            hint_limit=int(cfg.get('HINT_LIMIT', 6)),
            clock=ext.get('clock') or datetime.utcnow,
            logger=app.logger,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _commit(self) -> None:
        try:
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            self.log.error(f"[round-commit-failed] {exc}")
            raise TransientFailure() from exc

    def _session(self, player_id: int, session_id, lock: bool = False) -> GameSession:
        try:
            session_id = int(session_id)
        except (TypeError, ValueError):
            raise InvalidInput('session_id must be an integer')
        query = GameSession.query.filter_by(id=session_id, user_id=player_id)
        if lock:
            query = query.with_for_update().populate_existing()
        session = query.first()
        if session is None:
            raise SessionNotFound()
        return session

    def _daily_reset(self, player_id: int, today: Optional[date]) -> None:
        if self.ledger.daily_reset_if_needed(player_id, today or self.clock().date()):
            self.log.info(f"[swap-reset] user={player_id} free_swaps={self.ledger.free_swaps_per_day}")
            self._commit()

    def is_acceptable(self, bag: LetterBag, word: str) -> bool:
        # Letter check first: it is cheap and spares remote lookups
        return bag.can_build(word) and self.oracle.exists(word)

    def filter_words(self, letters: str, words: Iterable[str]) -> List[str]:
        """Normalize, de-duplicate and keep only valid, buildable words."""
        bag = LetterBag(letters)
        seen = set()
        accepted = []
        for raw in words:
            word = normalize_word(raw)
            if word in seen:
                continue
            seen.add(word)
            if len(word) < self.min_word_length:
                continue
            if self.is_acceptable(bag, word):
                accepted.append(word)
        return accepted

    def hints_for(self, letters: str) -> List[str]:
        sample = self.racks.sample_words_for(letters)
        if sample:
            return list(sample)
        bag = LetterBag(letters)
        candidates = [
            w for w in self.oracle.local_words()
            if len(w) >= self.min_word_length and bag.can_build(w)
        ]
        candidates.sort(key=lambda w: (-len(w), w))
        return candidates[: self.hint_limit]

    def _validate_word(self, word) -> str:
        if not isinstance(word, str):
            raise InvalidInput('word must be a string')
        normalized = normalize_word(word)
        if not (self.check_min_length <= len(normalized) <= self.max_word_length):
            raise InvalidInput(
                f'word length must be between {self.check_min_length} and {self.max_word_length}'
            )
        return normalized

    def _validate_duration(self, duration_seconds) -> int:
        if isinstance(duration_seconds, bool) or not isinstance(duration_seconds, int):
            raise InvalidInput('duration_seconds must be an integer')
        if not (0 <= duration_seconds <= self.round_seconds):
            raise InvalidInput(f'duration_seconds must be between 0 and {self.round_seconds}')
        return duration_seconds

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def start(self, player_id: int, today: Optional[date] = None) -> RoundView:
        self._daily_reset(player_id, today)
        rack = self.racks.generate()
        session = GameSession(user_id=player_id, letters=rack.letters, hints_revealed=False)
        db.session.add(session)
        self._commit()
        user = db.session.get(User, player_id)
        self.log.info(f"[round-start] session={session.id} user={player_id} letters={session.letters}")
        return RoundView(session=session, user=user)

    def swap(self, player_id: int, session_id, today: Optional[date] = None) -> RoundView:
        self._daily_reset(player_id, today)
        session = self._session(player_id, session_id, lock=True)
        if session.is_completed:
            raise SessionCompleted()
        self.ledger.consume_swap_credit(player_id)
        previous = session.letters
        rack = self.racks.swap(previous)
        session.letters = rack.letters
        session.swaps_used += 1
        db.session.add(session)
        self._commit()
        user = db.session.get(User, player_id)
        self.log.info(
            f"[round-swap] session={session.id} user={player_id} {previous} -> {session.letters} "
            f"swaps_used={session.swaps_used} free_swaps_left={user.free_swaps_left}"
        )
        hints = self.hints_for(session.letters) if session.hints_revealed else []
        return RoundView(session=session, user=user, hint_words=hints)

    def reveal_hints(self, player_id: int, session_id) -> RoundView:
        session = self._session(player_id, session_id, lock=True)
        if session.is_completed:
            raise SessionCompleted()
        if not session.hints_revealed:
            self.ledger.debit(player_id, self.hint_cost)
            session.hints_revealed = True
            db.session.add(session)
            self._commit()
            self.log.info(f"[round-hints] session={session.id} user={player_id} charged={self.hint_cost}")
        user = db.session.get(User, player_id)
        return RoundView(session=session, user=user, hint_words=self.hints_for(session.letters))

    def check_word(self, player_id: int, session_id, word) -> str:
        normalized = self._validate_word(word)
        session = self._session(player_id, session_id)
        if not self.is_acceptable(LetterBag(session.letters), normalized):
            raise WordRejected(word=normalized)
        return normalized

    def submit(self, player_id: int, session_id, words, duration_seconds) -> RoundView:
        if words is None:
            words = []
        if not isinstance(words, list):
            raise InvalidInput('words must be a list')
        for word in words:
            if not isinstance(word, str) or not (self.check_min_length <= len(word.strip()) <= self.max_word_length):
                raise InvalidInput(
                    f'each word must be a string of {self.check_min_length} to {self.max_word_length} letters'
                )
        duration_seconds = self._validate_duration(duration_seconds)

        session = self._session(player_id, session_id)
        if session.is_completed:
            return RoundView(session=session, user=db.session.get(User, player_id), frozen=True)

        # Dictionary lookups may commit cache entries, so the rows are locked only afterwards
        accepted = self.filter_words(session.letters, words)

        session = self._session(player_id, session_id, lock=True)
        if session.is_completed:
            return RoundView(session=session, user=db.session.get(User, player_id), frozen=True)

        user = self._finalize(session, accepted, duration_seconds)
        self.log.info(
            f"[round-submit] session={session.id} user={player_id} words={len(accepted)}/{len(words)} "
            f"score={session.score} gems={session.gems_earned}"
        )
        return RoundView(session=session, user=user)

    def expire(self, session_id: int) -> Optional[GameSession]:
        """Finalize an abandoned round with no words. No-op once completed."""
        session = (
            GameSession.query.filter_by(id=session_id)
            .with_for_update()
            .populate_existing()
            .first()
        )
        if session is None or session.is_completed:
            return None
        self._finalize(session, [], self.round_seconds)
        self.log.info(f"[round-timeout] session={session.id} user={session.user_id}")
        return session

    def state(self, player_id: int, session_id) -> RoundView:
        session = self._session(player_id, session_id)
        hints = self.hints_for(session.letters) if session.hints_revealed else []
        return RoundView(
            session=session,
            user=db.session.get(User, player_id),
            hint_words=hints,
            frozen=session.is_completed,
        )

    def _finalize(self, session: GameSession, accepted: List[str], duration_seconds: int) -> User:
        score = score_words(accepted)
        reward = reward_words(accepted)
        session.words = json.dumps(accepted, ensure_ascii=False)
        session.score = score
        session.gems_earned = reward
        session.duration_seconds = duration_seconds
        session.completed_at = self.clock()
        db.session.add(session)
        user = self.ledger.record_game(session.user_id, score, reward)
        self._commit()
        return user
