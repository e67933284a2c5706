import random
from datetime import date, datetime, timedelta

import pytest

from wordrush import db
from wordrush.errors import InsufficientCurrency, NoSwapsAvailable, SessionCompleted, WordRejected
from wordrush.models import GameSession, User
from wordrush.services.words import RandomRackGenerator, StaticWordLookup, WordOracle
from wordrush.services.words.engine import RoundEngine
from wordrush.services.words.ledger import AccountLedger

TODAY = date(2026, 2, 9)


def make_user(**fields):
    user = User(username=fields.pop('username', 'lera'), gems=0, free_swaps_left=3, last_free_reset_at=TODAY)
    user.set_password('secret123')
    for key, value in fields.items():
        setattr(user, key, value)
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture()
def engine(app_ctx):
    return RoundEngine.from_app(app_ctx)


def test_daily_reset_uses_the_given_date(app_ctx):
    ledger = AccountLedger(free_swaps_per_day=3)
    user = make_user(free_swaps_left=0, last_free_reset_at=TODAY - timedelta(days=1))

    assert ledger.daily_reset_if_needed(user.id, TODAY) is True
    db.session.commit()
    assert user.free_swaps_left == 3
    assert user.last_free_reset_at == TODAY

    user.free_swaps_left = 0
    db.session.commit()
    assert ledger.daily_reset_if_needed(user.id, TODAY) is False
    assert user.free_swaps_left == 0


def test_daily_reset_keeps_purchased_credits(app_ctx):
    ledger = AccountLedger(free_swaps_per_day=3)
    user = make_user(free_swaps_left=10, last_free_reset_at=TODAY - timedelta(days=3))
    assert ledger.daily_reset_if_needed(user.id, TODAY) is False
    assert user.free_swaps_left == 10


def test_ledger_debit_and_swap_credit_errors(app_ctx):
    ledger = AccountLedger()
    user = make_user(gems=40, free_swaps_left=0)
    with pytest.raises(InsufficientCurrency):
        ledger.debit(user.id, 50)
    with pytest.raises(NoSwapsAvailable):
        ledger.consume_swap_credit(user.id)
    assert ledger.credit(user.id, 10) == 50
    assert ledger.debit(user.id, 50) == 0


def test_swap_resets_free_swaps_on_a_new_day(engine):
    user = make_user(free_swaps_left=0, last_free_reset_at=TODAY - timedelta(days=1))
    view = engine.start(user.id, today=TODAY)
    assert view.user.free_swaps_left == 3
    swapped = engine.swap(user.id, view.session.id, today=TODAY)
    assert swapped.user.free_swaps_left == 2
    assert swapped.session.swaps_used == 1


def test_swap_fails_with_zero_credits(engine):
    user = make_user(free_swaps_left=0, gems=5000)
    view = engine.start(user.id, today=TODAY)
    with pytest.raises(NoSwapsAvailable):
        engine.swap(user.id, view.session.id, today=TODAY)


def test_submit_is_idempotent(engine):
    user = make_user()
    session_id = engine.start(user.id, today=TODAY).session.id
    first = engine.submit(user.id, session_id, ['РАД', 'СУД'], 45)
    assert (first.session.score, first.session.gems_earned, first.frozen) == (300, 6, False)

    second = engine.submit(user.id, session_id, ['РАДИУС'], 10)
    assert second.frozen is True
    assert (second.session.score, second.session.gems_earned) == (300, 6)
    assert second.session.duration_seconds == 45
    assert db.session.get(User, user.id).total_games == 1


def test_check_word(engine):
    user = make_user()
    session_id = engine.start(user.id, today=TODAY).session.id
    assert engine.check_word(user.id, session_id, ' удар ') == 'УДАР'
    with pytest.raises(WordRejected):
        engine.check_word(user.id, session_id, 'ДОМ')
    # Buildable but unknown to every dictionary layer
    with pytest.raises(WordRejected):
        engine.check_word(user.id, session_id, 'ДИУС')


def test_expire_finalizes_an_active_round(engine):
    user = make_user()
    session_id = engine.start(user.id, today=TODAY).session.id
    expired = engine.expire(session_id)
    assert expired is not None
    assert expired.is_completed
    assert expired.score == 0
    assert expired.word_list == []

    assert engine.expire(session_id) is None
    late = engine.submit(user.id, session_id, ['РАД'], 30)
    assert late.frozen is True
    assert late.session.score == 0
    with pytest.raises(SessionCompleted):
        engine.swap(user.id, session_id, today=TODAY)


def test_completed_at_comes_from_the_engine_clock(app_ctx):
    stamp = datetime(2026, 2, 9, 12, 30)
    app_ctx.extensions['wordrush']['clock'] = lambda: stamp
    engine = RoundEngine.from_app(app_ctx)
    user = make_user()
    session_id = engine.start(user.id).session.id
    view = engine.submit(user.id, session_id, [], 0)
    assert view.session.completed_at == stamp
    assert db.session.get(GameSession, session_id).completed_at == stamp


def test_hints_for_random_racks_come_from_local_words(app_ctx):
    oracle = WordOracle([StaticWordLookup(['КОТ', 'ТОК', 'КТО', 'ОКО', 'РОТ', 'ТРОС', 'КОРТ'])])
    engine = RoundEngine(
        oracle=oracle,
        racks=RandomRackGenerator(rng=random.Random(1)),
        ledger=AccountLedger(),
        hint_limit=3,
    )
    assert engine.hints_for('КОТРЯЬ') == ['КОРТ', 'КОТ', 'КТО']
    assert engine.hints_for('ЭЭЭЭЭЭ') == []
