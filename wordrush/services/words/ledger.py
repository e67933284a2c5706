from datetime import date

from wordrush import db
from wordrush.errors import InsufficientCurrency, NoSwapsAvailable, PlayerNotFound
from wordrush.models import User


class AccountLedger:
    """Gem balance and swap credits of player accounts.

    Methods only stage changes on the SQLAlchemy session; the caller commits,
    so a round operation and its ledger side effects land in one transaction.
    Accounts are loaded ``FOR UPDATE`` to serialize concurrent requests from
    the same player on databases that support row locks.
    """

    def __init__(self, free_swaps_per_day: int = 3):
        self.free_swaps_per_day = free_swaps_per_day

    def account(self, player_id: int) -> User:
        user = User.query.filter_by(id=player_id).with_for_update().first()
        if user is None:
            raise PlayerNotFound()
        return user

    def get_balance(self, player_id: int) -> int:
        return self.account(player_id).gems

    def debit(self, player_id: int, amount: int) -> int:
        user = self.account(player_id)
        if user.gems < amount:
            raise InsufficientCurrency(f'Not enough gems (need {amount})', required=amount, balance=user.gems)
        user.gems -= amount
        db.session.add(user)
        return user.gems

    def credit(self, player_id: int, amount: int) -> int:
        user = self.account(player_id)
        user.gems += max(0, amount)
        db.session.add(user)
        return user.gems

    def get_swap_credits(self, player_id: int) -> int:
        return self.account(player_id).free_swaps_left

    def consume_swap_credit(self, player_id: int) -> int:
        user = self.account(player_id)
        if user.free_swaps_left <= 0:
            raise NoSwapsAvailable()
        user.free_swaps_left -= 1
        db.session.add(user)
        return user.free_swaps_left

    def add_swap_credits(self, player_id: int, count: int) -> int:
        user = self.account(player_id)
        user.free_swaps_left += count
        db.session.add(user)
        return user.free_swaps_left

    def daily_reset_if_needed(self, player_id: int, today: date) -> bool:
        """Top free swaps back up once per calendar day.

        Only accounts below the daily allotment are reset, so purchased
        credits above it are never taken away.
        """
        user = self.account(player_id)
        if user.last_free_reset_at != today and user.free_swaps_left < self.free_swaps_per_day:
            user.free_swaps_left = self.free_swaps_per_day
            user.last_free_reset_at = today
            db.session.add(user)
            return True
        return False

    def record_game(self, player_id: int, score: int, reward: int) -> User:
        user = self.account(player_id)
        user.gems += reward
        user.total_gems += reward
        user.total_games += 1
        user.best_score = max(user.best_score or 0, score)
        db.session.add(user)
        return user

    def buy_swaps(self, player_id: int, pack: int, cost: int) -> User:
        self.debit(player_id, cost)
        self.add_swap_credits(player_id, pack)
        return self.account(player_id)
