import logging
from dataclasses import dataclass

from rating_service.elo import INITIAL_RATING, calculate_elo
from rating_service.errors import PartialUpdate, SelfMatchError, StoreError

logger = logging.getLogger(__name__)

LAST_WRITER_WINS = "last-writer-wins"
OPTIMISTIC = "optimistic"
CONSISTENCY_MODES = (LAST_WRITER_WINS, OPTIMISTIC)


@dataclass
class MatchUpdate:
    winner: str
    loser: str
    winner_rating_before: float
    loser_rating_before: float
    winner_rating: float
    loser_rating: float


class MatchService:
    """Records match outcomes and serves ratings on top of a RatingStore.

    In ``last-writer-wins`` mode a match is read, computed and written in
    separate steps, so two concurrent matches touching the same player can
    overwrite each other. ``optimistic`` mode runs the same steps inside a
    watched transaction and rejects the match instead of losing an update.
    """

    def __init__(self, store, consistency=LAST_WRITER_WINS):
        if consistency not in CONSISTENCY_MODES:
            raise ValueError(f"Unknown consistency mode: {consistency!r}")
        self.store = store
        self.consistency = consistency

    async def record_match(self, winner, loser):
        if winner == loser:
            raise SelfMatchError(winner)

        if self.consistency == OPTIMISTIC:
            return await self._record_match_optimistic(winner, loser)

        ratings = await self.store.get_all_ratings()
        winner_elo = ratings.get(winner, INITIAL_RATING)
        loser_elo = ratings.get(loser, INITIAL_RATING)
        new_winner_elo, new_loser_elo = calculate_elo(winner_elo, loser_elo)

        # both writes are attempted even if the first one fails
        failed = []
        cause = None
        for player, rating in ((winner, new_winner_elo), (loser, new_loser_elo)):
            try:
                await self.store.set_rating(player, rating)
            except StoreError as e:
                failed.append(player)
                cause = e
        if failed:
            logger.error("Match %s beat %s left ratings inconsistent, failed writes: %s", winner, loser, failed)
            raise PartialUpdate(failed, cause) from cause

        return MatchUpdate(winner, loser, winner_elo, loser_elo, new_winner_elo, new_loser_elo)

    async def _record_match_optimistic(self, winner, loser):
        before = {}

        def compute(ratings):
            before[winner] = ratings.get(winner, INITIAL_RATING)
            before[loser] = ratings.get(loser, INITIAL_RATING)
            new_winner_elo, new_loser_elo = calculate_elo(before[winner], before[loser])
            return {winner: new_winner_elo, loser: new_loser_elo}

        updated = await self.store.update_ratings_atomically(compute)
        return MatchUpdate(winner, loser, before[winner], before[loser], updated[winner], updated[loser])

    async def register_player(self, player):
        await self.store.register_player(player)

    async def get_rating(self, player):
        ratings = await self.store.get_all_ratings()
        return int(ratings.get(player, INITIAL_RATING))

    async def get_all_ratings_truncated(self):
        ratings = await self.store.get_all_ratings()
        return {player: int(rating) for player, rating in ratings.items()}
