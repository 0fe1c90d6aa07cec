import logging
import math

from redis.exceptions import RedisError, WatchError

from rating_service.elo import INITIAL_RATING
from rating_service.errors import ConcurrentUpdate, StoreUnavailable

logger = logging.getLogger(__name__)


def parse_rating(value):
    """Return the stored value as a float, or None if it is not a finite number."""
    try:
        rating = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(rating):
        return None
    return rating


class RatingStore:
    """Ratings table kept in a single Redis hash, keyed by player name.

    Each call borrows a connection from the client's pool for one command
    (or one transaction) and hands it back whether or not the command fails.
    Redis failures surface as StoreUnavailable; nothing is retried.
    """

    def __init__(self, client, key="elo"):
        self.client = client
        self.key = key

    async def get_all_ratings(self):
        try:
            raw = await self.client.hgetall(self.key)
        except RedisError as e:
            logger.error("Could not read ratings from %s: %s", self.key, e)
            raise StoreUnavailable("Could not retrieve elos from redis") from e

        ratings = {}
        for player, value in raw.items():
            rating = parse_rating(value)
            if rating is None:
                logger.warning("Purging unparseable rating %r for player %r", value, player)
                try:
                    await self.delete_rating(player)
                except StoreUnavailable:
                    # still omitted; the next read tries the purge again
                    logger.warning("Could not purge rating for %r, leaving it in place", player)
            else:
                ratings[player] = rating
        return ratings

    async def set_rating(self, player, rating):
        try:
            await self.client.hset(self.key, player, rating)
        except RedisError as e:
            logger.error("Could not write rating for %r: %s", player, e)
            raise StoreUnavailable(f"Could not write rating for {player}") from e

    async def set_ratings(self, ratings):
        try:
            await self.client.hset(self.key, mapping=ratings)
        except RedisError as e:
            logger.error("Could not write ratings for %s: %s", sorted(ratings), e)
            raise StoreUnavailable("Could not update ELO stats") from e

    async def register_player(self, player):
        # overwrites whatever rating the player already had
        await self.set_rating(player, INITIAL_RATING)

    async def delete_rating(self, player):
        try:
            await self.client.hdel(self.key, player)
        except RedisError as e:
            logger.error("Could not delete rating for %r: %s", player, e)
            raise StoreUnavailable(f"Could not delete rating for {player}") from e

    async def update_ratings_atomically(self, compute):
        """Read the table, apply ``compute`` and write its result in one transaction.

        ``compute`` receives the current ratings and returns the mapping to
        write. If anything else writes to the hash between the read and the
        write, the transaction is discarded and ConcurrentUpdate is raised.
        Corrupt entries are skipped here; the next plain read purges them.
        """
        try:
            async with self.client.pipeline(transaction=True) as pipe:
                await pipe.watch(self.key)
                raw = await pipe.hgetall(self.key)
                ratings = {}
                for player, value in raw.items():
                    rating = parse_rating(value)
                    if rating is not None:
                        ratings[player] = rating

                updates = compute(ratings)

                pipe.multi()
                pipe.hset(self.key, mapping=updates)
                await pipe.execute()
        except WatchError as e:
            logger.warning("Ratings in %s changed during update, discarding", self.key)
            raise ConcurrentUpdate("Ratings changed during update") from e
        except RedisError as e:
            logger.error("Could not update ratings in %s: %s", self.key, e)
            raise StoreUnavailable("Could not update ELO stats") from e
        return updates
