import math

K = 32  # Elo K-factor, fixed for every match
INITIAL_RATING = 1600.0


def expected_score(rating, opponent_rating):
    try:
        r = math.pow(10, rating / 400)
        r_opponent = math.pow(10, opponent_rating / 400)
        return r / (r + r_opponent)
    except (OverflowError, ZeroDivisionError):
        # ratings far outside the usual range; same value, computed from the difference
        pass
    try:
        return 1 / (1 + math.pow(10, (opponent_rating - rating) / 400))
    except OverflowError:
        return 0.0


def calculate_elo(winner_elo, loser_elo):
    # the loser's expectation comes from its own rating, not 1 - expected_winner
    expected_winner = expected_score(winner_elo, loser_elo)
    expected_loser = expected_score(loser_elo, winner_elo)

    new_winner_elo = winner_elo + K * (1 - expected_winner)
    new_loser_elo = loser_elo - K * expected_loser

    return new_winner_elo, new_loser_elo
