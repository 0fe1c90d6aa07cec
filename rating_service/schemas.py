from pydantic import BaseModel
from typing import Dict


class MatchResult(BaseModel):
    winner: str
    loser: str


class MatchResponse(BaseModel):
    message: str
    winner: str
    winner_new_rating: int
    loser: str
    loser_new_rating: int


class PlayerRegistered(BaseModel):
    message: str
    rating: int


# Ratings are served as a plain mapping of player name to truncated rating
Ratings = Dict[str, int]
