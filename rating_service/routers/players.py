from fastapi import APIRouter, Depends, HTTPException
import logging

from rating_service.database import get_service
from rating_service.elo import INITIAL_RATING
from rating_service.errors import StoreError
from rating_service.schemas import PlayerRegistered, Ratings
from rating_service.service import MatchService

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/new/{player}", response_model=PlayerRegistered)
async def add_player(player: str, service: MatchService = Depends(get_service)):
    try:
        await service.register_player(player)
    except StoreError as e:
        logger.error("Error registering player %s: %s", player, e)
        raise HTTPException(status_code=500, detail="Could not connect to redis")

    logger.info("Player %s registered at %s", player, INITIAL_RATING)
    return {"message": f"Player {player} added successfully!", "rating": int(INITIAL_RATING)}


@router.get("/elo", response_model=Ratings)
async def get_ratings(service: MatchService = Depends(get_service)):
    try:
        return await service.get_all_ratings_truncated()
    except StoreError as e:
        logger.error("Error fetching ratings: %s", e)
        raise HTTPException(status_code=500, detail=e.message)


@router.get("/elo/{player}", response_model=Ratings)
async def get_player_rating(player: str, service: MatchService = Depends(get_service)):
    try:
        rating = await service.get_rating(player)
    except StoreError as e:
        logger.error("Error fetching rating for %s: %s", player, e)
        raise HTTPException(status_code=500, detail=e.message)

    return {player: rating}
