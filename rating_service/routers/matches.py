from fastapi import APIRouter, Depends, HTTPException
import logging

from rating_service.database import get_service
from rating_service.errors import ConcurrentUpdate, PartialUpdate, SelfMatchError, StoreError
from rating_service.schemas import MatchResponse, MatchResult
from rating_service.service import MatchService

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/match", response_model=MatchResponse)
async def submit_match(result: MatchResult, service: MatchService = Depends(get_service)):
    logger.info("Received match submission: %s", result.model_dump())

    try:
        update = await service.record_match(result.winner, result.loser)
    except SelfMatchError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except ConcurrentUpdate as e:
        raise HTTPException(status_code=409, detail=e.message)
    except PartialUpdate as e:
        logger.error("Partial rating update: %s", e)
        raise HTTPException(status_code=500, detail="Could not update ELO stats")
    except StoreError as e:
        logger.error("Error recording match: %s", e)
        raise HTTPException(status_code=500, detail=e.message)

    return {
        "message": "Match successfully recorded",
        "winner": update.winner,
        "winner_new_rating": int(update.winner_rating),
        "loser": update.loser,
        "loser_new_rating": int(update.loser_rating),
    }
