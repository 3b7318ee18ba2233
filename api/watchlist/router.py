"""Watchlist API endpoints: a per-user list of MyAnimeList anime ids."""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from api.auth.dependencies import get_current_user
from api.auth.schemas import SuccessResponse
from api.database import get_db
from api.models import User, WatchlistEntry
from api.watchlist.schemas import WatchlistChange, WatchlistCheckResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/watchlist", tags=["Watchlist"])


def _find_entry(db: Session, user_id: int, anime_id: int) -> WatchlistEntry | None:
    return (
        db.query(WatchlistEntry)
        .filter(
            WatchlistEntry.user_id == user_id,
            WatchlistEntry.anime_id == anime_id
        )
        .first()
    )


@router.get("", response_model=list[int])
async def list_watchlist(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Anime ids on the current user's watchlist, oldest first."""
    entries = (
        db.query(WatchlistEntry)
        .filter(WatchlistEntry.user_id == current_user.id)
        .order_by(WatchlistEntry.added_at.asc(), WatchlistEntry.id.asc())
        .all()
    )
    return [entry.anime_id for entry in entries]


@router.post("/add", response_model=SuccessResponse)
async def add_to_watchlist(
    change: WatchlistChange,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Add an anime; adding one that is already listed is a no-op."""
    if _find_entry(db, current_user.id, change.anime_id):
        return SuccessResponse()

    db.add(WatchlistEntry(user_id=current_user.id, anime_id=change.anime_id))
    try:
        db.commit()
    except IntegrityError:
        # Concurrent add of the same anime
        db.rollback()
        return SuccessResponse()

    logger.info(f"User {current_user.id} added anime {change.anime_id} to watchlist")
    return SuccessResponse()


@router.post("/remove", response_model=SuccessResponse)
async def remove_from_watchlist(
    change: WatchlistChange,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Remove an anime; removing one that is not listed is a no-op."""
    entry = _find_entry(db, current_user.id, change.anime_id)
    if entry is not None:
        db.delete(entry)
        db.commit()
        logger.info(f"User {current_user.id} removed anime {change.anime_id} from watchlist")
    return SuccessResponse()


@router.get("/check/{anime_id}", response_model=WatchlistCheckResponse)
async def check_watchlist(
    anime_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Check if an anime is on the user's watchlist."""
    exists = _find_entry(db, current_user.id, anime_id) is not None
    return WatchlistCheckResponse(anime_id=anime_id, in_watchlist=exists)
