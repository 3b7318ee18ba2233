"""Pydantic schemas for the watchlist API."""
from pydantic import BaseModel, ConfigDict, Field


class WatchlistChange(BaseModel):
    """Body of /api/watchlist/add and /api/watchlist/remove."""
    anime_id: int = Field(..., alias="animeId", gt=0, description="MyAnimeList anime ID")

    model_config = ConfigDict(populate_by_name=True)


class WatchlistCheckResponse(BaseModel):
    """Whether one anime is on the user's watchlist."""
    anime_id: int = Field(..., serialization_alias="animeId")
    in_watchlist: bool = Field(..., serialization_alias="inWatchlist")
