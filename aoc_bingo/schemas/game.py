from pydantic import BaseModel, Field
from datetime import datetime


class GameCreate(BaseModel):
    leaderboard_id: int = Field(..., description="Private leaderboard the game is played on")
    session_token: str = Field(..., min_length=1, description="Upstream session cookie")


class GameResponse(BaseModel):
    id: str
    leaderboard_id: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class MembershipCreate(BaseModel):
    member_id: int = Field(..., description="Leaderboard member ID")
    member_name: str = Field(..., min_length=1, max_length=100)


class MembershipResponse(BaseModel):
    id: int
    game_id: str
    member_id: int
    member_name: str
    created_at: datetime

    class Config:
        from_attributes = True
