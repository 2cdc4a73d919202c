"""Analytics schemas."""

from typing import List

from pydantic import BaseModel, Field


class NoteAnalytics(BaseModel):
    total_views: int
    recent_views: int = Field(description="Views inside the period")
    unique_viewers: int = Field(description="Distinct users who ever viewed the note")
    period: str


class ActivityCount(BaseModel):
    activity: str
    count: int


class UserAnalytics(BaseModel):
    total_activities: int
    recent_activities: int = Field(description="Activities inside the period")
    note_views: int = Field(description="Notes viewed by the user inside the period")
    activity_breakdown: List[ActivityCount]
    period: str


class SystemAnalytics(BaseModel):
    total_users: int
    active_users: int = Field(description="Users with any activity inside the period")
    total_notes: int
    total_views: int = Field(description="Note views inside the period")
    period: str
