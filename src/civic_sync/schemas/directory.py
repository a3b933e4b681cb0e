"""Pydantic v2 schemas for the officials and counties read endpoints."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

DirectorySource = Literal["canonical", "fallback"]


class OfficialResponse(BaseModel):
    """An elected official as served to the front end."""

    model_config = {"from_attributes": True}

    name: str
    office: str
    party: str | None = None
    state: str
    state_abbreviation: str
    bioguide_id: str | None = None
    district: str | None = None
    congress_url: str | None = None
    data_source: str
    last_updated: datetime


class CountyResponse(BaseModel):
    """A county with its population estimate."""

    model_config = {"from_attributes": True}

    name: str
    state: str
    state_abbreviation: str
    county_fips: str
    state_fips: str
    full_fips: str
    population: int
    data_source: str
    last_updated: datetime


class OfficialListResponse(BaseModel):
    """Officials for one state, flagged with the store they were read from."""

    state: str
    source: DirectorySource = Field(description="canonical, or fallback when the canonical store had no rows")
    officials: list[OfficialResponse]


class CountyListResponse(BaseModel):
    """Counties for one state, flagged with the store they were read from."""

    state: str
    source: DirectorySource = Field(description="canonical, or fallback when the canonical store had no rows")
    counties: list[CountyResponse]
