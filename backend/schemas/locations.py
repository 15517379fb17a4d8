"""Pydantic schemas for location API."""
from datetime import date
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from map_core.categories import CATEGORY_IDS, DEFAULT_CATEGORY


def _check_name(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if not value:
        raise ValueError("name is required")
    return value


def _check_category(value: Optional[str]) -> Optional[str]:
    if value is not None and value not in CATEGORY_IDS:
        raise ValueError(f"unknown category '{value}'")
    return value


class LocationCreate(BaseModel):
    """Payload for creating a location. Owner comes from the session, not the body."""

    name: str = Field(..., max_length=255)
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    category: str = DEFAULT_CATEGORY
    visited_date: Optional[date] = None
    notes: Optional[str] = None
    album_link: Optional[str] = Field(None, max_length=1024)
    photo_urls: list[str] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        return _check_name(v)

    @field_validator("category")
    @classmethod
    def category_known(cls, v: str) -> str:
        return _check_category(v)


class LocationUpdate(BaseModel):
    """Payload for PATCH: mutable fields only. Coordinates cannot change."""

    name: Optional[str] = Field(None, max_length=255)
    category: Optional[str] = None
    visited_date: Optional[date] = None
    notes: Optional[str] = None
    album_link: Optional[str] = Field(None, max_length=1024)
    photo_urls: Optional[list[str]] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: Optional[str]) -> Optional[str]:
        return _check_name(v)

    @field_validator("category")
    @classmethod
    def category_known(cls, v: Optional[str]) -> Optional[str]:
        return _check_category(v)


class LocationResponse(BaseModel):
    """Location in API responses."""

    id: str
    owner_id: str
    name: str
    latitude: float
    longitude: float
    category: str
    visited_date: Optional[date] = None
    notes: Optional[str] = None
    album_link: Optional[str] = None
    photo_urls: list[str] = Field(default_factory=list)
