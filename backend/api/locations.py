"""Location API routes. Every query is scoped to the signed-in owner."""
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from api.identity import CurrentUser, get_current_user
from db import get_db
from map_core.location import Location as CoreLocation
from repositories.location_repository import create_location as repo_create_location
from repositories.location_repository import delete_location as repo_delete_location
from repositories.location_repository import get_location as repo_get_location
from repositories.location_repository import list_locations as repo_list_locations
from repositories.location_repository import update_location as repo_update_location
from schemas.locations import LocationCreate, LocationResponse, LocationUpdate

LOG = logging.getLogger(__name__)

router = APIRouter(prefix="/locations", tags=["locations"])


def _location_to_response(loc) -> LocationResponse:
    """Build LocationResponse from model instance."""
    return LocationResponse(
        id=loc.id,
        owner_id=loc.owner_id,
        name=loc.name,
        latitude=loc.latitude,
        longitude=loc.longitude,
        category=loc.category,
        visited_date=loc.visited_date,
        notes=loc.notes,
        album_link=loc.album_link,
        photo_urls=list(loc.photo_urls or []),
    )


@router.get("", response_model=list[LocationResponse])
def list_locations(
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[LocationResponse]:
    """List the user's locations, newest visit first."""
    return [_location_to_response(loc) for loc in repo_list_locations(db, user.id)]


@router.post("", response_model=LocationResponse, status_code=status.HTTP_201_CREATED)
def create_location(
    body: LocationCreate,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> LocationResponse:
    """Create a location owned by the user."""
    loc = repo_create_location(db, owner_id=user.id, **body.model_dump())
    LOG.info("Location %s created for %s", loc.id, user.id)
    return _location_to_response(loc)


@router.get("/{location_id}", response_model=LocationResponse)
def get_location(
    location_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> LocationResponse:
    """Get one of the user's locations."""
    loc = repo_get_location(db, user.id, location_id)
    if loc is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Location not found")
    return _location_to_response(loc)


@router.patch("/{location_id}", response_model=LocationResponse)
def update_location(
    location_id: str,
    body: LocationUpdate,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> LocationResponse:
    """Update mutable fields. Fields left out of the body are unchanged."""
    fields = body.model_dump(exclude_unset=True)
    if "name" in fields and fields["name"] is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="name is required")
    if "category" in fields and fields["category"] is None:
        del fields["category"]
    loc = repo_update_location(db, user.id, location_id, fields)
    if loc is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Location not found")
    LOG.info("Location %s updated (%s)", loc.id, ", ".join(sorted(fields)) or "no fields")
    return _location_to_response(loc)


@router.delete("/{location_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_location(
    location_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> None:
    """Delete one of the user's locations. Uploaded photos are left in storage."""
    if not repo_delete_location(db, user.id, location_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Location not found")
    LOG.info("Location %s deleted", location_id)


def location_to_core(loc) -> CoreLocation:
    """Model instance as the workflow record used by stats and export."""
    return CoreLocation(
        id=loc.id,
        owner_id=loc.owner_id,
        name=loc.name,
        latitude=loc.latitude,
        longitude=loc.longitude,
        category=loc.category,
        visited_date=loc.visited_date,
        notes=loc.notes,
        album_link=loc.album_link,
        photo_urls=list(loc.photo_urls or []),
    )
