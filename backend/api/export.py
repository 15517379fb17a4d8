"""Map image export route."""
import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from api.identity import CurrentUser, get_current_user
from api.locations import location_to_core
from db import get_db
from map_core.category_filter import CategoryFilter
from map_core.export import ExportOptions, render_map_image
from repositories.location_repository import list_locations as repo_list_locations

LOG = logging.getLogger(__name__)

router = APIRouter(tags=["export"])


@router.get(
    "/export",
    response_class=Response,
    responses={200: {"content": {"image/png": {}, "image/jpeg": {}}}},
)
def export_map(
    format_: str = Query("png", alias="format"),
    quality: str = "high",
    size: str = "social",
    show_stats: bool = True,
    show_title: bool = True,
    show_watermark: bool = True,
    map_style: str = "light",
    theme: str = "modern",
    category: Optional[list[str]] = Query(None),
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Response:
    """Render the user's locations (optionally only the given categories) as an image."""
    try:
        options = ExportOptions(
            format=format_,
            quality=quality,
            size=size,
            show_stats=show_stats,
            show_title=show_title,
            show_watermark=show_watermark,
            map_style=map_style,
            theme=theme,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    locations = [location_to_core(loc) for loc in repo_list_locations(db, user.id)]
    if category:
        category_filter = CategoryFilter()
        try:
            category_filter.show_only(category)
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
        locations = category_filter.apply(locations)

    try:
        image = render_map_image(locations, options, user.email)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    LOG.info("Exported %d locations for %s (%s, %s)", len(locations), user.id, size, quality)
    filename = f"travel-map-{date.today().isoformat()}.{options.format}"
    return Response(
        content=image,
        media_type=options.media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
