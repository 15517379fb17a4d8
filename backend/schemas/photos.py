"""Photo upload response schema."""
from pydantic import BaseModel


class PhotoUploadResponse(BaseModel):
    """Stored path and the public URL it is served from."""

    path: str
    url: str
