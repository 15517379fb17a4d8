"""Session identity from the upstream auth layer."""
from dataclasses import dataclass
from typing import Optional

from fastapi import Header, HTTPException, status


@dataclass(frozen=True)
class CurrentUser:
    id: str
    email: str = ""


def get_current_user(
    x_user_id: Optional[str] = Header(None),
    x_user_email: Optional[str] = Header(None),
) -> CurrentUser:
    """FastAPI dependency: the signed-in user, or 401 when the request carries no identity."""
    user_id = (x_user_id or "").strip()
    if not user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not signed in")
    return CurrentUser(id=user_id, email=(x_user_email or "").strip())
