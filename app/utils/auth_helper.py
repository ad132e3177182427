import os
from typing import Literal
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import jwt, JWTError
from pydantic import BaseModel, ValidationError


ALGORITHM = "HS256"


class CurrentUser(BaseModel):
    """Identity as asserted by the identity provider's token; not re-validated here."""

    id: str
    name: str
    role: Literal["finder", "claimer", "admin"]


bearer_scheme_required = HTTPBearer(auto_error=True)


def get_current_user_required(
    token: HTTPAuthorizationCredentials = Depends(bearer_scheme_required),
) -> CurrentUser:
    try:
        payload = jwt.decode(
            token.credentials,
            os.getenv("JWT_SECRET"),
            algorithms=[ALGORITHM],
        )
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    try:
        return CurrentUser(
            id=str(payload["sub"]),
            name=payload.get("name") or str(payload["sub"]),
            role=payload.get("role"),
        )
    except (KeyError, ValidationError):
        raise HTTPException(status_code=401, detail="Token is missing identity claims")


def require_admin(user: CurrentUser = Depends(get_current_user_required)) -> CurrentUser:
    if user.role != "admin":
        raise HTTPException(status_code=403, detail="Admin access required")
    return user


def require_member(user: CurrentUser = Depends(get_current_user_required)) -> CurrentUser:
    # finders and claimers can both report and claim
    if user.role not in ("finder", "claimer"):
        raise HTTPException(status_code=403, detail="Finder or claimer access required")
    return user
