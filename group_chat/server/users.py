"""Read-only roster route."""
from typing import List

from fastapi import APIRouter, Request

from . import schemas

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=List[schemas.UserOut])
def list_users(request: Request):
    return request.app.state.registry.snapshot()
