# hydroscan/api/routers/users.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from hydroscan.api.errors import to_http
from hydroscan.data.database import get_db
from hydroscan.domain.errors import HydroScanError
from hydroscan.domain.schemas import UserCreate, UserRead
from hydroscan.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/", response_model=UserRead)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    service = UserService(db)
    try:
        return service.create_user(payload)
    except HydroScanError as e:
        raise to_http(e)


@router.get("/{user_id}", response_model=UserRead)
def get_user(user_id: str, db: Session = Depends(get_db)):
    service = UserService(db)
    try:
        return service.get_user(user_id)
    except HydroScanError as e:
        raise to_http(e)
