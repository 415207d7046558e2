# hydroscan/services/user_service.py
from sqlalchemy.orm import Session

from hydroscan.data.database import transaction
from hydroscan.data.models.user import UserModel
from hydroscan.domain.errors import NotFound
from hydroscan.domain.schemas import UserCreate, UserRead
from hydroscan.repos.user_repo import UserRepo


class UserService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = UserRepo(db)

    def create_user(self, payload: UserCreate) -> UserRead:
        existing = self.repo.get_user(payload.id)
        if existing:
            return UserRead.model_validate(existing)

        user = UserModel(
            id=payload.id,
            full_name=payload.full_name,
            address=payload.address,
            phone_number=payload.phone_number,
        )
        with transaction(self.db):
            created = self.repo.create_user(user)
        return UserRead.model_validate(created)

    def get_user(self, user_id: str) -> UserRead:
        user = self.repo.get_user(user_id)
        if not user:
            raise NotFound("User not found")
        return UserRead.model_validate(user)
