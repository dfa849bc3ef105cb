from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from auth import require_roles
from database import get_db
from user_schema import CreateUser, UpdateUser
import user_service

# admin-only user management
router = APIRouter(prefix="/users", tags=["users"], dependencies=[Depends(require_roles("admin"))])


@router.post("", status_code=201)
def create_user(user: CreateUser, db: Session = Depends(get_db)):
    return user_service.create_user(db, user.model_dump())


@router.get("")
def list_users(db: Session = Depends(get_db)):
    return user_service.list_users(db)


@router.get("/{user_id}")
def get_user(user_id: int, db: Session = Depends(get_db)):
    return user_service.get_profile(db, user_id)


@router.patch("/{user_id}")
def update_user(user_id: int, user: UpdateUser, db: Session = Depends(get_db)):
    return user_service.update_user(db, user_id, user.model_dump(exclude_unset=True))
