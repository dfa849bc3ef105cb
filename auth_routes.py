from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from auth import get_current_user
from database import get_db
from user_models import User
from user_schema import LoginUser
import user_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login")
def login_user(user: LoginUser, db: Session = Depends(get_db)):
    return user_service.login(db, user.email, user.password)


@router.get("/me")
def read_my_info(current_user: User = Depends(get_current_user)):
    return {"id": current_user.id, "role": current_user.role}
