import logging
from fastapi import HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session

from auth import hash_password, verify_password, is_password_hash, create_access_token
from database import row_to_dict
from user_models import User

logger = logging.getLogger(__name__)

STAFF_ROLES = ("driver", "accountant")
PUBLIC_FIELDS = ("id", "name", "email", "role", "is_active", "created_at", "update_at")


def public_user(user: User) -> dict:
    return {field: getattr(user, field) for field in PUBLIC_FIELDS}


def staff_dict(user: User) -> dict:
    data = row_to_dict(user, exclude=("password", "employe_number"))
    data["employee_number"] = user.employe_number
    return data


def _email_taken(db: Session, email: str, exclude_id: int = None) -> bool:
    query = db.query(User).filter(func.lower(User.email) == email.lower())
    if exclude_id is not None:
        query = query.filter(User.id != exclude_id)
    return db.query(query.exists()).scalar()


# auth

def login(db: Session, email: str, password: str) -> dict:
    user = db.query(User).filter(func.lower(User.email) == email.lower()).first()
    if not user:
        logger.warning("login failed: no user for %s", email)
        raise HTTPException(status_code=401, detail="User not found")
    if not user.is_active:
        logger.warning("login refused: user %s is inactive", user.id)
        raise HTTPException(status_code=403, detail="User is inactive")
    if not verify_password(password, user.password):
        logger.warning("login failed: bad password for user %s", user.id)
        raise HTTPException(status_code=401, detail="Invalid credentials")

    token = create_access_token({"sub": str(user.id), "role": user.role})
    logger.info("user %s logged in", user.id)
    return {"token": token, "role": user.role, "name": user.name}


# users (admin)

def create_user(db: Session, data: dict) -> dict:
    if _email_taken(db, data["email"]):
        raise HTTPException(status_code=409, detail="Email already registered")
    data = dict(data, password=hash_password(data["password"]))
    user = User(**data)
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("created user %s with role %s", user.id, user.role)
    return public_user(user)


def list_users(db: Session) -> list:
    return [public_user(u) for u in db.query(User).order_by(User.id).all()]


def get_user_or_404(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def get_profile(db: Session, user_id: int) -> dict:
    return row_to_dict(get_user_or_404(db, user_id), exclude=("password",))


def update_user(db: Session, user_id: int, patch: dict) -> dict:
    user = get_user_or_404(db, user_id)
    patch = {key: value for key, value in patch.items() if value is not None}
    if patch.get("email") and _email_taken(db, patch["email"], exclude_id=user_id):
        raise HTTPException(status_code=409, detail="Email already registered")
    if patch.get("password"):
        patch["password"] = hash_password(patch["password"])
    for key, value in patch.items():
        setattr(user, key, value)
    db.commit()
    db.refresh(user)
    return public_user(user)


# staff

def list_staff(db: Session) -> list:
    staff = (
        db.query(User)
        .filter(func.lower(User.role).in_(STAFF_ROLES))
        .order_by(User.id.desc())
        .all()
    )
    return [staff_dict(u) for u in staff]


def next_employee_number(db: Session, role: str) -> str:
    role = (role or "").lower()
    prefix = "EMP-DRV-" if role == "driver" else "EMP-ACC-"
    last = (
        db.query(User.employe_number)
        .filter(func.lower(User.role) == role, User.employe_number.isnot(None))
        .order_by(User.id.desc())
        .first()
    )
    if not last:
        return f"{prefix}001"
    try:
        last_number = int(last[0].rsplit("-", 1)[-1])
    except ValueError:
        last_number = 0
    return f"{prefix}{last_number + 1:03d}"


def add_staff(db: Session, data: dict) -> dict:
    role = data["role"].lower()
    if role not in STAFF_ROLES:
        raise HTTPException(status_code=400, detail="Staff role must be driver or accountant")
    if _email_taken(db, data["email"]):
        raise HTTPException(status_code=409, detail="Email already registered")

    password = data["password"]
    if not is_password_hash(password):
        password = hash_password(password)

    user = User(
        name=data["name"],
        address=data.get("address"),
        mobile=data.get("mobile"),
        role=role,
        nic=data.get("nic"),
        employe_number=data.get("employee_number") or next_employee_number(db, role),
        email=data["email"],
        password=password,
        is_active=data.get("is_active", True),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("added staff member %s (%s)", user.id, user.employe_number)
    return {
        "id": user.id,
        "name": user.name,
        "role": user.role,
        "email": user.email,
        "employee_number": user.employe_number,
    }


def get_staff_or_404(db: Session, staff_id: int) -> User:
    user = db.get(User, staff_id)
    if not user or user.role.lower() not in STAFF_ROLES:
        raise HTTPException(status_code=404, detail="Staff not found")
    return user


def update_staff(db: Session, staff_id: int, patch: dict) -> dict:
    user = get_staff_or_404(db, staff_id)
    patch = {key: value for key, value in patch.items() if value is not None}
    if patch.get("email") and _email_taken(db, patch["email"], exclude_id=staff_id):
        raise HTTPException(status_code=409, detail="Email already registered")
    password = patch.pop("password", None)
    if password:
        user.password = password if is_password_hash(password) else hash_password(password)
    for key, value in patch.items():
        setattr(user, key, value)
    db.commit()
    db.refresh(user)
    return {
        "id": user.id,
        "name": user.name,
        "role": user.role,
        "email": user.email,
        "employee_number": user.employe_number,
    }


def delete_staff(db: Session, staff_id: int):
    user = get_staff_or_404(db, staff_id)
    db.delete(user)
    db.commit()
    logger.info("deleted staff member %s", staff_id)
