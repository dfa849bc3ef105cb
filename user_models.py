from sqlalchemy import Column, Integer, String, Boolean, DateTime, CheckConstraint, func
from database import Base

ROLES = ("admin", "accountant", "driver")


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    address = Column(String(255))
    mobile = Column(String(50))
    role = Column(String(50), nullable=False)
    nic = Column(String(50))
    employe_number = Column(String(50), index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password = Column(String, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, server_default=func.now())
    update_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint(
            "role IN ('admin', 'accountant', 'driver')", name="check_user_role"
        ),
    )
