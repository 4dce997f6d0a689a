import enum
import uuid
from datetime import datetime

from sqlalchemy import JSON, Boolean, Column, Date, DateTime, String

from app.db.base import Base


class Role(str, enum.Enum):
    ADMIN = "admin"
    USER = "user"


def new_id() -> str:
    return uuid.uuid4().hex


class User(Base):
    """Registered account: credentials, role and the optional career profile."""

    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    # Unique index is the final arbiter for concurrent registrations
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    role = Column(String, nullable=False, default=Role.USER.value)  # 'admin' | 'user'
    is_active = Column(Boolean, nullable=False, default=True)

    # Personal details
    phone = Column(String)
    date_of_birth = Column(Date)
    gender = Column(String)
    address = Column(String)
    city = Column(String)
    state = Column(String)
    pincode = Column(String)

    # Professional details
    current_position = Column(String)
    experience = Column(String)
    skills = Column(String)
    education = Column(String)

    # Preferences
    expected_salary = Column(String)
    preferred_location = Column(String)
    job_type = Column(String)
    work_mode = Column(String)
    interested_services = Column(JSON, default=list)

    resume = Column(String, nullable=True)  # Relative path under the uploads root
    profile_completed = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
