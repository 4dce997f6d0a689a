from datetime import datetime

from sqlalchemy import JSON, Boolean, Column, DateTime, Integer, String, Text

from app.db.base import Base
from app.models.user import new_id


class Service(Base):
    """A consultancy offering shown on the landing page."""

    __tablename__ = "services"

    id = Column(String(32), primary_key=True, default=new_id)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    icon = Column(String, default="Shield")
    color = Column(String, default="from-red-500 to-pink-600")
    features = Column(JSON, default=list)
    active = Column(Boolean, default=True)
    order = Column(Integer, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)


class Testimonial(Base):
    """
    Client testimonial.

    Public submissions start unapproved and only appear once an admin approves them.
    """

    __tablename__ = "testimonials"

    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    role = Column(String, nullable=False)
    company = Column(String, nullable=False)
    rating = Column(Integer, nullable=False)  # 1-5
    text = Column(Text, nullable=False)
    avatar = Column(String, default="👤")
    service = Column(String, nullable=False)
    featured = Column(Boolean, default=False)
    approved = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)


class AboutContent(Base):
    __tablename__ = "about_content"

    id = Column(Integer, primary_key=True)
    title = Column(String, nullable=False)
    subtitle = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    values = Column(JSON, default=list)  # [{"title", "description", "icon"}]
    commitments = Column(JSON, default=list)
    active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class ContactInfo(Base):
    __tablename__ = "contact_info"

    id = Column(Integer, primary_key=True)
    phone = Column(JSON, default=list)
    email = Column(JSON, default=list)
    address = Column(JSON, default=list)
    working_hours = Column(JSON, default=list)
    updated_at = Column(DateTime, default=datetime.utcnow)


class LegalPage(Base):
    """
    Privacy policy or terms of service, one row per ``kind``.

    Sections are stored as JSON: [{"title", "content": [{"subtitle", "items": [...]}]}].
    """

    __tablename__ = "legal_pages"

    id = Column(Integer, primary_key=True)
    kind = Column(String, unique=True, nullable=False)  # 'privacy-policy' | 'terms-of-service'
    title = Column(String, nullable=False)
    subtitle = Column(String, nullable=False)
    introduction = Column(Text, nullable=False)
    sections = Column(JSON, default=list)
    contact_info = Column(JSON, default=dict)  # {"email", "phone", "address"}
    active = Column(Boolean, default=True)
    last_updated = Column(DateTime, default=datetime.utcnow)


class DashboardStats(Base):
    """Editable marketing figures shown next to the live counts."""

    __tablename__ = "dashboard_stats"

    id = Column(Integer, primary_key=True)
    happy_clients = Column(String, default="5000+")
    success_rate = Column(String, default="98%")
    growth_rate = Column(String, default="150%")
    updated_at = Column(DateTime, default=datetime.utcnow)
