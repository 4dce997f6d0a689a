from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, String, Text

from app.db.base import Base
from app.models.user import new_id


class Contact(Base):
    """
    Visitor lead from the contact form.

    Fraud reports and job-consultancy applications are contacts tagged by ``service``.
    """

    __tablename__ = "contacts"

    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    phone = Column(String, nullable=False)
    service = Column(String, nullable=False, index=True)  # 'fraud-assistance' | 'job-consultancy' | 'general'
    message = Column(Text, nullable=False)
    evidence = Column(String, nullable=True)  # Uploaded file path, fraud reports only
    status = Column(String, default="new")  # 'new' | 'in-progress' | 'resolved'
    created_at = Column(DateTime, default=datetime.utcnow, index=True)


class NewsletterSubscriber(Base):
    __tablename__ = "newsletter_subscribers"

    id = Column(String(32), primary_key=True, default=new_id)
    email = Column(String, unique=True, index=True, nullable=False)
    subscribed = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
