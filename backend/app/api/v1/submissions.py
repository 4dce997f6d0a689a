"""
Visitor intake API endpoints.

Contact leads, fraud reports (with optional evidence upload), job-consultancy
applications and newsletter sign-ups. Admins review contacts and move them
through their status.
"""

import logging
from datetime import datetime
from enum import Enum
from typing import Optional

from fastapi import APIRouter, Depends, File, Request, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import Field
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.api.deps import require_admin
from app.api.schemas import CamelModel, Email, MessageResponse, StrictCamelModel, validate_form
from app.core.errors import NotFound, ValidationError
from app.core.security import TokenClaims
from app.db.session import get_db
from app.models import Contact, NewsletterSubscriber
from app.services.uploads import remove_upload, store_upload

logger = logging.getLogger("submissions")

router = APIRouter()


# ============== Pydantic Schemas ==============


class ServiceTag(str, Enum):
    FRAUD_ASSISTANCE = "fraud-assistance"
    JOB_CONSULTANCY = "job-consultancy"
    GENERAL = "general"


class ContactStatus(str, Enum):
    NEW = "new"
    IN_PROGRESS = "in-progress"
    RESOLVED = "resolved"


class ContactSubmit(StrictCamelModel):
    name: str = Field(min_length=1)
    email: Email
    phone: str = Field(min_length=1)
    service: ServiceTag
    message: str = Field(min_length=1)


class FraudReportSubmit(StrictCamelModel):
    name: str = Field(min_length=1)
    email: Email
    phone: str = Field(min_length=1)
    message: str = Field(min_length=1)


class ContactOut(CamelModel):
    id: str
    name: str
    email: str
    phone: str
    service: str
    message: str
    evidence: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None


class StatusChange(StrictCamelModel):
    status: ContactStatus


class NewsletterSubscribe(StrictCamelModel):
    email: Email


# ============== Contacts ==============


@router.post("/contact", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def submit_contact(data: ContactSubmit, db: Session = Depends(get_db)):
    contact = Contact(**data.model_dump(mode="json"))
    db.add(contact)
    db.commit()
    logger.info("New %s contact %s", contact.service, contact.id)
    return MessageResponse(message="Contact form submitted successfully")


@router.post("/fraud-reports", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def submit_fraud_report(
    request: Request,
    evidence: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
):
    """Fraud report as multipart form; ``evidence`` may be an image, PDF or Word file."""
    form = await request.form()
    data = validate_form(FraudReportSubmit, form, files={"evidence"})

    evidence_path = None
    if evidence is not None and evidence.filename:
        evidence_path = await store_upload(evidence, "evidence", kind="evidence")

    contact = Contact(
        **data.model_dump(),
        service=ServiceTag.FRAUD_ASSISTANCE.value,
        evidence=evidence_path,
    )
    db.add(contact)
    try:
        await run_in_threadpool(db.commit)
    except Exception:
        db.rollback()
        remove_upload(evidence_path)
        raise
    logger.info("New fraud report %s (evidence=%s)", contact.id, bool(evidence_path))
    return MessageResponse(message="Fraud report submitted successfully")


@router.get("/contacts", response_model=list[ContactOut])
def list_contacts(
    service: Optional[ServiceTag] = None,
    _: TokenClaims = Depends(require_admin),
    db: Session = Depends(get_db),
):
    query = db.query(Contact)
    if service is not None:
        query = query.filter(Contact.service == service.value)
    return query.order_by(Contact.created_at.desc()).all()


@router.patch("/contacts/{contact_id}/status", response_model=ContactOut)
def update_contact_status(
    contact_id: str,
    change: StatusChange,
    admin: TokenClaims = Depends(require_admin),
    db: Session = Depends(get_db),
):
    contact = db.query(Contact).filter(Contact.id == contact_id).first()
    if not contact:
        raise NotFound("Contact not found")
    contact.status = change.status.value
    db.commit()
    db.refresh(contact)
    logger.info("Admin %s moved contact %s to %s", admin.account_id, contact_id, contact.status)
    return contact


# ============== Newsletter ==============


@router.post("/newsletter/subscribe", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def subscribe_newsletter(data: NewsletterSubscribe, db: Session = Depends(get_db)):
    existing = db.query(NewsletterSubscriber).filter(NewsletterSubscriber.email == data.email).first()
    if existing:
        if existing.subscribed:
            raise ValidationError("Email already subscribed", code="already_subscribed")
        existing.subscribed = True
        db.commit()
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content={"message": "Successfully resubscribed to newsletter"},
        )

    db.add(NewsletterSubscriber(email=data.email))
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValidationError("Email already subscribed", code="already_subscribed")
    return MessageResponse(message="Successfully subscribed to newsletter")
