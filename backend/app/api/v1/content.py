"""
Content API endpoints.

Public listing plus admin CRUD for consultancy services and testimonials.
Public testimonial submissions are stored unapproved until an admin approves them.
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import Field, field_validator
from sqlalchemy.orm import Session

from app.api.deps import require_admin
from app.api.schemas import CamelModel, MessageResponse, StrictCamelModel
from app.core.errors import NotFound
from app.core.security import TokenClaims
from app.db.session import get_db
from app.models import Service, Testimonial

logger = logging.getLogger("content")

router = APIRouter()


# ============== Pydantic Schemas ==============


def _not_null(v):
    """Partial updates may omit a field but not clear a required one."""
    if v is None:
        raise ValueError("cannot be null")
    return v


class ServiceIn(StrictCamelModel):
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    icon: str = "Shield"
    color: str = "from-red-500 to-pink-600"
    features: list[str] = []
    active: bool = True
    order: int = 0


class ServiceUpdate(StrictCamelModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = Field(default=None, min_length=1)
    icon: Optional[str] = None
    color: Optional[str] = None
    features: Optional[list[str]] = None
    active: Optional[bool] = None
    order: Optional[int] = None

    reject_nulls = field_validator("title", "description", "features", "active", "order")(_not_null)


class ServiceOut(CamelModel):
    id: str
    title: str
    description: str
    icon: Optional[str] = None
    color: Optional[str] = None
    features: list[str] = []
    active: bool = True
    order: int = 0
    created_at: Optional[datetime] = None


class ServiceResponse(CamelModel):
    message: str
    service: ServiceOut


class TestimonialSubmit(StrictCamelModel):
    """What a visitor may send. Moderation flags are not accepted."""

    name: str = Field(min_length=1)
    role: str = Field(min_length=1)
    company: str = Field(min_length=1)
    rating: int = Field(ge=1, le=5)
    text: str = Field(min_length=1)
    avatar: str = "👤"
    service: str = Field(min_length=1)


class TestimonialIn(TestimonialSubmit):
    featured: bool = False
    approved: bool = False


class TestimonialUpdate(StrictCamelModel):
    name: Optional[str] = Field(default=None, min_length=1)
    role: Optional[str] = Field(default=None, min_length=1)
    company: Optional[str] = Field(default=None, min_length=1)
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    text: Optional[str] = Field(default=None, min_length=1)
    avatar: Optional[str] = None
    service: Optional[str] = None
    featured: Optional[bool] = None
    approved: Optional[bool] = None

    reject_nulls = field_validator(
        "name", "role", "company", "rating", "text", "service", "featured", "approved"
    )(_not_null)


class TestimonialOut(CamelModel):
    id: str
    name: str
    role: str
    company: str
    rating: int
    text: str
    avatar: Optional[str] = None
    service: str
    featured: bool = False
    approved: bool = False
    created_at: Optional[datetime] = None


class TestimonialResponse(CamelModel):
    message: str
    testimonial: TestimonialOut


# ============== Services ==============


@router.get("/services", response_model=list[ServiceOut])
def list_active_services(db: Session = Depends(get_db)):
    return (
        db.query(Service)
        .filter(Service.active.is_(True))
        .order_by(Service.order.asc(), Service.created_at.desc())
        .all()
    )


@router.get("/services/admin", response_model=list[ServiceOut])
def list_all_services(_: TokenClaims = Depends(require_admin), db: Session = Depends(get_db)):
    return db.query(Service).order_by(Service.order.asc(), Service.created_at.desc()).all()


@router.post("/services", response_model=ServiceResponse, status_code=status.HTTP_201_CREATED)
def create_service(
    data: ServiceIn,
    admin: TokenClaims = Depends(require_admin),
    db: Session = Depends(get_db),
):
    service = Service(**data.model_dump())
    db.add(service)
    db.commit()
    db.refresh(service)
    logger.info("Admin %s created service %s", admin.account_id, service.id)
    return ServiceResponse(message="Service created successfully", service=ServiceOut.model_validate(service))


@router.put("/services/{service_id}", response_model=ServiceResponse)
def update_service(
    service_id: str,
    data: ServiceUpdate,
    admin: TokenClaims = Depends(require_admin),
    db: Session = Depends(get_db),
):
    service = db.query(Service).filter(Service.id == service_id).first()
    if not service:
        raise NotFound("Service not found")
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(service, field, value)
    db.commit()
    db.refresh(service)
    logger.info("Admin %s updated service %s", admin.account_id, service_id)
    return ServiceResponse(message="Service updated successfully", service=ServiceOut.model_validate(service))


@router.delete("/services/{service_id}", response_model=MessageResponse)
def delete_service(
    service_id: str,
    admin: TokenClaims = Depends(require_admin),
    db: Session = Depends(get_db),
):
    service = db.query(Service).filter(Service.id == service_id).first()
    if not service:
        raise NotFound("Service not found")
    db.delete(service)
    db.commit()
    logger.info("Admin %s deleted service %s", admin.account_id, service_id)
    return MessageResponse(message="Service deleted successfully")


# ============== Testimonials ==============


@router.get("/testimonials", response_model=list[TestimonialOut])
def list_approved_testimonials(db: Session = Depends(get_db)):
    return (
        db.query(Testimonial)
        .filter(Testimonial.approved.is_(True))
        .order_by(Testimonial.created_at.desc())
        .all()
    )


@router.post("/testimonials", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def submit_testimonial(data: TestimonialSubmit, db: Session = Depends(get_db)):
    db.add(Testimonial(**data.model_dump(), approved=False, featured=False))
    db.commit()
    logger.info("Testimonial submitted for moderation")
    return MessageResponse(message="Testimonial submitted successfully")


@router.get("/testimonials/admin", response_model=list[TestimonialOut])
def list_all_testimonials(_: TokenClaims = Depends(require_admin), db: Session = Depends(get_db)):
    return db.query(Testimonial).order_by(Testimonial.created_at.desc()).all()


@router.post(
    "/testimonials/admin",
    response_model=TestimonialResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_testimonial(
    data: TestimonialIn,
    admin: TokenClaims = Depends(require_admin),
    db: Session = Depends(get_db),
):
    testimonial = Testimonial(**data.model_dump())
    db.add(testimonial)
    db.commit()
    db.refresh(testimonial)
    logger.info("Admin %s created testimonial %s", admin.account_id, testimonial.id)
    return TestimonialResponse(
        message="Testimonial created successfully",
        testimonial=TestimonialOut.model_validate(testimonial),
    )


@router.put("/testimonials/{testimonial_id}", response_model=TestimonialResponse)
def update_testimonial(
    testimonial_id: str,
    data: TestimonialUpdate,
    admin: TokenClaims = Depends(require_admin),
    db: Session = Depends(get_db),
):
    testimonial = db.query(Testimonial).filter(Testimonial.id == testimonial_id).first()
    if not testimonial:
        raise NotFound("Testimonial not found")
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(testimonial, field, value)
    db.commit()
    db.refresh(testimonial)
    logger.info("Admin %s updated testimonial %s", admin.account_id, testimonial_id)
    return TestimonialResponse(
        message="Testimonial updated successfully",
        testimonial=TestimonialOut.model_validate(testimonial),
    )


@router.delete("/testimonials/{testimonial_id}", response_model=MessageResponse)
def delete_testimonial(
    testimonial_id: str,
    admin: TokenClaims = Depends(require_admin),
    db: Session = Depends(get_db),
):
    testimonial = db.query(Testimonial).filter(Testimonial.id == testimonial_id).first()
    if not testimonial:
        raise NotFound("Testimonial not found")
    db.delete(testimonial)
    db.commit()
    logger.info("Admin %s deleted testimonial %s", admin.account_id, testimonial_id)
    return MessageResponse(message="Testimonial deleted successfully")
