"""
Site page API endpoints.

Single-document content edited from the admin panel: about us, contact
info, privacy policy, terms of service and the landing page figures.
Reads are public and answer ``{}`` until an admin has saved the document.
"""

import logging
from datetime import datetime
from typing import Any, Optional

from fastapi import APIRouter, Depends
from pydantic import Field
from sqlalchemy.orm import Session

from app.api.deps import require_admin
from app.api.schemas import CamelModel, StrictCamelModel
from app.core.security import TokenClaims
from app.db.session import get_db
from app.models import AboutContent, ContactInfo, DashboardStats
from app.services.content import (
    get_legal_page,
    get_or_create_stats,
    get_singleton,
    save_legal_page,
    save_singleton,
)

logger = logging.getLogger("pages")

router = APIRouter()


# ============== Pydantic Schemas ==============


class AboutValue(CamelModel):
    title: str
    description: str
    icon: Optional[str] = None


class AboutContentIn(StrictCamelModel):
    title: str = Field(min_length=1)
    subtitle: str = Field(min_length=1)
    description: str = Field(min_length=1)
    values: list[AboutValue] = []
    commitments: list[str] = []
    active: bool = True


class AboutContentOut(AboutContentIn):
    created_at: Optional[datetime] = None


class ContactInfoIn(StrictCamelModel):
    phone: list[str] = []
    email: list[str] = []
    address: list[str] = []
    working_hours: list[str] = []


class ContactInfoOut(ContactInfoIn):
    updated_at: Optional[datetime] = None


class LegalItem(CamelModel):
    subtitle: Optional[str] = None
    items: list[str] = []


class LegalSection(CamelModel):
    title: str
    content: list[LegalItem] = []


class LegalContact(CamelModel):
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None


class LegalPageIn(StrictCamelModel):
    title: str = Field(min_length=1)
    subtitle: str = Field(min_length=1)
    introduction: str = Field(min_length=1)
    sections: list[LegalSection] = []
    contact_info: LegalContact = LegalContact()
    active: bool = True


class LegalPageOut(LegalPageIn):
    last_updated: Optional[datetime] = None


class DashboardStatsIn(StrictCamelModel):
    happy_clients: Optional[str] = None
    success_rate: Optional[str] = None
    growth_rate: Optional[str] = None


class DashboardStatsOut(CamelModel):
    happy_clients: str
    success_rate: str
    growth_rate: str
    updated_at: Optional[datetime] = None


def _dump(schema: type[CamelModel], row: Any) -> dict[str, Any]:
    if row is None:
        return {}
    return schema.model_validate(row).model_dump(mode="json", by_alias=True)


# ============== About Us ==============


@router.get("/about-content")
def get_about_content(db: Session = Depends(get_db)) -> dict[str, Any]:
    row = get_singleton(db, AboutContent)
    return _dump(AboutContentOut, row if row is not None and row.active else None)


@router.put("/about-content")
def update_about_content(
    data: AboutContentIn,
    admin: TokenClaims = Depends(require_admin),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    row = save_singleton(db, AboutContent, data.model_dump())
    logger.info("Admin %s updated about content", admin.account_id)
    return {"message": "About content updated successfully", "aboutContent": _dump(AboutContentOut, row)}


# ============== Contact Info ==============


@router.get("/contact-info")
def get_contact_info(db: Session = Depends(get_db)) -> dict[str, Any]:
    return _dump(ContactInfoOut, get_singleton(db, ContactInfo))


@router.put("/contact-info")
def update_contact_info(
    data: ContactInfoIn,
    admin: TokenClaims = Depends(require_admin),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    row = save_singleton(db, ContactInfo, data.model_dump())
    logger.info("Admin %s updated contact info", admin.account_id)
    return {"message": "Contact info updated successfully", "contactInfo": _dump(ContactInfoOut, row)}


# ============== Legal Pages ==============


@router.get("/privacy-policy")
def get_privacy_policy(db: Session = Depends(get_db)) -> dict[str, Any]:
    return _dump(LegalPageOut, get_legal_page(db, "privacy-policy"))


@router.put("/privacy-policy")
def update_privacy_policy(
    data: LegalPageIn,
    admin: TokenClaims = Depends(require_admin),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    page = save_legal_page(db, "privacy-policy", data.model_dump())
    logger.info("Admin %s updated the privacy policy", admin.account_id)
    return {"message": "Privacy policy updated successfully", "privacyPolicy": _dump(LegalPageOut, page)}


@router.get("/terms-of-service")
def get_terms_of_service(db: Session = Depends(get_db)) -> dict[str, Any]:
    return _dump(LegalPageOut, get_legal_page(db, "terms-of-service"))


@router.put("/terms-of-service")
def update_terms_of_service(
    data: LegalPageIn,
    admin: TokenClaims = Depends(require_admin),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    page = save_legal_page(db, "terms-of-service", data.model_dump())
    logger.info("Admin %s updated the terms of service", admin.account_id)
    return {"message": "Terms of service updated successfully", "termsOfService": _dump(LegalPageOut, page)}


# ============== Landing Figures ==============


@router.get("/dashboard-stats", response_model=DashboardStatsOut)
def get_dashboard_stats(db: Session = Depends(get_db)):
    return get_or_create_stats(db)


@router.put("/dashboard-stats")
def update_dashboard_stats(
    data: DashboardStatsIn,
    admin: TokenClaims = Depends(require_admin),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    row = save_singleton(db, DashboardStats, data.model_dump(exclude_none=True))
    logger.info("Admin %s updated dashboard stats", admin.account_id)
    return {"message": "Dashboard stats updated successfully", "stats": _dump(DashboardStatsOut, row)}
