"""
Helpers for the single-row site documents (about us, contact info, legal pages, stats).

Each of these tables holds at most one row per document; the admin "save"
action creates it on first use and overwrites the given fields afterwards.
"""

from datetime import datetime
from typing import Any, Optional, TypeVar

from sqlalchemy.orm import Session

from app.models import AboutContent, ContactInfo, DashboardStats, LegalPage

LEGAL_KINDS = ("privacy-policy", "terms-of-service")

Row = TypeVar("Row", AboutContent, ContactInfo, DashboardStats)


def get_singleton(db: Session, model: type[Row]) -> Optional[Row]:
    return db.query(model).order_by(model.id).first()


def save_singleton(db: Session, model: type[Row], changes: dict[str, Any]) -> Row:
    row = get_singleton(db, model)
    if row is None:
        row = model(**changes)
        db.add(row)
    else:
        for field, value in changes.items():
            setattr(row, field, value)
    if hasattr(model, "updated_at"):
        row.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(row)
    return row


def get_or_create_stats(db: Session) -> DashboardStats:
    stats = get_singleton(db, DashboardStats)
    if stats is None:
        stats = DashboardStats()
        db.add(stats)
        db.commit()
        db.refresh(stats)
    return stats


def get_legal_page(db: Session, kind: str, active_only: bool = True) -> Optional[LegalPage]:
    query = db.query(LegalPage).filter(LegalPage.kind == kind)
    if active_only:
        query = query.filter(LegalPage.active.is_(True))
    return query.first()


def save_legal_page(db: Session, kind: str, changes: dict[str, Any]) -> LegalPage:
    page = get_legal_page(db, kind, active_only=False)
    if page is None:
        page = LegalPage(kind=kind, **changes)
        db.add(page)
    else:
        for field, value in changes.items():
            setattr(page, field, value)
    page.last_updated = datetime.utcnow()
    db.commit()
    db.refresh(page)
    return page
