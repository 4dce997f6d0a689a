"""
Admin API endpoints.

Account moderation and the back-office overview. Every route here requires
an admin token.
"""

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.api.deps import get_store, require_admin
from app.api.schemas import AccountOut, CamelModel, MessageResponse
from app.core.errors import Forbidden
from app.core.security import TokenClaims
from app.db.session import get_db
from app.models import Contact, NewsletterSubscriber, Testimonial
from app.models.user import Role, User
from app.services.content import get_or_create_stats
from app.services.credential_store import CredentialStore
from app.services.uploads import remove_upload

logger = logging.getLogger("admin")

router = APIRouter()


# ============== Pydantic Schemas ==============


class RoleChange(BaseModel):
    role: Role


class StatusChange(CamelModel):
    is_active: bool


class AccountChangeResponse(CamelModel):
    message: str
    user: AccountOut


class DashboardOverview(CamelModel):
    total_users: int
    total_admins: int
    completed_profiles: int
    total_contacts: int
    total_applications: int
    total_fraud_cases: int
    new_contacts: int
    newsletter_subscribers: int
    total_testimonials: int
    pending_testimonials: int
    happy_clients: str
    success_rate: str
    growth_rate: str


# ============== Accounts ==============


@router.get("/users", response_model=list[AccountOut])
def list_users(
    _: TokenClaims = Depends(require_admin),
    store: CredentialStore = Depends(get_store),
):
    return store.list_all()


@router.patch("/users/{user_id}/role", response_model=AccountChangeResponse)
def change_role(
    user_id: str,
    change: RoleChange,
    admin: TokenClaims = Depends(require_admin),
    store: CredentialStore = Depends(get_store),
):
    if user_id == admin.account_id and change.role is not Role.ADMIN:
        raise Forbidden("You cannot remove your own admin role")
    user = store.set_role(user_id, change.role)
    logger.info("Admin %s set role of %s to %s", admin.account_id, user_id, change.role.value)
    return AccountChangeResponse(message="Role updated successfully", user=AccountOut.model_validate(user))


@router.patch("/users/{user_id}/status", response_model=AccountChangeResponse)
def change_status(
    user_id: str,
    change: StatusChange,
    admin: TokenClaims = Depends(require_admin),
    store: CredentialStore = Depends(get_store),
):
    if user_id == admin.account_id and not change.is_active:
        raise Forbidden("You cannot deactivate your own account")
    user = store.set_active(user_id, change.is_active)
    return AccountChangeResponse(message="Status updated successfully", user=AccountOut.model_validate(user))


@router.delete("/users/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: str,
    admin: TokenClaims = Depends(require_admin),
    store: CredentialStore = Depends(get_store),
):
    if user_id == admin.account_id:
        raise Forbidden("You cannot delete your own account")
    resume = store.get(user_id).resume
    store.delete(user_id)
    remove_upload(resume)
    logger.info("Admin %s deleted account %s", admin.account_id, user_id)
    return MessageResponse(message="User deleted successfully")


# ============== Overview ==============


@router.get("/dashboard/stats", response_model=DashboardOverview)
def dashboard_stats(
    _: TokenClaims = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Plain counts for the admin overview tab, plus the editable display figures."""
    store = CredentialStore(db)
    stats = get_or_create_stats(db)
    contacts = db.query(Contact)

    return DashboardOverview(
        total_users=store.count(Role.USER),
        total_admins=store.count(Role.ADMIN),
        completed_profiles=db.query(User).filter(User.profile_completed.is_(True)).count(),
        total_contacts=contacts.count(),
        total_applications=contacts.filter(Contact.service == "job-consultancy").count(),
        total_fraud_cases=contacts.filter(Contact.service == "fraud-assistance").count(),
        new_contacts=contacts.filter(Contact.status == "new").count(),
        newsletter_subscribers=db.query(NewsletterSubscriber)
        .filter(NewsletterSubscriber.subscribed.is_(True))
        .count(),
        total_testimonials=db.query(Testimonial).filter(Testimonial.approved.is_(True)).count(),
        pending_testimonials=db.query(Testimonial).filter(Testimonial.approved.is_(False)).count(),
        happy_clients=stats.happy_clients,
        success_rate=stats.success_rate,
        growth_rate=stats.growth_rate,
    )
