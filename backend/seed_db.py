"""
CareerGuard Database Seeder

Creates demo data for local development:
- Admin and member accounts
- The two consultancy services shown on the landing page
- About us, contact info and landing figures
- One approved testimonial
"""

from typing import Optional

from sqlalchemy.orm import Session

from app.db.base import Base
from app.db.session import SessionLocal, engine
from app.models import AboutContent, ContactInfo, Service, Testimonial
from app.models.user import Role
from app.services.content import get_or_create_stats, save_singleton
from app.services.credential_store import CredentialStore

ADMIN_EMAIL = "admin@careerguard.in"
MEMBER_EMAIL = "priya.sharma@example.com"

SERVICES = [
    {
        "title": "Fraud Assistance",
        "description": "Support for job seekers targeted by fake offers and deposit scams.",
        "icon": "Shield",
        "color": "from-red-500 to-pink-600",
        "features": ["Offer letter verification", "Complaint drafting", "Recovery guidance"],
        "order": 1,
    },
    {
        "title": "Job Consultancy",
        "description": "Resume reviews and introductions to verified employers.",
        "icon": "Briefcase",
        "color": "from-blue-500 to-indigo-600",
        "features": ["Resume review", "Interview preparation", "Verified openings"],
        "order": 2,
    },
]


def seed_database(db: Optional[Session] = None) -> bool:
    """
    Seed the database with demo data.

    Returns False without touching anything when the admin account already exists.
    """
    owns_session = db is None
    if owns_session:
        Base.metadata.create_all(bind=engine)
        db = SessionLocal()

    try:
        store = CredentialStore(db)
        if store.find_by_email(ADMIN_EMAIL):
            print("Database already seeded. Skipping...")
            return False

        print("Seeding database...")

        # 1. Accounts
        store.create(name="Site Admin", email=ADMIN_EMAIL, password="admin123", role=Role.ADMIN)
        store.create(
            name="Priya Sharma",
            email=MEMBER_EMAIL,
            password="member123",
            profile={
                "phone": "9812345678",
                "city": "Hyderabad",
                "state": "TS",
                "skills": "react, node",
                "interested_services": ["job-consultancy"],
            },
        )

        # 2. Landing page content
        for service in SERVICES:
            db.add(Service(**service))
        db.add(
            Testimonial(
                name="Arjun Mehta",
                role="QA Engineer",
                company="Nimbus Labs",
                rating=5,
                text="They spotted the fake offer before I paid the 'training fee'.",
                service="fraud-assistance",
                featured=True,
                approved=True,
            )
        )
        db.commit()

        save_singleton(
            db,
            AboutContent,
            {
                "title": "About CareerGuard",
                "subtitle": "Safer job hunting",
                "description": "We help job seekers find real work and avoid recruitment fraud.",
                "values": [{"title": "Integrity", "description": "No placement fees, ever", "icon": "Shield"}],
                "commitments": ["Free first consultation", "Reply within one working day"],
            },
        )
        save_singleton(
            db,
            ContactInfo,
            {
                "phone": ["+91 90000 00000"],
                "email": ["help@careerguard.in"],
                "address": ["Hyderabad, India"],
                "working_hours": ["Mon-Sat 9:00-18:00"],
            },
        )
        get_or_create_stats(db)

        print("✅ Database seeded successfully!")
        print("\n📋 Created Users:")
        print(f"   - {ADMIN_EMAIL} (password: admin123) [ADMIN]")
        print(f"   - {MEMBER_EMAIL} (password: member123)")
        return True

    except Exception as e:
        db.rollback()
        print(f"❌ Error seeding database: {e}")
        raise
    finally:
        if owns_session:
            db.close()


if __name__ == "__main__":
    seed_database()
