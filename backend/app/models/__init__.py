from app.models.user import Role, User
from app.models.content import AboutContent, ContactInfo, DashboardStats, LegalPage, Service, Testimonial
from app.models.submission import Contact, NewsletterSubscriber

__all__ = [
    "Role",
    "User",
    "AboutContent",
    "ContactInfo",
    "DashboardStats",
    "LegalPage",
    "Service",
    "Testimonial",
    "Contact",
    "NewsletterSubscriber",
]
