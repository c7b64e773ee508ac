"""Seed sample staff accounts and content for demo purposes."""

import json
from datetime import datetime

from sqlalchemy.orm import Session

from portal.core.security import hash_password
from portal.models.news import News
from portal.models.sangguniang_bayan_member import SangguniangBayanMember
from portal.models.user import User
from portal.services.news_service import slugify
from portal.services.user_service import default_permissions

SAMPLE_STAFF = [
    ("PIO Staff", "pio@municipality.gov.ph", "Public Information Office"),
    ("Tourism Staff", "tourism@municipality.gov.ph", "Municipal Tourism Office"),
    ("BAC Secretariat", "bac@municipality.gov.ph", "Bids and Awards Committee"),
    ("SB Secretary", "sb@municipality.gov.ph", "Sangguniang Bayan"),
]

SAMPLE_NEWS = [
    ("Municipal Fiesta Schedule Released", "Event", "published"),
    ("Road Maintenance on Rizal Street", "Maintenance", "published"),
    ("New Business Permit Process", "Announcement", "draft"),
]

SAMPLE_MEMBERS = [
    ("Hon. Juan Dela Cruz", "Vice Mayor", "regular"),
    ("Hon. Maria Santos", "SB Member", "regular"),
    ("Hon. Pedro Reyes", "SK Federation President", "sk_president"),
]


def seed_sample_data(db: Session, password: str = "password123") -> None:
    """Insert sample staff, articles and council members."""
    owner = db.query(User).first()
    if not owner:
        print("No users found. Run seed_admin first.")
        return

    for name, email, office in SAMPLE_STAFF:
        if not db.query(User).filter(User.email == email).first():
            db.add(User(
                name=name,
                email=email,
                hashed_password=hash_password(password),
                role="staff",
                office=office,
                permissions_json=json.dumps(default_permissions("staff", office)),
            ))

    for title, category, status in SAMPLE_NEWS:
        slug = slugify(title)
        if not db.query(News).filter(News.slug == slug).first():
            db.add(News(
                title=title,
                slug=slug,
                content=f"{title}. Details will be posted by the Public Information Office.",
                category=category,
                status=status,
                published_at=datetime.utcnow() if status == "published" else None,
                author_id=owner.id,
            ))

    for order, (name, position, position_type) in enumerate(SAMPLE_MEMBERS):
        if not db.query(SangguniangBayanMember).filter(SangguniangBayanMember.name == name).first():
            db.add(SangguniangBayanMember(
                name=name, position=position, position_type=position_type, order=order,
            ))

    db.commit()
    print("Sample data seeded")
