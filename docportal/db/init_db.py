"""
Database initialization and seeding.
"""
import logging

from sqlalchemy.orm import Session

from docportal.core.security import get_password_hash
from docportal.models.choices import Role
from docportal.models.profile import Profile

logger = logging.getLogger(__name__)

DEMO_PROFILES = [
    {
        "email": "admin@demo.com",
        "password": "admin123",
        "full_name": "Demo Admin",
        "role": Role.ADMIN,
        "department": "Administration",
    },
    {
        "email": "employee@demo.com",
        "password": "employee123",
        "full_name": "Demo Employee",
        "role": Role.EMPLOYEE,
        "department": "Operations",
    },
]


def init_db(db: Session) -> int:
    """
    Seed the demo admin and employee accounts.

    Existing accounts are left untouched, so the seed can be re-run.

    Args:
        db: Database session

    Returns:
        Number of profiles created
    """
    created = 0
    for data in DEMO_PROFILES:
        if db.query(Profile).filter(Profile.email == data["email"]).first():
            logger.info(f"Demo profile {data['email']} already exists, skipping")
            continue
        db.add(
            Profile(
                email=data["email"],
                full_name=data["full_name"],
                hashed_password=get_password_hash(data["password"]),
                role=data["role"].value,
                department=data["department"],
                is_active=True,
            )
        )
        created += 1
    db.commit()
    logger.info(f"Created {created} demo profile(s)")
    return created
