"""
Database initialization and seeding.
"""
import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from patternlab.core.security import get_password_hash
from patternlab.models.user import User

logger = logging.getLogger(__name__)


def init_db(db: Session, demo_email: str = "demo@example.com", demo_password: str = "demo-password") -> User:
    """
    Ensure a confirmed demo account exists.

    Args:
        db: Database session
    """
    demo = db.query(User).filter(User.email == demo_email).first()
    if not demo:
        demo = User(
            email=demo_email,
            full_name="Demo Learner",
            hashed_password=get_password_hash(demo_password),
            is_active=True,
            email_confirmed_at=datetime.now(timezone.utc),
        )
        db.add(demo)
        db.commit()
        db.refresh(demo)
        logger.info("Demo user created successfully")
    return demo
