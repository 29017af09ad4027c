import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, ForeignKey, DateTime, Date, Float, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from clientdash.db.base import Base


class Client(Base):
    """
    A subscription customer tracked by a dashboard user.

    Attributes:
        subscription_renewal_date: Next renewal (calendar date)
        subscription_amount: Amount billed per renewal, never negative
        notes: Optional free text
    """
    __tablename__ = "clients"
    __table_args__ = (
        UniqueConstraint("owner_id", "email", name="uq_clients_owner_email"),
    )

    id = Column(String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    owner_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(50), nullable=False)
    email = Column(String(100), nullable=False, index=True)
    phone = Column(String(15), nullable=False)
    company = Column(String(100), nullable=False)
    subscription_renewal_date = Column(Date, nullable=False)
    subscription_amount = Column(Float, nullable=False, default=0)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    owner = relationship("User", back_populates="clients")

    def __repr__(self):
        return f"<Client(id={self.id}, email={self.email}, renewal={self.subscription_renewal_date})>"
