"""
Cached quote model

One row per quote of a successful fan-out. Rows sharing a fingerprint form
one cache entry; an entry is fresh while created_at is inside the TTL window.
"""
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, Date, DateTime, Float, Index, Integer, String

from shipquote.core.database import Base


class CachedQuote(Base):
    __tablename__ = "quotes"
    __table_args__ = (
        Index("ix_quotes_fingerprint_created", "fingerprint", "created_at"),
    )

    id = Column(Integer, primary_key=True, index=True)
    fingerprint = Column(String(64), nullable=False)
    position = Column(Integer, nullable=False, default=0)  # order within the entry

    # Quote
    provider_id = Column(String(100), nullable=False)
    provider_name = Column(String(100), nullable=False)
    price = Column(Float, nullable=False)
    currency = Column(String(3), nullable=False)
    min_days = Column(Integer, nullable=False)
    max_days = Column(Integer, nullable=False)
    transport_mode = Column(String(50), nullable=False)
    is_cheapest = Column(Boolean, default=False, nullable=False)
    is_fastest = Column(Boolean, default=False, nullable=False)

    # Request metadata
    origin = Column(String(255), nullable=False)
    destination = Column(String(255), nullable=False)
    weight = Column(Float, nullable=False)
    pickup_date = Column(Date, nullable=False)
    fragile = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)

    def __repr__(self):
        return f"<CachedQuote {self.fingerprint[:8]} {self.provider_id} {self.price}>"
