"""
Conversion model for the SQL-backed store
One row per accepted postback; rows are never updated after insert
"""
from sqlalchemy import Column, String, Integer, Float, DateTime, JSON
from core.database import Base


class ConversionRow(Base):
    __tablename__ = "postback_conversions"

    # Insertion order; newest-first listing sorts on this
    seq = Column(Integer, primary_key=True, autoincrement=True)

    id = Column(String(64), unique=True, index=True, nullable=False)

    network = Column(String(32), index=True, nullable=False)
    kind = Column(String(16), index=True, nullable=False)
    sub_id = Column(String(255), index=True, nullable=False)
    transaction_id = Column(String(255), nullable=False)
    payout = Column(Float, default=0.0, nullable=False)
    ip_address = Column(String(255), nullable=False)

    timestamp = Column(DateTime(timezone=True), index=True, nullable=False)

    # Original query map, kept for audit
    raw_params = Column(JSON, default=dict, nullable=False)
