from sqlalchemy import Column, Integer, String, DateTime
from app.core.base import Base

class AdjustmentHistory(Base):
    __tablename__ = "adjustment_history"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, nullable=False, index=True)
    adjustment_type = Column(String, nullable=False)
    reason = Column(String, nullable=False)
    field = Column(String, nullable=False)
    old_value = Column(String, nullable=True)
    new_value = Column(String, nullable=False)
    accepted_at = Column(DateTime, nullable=False, index=True)
