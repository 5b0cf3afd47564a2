from sqlalchemy import Column, Integer, Float, Date, UniqueConstraint
from app.core.base import Base

class ProgressSample(Base):
    __tablename__ = "progress_samples"
    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_progress_samples_user_date"),
    )

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, nullable=False, index=True)
    date = Column(Date, nullable=False)
    weight = Column(Float, nullable=True)
    calories_consumed = Column(Integer, default=0, nullable=False)
    workouts_completed = Column(Integer, default=0, nullable=False)
    water_ml = Column(Float, default=0, nullable=False)
    sleep_hours = Column(Float, default=0, nullable=False)
    mood = Column(Integer, nullable=True)  # 1-5
    energy = Column(Integer, nullable=True)  # 1-5
