from sqlalchemy import Column, Integer, String, Text, DateTime
from .database import Base
import datetime


class Campaign(Base):
    """
    Fundraising campaign.

    current_amount and donor_count are derived from the campaign's completed
    donations and are only written by the aggregate recalculator.
    """
    __tablename__ = 'campaigns'

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(300), nullable=False)
    description = Column(Text, nullable=True)
    image_url = Column(String(1000), nullable=True)
    category = Column(String(100), nullable=True, index=True)
    organization_name = Column(String(200), nullable=True)
    organization_logo = Column(String(1000), nullable=True)

    target_amount = Column(Integer, nullable=False)  # smallest currency unit
    current_amount = Column(Integer, nullable=False, default=0)
    donor_count = Column(Integer, nullable=False, default=0)

    start_date = Column(DateTime, default=datetime.datetime.utcnow)
    end_date = Column(DateTime, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow, index=True)

    def is_open(self, now=None):
        now = now or datetime.datetime.utcnow()
        return now <= self.end_date
