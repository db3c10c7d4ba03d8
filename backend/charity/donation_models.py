from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from .database import Base
import datetime

PENDING = 'pending'
COMPLETED = 'completed'
FAILED = 'failed'
PAYMENT_STATUSES = (PENDING, COMPLETED, FAILED)

PAYMENT_METHODS = ('bank_transfer', 'e_wallet', 'credit_card')


class Donation(Base):
    """
    A single donation towards a campaign.

    Only donations with payment_status == 'completed' count towards the
    campaign's current_amount and donor_count.
    """
    __tablename__ = 'donations'

    id = Column(Integer, primary_key=True, index=True)
    transaction_id = Column(String(64), nullable=False, unique=True, index=True)
    # sqlite does not enforce these, campaign deletion cascades by hand
    campaign_id = Column(Integer, ForeignKey('campaigns.id'), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)

    amount = Column(Integer, nullable=False)  # smallest currency unit
    message = Column(Text, nullable=True)
    payment_method = Column(String(30), nullable=False)  # bank_transfer, e_wallet, credit_card
    payment_status = Column(String(20), nullable=False, default=PENDING, index=True)
    unique_code = Column(Integer, nullable=True)

    donor_name = Column(String(200), nullable=False)
    is_anonymous = Column(Boolean, default=False)
    proof_of_transfer = Column(String(1000), nullable=True)

    created_at = Column(DateTime, default=datetime.datetime.utcnow, index=True)
    completed_at = Column(DateTime, nullable=True)

    campaign = relationship("Campaign")
