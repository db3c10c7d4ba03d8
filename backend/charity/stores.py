"""
Store handles over a SQLAlchemy session.

Writes are flushed, not committed: the caller owns the session and decides
when a unit of work is done, so a status change and the aggregate write that
follows it land in the same commit.
"""
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from .campaign_models import Campaign
from .donation_models import Donation
from .models import User


class CampaignStore:
    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, campaign_id) -> Optional[Campaign]:
        return self.db.query(Campaign).filter(Campaign.id == campaign_id).first()

    def insert(self, campaign: Campaign) -> Campaign:
        self.db.add(campaign)
        self.db.flush()
        return campaign

    def update_fields(self, campaign_id, fields: dict) -> Optional[Campaign]:
        campaign = self.find_by_id(campaign_id)
        if campaign is None:
            return None
        for key, value in fields.items():
            setattr(campaign, key, value)
        self.db.flush()
        return campaign

    def delete(self, campaign: Campaign):
        self.db.delete(campaign)
        self.db.flush()


class DonationStore:
    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, donation_id) -> Optional[Donation]:
        return self.db.query(Donation).filter(Donation.id == donation_id).first()

    def find_by_transaction_id(self, transaction_id) -> Optional[Donation]:
        return self.db.query(Donation).filter(Donation.transaction_id == transaction_id).first()

    def insert(self, donation: Donation) -> Donation:
        self.db.add(donation)
        self.db.flush()
        return donation

    def update_fields(self, donation: Donation, fields: dict) -> Donation:
        for key, value in fields.items():
            setattr(donation, key, value)
        self.db.flush()
        return donation

    def delete(self, donation: Donation):
        self.db.delete(donation)
        self.db.flush()

    def delete_by_campaign(self, campaign_id) -> int:
        deleted = (
            self.db.query(Donation)
            .filter(Donation.campaign_id == campaign_id)
            .delete(synchronize_session=False)
        )
        self.db.flush()
        return deleted

    def find_all_by_campaign_and_status(self, campaign_id, status) -> List[Donation]:
        return (
            self.db.query(Donation)
            .filter(Donation.campaign_id == campaign_id, Donation.payment_status == status)
            .all()
        )


class UserStore:
    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, user_id) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def insert(self, user: User) -> User:
        self.db.add(user)
        self.db.flush()
        return user

    def find_existing(self, username, email) -> Iterable[User]:
        return (
            self.db.query(User)
            .filter((User.username == username) | (User.email == email))
            .all()
        )
