import os

# must be set before the app (and its engine) is imported
os.environ['DATABASE_URL'] = 'sqlite://'
os.environ.pop('PAYMENT_WEBHOOK_KEY', None)

import datetime

import pytest
from fastapi.testclient import TestClient

from charity import campaign_models, donation_models, models
from charity.auth import Identity
from charity.database import Base, SessionLocal, engine
from charity.donation_service import new_transaction_id
from charity.main import app


@pytest.fixture(autouse=True)
def fresh_schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


def _user(db, name, username, role='user'):
    user = models.User(name=name, username=username, email=f'{username}@example.org', role=role)
    db.add(user)
    db.commit()
    return Identity(user_id=user.id, role=role)


@pytest.fixture
def admin(db):
    return _user(db, 'Admin', 'admin', role='admin')


@pytest.fixture
def donor(db):
    return _user(db, 'Budi Santoso', 'budi')


@pytest.fixture
def other_donor(db):
    return _user(db, 'Ayu Lestari', 'ayu')


def headers_for(identity):
    return {'X-User-Id': str(identity.user_id), 'X-User-Role': identity.role}


@pytest.fixture
def make_campaign(db):
    def _make(target_amount=100000, days_left=30, **kwargs):
        now = datetime.datetime.utcnow()
        campaign = campaign_models.Campaign(
            title=kwargs.pop('title', 'Clean water'),
            target_amount=target_amount,
            current_amount=kwargs.pop('current_amount', 0),
            donor_count=kwargs.pop('donor_count', 0),
            start_date=now - datetime.timedelta(days=1),
            end_date=now + datetime.timedelta(days=days_left),
            **kwargs
        )
        db.add(campaign)
        db.commit()
        return campaign
    return _make


@pytest.fixture
def make_donation(db):
    """Insert a donation row directly, without touching campaign aggregates."""
    def _make(campaign, user, amount=5000, status='pending', **kwargs):
        donation = donation_models.Donation(
            transaction_id=new_transaction_id(),
            campaign_id=campaign.id,
            user_id=user.user_id,
            amount=amount,
            payment_method=kwargs.pop('payment_method', 'bank_transfer'),
            payment_status=status,
            donor_name=kwargs.pop('donor_name', 'Budi Santoso'),
            completed_at=datetime.datetime.utcnow() if status == 'completed' else None,
            **kwargs
        )
        db.add(donation)
        db.commit()
        return donation
    return _make


def aggregate_of(db, campaign_id):
    db.expire_all()
    campaign = db.query(campaign_models.Campaign).filter(campaign_models.Campaign.id == campaign_id).one()
    return campaign.current_amount, campaign.donor_count


def completed_totals(db, campaign_id):
    rows = (
        db.query(donation_models.Donation)
        .filter(donation_models.Donation.campaign_id == campaign_id,
                donation_models.Donation.payment_status == 'completed')
        .all()
    )
    return sum(r.amount for r in rows), len(rows)
