"""
Seed script to populate demo campaigns, users and donations.
Run: python backend/seed_campaigns.py
"""
import sys
from pathlib import Path

# Add backend to path
backend_path = Path(__file__).resolve().parent
sys.path.insert(0, str(backend_path))

from charity.database import SessionLocal, engine, Base
from charity import models, campaign_models, donation_models
from charity.aggregates import AggregateRecalculator
from charity.donation_service import new_transaction_id
from charity.stores import CampaignStore, DonationStore
import datetime

# Drop and recreate tables to ensure schema is up-to-date
Base.metadata.drop_all(bind=engine)
Base.metadata.create_all(bind=engine)
print("Tables recreated")


def seed():
    db = SessionLocal()
    now = datetime.datetime.utcnow()

    admin = models.User(name="Admin", username="admin", email="admin@example.org", role="admin")
    donor = models.User(name="Siti Rahma", username="siti", email="siti@example.org")
    db.add_all([admin, donor])

    campaigns = [
        {"title": "Clean water for Desa Sukamaju", "category": "infrastructure", "target_amount": 50_000_000, "days": 60},
        {"title": "School books drive", "category": "education", "target_amount": 10_000_000, "days": 30},
        {"title": "Flood relief", "category": "disaster", "target_amount": 100_000_000, "days": 14},
    ]
    created = []
    for c in campaigns:
        campaign = campaign_models.Campaign(
            title=c["title"],
            category=c["category"],
            target_amount=c["target_amount"],
            current_amount=0,
            donor_count=0,
            start_date=now,
            end_date=now + datetime.timedelta(days=c["days"]),
        )
        db.add(campaign)
        created.append(campaign)
    db.flush()

    # a mix of statuses so aggregates only pick up the completed ones
    donations = [
        (created[0], 250_000, "completed"),
        (created[0], 100_000, "pending"),
        (created[1], 50_000, "completed"),
        (created[1], 75_000, "failed"),
        (created[2], 1_000_000, "completed"),
    ]
    for campaign, amount, status in donations:
        db.add(donation_models.Donation(
            transaction_id=new_transaction_id(),
            campaign_id=campaign.id,
            user_id=donor.id,
            amount=amount,
            payment_method="bank_transfer",
            payment_status=status,
            donor_name=donor.name,
            completed_at=now if status == "completed" else None,
        ))
    db.flush()

    recalculator = AggregateRecalculator(DonationStore(db), CampaignStore(db))
    for campaign in created:
        recalculator.recalculate(campaign.id)
    db.commit()
    print(f"Seeded {len(created)} campaigns and {len(donations)} donations")
    db.close()


if __name__ == '__main__':
    seed()
