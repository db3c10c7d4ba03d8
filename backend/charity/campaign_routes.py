"""
API endpoints for campaigns
"""
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from sqlalchemy import func, case
from typing import Optional
from . import campaign_models, campaign_schemas, donation_schemas
from .aggregates import AggregateRecalculator
from .auth import Identity, get_current_user, require_admin
from .database import get_db
from .donation_service import DonationLifecycle
from .stores import CampaignStore, DonationStore
import datetime
import logging
import math

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/campaigns", tags=["Campaigns"])


def _naive_utc(value):
    # end dates are stored as naive UTC
    if value is not None and value.tzinfo is not None:
        return value.astimezone(datetime.timezone.utc).replace(tzinfo=None)
    return value


def _check_campaign_fields(data: dict):
    now = datetime.datetime.utcnow()
    if 'title' in data and not data['title']:
        raise HTTPException(status_code=400, detail="title must not be empty")
    if 'target_amount' in data and (data['target_amount'] is None or data['target_amount'] <= 0):
        raise HTTPException(status_code=400, detail="target_amount must be greater than 0")
    if 'end_date' in data and (data['end_date'] is None or data['end_date'] <= now):
        raise HTTPException(status_code=400, detail="end_date must be in the future")


def _detail(campaign):
    progress = campaign.current_amount / campaign.target_amount * 100 if campaign.target_amount > 0 else 0
    return campaign_schemas.CampaignDetail(
        **campaign_schemas.Campaign.model_validate(campaign).model_dump(),
        status='active' if campaign.is_open() else 'ended',
        progress=round(progress, 2),
    )


@router.get("", response_model=campaign_schemas.CampaignPage)
def list_campaigns(
    page: int = Query(1, ge=1),
    limit: int = Query(100, ge=1, le=500),
    category: Optional[str] = None,
    status: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """List campaigns, newest first, optionally filtered by category or active/ended"""
    q = db.query(campaign_models.Campaign)
    if category:
        q = q.filter(campaign_models.Campaign.category == category)
    now = datetime.datetime.utcnow()
    if status == 'active':
        q = q.filter(campaign_models.Campaign.end_date >= now)
    elif status == 'ended':
        q = q.filter(campaign_models.Campaign.end_date < now)

    total = q.count()
    items = (
        q.order_by(campaign_models.Campaign.created_at.desc(), campaign_models.Campaign.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return campaign_schemas.CampaignPage(
        campaigns=[campaign_schemas.Campaign.model_validate(c) for c in items],
        total_pages=math.ceil(total / limit),
        current_page=page,
        total=total,
    )


@router.get("/stats", response_model=campaign_schemas.CampaignStats)
def get_campaign_stats(db: Session = Depends(get_db)):
    """Totals across all campaigns"""
    now = datetime.datetime.utcnow()
    Campaign = campaign_models.Campaign
    row = db.query(
        func.count(Campaign.id),
        func.coalesce(func.sum(Campaign.target_amount), 0),
        func.coalesce(func.sum(Campaign.current_amount), 0),
        func.coalesce(func.sum(Campaign.donor_count), 0),
        func.coalesce(func.sum(case((Campaign.end_date >= now, 1), else_=0)), 0),
    ).one()
    return campaign_schemas.CampaignStats(
        total_campaigns=row[0],
        total_target_amount=row[1],
        total_current_amount=row[2],
        total_donors=row[3],
        active_campaigns=row[4],
    )


@router.get("/{campaign_id}", response_model=campaign_schemas.CampaignDetail)
def get_campaign(campaign_id: int, db: Session = Depends(get_db)):
    campaign = CampaignStore(db).find_by_id(campaign_id)
    if not campaign:
        raise HTTPException(status_code=404, detail="Campaign not found")
    return _detail(campaign)


@router.post("", response_model=campaign_schemas.Campaign, status_code=201)
def create_campaign(
    payload: campaign_schemas.CampaignCreate,
    identity: Identity = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Create a campaign (admin only). Aggregates start at zero."""
    data = payload.model_dump()
    data['start_date'] = _naive_utc(data['start_date']) or datetime.datetime.utcnow()
    data['end_date'] = _naive_utc(data['end_date'])
    if not data['title'] or not data['target_amount'] or not data['end_date']:
        raise HTTPException(status_code=400, detail="title, target_amount and end_date are required")
    _check_campaign_fields(data)

    campaign = CampaignStore(db).insert(campaign_models.Campaign(**data, current_amount=0, donor_count=0))
    db.commit()
    db.refresh(campaign)
    logger.info("Campaign created: id=%s admin=%s", campaign.id, identity.user_id)
    return campaign


@router.put("/{campaign_id}", response_model=campaign_schemas.Campaign)
def update_campaign(
    campaign_id: int,
    payload: campaign_schemas.CampaignUpdate,
    identity: Identity = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Partial update (admin only). Aggregate fields are ignored."""
    data = payload.model_dump(exclude_unset=True)
    for key in ('start_date', 'end_date'):
        if key in data:
            data[key] = _naive_utc(data[key])
    _check_campaign_fields(data)

    campaign = CampaignStore(db).update_fields(campaign_id, data)
    if not campaign:
        raise HTTPException(status_code=404, detail="Campaign not found")
    db.commit()
    db.refresh(campaign)
    return campaign


@router.delete("/{campaign_id}", response_model=campaign_schemas.CampaignDeleted)
def delete_campaign(
    campaign_id: int,
    identity: Identity = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Delete a campaign and, before it, all of its donations (admin only)"""
    campaigns = CampaignStore(db)
    campaign = campaigns.find_by_id(campaign_id)
    if not campaign:
        raise HTTPException(status_code=404, detail="Campaign not found")

    had_money = campaign.current_amount > 0
    if had_money:
        logger.warning(
            "Deleting campaign %s (%r) with %s collected from %s donors",
            campaign.id, campaign.title, campaign.current_amount, campaign.donor_count,
        )
    deleted = DonationStore(db).delete_by_campaign(campaign_id)
    campaigns.delete(campaign)
    db.commit()
    return campaign_schemas.CampaignDeleted(
        message="Campaign deleted",
        deleted_donations=deleted,
        warning="The deleted campaign had donations, which were deleted as well" if had_money else None,
    )


@router.post("/{campaign_id}/recalculate", response_model=donation_schemas.CampaignAggregate)
def recalculate_campaign(
    campaign_id: int,
    identity: Identity = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Rebuild current_amount / donor_count from completed donations (admin only)"""
    aggregate = AggregateRecalculator(DonationStore(db), CampaignStore(db)).recalculate(campaign_id)
    db.commit()
    return donation_schemas.CampaignAggregate(
        current_amount=aggregate.current_amount,
        donor_count=aggregate.donor_count,
    )


@router.post("/{campaign_id}/donate", response_model=donation_schemas.DonationCreated, status_code=201)
def donate_to_campaign(
    campaign_id: int,
    payload: donation_schemas.DonationCreate,
    identity: Identity = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Donate to this campaign; campaign_id in the body is overridden by the path"""
    payload.campaign_id = campaign_id
    return DonationLifecycle(db).create_donation(payload, identity)
