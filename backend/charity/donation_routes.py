"""
API endpoints for donations
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional
from . import donation_schemas
from .auth import Identity, get_current_user, verify_webhook_key
from .database import get_db
from .donation_service import DonationLifecycle

router = APIRouter(prefix="/api/v1/donations", tags=["Donations"])


def get_lifecycle(db: Session = Depends(get_db)) -> DonationLifecycle:
    return DonationLifecycle(db)


@router.post("", response_model=donation_schemas.DonationCreated, status_code=201)
def create_donation(
    payload: donation_schemas.DonationCreate,
    identity: Identity = Depends(get_current_user),
    lifecycle: DonationLifecycle = Depends(get_lifecycle),
):
    """Submit a donation; it stays pending until confirmed"""
    return lifecycle.create_donation(payload, identity)


@router.post("/admin", response_model=donation_schemas.DonationCreated, status_code=201)
def create_donation_by_admin(
    payload: donation_schemas.AdminDonationCreate,
    identity: Identity = Depends(get_current_user),
    lifecycle: DonationLifecycle = Depends(get_lifecycle),
):
    return lifecycle.create_donation_by_admin(payload, identity)


@router.get("/campaign/{campaign_id}", response_model=donation_schemas.PublicDonationPage)
def list_campaign_donations(
    campaign_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    lifecycle: DonationLifecycle = Depends(get_lifecycle),
):
    """Completed donations of a campaign, newest first"""
    return lifecycle.list_campaign_donations(campaign_id, page, limit)


@router.get("/my-donations", response_model=donation_schemas.DonationPage)
def list_my_donations(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    identity: Identity = Depends(get_current_user),
    lifecycle: DonationLifecycle = Depends(get_lifecycle),
):
    return lifecycle.list_user_donations(identity, page, limit)


@router.get("/transaction/{transaction_id}", response_model=donation_schemas.Donation)
def get_donation_by_transaction(
    transaction_id: str,
    identity: Identity = Depends(get_current_user),
    lifecycle: DonationLifecycle = Depends(get_lifecycle),
):
    return lifecycle.get_by_transaction_id(transaction_id, identity)


@router.get("", response_model=donation_schemas.DonationPage)
def list_donations(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[str] = None,
    payment_method: Optional[str] = None,
    identity: Identity = Depends(get_current_user),
    lifecycle: DonationLifecycle = Depends(get_lifecycle),
):
    """All donations (admin only)"""
    return lifecycle.list_all(identity, page, limit, status, payment_method)


@router.put("/payment-status", response_model=donation_schemas.PaymentStatusUpdated,
            dependencies=[Depends(verify_webhook_key)])
def update_payment_status(
    payload: donation_schemas.PaymentStatusUpdate,
    lifecycle: DonationLifecycle = Depends(get_lifecycle),
):
    """Payment gateway webhook, keyed by transaction id"""
    return lifecycle.update_payment_status(payload)


@router.patch("/{donation_id}/status", response_model=donation_schemas.StatusUpdated)
def update_donation_status(
    donation_id: int,
    payload: donation_schemas.StatusUpdate,
    identity: Identity = Depends(get_current_user),
    lifecycle: DonationLifecycle = Depends(get_lifecycle),
):
    """Change payment status (admin only)"""
    return lifecycle.update_status(donation_id, payload, identity)


@router.patch("/{donation_id}/proof", response_model=donation_schemas.ProofUploaded)
def upload_proof(
    donation_id: int,
    payload: donation_schemas.ProofUpload,
    identity: Identity = Depends(get_current_user),
    lifecycle: DonationLifecycle = Depends(get_lifecycle),
):
    """Attach proof of transfer (donation owner only)"""
    return lifecycle.upload_proof(donation_id, payload, identity)


@router.delete("/{donation_id}", response_model=donation_schemas.DonationDeleted)
def delete_donation(
    donation_id: int,
    identity: Identity = Depends(get_current_user),
    lifecycle: DonationLifecycle = Depends(get_lifecycle),
):
    return lifecycle.delete_donation(donation_id, identity)
