"""
Donation lifecycle: creation, status transitions, deletion and proof upload.

A donation only counts towards its campaign while its payment_status is
'completed'. Whenever an operation moves a donation across that boundary
(into or out of 'completed', or deletes a completed one) the campaign's
aggregate is recalculated from scratch after the donation write has been
flushed, and both writes are committed together.
"""
import datetime
import logging
import math
import os
import uuid
from typing import Optional

from sqlalchemy.orm import Session

from . import donation_schemas
from .aggregates import AggregateRecalculator
from .auth import Identity
from .donation_models import COMPLETED, PAYMENT_METHODS, PAYMENT_STATUSES, PENDING, Donation
from .errors import AccessDenied, NotFound, ValidationFailed
from .stores import CampaignStore, DonationStore, UserStore

logger = logging.getLogger(__name__)


def min_donation_amount():
    return int(os.getenv('MIN_DONATION_AMOUNT', '1000'))


def anonymous_donor_name():
    return os.getenv('ANONYMOUS_DONOR_NAME', 'Hamba Allah')


def new_transaction_id():
    return f"TRX-{uuid.uuid4().hex[:20].upper()}"


def crosses_completed_boundary(old_status, new_status):
    """True when exactly one of the two statuses is 'completed'."""
    return (old_status == COMPLETED) != (new_status == COMPLETED)


def _aggregate_schema(aggregate):
    if aggregate is None:
        return None
    return donation_schemas.CampaignAggregate(
        current_amount=aggregate.current_amount,
        donor_count=aggregate.donor_count,
    )


def _page(query, page, limit):
    total = query.count()
    items = query.offset((page - 1) * limit).limit(limit).all()
    return items, total, math.ceil(total / limit) if limit else 0


class DonationLifecycle:
    def __init__(
        self,
        db: Session,
        donations: Optional[DonationStore] = None,
        campaigns: Optional[CampaignStore] = None,
        users: Optional[UserStore] = None,
    ):
        self.db = db
        self.donations = donations or DonationStore(db)
        self.campaigns = campaigns or CampaignStore(db)
        self.users = users or UserStore(db)
        self.recalculator = AggregateRecalculator(self.donations, self.campaigns)

    # ===== CREATE =====

    def _check_new_donation(self, payload: donation_schemas.DonationCreate):
        if not payload.campaign_id or not payload.amount or not payload.payment_method:
            raise ValidationFailed('campaign_id, amount and payment_method are required')
        minimum = min_donation_amount()
        if payload.amount < minimum:
            raise ValidationFailed(f'Minimum donation is {minimum}')
        if payload.payment_method not in PAYMENT_METHODS:
            raise ValidationFailed(f"payment_method must be one of {', '.join(PAYMENT_METHODS)}")

    def _open_campaign(self, campaign_id):
        campaign = self.campaigns.find_by_id(campaign_id)
        if campaign is None:
            raise NotFound('Campaign', campaign_id)
        if not campaign.is_open():
            raise ValidationFailed('Campaign has ended')
        return campaign

    def create_donation(self, payload: donation_schemas.DonationCreate, identity: Identity):
        """Record a pending donation. Campaign aggregates are left alone."""
        self._check_new_donation(payload)
        self._open_campaign(payload.campaign_id)

        donor = self.users.find_by_id(identity.user_id)
        if donor is None:
            raise NotFound('User', identity.user_id)

        donation = self.donations.insert(Donation(
            transaction_id=new_transaction_id(),
            campaign_id=payload.campaign_id,
            user_id=identity.user_id,
            amount=payload.amount,
            message=payload.message,
            payment_method=payload.payment_method,
            payment_status=PENDING,
            unique_code=payload.unique_code,
            donor_name=anonymous_donor_name() if payload.is_anonymous else donor.name,
            is_anonymous=payload.is_anonymous,
        ))
        self.db.commit()
        logger.info(
            "Donation created: transaction=%s campaign=%s user=%s amount=%s",
            donation.transaction_id, donation.campaign_id, donation.user_id, donation.amount,
        )
        return donation_schemas.DonationCreated(
            message='Donation submitted and awaiting admin approval',
            donation=donation_schemas.DonationSummary.model_validate(donation),
        )

    def create_donation_by_admin(self, payload: donation_schemas.AdminDonationCreate, identity: Identity):
        """Record an offline donation on behalf of a donor, optionally already completed."""
        if not identity.is_admin:
            raise AccessDenied('Admin access required')
        self._check_new_donation(payload)
        if not payload.donor_name:
            raise ValidationFailed('donor_name is required')
        if payload.payment_status not in PAYMENT_STATUSES:
            raise ValidationFailed('Invalid payment status')
        self._open_campaign(payload.campaign_id)

        completed = payload.payment_status == COMPLETED
        donation = self.donations.insert(Donation(
            transaction_id=new_transaction_id(),
            campaign_id=payload.campaign_id,
            user_id=identity.user_id,
            amount=payload.amount,
            message=payload.message,
            payment_method=payload.payment_method,
            payment_status=payload.payment_status,
            unique_code=payload.unique_code,
            donor_name=anonymous_donor_name() if payload.is_anonymous else payload.donor_name,
            is_anonymous=payload.is_anonymous,
            completed_at=datetime.datetime.utcnow() if completed else None,
        ))
        aggregate = self.recalculator.recalculate(donation.campaign_id) if completed else None
        self.db.commit()
        logger.info(
            "Donation created by admin: transaction=%s campaign=%s status=%s admin=%s",
            donation.transaction_id, donation.campaign_id, donation.payment_status, identity.user_id,
        )
        return donation_schemas.DonationCreated(
            message='Donation created',
            donation=donation_schemas.DonationSummary.model_validate(donation),
            updated_campaign=_aggregate_schema(aggregate),
        )

    # ===== STATUS =====

    def _transition(self, donation: Donation, new_status):
        """Persist a status change, recalculating when it crosses 'completed'."""
        old_status = donation.payment_status
        fields = {'payment_status': new_status}
        if new_status == COMPLETED and old_status != COMPLETED:
            fields['completed_at'] = datetime.datetime.utcnow()
        elif old_status == COMPLETED and new_status != COMPLETED:
            fields['completed_at'] = None
        # flushed before the recalculation reads the campaign's donations
        self.donations.update_fields(donation, fields)

        aggregate = None
        if crosses_completed_boundary(old_status, new_status):
            aggregate = self.recalculator.recalculate(donation.campaign_id)
        self.db.commit()
        logger.info(
            "Donation status changed: transaction=%s %s -> %s recalculated=%s",
            donation.transaction_id, old_status, new_status, aggregate is not None,
        )
        return aggregate

    def update_status(self, donation_id, payload: donation_schemas.StatusUpdate, identity: Identity):
        if not identity.is_admin:
            raise AccessDenied('Admin access required')
        if not payload.payment_status:
            raise ValidationFailed('payment_status is required')
        if payload.payment_status not in PAYMENT_STATUSES:
            raise ValidationFailed('Invalid payment status')
        donation = self.donations.find_by_id(donation_id)
        if donation is None:
            raise NotFound('Donation', donation_id)

        aggregate = self._transition(donation, payload.payment_status)
        return donation_schemas.StatusUpdated(
            message='Donation status updated successfully',
            donation=donation_schemas.Donation.model_validate(donation),
            updated_campaign=_aggregate_schema(aggregate),
        )

    def update_payment_status(self, payload: donation_schemas.PaymentStatusUpdate):
        """Gateway notification. The caller is authenticated before this runs."""
        if not payload.transaction_id or not payload.status:
            raise ValidationFailed('transaction_id and status are required')
        if payload.status not in PAYMENT_STATUSES:
            raise ValidationFailed('Invalid payment status')
        donation = self.donations.find_by_transaction_id(payload.transaction_id)
        if donation is None:
            raise NotFound('Donation', payload.transaction_id)

        aggregate = self._transition(donation, payload.status)
        return donation_schemas.PaymentStatusUpdated(
            message='Payment status updated',
            transaction_id=donation.transaction_id,
            payment_status=donation.payment_status,
            updated_campaign=_aggregate_schema(aggregate),
        )

    # ===== DELETE / PROOF =====

    def delete_donation(self, donation_id, identity: Identity):
        if not identity.is_admin:
            raise AccessDenied('Admin access required')
        donation = self.donations.find_by_id(donation_id)
        if donation is None:
            raise NotFound('Donation', donation_id)

        campaign_id = donation.campaign_id
        was_completed = donation.payment_status == COMPLETED
        self.donations.delete(donation)
        aggregate = self.recalculator.recalculate(campaign_id) if was_completed else None
        self.db.commit()
        logger.info(
            "Donation deleted: id=%s campaign=%s was_completed=%s",
            donation_id, campaign_id, was_completed,
        )
        return donation_schemas.DonationDeleted(
            message='Donation deleted',
            updated_campaign=_aggregate_schema(aggregate),
        )

    def upload_proof(self, donation_id, payload: donation_schemas.ProofUpload, identity: Identity):
        if not payload.proof_of_transfer:
            raise ValidationFailed('proof_of_transfer is required')
        donation = self.donations.find_by_id(donation_id)
        if donation is None:
            raise NotFound('Donation', donation_id)
        if donation.user_id != identity.user_id:
            raise AccessDenied('Access denied')
        if donation.payment_status != PENDING:
            raise ValidationFailed('Proof can only be attached to a pending donation')
        if donation.proof_of_transfer:
            raise ValidationFailed('Proof of transfer already uploaded')

        self.donations.update_fields(donation, {'proof_of_transfer': payload.proof_of_transfer})
        self.db.commit()
        return donation_schemas.ProofUploaded(
            message='Proof of transfer uploaded',
            donation=donation_schemas.Donation.model_validate(donation),
        )

    # ===== READ =====

    def get_by_transaction_id(self, transaction_id, identity: Identity):
        donation = self.donations.find_by_transaction_id(transaction_id)
        if donation is None:
            raise NotFound('Donation', transaction_id)
        if donation.user_id != identity.user_id and not identity.is_admin:
            raise AccessDenied('Access denied')
        return donation_schemas.Donation.model_validate(donation)

    def list_campaign_donations(self, campaign_id, page=1, limit=10):
        q = (
            self.db.query(Donation)
            .filter(Donation.campaign_id == campaign_id, Donation.payment_status == COMPLETED)
            .order_by(Donation.completed_at.desc())
        )
        items, total, total_pages = _page(q, page, limit)
        return donation_schemas.PublicDonationPage(
            donations=[donation_schemas.PublicDonation.model_validate(d) for d in items],
            total_pages=total_pages,
            current_page=page,
            total=total,
        )

    def list_user_donations(self, identity: Identity, page=1, limit=10):
        q = (
            self.db.query(Donation)
            .filter(Donation.user_id == identity.user_id)
            .order_by(Donation.created_at.desc(), Donation.id.desc())
        )
        items, total, total_pages = _page(q, page, limit)
        return donation_schemas.DonationPage(
            donations=[donation_schemas.Donation.model_validate(d) for d in items],
            total_pages=total_pages,
            current_page=page,
            total=total,
        )

    def list_all(self, identity: Identity, page=1, limit=10, status=None, payment_method=None):
        if not identity.is_admin:
            raise AccessDenied('Admin access required')
        q = self.db.query(Donation)
        if status:
            q = q.filter(Donation.payment_status == status)
        if payment_method:
            q = q.filter(Donation.payment_method == payment_method)
        q = q.order_by(Donation.created_at.desc(), Donation.id.desc())
        items, total, total_pages = _page(q, page, limit)
        return donation_schemas.DonationPage(
            donations=[donation_schemas.Donation.model_validate(d) for d in items],
            total_pages=total_pages,
            current_page=page,
            total=total,
        )
