from pydantic import BaseModel, ConfigDict
from typing import List, Optional
import datetime


class DonationCreate(BaseModel):
    # presence and minimum amount are checked by the lifecycle so the client
    # gets one readable message instead of a schema dump
    campaign_id: Optional[int] = None
    amount: Optional[int] = None
    payment_method: Optional[str] = None
    message: Optional[str] = None
    is_anonymous: bool = False
    unique_code: Optional[int] = None


class AdminDonationCreate(DonationCreate):
    donor_name: Optional[str] = None
    payment_status: str = 'pending'


class StatusUpdate(BaseModel):
    payment_status: Optional[str] = None


class PaymentStatusUpdate(BaseModel):
    """Payload posted by the payment gateway."""
    transaction_id: Optional[str] = None
    status: Optional[str] = None


class ProofUpload(BaseModel):
    proof_of_transfer: Optional[str] = None


class CampaignAggregate(BaseModel):
    current_amount: int
    donor_count: int


class CampaignSummary(BaseModel):
    id: int
    title: str
    image_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class DonationSummary(BaseModel):
    id: int
    transaction_id: str
    campaign_id: int
    amount: int
    payment_status: str
    payment_method: str
    donor_name: str
    is_anonymous: bool
    message: Optional[str] = None
    unique_code: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class Donation(DonationSummary):
    user_id: int
    proof_of_transfer: Optional[str] = None
    created_at: datetime.datetime
    completed_at: Optional[datetime.datetime] = None
    campaign: Optional[CampaignSummary] = None


class PublicDonation(BaseModel):
    """What anyone may see about a completed donation."""
    id: int
    amount: int
    message: Optional[str] = None
    donor_name: str
    is_anonymous: bool
    completed_at: Optional[datetime.datetime] = None

    model_config = ConfigDict(from_attributes=True)


class DonationCreated(BaseModel):
    message: str
    donation: DonationSummary
    updated_campaign: Optional[CampaignAggregate] = None


class StatusUpdated(BaseModel):
    message: str
    donation: Donation
    updated_campaign: Optional[CampaignAggregate] = None


class PaymentStatusUpdated(BaseModel):
    message: str
    transaction_id: str
    payment_status: str
    updated_campaign: Optional[CampaignAggregate] = None


class DonationDeleted(BaseModel):
    message: str
    updated_campaign: Optional[CampaignAggregate] = None


class ProofUploaded(BaseModel):
    message: str
    donation: Donation


class DonationPage(BaseModel):
    donations: List[Donation]
    total_pages: int
    current_page: int
    total: int


class PublicDonationPage(BaseModel):
    donations: List[PublicDonation]
    total_pages: int
    current_page: int
    total: int
