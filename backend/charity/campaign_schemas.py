from pydantic import BaseModel, ConfigDict
from typing import List, Optional
import datetime


class CampaignCreate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    category: Optional[str] = None
    organization_name: Optional[str] = None
    organization_logo: Optional[str] = None
    target_amount: Optional[int] = None
    start_date: Optional[datetime.datetime] = None
    end_date: Optional[datetime.datetime] = None


class CampaignUpdate(CampaignCreate):
    """Partial update. current_amount / donor_count are not accepted here."""
    pass


class Campaign(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    category: Optional[str] = None
    organization_name: Optional[str] = None
    organization_logo: Optional[str] = None
    target_amount: int
    current_amount: int
    donor_count: int
    start_date: Optional[datetime.datetime] = None
    end_date: datetime.datetime
    created_at: datetime.datetime

    model_config = ConfigDict(from_attributes=True)


class CampaignDetail(Campaign):
    status: str  # active, ended
    progress: float  # percent of target


class CampaignPage(BaseModel):
    campaigns: List[Campaign]
    total_pages: int
    current_page: int
    total: int


class CampaignStats(BaseModel):
    total_campaigns: int
    total_target_amount: int
    total_current_amount: int
    total_donors: int
    active_campaigns: int


class CampaignDeleted(BaseModel):
    message: str
    deleted_donations: int
    warning: Optional[str] = None
