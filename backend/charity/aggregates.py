"""
Campaign aggregate recalculation.

current_amount and donor_count are never incremented in place. Every time a
donation crosses the 'completed' boundary the campaign's completed donations
are re-read and both fields are overwritten, so a missed update or a crash
between writes is repaired by the next recalculation.
"""
import logging
from dataclasses import dataclass

from .donation_models import COMPLETED
from .errors import NotFound
from .stores import CampaignStore, DonationStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CampaignAggregate:
    current_amount: int
    donor_count: int


class AggregateRecalculator:
    def __init__(self, donations: DonationStore, campaigns: CampaignStore):
        self.donations = donations
        self.campaigns = campaigns

    def recalculate(self, campaign_id) -> CampaignAggregate:
        """Recompute and store the aggregate of one campaign. Safe to repeat."""
        completed = self.donations.find_all_by_campaign_and_status(campaign_id, COMPLETED)
        aggregate = CampaignAggregate(
            current_amount=sum(d.amount for d in completed),
            donor_count=len(completed),
        )
        campaign = self.campaigns.update_fields(campaign_id, {
            'current_amount': aggregate.current_amount,
            'donor_count': aggregate.donor_count,
        })
        if campaign is None:
            raise NotFound('Campaign', campaign_id)
        logger.info(
            "Campaign recalculated: campaign=%s current_amount=%s donor_count=%s",
            campaign_id, aggregate.current_amount, aggregate.donor_count,
        )
        return aggregate
