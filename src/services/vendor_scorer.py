"""Vendor auto-assignment by weighted track-record score."""

from typing import Optional

from src.models.vendor import Vendor, VendorSelection, VendorStatus
from src.utils.config import ScoringWeights
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)

PREFERRED_VENDOR_REASON = "Preferred vendor"
NO_VENDORS_REASON = "No vendors available"


def score_vendor(vendor: Vendor, weights: ScoringWeights) -> float:
    """
    Score = rating + response + experience + insurance + preferred bonus.

    With default weights: rating 0-40, response 0-30 (15 when unknown),
    experience 0-20, insurance 10, preferred status 15.
    """
    rating = vendor.average_rating if vendor.average_rating is not None else weights.default_rating
    rating_score = rating * weights.rating_multiplier

    hours = vendor.average_response_time_hours
    if hours is None:
        response_score = weights.unknown_response_score
    else:
        capped = min(hours, weights.response_cap_hours)
        response_score = (weights.response_cap_hours - capped) * weights.response_multiplier

    jobs = vendor.total_jobs_completed or 0
    experience_score = min(jobs, weights.experience_cap_jobs) * weights.experience_multiplier

    insurance_score = weights.insurance_score if vendor.insurance_verified else 0.0
    preferred_bonus = weights.preferred_status_bonus if vendor.status == VendorStatus.PREFERRED else 0.0

    return rating_score + response_score + experience_score + insurance_score + preferred_bonus


def pick_best(candidates: list[Vendor], weights: ScoringWeights) -> Optional[tuple[Vendor, float]]:
    """Highest score wins; ties keep the earlier candidate."""
    best: Optional[tuple[Vendor, float]] = None
    for vendor in candidates:
        score = score_vendor(vendor, weights)
        if best is None or score > best[1]:
            best = (vendor, score)
    return best


class VendorScorer:
    """Selects a vendor for a generated maintenance task."""

    def __init__(self, directory, weights: Optional[ScoringWeights] = None, candidate_limit: int = 5):
        self.directory = directory
        self.weights = weights or ScoringWeights()
        self.candidate_limit = candidate_limit

    async def select_vendor(
        self,
        property_id: str,
        category: str,
        preferred_vendor_id: Optional[str] = None,
    ) -> VendorSelection:
        # A pinned vendor wins regardless of score, as long as it is still eligible
        if preferred_vendor_id:
            vendor = await self.directory.get_eligible_vendor(preferred_vendor_id)
            if vendor is not None:
                logger.info(
                    "Assigned preferred vendor",
                    property_id=property_id,
                    vendor_id=vendor.id,
                    category=category
                )
                return VendorSelection(vendor_id=vendor.id, reason=PREFERRED_VENDOR_REASON)
            logger.warning(
                "Preferred vendor not eligible, falling back to scoring",
                property_id=property_id,
                preferred_vendor_id=preferred_vendor_id
            )

        candidates = await self.directory.list_candidates(category, self.candidate_limit)
        best = pick_best(candidates, self.weights)
        if best is None:
            logger.warning(
                "No vendors available for category",
                property_id=property_id,
                category=category
            )
            return VendorSelection(vendor_id=None, reason=NO_VENDORS_REASON)

        vendor, score = best
        logger.info(
            "Auto-assigned vendor",
            property_id=property_id,
            category=category,
            vendor_id=vendor.id,
            score=round(score, 2),
            candidates=len(candidates)
        )
        return VendorSelection(
            vendor_id=vendor.id,
            reason=f"Best {category} vendor (score: {score:.1f})",
            score=score,
        )
