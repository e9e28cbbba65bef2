"""
Plan enrichment - Adds affiliate metadata to validated plans.

Enrichment only ever adds keys. Original values stay exactly as the
validator saw them, so an enriched plan is still a valid plan.
"""
from typing import Optional, Protocol
import asyncio
import copy
import logging

import httpx

logger = logging.getLogger(__name__)


ENRICHED_MARKER = "enriched"
PARTNER_LINK_KEY = "partnerLink"


class AffiliateResolver(Protocol):
    """Turns a plain booking link into a partner (affiliate) link."""

    async def resolve(self, url: str, kind: str) -> Optional[str]:
        ...


class PartnerTagResolver:
    """
    Tags links with a partner id query parameter.

    Stands in for real affiliate APIs; no network calls are made.
    """

    def __init__(self, partner_id: str, param: str = "aid"):
        self.partner_id = partner_id
        self.param = param

    async def resolve(self, url: str, kind: str) -> Optional[str]:
        parsed = httpx.URL(url)
        if parsed.scheme not in ("http", "https"):
            return None
        tagged = parsed.copy_merge_params({self.param: self.partner_id, "utm_content": kind})
        return str(tagged)


class PlanEnricher:
    """Post-processes validated plans."""

    def __init__(self, resolver: Optional[AffiliateResolver] = None):
        self.resolver = resolver

    async def enrich(self, plan: dict) -> dict:
        """
        Return an enriched copy of a valid plan.

        Each link lookup runs concurrently. A failed lookup is logged and
        leaves its entry as it was.
        """
        enriched = copy.deepcopy(plan)
        if self.resolver is not None:
            entries = list(self._linked_entries(enriched))
            results = await asyncio.gather(
                *(self.resolver.resolve(entry[key], kind) for entry, key, kind in entries),
                return_exceptions=True,
            )
            failed = 0
            for (entry, key, kind), result in zip(entries, results):
                if isinstance(result, Exception):
                    failed += 1
                    logger.warning(f"Affiliate lookup failed for {kind} link {entry[key]!r}: {result}")
                elif result and PARTNER_LINK_KEY not in entry:
                    entry[PARTNER_LINK_KEY] = result
            if failed:
                logger.info(f"Enrichment finished with {failed} of {len(entries)} lookups failed")
        enriched.setdefault(ENRICHED_MARKER, True)
        return enriched

    def _linked_entries(self, plan: dict):
        """Yield (entry, link key, kind) for every entry carrying a link."""
        accommodation = plan.get("unterkunft")
        if isinstance(accommodation, dict) and accommodation.get("affiliateLink"):
            yield accommodation, "affiliateLink", "unterkunft"
        for day in plan.get("tagesplan") or []:
            for activity in day.get("aktivitaeten") or []:
                if activity.get("affiliateLink"):
                    yield activity, "affiliateLink", "aktivitaet"
        premium = plan.get("premiumEmpfehlung")
        if isinstance(premium, dict) and premium.get("jetztBuchenLink"):
            yield premium, "jetztBuchenLink", "premium"
