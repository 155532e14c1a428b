"""
Ad platform prober: for each requested platform, try the strategies in
order and return the first answer.

Default chain is ScrapingBee, Apify, then synthetic mock data. Platforms
are checked one at a time with PROBE_DELAY seconds between calls so the
scraping proxies are not hit in bursts.
"""
import logging
import time
from datetime import datetime, timezone

from leadscout.adplatforms.base import AdPlatformStatus, InvalidProbeRequest
from leadscout.adplatforms.templates import PLATFORM_TEMPLATES
from leadscout.config import PROBE_DELAY

logger = logging.getLogger('adplatforms.prober')


def default_strategies():
    from leadscout.adplatforms.live import ApifyAdLibraryStrategy, LiveScrapeStrategy
    from leadscout.adplatforms.mock import SyntheticMockStrategy
    return [LiveScrapeStrategy(), ApifyAdLibraryStrategy(), SyntheticMockStrategy()]


class AdPlatformProber:

    def __init__(self, strategies=None, sleep=time.sleep, delay=PROBE_DELAY, clock=time.time):
        self.strategies = strategies if strategies is not None else default_strategies()
        self.sleep = sleep
        self.delay = delay
        self.clock = clock

    def _now(self):
        return datetime.fromtimestamp(self.clock(), tz=timezone.utc).isoformat()

    def check_platform(self, platform, lead_id, company_name, location=None) -> AdPlatformStatus:
        template = PLATFORM_TEMPLATES.get(platform)
        if template is None:
            return AdPlatformStatus(platform=platform, has_ads=False, last_checked=self._now(),
                                    notes='Platform not yet implemented')

        for strategy in self.strategies:
            status = strategy.probe(template, lead_id, company_name, location)
            if status is not None:
                logger.info("%s for lead %s via %s: has_ads=%s count=%d",
                            platform, lead_id, strategy.name, status.has_ads, status.ad_count)
                return status

        return AdPlatformStatus(platform=platform, has_ads=False, last_checked=self._now(),
                                notes='No data source available')

    def check_platforms(self, lead_id, platforms, company_name, location=None):
        """
        One status per requested platform, in request order.

        A platform whose check raises gets a has_ads=False status with a
        "Check failed" note; the remaining platforms still run.
        """
        if not lead_id:
            raise InvalidProbeRequest('leadId is required')
        if not isinstance(platforms, (list, tuple)):
            raise InvalidProbeRequest('platforms must be a list')
        if not all(isinstance(p, str) for p in platforms):
            raise InvalidProbeRequest('platform names must be strings')

        results = []
        for n, platform in enumerate(platforms):
            if n and self.delay:
                self.sleep(self.delay)
            try:
                results.append(self.check_platform(platform, lead_id, company_name, location))
            except Exception as e:
                logger.error("Ad platform check failed for %s (lead %s): %s", platform, lead_id, e)
                results.append(AdPlatformStatus(platform=platform, has_ads=False,
                                                last_checked=self._now(),
                                                notes=f'Check failed: {e}'))
        return results


def upsert_platform_status(existing, new):
    """Merge `new` into `existing` by platform name: replace in place, else append."""
    merged = list(existing or [])
    index = {status.platform: i for i, status in enumerate(merged)}
    for status in new:
        if status.platform in index:
            merged[index[status.platform]] = status
        else:
            index[status.platform] = len(merged)
            merged.append(status)
    return merged


_default_prober = None


def get_prober():
    global _default_prober
    if _default_prober is None:
        _default_prober = AdPlatformProber()
    return _default_prober
