"""
Synthetic ad data for platforms without a live source (or whose live
source is unconfigured or failing).

Every probe draws from random.Random(f"{seed}:{lead_id}:{platform}"), so a
lead gets the same answer on every run. Timestamps are relative to the
injected clock for the same reason.
"""
import logging
import os
import random
import re
import time
from datetime import datetime, timedelta, timezone

from leadscout.adplatforms.base import (
    AdPlatformStatus, AdTargeting, CarouselAd, ImageAd, ProbeStrategy, TextAd, VideoAd,
)
from leadscout.adplatforms.templates import (
    NEXTDOOR_TRADES, PLUMBING, PLUMBING_CAROUSEL, SEARCH_COPY, SOCIAL_CALLS_TO_ACTION,
    SOCIAL_COPY, company_flavour, is_b2b, slugify,
)
from leadscout.config import MOCK_SEED

logger = logging.getLogger('adplatforms.mock')

SOCIAL_AD_SPEND = '$1,000-5,000/mo'
SOCIAL_KINDS = ['image', 'video', 'carousel']
SOCIAL_STATUSES = ['active', 'active', 'inactive']
LEADING_DOLLARS = re.compile(r'\$(\d+)')


def total_flat_spend(ads):
    total = 0
    for ad in ads:
        match = LEADING_DOLLARS.match(ad.spend or '')
        if match:
            total += int(match.group(1))
    return f'${total}/mo'


class SyntheticMockStrategy(ProbeStrategy):
    """Seeded stand-in data, chosen by the company's trade."""

    name = 'mock'

    def __init__(self, seed=MOCK_SEED, rng_factory=None, clock=time.time, env=None):
        self.seed = seed
        self.rng_factory = rng_factory or self._seeded_rng
        self.clock = clock
        self.env = os.environ if env is None else env

    def _seeded_rng(self, lead_id, platform):
        return random.Random(f'{self.seed}:{lead_id}:{platform}')

    def _now(self):
        return datetime.fromtimestamp(self.clock(), tz=timezone.utc)

    def _credential_set(self, template):
        return bool(self.env.get(template.mock_env_var))

    def _seen_within(self, rng, days):
        return (self._now() - timedelta(days=rng.random() * days)).isoformat()

    def probe(self, template, lead_id, company_name, location=None):
        rng = self.rng_factory(lead_id, template.platform)
        now = self._now().isoformat()

        # key set means the live source was tried and gave no answer
        live_tried = self._credential_set(template)

        if rng.random() >= template.probability_for(company_name):
            hint = ('live source unavailable' if live_tried
                    else f'configure {template.mock_env_var} for live data')
            return AdPlatformStatus(
                platform=template.platform,
                has_ads=False,
                last_checked=now,
                notes=f'Mock data - no {template.platform} activity detected ({hint})',
            )

        build = getattr(self, f'_{template.mock_kind}_ads')
        ads, ad_spend, summary = build(template, rng, lead_id, company_name or '', location)
        logger.debug("Mock %s: %d ads for lead %s", template.platform, len(ads), lead_id)
        return AdPlatformStatus(
            platform=template.platform,
            has_ads=True,
            last_checked=now,
            ad_count=len(ads),
            ads=ads,
            ad_spend=ad_spend,
            notes=(f'Mock data (live source unavailable): {summary}' if live_tried
                   else f'Mock data ({template.mock_env_var} not set): {summary}'),
        )

    # ── Builders: (ads, ad_spend, summary) ────────────────────────────

    def _google_ads(self, template, rng, lead_id, company_name, location):
        flavour = company_flavour(company_name)
        slug = slugify(company_name)
        place = location or 'Local'

        ads = []
        for i, row in enumerate(SEARCH_COPY[flavour], 1):
            headline, text, description, cta, keywords, spend, spend_spread, imps, imps_spread = row
            ads.append(TextAd(
                id=f'{template.id_prefix}-search-{lead_id}-{i}',
                headline=headline.format(company=company_name, location=place),
                primary_text=text.format(company=company_name, location=place),
                description=description,
                call_to_action=cta,
                link_url=f'https://example.com/{slug}' + ('/quote' if i > 1 else ''),
                last_seen=self._seen_within(rng, 14),
                impressions=imps + rng.randrange(imps_spread),
                spend=f'${spend + rng.randrange(spend_spread)}',
                targeting=(AdTargeting(locations=[location or 'Service area'], keywords=list(keywords))
                           if i == 1 else None),
            ))
        search_count = len(ads)

        if flavour == PLUMBING:
            ads.append(CarouselAd(
                id=f'{template.id_prefix}-search-{lead_id}-{len(ads) + 1}',
                last_seen=self._seen_within(rng, 10),
                impressions=12000 + rng.randrange(8000),
                spend=f'${125 + rng.randrange(75)}',
                **PLUMBING_CAROUSEL,
            ))

        return ads, total_flat_spend(ads), f'running {search_count} search ads with targeted keywords'

    def _facebook_ads(self, template, rng, lead_id, company_name, location):
        flavour = company_flavour(company_name)
        copy = SOCIAL_COPY[flavour]
        slug = slugify(company_name or 'company')
        theme = copy['image_theme']

        ads = []
        for i in range(2 + rng.randrange(8)):
            common = dict(
                id=f'{template.id_prefix}-{lead_id}-{i}',
                headline=copy['headlines'][i % len(copy['headlines'])].format(company=company_name),
                primary_text=copy['texts'][i % len(copy['texts'])].format(location=location or 'local'),
                call_to_action=SOCIAL_CALLS_TO_ACTION[i % 4],
                link_url=f'https://example.com/{slug}',
                status='active' if i == 0 else SOCIAL_STATUSES[i % 3],
                last_seen=self._seen_within(rng, 14),
                impressions=10000 + rng.randrange(50000),
                spend=f'${50 + rng.randrange(300)}',
                targeting=AdTargeting(
                    locations=[f'Within 25 miles of {location}' if location else 'Local area'],
                    age_range='25-65+',
                    gender='All',
                    interests=list(copy['interests']),
                ),
            )
            image = f'https://source.unsplash.com/400x300/?{theme},{i}'
            kind = SOCIAL_KINDS[i % 3]
            if kind == 'video':
                ads.append(VideoAd(thumbnail_url=f'https://source.unsplash.com/200x150/?{theme},{i}',
                                   **common))
            elif kind == 'carousel':
                ads.append(CarouselAd(image_url=image, **common))
            else:
                ads.append(ImageAd(image_url=image, **common))

        return ads, SOCIAL_AD_SPEND, f'{len(ads)} ads in the Ad Library'

    def _nextdoor_ads(self, template, rng, lead_id, company_name, location):
        ads = [
            ImageAd(
                id=f'{template.id_prefix}-{lead_id}-{i}',
                image_url=f'https://picsum.photos/400/300?random=nextdoor-{lead_id}-{i}',
                headline='Your Trusted Neighborhood Professional',
                primary_text=(f'Local {NEXTDOOR_TRADES[i % 4]} serving your neighborhood for over '
                              f'10 years. Recommended by {20 + rng.randrange(50)} neighbors!'),
                description='Licensed · Insured · Background Checked',
                call_to_action='Get Neighborhood Deal',
                last_seen=self._seen_within(rng, 7),
                targeting=AdTargeting(locations=['Your neighborhood and surrounding areas']),
            )
            for i in range(1 + rng.randrange(3))
        ]
        return ads, None, f'{len(ads)} neighborhood sponsorships'

    def _linkedin_ads(self, template, rng, lead_id, company_name, location):
        slug = slugify(company_name)
        first_word = company_name.lower().split(' ')[0] if company_name else 'business'
        ads = [ImageAd(
            id=f'{template.id_prefix}-{lead_id}-1',
            image_url=f'https://source.unsplash.com/400x300/?business,professional,{first_word}',
            headline=f'{company_name} - Trusted by Leading Businesses',
            primary_text=(f"Looking for reliable {location or 'local'} commercial services? We partner "
                          f"with businesses of all sizes to deliver professional solutions."),
            call_to_action='Learn More',
            link_url=f'https://linkedin.com/company/{slug}',
            last_seen=self._seen_within(rng, 30),
            impressions=8500 + rng.randrange(5000),
            spend=f'${300 + rng.randrange(200)}',
            targeting=AdTargeting(
                locations=[location or 'United States'],
                interests=['Business Services', 'Facility Management', 'Commercial Real Estate'],
            ),
        )]

        if is_b2b(company_name) and rng.random() > 0.5:
            ads.append(VideoAd(
                id=f'{template.id_prefix}-{lead_id}-2',
                video_url='https://example.com/linkedin-video',
                thumbnail_url='https://source.unsplash.com/400x300/?corporate,office',
                headline='See How We Help Businesses Save Time & Money',
                primary_text=('Our commercial solutions have helped over 100 businesses reduce costs '
                              'by 25%. Schedule a consultation today.'),
                call_to_action='Download Case Study',
                link_url=f'https://linkedin.com/company/{slug}/case-studies',
                last_seen=self._seen_within(rng, 14),
                impressions=5200 + rng.randrange(3000),
                spend=f'${250 + rng.randrange(150)}',
                targeting=AdTargeting(
                    locations=[location or 'United States'],
                    interests=['Business Management', 'Cost Reduction', 'Operations'],
                ),
            ))

        return ads, total_flat_spend(ads), f'targeting B2B decision makers with {len(ads)} sponsored content ads'
