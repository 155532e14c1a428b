"""
Ad platform probe records and the strategy interface.

An AdCreative is one of four variants (text, image, video, carousel); each
variant checks its required media fields on construction. AdPlatformStatus
is one platform's answer for one lead.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional

from leadscout.markets.models import serialize

GOOGLE_ADS = 'Google Ads'
FACEBOOK_ADS = 'Facebook Ads'
INSTAGRAM_ADS = 'Instagram Ads'
NEXTDOOR = 'Nextdoor'
LINKEDIN_ADS = 'LinkedIn Ads'

PLATFORMS = [
    GOOGLE_ADS, FACEBOOK_ADS, INSTAGRAM_ADS, NEXTDOOR, LINKEDIN_ADS,
    'Twitter Ads', 'Yelp Ads', 'Angi Ads', 'HomeAdvisor', 'Thumbtack',
]

AD_STATUSES = ('active', 'inactive', 'paused')


class InvalidProbeRequest(ValueError):
    """Missing or malformed lead id / platform list."""


@dataclass
class AdTargeting:
    locations: List[str] = field(default_factory=list)
    age_range: Optional[str] = None
    gender: Optional[str] = None
    interests: List[str] = field(default_factory=list)
    keywords: List[str] = field(default_factory=list)


@dataclass
class AdCreative:
    id: str
    headline: Optional[str] = None
    primary_text: Optional[str] = None
    description: Optional[str] = None
    call_to_action: Optional[str] = None
    link_url: Optional[str] = None
    status: str = 'active'
    last_seen: Optional[str] = None
    impressions: Optional[int] = None
    spend: Optional[str] = None
    targeting: Optional[AdTargeting] = None

    type = None
    required = ()

    def __post_init__(self):
        if type(self) is AdCreative:
            raise TypeError('AdCreative is abstract; use TextAd, ImageAd, VideoAd or CarouselAd')
        if not self.id:
            raise ValueError('ad creative needs an id')
        if self.status not in AD_STATUSES:
            raise ValueError(f'invalid ad status {self.status!r}')
        self._validate_media()

    def _validate_media(self):
        missing = [name for name in self.required if not getattr(self, name)]
        if missing:
            raise ValueError(f'{self.type} ad {self.id} missing {", ".join(missing)}')

    def to_dict(self):
        data = {k: v for k, v in serialize(self).items() if v is not None}
        data['type'] = self.type
        return data


@dataclass
class TextAd(AdCreative):
    type = 'text'


@dataclass
class ImageAd(AdCreative):
    image_url: str = ''

    type = 'image'
    required = ('image_url',)


@dataclass
class VideoAd(AdCreative):
    video_url: Optional[str] = None
    thumbnail_url: Optional[str] = None

    type = 'video'

    def _validate_media(self):
        if not (self.video_url or self.thumbnail_url):
            raise ValueError(f'video ad {self.id} needs a video_url or thumbnail_url')


@dataclass
class CarouselAd(AdCreative):
    image_url: str = ''

    type = 'carousel'
    required = ('image_url',)


@dataclass
class AdPlatformStatus:
    platform: str
    has_ads: bool
    last_checked: str
    ad_count: int = 0
    ads: List[AdCreative] = field(default_factory=list)
    ad_spend: Optional[str] = None
    notes: str = ''

    def __post_init__(self):
        if not self.has_ads and (self.ad_count or self.ads):
            raise ValueError(f'{self.platform}: has_ads=False requires ad_count=0 and no ads')

    def to_dict(self):
        data = {
            'platform': self.platform,
            'hasAds': self.has_ads,
            'lastChecked': self.last_checked,
            'adCount': self.ad_count,
            'ads': [ad.to_dict() for ad in self.ads],
            'notes': self.notes,
        }
        if self.ad_spend is not None:
            data['adSpend'] = self.ad_spend
        return data


class ProbeStrategy(ABC):
    """One way of answering "does this lead advertise on this platform?"."""

    name = 'strategy'

    @abstractmethod
    def probe(self, template, lead_id, company_name, location=None) -> Optional[AdPlatformStatus]:
        """Status for the template's platform, or None to defer to the next strategy."""
