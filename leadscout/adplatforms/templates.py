"""
Per-platform probe configuration.

Everything that differs between platforms (where live data comes from,
which HTML markers mean "ads present", mock probabilities, ad copy) lives
in this table so the strategies stay generic.
"""
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from leadscout.adplatforms.base import (
    FACEBOOK_ADS, GOOGLE_ADS, INSTAGRAM_ADS, LINKEDIN_ADS, NEXTDOOR,
)

SCRAPINGBEE = 'scrapingbee'
APIFY = 'apify'

WINDOW_TINT = 'window_tint'
PLUMBING = 'plumbing'
HVAC = 'hvac'
GENERIC = 'generic'

# checked in order; first hit wins
FLAVOUR_KEYWORDS = [
    (WINDOW_TINT, ('window', 'tint')),
    (PLUMBING, ('plumb',)),
    (HVAC, ('hvac', 'heating', 'cooling')),
]

B2B_KEYWORDS = ('commercial', 'industrial', 'enterprise', 'pro', 'business', 'solutions')


def company_flavour(company_name):
    name = (company_name or '').lower()
    for flavour, keywords in FLAVOUR_KEYWORDS:
        if any(k in name for k in keywords):
            return flavour
    return GENERIC


def is_b2b(company_name):
    name = (company_name or '').lower()
    return any(k in name for k in B2B_KEYWORDS)


def slugify(company_name):
    return '-'.join((company_name or '').lower().split())


@dataclass(frozen=True)
class PlatformTemplate:
    platform: str
    id_prefix: str
    mock_kind: str
    mock_probability: float
    mock_env_var: str
    live_source: Optional[str] = None
    search_url: str = ''
    scrape_params: Dict[str, str] = field(default_factory=dict)
    markers: Tuple[str, ...] = ()
    count_pattern: str = ''
    max_live_ads: int = 10
    live_creatives: Tuple[str, ...] = ()
    base_spend: int = 0
    spend_per_ad: int = 0
    live_label: str = ''
    no_markers_is_answer: bool = False
    b2b_probability: Optional[float] = None

    def probability_for(self, company_name):
        if self.b2b_probability is not None and is_b2b(company_name):
            return self.b2b_probability
        return self.mock_probability


PLATFORM_TEMPLATES = {
    GOOGLE_ADS: PlatformTemplate(
        platform=GOOGLE_ADS,
        id_prefix='google',
        mock_kind='google',
        mock_probability=0.55,
        mock_env_var='SCRAPINGBEE_API_KEY',
        live_source=SCRAPINGBEE,
        search_url='https://adstransparency.google.com/?region=US&query={query}',
        scrape_params={'render_js': 'true', 'wait': '3000', 'block_resources': 'false'},
        markers=('creative-container', 'ad-preview', 'text-ad', 'image-ad'),
        count_pattern=r'creative-container|ad-preview',
        live_creatives=('search', 'display'),
        base_spend=500,
        spend_per_ad=100,
        live_label='Google Ads Transparency Center',
    ),
    FACEBOOK_ADS: PlatformTemplate(
        platform=FACEBOOK_ADS,
        id_prefix='fb',
        mock_kind='facebook',
        mock_probability=0.6,
        mock_env_var='APIFY_API_TOKEN',
        live_source=APIFY,
        search_url=('https://www.facebook.com/ads/library/?active_status=active&ad_type=all'
                    '&country=US&q={query}&search_type=keyword_unordered'),
        live_label='Apify Facebook Ad Library scraper',
    ),
    INSTAGRAM_ADS: PlatformTemplate(
        platform=INSTAGRAM_ADS,
        id_prefix='ig',
        mock_kind='facebook',
        mock_probability=0.6,
        mock_env_var='APIFY_API_TOKEN',
        live_source=APIFY,
        search_url=('https://www.facebook.com/ads/library/?active_status=active&ad_type=all'
                    '&country=US&q={query}&search_type=keyword_unordered&publisher_platforms=instagram'),
        live_label='Apify Facebook Ad Library scraper',
    ),
    NEXTDOOR: PlatformTemplate(
        platform=NEXTDOOR,
        id_prefix='nextdoor',
        mock_kind='nextdoor',
        mock_probability=0.4,
        mock_env_var='NEXTDOOR_API_KEY',
    ),
    LINKEDIN_ADS: PlatformTemplate(
        platform=LINKEDIN_ADS,
        id_prefix='linkedin',
        mock_kind='linkedin',
        mock_probability=0.2,
        b2b_probability=0.5,
        mock_env_var='SCRAPINGBEE_API_KEY',
        live_source=SCRAPINGBEE,
        search_url='https://www.linkedin.com/ad-library/search?q={query}',
        scrape_params={'render_js': 'true', 'wait': '5000', 'premium_proxy': 'true'},
        markers=('ad-card', 'sponsored-content', 'ad-creative', 'data-test="ad-result"'),
        count_pattern=r'ad-card|sponsored-content|data-test="ad-result"',
        live_creatives=('sponsored', 'text'),
        base_spend=300,
        spend_per_ad=150,
        live_label='LinkedIn Ad Library',
        no_markers_is_answer=True,
    ),
}


# ── Ad copy ──────────────────────────────────────────────────────────────────
# {company} and {location} are filled in by the mock strategy.

SOCIAL_COPY = {
    WINDOW_TINT: {
        'headlines': [
            '{company} - Beat the Heat!',
            'Professional Window Tinting - Save on Energy',
            'UV Protection for Your Home & Car',
            'Limited Time: 20% Off Window Tinting',
        ],
        'texts': [
            'Block harmful UV rays and reduce energy costs by up to 30%! Professional installation with lifetime warranty.',
            'Car & Home Window Tinting Special! Keep your interior cool and protected. Free estimates available.',
            'Transform your space with premium window films. Privacy, security, and style in one solution.',
            'Residential & Commercial Tinting Services. Licensed, insured, and trusted by thousands in your area.',
        ],
        'image_theme': 'window,tinting,glass',
        'interests': ['Home improvement', 'Energy efficiency', 'Car enthusiasts'],
    },
    PLUMBING: {
        'headlines': [
            '24/7 Emergency Plumbing Services',
            '{company} - Same Day Service',
            'Leak Detection Experts - Call Now',
            'Licensed Master Plumbers Available',
        ],
        'texts': [
            "Burst pipe? Clogged drain? We're here 24/7! Fast, reliable service with upfront pricing.",
            'From repairs to remodels, trust our certified plumbers. Over 20 years serving your community.',
            'Water heater issues? We install & repair all brands. Same-day service available!',
            'Complete plumbing solutions for your home. BBB A+ rated. Satisfaction guaranteed!',
        ],
        'image_theme': 'plumbing,pipes,bathroom',
        'interests': ['Homeowners', 'Real estate', 'Home maintenance'],
    },
    HVAC: {
        'headlines': [
            '{company} - Stay Comfortable Year Round',
            'AC Tune-Up Special - Book Today',
            'Furnace Repair, Same Day Service',
            'Financing Available on New Systems',
        ],
        'texts': [
            'Beat the heat with a precision AC tune-up. Licensed technicians, upfront pricing.',
            'Heating trouble? Our certified techs service all makes and models, 7 days a week.',
            'Lower your energy bills with a high-efficiency system. Free in-home estimates.',
            'Maintenance plans that keep your system running and your family comfortable.',
        ],
        'image_theme': 'hvac,air,conditioning',
        'interests': ['Homeowners', 'Home improvement', 'Energy efficiency'],
    },
    GENERIC: {
        'headlines': [
            '{company} - Your Local Experts',
            'Free Estimates - Book Today',
            'Professional Service, Guaranteed',
            'Special Offer This Month Only',
        ],
        'texts': [
            'Trusted {location} professionals ready to help. Licensed, insured, and highly rated!',
            '5-star service with 100% satisfaction guarantee. See why neighbors choose us!',
            'Call now for a free consultation. Family-owned and operated since 2005.',
            'Quality work at fair prices. Check our reviews and see the difference!',
        ],
        'image_theme': 'home,service,professional',
        'interests': ['Local services', 'Home & garden', 'DIY'],
    },
}

SOCIAL_CALLS_TO_ACTION = ['Get Quote', 'Learn More', 'Book Now', 'Call Today']

# (headline, primary text, description, call to action, keywords, spend base, spend spread,
#  impressions base, impressions spread)
SEARCH_COPY = {
    WINDOW_TINT: [
        ('{company} - Professional Window Tinting | Save 30% on Energy',
         '{location} Window Tinting Experts · UV Protection · Energy Savings · Lifetime Warranty · Free Estimates',
         'Professional window film installation for homes and vehicles. Block 99% UV rays, reduce energy costs.',
         'Get Free Quote',
         ['window tinting near me', 'car window tint', 'home window film', '3M window tint'],
         350, 150, 45000, 20000),
        ('Window Tinting {location} | {company}',
         '3M Authorized Dealer · Same Day Service · Best Prices Guaranteed · 20+ Years Experience',
         'Residential & Commercial Window Tinting. Reduce heat, glare & energy costs by up to 30%.',
         'Call Now', [], 275, 100, 32000, 15000),
    ],
    PLUMBING: [
        ('24/7 Emergency Plumber | {company} | Same Day Service',
         '{location} Plumbing Experts · Licensed & Insured · No Hidden Fees · Free Estimates',
         'Burst pipes, leaks, clogs - we fix it all! Available 24/7 for emergencies. Upfront pricing.',
         'Call 24/7',
         ['emergency plumber', 'plumber near me', '24 hour plumber', 'burst pipe repair'],
         450, 200, 58000, 25000),
    ],
    HVAC: [
        ('{company} | AC & Heating Repair | Same Day Service',
         '{location} HVAC Experts · Licensed & Insured · Upfront Pricing · Free Estimates',
         'AC not cooling? Furnace out? Fast repairs and replacements from certified technicians.',
         'Book Service',
         ['ac repair near me', 'hvac service', 'furnace repair', 'air conditioning installation'],
         400, 150, 40000, 20000),
    ],
    GENERIC: [
        ('{company} | Professional {location} Services',
         'Trusted Local Experts · Licensed & Insured · Free Estimates · 5-Star Reviews',
         'Quality service you can trust. Family owned and operated. Satisfaction guaranteed.',
         'Get Quote', [], 200, 150, 25000, 15000),
    ],
}

# plumbing search campaigns also run a water heater carousel
PLUMBING_CAROUSEL = {
    'headline': 'Water Heater Installation Special',
    'primary_text': 'Professional installation starting at $899. All brands serviced. Same day available.',
    'image_url': 'https://source.unsplash.com/400x300/?water,heater,plumbing',
    'call_to_action': 'View Pricing',
}

NEXTDOOR_TRADES = ['plumber', 'electrician', 'contractor', 'handyman']

LIVE_SEARCH_HEADLINES = ['Professional Service', 'Best Prices', 'Free Estimates', 'Same Day Service']
LIVE_SEARCH_CTAS = ['Call Now', 'Get Quote', 'Learn More', 'Book Online']
LIVE_SPONSORED_CTAS = ['Learn More', 'Get Started', 'Download Guide', 'Contact Sales']
LIVE_TEXT_HEADLINES = ['Hiring', 'Growing', 'Expanding', 'Leading']
