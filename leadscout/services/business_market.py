"""
Business marketplace data: valuation multiples, business value estimates,
per-metro listings and buyer competition.

Listings are synthesized from market research figures rather than fetched;
pass a seeded random.Random to get repeatable output.
"""
import logging
import random
from dataclasses import dataclass
from datetime import date, timedelta
from typing import List, Optional

from leadscout.markets.models import Serializable

logger = logging.getLogger('services.business_market')


@dataclass(frozen=True)
class IndustryMultiples(Serializable):
    industry: str
    sde_multiple: float        # seller's discretionary earnings
    ebitda_multiple: float
    revenue_multiple: float
    samples: int
    last_updated: str = '2024-01'


INDUSTRY_MULTIPLES = [
    # Essential home services
    IndustryMultiples('HVAC Services', 3.5, 4.2, 1.2, 450),
    IndustryMultiples('Plumbing Services', 3.3, 4.0, 1.1, 380),
    IndustryMultiples('Electrical Contractors', 3.2, 3.8, 1.0, 320),
    IndustryMultiples('Roofing Services', 2.8, 3.5, 0.9, 280),
    # Healthcare
    IndustryMultiples('Home Healthcare', 3.8, 4.5, 1.3, 220),
    IndustryMultiples('Medical Equipment', 3.5, 4.2, 1.4, 180),
    IndustryMultiples('Dental Practices', 4.2, 5.0, 1.8, 150),
    # Recurring revenue
    IndustryMultiples('Commercial Cleaning', 3.0, 3.8, 1.0, 420),
    IndustryMultiples('Pest Control', 3.5, 4.2, 1.2, 350),
    IndustryMultiples('Security Services', 3.3, 4.0, 1.1, 180),
    # Professional services
    IndustryMultiples('Accounting Services', 2.8, 3.5, 1.0, 280),
    IndustryMultiples('Insurance Agencies', 3.2, 4.0, 2.0, 320),
    IndustryMultiples('Real Estate Brokerages', 2.5, 3.0, 0.8, 250),
    # Other
    IndustryMultiples('Landscaping', 2.8, 3.2, 0.8, 520),
    IndustryMultiples('Auto Repair', 2.5, 3.0, 0.7, 480),
    IndustryMultiples('Restaurants', 2.0, 2.5, 0.5, 650),
    IndustryMultiples('Retail Stores', 2.2, 2.8, 0.4, 420),
    IndustryMultiples('Manufacturing', 3.0, 4.0, 0.8, 380),
    IndustryMultiples('Distribution', 2.8, 3.5, 0.6, 320),
    IndustryMultiples('Transportation', 2.5, 3.2, 0.9, 280),
]

DEFAULT_SDE_MULTIPLE = 2.5
DEFAULT_SDE_SPREAD = 0.5
EBITDA_REVENUE_THRESHOLD = 5_000_000
SDE_REVENUE_THRESHOLD = 1_000_000
LOW_ESTIMATE_FACTOR = 0.8
HIGH_ESTIMATE_FACTOR = 1.2

BASE_LISTINGS = 250
BASE_ASKING_PRICE = 400_000
MARKET_SIZE_FACTORS = {
    'Phoenix': 2.5, 'Miami': 2.8, 'Tampa': 2.2, 'Austin': 2.4, 'Denver': 2.0,
    'Atlanta': 2.6, 'Dallas': 2.8, 'Houston': 2.7, 'Nashville': 1.8, 'Raleigh': 1.6,
    'Charlotte': 1.9, 'Orlando': 1.7, 'San Antonio': 1.5,
}
PRICE_RANGE_SHARES = {
    'under100k': 0.15,
    'from100kTo500k': 0.45,
    'from500kTo1M': 0.25,
    'from1MTo5M': 0.12,
    'above5M': 0.03,
}
MARKET_TRENDS = {'avgMultiple': 2.8, 'medianSalePrice': 450000, 'avgDaysOnMarket': 120}
DEALS_CLOSED_SHARE = 0.4

# metro -> (active buyers, avg bids per listing, PE presence)
MARKET_COMPETITION = {
    'Miami': (180, 4.2, 'High'),
    'Phoenix': (150, 3.8, 'Medium'),
    'Austin': (175, 4.5, 'High'),
    'Tampa': (140, 3.5, 'Medium'),
    'Denver': (130, 3.2, 'Medium'),
    'Atlanta': (160, 4.0, 'High'),
}
DEFAULT_COMPETITION = (100, 3.0, 'Low')
TOP_BUYER_TYPES = ['Individual Buyers', 'Search Funds', 'Private Equity', 'Strategic Buyers']


# ── Multiples & valuation ────────────────────────────────────────────────────

def get_industry_multiples(industry) -> Optional[IndustryMultiples]:
    wanted = (industry or '').lower()
    for multiples in INDUSTRY_MULTIPLES:
        if multiples.industry.lower() == wanted:
            return multiples
    return None


def get_all_industry_multiples() -> List[IndustryMultiples]:
    return list(INDUSTRY_MULTIPLES)


def calculate_business_value(revenue, sde, ebitda, industry):
    """
    Estimate a business's value from its financials and industry multiples.

    Revenue above $5M is valued on EBITDA, above $1M on SDE, and below that
    on whichever of SDE or revenue gives the higher figure. The estimate
    range is always 0.8x-1.2x of the primary value. Unknown industries use
    a flat 2.5x SDE (+/-0.5).
    """
    multiples = get_industry_multiples(industry)
    if multiples is None:
        return {
            'lowEstimate': sde * (DEFAULT_SDE_MULTIPLE - DEFAULT_SDE_SPREAD),
            'highEstimate': sde * (DEFAULT_SDE_MULTIPLE + DEFAULT_SDE_SPREAD),
            'avgEstimate': sde * DEFAULT_SDE_MULTIPLE,
            'method': 'SDE Multiple (Default)',
        }

    sde_value = sde * multiples.sde_multiple
    ebitda_value = ebitda * multiples.ebitda_multiple
    revenue_value = revenue * multiples.revenue_multiple

    if revenue > EBITDA_REVENUE_THRESHOLD:
        primary, method = ebitda_value, 'EBITDA Multiple'
    elif revenue > SDE_REVENUE_THRESHOLD:
        primary, method = sde_value, 'SDE Multiple'
    elif sde_value >= revenue_value:
        primary, method = sde_value, 'SDE Multiple'
    else:
        primary, method = revenue_value, 'Revenue Multiple'

    return {
        'lowEstimate': primary * LOW_ESTIMATE_FACTOR,
        'highEstimate': primary * HIGH_ESTIMATE_FACTOR,
        'avgEstimate': primary,
        'method': method,
    }


# ── Listings ─────────────────────────────────────────────────────────────────

def get_market_size_factor(metro):
    return MARKET_SIZE_FACTORS.get(metro, 1.0)


def _avg_asking_price(multiples, rng):
    industry_factor = multiples.sde_multiple / 3.0
    return round(BASE_ASKING_PRICE * industry_factor * (1 + (rng.random() - 0.5) * 0.3))


def _recent_transactions(metro, state, rng, today):
    candidates = INDUSTRY_MULTIPLES[:8]
    transactions = []
    for _ in range(5):
        multiples = candidates[int(rng.random() * len(candidates))]
        base_price = _avg_asking_price(multiples, rng)
        sold_on = today - timedelta(days=int(rng.random() * 90))
        transactions.append({
            'industry': multiples.industry,
            'salePrice': round(base_price * (0.8 + rng.random() * 0.4)),
            'multiple': f'{multiples.sde_multiple}x SDE',
            'date': sold_on.isoformat(),
            'location': f'{metro}, {state}',
        })
    transactions.sort(key=lambda t: t['date'], reverse=True)
    return transactions


def default_listings_data():
    return {
        'totalListings': BASE_LISTINGS,
        'listingsByIndustry': [],
        'priceRanges': {
            'under100k': 38,
            'from100kTo500k': 113,
            'from500kTo1M': 63,
            'from1MTo5M': 30,
            'above5M': 6,
        },
        'recentTransactions': [],
        'marketTrends': dict(MARKET_TRENDS, dealsClosedLast12Months=100),
    }


def generate_listings_data(metro, state, rng, today=None):
    today = today or date.today()
    total = round(BASE_LISTINGS * get_market_size_factor(metro))

    by_industry = [{
        'industry': m.industry,
        'count': round(total * rng.random() * 0.15 + 5),
        'avgAskingPrice': _avg_asking_price(m, rng),
        'avgMultiple': f'{m.sde_multiple}x SDE',
        'avgDaysOnMarket': round(90 + rng.random() * 60),
    } for m in INDUSTRY_MULTIPLES[:10]]

    return {
        'totalListings': total,
        'listingsByIndustry': by_industry,
        'priceRanges': {name: round(total * share) for name, share in PRICE_RANGE_SHARES.items()},
        'recentTransactions': _recent_transactions(metro, state, rng, today),
        'marketTrends': dict(MARKET_TRENDS, dealsClosedLast12Months=round(total * DEALS_CLOSED_SHARE)),
    }


def get_metro_business_listings(metro, state, rng=None, today=None):
    """Synthetic listings snapshot for a metro; default figures if generation fails."""
    rng = rng or random.Random()
    try:
        return generate_listings_data(metro, state, rng, today)
    except Exception as e:
        logger.error("Listings generation failed for %s, %s: %s", metro, state, e)
        return default_listings_data()


# ── Competition ──────────────────────────────────────────────────────────────

def get_market_competition(metro):
    active_buyers, avg_bids, pe_presence = MARKET_COMPETITION.get(metro, DEFAULT_COMPETITION)
    return {
        'activeBuyers': active_buyers,
        'avgBidsPerListing': avg_bids,
        'pePresence': pe_presence,
        'topBuyerTypes': list(TOP_BUYER_TYPES),
    }
