"""
Metro-level market aggregation for the 20 tracked metro areas.

Each metro pulls five sources in parallel (Census state totals, FRED
indicators, BLS labor data, marketplace listings, buyer competition),
merges them into a MarketMetrics record and scores it with
opportunity_scorer.
"""
import logging
import random
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import replace
from datetime import datetime, timezone

from leadscout.config import METRICS_CACHE_TTL
from leadscout.markets import opportunity_scorer
from leadscout.markets.cache import TTLCache
from leadscout.markets.constants import NATIONAL_BOOMER_OWNERSHIP
from leadscout.markets.models import (
    CompetitionSnapshot, GrowthIndicators, IndustrySnapshot, MarketConditions,
    MarketDemographics, MarketMetrics, MetroArea,
)

logger = logging.getLogger('markets.metro')

METRO_AREAS = [
    MetroArea('Phoenix', 'Arizona', 'AZ', '38060', '04', 33.4484, -112.0740),
    MetroArea('Miami', 'Florida', 'FL', '33100', '12', 25.7617, -80.1918),
    MetroArea('Tampa', 'Florida', 'FL', '45300', '12', 27.9506, -82.4572),
    MetroArea('Austin', 'Texas', 'TX', '12420', '48', 30.2672, -97.7431),
    MetroArea('Denver', 'Colorado', 'CO', '19740', '08', 39.7392, -104.9903),
    MetroArea('Atlanta', 'Georgia', 'GA', '12060', '13', 33.7490, -84.3880),
    MetroArea('Dallas', 'Texas', 'TX', '19100', '48', 32.7767, -96.7970),
    MetroArea('Houston', 'Texas', 'TX', '26420', '48', 29.7604, -95.3698),
    MetroArea('Nashville', 'Tennessee', 'TN', '34980', '47', 36.1627, -86.7816),
    MetroArea('Raleigh', 'North Carolina', 'NC', '39580', '37', 35.7796, -78.6382),
    MetroArea('Charlotte', 'North Carolina', 'NC', '16740', '37', 35.2271, -80.8431),
    MetroArea('Orlando', 'Florida', 'FL', '36740', '12', 28.5383, -81.3792),
    MetroArea('San Antonio', 'Texas', 'TX', '41700', '48', 29.4241, -98.4936),
    MetroArea('Fort Lauderdale', 'Florida', 'FL', '22744', '12', 26.1224, -80.1373),
    MetroArea('Jacksonville', 'Florida', 'FL', '27260', '12', 30.3322, -81.6557),
    MetroArea('Las Vegas', 'Nevada', 'NV', '29820', '32', 36.1699, -115.1398),
    MetroArea('Salt Lake City', 'Utah', 'UT', '41620', '49', 40.7608, -111.8910),
    MetroArea('Kansas City', 'Missouri', 'MO', '28140', '29', 39.0997, -94.5786),
    MetroArea('Columbus', 'Ohio', 'OH', '18140', '39', 39.9612, -82.9988),
    MetroArea('Indianapolis', 'Indiana', 'IN', '26900', '18', 39.7684, -86.1581),
]

NO_SUCCESSION_PLAN_SHARE = 0.70
AVG_OWNER_AGE = 61
RETIREMENT_RISK_SCORE = 8.2

NATIONAL_TRENDS = {
    'avgMultiple': 3.2,
    'interestRate': 5.5,
    'dealVolume': 350000,
    'topIndustries': ['Home Services', 'Healthcare', 'Professional Services', 'Manufacturing'],
}


def _label(metro):
    return f'{metro.city}, {metro.state_code}'


def find_metro(city, state):
    city, state = (city or '').lower(), (state or '').lower()
    for metro in METRO_AREAS:
        if metro.city.lower() == city and metro.state.lower() == state:
            return metro
    return None


class MarketDataAggregator:

    def __init__(self, census=None, economic=None, business_market=None, cache=None,
                 seed=None, clock=time.time):
        if census is None:
            from leadscout.services.census import CensusClient
            census = CensusClient()
        if economic is None:
            from leadscout.services.economic import EconomicDataService
            economic = EconomicDataService()
        if business_market is None:
            from leadscout.services import business_market
        self.census = census
        self.economic = economic
        self.business_market = business_market
        self.clock = clock
        self.cache = cache or TTLCache(METRICS_CACHE_TTL, clock=clock)
        self.seed = seed

    def _rng(self, metro):
        if self.seed is None:
            return random.Random()
        return random.Random(f'{self.seed}:{metro.city}-{metro.state}')

    def get_market_data(self, city, state):
        metro = find_metro(city, state)
        if metro is None:
            return None

        cache_key = f'{metro.city}-{metro.state}'
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        rng = self._rng(metro)
        try:
            with ThreadPoolExecutor(max_workers=5) as executor:
                futures = {
                    'census': executor.submit(self.census.get_state_business_totals, metro.fips),
                    'economic': executor.submit(self.economic.get_metro_economic_indicators,
                                                metro.metro_code),
                    'labor': executor.submit(self.economic.get_metro_labor_data, metro.metro_code),
                    'listings': executor.submit(self.business_market.get_metro_business_listings,
                                                metro.city, metro.state, rng),
                    'competition': executor.submit(self.business_market.get_market_competition,
                                                   metro.city),
                }
                sources = {name: future.result() for name, future in futures.items()}
            metrics = self._aggregate(metro, rng, **sources)
        except Exception as e:
            logger.error("Market aggregation failed for %s, %s: %s", city, state, e)
            return None

        self.cache.set(cache_key, metrics)
        return metrics

    def _aggregate(self, metro, rng, census, economic, labor, listings, competition):
        total_businesses = (census or {}).get('total_businesses', 0)
        boomer_owners = round(total_businesses * NATIONAL_BOOMER_OWNERSHIP)
        trends = listings['marketTrends']

        top_industries = [
            IndustrySnapshot(
                name=row['industry'],
                business_count=row['count'] * 10,
                avg_multiple=float(row['avgMultiple'].split('x')[0]),
                avg_revenue=round(row['avgAskingPrice'] / 3),
                retirement_risk=round(7 + rng.random() * 2),
                growth_rate=round(economic.gdp_growth + rng.random() * 2, 1),
            )
            for row in listings['listingsByIndustry'][:3]
        ]

        now = datetime.fromtimestamp(self.clock(), tz=timezone.utc).isoformat()
        metrics = MarketMetrics(
            city=metro.city,
            state=metro.state,
            state_code=metro.state_code,
            coordinates={'lat': metro.lat, 'lng': metro.lng},
            opportunity_score=0,
            demographics=MarketDemographics(
                boomer_business_owners=boomer_owners,
                avg_owner_age=AVG_OWNER_AGE,
                retirement_risk_score=RETIREMENT_RISK_SCORE,
                businesses_without_succession_plan=round(boomer_owners * NO_SUCCESSION_PLAN_SHARE),
            ),
            market=MarketConditions(
                avg_multiple=trends['avgMultiple'],
                median_revenue=round(trends['medianSalePrice'] / 3),
                yearly_transactions=trends['dealsClosedLast12Months'],
                competition_level=competition['pePresence'],
                avg_days_on_market=trends['avgDaysOnMarket'],
            ),
            top_industries=top_industries,
            growth=GrowthIndicators(
                population_growth=economic.population_growth,
                business_growth=round(economic.business_formation_rate / 100, 1),
                employment_growth=labor.employment_growth_rate,
                new_construction_permits=economic.construction_permits,
                gdp_growth=economic.gdp_growth,
            ),
            competition=CompetitionSnapshot(
                active_buyers=competition['activeBuyers'],
                pe_presence=competition['pePresence'],
                avg_bids_per_deal=competition['avgBidsPerListing'],
                top_buyers=competition['topBuyerTypes'][:3],
            ),
            data_source={
                'census': (census or {}).get('last_updated', ''),
                'economic': economic.last_updated,
                'business': now,
                'lastUpdated': now,
            },
        )
        return replace(metrics, opportunity_score=opportunity_scorer.calculate_market_score(metrics))

    def get_top_markets(self, limit=20, market_filter=None):
        metros = METRO_AREAS
        f = market_filter
        if f and f.states:
            metros = [m for m in metros if m.state_code in f.states]

        markets = []
        with ThreadPoolExecutor(max_workers=8) as executor:
            futures = {executor.submit(self.get_market_data, m.city, m.state): m for m in metros}
            for future in as_completed(futures):
                metro = futures[future]
                try:
                    result = future.result()
                except Exception as e:
                    logger.error("Metro %s failed: %s", metro.city, e)
                    continue
                if result is not None:
                    markets.append(result)

        if f:
            if f.min_opportunity_score:
                markets = [m for m in markets if m.opportunity_score >= f.min_opportunity_score]
            if f.competition_level:
                markets = [m for m in markets if m.market.competition_level in f.competition_level]
            if f.min_revenue:
                markets = [m for m in markets if m.market.median_revenue >= f.min_revenue]
            if f.max_revenue:
                markets = [m for m in markets if m.market.median_revenue <= f.max_revenue]

        markets.sort(key=lambda m: m.opportunity_score, reverse=True)
        return markets[:limit]

    def get_market_trends(self):
        markets = self.get_top_markets(20)
        return {
            'nationalTrends': dict(NATIONAL_TRENDS),
            'hotMarkets': [_label(m) for m in markets if m.opportunity_score >= 85][:5],
            'emergingMarkets': [_label(m) for m in markets if 75 <= m.opportunity_score < 85][:5],
            'coolingMarkets': [_label(m) for m in markets if m.opportunity_score < 65][:5],
        }

    def clear_cache(self):
        self.cache.clear()

    def get_cache_stats(self):
        return self.cache.stats()


_default_aggregator = None


def get_market_aggregator():
    global _default_aggregator
    if _default_aggregator is None:
        _default_aggregator = MarketDataAggregator()
    return _default_aggregator
