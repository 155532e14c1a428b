"""
County-level market aggregation.

Combines Census business counts and demographics with boomer-ownership
estimates into a scored CountyMarketMetrics per county. Two caches: scored
metrics (24h) and per-industry Census breakdowns (7d), both injected so
tests can run them on a fake clock.

Bulk state queries use *estimated* demographics (population =
establishments x 150, median age 40, median income 65k) instead of one ACS
call per county. Scores from the bulk path are therefore approximations;
get_county_data() fetches real demographics.
"""
import logging
import time
from collections import namedtuple
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import replace
from datetime import datetime, timezone

from leadscout.config import (
    DEFAULT_TARGET_STATES, INDUSTRY_CACHE_TTL, METRICS_CACHE_TTL, STATE_BATCH_SIZE,
)
from leadscout.markets.cache import TTLCache
from leadscout.markets.constants import (
    calculate_boomer_likelihood, get_boomer_ownership_percentage, state_abbr, state_fips,
)
from leadscout.markets.grey_tsunami import (
    extract_top_industries, identify_top_industries, matches_tiers,
)
from leadscout.markets.models import (
    BoomerLikelihood, BusinessMetrics, CountyMarketMetrics, DataSource,
    Demographics, IndustryFocus,
)
from leadscout.markets.scoring import calculate_opportunity_score, classify_market

logger = logging.getLogger('markets.county')

ESTIMATED_PEOPLE_PER_ESTABLISHMENT = 150
ESTIMATED_MEDIAN_AGE = 40
ESTIMATED_MEDIAN_INCOME = 65000

_ScoringInputs = namedtuple('_ScoringInputs', 'total_establishments avg_business_size')


def _utc_now(clock):
    return datetime.fromtimestamp(clock(), tz=timezone.utc).isoformat()


def _concentration(industry_data):
    return {name: data.total_establishments for name, data in industry_data.industries.items()}


class CountyDataAggregator:

    def __init__(self, census=None, metrics_cache=None, industry_cache=None, clock=time.time):
        if census is None:
            from leadscout.services.census import CensusClient
            census = CensusClient()
        self.census = census
        self.clock = clock
        self.metrics_cache = metrics_cache or TTLCache(METRICS_CACHE_TTL, clock=clock)
        self.industry_cache = industry_cache or TTLCache(INDUSTRY_CACHE_TTL, clock=clock)

    # ── Single county ─────────────────────────────────────────────────

    def get_county_data(self, fips):
        """Scored metrics for one county, None when Census has no business data for it."""
        cached = self.metrics_cache.get(fips)
        if cached is not None:
            return cached

        try:
            business = self.census.get_counties_business_data([fips]).get(fips)
            if business is None:
                return None
            demographics = self.census.get_county_demographics(fips)
            metrics = self._build_metrics(business, demographics)
        except Exception as e:
            logger.error("Error aggregating county %s: %s", fips, e)
            return None

        self.metrics_cache.set(fips, metrics)
        return metrics

    def _build_metrics(self, business, demographics, top_industries=None,
                       industry_data=None, allowed_tiers=None):
        population = demographics.population if demographics else 0
        classification = classify_market(population)
        abbr = state_abbr(business.state)
        boomer_pct = get_boomer_ownership_percentage(abbr)
        boomer_owned = round(business.total_establishments * boomer_pct)

        likelihood = None
        if demographics:
            likelihood = BoomerLikelihood(**calculate_boomer_likelihood(
                business.total_establishments, demographics.median_age, demographics.population, abbr,
            ))

        has_real = bool(industry_data and industry_data.total_grey_tsunami_establishments > 0)
        if top_industries is None:
            top_industries = identify_top_industries(business, allowed_tiers)

        score = calculate_opportunity_score(
            business, demographics, classification, top_industries,
            industry_data if has_real else None, boomer_owned_estimate=boomer_owned,
        )

        return CountyMarketMetrics(
            fips_code=business.fips_code,
            county_name=business.county_name,
            state=business.state,
            state_abbr=abbr,
            opportunity_score=score,
            market_classification=classification,
            demographics=Demographics(
                population=population,
                median_age=demographics.median_age if demographics else 0,
                median_income=demographics.median_income if demographics else 0,
            ),
            business_metrics=BusinessMetrics(
                total_businesses=business.total_establishments,
                boomer_owned_estimate=boomer_owned,
                boomer_ownership_percentage=boomer_pct,
                avg_business_size=business.avg_business_size,
                annual_payroll=business.annual_payroll,
                payroll_per_employee=(round(business.annual_payroll / business.total_employees)
                                      if business.total_employees > 0 else 0),
            ),
            boomer_likelihood=likelihood,
            industry_focus=IndustryFocus(
                top_grey_tsunami_industries=top_industries,
                industry_concentration=_concentration(industry_data) if has_real else {},
                has_real_industry_data=has_real,
                total_grey_tsunami_establishments=(industry_data.total_grey_tsunami_establishments
                                                   if industry_data else None),
            ),
            data_source=DataSource(
                census=True,
                economic=False,
                industry_data=has_real,
                last_updated=_utc_now(self.clock),
            ),
        )

    # ── State / nationwide ────────────────────────────────────────────

    def _estimated_demographics(self, business):
        return Demographics(
            population=business.total_establishments * ESTIMATED_PEOPLE_PER_ESTABLISHMENT,
            median_age=ESTIMATED_MEDIAN_AGE,
            median_income=ESTIMATED_MEDIAN_INCOME,
        )

    def _county_from_state_row(self, business, county_filter):
        demographics = self._estimated_demographics(business)
        f = county_filter

        if f and f.min_population and demographics.population < f.min_population:
            return None
        if f and f.max_population and demographics.population > f.max_population:
            return None
        if f and f.market_classification and \
                classify_market(demographics.population) not in f.market_classification:
            return None

        tiers = f.grey_tsunami_tiers if f else None
        top_industries = None
        industry_data = None
        if tiers:
            industry_data = self._cached_industry_data(business.fips_code)
            if industry_data and industry_data.total_grey_tsunami_establishments > 0:
                top_industries = extract_top_industries(industry_data)
                if not matches_tiers(top_industries, tiers):
                    return None
            else:
                industry_data = None

        metrics = self._build_metrics(business, demographics, top_industries,
                                      industry_data, allowed_tiers=tiers)

        if f and f.min_opportunity_score and metrics.opportunity_score < f.min_opportunity_score:
            return None
        return metrics

    def get_state_counties_data(self, state_name, county_filter=None):
        """All counties of a state that pass the filter; [] for an unknown state."""
        fips = state_fips(state_name)
        if not fips:
            logger.error("Invalid state name: %s", state_name)
            return []

        try:
            counties = self.census.get_state_counties_business_data(fips)
        except Exception as e:
            logger.error("Error fetching counties for %s: %s", state_name, e)
            return []

        results = []
        for business in counties.values():
            metrics = self._county_from_state_row(business, county_filter)
            if metrics is not None:
                results.append(metrics)
        logger.info("%s: %d/%d counties after filters", state_name, len(results), len(counties))
        return results

    def get_top_opportunity_counties(self, limit=50, county_filter=None, fetch_industry_data=False):
        states = (county_filter.states if county_filter and county_filter.states
                  else DEFAULT_TARGET_STATES)
        logger.info("Loading counties from %d states", len(states))

        all_counties = []
        batches = [states[i:i + STATE_BATCH_SIZE] for i in range(0, len(states), STATE_BATCH_SIZE)]
        for n, batch in enumerate(batches, 1):
            logger.debug("State batch %d/%d: %s", n, len(batches), batch)
            with ThreadPoolExecutor(max_workers=len(batch)) as executor:
                futures = {
                    executor.submit(self.get_state_counties_data, state, county_filter): state
                    for state in batch
                }
                for future in as_completed(futures):
                    state = futures[future]
                    try:
                        all_counties.extend(future.result())
                    except Exception as e:
                        logger.error("State %s failed: %s", state, e)

        all_counties.sort(key=lambda m: m.opportunity_score, reverse=True)
        top = all_counties[:limit]

        if fetch_industry_data and county_filter and county_filter.grey_tsunami_tiers:
            top = [self.enrich_with_industry_data(m) for m in top]
        return top

    # ── Industry data ─────────────────────────────────────────────────

    def _cached_industry_data(self, fips):
        cached = self.industry_cache.get(fips)
        if cached is not None:
            return cached
        try:
            data = self.census.get_county_grey_tsunami_industries(fips)
        except Exception as e:
            logger.error("Error fetching industry data for %s: %s", fips, e)
            return None
        self.industry_cache.set(fips, data)
        return data

    def enrich_with_industry_data(self, metrics):
        """Re-score a county with real per-industry counts; unchanged when there are none."""
        industry_data = self._cached_industry_data(metrics.fips_code)
        if not industry_data or industry_data.total_grey_tsunami_establishments <= 0:
            return metrics

        top_industries = extract_top_industries(industry_data)
        bm = metrics.business_metrics
        business = _ScoringInputs(bm.total_businesses, bm.avg_business_size)
        demographics = metrics.demographics if metrics.demographics.population else None
        score = calculate_opportunity_score(
            business, demographics, metrics.market_classification, top_industries,
            industry_data, boomer_owned_estimate=bm.boomer_owned_estimate,
        )
        return replace(
            metrics,
            opportunity_score=score,
            industry_focus=IndustryFocus(
                top_grey_tsunami_industries=top_industries,
                industry_concentration=_concentration(industry_data),
                has_real_industry_data=True,
                total_grey_tsunami_establishments=industry_data.total_grey_tsunami_establishments,
            ),
            data_source=replace(metrics.data_source, industry_data=True),
        )

    # ── Cache admin ───────────────────────────────────────────────────

    def clear_cache(self):
        self.metrics_cache.clear()
        self.industry_cache.clear()

    def get_cache_stats(self):
        return {
            'metricsCache': self.metrics_cache.stats(),
            'industryDataCache': self.industry_cache.stats(),
        }


_default_aggregator = None


def get_county_aggregator():
    """Process-wide aggregator backed by the live Census client."""
    global _default_aggregator
    if _default_aggregator is None:
        _default_aggregator = CountyDataAggregator()
    return _default_aggregator
