"""
Economic indicators from FRED and labor market data from BLS.

Without an API key every figure is a documented default; with a key each
series is fetched independently and falls back to its own default on
failure, so one bad series never hides the others.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

import requests

from leadscout.config import (
    FRED_API_KEY, FRED_API_URL, BLS_API_KEY, BLS_API_URL, ECONOMIC_TIMEOUT,
)
from leadscout.markets.models import Serializable
from leadscout.services.circuit_breaker import CircuitOpenError, get_breaker

logger = logging.getLogger('services.economic')

DEFAULT_GDP_GROWTH = 3.2
DEFAULT_UNEMPLOYMENT = 4.5
DEFAULT_INTEREST_RATE = 5.5
DEFAULT_INFLATION = 3.2
DEFAULT_BUSINESS_FORMATION = 450
DEFAULT_CONSTRUCTION_PERMITS = 10000
# No metro population series is queried; these stay estimates.
ESTIMATED_POPULATION_GROWTH = 2.1
ESTIMATED_MEDIAN_INCOME = 65000

DEFAULT_EMPLOYMENT = 500000
DEFAULT_EMPLOYMENT_GROWTH = 2.5
DEFAULT_AVERAGE_WAGE = 55000
DEFAULT_JOB_OPENINGS = 25000
JOB_OPENINGS_SHARE = 0.05


@dataclass
class EconomicIndicators(Serializable):
    gdp_growth: float = DEFAULT_GDP_GROWTH
    unemployment_rate: float = DEFAULT_UNEMPLOYMENT
    population_growth: float = ESTIMATED_POPULATION_GROWTH
    median_household_income: int = ESTIMATED_MEDIAN_INCOME
    business_formation_rate: int = DEFAULT_BUSINESS_FORMATION
    interest_rate: float = DEFAULT_INTEREST_RATE
    inflation_rate: float = DEFAULT_INFLATION
    construction_permits: int = DEFAULT_CONSTRUCTION_PERMITS
    last_updated: str = ''
    live: bool = False


@dataclass
class LaborMarketData(Serializable):
    total_employment: int = DEFAULT_EMPLOYMENT
    employment_growth_rate: float = DEFAULT_EMPLOYMENT_GROWTH
    average_wage: int = DEFAULT_AVERAGE_WAGE
    job_openings: int = DEFAULT_JOB_OPENINGS
    industry_employment: List[dict] = field(default_factory=list)
    live: bool = False


def _now():
    return datetime.now(timezone.utc).isoformat()


def _values(observations):
    """Observation values as floats, skipping FRED's '.' placeholders."""
    values = []
    for obs in observations:
        if not isinstance(obs, dict):
            continue
        try:
            values.append(float(obs.get('value')))
        except (TypeError, ValueError):
            continue
    return values


class EconomicDataService:

    def __init__(self, fred_api_key=FRED_API_KEY, bls_api_key=BLS_API_KEY, session=requests,
                 fred_breaker=None, bls_breaker=None, timeout=ECONOMIC_TIMEOUT, clock=None):
        self.fred_api_key = fred_api_key
        self.bls_api_key = bls_api_key
        self.session = session
        self.timeout = timeout
        self._fred_breaker = fred_breaker
        self._bls_breaker = bls_breaker
        self._clock = clock or datetime.now

    @property
    def fred_breaker(self):
        if self._fred_breaker is None:
            self._fred_breaker = get_breaker('fred')
        return self._fred_breaker

    @property
    def bls_breaker(self):
        if self._bls_breaker is None:
            self._bls_breaker = get_breaker('bls')
        return self._bls_breaker

    # ── FRED ──────────────────────────────────────────────────────────

    def _fred_observations(self, series_id, limit) -> Optional[List[float]]:
        """Latest `limit` observations, newest first; None on any failure."""
        params = {
            'series_id': series_id,
            'api_key': self.fred_api_key,
            'file_type': 'json',
            'limit': limit,
            'sort_order': 'desc',
        }
        try:
            resp = self.fred_breaker.call(
                self.session.get, f'{FRED_API_URL}/series/observations',
                params=params, timeout=self.timeout,
            )
            resp.raise_for_status()
            body = resp.json()
        except CircuitOpenError:
            logger.warning("FRED circuit open, using default for %s", series_id)
            return None
        except (requests.RequestException, ValueError) as e:
            logger.error("FRED %s error: %s", series_id, e)
            return None

        observations = body.get('observations') if isinstance(body, dict) else None
        if not isinstance(observations, list):
            logger.error("FRED %s returned an unexpected body", series_id)
            return None
        values = _values(observations)
        return values or None

    def _gdp_growth(self, metro_code):
        values = self._fred_observations(f'RGMP{metro_code}', 5)
        if values and len(values) >= 2 and values[1]:
            return round((values[0] - values[1]) / values[1] * 100, 1)
        return DEFAULT_GDP_GROWTH

    def _unemployment(self, metro_code):
        values = self._fred_observations(f'{metro_code}URN', 1)
        return values[0] if values else DEFAULT_UNEMPLOYMENT

    def _construction_permits(self, metro_code):
        values = self._fred_observations(f'{metro_code}BPPRIVSA', 12)
        return round(sum(values)) if values else DEFAULT_CONSTRUCTION_PERMITS

    def _interest_rate(self):
        values = self._fred_observations('DFF', 1)
        return values[0] if values else DEFAULT_INTEREST_RATE

    def _inflation_rate(self):
        values = self._fred_observations('CPIAUCSL', 13)
        if values and len(values) >= 13 and values[12]:
            return round((values[0] - values[12]) / values[12] * 100, 1)
        return DEFAULT_INFLATION

    def _business_formation_rate(self):
        values = self._fred_observations('BABATOTALSAUS', 4)
        return round(sum(values) / len(values)) if values else DEFAULT_BUSINESS_FORMATION

    def get_metro_economic_indicators(self, metro_code) -> EconomicIndicators:
        if not self.fred_api_key:
            return EconomicIndicators(last_updated=_now())

        return EconomicIndicators(
            gdp_growth=self._gdp_growth(metro_code),
            unemployment_rate=self._unemployment(metro_code),
            business_formation_rate=self._business_formation_rate(),
            interest_rate=self._interest_rate(),
            inflation_rate=self._inflation_rate(),
            construction_permits=self._construction_permits(metro_code),
            last_updated=_now(),
            live=True,
        )

    # ── BLS ───────────────────────────────────────────────────────────

    def get_metro_labor_data(self, metro_code) -> LaborMarketData:
        if not self.bls_api_key:
            return LaborMarketData()

        this_year = self._clock().year
        payload = {
            'seriesid': [
                f'LAUMT{metro_code}0000000000003',  # employment level
                f'LAUMT{metro_code}0000000000004',  # unemployment level
            ],
            'startyear': str(this_year - 1),
            'endyear': str(this_year),
        }
        try:
            resp = self.bls_breaker.call(
                self.session.post, f'{BLS_API_URL}/timeseries/data/',
                json=payload, headers={'Registration-Key': self.bls_api_key},
                timeout=self.timeout,
            )
            resp.raise_for_status()
            body = resp.json()
        except CircuitOpenError:
            logger.warning("BLS circuit open, using default labor data for %s", metro_code)
            return LaborMarketData()
        except (requests.RequestException, ValueError) as e:
            logger.error("BLS error for %s: %s", metro_code, e)
            return LaborMarketData()

        results = body.get('Results') if isinstance(body, dict) else None
        series = results.get('series') if isinstance(results, dict) else None
        if not isinstance(series, list) or not series:
            logger.warning("BLS returned no usable series for %s", metro_code)
            return LaborMarketData()
        return self._parse_bls_series(series)

    @staticmethod
    def _parse_bls_series(series) -> LaborMarketData:
        total_employment = 0
        growth = 0.0
        for s in series:
            if not isinstance(s, dict) or not str(s.get('seriesID', '')).endswith('0000000000003'):
                continue
            data = s.get('data')
            values = _values(data if isinstance(data, list) else [])
            if not values:
                continue
            latest = values[0]
            total_employment = round(latest * 1000)  # BLS reports thousands
            if len(values) > 12 and values[12]:
                growth = (latest - values[12]) / values[12] * 100

        return LaborMarketData(
            total_employment=total_employment,
            employment_growth_rate=round(growth, 1),
            average_wage=DEFAULT_AVERAGE_WAGE,
            job_openings=round(total_employment * JOB_OPENINGS_SHARE),
            live=True,
        )
