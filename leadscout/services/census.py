"""
US Census Bureau client: County Business Patterns (CBP) + ACS 5-year.

Responses are JSON tables with a header row. Anything shorter than two rows,
a non-2xx status, a timeout or an open circuit is treated as "no data" and
logged; nothing here raises to the caller.
"""
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

import requests

from leadscout.config import (
    CENSUS_API_KEY, CENSUS_API_URL, CENSUS_CBP_YEAR, CENSUS_ACS_ENDPOINT, CENSUS_TIMEOUT,
)
from leadscout.markets.constants import state_abbr, state_fips
from leadscout.markets.grey_tsunami import (
    GREY_TSUNAMI_CATEGORIES, business_types_for_naics, naics_codes_for_business_type,
)
from leadscout.markets.models import (
    BusinessTypeEstimate, CountyBusinessData, CountyDemographics,
    GreyTsunamiIndustryData, IndustryCategoryData,
)
from leadscout.services.circuit_breaker import CircuitOpenError, get_breaker

logger = logging.getLogger('services.census')

CBP_FIELDS = 'ESTAB,EMP,PAYANN,NAME'
ACS_FIELDS = 'B01003_001E,B01002_001E,B19013_001E'  # population, median age, median income
ALL_INDUSTRIES = '00'


def _int(value):
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _float(value):
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _clean_county_name(name):
    return (name or 'Unknown County').replace(' County', '').replace(' Parish', '')


def _avg_size(employees, establishments):
    return round(employees / establishments) if employees and establishments else 0


def _county_from_row(state_fips_code, row):
    # ESTAB, EMP, PAYANN, NAME, NAICS2017, state, county
    establishments, employees = _int(row[0]), _int(row[1])
    fips = f'{state_fips_code}{row[6]}'
    return CountyBusinessData(
        fips_code=fips,
        county_name=_clean_county_name(row[3]),
        state=state_fips_code,
        total_establishments=establishments,
        total_employees=employees,
        annual_payroll=_int(row[2]),
        avg_business_size=_avg_size(employees, establishments),
    )


class CensusClient:
    """Thin wrapper around the Census data API, guarded by the 'census' breaker."""

    state_fips = staticmethod(state_fips)
    state_abbr = staticmethod(state_abbr)

    def __init__(self, api_key=CENSUS_API_KEY, year=CENSUS_CBP_YEAR, session=requests,
                 breaker=None, timeout=CENSUS_TIMEOUT, base_url=CENSUS_API_URL):
        self.api_key = api_key
        self.year = year
        self.session = session
        self.timeout = timeout
        self.base_url = base_url.rstrip('/')
        self._breaker = breaker
        if not api_key:
            logger.warning("CENSUS_API_KEY not set; requests are subject to anonymous rate limits")

    @property
    def breaker(self):
        if self._breaker is None:
            self._breaker = get_breaker('census')
        return self._breaker

    def _get(self, endpoint, params) -> Optional[List[list]]:
        """GET one Census table; None when there is no usable data."""
        params = dict(params)
        if self.api_key:
            params['key'] = self.api_key
        url = f'{self.base_url}/{endpoint}'
        try:
            resp = self.breaker.call(self.session.get, url, params=params, timeout=self.timeout)
        except CircuitOpenError as e:
            logger.warning("Census circuit open, skipping %s (retry in %ss)", endpoint, e.retry_after)
            return None
        except requests.RequestException as e:
            logger.error("Census request failed for %s: %s", endpoint, e)
            return None

        if resp.status_code != 200:
            logger.error("Census API error %d for %s %s: %s",
                         resp.status_code, endpoint, params.get('for'), resp.text[:200])
            return None
        try:
            rows = resp.json()
        except ValueError:
            logger.error("Census returned non-JSON body for %s", endpoint)
            return None
        if not isinstance(rows, list) or len(rows) < 2:
            return None
        return rows

    @property
    def _cbp_endpoint(self):
        return f'{self.year}/cbp'

    # ── County Business Patterns ──────────────────────────────────────

    def get_state_counties_business_data(self, state_fips_code) -> Dict[str, CountyBusinessData]:
        """Every county in a state, keyed by 5-digit FIPS."""
        rows = self._get(self._cbp_endpoint, {
            'get': CBP_FIELDS,
            'for': 'county:*',
            'in': f'state:{state_fips_code}',
            'NAICS2017': ALL_INDUSTRIES,
        })
        counties = {}
        if rows is None:
            logger.warning("No county business data for state %s", state_fips_code)
            return counties

        for row in rows[1:]:
            county = _county_from_row(state_fips_code, row)
            counties[county.fips_code] = county
        logger.info("Loaded %d counties for state %s", len(counties), state_fips_code)
        return counties

    def get_counties_business_data(self, fips_list) -> Dict[str, CountyBusinessData]:
        """Specific counties, one request per state."""
        by_state = {}
        for fips in fips_list:
            by_state.setdefault(fips[:2], []).append(fips[2:])

        counties = {}
        for state, county_codes in by_state.items():
            rows = self._get(self._cbp_endpoint, {
                'get': CBP_FIELDS,
                'for': ','.join(f'county:{c}' for c in county_codes),
                'in': f'state:{state}',
                'NAICS2017': ALL_INDUSTRIES,
            })
            if rows is None:
                continue
            for row in rows[1:]:
                county = _county_from_row(state, row)
                counties[county.fips_code] = county
        return counties

    def get_state_business_totals(self, state_fips_code) -> Optional[dict]:
        """State-wide establishment totals (all industries)."""
        rows = self._get(self._cbp_endpoint, {
            'get': 'ESTAB,EMP,PAYANN',
            'for': f'state:{state_fips_code}',
            'NAICS2017': ALL_INDUSTRIES,
        })
        if rows is None:
            return None
        row = rows[1]
        return {
            'state': state_fips_code,
            'total_businesses': _int(row[0]),
            'total_employees': _int(row[1]),
            'annual_payroll': _int(row[2]),
            'last_updated': datetime.now(timezone.utc).isoformat(),
        }

    # ── ACS demographics ──────────────────────────────────────────────

    def get_county_demographics(self, fips) -> Optional[CountyDemographics]:
        rows = self._get(CENSUS_ACS_ENDPOINT, {
            'get': ACS_FIELDS,
            'for': f'county:{fips[2:]}',
            'in': f'state:{fips[:2]}',
        })
        if rows is None:
            return None
        row = rows[1]
        return CountyDemographics(
            fips_code=fips,
            population=_int(row[0]),
            median_age=_float(row[1]),
            median_income=_int(row[2]),
        )

    # ── Industry breakdown ────────────────────────────────────────────

    def get_county_industry_distribution(self, fips, naics_codes) -> Dict[str, int]:
        """Establishments per NAICS code; codes that fail count as 0."""
        distribution = {}
        for naics in sorted(set(naics_codes)):
            rows = self._get(self._cbp_endpoint, {
                'get': 'ESTAB',
                'for': f'county:{fips[2:]}',
                'in': f'state:{fips[:2]}',
                'NAICS2017': naics,
            })
            distribution[naics] = _int(rows[1][0]) if rows else 0
        logger.debug("Industry distribution for %s: %d codes", fips, len(distribution))
        return distribution

    def get_county_grey_tsunami_industries(self, fips) -> GreyTsunamiIndustryData:
        """
        Estimated establishments per Grey Tsunami business type.

        A NAICS code shared by several business types is split evenly between
        them so a county's establishments are not double-counted.
        """
        county = self.get_counties_business_data([fips]).get(fips)
        result = GreyTsunamiIndustryData(
            fips_code=fips,
            county_name=county.county_name if county else 'Unknown County',
        )

        for category in GREY_TSUNAMI_CATEGORIES:
            codes_by_type = {b: naics_codes_for_business_type(b) for b in category.businesses}
            all_codes = {code for codes in codes_by_type.values() for code in codes}
            distribution = self.get_county_industry_distribution(fips, all_codes)

            estimates = []
            category_total = 0
            for business_type, codes in codes_by_type.items():
                count = 0.0
                for code in codes:
                    sharing = len(business_types_for_naics(code)) or 1
                    count += distribution.get(code, 0) / sharing
                count = round(count)
                category_total += count
                if count > 0:
                    estimates.append(BusinessTypeEstimate(business_type, count, codes))

            estimates.sort(key=lambda e: e.estimated_count, reverse=True)
            result.industries[category.category] = IndustryCategoryData(category_total, estimates)
            result.total_grey_tsunami_establishments += category_total

        logger.info("County %s: %d Grey Tsunami establishments",
                    fips, result.total_grey_tsunami_establishments)
        return result
