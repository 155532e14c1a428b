"""Tests for the FRED / BLS economic data service."""
from datetime import datetime
from unittest.mock import MagicMock

import pytest
import requests

from leadscout.services import economic
from leadscout.services.circuit_breaker import CircuitOpenError
from leadscout.services.economic import EconomicDataService, EconomicIndicators, LaborMarketData

FRED_SERIES = {
    'RGMP33100': ['110', '100', '95'],
    '33100URN': ['4.1'],
    '33100BPPRIVSA': ['100'] * 12,
    'DFF': ['5.33'],
    'CPIAUCSL': ['113'] + ['105'] * 11 + ['100'],
    'BABATOTALSAUS': ['400', '500', '.', '600'],
}


def _fred_response(series_id):
    resp = MagicMock()
    resp.json.return_value = {
        'observations': [{'date': '2024-01-01', 'value': v} for v in FRED_SERIES.get(series_id, [])],
    }
    return resp


@pytest.fixture
def session():
    mock = MagicMock()
    mock.get.side_effect = lambda url, params, timeout: _fred_response(params['series_id'])
    return mock


def _service(session, passthrough_breaker, **kwargs):
    defaults = dict(
        fred_api_key='fred-key', bls_api_key='bls-key', session=session,
        fred_breaker=passthrough_breaker, bls_breaker=passthrough_breaker,
        clock=lambda: datetime(2024, 6, 1),
    )
    defaults.update(kwargs)
    return EconomicDataService(**defaults)


# ---------------------------------------------------------------------------
# FRED
# ---------------------------------------------------------------------------

class TestEconomicIndicators:

    def test_without_key_uses_defaults(self, session):
        service = EconomicDataService(fred_api_key=None, session=session)
        indicators = service.get_metro_economic_indicators('33100')
        assert indicators.gdp_growth == economic.DEFAULT_GDP_GROWTH
        assert indicators.construction_permits == economic.DEFAULT_CONSTRUCTION_PERMITS
        assert indicators.live is False
        assert indicators.last_updated
        session.get.assert_not_called()

    def test_live_series(self, session, passthrough_breaker):
        indicators = _service(session, passthrough_breaker).get_metro_economic_indicators('33100')
        assert indicators.gdp_growth == 10.0
        assert indicators.unemployment_rate == 4.1
        assert indicators.construction_permits == 1200
        assert indicators.interest_rate == 5.33
        assert indicators.inflation_rate == 13.0
        assert indicators.business_formation_rate == 500
        assert indicators.population_growth == economic.ESTIMATED_POPULATION_GROWTH
        assert indicators.live is True

    def test_request_params(self, session, passthrough_breaker):
        _service(session, passthrough_breaker).get_metro_economic_indicators('33100')
        url, kwargs = session.get.call_args_list[0][0][0], session.get.call_args_list[0][1]
        assert url.endswith('/series/observations')
        assert kwargs['params']['api_key'] == 'fred-key'
        assert kwargs['params']['file_type'] == 'json'
        assert kwargs['params']['sort_order'] == 'desc'

    def test_each_series_falls_back_on_its_own(self, session, passthrough_breaker):
        def flaky(url, params, timeout):
            if params['series_id'] == 'DFF':
                raise requests.ConnectionError('reset')
            return _fred_response(params['series_id'])

        session.get.side_effect = flaky
        indicators = _service(session, passthrough_breaker).get_metro_economic_indicators('33100')
        assert indicators.interest_rate == economic.DEFAULT_INTEREST_RATE
        assert indicators.unemployment_rate == 4.1

    def test_http_error_falls_back(self, session, passthrough_breaker):
        resp = MagicMock()
        resp.raise_for_status.side_effect = requests.HTTPError('400')
        session.get.side_effect = None
        session.get.return_value = resp
        indicators = _service(session, passthrough_breaker).get_metro_economic_indicators('33100')
        assert indicators.gdp_growth == economic.DEFAULT_GDP_GROWTH
        assert indicators.inflation_rate == economic.DEFAULT_INFLATION

    def test_short_series_falls_back(self, session, passthrough_breaker, monkeypatch):
        monkeypatch.setitem(FRED_SERIES, 'CPIAUCSL', ['113', '100'])
        monkeypatch.setitem(FRED_SERIES, 'RGMP33100', ['.', '110'])
        indicators = _service(session, passthrough_breaker).get_metro_economic_indicators('33100')
        assert indicators.inflation_rate == economic.DEFAULT_INFLATION
        assert indicators.gdp_growth == economic.DEFAULT_GDP_GROWTH

    def test_open_circuit_falls_back(self, session):
        breaker = MagicMock()
        breaker.call.side_effect = CircuitOpenError('fred', 30)
        indicators = _service(session, None, fred_breaker=breaker).get_metro_economic_indicators('33100')
        assert indicators.gdp_growth == economic.DEFAULT_GDP_GROWTH
        assert indicators.live is True

    @pytest.mark.parametrize('body', [
        ['oops'],
        'oops',
        None,
        {'observations': 'not-a-list'},
        {'observations': ['x', 1, None]},
    ])
    def test_malformed_body_falls_back(self, session, passthrough_breaker, body):
        resp = MagicMock()
        resp.json.return_value = body
        session.get.side_effect = None
        session.get.return_value = resp
        indicators = _service(session, passthrough_breaker).get_metro_economic_indicators('33100')
        assert indicators.gdp_growth == economic.DEFAULT_GDP_GROWTH
        assert indicators.unemployment_rate == economic.DEFAULT_UNEMPLOYMENT
        assert indicators.interest_rate == economic.DEFAULT_INTEREST_RATE
        assert indicators.construction_permits == economic.DEFAULT_CONSTRUCTION_PERMITS


# ---------------------------------------------------------------------------
# BLS
# ---------------------------------------------------------------------------

def _bls_response(series):
    resp = MagicMock()
    resp.json.return_value = {'status': 'REQUEST_SUCCEEDED', 'Results': {'series': series}}
    return resp


class TestLaborData:

    def test_without_key_uses_defaults(self, session):
        service = EconomicDataService(bls_api_key=None, session=session)
        assert service.get_metro_labor_data('33100') == LaborMarketData()
        session.post.assert_not_called()

    def test_payload_and_header(self, session, passthrough_breaker):
        session.post.return_value = _bls_response([])
        _service(session, passthrough_breaker).get_metro_labor_data('33100')
        _, kwargs = session.post.call_args
        assert kwargs['headers'] == {'Registration-Key': 'bls-key'}
        assert kwargs['json']['seriesid'] == [
            'LAUMT331000000000000003', 'LAUMT331000000000000004']
        assert kwargs['json']['startyear'] == '2023'
        assert kwargs['json']['endyear'] == '2024'

    def test_parses_employment_series(self, session, passthrough_breaker):
        values = ['1100'] + ['1050'] * 11 + ['1000']
        session.post.return_value = _bls_response([
            {'seriesID': 'LAUMT331000000000000003', 'data': [{'value': v} for v in values]},
            {'seriesID': 'LAUMT331000000000000004', 'data': [{'value': '40'}]},
        ])
        labor = _service(session, passthrough_breaker).get_metro_labor_data('33100')
        assert labor.total_employment == 1_100_000
        assert labor.employment_growth_rate == 10.0
        assert labor.job_openings == 55_000
        assert labor.live is True

    def test_empty_series_is_default(self, session, passthrough_breaker):
        session.post.return_value = _bls_response([])
        assert _service(session, passthrough_breaker).get_metro_labor_data('33100') == LaborMarketData()

    def test_error_is_default(self, session, passthrough_breaker):
        session.post.side_effect = requests.Timeout('slow')
        assert _service(session, passthrough_breaker).get_metro_labor_data('33100') == LaborMarketData()

    @pytest.mark.parametrize('body', [
        ['oops'],
        'oops',
        {'Results': ['series']},
        {'Results': {'series': 'nope'}},
    ])
    def test_malformed_body_is_default(self, session, passthrough_breaker, body):
        resp = MagicMock()
        resp.json.return_value = body
        session.post.return_value = resp
        assert _service(session, passthrough_breaker).get_metro_labor_data('33100') == LaborMarketData()

    def test_malformed_series_entries_skipped(self, session, passthrough_breaker):
        session.post.return_value = _bls_response([
            'junk',
            {'seriesID': 'LAUMT331000000000000003', 'data': 'junk'},
            {'seriesID': 'LAUMT331000000000000003', 'data': ['junk', {'value': '900'}]},
        ])
        labor = _service(session, passthrough_breaker).get_metro_labor_data('33100')
        assert labor.total_employment == 900_000


class TestRecords:

    def test_indicators_serialize_camel_case(self):
        data = EconomicIndicators(last_updated='now').to_dict()
        assert data['gdpGrowth'] == economic.DEFAULT_GDP_GROWTH
        assert data['lastUpdated'] == 'now'
