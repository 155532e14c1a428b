"""Tests for the Census Bureau client."""
from unittest.mock import MagicMock, patch

import pytest
import requests

from leadscout.services.census import CensusClient
from leadscout.services.circuit_breaker import CircuitOpenError

CBP_HEADER = ['ESTAB', 'EMP', 'PAYANN', 'NAME', 'NAICS2017', 'state', 'county']


def _response(status=200, body=None):
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = body
    resp.text = str(body)
    return resp


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def client(session, passthrough_breaker):
    return CensusClient(api_key='census-key', session=session, breaker=passthrough_breaker, timeout=7)


# ---------------------------------------------------------------------------
# Request plumbing
# ---------------------------------------------------------------------------

class TestRequests:

    def test_key_and_timeout_sent(self, client, session):
        session.get.return_value = _response(body=[['ESTAB'], ['1', '2', '3']])
        client.get_state_business_totals('12')
        _, kwargs = session.get.call_args
        assert kwargs['params']['key'] == 'census-key'
        assert kwargs['params']['for'] == 'state:12'
        assert kwargs['timeout'] == 7

    def test_no_key_omits_param(self, session, passthrough_breaker):
        client = CensusClient(api_key=None, session=session, breaker=passthrough_breaker)
        session.get.return_value = _response(body=[['ESTAB'], ['1', '2', '3']])
        client.get_state_business_totals('12')
        assert 'key' not in session.get.call_args[1]['params']

    def test_calls_go_through_breaker(self, client, session, passthrough_breaker):
        session.get.return_value = _response(body=[['h'], ['1', '2', '3']])
        client.get_state_business_totals('12')
        assert passthrough_breaker.calls == 1

    @pytest.mark.parametrize('response', [
        _response(status=500, body='oops'),
        _response(status=204, body=None),
        _response(body=[['ESTAB,EMP,PAYANN']]),
        _response(body={'error': 'unknown variable'}),
    ])
    def test_unusable_responses_are_no_data(self, client, session, response):
        session.get.return_value = response
        assert client.get_state_business_totals('12') is None
        assert client.get_state_counties_business_data('12') == {}

    def test_non_json_body_is_no_data(self, client, session):
        resp = _response()
        resp.json.side_effect = ValueError('not json')
        session.get.return_value = resp
        assert client.get_county_demographics('12086') is None

    def test_request_exception_is_no_data(self, client, session):
        session.get.side_effect = requests.Timeout('slow')
        assert client.get_county_demographics('12086') is None

    def test_open_circuit_is_no_data(self, session):
        breaker = MagicMock()
        breaker.call.side_effect = CircuitOpenError('census', 60)
        client = CensusClient(api_key='k', session=session, breaker=breaker)
        assert client.get_counties_business_data(['12086']) == {}
        session.get.assert_not_called()


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

class TestParsing:

    def test_state_counties(self, client, session):
        session.get.return_value = _response(body=[
            CBP_HEADER,
            ['1000', '8000', '400000', 'Miami-Dade County, Florida', '00', '12', '086'],
            ['0', '0', '0', 'Liberty County, Florida', '00', '12', '077'],
        ])
        counties = client.get_state_counties_business_data('12')
        miami = counties['12086']
        assert miami.county_name == 'Miami-Dade, Florida'
        assert miami.state == '12'
        assert miami.avg_business_size == 8
        assert counties['12077'].avg_business_size == 0

    def test_specific_counties_grouped_by_state(self, client, session):
        session.get.side_effect = [
            _response(body=[CBP_HEADER, ['10', '50', '900', 'Miami-Dade County, Florida', '00', '12', '086']]),
            _response(body=[CBP_HEADER, ['20', '40', '800', 'Harris County, Texas', '00', '48', '201']]),
        ]
        counties = client.get_counties_business_data(['12086', '48201'])
        assert set(counties) == {'12086', '48201'}
        assert counties['12086'].county_name == 'Miami-Dade, Florida'
        assert counties['48201'].county_name == 'Harris, Texas'
        assert counties['48201'].state == '48'
        assert counties['48201'].avg_business_size == 2
        assert session.get.call_count == 2
        first_params = session.get.call_args_list[0][1]['params']
        assert first_params['for'] == 'county:086'
        assert first_params['in'] == 'state:12'

    def test_demographics(self, client, session):
        session.get.return_value = _response(body=[
            ['B01003_001E', 'B01002_001E', 'B19013_001E', 'state', 'county'],
            ['2701767', '40.5', '64215', '12', '086'],
        ])
        demographics = client.get_county_demographics('12086')
        assert demographics.population == 2_701_767
        assert demographics.median_age == 40.5
        assert demographics.median_income == 64215

    def test_bad_numbers_become_zero(self, client, session):
        session.get.return_value = _response(body=[['h'], [None, 'n/a', '-']])
        demographics = client.get_county_demographics('12086')
        assert (demographics.population, demographics.median_age, demographics.median_income) == (0, 0.0, 0)

    def test_state_totals(self, client, session):
        session.get.return_value = _response(body=[['h'], ['550000', '8000000', '400000000', '12']])
        totals = client.get_state_business_totals('12')
        assert totals['total_businesses'] == 550_000
        assert totals['total_employees'] == 8_000_000
        assert 'last_updated' in totals

    def test_industry_distribution_zero_on_failure(self, client, session):
        session.get.side_effect = [
            _response(body=[['ESTAB'], ['42']]),
            _response(status=500, body='nope'),
        ]
        assert client.get_county_industry_distribution('12086', ['2382', '5617']) == {
            '2382': 42, '5617': 0}


# ---------------------------------------------------------------------------
# Grey Tsunami breakdown
# ---------------------------------------------------------------------------

class TestGreyTsunamiIndustries:

    def test_shared_naics_code_split_evenly(self, client):
        def distribution(fips, codes):
            return {code: (30 if code == '2382' else 0) for code in codes}

        with patch.object(client, 'get_counties_business_data', return_value={}), \
                patch.object(client, 'get_county_industry_distribution', side_effect=distribution):
            data = client.get_county_grey_tsunami_industries('12086')

        home = data.industries['Essential Home Services']
        counts = {e.business_type: e.estimated_count for e in home.business_types}
        assert counts == {'HVAC Services': 10, 'Plumbing Services': 10, 'Electrical Services': 10}
        assert home.total_establishments == 30
        assert data.total_grey_tsunami_establishments == 30
        assert data.county_name == 'Unknown County'

    def test_no_data_means_zero_total(self, client):
        with patch.object(client, 'get_counties_business_data', return_value={}), \
                patch.object(client, 'get_county_industry_distribution',
                             side_effect=lambda fips, codes: {c: 0 for c in codes}):
            data = client.get_county_grey_tsunami_industries('12086')
        assert data.total_grey_tsunami_establishments == 0
        assert all(not c.business_types for c in data.industries.values())

    def test_county_name_from_business_row(self, client, session):
        def get(url, params, timeout):
            if params['get'].startswith('ESTAB,EMP'):
                return _response(body=[CBP_HEADER,
                                       ['1000', '8000', '400000', 'Miami-Dade County, Florida', '00', '12', '086']])
            return _response(body=[['ESTAB'], ['6']])

        session.get.side_effect = get
        data = client.get_county_grey_tsunami_industries('12086')
        assert data.county_name == 'Miami-Dade, Florida'
        assert data.total_grey_tsunami_establishments > 0
