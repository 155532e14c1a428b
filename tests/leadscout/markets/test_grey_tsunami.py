"""Tests for the Grey Tsunami taxonomy and the market constants helpers."""
import pytest

from leadscout.markets.constants import (
    NATIONAL_BOOMER_OWNERSHIP, calculate_boomer_likelihood, get_boomer_ownership_percentage,
    get_industry_boomer_concentration, state_abbr, state_fips,
)
from leadscout.markets.grey_tsunami import (
    GREY_TSUNAMI_CATEGORIES, NAICS_MAPPINGS, business_types_for_naics, category_for_business,
    extract_top_industries, identify_top_industries, matches_tiers, naics_codes_for_business_type,
    naics_description, tier_number,
)
from leadscout.markets.models import (
    BusinessTypeEstimate, GreyTsunamiIndustryData, IndustryCategoryData,
)


class TestTaxonomy:

    def test_acquisition_scores_in_range(self):
        for category in GREY_TSUNAMI_CATEGORIES:
            assert 1 <= category.acquisition_score <= 10

    def test_every_mapped_business_type_has_a_category(self):
        for _, _, business_types in NAICS_MAPPINGS:
            for business_type in business_types:
                assert category_for_business(business_type) is not None, business_type

    def test_category_lookup_is_case_insensitive(self):
        assert category_for_business('hvac services').tier == 'TIER 1'
        assert category_for_business('Underwater Basket Weaving') is None

    def test_tier_number(self):
        assert tier_number('TIER 7') == 7
        assert tier_number('bogus') == 99

    def test_naics_lookups(self):
        assert naics_codes_for_business_type('HVAC Services') == ['2382']
        assert business_types_for_naics('2382') == [
            'HVAC Services', 'Plumbing Services', 'Electrical Services']
        assert naics_description('2382') == 'Building Equipment Contractors'
        assert naics_description('238').endswith('(and related)')
        assert naics_description('9999') == 'Unknown NAICS code'


class TestIdentifyTopIndustries:

    def test_small_businesses_favour_service_categories(self, county_business):
        industries = identify_top_industries(county_business(avg_business_size=5))
        assert industries[:2] == ['HVAC Services', 'Plumbing Services']
        assert len(industries) <= 5

    def test_large_businesses_favour_manufacturing(self, county_business):
        industries = identify_top_industries(county_business(avg_business_size=80))
        assert 'Machine Shops' in industries

    def test_allowed_tiers_restrict_choice(self, county_business):
        industries = identify_top_industries(county_business(avg_business_size=20),
                                             allowed_tiers=['TIER 7'])
        assert industries == ['Self-Storage Facilities', 'Laundromats']

    def test_no_duplicates(self, county_business):
        industries = identify_top_industries(county_business(avg_business_size=20))
        assert len(industries) == len(set(industries))


class TestExtractTopIndustries:

    def _data(self):
        return GreyTsunamiIndustryData(
            fips_code='12086',
            county_name='Miami-Dade',
            industries={
                'Boring But Profitable': IndustryCategoryData(90, [
                    BusinessTypeEstimate('Laundromats', 90, ['8123']),
                ]),
                'Essential Home Services': IndustryCategoryData(30, [
                    BusinessTypeEstimate('Pest Control', 5, ['5617']),
                    BusinessTypeEstimate('HVAC Services', 25, ['2382']),
                ]),
            },
            total_grey_tsunami_establishments=120,
        )

    def test_lower_tier_first_then_count(self):
        assert extract_top_industries(self._data()) == ['HVAC Services', 'Pest Control', 'Laundromats']

    def test_matches_tiers(self):
        industries = extract_top_industries(self._data())
        assert matches_tiers(industries, ['TIER 7'])
        assert not matches_tiers(industries, ['TIER 19'])


class TestConstants:

    def test_state_codes(self):
        assert state_fips('Florida') == '12'
        assert state_fips('Atlantis') == ''
        assert state_abbr('12086') == 'FL'
        assert state_abbr('') == ''

    def test_regional_ownership(self):
        assert get_boomer_ownership_percentage('FL') == 0.44
        assert get_boomer_ownership_percentage('CA') == 0.38
        assert get_boomer_ownership_percentage(None) == NATIONAL_BOOMER_OWNERSHIP

    @pytest.mark.parametrize('median_age', [10, 38.8, 90])
    def test_likelihood_percentage_clamped(self, median_age):
        result = calculate_boomer_likelihood(1000, median_age, 100_000, 'FL')
        assert 0.25 <= result['percentage'] <= 0.65

    def test_likelihood_confidence_by_population(self):
        assert calculate_boomer_likelihood(100, 40, 60_000, 'FL')['confidence'] == 'high'
        assert calculate_boomer_likelihood(100, 40, 20_000, 'FL')['confidence'] == 'medium'
        assert calculate_boomer_likelihood(100, 40, 5_000, 'FL')['confidence'] == 'low'

    def test_industry_concentration(self):
        assert get_industry_boomer_concentration('Plumbing Services') == 0.54
        assert get_industry_boomer_concentration('Crypto Mining') == NATIONAL_BOOMER_OWNERSHIP
