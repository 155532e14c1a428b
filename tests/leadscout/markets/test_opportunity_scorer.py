"""Tests for the metro opportunity scorer."""
from dataclasses import replace

import pytest

from leadscout.markets import opportunity_scorer as scorer
from leadscout.markets.models import (
    CompetitionSnapshot, GrowthIndicators, IndustrySnapshot, MarketConditions,
    MarketDemographics, MarketMetrics,
)


def make_metrics(**overrides):
    defaults = dict(
        city='Tampa',
        state='Florida',
        state_code='FL',
        coordinates={'lat': 27.95, 'lng': -82.45},
        opportunity_score=0,
        demographics=MarketDemographics(
            boomer_business_owners=1000,
            avg_owner_age=61,
            retirement_risk_score=8.2,
            businesses_without_succession_plan=700,
        ),
        market=MarketConditions(
            avg_multiple=2.8,
            median_revenue=150_000,
            yearly_transactions=100,
            competition_level='Low',
            avg_days_on_market=120,
        ),
        top_industries=[IndustrySnapshot('HVAC Services', 500, 3.5, 200_000, 8, 4.0)],
        growth=GrowthIndicators(
            population_growth=2.1,
            business_growth=4.5,
            employment_growth=2.5,
            new_construction_permits=10000,
            gdp_growth=3.2,
        ),
        competition=CompetitionSnapshot(
            active_buyers=140,
            pe_presence='Low',
            avg_bids_per_deal=3.0,
            top_buyers=['Individual Buyers'],
        ),
    )
    defaults.update(overrides)
    return MarketMetrics(**defaults)


class TestFactors:

    def test_reference_market(self):
        factors = scorer.scoring_factors(make_metrics())
        assert factors['demographics'] == pytest.approx(71.8)
        assert factors['market_dynamics'] == pytest.approx(55.33, abs=0.01)
        assert factors['growth'] == 80
        assert factors['competition'] == 70
        assert factors['industry_fit'] == 90

    def test_weights_sum_to_one(self):
        assert sum(scorer.WEIGHTS.values()) == pytest.approx(1.0)

    def test_market_score(self):
        assert scorer.calculate_market_score(make_metrics()) == 71

    def test_factors_clamped_for_extreme_inputs(self):
        metrics = make_metrics(
            demographics=MarketDemographics(10, 95, 10, 10),
            market=MarketConditions(25.0, 0, 100_000, 'High', 2000),
            growth=GrowthIndicators(-5, -5, 0, 0, 50),
            competition=CompetitionSnapshot(0, 'High', 12.0),
        )
        for value in scorer.scoring_factors(metrics).values():
            assert 0 <= value <= 100
        assert 0 <= scorer.calculate_market_score(metrics) <= 100

    def test_industry_fit_defaults_without_matches(self):
        metrics = make_metrics(top_industries=[IndustrySnapshot('Quantum Widgets', 10, 3.0, 1, 9, 1.0)])
        assert scorer.score_industry_fit(metrics) == scorer.DEFAULT_INDUSTRY_FIT

    def test_industry_fit_defaults_without_industries(self):
        assert scorer.score_industry_fit(make_metrics(top_industries=[])) == 50

    def test_unknown_competition_level_gets_floor_points(self):
        metrics = make_metrics(market=replace(make_metrics().market, competition_level='High'))
        # 10 (level) + 20 (Low PE) + 10 (bids)
        assert scorer.score_competition(metrics) == 40


class TestMarketHealth:

    @pytest.mark.parametrize('score,status', [
        (100, 'Hot'), (85, 'Hot'), (84, 'Warm'), (75, 'Warm'),
        (74, 'Cool'), (65, 'Cool'), (64, 'Cold'), (0, 'Cold'),
    ])
    def test_bands(self, score, status):
        health = scorer.get_market_health(make_metrics(opportunity_score=score))
        assert health['status'] == status
        assert health['color'].startswith('#')


class TestInsights:

    def test_reference_market_insights(self):
        insights = scorer.generate_insights(make_metrics())
        assert insights == [
            'Strong boomer concentration with average owner age of 61',
            'Attractive valuations at 2.8x EBITDA vs industry average',
            'Robust business growth at +4.5%/yr annually',
            'Limited PE competition creates buyer-friendly environment',
            'HVAC Services shows extreme retirement risk (8/10)',
        ]

    def test_high_pe_presence_warning(self):
        metrics = make_metrics(
            competition=CompetitionSnapshot(180, 'High', 4.2),
            market=replace(make_metrics().market, avg_multiple=3.5),
            growth=replace(make_metrics().growth, business_growth=1.0),
            top_industries=[],
        )
        insights = scorer.generate_insights(metrics)
        assert 'High PE presence may drive up valuations and competition' in insights
        assert not any('Attractive valuations' in i for i in insights)
        assert not any('Robust business growth' in i for i in insights)


class TestIndustryScores:

    def test_known_and_unknown_industries(self):
        metrics = make_metrics(top_industries=[
            IndustrySnapshot('HVAC Services', 2000, 3.5, 200_000, 8, 4.0),
            IndustrySnapshot('Quantum Widgets', 0, 3.0, 1, 0, 0.0),
        ])
        hvac, unknown = scorer.score_industries(metrics)
        assert hvac['factors'] == {
            'retirementRisk': 80, 'marketSize': 100, 'growthRate': 60.0, 'acquisitionScore': 100,
        }
        # 80*.35 + 100*.25 + 60*.2 + 100*.2
        assert hvac['score'] == 85
        assert unknown['factors']['acquisitionScore'] == 50
        assert unknown['score'] == 10
