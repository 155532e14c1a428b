"""
County opportunity scoring.

score = density + boomer ownership + market size + economic health + business
size, each capped at its weight x 100, then multiplied by a sector tier bonus
and clamped to [0, 100].

Weights and bonus constants live in scoring_config.yaml next to this module.
"""
import logging
import os

import yaml

from leadscout.markets.grey_tsunami import category_for_business
from leadscout.markets.models import MAIN, SECONDARY, TERTIARY

logger = logging.getLogger('markets.scoring')

MAIN_MARKET_MIN_POPULATION = 1_000_000
SECONDARY_MARKET_MIN_POPULATION = 250_000


# ── Scoring config (YAML with hardcoded fallback) ────────────────────────────

_scoring_config = None


def _default_config():
    """Hardcoded fallback if YAML is missing."""
    return {
        'version': 'default',
        'weights': {
            'business_density': 0.30,
            'boomer_ownership': 0.25,
            'market_size': 0.20,
            'economic_health': 0.15,
            'business_size': 0.10,
        },
        'market_size_share': {TERTIARY: 1.0, SECONDARY: 0.75, MAIN: 0.5},
        'hidden_gem': {'min_boomer_fraction': 0.45, 'bonus_points': 5},
        'economic_health': {
            'income_ceiling': 100000,
            'older_median_age': 40,
            'older_age_score': 0.8,
            'younger_age_score': 0.6,
        },
        'business_size_buckets': [
            {'max_size': 10, 'factor': 1.0},
            {'max_size': 20, 'factor': 0.7},
            {'max_size': 50, 'factor': 0.5},
        ],
        'business_size_floor': 0.3,
        'sector_tier_bonus': [
            {'min_acquisition_score': 9, 'bonus': 0.15},
            {'min_acquisition_score': 7, 'bonus': 0.10},
            {'min_acquisition_score': 5, 'bonus': 0.05},
        ],
        'real_industry_bonus': {'density_factor': 0.3, 'max_bonus': 0.2},
    }


def load_scoring_config():
    """Load scoring config from YAML, with in-memory cache and hardcoded fallback."""
    global _scoring_config
    if _scoring_config is not None:
        return _scoring_config

    config_path = os.path.join(os.path.dirname(__file__), 'scoring_config.yaml')
    try:
        with open(config_path, 'r') as f:
            _scoring_config = yaml.safe_load(f)
        logger.info("Scoring config loaded from YAML (version=%s)", _scoring_config.get('version', '?'))
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Scoring YAML not loaded (%s), using defaults", e)
        _scoring_config = _default_config()

    return _scoring_config


# ── Classification ───────────────────────────────────────────────────────────

def classify_market(population):
    if population >= MAIN_MARKET_MIN_POPULATION:
        return MAIN
    if population >= SECONDARY_MARKET_MIN_POPULATION:
        return SECONDARY
    return TERTIARY


# ── Score ────────────────────────────────────────────────────────────────────

def calculate_sector_tier_bonus(industries, config=None):
    """Best bonus among the categories the business types belong to (0 when none match)."""
    config = config or load_scoring_config()
    thresholds = sorted(config['sector_tier_bonus'],
                        key=lambda t: t['min_acquisition_score'], reverse=True)
    best = 0.0
    for industry in industries:
        category = category_for_business(industry)
        if category is None:
            continue
        for threshold in thresholds:
            if category.acquisition_score >= threshold['min_acquisition_score']:
                best = max(best, threshold['bonus'])
                break
    return best


def _business_size_factor(avg_business_size, config):
    for bucket in config['business_size_buckets']:
        if avg_business_size < bucket['max_size']:
            return bucket['factor']
    return config['business_size_floor']


def calculate_opportunity_score(business, demographics, classification,
                                top_industries=None, industry_data=None,
                                boomer_owned_estimate=0, config=None):
    """
    0-100 acquisition opportunity score for one county.

    `business` needs total_establishments and avg_business_size;
    `demographics` (population, median_age, median_income) may be None.
    Real per-industry counts, when present, replace the estimated tier bonus.
    """
    config = config or load_scoring_config()
    weights = config['weights']
    establishments = business.total_establishments
    score = 0.0

    population = demographics.population if demographics else 0
    density = establishments / population * 10000 if population > 0 else 0
    score += min(density * 10, weights['business_density'] * 100)

    if boomer_owned_estimate and establishments:
        boomer_fraction = boomer_owned_estimate / establishments
        score += boomer_fraction * weights['boomer_ownership'] * 100
        gem = config['hidden_gem']
        if classification == TERTIARY and boomer_fraction > gem['min_boomer_fraction']:
            score += gem['bonus_points']

    share = config['market_size_share'].get(classification, config['market_size_share'][MAIN])
    score += weights['market_size'] * 100 * share

    if demographics:
        econ = config['economic_health']
        income_score = min(demographics.median_income / econ['income_ceiling'], 1)
        if demographics.median_age > econ['older_median_age']:
            age_score = econ['older_age_score']
        else:
            age_score = econ['younger_age_score']
        score += (income_score + age_score) / 2 * weights['economic_health'] * 100

    score += _business_size_factor(business.avg_business_size, config) * weights['business_size'] * 100

    grey_total = industry_data.total_grey_tsunami_establishments if industry_data else 0
    if grey_total > 0 and establishments:
        real = config['real_industry_bonus']
        bonus = min(real['max_bonus'], grey_total / establishments * real['density_factor'])
        logger.debug("Real industry bonus %.1f%% (%d Grey Tsunami businesses)", bonus * 100, grey_total)
        score *= 1 + bonus
    elif top_industries:
        score *= 1 + calculate_sector_tier_bonus(top_industries, config)

    return int(round(max(0.0, min(100.0, score))))
