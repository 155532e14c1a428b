"""
Market routes: county and metro opportunity data, valuation, cache admin.
"""
import logging

from flask import Blueprint, jsonify, request

from leadscout.markets.county_aggregator import get_county_aggregator
from leadscout.markets.metro_aggregator import get_market_aggregator
from leadscout.markets.models import CountyFilter, MarketFilter
from leadscout.markets.opportunity_scorer import generate_insights, get_market_health
from leadscout.services.business_market import calculate_business_value, get_all_industry_multiples

logger = logging.getLogger('routes.markets')

bp = Blueprint('markets', __name__)


def _county_filter_from_args(args):
    return CountyFilter(
        states=args.getlist('state') or None,
        min_population=args.get('min_population', type=int),
        max_population=args.get('max_population', type=int),
        market_classification=args.getlist('classification') or None,
        min_opportunity_score=args.get('min_score', type=int),
        grey_tsunami_tiers=args.getlist('tier') or None,
    )


def _is_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool)


# ── Counties ─────────────────────────────────────────────────────────────────

@bp.route('/api/counties/top')
def top_counties():
    limit = request.args.get('limit', 50, type=int)
    county_filter = _county_filter_from_args(request.args)
    fetch_industry = request.args.get('industry_data') in ('1', 'true')
    counties = get_county_aggregator().get_top_opportunity_counties(
        limit=limit, county_filter=county_filter, fetch_industry_data=fetch_industry,
    )
    return jsonify({'counties': [c.to_dict() for c in counties], 'count': len(counties)})


@bp.route('/api/counties/<fips>')
def county_detail(fips):
    metrics = get_county_aggregator().get_county_data(fips)
    if metrics is None:
        return jsonify({'error': f'No data for county {fips}'}), 404
    return jsonify(metrics.to_dict())


@bp.route('/api/counties/<fips>/enrich', methods=['POST'])
def enrich_county(fips):
    aggregator = get_county_aggregator()
    metrics = aggregator.get_county_data(fips)
    if metrics is None:
        return jsonify({'error': f'No data for county {fips}'}), 404
    return jsonify(aggregator.enrich_with_industry_data(metrics).to_dict())


@bp.route('/api/states/<state>/counties')
def state_counties(state):
    county_filter = _county_filter_from_args(request.args)
    counties = get_county_aggregator().get_state_counties_data(state, county_filter)
    counties.sort(key=lambda m: m.opportunity_score, reverse=True)
    return jsonify({
        'state': state,
        'counties': [c.to_dict() for c in counties],
        'count': len(counties),
    })


# ── Metros ───────────────────────────────────────────────────────────────────

@bp.route('/api/markets')
def top_markets():
    limit = request.args.get('limit', 20, type=int)
    market_filter = MarketFilter(
        states=[s.upper() for s in request.args.getlist('state')] or None,
        min_opportunity_score=request.args.get('min_score', type=int),
        competition_level=request.args.getlist('competition') or None,
    )
    markets = get_market_aggregator().get_top_markets(limit=limit, market_filter=market_filter)
    return jsonify({'markets': [m.to_dict() for m in markets], 'count': len(markets)})


@bp.route('/api/markets/trends')
def market_trends():
    return jsonify(get_market_aggregator().get_market_trends())


@bp.route('/api/markets/<city>/<state>')
def market_detail(city, state):
    metrics = get_market_aggregator().get_market_data(city, state)
    if metrics is None:
        return jsonify({'error': f'Unknown market: {city}, {state}'}), 404
    data = metrics.to_dict()
    data['health'] = get_market_health(metrics)
    data['insights'] = generate_insights(metrics)
    return jsonify(data)


# ── Valuation ────────────────────────────────────────────────────────────────

@bp.route('/api/valuation', methods=['POST'])
def valuation():
    data = request.get_json(silent=True) or {}
    missing = [k for k in ('revenue', 'sde', 'ebitda') if not _is_number(data.get(k))]
    if missing:
        return jsonify({'error': f'Numeric fields required: {", ".join(missing)}'}), 400
    result = calculate_business_value(data['revenue'], data['sde'], data['ebitda'],
                                      data.get('industry') or '')
    return jsonify(result)


@bp.route('/api/industries/multiples')
def industry_multiples():
    return jsonify({'industries': [m.to_dict() for m in get_all_industry_multiples()]})


# ── Cache admin ──────────────────────────────────────────────────────────────

@bp.route('/api/cache/stats')
def cache_stats():
    return jsonify({
        'counties': get_county_aggregator().get_cache_stats(),
        'markets': get_market_aggregator().get_cache_stats(),
    })


@bp.route('/api/cache/clear', methods=['POST'])
def clear_cache():
    get_county_aggregator().clear_cache()
    get_market_aggregator().clear_cache()
    logger.info("Market caches cleared via API")
    return jsonify({'ok': True})
