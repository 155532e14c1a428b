"""
Metro market opportunity scoring.

Five factors, each 0-100, weighted into the market's opportunity score:

    demographics     .30  retirement risk, succession gaps, owner age
    market dynamics  .25  multiples (lower is better), volume, liquidity
    growth           .20  population, business formation, GDP
    competition      .15  competition level, PE presence, bids per deal
    industry fit     .10  Grey Tsunami acquisition scores of top industries
"""
from leadscout.markets.grey_tsunami import GREY_TSUNAMI_CATEGORIES

WEIGHTS = {
    'demographics': 0.30,
    'market_dynamics': 0.25,
    'growth': 0.20,
    'competition': 0.15,
    'industry_fit': 0.10,
}

HEALTH_BANDS = [
    (85, 'Hot', '#DC2626', 'Prime acquisition market with excellent opportunities'),
    (75, 'Warm', '#F59E0B', 'Good market with solid acquisition potential'),
    (65, 'Cool', '#3B82F6', 'Moderate market with selective opportunities'),
    (0, 'Cold', '#6B7280', 'Challenging market with limited opportunities'),
]

COMPETITION_LEVEL_POINTS = {'Low': 40, 'Medium': 25}
PE_PRESENCE_POINTS = {'None': 30, 'Low': 20, 'Medium': 10}
DEFAULT_INDUSTRY_FIT = 50
GROWTH_COMPONENT_CAP = 33.33


def _clamp(value, low=0.0, high=100.0):
    return max(low, min(high, value))


def _grey_tsunami_match(industry_name):
    """First category with a business type that contains, or is contained in, the name."""
    name = industry_name.lower()
    for category in GREY_TSUNAMI_CATEGORIES:
        for business in category.businesses:
            b = business.lower()
            if b in name or name in b:
                return category
    return None


# ── Factors ──────────────────────────────────────────────────────────────────

def score_demographics(metrics):
    d = metrics.demographics
    retirement = d.retirement_risk_score / 10 * 40
    succession = (d.businesses_without_succession_plan / d.boomer_business_owners * 30
                  if d.boomer_business_owners else 0)
    age = max(0, (d.avg_owner_age - 55) / 10 * 30)
    return _clamp(retirement + succession + age)


def score_market_dynamics(metrics):
    m = metrics.market
    multiple = max(0, 40 - (m.avg_multiple - 2.5) * 10)
    volume = min(30, m.yearly_transactions / 30)
    liquidity = max(0, 30 - (m.avg_days_on_market - 60) / 4)
    return _clamp(multiple + volume + liquidity)


def score_growth(metrics):
    g = metrics.growth
    population = _clamp(g.population_growth * 10, 0, GROWTH_COMPONENT_CAP)
    business = _clamp(g.business_growth * 8, 0, GROWTH_COMPONENT_CAP)
    gdp = _clamp(g.gdp_growth * 8, 0, GROWTH_COMPONENT_CAP)
    return _clamp(round(population + business + gdp))


def score_competition(metrics):
    level = COMPETITION_LEVEL_POINTS.get(metrics.market.competition_level, 10)
    pe = PE_PRESENCE_POINTS.get(metrics.competition.pe_presence, 0)
    bids = max(0, 30 - (metrics.competition.avg_bids_per_deal - 1) * 10)
    return _clamp(round(level + pe + bids))


def score_industry_fit(metrics):
    scores = []
    for industry in metrics.top_industries:
        category = _grey_tsunami_match(industry.name)
        if category:
            scores.append((category.acquisition_score * 10 + industry.retirement_risk * 10) / 2)
    if not scores:
        return DEFAULT_INDUSTRY_FIT
    return _clamp(round(sum(scores) / len(scores)))


def scoring_factors(metrics):
    return {
        'demographics': score_demographics(metrics),
        'market_dynamics': score_market_dynamics(metrics),
        'growth': score_growth(metrics),
        'competition': score_competition(metrics),
        'industry_fit': score_industry_fit(metrics),
    }


def calculate_market_score(metrics):
    factors = scoring_factors(metrics)
    weighted = sum(factors[name] * weight for name, weight in WEIGHTS.items())
    return int(round(_clamp(weighted)))


# ── Per-industry / presentation ──────────────────────────────────────────────

def score_industries(metrics):
    results = []
    for industry in metrics.top_industries:
        category = _grey_tsunami_match(industry.name)
        acquisition = category.acquisition_score if category else 5
        factors = {
            'retirementRisk': industry.retirement_risk * 10,
            'marketSize': min(100, industry.business_count / 20),
            'growthRate': min(100, industry.growth_rate * 15),
            'acquisitionScore': acquisition * 10,
        }
        score = (factors['retirementRisk'] * 0.35 + factors['marketSize'] * 0.25
                 + factors['growthRate'] * 0.20 + factors['acquisitionScore'] * 0.20)
        results.append({
            'industry': industry.name,
            'score': int(round(_clamp(score))),
            'factors': factors,
        })
    return results


def get_market_health(metrics):
    for floor, status, color, description in HEALTH_BANDS:
        if metrics.opportunity_score >= floor:
            return {'status': status, 'color': color, 'description': description}
    _, status, color, description = HEALTH_BANDS[-1]
    return {'status': status, 'color': color, 'description': description}


def generate_insights(metrics):
    insights = []
    factors = scoring_factors(metrics)
    d = metrics.demographics

    if factors['demographics'] >= 80:
        insights.append(f'Exceptional retirement risk with {d.businesses_without_succession_plan:,} '
                        f'businesses lacking succession plans')
    elif factors['demographics'] >= 60:
        insights.append(f'Strong boomer concentration with average owner age of {d.avg_owner_age:g}')

    if metrics.market.avg_multiple < 3.2:
        insights.append(f'Attractive valuations at {metrics.market.avg_multiple:g}x EBITDA vs industry average')

    if metrics.growth.business_growth >= 4:
        insights.append(f'Robust business growth at +{metrics.growth.business_growth:.1f}%/yr annually')

    pe = metrics.competition.pe_presence
    if pe in ('Low', 'None'):
        insights.append('Limited PE competition creates buyer-friendly environment')
    elif pe == 'High':
        insights.append('High PE presence may drive up valuations and competition')

    if metrics.top_industries and metrics.top_industries[0].retirement_risk >= 8:
        top = metrics.top_industries[0]
        insights.append(f'{top.name} shows extreme retirement risk ({top.retirement_risk}/10)')

    return insights
