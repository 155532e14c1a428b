"""
Market constants: boomer ownership rates, regional adjustments, state codes.

Ownership figures follow the Census Annual Business Survey; baby boomers own
roughly 41% of US small businesses, a little more in the South and Midwest.
"""

NATIONAL_BOOMER_OWNERSHIP = 0.41
NATIONAL_MEDIAN_AGE = 38.8

REGIONAL_BOOMER_OWNERSHIP = {
    'midwest': 0.43,
    'south': 0.44,
    'northeast': 0.40,
    'west': 0.38,
}

STATE_REGIONS = {
    # Midwest
    'IL': 'midwest', 'IN': 'midwest', 'IA': 'midwest', 'KS': 'midwest',
    'MI': 'midwest', 'MN': 'midwest', 'MO': 'midwest', 'NE': 'midwest',
    'ND': 'midwest', 'OH': 'midwest', 'SD': 'midwest', 'WI': 'midwest',
    # South (incl. MD, DE)
    'AL': 'south', 'AR': 'south', 'FL': 'south', 'GA': 'south',
    'KY': 'south', 'LA': 'south', 'MS': 'south', 'NC': 'south',
    'OK': 'south', 'SC': 'south', 'TN': 'south', 'TX': 'south',
    'VA': 'south', 'WV': 'south', 'MD': 'south', 'DE': 'south',
    # Northeast
    'CT': 'northeast', 'ME': 'northeast', 'MA': 'northeast', 'NH': 'northeast',
    'NJ': 'northeast', 'NY': 'northeast', 'PA': 'northeast', 'RI': 'northeast',
    'VT': 'northeast',
    # West
    'AZ': 'west', 'CA': 'west', 'CO': 'west', 'ID': 'west',
    'MT': 'west', 'NV': 'west', 'NM': 'west', 'OR': 'west',
    'UT': 'west', 'WA': 'west', 'WY': 'west', 'AK': 'west', 'HI': 'west',
}

INDUSTRY_BOOMER_CONCENTRATION = {
    'HVAC Services': 0.52,
    'Plumbing Services': 0.54,
    'Auto Repair': 0.51,
    'Manufacturing': 0.48,
    'Landscaping': 0.45,
    'Construction': 0.47,
    'Retail Trade': 0.43,
    'Professional Services': 0.38,
    'Technology Services': 0.28,
    'Healthcare Services': 0.41,
}

STATE_FIPS = {
    'Alabama': '01', 'Alaska': '02', 'Arizona': '04', 'Arkansas': '05',
    'California': '06', 'Colorado': '08', 'Connecticut': '09', 'Delaware': '10',
    'Florida': '12', 'Georgia': '13', 'Hawaii': '15', 'Idaho': '16',
    'Illinois': '17', 'Indiana': '18', 'Iowa': '19', 'Kansas': '20',
    'Kentucky': '21', 'Louisiana': '22', 'Maine': '23', 'Maryland': '24',
    'Massachusetts': '25', 'Michigan': '26', 'Minnesota': '27', 'Mississippi': '28',
    'Missouri': '29', 'Montana': '30', 'Nebraska': '31', 'Nevada': '32',
    'New Hampshire': '33', 'New Jersey': '34', 'New Mexico': '35', 'New York': '36',
    'North Carolina': '37', 'North Dakota': '38', 'Ohio': '39', 'Oklahoma': '40',
    'Oregon': '41', 'Pennsylvania': '42', 'Rhode Island': '44', 'South Carolina': '45',
    'South Dakota': '46', 'Tennessee': '47', 'Texas': '48', 'Utah': '49',
    'Vermont': '50', 'Virginia': '51', 'Washington': '53', 'West Virginia': '54',
    'Wisconsin': '55', 'Wyoming': '56',
}

FIPS_STATE_ABBR = {
    '01': 'AL', '02': 'AK', '04': 'AZ', '05': 'AR', '06': 'CA',
    '08': 'CO', '09': 'CT', '10': 'DE', '12': 'FL', '13': 'GA',
    '15': 'HI', '16': 'ID', '17': 'IL', '18': 'IN', '19': 'IA',
    '20': 'KS', '21': 'KY', '22': 'LA', '23': 'ME', '24': 'MD',
    '25': 'MA', '26': 'MI', '27': 'MN', '28': 'MS', '29': 'MO',
    '30': 'MT', '31': 'NE', '32': 'NV', '33': 'NH', '34': 'NJ',
    '35': 'NM', '36': 'NY', '37': 'NC', '38': 'ND', '39': 'OH',
    '40': 'OK', '41': 'OR', '42': 'PA', '44': 'RI', '45': 'SC',
    '46': 'SD', '47': 'TN', '48': 'TX', '49': 'UT', '50': 'VT',
    '51': 'VA', '53': 'WA', '54': 'WV', '55': 'WI', '56': 'WY',
}


def state_fips(state_name):
    """'North Carolina' -> '37'; '' when unknown."""
    return STATE_FIPS.get(state_name, '')


def state_abbr(fips):
    """'37' (or a full county FIPS like '37183') -> 'NC'; '' when unknown."""
    return FIPS_STATE_ABBR.get((fips or '')[:2], '')


def get_boomer_ownership_percentage(state=None):
    """Regional boomer ownership rate for a state abbreviation, national rate otherwise."""
    region = STATE_REGIONS.get(state or '')
    if region:
        return REGIONAL_BOOMER_OWNERSHIP[region]
    return NATIONAL_BOOMER_OWNERSHIP


def get_industry_boomer_concentration(industry):
    return INDUSTRY_BOOMER_CONCENTRATION.get(industry, NATIONAL_BOOMER_OWNERSHIP)


def calculate_boomer_likelihood(business_count, median_age, population, state):
    """
    Estimate the share of boomer-owned businesses in one county.

    Starts from the regional rate, shifts it by how far the county's median
    age is from the national one (±20% at the extremes) and adds 5% for low
    establishment density. The result is clamped to [0.25, 0.65].

    Returns dict(score, percentage, confidence); score is 50 at the regional
    baseline and grows with the adjusted share.
    """
    base = get_boomer_ownership_percentage(state)

    age_adjustment = (median_age - NATIONAL_MEDIAN_AGE) / NATIONAL_MEDIAN_AGE * 0.2
    density = (business_count / population) * 1000 if population else 0
    density_adjustment = 0.05 if density < 50 else 0

    percentage = min(0.65, max(0.25, base * (1 + age_adjustment + density_adjustment)))

    if population > 50000:
        confidence = 'high'
    elif population > 10000:
        confidence = 'medium'
    else:
        confidence = 'low'

    return {
        'score': round(percentage / base * 50 + 50),
        'percentage': percentage,
        'confidence': confidence,
    }
