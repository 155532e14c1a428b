"""
Centralized configuration: env vars, upstream endpoints, cache lifetimes.
"""
import os


# ── Logging ──────────────────────────────────────────────────────────────────
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
LOG_FORMAT = os.getenv('LOG_FORMAT', 'text')

# ── Flask ────────────────────────────────────────────────────────────────────
SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-change-me')

# ── Redis (circuit breaker state) ────────────────────────────────────────────
REDIS_URL = os.getenv('REDIS_URL', 'redis://localhost:6379/0')

# ── Census Bureau ────────────────────────────────────────────────────────────
CENSUS_API_KEY = os.getenv('CENSUS_API_KEY')
CENSUS_API_URL = 'https://api.census.gov/data'
CENSUS_CBP_YEAR = int(os.getenv('CENSUS_CBP_YEAR', '2021'))
CENSUS_ACS_ENDPOINT = '2022/acs/acs5'
CENSUS_TIMEOUT = float(os.getenv('CENSUS_TIMEOUT', '25'))

# ── FRED / BLS ───────────────────────────────────────────────────────────────
FRED_API_KEY = os.getenv('FRED_API_KEY')
FRED_API_URL = 'https://api.stlouisfed.org/fred'
BLS_API_KEY = os.getenv('BLS_API_KEY')
BLS_API_URL = 'https://api.bls.gov/publicAPI/v2'
ECONOMIC_TIMEOUT = float(os.getenv('ECONOMIC_TIMEOUT', '15'))

# ── Scraping services (ad platform probes) ───────────────────────────────────
SCRAPINGBEE_API_KEY = os.getenv('SCRAPINGBEE_API_KEY')
SCRAPINGBEE_API_URL = 'https://app.scrapingbee.com/api/v1/'
APIFY_API_TOKEN = os.getenv('APIFY_API_TOKEN')
APIFY_API_URL = 'https://api.apify.com/v2'
APIFY_FB_ADS_ACTOR = 'apify~facebook-ads-scraper'
SCRAPE_TIMEOUT = float(os.getenv('SCRAPE_TIMEOUT', '30'))

# ── Ad platform prober ───────────────────────────────────────────────────────
PROBE_DELAY = float(os.getenv('PROBE_DELAY', '0.3'))
MOCK_SEED = os.getenv('MOCK_SEED', 'leadscout')

# ── Caches (seconds) ─────────────────────────────────────────────────────────
METRICS_CACHE_TTL = int(os.getenv('METRICS_CACHE_TTL', str(24 * 60 * 60)))
INDUSTRY_CACHE_TTL = int(os.getenv('INDUSTRY_CACHE_TTL', str(7 * 24 * 60 * 60)))

# ── County aggregation ───────────────────────────────────────────────────────
DEFAULT_TARGET_STATES = [
    'Florida', 'Texas', 'California', 'Arizona', 'North Carolina',
    'Georgia', 'Tennessee', 'South Carolina', 'Nevada', 'Colorado',
]
STATE_BATCH_SIZE = 3

# ── Upstream services guarded by circuit breakers ────────────────────────────
UPSTREAM_SERVICES = ['census', 'fred', 'bls', 'scrapingbee', 'apify']
