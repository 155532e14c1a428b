"""Tests for the health blueprint."""
import time

from leadscout.services.circuit_breaker import _registry


class TestLiveness:

    def test_health_returns_200(self, client):
        resp = client.get('/health')
        assert resp.status_code == 200
        assert resp.get_json() == {"status": "healthy"}


class TestUpstreamHealth:

    def test_all_closed_is_ok(self, client):
        data = client.get('/api/health').get_json()
        assert data['status'] == 'ok'
        assert data['degraded'] == []
        assert set(data['services']) == {'census', 'fred', 'bls', 'scrapingbee', 'apify'}
        assert data['services']['census']['failure_threshold'] == 5

    def test_open_breaker_is_degraded(self, client, fake_redis):
        fake_redis.set('cb:census:state', 'open')
        fake_redis.set('cb:census:last_failure', str(time.time()))
        data = client.get('/api/health').get_json()
        assert data['status'] == 'degraded'
        assert data['degraded'] == ['census']
        assert data['services']['census']['state'] == 'open'

    def test_redis_down_reports_unknown(self, client, down_redis):
        for breaker in _registry.values():
            breaker.redis = down_redis
        data = client.get('/api/health').get_json()
        assert data['status'] == 'degraded'
        assert data['services']['fred']['state'] == 'unknown'


class TestReset:

    def test_reset_closes_breaker(self, client, fake_redis):
        fake_redis.set('cb:apify:state', 'open')
        fake_redis.set('cb:apify:last_failure', str(time.time()))
        resp = client.post('/api/health/apify/reset')
        assert resp.status_code == 200
        data = resp.get_json()
        assert data['ok'] is True
        assert data['health']['state'] == 'closed'
        assert client.get('/api/health').get_json()['status'] == 'ok'

    def test_unknown_service_404(self, client):
        resp = client.post('/api/health/myspace/reset')
        assert resp.status_code == 404
        assert 'myspace' in resp.get_json()['error']

    def test_reset_failure_503(self, client, down_redis):
        _registry['bls'].redis = down_redis
        resp = client.post('/api/health/bls/reset')
        assert resp.status_code == 503
