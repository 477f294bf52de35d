import unittest
from unittest import mock

from stockdata.api.server import app
from stockdata.ingestion.dataset import Dataset


class TestAPIExtras(unittest.TestCase):
    def setUp(self):
        app.testing = True
        app.config['DATASET'] = Dataset.from_dicts(
            {"1": [{"date": "2022-01-03", "pe": "n/a"}]},
            {"1": [{"date": "2022-01-03", "close": 10.0}], "2": []},
        )
        self.client = app.test_client()

    def tearDown(self):
        app.config.pop('DATASET', None)

    def test_index(self):
        body = self.client.get('/').get_json()
        self.assertEqual(body['name'], 'Stock Data API')
        self.assertIn('GET /api/stock/ratios', body['endpoints'])

    def test_health(self):
        rv = self.client.get('/health')
        self.assertEqual(rv.status_code, 200)
        body = rv.get_json()
        self.assertEqual(body['status'], 'OK')
        self.assertIn('uptime', body)

    def test_companies(self):
        body = self.client.get('/api/companies').get_json()
        self.assertEqual(body['ratios_companies'], ['1'])
        self.assertEqual(body['total_companies'], {'ratios': 1, 'ohlc': 2})

    def test_openapi_endpoint(self):
        rv = self.client.get('/openapi.json')
        self.assertEqual(rv.status_code, 200)
        spec = rv.get_json()
        self.assertIn('openapi', spec)
        self.assertIn('/api/stock/ratios', spec.get('paths', {}))

    def test_unknown_endpoint(self):
        rv = self.client.get('/api/stock/dividends')
        self.assertEqual(rv.status_code, 404)
        body = rv.get_json()
        self.assertEqual(body['error'], 'Endpoint not found')
        self.assertEqual(body['path'], '/api/stock/dividends')
        self.assertIn('GET /health', body['available_endpoints'])

    def test_method_not_allowed_kept(self):
        self.assertEqual(self.client.post('/api/stock/price?co_code=1').status_code, 405)

    def test_string_value_is_integrity_fault(self):
        rv = self.client.get('/api/stock/ratios?co_code=1&type=pe')
        self.assertEqual(rv.status_code, 500)
        body = rv.get_json()
        self.assertEqual(body['error'], 'Data integrity error')
        self.assertIn('n/a', body['detail'])

    def test_unexpected_error(self):
        with mock.patch('stockdata.api.server.summarize', side_effect=RuntimeError('boom')):
            rv = self.client.get('/api/stock/ratios?co_code=1&type=pe')
        self.assertEqual(rv.status_code, 500)
        self.assertEqual(rv.get_json()['error'], 'Internal server error')

    def test_cors_header(self):
        rv = self.client.get('/health', headers={'Origin': 'http://localhost:5173'})
        self.assertEqual(rv.headers.get('Access-Control-Allow-Origin'), '*')


if __name__ == '__main__':
    unittest.main()
