from __future__ import annotations
from typing import Any, Dict, List, Optional
from datetime import datetime, timezone
from pathlib import Path

import json
import time

from flask import Flask, request, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from stockdata.api.params import (
    InvalidWindowError, RATIO_TYPES, describe_window, parse_ratio_type, parse_window,
)
from stockdata.config.env import get_server_config
from stockdata.historical.summary import summarize
from stockdata.historical.window import DataIntegrityError, naive_utc, project, select
from stockdata.ingestion.dataset import Dataset, load_dataset
from stockdata.utils.logger import setup_logger

logger = setup_logger(__name__)

app = Flask(__name__)
CORS(app)

OPENAPI_PATH = Path(__file__).with_name("openapi.json")
_STARTED_AT = time.time()
_dataset: Optional[Dataset] = None

ENDPOINTS = [
    "GET /",
    "GET /health",
    "GET /api/companies",
    "GET /api/stock/ratios",
    "GET /api/stock/price",
    "GET /api/stock/market-cap",
]


# Configuration helpers (overridable via app.config in tests)

def init_dataset() -> Dataset:
    """Load the static dataset once; called at process start."""
    global _dataset
    if _dataset is None:
        _dataset = load_dataset()
    return _dataset


def _get_dataset() -> Dataset:
    if 'DATASET' in app.config:
        return app.config['DATASET']
    return init_dataset()


def _get_now() -> datetime:
    # one naive-UTC instant shared by describe_window and select
    return naive_utc(app.config.get('NOW') or datetime.now())


def _timeframe_strict() -> bool:
    if 'TIMEFRAME_STRICT' in app.config:
        return bool(app.config['TIMEFRAME_STRICT'])
    return get_server_config().timeframe_strict


def _window_meta(series: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {
        'first_date': series[0]['date'] if series else None,
        'last_date': series[-1]['date'] if series else None,
        'count': len(series),
    }


def _not_found_company(co_code: str, codes: List[str]):
    return jsonify({
        'error': f'No data found for company code: {co_code}',
        'available_codes': codes,
    }), 404


def _empty_window(co_code: str, date_range: Dict[str, Any]):
    return jsonify({
        'error': 'No data found for the specified date range',
        'co_code': co_code,
        'date_range': date_range,
    }), 404


@app.before_request
def _log_request():
    logger.info("%s %s - Query: %s", request.method, request.path, request.args.to_dict())


@app.errorhandler(InvalidWindowError)
def _invalid_window(e: InvalidWindowError):
    return jsonify({'error': str(e)}), 400


@app.errorhandler(DataIntegrityError)
def _data_integrity(e: DataIntegrityError):
    logger.error("Data integrity error on %s: %s", request.path, e)
    return jsonify({'error': 'Data integrity error', 'detail': str(e)}), 500


@app.errorhandler(404)
def _endpoint_not_found(e):
    return jsonify({
        'error': 'Endpoint not found',
        'path': request.path,
        'method': request.method,
        'available_endpoints': ENDPOINTS,
    }), 404


@app.errorhandler(Exception)
def _unhandled(e: Exception):
    if isinstance(e, HTTPException):
        return e
    logger.exception("Unhandled error on %s", request.path)
    return jsonify({
        'error': 'Internal server error',
        'timestamp': datetime.now(timezone.utc).isoformat(),
    }), 500


@app.get('/')
def index():
    return jsonify({
        'name': 'Stock Data API',
        'version': '1.0.0',
        'description': 'API for retrieving stock ratios, prices, and market cap data',
        'endpoints': {
            'GET /api/stock/ratios': {
                'description': 'Get PE, PB, PS data with statistical overlays',
                'parameters': {
                    'co_code': 'Company code (required)',
                    'type': 'Ratio type: pe|pb|ps (required)',
                    'start': 'Start date YYYY-MM-DD (optional)',
                    'end': 'End date YYYY-MM-DD (optional)',
                    'timeframe': 'Relative window 1W|1M|3M|6M|1Y|2Y|ALL (optional, instead of start/end)',
                },
                'example': '/api/stock/ratios?co_code=38716&type=pe&start=2022-02-01&end=2022-02-28',
            },
            'GET /api/stock/price': {
                'description': 'Get close price data for a specific stock',
                'parameters': {
                    'co_code': 'Company code (required)',
                    'start': 'Start date YYYY-MM-DD (optional)',
                    'end': 'End date YYYY-MM-DD (optional)',
                    'timeframe': 'Relative window 1W|1M|3M|6M|1Y|2Y|ALL (optional)',
                },
                'example': '/api/stock/price?co_code=13673&start=2022-04-01&end=2022-04-30',
            },
            'GET /api/stock/market-cap': {
                'description': 'Get market cap data for multiple companies',
                'parameters': {
                    'co_codes': 'Comma-separated company codes (required)',
                    'start': 'Start date YYYY-MM-DD (optional)',
                    'end': 'End date YYYY-MM-DD (optional)',
                    'timeframe': 'Relative window 1W|1M|3M|6M|1Y|2Y|ALL (optional)',
                },
                'example': '/api/stock/market-cap?co_codes=13673,5020,199&start=2022-04-01&end=2022-04-30',
            },
        },
    })


@app.get('/health')
def health():
    return jsonify({
        'status': 'OK',
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'uptime': round(time.time() - _STARTED_AT, 3),
        'environment': get_server_config().environment,
    })


@app.get('/api/companies')
def companies():
    ds = _get_dataset()
    return jsonify({
        'ratios_companies': ds.ratio_codes(),
        'ohlc_companies': ds.ohlc_codes(),
        'total_companies': {
            'ratios': len(ds.ratios),
            'ohlc': len(ds.ohlc),
        },
    })


@app.get('/api/stock/ratios')
def ratios():
    window = parse_window(request.args, strict_timeframe=_timeframe_strict())
    co_code = request.args.get('co_code')
    raw_type = request.args.get('type')
    if not co_code or not raw_type:
        return jsonify({
            'error': 'Missing required parameters: co_code and type',
            'example': '/api/stock/ratios?co_code=38716&type=pe',
        }), 400
    ratio = parse_ratio_type(raw_type)
    if ratio is None:
        return jsonify({
            'error': f"Invalid type. Must be {', '.join(RATIO_TYPES[:-1])}, or {RATIO_TYPES[-1]}",
            'received': raw_type,
        }), 400

    ds = _get_dataset()
    company = ds.ratios.get(co_code)
    if company is None:
        return _not_found_company(co_code, ds.ratio_codes())

    now = _get_now()
    date_range = describe_window(window, now)
    selected = select(company, window, now=now)
    if not selected:
        return _empty_window(co_code, date_range)

    series = project(selected, ratio, label='value')
    stats = summarize([p['value'] for p in series if p['value'] is not None])
    return jsonify({
        'co_code': co_code,
        'type': ratio,
        'date_range': date_range,
        'meta': _window_meta(series),
        'series': series,
        'statistics': stats.to_dict() if stats else None,
    })


@app.get('/api/stock/price')
def price():
    window = parse_window(request.args, strict_timeframe=_timeframe_strict())
    co_code = request.args.get('co_code')
    if not co_code:
        return jsonify({
            'error': 'Missing required parameter: co_code',
            'example': '/api/stock/price?co_code=13673',
        }), 400

    ds = _get_dataset()
    company = ds.ohlc.get(co_code)
    if company is None:
        return _not_found_company(co_code, ds.ohlc_codes())

    now = _get_now()
    date_range = describe_window(window, now)
    selected = select(company, window, now=now)
    if not selected:
        return _empty_window(co_code, date_range)

    series = project(selected, 'close')
    return jsonify({
        'co_code': co_code,
        'date_range': date_range,
        'meta': _window_meta(series),
        'series': series,
    })


@app.get('/api/stock/market-cap')
def market_cap():
    window = parse_window(request.args, strict_timeframe=_timeframe_strict())
    co_codes = request.args.get('co_codes')
    if not co_codes:
        return jsonify({
            'error': 'Missing required parameter: co_codes',
            'example': '/api/stock/market-cap?co_codes=13673,5020,199',
        }), 400

    ds = _get_dataset()
    now = _get_now()
    data: List[Dict[str, Any]] = []
    not_found: List[str] = []
    for co_code in [c.strip() for c in co_codes.split(',') if c.strip()]:
        company = ds.ohlc.get(co_code)
        if company is None:
            not_found.append(co_code)
            continue
        series = project(select(company, window, now=now), 'mcap')
        data.append({'co_code': co_code, 'meta': _window_meta(series), 'series': series})

    body: Dict[str, Any] = {
        'date_range': describe_window(window, now),
        'data': data,
    }
    if not_found:
        body['warnings'] = {
            'codes_not_found': not_found,
            'available_codes': ds.ohlc_codes(),
        }
    return jsonify(body)


@app.get('/openapi.json')
def get_openapi():
    try:
        spec = json.loads(OPENAPI_PATH.read_text())
    except FileNotFoundError:
        return jsonify({'error': 'openapi_not_found'}), 404
    return jsonify(spec)


def main():
    cfg = get_server_config()
    ds = init_dataset()
    logger.info("Stock Data API running on port %d (%s): ratios=%d companies, ohlc=%d companies",
                cfg.port, cfg.environment, len(ds.ratios), len(ds.ohlc))
    app.run(host=cfg.host, port=cfg.port)


if __name__ == '__main__':
    main()
