"""WSGI entry point: `gunicorn stockdata.api.wsgi:app` or `flask --app stockdata.api.wsgi run`.

Importing this module loads the dataset before the first request is served.
"""
from stockdata.api.server import app, init_dataset

init_dataset()

__all__ = ["app"]
