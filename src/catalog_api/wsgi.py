"""WSGI entry point: ``gunicorn catalog_api.wsgi:app``."""

from catalog_api.app import create_app

app = create_app()
