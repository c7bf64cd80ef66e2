"""
WSGI entry point: gunicorn dashboard_app.wsgi:app
"""

from dashboard_app.app import create_app

app = create_app()
