"""WSGI config for the QurtubloX Store project."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "qurtublox.settings.prod")

application = get_wsgi_application()
