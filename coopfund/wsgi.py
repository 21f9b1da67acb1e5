"""
WSGI config for the coopfund project.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "coopfund.settings")

application = get_wsgi_application()
