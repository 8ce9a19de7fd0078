"""
WSGI config for the shopdesk project.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'shopdesk.config.settings')

application = get_wsgi_application()
