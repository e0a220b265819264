"""
WSGI config for the Django application.

Serves the REST API only. WebSocket fan-out needs the ASGI entry point
(config.asgi). Under WSGI, delayed bot replies run on the auto-responder's
background event loop since no server loop outlives the request.

For more information on this file, see:
https://docs.djangoproject.com/en/5.2/howto/deployment/wsgi/
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

application = get_wsgi_application()
