"""
Repository-level pytest configuration.

Makes `pytest` work from the repository root; the Django project lives in
app/ and its fixtures in app/conftest.py.
"""

import os

# Ensure Django settings are configured before any tests run
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")
