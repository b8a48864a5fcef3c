"""
WSGI config for the patient flow project.

It exposes the WSGI callable as a module-level variable named ``application``.
Board pushes need the ASGI entrypoint; station terminals polling over HTTP
can be served from either.
"""
import os

from django.core.wsgi import get_wsgi_application  # type: ignore

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'patientflow.settings')

application = get_wsgi_application()
