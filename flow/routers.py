"""
URL mappings for the patient flow API.

Trailing slashes are omitted to match the station terminal clients.
"""
from django.urls import path, include

from .auth_views import login_view
from .views import doctors, health, queue, triage, visits

urlpatterns = [
    path('', include('django_prometheus.urls')),
    path('healthz', health.healthz),
    # Authentication
    path('api/auth/login', login_view, name='login_view'),
    # Visits
    path('api/visits', visits.create_visit),
    path('api/visits/available-doctors', doctors.available_doctors),
    path('api/visits/<uuid:visit_id>', visits.visit_detail),
    path('api/visits/<uuid:visit_id>/advance', visits.advance_visit),
    # Queue
    path('api/queue', queue.queue_list),
    path('api/queue/call-next', queue.queue_call_next),
    path('api/queue/board', queue.queue_board),
    path('api/queue/<uuid:entry_id>/call', queue.queue_call_entry),
    path('api/queue/<uuid:entry_id>/serve', queue.queue_serve_entry),
    path('api/queue/<uuid:entry_id>/skip', queue.queue_skip_entry),
    # Triage
    path('api/triage/<uuid:visit_id>', triage.triage_record),
]
