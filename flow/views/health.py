from django.conf import settings
from django.db import connections
from django.http import JsonResponse


def healthz(request):
    modules = {
        'queue': settings.FLOW_ENABLE_QUEUE,
        'triage': settings.FLOW_ENABLE_TRIAGE,
        'display': settings.FLOW_ENABLE_TV_DISPLAY,
    }
    try:
        with connections['default'].cursor() as c:
            c.execute('SELECT 1')
            row = c.fetchone()
        return JsonResponse({'ok': True, 'db': bool(row and row[0] == 1), 'modules': modules})
    except Exception as e:
        return JsonResponse({'ok': False, 'error': str(e), 'modules': modules}, status=500)
