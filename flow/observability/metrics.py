"""
Prometheus counters for the queue core.

Exposed through the django-prometheus ``/metrics`` view together with the
request metrics collected by its middleware.
"""
from prometheus_client import Counter

tokens_issued = Counter(
    'flow_tokens_issued_total',
    'Queue tokens issued by the sequencer',
    ['stage'],
)

queue_transitions = Counter(
    'flow_queue_transitions_total',
    'Queue and visit operations by outcome',
    ['operation', 'result'],
)


def record_transition(operation: str, result: str = 'success') -> None:
    queue_transitions.labels(operation=operation, result=result).inc()
