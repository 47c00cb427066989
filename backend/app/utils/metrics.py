"""
Prometheus metrics definitions for the FastAPI app.
All metrics are registered here and can be imported by other modules.
"""
from prometheus_client import Counter, Histogram

# HTTP request metrics
http_requests_total = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'path', 'status']
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'path'],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0]
)

# Error metrics
errors_total = Counter(
    'errors_total',
    'Total errors',
    ['error_type']
)

# Upload metrics
uploads_total = Counter(
    'uploads_total',
    'Total upload requests by outcome',
    ['status']
)

files_stored_total = Counter(
    'files_stored_total',
    'Total files written to remote storage',
    ['type']
)

storage_request_duration_seconds = Histogram(
    'storage_request_duration_seconds',
    'Remote storage call latency in seconds',
    ['operation'],
    buckets=[0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0]
)

# Notification metrics
notifications_total = Counter(
    'notifications_total',
    'Upload notifications by outcome',
    ['status']
)
