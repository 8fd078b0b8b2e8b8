"""Prometheus metrics for the application"""
from prometheus_client import Counter, REGISTRY


def _counter(name: str, documentation: str, labelnames=()):
    # Re-importing the module (e.g. under test reloads) must not register twice
    try:
        return Counter(name, documentation, labelnames)
    except ValueError:
        return REGISTRY._names_to_collectors.get(name)


# Auth metrics
login_attempts_counter = _counter(
    'vidtube_login_attempts_total',
    'Total number of login attempts',
    ['status']
)

token_refresh_counter = _counter(
    'vidtube_token_refresh_total',
    'Total number of refresh token exchanges',
    ['status']
)

# Toggle metrics (likes and subscriptions)
toggles_counter = _counter(
    'vidtube_toggles_total',
    'Total number of like/subscription toggles',
    ['kind', 'action']
)

# Media host metrics
media_uploads_counter = _counter(
    'vidtube_media_uploads_total',
    'Total number of media host uploads',
    ['status']
)

temp_file_cleanup_failures_counter = _counter(
    'vidtube_temp_file_cleanup_failures_total',
    'Temporary upload files that could not be removed'
)
