"""Incomplete-order capture configuration."""

from django.conf import settings


def get_config():
    """Merge ``settings.INCOMPLETE_ORDERS`` over the defaults."""
    defaults = {
        # Quiet period after the last form change before a save is attempted
        "DEBOUNCE_SECONDS": 2.0,
        # Session-storage key for the stable checkout session id
        "SESSION_KEY": "incomplete_order_session_id",
        # Where HttpStore / the beacon talk to (scheme + host, no trailing slash)
        "API_BASE_URL": "http://localhost:8000",
        "API_PREFIX": "/incomplete-orders/",
        "BEACON_PATH": "/incomplete-orders/beacon/",
        "HTTP_TIMEOUT": 10,
        # cleanup_incomplete_orders default cutoff
        "RETENTION_DAYS": 90,
    }

    user_config = getattr(settings, "INCOMPLETE_ORDERS", {})
    return {**defaults, **user_config}


def get_setting(name, default=None):
    return get_config().get(name, default)


def get_beacon_url():
    config = get_config()
    return config["API_BASE_URL"].rstrip("/") + config["BEACON_PATH"]


def get_api_url():
    config = get_config()
    return config["API_BASE_URL"].rstrip("/") + config["API_PREFIX"]
