"""
PATH: pos/conf.py

Read POS knobs from settings.POS with built-in defaults, so tests can
override a single key with override_settings(POS={...}).
"""

from django.conf import settings

DEFAULTS = {
    "INVOICE_PREFIX": "FACT",
    "CREDIT_NOTE_PREFIX": "NC",
    "DEFAULT_PAYMENT_TERMS_DAYS": 30,
    "SETTLEMENT_RECEIVABLE_DAYS": 30,
    "RECEIVABLE_FETCH_ATTEMPTS": 3,
    "RECEIVABLE_FETCH_DELAY_SECONDS": 0.5,
    "RECEIVABLE_TRIGGER_ENABLED": True,
}


def pos_setting(name: str):
    configured = getattr(settings, "POS", None) or {}
    if name in configured:
        return configured[name]
    return DEFAULTS[name]
