from __future__ import annotations

_AUTH_ERROR_MESSAGES = (
    ("invalid login credentials", "Email or password is incorrect."),
    ("email not confirmed", "Please confirm your email address first."),
    ("user already registered", "This email is already registered."),
    ("password should be at least", "The password is too short."),
    ("unable to validate email address", "Please enter a valid email address."),
    ("signup is disabled", "Registration is currently disabled."),
    ("provider is not enabled", "This login provider is not enabled."),
    ("invalid api key", "The Supabase API key is invalid."),
    ("network", "Network error. Please try again."),
    ("fetch", "Network error. Please try again."),
)


def map_auth_error(message: str | None) -> str:
    lowered = (message or "").lower()
    for needle, friendly in _AUTH_ERROR_MESSAGES:
        if needle in lowered:
            return friendly
    return message or "Unknown error."
