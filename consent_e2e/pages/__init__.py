"""Page objects for the consent banner and preference center."""

from .cookie_consent import (
    CookieConsentPage,
    ConsentInteractionError,
    OPTIONAL_CATEGORIES,
    PREFERENCES_DIALOG
)

__all__ = [
    "CookieConsentPage",
    "ConsentInteractionError",
    "OPTIONAL_CATEGORIES",
    "PREFERENCES_DIALOG"
]
