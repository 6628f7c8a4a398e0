"""Multi-step consent scenarios built on the page objects."""

from .customization import CookieCustomizationWorkflow, CustomizationReport

__all__ = [
    "CookieCustomizationWorkflow",
    "CustomizationReport"
]
