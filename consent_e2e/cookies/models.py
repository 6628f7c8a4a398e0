"""Pydantic models for consent cookie validation.

This module defines the data models shared by the consent value decoder,
the cookie set validator and the consent polling engine: observed cookies,
expected cookie sets, decoded consent flags and validation/poll results.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ConsentState(str, Enum):
    """Consent actions the banner offers."""
    ACCEPT_ALL = "accept_all"
    REJECT_ALL = "reject_all"
    CUSTOM = "custom"


class CookieCategory(str, Enum):
    """Optional cookie categories listed in the preference center."""
    FUNCTIONAL = "Functional"
    ANALYTICS = "Analytics"
    ADVERTISEMENT = "Advertisement"
    UNCATEGORIZED = "Uncategorized"


class PollState(str, Enum):
    """States of the consent polling loop."""
    POLLING = "polling"
    COMMITTED = "committed"
    EXHAUSTED = "exhausted"


class Cookie(BaseModel):
    """Cookie as observed in the browser cookie jar.

    Instances are read-only snapshots; nothing in this package mutates them.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Cookie name")
    domain: str = Field(description="Cookie domain")
    value: str = Field(default="", description="Raw cookie value")
    path: str = Field(default="/", description="Cookie path")
    expires: Optional[float] = Field(
        default=None,
        description="Expiry as a unix timestamp, -1 for session cookies"
    )
    http_only: bool = Field(default=False, description="HttpOnly flag")
    secure: bool = Field(default=False, description="Secure flag")
    same_site: Optional[str] = Field(
        default=None,
        description="SameSite attribute (Strict, Lax, None)"
    )

    @property
    def key(self) -> str:
        """Identity used by cookie expectations (``name@domain``)."""
        return f"{self.name}@{self.domain}"

    @classmethod
    def from_playwright_cookie(cls, cookie: Dict[str, Any]) -> "Cookie":
        """Create a Cookie from a Playwright ``context.cookies()`` entry."""
        return cls(
            name=cookie.get('name', ''),
            domain=cookie.get('domain', ''),
            value=cookie.get('value', ''),
            path=cookie.get('path', '/'),
            expires=cookie.get('expires'),
            http_only=cookie.get('httpOnly', False),
            secure=cookie.get('secure', False),
            same_site=cookie.get('sameSite'),
        )


class ExpectedCookies(BaseModel):
    """Cookies expected to exist after consent is granted.

    Entries are ``name@domain`` strings matched exactly against observed
    cookies.
    """

    model_config = ConfigDict(frozen=True)

    required_cookies: Tuple[str, ...] = Field(
        description="Cookies that must be present for validation to pass"
    )
    optional_cookies: Tuple[str, ...] = Field(
        default_factory=tuple,
        description="Cookies counted for coverage only"
    )

    @field_validator('required_cookies')
    @classmethod
    def validate_required_cookies(cls, v):
        if not v:
            raise ValueError("required_cookies must not be empty")
        for entry in v:
            if '@' not in entry:
                raise ValueError(f"Cookie expectation must be 'name@domain': {entry}")
        return v

    @field_validator('optional_cookies', mode='before')
    @classmethod
    def default_optional_cookies(cls, v):
        return () if v is None else v


class ConsentFlags(BaseModel):
    """Decoded view of a consent cookie value.

    A flag is True only when ``<key>:yes`` occurs in the raw value; an absent
    token reads as False.
    """

    model_config = ConfigDict(frozen=True)

    necessary: bool = False
    functional: bool = False
    analytics: bool = False
    performance: bool = False
    advertisement: bool = False
    other: bool = False
    consent: bool = False
    action: bool = False

    def granted_categories(self) -> List[str]:
        """Names of flags that decoded to yes."""
        return [name for name, value in self.model_dump().items() if value]

    def denied_categories(self) -> List[str]:
        """Names of flags that did not decode to yes."""
        return [name for name, value in self.model_dump().items() if not value]


class ValidationResult(BaseModel):
    """Outcome of comparing observed cookies with an expectation record."""

    is_valid: bool = Field(description="True when no required cookie is missing")
    missing_required: List[str] = Field(
        default_factory=list,
        description="Missing required cookies in declaration order"
    )
    found_optional: int = Field(default=0, description="Optional cookies present")
    total_optional: int = Field(default=0, description="Optional cookies declared")


class ConsentContentResult(BaseModel):
    """Consent cookie content checks asserted after a consent action."""

    has_yes_consent: bool = False
    has_yes_action: bool = False
    has_yes_necessary: bool = False


class PollResult(BaseModel):
    """Result of polling the cookie store for a committed consent cookie."""

    state: PollState = Field(description="Terminal state of the polling loop")
    cookies: List[Cookie] = Field(
        default_factory=list,
        description="Snapshot returned to the caller"
    )
    fetches: int = Field(default=0, description="Cookie snapshots fetched")
    waits: int = Field(default=0, description="Sleeps between fetches")

    @property
    def committed(self) -> bool:
        return self.state == PollState.COMMITTED
