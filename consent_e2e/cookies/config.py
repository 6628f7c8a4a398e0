"""Configuration management for the consent cookie suite.

This module holds the cookie expectation registry (which cookies each
execution project must see after consent) together with the site and timing
settings used by the browser tests. Configuration is loaded from YAML with
environment-specific overrides and cached process-wide.
"""

import logging
import os
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from .models import ExpectedCookies

logger = logging.getLogger(__name__)


CONSENT_COOKIE_NAME = 'cookieyes-consent'
WWW_DOMAIN = '.www.thethinkingtraveller.com'
BASE_DOMAIN = '.thethinkingtraveller.com'

CONFIG_PATH_ENV = 'CONSENT_E2E_CONFIG'
ENVIRONMENT_ENV = 'CONSENT_E2E_ENV'


class ConfigLoadError(Exception):
    """Exception raised when configuration loading fails."""
    pass


def _desktop_expectations() -> Dict[str, Any]:
    return {
        'required_cookies': [
            f"{CONSENT_COOKIE_NAME}@{WWW_DOMAIN}",
            f"_clck@{BASE_DOMAIN}",
        ],
        'optional_cookies': [
            f"tttdemorepath-_zldp@{BASE_DOMAIN}",
            f"tttdemorepath-_zldt@{BASE_DOMAIN}",
            f"_uetsid@{BASE_DOMAIN}",
            f"_uetvid@{BASE_DOMAIN}",
        ],
    }


def _mobile_expectations() -> Dict[str, Any]:
    return {
        'required_cookies': [
            f"{CONSENT_COOKIE_NAME}@{WWW_DOMAIN}",
            f"_clck@{BASE_DOMAIN}",
        ],
        'optional_cookies': [
            f"tttdemorepath-_zldp@{BASE_DOMAIN}",
            f"tttdemorepath-_zldt@{BASE_DOMAIN}",
        ],
    }


DEFAULT_COOKIE_EXPECTATIONS: Dict[str, Dict[str, Any]] = {
    'chromium': _desktop_expectations(),
    'webkit': _desktop_expectations(),
    'firefox': _desktop_expectations(),
    'Microsoft Edge': _desktop_expectations(),
    'Mobile Chrome': _mobile_expectations(),
    'Mobile Safari': _mobile_expectations(),
}


class CookieExpectationRegistry(BaseModel):
    """Immutable lookup from execution project to expected cookies."""

    model_config = ConfigDict(frozen=True)

    consent_cookie_name: str = Field(
        default=CONSENT_COOKIE_NAME,
        description="Name of the cookie carrying the consent preferences"
    )
    expectations: Mapping[str, ExpectedCookies] = Field(
        default_factory=dict,
        validate_default=True,
        description="Expected cookies keyed by execution project name"
    )

    @field_validator('expectations')
    @classmethod
    def freeze_expectations(cls, v):
        return MappingProxyType(dict(v))

    @field_serializer('expectations')
    def serialize_expectations(self, v):
        return dict(v)

    def lookup(self, environment_id: str) -> Optional[ExpectedCookies]:
        """Get expected cookies for an execution project.

        Returns None when no expectations have been authored for the
        project; callers skip validation in that case.
        """
        return self.expectations.get(environment_id)

    @property
    def environments(self) -> List[str]:
        return list(self.expectations)

    def as_mapping(self) -> Mapping[str, ExpectedCookies]:
        """Read-only view of the expectation table."""
        return self.expectations


class PollingConfig(BaseModel):
    """Consent polling budget."""

    max_attempts: int = Field(default=3, ge=0, description="Cookie snapshots to take")
    interval_ms: int = Field(default=1000, ge=0, description="Wait between snapshots")


class AcceptAllExpectations(BaseModel):
    """Cookies the accept-all scenario checks beyond the registry."""

    required_categories: List[str] = Field(
        default_factory=lambda: [
            'consent', 'action', 'necessary', 'functional',
            'analytics', 'performance', 'advertisement', 'other',
        ],
        description="Consent flags that must decode to yes"
    )
    tracking_cookie: str = Field(
        default='_clck',
        description="Tracking cookie every project must receive"
    )
    analytics_cookies: List[str] = Field(
        default_factory=lambda: ['_ga', '_ga_2KCXCK33ST'],
        description="Google Analytics cookies expected after consent"
    )
    # Edge tracking prevention blocks or delays analytics cookies
    analytics_projects: List[str] = Field(
        default_factory=lambda: [
            'chromium', 'firefox', 'webkit', 'Mobile Safari', 'Mobile Chrome',
        ],
        description="Projects that must receive analytics cookies"
    )
    analytics_wait_ms: int = Field(default=2000, ge=0)
    minimum_cookies: Dict[str, int] = Field(
        default_factory=lambda: {
            'chromium': 10,
            'firefox': 15,
            'webkit': 2,
            'Mobile Safari': 2,
            'Mobile Chrome': 6,
            'Microsoft Edge': 3,
        },
        description="Minimum cookie count after accepting all"
    )
    default_minimum_cookies: int = Field(default=2, ge=0)

    def minimum_for(self, project_name: str) -> int:
        return self.minimum_cookies.get(project_name, self.default_minimum_cookies)


class SuiteConfiguration(BaseModel):
    """Complete suite configuration."""

    environment: str = Field(default="production", description="Current environment")
    base_url: str = Field(
        default="https://www.thethinkingtraveller.com/",
        description="Site under test"
    )
    action_timeout_ms: int = Field(default=10000, ge=0)
    navigation_timeout_ms: int = Field(default=30000, ge=0)
    modal_settle_ms: int = Field(default=1000, ge=0, description="Wait after opening a modal")
    save_settle_ms: int = Field(default=3000, ge=0, description="Wait after saving preferences")
    network_idle_timeout_ms: int = Field(default=5000, ge=0)
    extra_wait_ms: Dict[str, int] = Field(
        default_factory=lambda: {'Microsoft Edge': 2000},
        description="Additional per-project wait for tracking cookies"
    )
    tracker_domains: List[str] = Field(
        default_factory=lambda: [
            'google-analytics.com', 'googletagmanager.com', 'facebook.com',
        ],
        description="Third-party domains that must not set cookies without consent"
    )
    polling: PollingConfig = Field(default_factory=PollingConfig)
    accept_all: AcceptAllExpectations = Field(default_factory=AcceptAllExpectations)
    registry: CookieExpectationRegistry = Field(
        default_factory=lambda: CookieExpectationRegistry(
            expectations={
                name: ExpectedCookies(**data)
                for name, data in DEFAULT_COOKIE_EXPECTATIONS.items()
            }
        )
    )

    @field_validator('base_url')
    @classmethod
    def validate_base_url(cls, v):
        if not v.startswith(('http://', 'https://')):
            raise ValueError("base_url must be an http(s) URL")
        return v

    def extra_wait_for(self, project_name: str) -> int:
        return self.extra_wait_ms.get(project_name, 0)


def load_suite_config(
    config_path: Optional[str] = None,
    environment: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None
) -> SuiteConfiguration:
    """Load SuiteConfiguration from a YAML file with environment overrides.

    Args:
        config_path: Path to YAML config file. Defaults to $CONSENT_E2E_CONFIG
            or config/consent.yaml in the project root.
        environment: Environment name for override selection. Defaults to
            $CONSENT_E2E_ENV or 'production'.
        overrides: Additional configuration overrides to apply.

    Returns:
        Validated SuiteConfiguration. Built-in defaults are used when no
        config file exists.

    Raises:
        ConfigLoadError: If the file cannot be parsed or fails validation.
    """
    if config_path is None:
        config_path = os.getenv(CONFIG_PATH_ENV)
    if config_path is None:
        project_root = Path(__file__).parents[2]
        path = project_root / "config" / "consent.yaml"
    else:
        path = Path(config_path)

    if environment is None:
        environment = os.getenv(ENVIRONMENT_ENV, "production")

    config_data: Dict[str, Any] = {}
    if path.exists():
        try:
            with open(path, 'r', encoding='utf-8') as f:
                config_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigLoadError(f"Failed to parse YAML config: {e}")
        except IOError as e:
            raise ConfigLoadError(f"Failed to read config file: {e}")

        if not isinstance(config_data, dict):
            raise ConfigLoadError("Config file must contain a YAML dictionary")
        logger.info(f"Loaded suite configuration from {path}")
    else:
        logger.debug(f"Config file not found, using defaults: {path}")

    environments = config_data.pop("environments", None) or {}
    if not isinstance(environments, dict):
        raise ConfigLoadError("'environments' must be a YAML dictionary")
    if environment in environments:
        env_overrides = environments[environment]
        if not isinstance(env_overrides, dict):
            raise ConfigLoadError(f"Environment '{environment}' must be a YAML dictionary")
        config_data = _deep_merge(config_data, env_overrides)
        logger.info(f"Applied environment overrides for: {environment}")

    if overrides:
        config_data = _deep_merge(config_data, overrides)
        logger.debug("Applied additional configuration overrides")

    config_data['environment'] = environment
    config_data = _normalize_registry(config_data)

    try:
        return SuiteConfiguration(**config_data)
    except Exception as e:
        raise ConfigLoadError(f"Invalid suite configuration: {e}")


def _normalize_registry(config_data: Dict[str, Any]) -> Dict[str, Any]:
    """Merge a file-provided registry section over the built-in expectations.

    Projects listed in the file replace the built-in entry for that project;
    projects not listed keep their defaults.
    """
    registry = config_data.get('registry')
    if registry is None:
        return config_data
    if not isinstance(registry, dict):
        raise ConfigLoadError("'registry' must be a YAML dictionary")

    overrides = registry.get('expectations') or {}
    if not isinstance(overrides, dict):
        raise ConfigLoadError("'registry.expectations' must be a YAML dictionary")

    expectations = dict(DEFAULT_COOKIE_EXPECTATIONS)
    expectations.update(overrides)

    result = config_data.copy()
    result['registry'] = {
        'consent_cookie_name': registry.get('consent_cookie_name', CONSENT_COOKIE_NAME),
        'expectations': expectations,
    }
    return result


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


# Global configuration instance
_config_cache: Optional[SuiteConfiguration] = None


def get_suite_config(force_reload: bool = False) -> SuiteConfiguration:
    """Get the process-wide suite configuration, loading it on first use."""
    global _config_cache

    if force_reload or _config_cache is None:
        _config_cache = load_suite_config()

    return _config_cache


def get_cookie_registry(force_reload: bool = False) -> CookieExpectationRegistry:
    """Get the process-wide cookie expectation registry."""
    return get_suite_config(force_reload=force_reload).registry


def get_expected_cookies(project_name: str) -> Optional[ExpectedCookies]:
    """Look up expected cookies for a project in the process-wide registry."""
    return get_cookie_registry().lookup(project_name)
