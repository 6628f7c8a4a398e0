"""Cookie consent end-to-end test suite.

Drives a real browser against the travel-booking site, exercises the cookie
consent banner (accept all, accept necessary only, granular customization)
and validates the resulting cookie jar.
"""

__version__ = "1.0.0"
