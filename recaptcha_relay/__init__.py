"""reCAPTCHA verification relay.

Forwards client tokens to Google's reCAPTCHA (legacy siteverify or
Enterprise assessments) and returns a normalized decision.
"""
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("recaptcha-relay")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0"
