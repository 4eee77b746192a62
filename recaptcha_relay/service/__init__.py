from .relay import VerificationRelay
from .upstream import EnterpriseClient, LegacyClient, UpstreamClient, build_client

__all__ = [
    "VerificationRelay",
    "UpstreamClient",
    "LegacyClient",
    "EnterpriseClient",
    "build_client",
]
