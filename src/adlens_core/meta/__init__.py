"""Meta Graph API integration modules."""
from .credentials import MetaCredentials, generate_appsecret_proof
from .exceptions import MetaApiError, MetaGraphError, MetaTransportError
from .graph_client import MetaGraphClient, normalize_ad_account_id

__all__ = [
    "MetaGraphClient",
    "MetaCredentials",
    "generate_appsecret_proof",
    "normalize_ad_account_id",
    "MetaGraphError",
    "MetaApiError",
    "MetaTransportError",
]
