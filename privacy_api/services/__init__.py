"""Business logic services."""

from privacy_api.services.assessment import aggregate_status, assess, decide
from privacy_api.services.metadata import build_page_metadata
from privacy_api.services.oauth import OAuthClient, TokenProvider
from privacy_api.services.recorder import StoreConsentsOutcome, record_consents
from privacy_api.services.store import ConsentStore
from privacy_api.services.verify import VerifyPrivacyClient, call_with_token_refresh

__all__ = [
    "aggregate_status",
    "assess",
    "decide",
    "build_page_metadata",
    "OAuthClient",
    "TokenProvider",
    "StoreConsentsOutcome",
    "record_consents",
    "ConsentStore",
    "VerifyPrivacyClient",
    "call_with_token_refresh",
]
