from .verifications import Verification
from .webhooks import Webhook
from .api_keys import ApiKey

__all__ = ["Verification", "Webhook", "ApiKey"]
