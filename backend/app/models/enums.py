from enum import Enum

# Stored as plain strings (native enums disabled for easier evolution).


class VerificationMethodEnum(str, Enum):
    DNS = "dns"
    FILE = "file"


class VerificationStatusEnum(str, Enum):
    # pending -> verified | failed; failed records can be re-checked.
    PENDING = "pending"
    VERIFIED = "verified"
    FAILED = "failed"


class WebhookEventEnum(str, Enum):
    VERIFICATION_COMPLETED = "verification.completed"
    VERIFICATION_FAILED = "verification.failed"
