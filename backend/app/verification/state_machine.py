from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from app.models.enums import VerificationStatusEnum, WebhookEventEnum


@dataclass(frozen=True)
class Transition:
    previous_status: str
    status: str
    verified_at: datetime | None
    changed: bool

    @property
    def event(self) -> str | None:
        """Webhook event this transition should fan out, if any."""
        if not self.changed:
            return None
        if self.status == VerificationStatusEnum.VERIFIED.value:
            return WebhookEventEnum.VERIFICATION_COMPLETED.value
        return WebhookEventEnum.VERIFICATION_FAILED.value


def transition(record, proof_found: bool, now: datetime) -> Transition:
    """
    Compute the next status for ``record`` given the outcome of a proof check.

    Verified records never move. Every other check lands on verified or
    failed; a failed record that fails again is not reported as changed.
    """
    current = record.status
    if current == VerificationStatusEnum.VERIFIED.value:
        return Transition(
            previous_status=current,
            status=current,
            verified_at=record.verified_at,
            changed=False,
        )

    if proof_found:
        status = VerificationStatusEnum.VERIFIED.value
        verified_at = now
    else:
        status = VerificationStatusEnum.FAILED.value
        verified_at = None
    changed = status != current or status == VerificationStatusEnum.VERIFIED.value
    return Transition(
        previous_status=current,
        status=status,
        verified_at=verified_at,
        changed=changed,
    )
