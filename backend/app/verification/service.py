"""
Verification lifecycle: create a challenge, check it, list what a scope owns.

The service is built once from explicit configuration and collaborators
(challenge checkers, webhook dispatcher, clock) so tests and alternative
deployments can swap any of them without touching global state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from time import monotonic
from typing import Callable, Mapping

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import Settings
from app.core.metrics import (
    record_challenge_lookup,
    record_verification_check,
    record_verification_created,
)
from app.core.time import utcnow
from app.core.utils.domain import normalize_domain
from app.core.verification import (
    DNS_CHALLENGE_SUBDOMAIN,
    FILE_CHALLENGE_PATH,
    TOKEN_LENGTH,
    TOKEN_PREFIX,
    build_verification_instructions,
    generate_verification_token,
    validate_verification_method,
)
from app.crud.verifications import (
    TokenGenerationExhausted,
    create_verification,
    get_verification,
    list_verifications,
    update_verification_status,
)
from app.models.enums import VerificationMethodEnum, VerificationStatusEnum
from app.models.verifications import Verification
from app.schemas.verifications import serialize_verification
from app.scope.context import VerificationScope
from app.scope.errors import ScopedResourceNotFound
from app.verification.challenges import (
    DEFAULT_MAX_BODY_BYTES,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
    ChallengeCheck,
    build_challenge_checks,
)
from app.verification.errors import (
    InvalidVerificationDomain,
    InvalidVerificationMethod,
    VerificationNotFound,
    VerificationPersistenceError,
)
from app.verification.state_machine import transition
from app.webhooks.dispatcher import WebhookDispatcher


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VerificationConfig:
    token_prefix: str = TOKEN_PREFIX
    token_length: int = TOKEN_LENGTH
    dns_subdomain: str = DNS_CHALLENGE_SUBDOMAIN
    file_path: str = FILE_CHALLENGE_PATH
    user_agent: str = DEFAULT_USER_AGENT
    dns_timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    http_timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    file_max_bytes: int = DEFAULT_MAX_BODY_BYTES
    webhooks_enabled: bool = True

    @classmethod
    def from_settings(cls, settings: Settings) -> "VerificationConfig":
        return cls(
            token_prefix=settings.VERIFICATION_TOKEN_PREFIX,
            token_length=settings.VERIFICATION_TOKEN_LENGTH,
            dns_subdomain=settings.DNS_CHALLENGE_SUBDOMAIN,
            file_path=settings.FILE_CHALLENGE_PATH,
            user_agent=settings.CHALLENGE_USER_AGENT,
            dns_timeout_seconds=settings.DNS_TIMEOUT_SECONDS,
            http_timeout_seconds=settings.HTTP_TIMEOUT_SECONDS,
            file_max_bytes=settings.FILE_CHALLENGE_MAX_BYTES,
            webhooks_enabled=settings.ENABLE_WEBHOOKS,
        )


class VerificationService:
    def __init__(
        self,
        config: VerificationConfig,
        *,
        dispatcher: WebhookDispatcher | None = None,
        checks: Mapping[VerificationMethodEnum, ChallengeCheck] | None = None,
        clock: Callable = utcnow,
    ) -> None:
        self.config = config
        self._dispatcher = dispatcher
        self._clock = clock
        self._checks = dict(checks) if checks is not None else build_challenge_checks(
            dns_subdomain=config.dns_subdomain,
            file_path=config.file_path,
            dns_timeout=config.dns_timeout_seconds,
            http_timeout=config.http_timeout_seconds,
            user_agent=config.user_agent,
            file_max_bytes=config.file_max_bytes,
        )
        missing = [method.value for method in VerificationMethodEnum if method not in self._checks]
        if missing:
            raise ValueError(f"No challenge check configured for: {', '.join(missing)}")

    def generate_token(self) -> str:
        return generate_verification_token(self.config.token_prefix, self.config.token_length)

    def create(
        self,
        db: Session,
        scope: VerificationScope,
        domain: str,
        method: str,
    ) -> Verification:
        try:
            domain = normalize_domain(domain)
        except ValueError as exc:
            raise InvalidVerificationDomain(str(exc)) from exc
        try:
            method = validate_verification_method(method)
        except ValueError as exc:
            raise InvalidVerificationMethod(str(exc)) from exc

        try:
            verification = create_verification(
                db,
                scope,
                domain,
                method.value,
                token_factory=self.generate_token,
            )
        except (SQLAlchemyError, TokenGenerationExhausted) as exc:
            db.rollback()
            logger.exception("verification.create_failed", extra={"domain": domain})
            raise VerificationPersistenceError("Failed to create verification") from exc

        record_verification_created(method=method.value)
        logger.info(
            "verification.created",
            extra={
                "verification_id": verification.id,
                "organization_id": verification.organization_id,
                "domain": domain,
                "method": method.value,
            },
        )
        return verification

    def get(self, db: Session, verification_id: str, scope: VerificationScope) -> Verification:
        try:
            return get_verification(db, scope, verification_id)
        except ScopedResourceNotFound as exc:
            raise VerificationNotFound("Verification not found") from exc

    def list(self, db: Session, scope: VerificationScope) -> list[Verification]:
        return list_verifications(db, scope)

    def instructions(self, db: Session, verification_id: str, scope: VerificationScope) -> dict:
        verification = self.get(db, verification_id, scope)
        return build_verification_instructions(
            verification.domain,
            verification.token,
            verification.method,
            subdomain=self.config.dns_subdomain,
            path=self.config.file_path,
        )

    def check(self, db: Session, verification_id: str, scope: VerificationScope) -> Verification:
        verification = self.get(db, verification_id, scope)
        if verification.status == VerificationStatusEnum.VERIFIED.value:
            record_verification_check(method=verification.method, outcome="skipped")
            return verification

        try:
            method = VerificationMethodEnum(verification.method)
        except ValueError as exc:
            raise InvalidVerificationMethod(
                f"Unsupported verification method: {verification.method}"
            ) from exc

        started = monotonic()
        proof_found = self._checks[method](verification.domain, verification.token)
        record_challenge_lookup(
            method=method.value,
            duration_ms=(monotonic() - started) * 1000.0,
        )

        now = self._clock()
        result = transition(verification, proof_found, now)
        try:
            applied = update_verification_status(
                db,
                verification,
                previous_status=result.previous_status,
                status=result.status,
                verified_at=result.verified_at,
                checked_at=now,
            )
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception(
                "verification.check_persist_failed",
                extra={"verification_id": verification.id},
            )
            raise VerificationPersistenceError("Failed to check verification") from exc

        if not applied:
            # A concurrent check moved the record first; report what is stored.
            record_verification_check(method=method.value, outcome="superseded")
            logger.info(
                "verification.check_superseded",
                extra={"verification_id": verification.id, "status": verification.status},
            )
            return verification

        record_verification_check(method=method.value, outcome=result.status)
        logger.info(
            "verification.checked",
            extra={
                "verification_id": verification.id,
                "organization_id": verification.organization_id,
                "previous_status": result.previous_status,
                "status": result.status,
            },
        )

        event = result.event
        if event and verification.organization_id and self._should_dispatch():
            self._dispatcher.dispatch(
                db,
                verification.organization_id,
                event,
                serialize_verification(verification),
            )
        return verification

    def _should_dispatch(self) -> bool:
        return self._dispatcher is not None and self.config.webhooks_enabled
