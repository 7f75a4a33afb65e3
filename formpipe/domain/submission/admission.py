"""
Submission Admission Gate

Runs a submission through the admission pipeline:

    PENDING -> RATE_CHECKED -> VALIDATED -> SANITIZED -> ACCEPTED
                    |              |
                    +--------------+--> REJECTED

Stages are strictly sequential and a rejection skips every later stage. The
gate has no side effects of its own other than consuming a rate limit slot;
handing the accepted fields to the mail transport is up to the caller.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

import structlog

from formpipe.domain.rate_limiting.services import RateLimiter
from formpipe.domain.rate_limiting.value_objects import Decision, derive_client_key
from formpipe.domain.submission.payload import REPLY_TO_FIELD, SubmittedFields, parse_submission
from formpipe.domain.validation.constraint_validator import ConstraintValidator, ValidationFailure
from formpipe.domain.validation.sanitizer import sanitize_all

logger = structlog.get_logger(__name__)


class AdmissionState(str, Enum):
    PENDING = "pending"
    RATE_CHECKED = "rate_checked"
    VALIDATED = "validated"
    SANITIZED = "sanitized"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class RejectionReason(str, Enum):
    RATE_LIMITED = "rate_limited"
    VALIDATION_FAILED = "validation_failed"


@dataclass
class AdmissionOutcome:
    """Result of one pass through the gate.

    `states` lists every state the submission entered, in order, ending with
    the final one.
    """
    state: AdmissionState
    states: List[AdmissionState]
    decision: Optional[Decision] = None
    reason: Optional[RejectionReason] = None
    failures: List[ValidationFailure] = field(default_factory=list)
    sanitized_fields: Dict[str, str] = field(default_factory=dict)

    @property
    def accepted(self) -> bool:
        return self.state is AdmissionState.ACCEPTED

    @property
    def retry_after(self) -> Optional[int]:
        if self.reason is RejectionReason.RATE_LIMITED and self.decision is not None:
            return self.decision.reset_in_seconds
        return None


class AdmissionGate:
    """Orchestrates rate check, validation and sanitization for one submission."""

    def __init__(
        self,
        rate_limiter: RateLimiter,
        validator: ConstraintValidator,
        limit: int,
        window_seconds: int = 60,
        key_salt: str = "formpipe_rl",
        monotonic: Callable[[], float] = time.monotonic,
    ):
        self.rate_limiter = rate_limiter
        self.validator = validator
        self.limit = limit
        self.window_seconds = window_seconds
        self.key_salt = key_salt
        self._monotonic = monotonic

    async def admit(
        self,
        payload: Any,
        client_address: str,
        deadline: Optional[float] = None,
    ) -> AdmissionOutcome:
        """
        Admit or reject one submission.

        Args:
            payload: Raw body or decoded JSON object.
            client_address: Resolved client network address.
            deadline: Absolute `time.monotonic()` value bounding the rate
                check. A deadline that already passed makes the rate check
                fail open.

        Returns:
            AdmissionOutcome: Accepted with sanitized fields, or rejected with
            the reason and its details.

        Raises:
            MalformedRequestError: If the payload cannot be parsed. No rate
                limit slot is consumed in that case.
        """
        fields = parse_submission(payload)
        states = [AdmissionState.PENDING]

        client_key = derive_client_key(client_address, self.key_salt)
        timeout = None if deadline is None else deadline - self._monotonic()
        decision = await self.rate_limiter.check_and_consume(
            client_key, self.limit, self.window_seconds, timeout=timeout
        )
        if not decision.allowed:
            states.append(AdmissionState.REJECTED)
            return AdmissionOutcome(
                state=AdmissionState.REJECTED,
                states=states,
                decision=decision,
                reason=RejectionReason.RATE_LIMITED,
            )
        states.append(AdmissionState.RATE_CHECKED)

        failures = self.validator.validate_all(fields)
        if failures:
            states.append(AdmissionState.REJECTED)
            return AdmissionOutcome(
                state=AdmissionState.REJECTED,
                states=states,
                decision=decision,
                reason=RejectionReason.VALIDATION_FAILED,
                failures=failures,
            )
        states.append(AdmissionState.VALIDATED)

        sanitized = sanitize_all(self._vetted_fields(fields))
        states.append(AdmissionState.SANITIZED)

        states.append(AdmissionState.ACCEPTED)
        logger.info(
            "Submission accepted",
            client_key=client_key[:16],
            fields=list(sanitized),
            fail_open=decision.fail_open,
        )
        return AdmissionOutcome(
            state=AdmissionState.ACCEPTED,
            states=states,
            decision=decision,
            sanitized_fields=sanitized,
        )

    def _vetted_fields(self, fields: SubmittedFields) -> SubmittedFields:
        """Constrained fields in declared order, plus replyTo if unconstrained."""
        vetted = {name: fields.get(name, "") for name in self.validator.constraints}
        if REPLY_TO_FIELD not in vetted:
            vetted[REPLY_TO_FIELD] = fields.get(REPLY_TO_FIELD, "")
        return vetted
