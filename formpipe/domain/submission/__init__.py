"""Submission domain: payload parsing, client identity, admission and email composition."""

from .admission import AdmissionGate, AdmissionOutcome, AdmissionState, RejectionReason
from .client_identity import normalize_address, resolve_client_address
from .composer import ComposedEmail, EmailComposer
from .payload import SubmittedFields, parse_submission

__all__ = [
    "AdmissionGate",
    "AdmissionOutcome",
    "AdmissionState",
    "RejectionReason",
    "normalize_address",
    "resolve_client_address",
    "ComposedEmail",
    "EmailComposer",
    "SubmittedFields",
    "parse_submission",
]
