"""
Trust level derivation.

Access matrix:
    L0 (Basic): email verified
    L1 (ID Verified): government ID document
    L2 (Role Verified): role-specific professional/business evidence
    L3 (Trusted/Premium): address proof + video verification

Tiers are checked in ascending order and each satisfied predicate overwrites the
candidate, so a higher tier can be reached without the lower ones (an
entrepreneur with address proof and a video lands on L3 without an ID). With
KYC_CUMULATIVE_LEVELS on, tier k additionally requires tiers 0..k-1.
"""

from django.conf import settings

from .choices import TrustLevel
from .evidence import EvidenceBundle, evidence_from_dict, parse_role


def tier_predicates(email_verified: bool, bundle: EvidenceBundle):
    return (
        (TrustLevel.L0, bool(email_verified)),
        (TrustLevel.L1, bundle.has_identity_proof()),
        (TrustLevel.L2, bundle.has_role_evidence()),
        (TrustLevel.L3, bundle.has_premium_evidence()),
    )


def derive_level(role, email_verified: bool, evidence, cumulative=None) -> TrustLevel:
    if cumulative is None:
        cumulative = getattr(settings, "KYC_CUMULATIVE_LEVELS", False)

    role = parse_role(role)
    if isinstance(evidence, EvidenceBundle):
        bundle = evidence
        if bundle.role != role:
            # only the common sections carry over to another role
            bundle = evidence_from_dict(role, evidence.to_dict())
    else:
        bundle = evidence_from_dict(role, evidence)

    level = TrustLevel.L0
    for tier, satisfied in tier_predicates(email_verified, bundle):
        if not satisfied:
            if cumulative:
                break
            continue
        level = tier
    return level


def resolve_submitted_level(derived: TrustLevel, requested=None) -> TrustLevel:
    """
    Level stored on a submission: the client's explicit level when given, else the
    derived one. The explicit level is not checked against the evidence; approval
    re-derives before anything reaches the trust cache.
    """
    if requested is None:
        return derived
    return TrustLevel.coerce(requested)
