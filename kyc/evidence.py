"""
Per-role evidence bundles.

Every role gets its own dataclass; sections that belong to another role cannot be
attached to it. Section payloads are plain dicts cleaned by the forms in
``kyc.forms`` so the bundle serializes straight into the model's JSONField.
"""

import copy
import logging
from dataclasses import dataclass, field, fields, replace
from typing import ClassVar, Dict, Optional, Tuple

from .choices import COUNTRY_CHOICES, Role
from .exceptions import ValidationError
from .forms import SECTION_FORMS, AdditionalDocumentForm

logger = logging.getLogger(__name__)

COMMON_SECTIONS = ("personal_info", "id_proof", "address_proof", "video_verification", "social_profiles")

# section -> sub-fields stored as ciphertext
SENSITIVE_FIELDS = {
    "id_proof": ("number",),
    "bank_details": ("account_number", "iban"),
    "investment_bank_details": ("account_number", "iban"),
    "tax_compliance": ("pan_number", "tin_number"),
}

# sub-fields that also get a one-way digest stored next to the ciphertext
HASHED_FIELDS = {
    "id_proof": ("number",),
}

MASK_VISIBLE_CHARS = 4


@dataclass
class EvidenceBundle:
    role: ClassVar[Optional[str]] = None
    role_sections: ClassVar[Tuple[str, ...]] = ()

    country: str = "IN"
    phone_number: str = ""
    personal_info: Optional[dict] = None
    id_proof: Optional[dict] = None
    address_proof: Optional[dict] = None
    video_verification: Optional[dict] = None
    social_profiles: Optional[dict] = None
    additional_documents: list = field(default_factory=list)

    @classmethod
    def section_names(cls):
        return COMMON_SECTIONS + cls.role_sections

    def has_identity_proof(self) -> bool:
        return self.id_proof is not None and bool(self.id_proof.get("document_url"))

    def has_role_evidence(self) -> bool:
        """Role-specific (L2) evidence; roles without an L2 bundle never qualify."""
        return False

    def has_premium_evidence(self) -> bool:
        return self.address_proof is not None and self.video_verification is not None

    def present_sections(self):
        return [name for name in self.section_names() if getattr(self, name) is not None]

    def to_dict(self) -> dict:
        data = {"country": self.country}
        if self.phone_number:
            data["phone_number"] = self.phone_number
        if self.additional_documents:
            data["additional_documents"] = copy.deepcopy(self.additional_documents)
        for name in self.present_sections():
            data[name] = copy.deepcopy(getattr(self, name))
        return data


@dataclass
class StudentEvidence(EvidenceBundle):
    role: ClassVar[str] = Role.STUDENT
    role_sections: ClassVar[Tuple[str, ...]] = ("education_info",)

    education_info: Optional[dict] = None

    def has_role_evidence(self):
        return self.education_info is not None


@dataclass
class MentorEvidence(EvidenceBundle):
    role: ClassVar[str] = Role.MENTOR
    role_sections: ClassVar[Tuple[str, ...]] = ("professional_credentials", "experience_proof", "bank_details")

    professional_credentials: Optional[dict] = None
    experience_proof: Optional[dict] = None
    bank_details: Optional[dict] = None

    def has_role_evidence(self):
        return self.professional_credentials is not None and self.bank_details is not None


@dataclass
class EmployerEvidence(EvidenceBundle):
    role: ClassVar[str] = Role.EMPLOYER
    role_sections: ClassVar[Tuple[str, ...]] = ("company_info", "company_kyc")

    company_info: Optional[dict] = None
    company_kyc: Optional[dict] = None

    def has_role_evidence(self):
        return self.company_kyc is not None


@dataclass
class InvestorEvidence(EvidenceBundle):
    role: ClassVar[str] = Role.INVESTOR
    role_sections: ClassVar[Tuple[str, ...]] = ("investor_info", "tax_compliance", "investment_bank_details")

    investor_info: Optional[dict] = None
    tax_compliance: Optional[dict] = None
    investment_bank_details: Optional[dict] = None

    def has_role_evidence(self):
        return self.tax_compliance is not None and self.investment_bank_details is not None


@dataclass
class SponsorEvidence(EvidenceBundle):
    role: ClassVar[str] = Role.SPONSOR
    role_sections: ClassVar[Tuple[str, ...]] = ("sponsor_info", "sponsor_kyc")

    sponsor_info: Optional[dict] = None
    sponsor_kyc: Optional[dict] = None

    def has_role_evidence(self):
        return self.sponsor_kyc is not None


@dataclass
class EntrepreneurEvidence(EvidenceBundle):
    role: ClassVar[str] = Role.ENTREPRENEUR


EVIDENCE_TYPES: Dict[str, type] = {
    Role.STUDENT.value: StudentEvidence,
    Role.MENTOR.value: MentorEvidence,
    Role.EMPLOYER.value: EmployerEvidence,
    Role.INVESTOR.value: InvestorEvidence,
    Role.SPONSOR.value: SponsorEvidence,
    Role.ENTREPRENEUR.value: EntrepreneurEvidence,
}

ALL_SECTIONS = frozenset(SECTION_FORMS)


def parse_role(role) -> Role:
    try:
        return Role(role)
    except ValueError:
        raise ValidationError("Invalid role", field="role") from None


def bundle_class(role):
    return EVIDENCE_TYPES[parse_role(role).value]


def _clean_section(name, value):
    if not isinstance(value, dict):
        raise ValidationError(f"Section '{name}' must be an object", field=name)
    form = SECTION_FORMS[name](data=value)
    if not form.is_valid():
        errors = {key: [str(e) for e in errs] for key, errs in form.errors.items()}
        raise ValidationError(f"Invalid data in section '{name}'", field=name, errors=errors)
    return form.section_data()


def _clean_documents(value):
    if not isinstance(value, list):
        raise ValidationError("additional_documents must be a list", field="additional_documents")
    documents = []
    for index, item in enumerate(value):
        form = AdditionalDocumentForm(data=item if isinstance(item, dict) else {})
        if not form.is_valid():
            errors = {key: [str(e) for e in errs] for key, errs in form.errors.items()}
            raise ValidationError(
                f"Invalid additional document at position {index}",
                field="additional_documents",
                errors=errors,
            )
        documents.append(form.section_data())
    return documents


def parse_evidence(role, payload) -> EvidenceBundle:
    """
    Build the role's bundle from a submitted payload.

    Raises ValidationError for a bad role, a malformed section or a section that
    belongs to a different role. Unknown keys are ignored.
    """
    cls = bundle_class(role)
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Evidence must be an object")

    allowed = set(cls.section_names())
    values = {}

    for key, value in payload.items():
        if key in ALL_SECTIONS:
            if key not in allowed:
                raise ValidationError(
                    f"Section '{key}' is not accepted for role '{cls.role}'",
                    field=key,
                )
            if value is None:
                continue
            values[key] = _clean_section(key, value)
        elif key == "country":
            if value not in dict(COUNTRY_CHOICES):
                raise ValidationError("Invalid country", field="country")
            values["country"] = value
        elif key == "phone_number":
            values["phone_number"] = str(value or "").strip()
        elif key == "additional_documents":
            values["additional_documents"] = _clean_documents(value or [])
        else:
            logger.debug("Ignoring unknown evidence key %r for role %s", key, cls.role)

    return cls(**values)


def evidence_from_dict(role, data) -> EvidenceBundle:
    """Rebuild a stored bundle without re-validating it."""
    cls = bundle_class(role)
    names = {f.name for f in fields(cls)}
    return cls(**{key: copy.deepcopy(value) for key, value in (data or {}).items() if key in names})


def protect_sensitive_fields(bundle: EvidenceBundle, cipher, hasher) -> EvidenceBundle:
    """Return a copy of ``bundle`` with sensitive sub-fields encrypted."""
    changes = {}
    for section, sub_fields in SENSITIVE_FIELDS.items():
        data = getattr(bundle, section, None)
        if not data:
            continue
        data = dict(data)
        for name in sub_fields:
            value = data.get(name)
            if not value:
                continue
            if name in HASHED_FIELDS.get(section, ()):
                data[f"{name}_hash"] = hasher(value)
            data[name] = cipher.encrypt(value)
        changes[section] = data
    return replace(bundle, **changes)


def reveal_sensitive_fields(evidence: dict, cipher) -> dict:
    """Decrypt sensitive sub-fields of a stored evidence dict. CryptoError propagates."""
    revealed = copy.deepcopy(evidence or {})
    for section, sub_fields in SENSITIVE_FIELDS.items():
        data = revealed.get(section)
        if not data:
            continue
        for name in sub_fields:
            if data.get(name):
                data[name] = cipher.decrypt(data[name])
    return revealed


def mask(value: str) -> str:
    if len(value) <= MASK_VISIBLE_CHARS:
        return "*" * len(value)
    return "*" * (len(value) - MASK_VISIBLE_CHARS) + value[-MASK_VISIBLE_CHARS:]


def mask_sensitive_fields(evidence: dict, cipher) -> dict:
    """Owner-facing view: decrypt, then mask all but the last characters; digests dropped."""
    masked = reveal_sensitive_fields(evidence, cipher)
    for section, sub_fields in SENSITIVE_FIELDS.items():
        data = masked.get(section)
        if not data:
            continue
        for name in sub_fields:
            if data.get(name):
                data[name] = mask(data[name])
            data.pop(f"{name}_hash", None)
    return masked
