"""
Trust level derivation and evidence parsing tests.
"""

import pytest

from kyc.choices import Role, TrustLevel
from kyc.evidence import (
    EmployerEvidence,
    MentorEvidence,
    StudentEvidence,
    evidence_from_dict,
    mask,
    parse_evidence,
    protect_sensitive_fields,
)
from kyc.exceptions import ValidationError
from kyc.levels import derive_level, resolve_submitted_level

ROLE_EVIDENCE = {
    Role.STUDENT: {"education_info": {"institution": "DU", "course": "BSc", "year": "2024"}},
    Role.MENTOR: {
        "professional_credentials": {"degree": "PhD"},
        "bank_details": {"account_number": "000123456789"},
    },
    Role.EMPLOYER: {"company_kyc": {"registration_number": "U72900DL2020PTC123456", "document_type": "cin"}},
    Role.INVESTOR: {
        "tax_compliance": {"pan_number": "ABCDE1234F", "country": "IN"},
        "investment_bank_details": {"account_number": "998877665544"},
    },
    Role.SPONSOR: {"sponsor_kyc": {"registration_number": "NGO-42"}},
}


class TestScenarios:

    def test_student_with_only_verified_email_is_l0(self):
        assert derive_level(Role.STUDENT, True, parse_evidence(Role.STUDENT, {})) == TrustLevel.L0

    def test_mentor_with_id_credentials_and_bank_details_is_l2(self, mentor_payload):
        bundle = parse_evidence(Role.MENTOR, mentor_payload)

        assert derive_level(Role.MENTOR, True, bundle) == TrustLevel.L2

    def test_entrepreneur_jumps_to_l3_without_identity_proof(self, premium_sections):
        bundle = parse_evidence(Role.ENTREPRENEUR, premium_sections)

        assert not bundle.has_identity_proof()
        assert derive_level(Role.ENTREPRENEUR, True, bundle) == TrustLevel.L3


class TestDerivation:

    def test_unverified_email_without_evidence_stays_l0(self):
        assert derive_level(Role.STUDENT, False, {}) == TrustLevel.L0

    def test_identity_proof_needs_document_reference(self, id_proof):
        without_url = dict(id_proof)
        del without_url["document_url"]

        assert derive_level(Role.STUDENT, True, {"id_proof": without_url}) == TrustLevel.L0
        assert derive_level(Role.STUDENT, True, {"id_proof": id_proof}) == TrustLevel.L1

    @pytest.mark.parametrize("role", sorted(ROLE_EVIDENCE))
    def test_role_specific_evidence_reaches_l2(self, role, id_proof):
        payload = dict(ROLE_EVIDENCE[role], id_proof=id_proof)

        assert derive_level(role, True, parse_evidence(role, payload)) == TrustLevel.L2

    def test_entrepreneur_has_no_l2_predicate(self, id_proof):
        assert derive_level(Role.ENTREPRENEUR, True, {"id_proof": id_proof}) == TrustLevel.L1

    def test_mentor_needs_both_credentials_and_bank_details(self, id_proof):
        payload = {"id_proof": id_proof, "professional_credentials": {"degree": "PhD"}}

        assert derive_level(Role.MENTOR, True, parse_evidence(Role.MENTOR, payload)) == TrustLevel.L1

    def test_investor_needs_tax_and_bank_details(self, id_proof):
        payload = {"id_proof": id_proof, "tax_compliance": {"pan_number": "ABCDE1234F"}}

        assert derive_level(Role.INVESTOR, True, parse_evidence(Role.INVESTOR, payload)) == TrustLevel.L1

    def test_l3_needs_both_address_and_video(self, premium_sections, id_proof):
        payload = {"id_proof": id_proof, "address_proof": premium_sections["address_proof"]}

        assert derive_level(Role.STUDENT, True, parse_evidence(Role.STUDENT, payload)) == TrustLevel.L1

    def test_later_tier_overwrites_earlier(self, premium_sections):
        payload = dict(premium_sections, **ROLE_EVIDENCE[Role.STUDENT])

        assert derive_level(Role.STUDENT, False, parse_evidence(Role.STUDENT, payload)) == TrustLevel.L3

    def test_accepts_stored_dict_evidence(self, mentor_payload):
        stored = parse_evidence(Role.MENTOR, mentor_payload).to_dict()

        assert derive_level(Role.MENTOR, True, stored) == TrustLevel.L2

    def test_bundle_for_another_role_keeps_only_common_sections(self, id_proof):
        bundle = parse_evidence(Role.STUDENT, dict(ROLE_EVIDENCE[Role.STUDENT], id_proof=id_proof))

        assert derive_level(Role.EMPLOYER, True, bundle) == TrustLevel.L1

    def test_invalid_role(self):
        with pytest.raises(ValidationError):
            derive_level("admin", True, {})


class TestCumulativeToggle:

    def test_cumulative_blocks_tier_skipping(self, premium_sections):
        bundle = parse_evidence(Role.ENTREPRENEUR, premium_sections)

        assert derive_level(Role.ENTREPRENEUR, True, bundle, cumulative=True) == TrustLevel.L0

    def test_cumulative_requires_verified_email(self, mentor_payload):
        bundle = parse_evidence(Role.MENTOR, mentor_payload)

        assert derive_level(Role.MENTOR, False, bundle, cumulative=True) == TrustLevel.L0
        assert derive_level(Role.MENTOR, True, bundle, cumulative=True) == TrustLevel.L2

    def test_cumulative_full_ladder_reaches_l3(self, id_proof, premium_sections):
        payload = dict(premium_sections, id_proof=id_proof, **ROLE_EVIDENCE[Role.SPONSOR])
        bundle = parse_evidence(Role.SPONSOR, payload)

        assert derive_level(Role.SPONSOR, True, bundle, cumulative=True) == TrustLevel.L3

    def test_setting_controls_default(self, settings, premium_sections):
        settings.KYC_CUMULATIVE_LEVELS = True
        bundle = parse_evidence(Role.ENTREPRENEUR, premium_sections)

        assert derive_level(Role.ENTREPRENEUR, True, bundle) == TrustLevel.L0


class TestSubmittedLevel:

    def test_no_request_keeps_derived(self):
        assert resolve_submitted_level(TrustLevel.L1) == TrustLevel.L1

    def test_explicit_level_is_accepted_unchecked(self):
        assert resolve_submitted_level(TrustLevel.L0, 3) == TrustLevel.L3
        assert resolve_submitted_level(TrustLevel.L2, "1") == TrustLevel.L1

    @pytest.mark.parametrize("bad", [4, -1, "high", True])
    def test_out_of_range_level_is_rejected(self, bad):
        with pytest.raises(ValueError):
            resolve_submitted_level(TrustLevel.L0, bad)


class TestParseEvidence:

    def test_returns_role_typed_bundle(self, mentor_payload):
        assert isinstance(parse_evidence(Role.STUDENT, {}), StudentEvidence)
        assert isinstance(parse_evidence("mentor", mentor_payload), MentorEvidence)
        assert isinstance(parse_evidence(Role.EMPLOYER, ROLE_EVIDENCE[Role.EMPLOYER]), EmployerEvidence)

    def test_section_from_another_role_is_rejected(self):
        with pytest.raises(ValidationError) as exc:
            parse_evidence(Role.STUDENT, {"company_kyc": {"registration_number": "X"}})

        assert exc.value.details["field"] == "company_kyc"

    def test_invalid_role_is_rejected(self):
        with pytest.raises(ValidationError):
            parse_evidence("admin", {})

    def test_section_must_be_an_object(self):
        with pytest.raises(ValidationError):
            parse_evidence(Role.STUDENT, {"education_info": "DU"})

    def test_invalid_section_field_reports_errors(self):
        with pytest.raises(ValidationError) as exc:
            parse_evidence(Role.STUDENT, {"id_proof": {"type": "library_card"}})

        assert "type" in exc.value.details["errors"]

    def test_bank_details_require_account_number(self):
        with pytest.raises(ValidationError):
            parse_evidence(Role.MENTOR, {"bank_details": {"bank_name": "HDFC"}})

    def test_invalid_country(self):
        with pytest.raises(ValidationError):
            parse_evidence(Role.STUDENT, {"country": "XX"})

    def test_unknown_keys_and_empty_fields_are_dropped(self):
        bundle = parse_evidence(Role.STUDENT, {
            "favourite_colour": "blue",
            "education_info": {"institution": "DU", "course": "", "nickname": "x"},
        })

        assert bundle.education_info == {"institution": "DU"}
        assert "favourite_colour" not in bundle.to_dict()

    def test_dates_serialize_to_iso_strings(self):
        bundle = parse_evidence(Role.STUDENT, {"personal_info": {"full_name": "Asha", "date_of_birth": "2001-02-03"}})

        assert bundle.personal_info["date_of_birth"] == "2001-02-03"

    def test_additional_documents_are_validated(self):
        bundle = parse_evidence(Role.STUDENT, {
            "additional_documents": [{"name": "Marksheet", "url": "s3://kyc/marks.pdf"}],
        })
        assert bundle.additional_documents == [{"name": "Marksheet", "url": "s3://kyc/marks.pdf"}]

        with pytest.raises(ValidationError):
            parse_evidence(Role.STUDENT, {"additional_documents": [{"name": "No url"}]})

    def test_round_trip_through_stored_dict(self, mentor_payload):
        bundle = parse_evidence(Role.MENTOR, mentor_payload)

        assert evidence_from_dict(Role.MENTOR, bundle.to_dict()) == bundle


class TestSensitiveFields:

    def test_protect_encrypts_and_hashes(self, mentor_payload):
        class Reverser:
            def encrypt(self, value):
                return value[::-1]

        bundle = parse_evidence(Role.MENTOR, mentor_payload)
        protected = protect_sensitive_fields(bundle, Reverser(), lambda v: f"hash:{v}")

        assert protected.bank_details["account_number"] == "987654321000"
        assert protected.id_proof["number"] == "7654321P"
        assert protected.id_proof["number_hash"] == "hash:P1234567"
        # original bundle untouched
        assert bundle.bank_details["account_number"] == "000123456789"

    def test_mask_keeps_last_four(self):
        assert mask("000123456789") == "********6789"
        assert mask("123") == "***"
