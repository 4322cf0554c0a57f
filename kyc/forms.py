# kyc/forms.py
from django import forms

from .choices import (
    ADDRESS_PROOF_CHOICES,
    BUSINESS_DOCUMENT_CHOICES,
    COUNTRY_CHOICES,
    GENDER_CHOICES,
    ID_DOCUMENT_CHOICES,
    Role,
    TrustLevel,
    VerificationStatus,
)

REFERENCE_MAX_LENGTH = 2048


class ListField(forms.Field):
    """A JSON list, optionally of a fixed item type."""

    def __init__(self, item_type=None, **kwargs):
        self.item_type = item_type
        kwargs.setdefault("required", False)
        super().__init__(**kwargs)

    def to_python(self, value):
        if value in self.empty_values:
            return []
        if not isinstance(value, (list, tuple)):
            raise forms.ValidationError("Expected a list.")
        if self.item_type is not None and not all(isinstance(v, self.item_type) for v in value):
            raise forms.ValidationError(f"Expected a list of {self.item_type.__name__} values.")
        return list(value)


class DictField(forms.Field):
    def __init__(self, **kwargs):
        kwargs.setdefault("required", False)
        super().__init__(**kwargs)

    def to_python(self, value):
        if value in self.empty_values:
            return {}
        if not isinstance(value, dict):
            raise forms.ValidationError("Expected an object.")
        return value


def reference_field(**kwargs):
    kwargs.setdefault("required", False)
    return forms.CharField(max_length=REFERENCE_MAX_LENGTH, **kwargs)


def text_field(max_length=255, **kwargs):
    kwargs.setdefault("required", False)
    return forms.CharField(max_length=max_length, **kwargs)


def country_field(**kwargs):
    kwargs.setdefault("required", False)
    return forms.ChoiceField(choices=COUNTRY_CHOICES, **kwargs)


class SectionForm(forms.Form):
    """Base form for one evidence section. ``section_data`` drops empty values."""

    def section_data(self):
        data = {}
        for name, value in self.cleaned_data.items():
            if value in (None, "", [], {}):
                continue
            if hasattr(value, "isoformat"):
                value = value.isoformat()
            data[name] = value
        return data


# ----- common sections -----

class PersonalInfoForm(SectionForm):
    full_name = text_field()
    date_of_birth = forms.DateField(required=False)
    gender = forms.ChoiceField(choices=GENDER_CHOICES, required=False)
    nationality = text_field(max_length=100)


class IdProofForm(SectionForm):
    type = forms.ChoiceField(choices=ID_DOCUMENT_CHOICES, required=False)
    number = text_field(max_length=64)
    document_url = reference_field()
    expiry_date = forms.DateField(required=False)
    country = country_field()


class AddressProofForm(SectionForm):
    type = forms.ChoiceField(choices=ADDRESS_PROOF_CHOICES, required=False)
    document_url = reference_field()
    address = text_field(max_length=500)
    country = country_field()


class VideoVerificationForm(SectionForm):
    video_url = reference_field()


class SocialProfilesForm(SectionForm):
    linkedin = reference_field()
    github = reference_field()
    portfolio = reference_field()


class AdditionalDocumentForm(SectionForm):
    name = text_field(required=True)
    url = reference_field(required=True)
    type = text_field(max_length=50)


# ----- student -----

class EducationInfoForm(SectionForm):
    institution = text_field()
    course = text_field()
    year = text_field(max_length=10)
    student_id = text_field(max_length=64)
    transcript_url = reference_field()
    qualification = text_field()


# ----- mentor -----

class ProfessionalCredentialsForm(SectionForm):
    degree = text_field()
    institution = text_field()
    graduation_year = text_field(max_length=10)
    certifications = ListField(item_type=dict)


class ExperienceProofForm(SectionForm):
    work_certificate = reference_field()
    linkedin_url = reference_field()
    experience_years = forms.IntegerField(required=False, min_value=0)
    current_position = text_field()
    company = text_field()
    specialization = ListField(item_type=str)


class BankDetailsForm(SectionForm):
    account_number = text_field(max_length=64, required=True)
    ifsc_code = text_field(max_length=20)
    routing_number = text_field(max_length=20)
    iban = text_field(max_length=64)
    swift_code = text_field(max_length=20)
    bank_name = text_field()
    account_holder_name = text_field()
    document_url = reference_field()
    country = country_field()


# ----- employer -----

class CompanyInfoForm(SectionForm):
    company_name = text_field()
    industry = text_field()
    authorized_representative = DictField()
    phone_number = text_field(max_length=32)
    company_email = forms.EmailField(required=False)
    website = reference_field()
    linkedin_company_page = reference_field()


class CompanyKYCForm(SectionForm):
    registration_number = text_field(max_length=64)
    registration_document_url = reference_field()
    gst_number = text_field(max_length=32)
    pan_number = text_field(max_length=32)
    cin_number = text_field(max_length=32)
    ein_number = text_field(max_length=32)
    state_registration = text_field(max_length=64)
    vat_number = text_field(max_length=32)
    companies_house_number = text_field(max_length=32)
    business_registration_number = text_field(max_length=64)
    trade_license_number = text_field(max_length=64)
    country = country_field()
    document_type = forms.ChoiceField(choices=BUSINESS_DOCUMENT_CHOICES, required=False)


# ----- investor -----

class InvestorInfoForm(SectionForm):
    investment_preferences = ListField(item_type=str)
    track_record = text_field(max_length=2000)
    portfolio_companies = ListField(item_type=str)
    investment_amount_range = DictField()


class TaxComplianceForm(SectionForm):
    pan_number = text_field(max_length=32)
    w9_form_url = reference_field()
    w8ben_form_url = reference_field()
    tin_number = text_field(max_length=32)
    vat_number = text_field(max_length=32)
    country = country_field()


class InvestmentBankDetailsForm(SectionForm):
    account_number = text_field(max_length=64, required=True)
    routing_number = text_field(max_length=20)
    iban = text_field(max_length=64)
    swift_code = text_field(max_length=20)
    bank_name = text_field()
    account_holder_name = text_field()
    country = country_field()


# ----- sponsor -----

class SponsorInfoForm(SectionForm):
    organization_name = text_field()
    representative_name = text_field()
    designation = text_field()
    organization_email = forms.EmailField(required=False)
    phone_number = text_field(max_length=32)
    csr_reports_url = reference_field()
    website_url = reference_field()


class SponsorKYCForm(SectionForm):
    registration_number = text_field(max_length=64)
    registration_document_url = reference_field()
    gst_number = text_field(max_length=32)
    pan_number = text_field(max_length=32)
    country = country_field()


SECTION_FORMS = {
    "personal_info": PersonalInfoForm,
    "id_proof": IdProofForm,
    "address_proof": AddressProofForm,
    "video_verification": VideoVerificationForm,
    "social_profiles": SocialProfilesForm,
    "education_info": EducationInfoForm,
    "professional_credentials": ProfessionalCredentialsForm,
    "experience_proof": ExperienceProofForm,
    "bank_details": BankDetailsForm,
    "company_info": CompanyInfoForm,
    "company_kyc": CompanyKYCForm,
    "investor_info": InvestorInfoForm,
    "tax_compliance": TaxComplianceForm,
    "investment_bank_details": InvestmentBankDetailsForm,
    "sponsor_info": SponsorInfoForm,
    "sponsor_kyc": SponsorKYCForm,
}


# ----- request forms -----

class SubmissionForm(forms.Form):
    role = forms.ChoiceField(choices=Role.choices, error_messages={"invalid_choice": "Invalid role"})
    verification_level = forms.TypedChoiceField(
        choices=TrustLevel.choices,
        coerce=int,
        required=False,
        empty_value=None,
        error_messages={"invalid_choice": "Verification level must be 0, 1, 2, or 3"},
    )


class StatusFilterForm(forms.Form):
    role = forms.ChoiceField(choices=Role.choices, required=False,
                             error_messages={"invalid_choice": "Invalid role"})


class AdminListForm(forms.Form):
    status = forms.ChoiceField(choices=VerificationStatus.choices, required=False,
                               error_messages={"invalid_choice": "Invalid status"})
    role = forms.ChoiceField(choices=Role.choices, required=False,
                             error_messages={"invalid_choice": "Invalid role"})
    page = forms.IntegerField(required=False, min_value=1)
    limit = forms.IntegerField(required=False, min_value=1)


class ApproveForm(forms.Form):
    admin_notes = forms.CharField(required=False, max_length=5000)
    level = forms.TypedChoiceField(
        choices=TrustLevel.choices,
        coerce=int,
        required=False,
        empty_value=None,
        error_messages={"invalid_choice": "Verification level must be 0, 1, 2, or 3"},
    )


class RejectForm(forms.Form):
    rejection_reason = forms.CharField(
        max_length=2000,
        error_messages={"required": "Rejection reason is required"},
    )
    admin_notes = forms.CharField(required=False, max_length=5000)
