from django.db import models


class Role(models.TextChoices):
    STUDENT = "student", "Student"
    MENTOR = "mentor", "Mentor"
    EMPLOYER = "employer", "Employer"
    INVESTOR = "investor", "Investor"
    SPONSOR = "sponsor", "Sponsor"
    ENTREPRENEUR = "entrepreneur", "Entrepreneur"


class TrustLevel(models.IntegerChoices):
    L0 = 0, "L0 (Basic)"
    L1 = 1, "L1 (ID Verified)"
    L2 = 2, "L2 (Role Verified)"
    L3 = 3, "L3 (Trusted/Premium)"

    @classmethod
    def coerce(cls, value):
        """Return the TrustLevel for an int or numeric string, ValueError otherwise."""
        if isinstance(value, bool):
            raise ValueError(f"Invalid trust level: {value!r}")
        if isinstance(value, str):
            value = value.strip()
            if not value.lstrip("-").isdigit():
                raise ValueError(f"Invalid trust level: {value!r}")
            value = int(value)
        try:
            return cls(value)
        except (ValueError, TypeError):
            raise ValueError(f"Invalid trust level: {value!r}") from None


class VerificationStatus(models.TextChoices):
    INCOMPLETE = "incomplete", "Incomplete"
    PENDING = "pending", "Pending"
    APPROVED = "approved", "Approved"
    REJECTED = "rejected", "Rejected"


COUNTRY_CHOICES = [
    ("IN", "India"),
    ("US", "United States"),
    ("GB", "United Kingdom"),
    ("CA", "Canada"),
    ("AU", "Australia"),
    ("SG", "Singapore"),
    ("AE", "United Arab Emirates"),
    ("EU", "European Union"),
    ("OTHER", "Other"),
]

ID_DOCUMENT_CHOICES = [
    ("aadhaar", "Aadhaar"),
    ("pan", "PAN"),
    ("passport", "Passport"),
    ("driving_license", "Driving license"),
    ("voter_id", "Voter ID"),
    ("ssn", "SSN"),
    ("us_passport", "US passport"),
    ("us_driving_license", "US driving license"),
    ("eu_passport", "EU passport"),
    ("eu_national_id", "EU national ID"),
    ("uk_passport", "UK passport"),
    ("national_id", "National ID"),
    ("student_id", "Student ID"),
    ("other", "Other"),
]

BUSINESS_DOCUMENT_CHOICES = [
    ("gst", "GST"),
    ("cin", "CIN"),
    ("pan_business", "Business PAN"),
    ("ein", "EIN"),
    ("vat", "VAT"),
    ("companies_house", "Companies House"),
    ("business_registration", "Business registration"),
    ("trade_license", "Trade license"),
    ("other", "Other"),
]

ADDRESS_PROOF_CHOICES = [
    ("utility_bill", "Utility bill"),
    ("bank_statement", "Bank statement"),
    ("government_letter", "Government letter"),
    ("other", "Other"),
]

GENDER_CHOICES = [
    ("male", "Male"),
    ("female", "Female"),
    ("other", "Other"),
]
