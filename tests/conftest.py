"""
Test configuration - pytest fixtures and factory_boy factories.

RUNNING TESTS:
    pip install -e .[test]
    pytest
    pytest tests/test_gate.py -v
"""

import pytest
from django.utils import timezone

import factory
from factory.django import DjangoModelFactory

from kyc.choices import Role, TrustLevel, VerificationStatus


# ============================================================================
# USER FACTORIES
# ============================================================================

class UserFactory(DjangoModelFactory):
    """Factory for CustomUser."""

    class Meta:
        model = 'users.CustomUser'
        django_get_or_create = ('email',)

    email = factory.Sequence(lambda n: f"user{n}@example.com")
    full_name = factory.Faker('name')
    is_verified = True
    primary_role = Role.STUDENT
    password = factory.PostGenerationMethodCall('set_password', 'testpass123')


class StaffUserFactory(UserFactory):
    """Factory for reviewers."""

    email = factory.Sequence(lambda n: f"admin{n}@example.com")
    primary_role = ''
    is_staff = True


# ============================================================================
# VERIFICATION FACTORIES
# ============================================================================

class VerificationFactory(DjangoModelFactory):
    """Pending verification with no evidence. Does not touch the trust cache."""

    class Meta:
        model = 'kyc.Verification'

    user = factory.SubFactory(UserFactory)
    role = Role.STUDENT
    level = TrustLevel.L0
    status = VerificationStatus.PENDING
    evidence = factory.LazyFunction(lambda: {"country": "IN"})
    submitted_at = factory.LazyFunction(timezone.now)


class ApprovedVerificationFactory(VerificationFactory):
    status = VerificationStatus.APPROVED
    reviewed_by = factory.SubFactory(StaffUserFactory)
    reviewed_at = factory.LazyFunction(timezone.now)


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def user_factory(db):
    return UserFactory


@pytest.fixture
def user(db):
    return UserFactory()


@pytest.fixture
def admin_user(db):
    return StaffUserFactory()


@pytest.fixture
def verification_factory(db):
    return VerificationFactory


@pytest.fixture
def approved_verification_factory(db):
    return ApprovedVerificationFactory


@pytest.fixture
def user_client(client, user):
    client.force_login(user)
    return client


@pytest.fixture
def admin_client(client, admin_user):
    client.force_login(admin_user)
    return client


# ============================================================================
# EVIDENCE PAYLOADS
# ============================================================================

@pytest.fixture
def id_proof():
    return {
        "type": "passport",
        "number": "P1234567",
        "document_url": "s3://kyc/passport.pdf",
        "country": "IN",
    }


@pytest.fixture
def mentor_payload(id_proof):
    return {
        "id_proof": id_proof,
        "professional_credentials": {
            "degree": "MSc Computer Science",
            "institution": "IIT Delhi",
            "graduation_year": "2015",
        },
        "bank_details": {
            "account_number": "000123456789",
            "ifsc_code": "HDFC0001234",
            "bank_name": "HDFC",
            "account_holder_name": "Asha Rao",
            "country": "IN",
        },
    }


@pytest.fixture
def premium_sections():
    return {
        "address_proof": {
            "type": "utility_bill",
            "document_url": "s3://kyc/bill.pdf",
            "address": "12 MG Road, Bengaluru",
            "country": "IN",
        },
        "video_verification": {"video_url": "s3://kyc/video.mp4"},
    }
