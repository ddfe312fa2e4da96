"""
Identity Collaborator
=====================

The wall engine only needs two things from identity: a stable user id and,
on demand, that user's school domain. This module provides both, plus the
e-mail code flow used to provision users:

1. send_email_code() stores a 6-digit code in VerificationCode with an
   expiry and "delivers" it through the log (no real mail transport).
2. register_with_email() / login_with_email() consume a code and return a
   User whose SchoolProfile carries the domain of a whitelisted school
   e-mail.

Codes live in the database, looked up by (email, code, purpose), so every
service instance sees the same codes and a restart does not drop them.
"""

import logging
import secrets
from datetime import timedelta
from typing import Optional

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from .exceptions import Conflict, NotFound, ValidationFailed
from .models import VerificationCode

logger = logging.getLogger(__name__)

PERSONAL_EMAIL_DOMAINS = frozenset([
    'gmail.com', 'outlook.com', 'hotmail.com', 'yahoo.com', 'protonmail.com',
    'icloud.com', 'aol.com', 'mail.com', 'zoho.com', 'yandex.com',
    'tutanota.com', 'mailgun.org', '10minutemail.com', 'tempmail.com',
    'guerrillamail.com',
])

EMAIL_SUBJECTS = {
    VerificationCode.Purpose.REGISTER: 'Campus Wall - Verify Your Email',
    VerificationCode.Purpose.LOGIN: 'Campus Wall - Login Code',
}


# ============================================================================
# SCHOOL DOMAINS
# ============================================================================

def extract_school_domain(email: Optional[str]) -> Optional[str]:
    """Lower-cased part after the last '@', or None for malformed input."""
    if not email or not email.strip():
        return None
    email = email.strip()
    at_index = email.rfind('@')
    if 0 < at_index < len(email) - 1:
        return email[at_index + 1:].lower()
    return None


def is_personal_email_domain(domain: Optional[str]) -> bool:
    return bool(domain) and domain.lower() in PERSONAL_EMAIL_DOMAINS


def is_approved_school_email(email: Optional[str]) -> bool:
    """Personal providers are always rejected; others must be whitelisted."""
    domain = extract_school_domain(email)
    if domain is None or is_personal_email_domain(domain):
        return False
    approved = {d.lower() for d in settings.WALL_SCHOOL_DOMAINS}
    return domain in approved


def school_domain_for_email(email: Optional[str]) -> Optional[str]:
    if is_approved_school_email(email):
        return extract_school_domain(email)
    return None


def get_school_domain(user_id) -> Optional[str]:
    """
    School domain of a user, or None if they have none.

    Raises NotFound if the user does not exist.
    """
    User = get_user_model()
    user = (
        User.objects
        .select_related('school_profile')
        .filter(id=user_id)
        .first()
    )
    if user is None:
        raise NotFound("User not found", user_id=user_id)

    profile = getattr(user, 'school_profile', None)
    if profile is None or not profile.school_domain or not profile.school_domain.strip():
        return None
    return profile.school_domain.strip()


# ============================================================================
# VERIFICATION CODES
# ============================================================================

def generate_code() -> str:
    """6-digit, zero-padded code from a CSPRNG."""
    return f"{secrets.randbelow(1_000_000):06d}"


def _parse_purpose(purpose) -> str:
    try:
        return VerificationCode.Purpose(str(purpose).lower())
    except ValueError:
        raise ValidationFailed(f"Unknown code purpose: {purpose}", purpose=purpose)


def _normalize_email(email: Optional[str]) -> str:
    if not email or '@' not in email:
        raise ValidationFailed("A valid email address is required")
    return email.strip().lower()


def deliver_code(email: str, code: str, purpose: str) -> None:
    """Fake mail transport: the code goes to the log."""
    subject = EMAIL_SUBJECTS.get(purpose, 'Campus Wall - Verification Code')
    logger.info("[FAKE EMAIL] To: %s | Subject: %s | Code: %s", email, subject, code)


def send_email_code(email: str, purpose) -> VerificationCode:
    """
    Create and deliver a verification code.

    Registration codes are only issued to approved school addresses.
    """
    email = _normalize_email(email)
    purpose = _parse_purpose(purpose)

    if purpose == VerificationCode.Purpose.REGISTER and not is_approved_school_email(email):
        raise ValidationFailed(
            "Registration requires an approved school email address",
            email=email
        )

    ttl = timedelta(minutes=settings.WALL_VERIFICATION_CODE_TTL_MINUTES)
    record = VerificationCode.objects.create(
        email=email,
        code=generate_code(),
        purpose=purpose,
        expires_at=timezone.now() + ttl,
    )
    deliver_code(email, record.code, purpose)
    logger.info("Verification code sent: email=%s, purpose=%s", email, purpose)
    return record


def consume_code(email: str, code: str, purpose) -> None:
    """
    Verify a code and delete every outstanding code for the address.

    Must run inside the caller's transaction so a failed registration does
    not burn the code.
    """
    email = _normalize_email(email)
    purpose = _parse_purpose(purpose)

    record = (
        VerificationCode.objects
        .filter(email=email, code=code, purpose=purpose)
        .order_by('-created_at')
        .first()
    )
    if record is None:
        raise ValidationFailed("Invalid or expired code", email=email)
    if record.is_expired():
        raise ValidationFailed("Code has expired", email=email)

    VerificationCode.objects.filter(email=email).delete()


def purge_expired_codes() -> int:
    deleted, _ = VerificationCode.objects.filter(expires_at__lt=timezone.now()).delete()
    if deleted:
        logger.info("Purged %d expired verification codes", deleted)
    return deleted


# ============================================================================
# USER PROVISIONING
# ============================================================================

def _create_user(email: str):
    # SchoolProfile is attached by the post_save signal in wall.signals
    User = get_user_model()
    return User.objects.create_user(username=email, email=email)


def register_with_email(email: str, code: str):
    email = _normalize_email(email)
    User = get_user_model()

    with transaction.atomic():
        if User.objects.filter(email__iexact=email).exists():
            raise Conflict("Email already registered", email=email)
        consume_code(email, code, VerificationCode.Purpose.REGISTER)
        user = _create_user(email)

    logger.info("User registered: id=%s, email=%s", user.id, email)
    return user


def login_with_email(email: str, code: str):
    """Password-less login. Unknown addresses get an account on first login."""
    email = _normalize_email(email)
    User = get_user_model()

    with transaction.atomic():
        consume_code(email, code, VerificationCode.Purpose.LOGIN)
        user = User.objects.filter(email__iexact=email).first()
        if user is None:
            user = _create_user(email)

    logger.info("User logged in with email code: id=%s", user.id)
    return user
