"""
Django Signals for provisioning the identity view of a user.

Every new User gets a SchoolProfile. The school domain is taken from the
user's e-mail when it belongs to an approved school, otherwise it stays
null and the user only sees the national wall.

Counters are NOT maintained here: post_save does not fire for
QuerySet.update(), and counter writes need the version check in
wall.ledger anyway.
"""

from django.conf import settings
from django.db.models.signals import post_save
from django.dispatch import receiver

from .identity import school_domain_for_email
from .models import SchoolProfile


@receiver(post_save, sender=settings.AUTH_USER_MODEL)
def create_school_profile(sender, instance, created, **kwargs):
    if created:
        SchoolProfile.objects.get_or_create(
            user=instance,
            defaults={'school_domain': school_domain_for_email(instance.email)}
        )
