from django.db import models
from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.utils import timezone
from .managers import UserManager
from common.currencies import FIAT_CHOICES


# ============================
# User Model
# ============================

class User(AbstractBaseUser, PermissionsMixin):
    """
    Marketplace participant, keyed by the opaque id the client supplies.
    Carries optional settlement requisites and the completed-deal counter.
    Users are never deleted.
    """

    # Identity
    external_id = models.CharField(max_length=64, unique=True, db_index=True)
    username = models.CharField(max_length=150, help_text="Display name, set on first resolution")

    # Settlement requisites
    wallet = models.CharField(max_length=128, blank=True, null=True, help_text="TON wallet address")
    card_number = models.CharField(max_length=32, blank=True, null=True)
    card_bank = models.CharField(max_length=100, blank=True, null=True)
    card_currency = models.CharField(max_length=5, choices=FIAT_CHOICES, blank=True, null=True)
    messaging_handle = models.CharField(
        max_length=64,
        blank=True,
        null=True,
        help_text="Messenger handle used to receive stars"
    )

    # Reputation
    completed_deals = models.PositiveIntegerField(default=0)

    # Account status
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False, help_text="May confirm transitions on behalf of participants")

    # Timestamps
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = "external_id"
    REQUIRED_FIELDS = ["username"]

    objects = UserManager()

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.username} ({self.external_id})"
