from rest_framework import serializers
from apps.accounts.models import User
from apps.ledger.services.ledger_service import LedgerService
from common.currencies import FIAT_CHOICES


# ============================
# Resolve Serializer
# ============================

class ResolveUserSerializer(serializers.Serializer):
    """
    Input of the get-or-create endpoint.
    The display name is only applied when the user is created.
    """
    external_id = serializers.CharField(max_length=64)
    username = serializers.CharField(max_length=150)


# ============================
# User Serializers
# ============================

class UserSerializer(serializers.ModelSerializer):
    """Serializer for user data."""

    class Meta:
        model = User
        fields = (
            "id",
            "external_id",
            "username",
            "wallet",
            "card_number",
            "card_bank",
            "card_currency",
            "messaging_handle",
            "completed_deals",
            "created_at",
        )
        read_only_fields = fields


class UserProfileSerializer(UserSerializer):
    """User data together with traded volume per currency."""
    volumes = serializers.SerializerMethodField()

    class Meta(UserSerializer.Meta):
        fields = UserSerializer.Meta.fields + ("volumes",)
        read_only_fields = fields

    def get_volumes(self, obj):
        return {
            currency: str(total)
            for currency, total in LedgerService.volumes_by_currency(obj).items()
        }


# ============================
# Requisites Serializer
# ============================

class RequisitesSerializer(serializers.Serializer):
    """
    Partial update of settlement requisites.
    Only the fields present in the payload are written.
    """
    wallet = serializers.CharField(max_length=128, required=False, allow_blank=True, allow_null=True)
    card_number = serializers.CharField(max_length=32, required=False, allow_blank=True, allow_null=True)
    card_bank = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)
    card_currency = serializers.ChoiceField(choices=FIAT_CHOICES, required=False, allow_null=True)
    messaging_handle = serializers.CharField(max_length=64, required=False, allow_blank=True, allow_null=True)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("Provide at least one requisite field.")
        return attrs
