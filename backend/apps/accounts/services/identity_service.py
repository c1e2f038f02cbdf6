"""
Identity service - maps client-supplied external ids to users.
"""
import logging
from typing import Tuple
from django.db import IntegrityError, transaction
from apps.accounts.models import User
from common.exceptions import UserNotFound, ValidationError

logger = logging.getLogger('accounts')


class IdentityService:
    """
    Get-or-create for users and requisite management.
    The unique constraint on external_id decides concurrent first calls.
    """

    REQUISITE_FIELDS = (
        'wallet',
        'card_number',
        'card_bank',
        'card_currency',
        'messaging_handle',
    )

    @staticmethod
    def resolve_or_create(external_id: str, username: str) -> Tuple[User, bool]:
        """
        Return the user for external_id, creating it on first sight.

        The display name is only used on creation; repeat calls never
        rename an existing user.

        Returns:
            (user, created)
        """
        external_id = str(external_id)

        user = User.objects.filter(external_id=external_id).first()
        if user is not None:
            return user, False

        try:
            with transaction.atomic():
                user = User.objects.create_user(external_id=external_id, username=username)
        except IntegrityError:
            # A concurrent first call inserted the row between our read and write
            logger.info(f"Concurrent identity resolution for {external_id}, using existing user")
            return User.objects.get(external_id=external_id), False

        logger.info(f"New user created: {username} ({external_id})")
        return user, True

    @staticmethod
    def get_by_external_id(external_id: str) -> User:
        """
        Raises:
            UserNotFound: If no user has this external id
        """
        try:
            return User.objects.get(external_id=str(external_id))
        except User.DoesNotExist:
            raise UserNotFound()

    @classmethod
    @transaction.atomic
    def update_requisites(cls, external_id: str, **fields) -> User:
        """
        Update any subset of the user's settlement requisites.

        Args:
            external_id: User to update
            **fields: Requisite fields to set (unknown keys are rejected)

        Returns:
            Updated user

        Raises:
            ValidationError: If no requisite field is given
            UserNotFound: If the user does not exist
        """
        unknown = set(fields) - set(cls.REQUISITE_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown requisite fields: {', '.join(sorted(unknown))}")
        if not fields:
            raise ValidationError("No requisites to update.")

        try:
            user = User.objects.select_for_update().get(external_id=str(external_id))
        except User.DoesNotExist:
            raise UserNotFound()

        for name, value in fields.items():
            setattr(user, name, value)
        user.save(update_fields=[*fields, 'updated_at'])

        logger.info(f"Requisites updated for {user.external_id}: {', '.join(sorted(fields))}")
        return user
