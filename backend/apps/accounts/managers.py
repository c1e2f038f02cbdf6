from django.contrib.auth.base_user import BaseUserManager


class UserManager(BaseUserManager):
    """
    Manager for users identified by an external id.
    Regular marketplace users have no password.
    """

    def create_user(self, external_id, username, password=None, **extra_fields):

        if not external_id:
            raise ValueError("External id is required")

        user = self.model(
            external_id=str(external_id),
            username=username,
            **extra_fields
        )

        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)

        return user

    def create_superuser(self, external_id, username, password=None, **extra_fields):

        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)

        if not extra_fields.get("is_staff"):
            raise ValueError("Superuser must be staff")

        if not extra_fields.get("is_superuser"):
            raise ValueError("Superuser must be superuser")

        return self.create_user(external_id, username, password, **extra_fields)
