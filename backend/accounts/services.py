from accounts.models import User


def get_role(user) -> str | None:
    """Effective role of ``user``; superusers count as admins, anonymous users have none."""
    if user is None or not user.is_authenticated:
        return None
    if user.is_superuser:
        return User.ROLE_ADMIN
    return user.role
