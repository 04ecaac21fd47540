"""
Access Guard

Role transition policy layered on the store's user-mutation path.

CRITICAL: An admin can never be demoted while they are the only admin.
This keeps administrative capability from being locked out entirely.

NOTE: Deleting a user is NOT guarded here. See LedgerStore.delete_user.
"""

from collections.abc import Iterable

from zenith.models.entities import Role, User
from zenith.store.errors import LastAdminProtectedError


def admin_count(users: Iterable[User]) -> int:
    """Number of users with the admin role."""
    return sum(1 for user in users if user.role == Role.ADMIN)


def is_last_admin(users: Iterable[User], user_id: str) -> bool:
    """True if user_id is an admin and no other admin exists."""
    users = list(users)
    return admin_count(users) == 1 and any(
        u.id == user_id and u.role == Role.ADMIN for u in users
    )


def ensure_role_transition_allowed(
    users: Iterable[User],
    user: User,
    new_role: Role,
) -> None:
    """
    Check a role change against the last-admin rule.

    Admin -> User is rejected when the user is the only admin left.
    User -> Admin, Admin -> Admin and User -> User always pass.

    Raises:
        LastAdminProtectedError: If the demotion would leave no admin
    """
    if user.role == Role.ADMIN and new_role == Role.USER:
        if admin_count(users) <= 1:
            raise LastAdminProtectedError(
                f"Cannot demote the last admin: {user.email}"
            )
