from domain.model.user import User, UserView


def to_view(user: User) -> UserView:
    """Project a User to its outward view (no password hash, no soft-delete flag)."""
    return UserView(
        id=user.id,
        full_name=user.full_name,
        display_name=user.display_name,
        email=user.email,
        phone_number=user.phone_number,
        role=user.role,
        status=user.status,
        created_at=user.created_at,
    )
