# Role capabilities with inheritance support
ROLE_PERMISSIONS = {
    "subscriber": ["read"],
    "author": ["edit_posts"],
    "editor": ["edit_others_posts"],
    "admin": ["*"],  # Admin has unrestricted access
}

# Each role inherits the capabilities of the role it extends
ROLE_INHERITANCE = {
    "author": "subscriber",
    "editor": "author",
}


def get_role_permissions(role: str) -> list:
    """
    Returns the capabilities for a given role, including inherited ones.
    """
    if role not in ROLE_PERMISSIONS:
        raise ValueError(f"Invalid role: {role}")

    permissions = set(ROLE_PERMISSIONS[role])
    parent = ROLE_INHERITANCE.get(role)
    while parent:
        permissions.update(ROLE_PERMISSIONS[parent])
        parent = ROLE_INHERITANCE.get(parent)

    return list(permissions)
