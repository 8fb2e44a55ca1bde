# Overview: Sidebar navigation entries and the roles that may see them.
# Each entry is defined as: (name, href, icon, roles)

from mams.models.auth import ROLE_ADMIN, ROLE_BASE_COMMANDER, ROLE_LOGISTICS_OFFICER


ALL_ROLES = (ROLE_ADMIN, ROLE_BASE_COMMANDER, ROLE_LOGISTICS_OFFICER)

NAVIGATION = [
    ("Dashboard", "/dashboard", "home", (ROLE_ADMIN,)),
    ("Assets", "/assets", "cube", ALL_ROLES),
    ("Transfers", "/transfers", "truck", ALL_ROLES),
    ("Purchases", "/purchases", "shopping-cart", ALL_ROLES),
    ("Assignments", "/assignments", "user-group", (ROLE_ADMIN, ROLE_BASE_COMMANDER)),
    ("Expenditures", "/expenditures", "archive-box", (ROLE_ADMIN, ROLE_BASE_COMMANDER)),
    ("Users", "/users", "users", (ROLE_ADMIN,)),
    ("Settings", "/settings", "cog", (ROLE_ADMIN,)),
]


def navigation_for_role(role: str | None) -> list[dict]:
    """Navigation entries visible to a role, in menu order."""
    if not role:
        return []
    return [
        {"name": name, "href": href, "icon": icon}
        for name, href, icon, roles in NAVIGATION
        if role in roles
    ]
