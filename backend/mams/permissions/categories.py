# Overview: Permission category constants; a category is the resource a permission acts on.


class PermissionCategory:
    """Permission categories for organization and UI display."""
    DASHBOARD = "DASHBOARD"
    ASSETS = "ASSETS"
    TRANSFERS = "TRANSFERS"
    PURCHASES = "PURCHASES"
    ASSIGNMENTS = "ASSIGNMENTS"
    EXPENDITURES = "EXPENDITURES"
    USERS = "USERS"
    AUDIT = "AUDIT"
