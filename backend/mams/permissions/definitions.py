# Overview: All permission definitions organized by category.
# Each permission is defined as: (code, name, description, category)

from .categories import PermissionCategory


# -- DASHBOARD --

DASHBOARD_PERMISSIONS = [
    (
        "VIEW_DASHBOARD",
        "View Dashboard",
        "View summary statistics, asset detail and per-base dashboards",
        PermissionCategory.DASHBOARD,
    ),
]


# -- ASSETS --

ASSET_PERMISSIONS = [
    (
        "VIEW_ASSETS",
        "View Assets",
        "List and view assets and their balances",
        PermissionCategory.ASSETS,
    ),
    (
        "CREATE_ASSETS",
        "Create Assets",
        "Register a new asset with an opening balance",
        PermissionCategory.ASSETS,
    ),
    (
        "UPDATE_ASSETS",
        "Update Assets",
        "Edit asset name, type and description",
        PermissionCategory.ASSETS,
    ),
]


# -- TRANSFERS --

TRANSFER_PERMISSIONS = [
    (
        "VIEW_TRANSFERS",
        "View Transfers",
        "List and view inter-base transfers",
        PermissionCategory.TRANSFERS,
    ),
    (
        "CREATE_TRANSFERS",
        "Create Transfers",
        "Request a transfer of stock between bases",
        PermissionCategory.TRANSFERS,
    ),
    (
        "APPROVE_TRANSFERS",
        "Approve Transfers",
        "Complete or cancel pending transfers",
        PermissionCategory.TRANSFERS,
    ),
]


# -- PURCHASES --

PURCHASE_PERMISSIONS = [
    (
        "VIEW_PURCHASES",
        "View Purchases",
        "List and view purchases",
        PermissionCategory.PURCHASES,
    ),
    (
        "CREATE_PURCHASES",
        "Create Purchases",
        "Record a purchase request",
        PermissionCategory.PURCHASES,
    ),
    (
        "APPROVE_PURCHASES",
        "Approve Purchases",
        "Approve or cancel pending purchases",
        PermissionCategory.PURCHASES,
    ),
]


# -- ASSIGNMENTS --

ASSIGNMENT_PERMISSIONS = [
    (
        "VIEW_ASSIGNMENTS",
        "View Assignments",
        "List and view assignments to personnel",
        PermissionCategory.ASSIGNMENTS,
    ),
    (
        "MANAGE_ASSIGNMENTS",
        "Manage Assignments",
        "Assign stock to personnel and record returns",
        PermissionCategory.ASSIGNMENTS,
    ),
]


# -- EXPENDITURES --

EXPENDITURE_PERMISSIONS = [
    (
        "VIEW_EXPENDITURES",
        "View Expenditures",
        "List and view expenditures",
        PermissionCategory.EXPENDITURES,
    ),
    (
        "CREATE_EXPENDITURES",
        "Create Expenditures",
        "Record consumed or written-off stock",
        PermissionCategory.EXPENDITURES,
    ),
]


# -- USERS --

USER_PERMISSIONS = [
    (
        "VIEW_USERS",
        "View Users",
        "List and view user accounts",
        PermissionCategory.USERS,
    ),
    (
        "MANAGE_USERS",
        "Manage Users",
        "Register, edit, deactivate and reactivate user accounts",
        PermissionCategory.USERS,
    ),
]


# -- AUDIT --

AUDIT_PERMISSIONS = [
    (
        "VIEW_ACTIVITY_LOGS",
        "View Activity Logs",
        "Read the activity audit trail",
        PermissionCategory.AUDIT,
    ),
]


# All permissions in definition order
PERMISSION_DEFINITIONS = (
    DASHBOARD_PERMISSIONS
    + ASSET_PERMISSIONS
    + TRANSFER_PERMISSIONS
    + PURCHASE_PERMISSIONS
    + ASSIGNMENT_PERMISSIONS
    + EXPENDITURE_PERMISSIONS
    + USER_PERMISSIONS
    + AUDIT_PERMISSIONS
)
