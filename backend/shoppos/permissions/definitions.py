# Overview: All permission definitions organized by category.
# Each permission is defined as: (code, name, description, category)

from .categories import PermissionCategory


# -- INVENTORY --

INVENTORY_PERMISSIONS = [
    (
        "VIEW_PRODUCTS",
        "View Products",
        "View the product catalogue, prices and stock levels",
        PermissionCategory.INVENTORY,
    ),
    (
        "MANAGE_PRODUCTS",
        "Manage Products",
        "Create, edit and delete products",
        PermissionCategory.INVENTORY,
    ),
]


# -- SALES --

SALES_PERMISSIONS = [
    (
        "CREATE_SALE",
        "Create Sale",
        "Ring up sales at the register",
        PermissionCategory.SALES,
    ),
    (
        "VIEW_SALES",
        "View Sales",
        "View sales history (own sales only without VIEW_ALL_SALES)",
        PermissionCategory.SALES,
    ),
    (
        "VIEW_ALL_SALES",
        "View All Sales",
        "View every cashier's sales, including unattributed ones",
        PermissionCategory.SALES,
    ),
]


# -- USERS --

USER_PERMISSIONS = [
    (
        "MANAGE_USERS",
        "Manage Users",
        "Create accounts with any role",
        PermissionCategory.USERS,
    ),
]


PERMISSION_DEFINITIONS = INVENTORY_PERMISSIONS + SALES_PERMISSIONS + USER_PERMISSIONS


# Admin has every permission; cashiers run the register.
DEFAULT_ROLE_PERMISSIONS = {
    "admin": [perm[0] for perm in PERMISSION_DEFINITIONS],
    "cashier": [
        "VIEW_PRODUCTS",
        "CREATE_SALE",
        "VIEW_SALES",
    ],
}
