"""Action strings guarding the administrative and query operations.

Action strings are opaque to the access core beyond exact comparison; the
``verb:resource`` shape is a naming convention only.
"""

READ_USER = "read:user"
DELETE_USER = "delete:user"

CREATE_ROLE = "create:role"
READ_ROLE = "read:role"
DELETE_ROLE = "delete:role"
ASSIGN_ROLE = "assign:role"

CREATE_PERMISSION = "create:permission"
READ_PERMISSION = "read:permission"
DELETE_PERMISSION = "delete:permission"
ASSIGN_PERMISSION = "assign:permission"

CHECK_ACCESS = "check:access"

# Everything the seeded administrator role is granted.
ADMIN_ACTIONS = (
    READ_USER,
    DELETE_USER,
    CREATE_ROLE,
    READ_ROLE,
    DELETE_ROLE,
    ASSIGN_ROLE,
    CREATE_PERMISSION,
    READ_PERMISSION,
    DELETE_PERMISSION,
    ASSIGN_PERMISSION,
    CHECK_ACCESS,
)

ADMIN_ROLE_NAME = "admin"
