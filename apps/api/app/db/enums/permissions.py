"""Role permission helper sets."""

from app.db.enums.auth import Role

# Community admins (announcements, approvals, event management, pass scanning)
ROLES_ADMIN = {Role.ADMIN, Role.SUPERADMIN}

# Roles that can manage residents and assign roles
ROLES_SUPERADMIN = {Role.SUPERADMIN}

# Roles that can register and search visitors and see every visitor
ROLES_CAN_MANAGE_VISITORS = {Role.ADMIN, Role.SUPERADMIN, Role.SECURITY}

# Roles that can see every issue and close issues
ROLES_CAN_MANAGE_ISSUES = {Role.FACILITY_MANAGER, Role.ADMIN, Role.SUPERADMIN}

# Roles with access to the task board
ROLES_CAN_ACCESS_TASKS = {Role.FACILITY_MANAGER, Role.ADMIN, Role.SUPERADMIN}

# Roles a superadmin may assign when creating a resident directly
ROLES_ASSIGNABLE_ON_CREATE = {Role.RESIDENT, Role.ADMIN, Role.SECURITY}

# Roles a superadmin may assign via the roles endpoint
ROLES_ASSIGNABLE = {Role.RESIDENT, Role.ADMIN, Role.SECURITY, Role.FACILITY_MANAGER}
