"""
Super-admin management of employee accounts.
"""

from bidproxy.admin.service import EmployeeAdminService

__all__ = ["EmployeeAdminService"]
