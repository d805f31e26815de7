"""Admin screens (Users, Listings, Audit Log) built on rd_table."""

from rd_admin.audit_log import AUDIT_LOG_VIEW, audit_log_table
from rd_admin.listings import LISTINGS_VIEW, listings_table
from rd_admin.sources import load_rows
from rd_admin.users import USERS_VIEW, users_table
from rd_admin.views import AdminTable, AdminView, FilterOption

VIEWS: dict[str, AdminView] = {
    USERS_VIEW.name: USERS_VIEW,
    LISTINGS_VIEW.name: LISTINGS_VIEW,
    AUDIT_LOG_VIEW.name: AUDIT_LOG_VIEW,
}

__all__ = [
    "AUDIT_LOG_VIEW",
    "LISTINGS_VIEW",
    "USERS_VIEW",
    "VIEWS",
    "AdminTable",
    "AdminView",
    "FilterOption",
    "audit_log_table",
    "listings_table",
    "load_rows",
    "users_table",
]
