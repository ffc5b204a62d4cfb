"""
Configuration constants and environment setup.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# =============================================================================
# PATHS
# =============================================================================

PROJECT_ROOT = Path(__file__).parent.parent.parent
DB_PATH = Path(
    os.environ.get("SCHEDULER_DB_PATH", PROJECT_ROOT / "data" / "db" / "scheduler.db")
)
OUTPUT_DIR = PROJECT_ROOT / "output"

# =============================================================================
# SECURITY
# =============================================================================

SECRET_KEY = os.environ.get("SECRET_KEY", "change-me")
TOKEN_ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.environ.get("ACCESS_TOKEN_EXPIRE_MINUTES", "720"))
OTP_EXPIRE_MINUTES = 10
OTP_LENGTH = 6
ALLOW_REGISTRATION = os.environ.get("ALLOW_REGISTRATION", "true").lower() == "true"

# =============================================================================
# ROLES
# =============================================================================

ADMIN_TYPE = "Administrator"
OFFICE_USER_TYPE = "OfficeUser"

# Departments offered even before any roster entry uses them
BASE_DEPARTMENTS = ("SGOD", "CID", "OSDS")

# Only one user may hold each of these types
FIXED_USER_TYPES = (ADMIN_TYPE, "OSDS", "SGOD", "CID")

DASHBOARD_TYPES = FIXED_USER_TYPES

# Types /api/users may create; office logins come from the roster instead
USER_TYPES = FIXED_USER_TYPES

EMPLOYEE_NUMBER_PATTERN = r"^\d{7}$"

# =============================================================================
# SCHEDULING
# =============================================================================

TIMEZONE = os.environ.get("TIMEZONE", "Asia/Manila")
STATUS_REFRESH_SECONDS = int(os.environ.get("STATUS_REFRESH_SECONDS", "60"))
REMINDER_CHECK_SECONDS = int(os.environ.get("REMINDER_CHECK_SECONDS", "60"))
REMINDER_WINDOW_MINUTES = int(os.environ.get("REMINDER_WINDOW_MINUTES", "60"))
ENABLE_SCHEDULER = os.environ.get("ENABLE_SCHEDULER", "true").lower() == "true"

# =============================================================================
# REPORT CONFIGURATION
# =============================================================================

CATEGORY_HEADERS = ["ID Number", "Office", "Email", "Department"]
USER_HEADERS = ["ID", "Employee Number", "Email", "Type"]
EVENT_HEADERS = [
    "ID", "Program", "Start Date", "Start Time", "End Date", "End Time",
    "Purpose", "Participants", "Department", "Status", "Created By", "Created At",
]

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
PDF_MEDIA_TYPE = "application/pdf"

# =============================================================================
# MS GRAPH CREDENTIALS (from environment)
# =============================================================================

GRAPH_TENANT_ID = os.environ.get("MICROSOFT_GRAPH_TENANT_ID", "")
GRAPH_APP_ID = os.environ.get("MICROSOFT_GRAPH_APP_ID", "")
GRAPH_CLIENT_SECRET = os.environ.get("MICROSOFT_GRAPH_CLIENT_SECRET", "")

# Mailbox used as the sender for OTPs, reminders and reports
FROM_EMAIL = os.environ.get("FROM_EMAIL", "")

# =============================================================================
# API CONFIGURATION
# =============================================================================

API_HOST = os.environ.get("API_HOST", "0.0.0.0")
API_PORT = int(os.environ.get("API_PORT", "8081"))
API_DEBUG = os.environ.get("API_DEBUG", "false").lower() == "true"
API_VERSION = "1.0.0"
CORS_ORIGINS = [
    origin.strip()
    for origin in os.environ.get("CORS_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]
