"""Domain rules checked before a record is saved."""

from orgportal.core.errors import ValidationError
from orgportal.core.roles import Designation

ADMIN_STATUSES = ("active", "inactive", "deleted")
ORG_STATUSES = ("Active", "Inactive")

VAT_MIN_LENGTH = 5
VAT_MAX_LENGTH = 30


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def validate_admin(admin) -> None:
    if not admin.email:
        raise ValidationError("Email is required")
    if (admin.status or "active") not in ADMIN_STATUSES:
        raise ValidationError(f"Status must be one of: {', '.join(ADMIN_STATUSES)}")


def validate_org_user(user) -> None:
    if not user.email:
        raise ValidationError("Email is required")
    if not user.org_id:
        raise ValidationError("Organization is required")
    if Designation.parse(user.designation or Designation.CASHIER) is None:
        raise ValidationError(f"Designation must be one of: {', '.join(d.value for d in Designation)}")
    if (user.status or "Active") not in ORG_STATUSES:
        raise ValidationError(f"Status must be one of: {', '.join(ORG_STATUSES)}")


def validate_organization(org) -> None:
    if not org.name_en or not org.name_ar:
        raise ValidationError("Organization name is required in English and Arabic")
    if org.vat_no and not VAT_MIN_LENGTH <= len(org.vat_no) <= VAT_MAX_LENGTH:
        raise ValidationError(f"VAT number must be between {VAT_MIN_LENGTH} and {VAT_MAX_LENGTH} characters")
    if (org.status or "Active") not in ORG_STATUSES:
        raise ValidationError(f"Status must be one of: {', '.join(ORG_STATUSES)}")
