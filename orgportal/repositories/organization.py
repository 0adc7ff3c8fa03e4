from orgportal.models.organization import Organization
from orgportal.models.validation import validate_organization
from orgportal.repositories.base import Repository


class OrganizationRepository(Repository[Organization]):
    model = Organization
    duplicate_message = "VAT number already registered"

    def validate(self, record: Organization) -> None:
        validate_organization(record)
