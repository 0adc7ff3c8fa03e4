from orgportal.models.admin import Admin
from orgportal.models.validation import validate_admin
from orgportal.repositories.base import Repository


class AdminRepository(Repository[Admin]):
    model = Admin

    def validate(self, record: Admin) -> None:
        validate_admin(record)
