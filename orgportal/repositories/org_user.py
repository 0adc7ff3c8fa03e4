from typing import List, Optional

from orgportal.models.org_user import OrgUser
from orgportal.models.validation import validate_org_user
from orgportal.repositories.base import Repository


class OrgUserRepository(Repository[OrgUser]):
    model = OrgUser

    def validate(self, record: OrgUser) -> None:
        validate_org_user(record)

    def list_by_org(self, org_id: Optional[str] = None, active_only: bool = False,
                    skip: int = 0, limit: int = 100) -> List[OrgUser]:
        query = self.db.query(OrgUser)
        if org_id is not None:
            query = query.filter(OrgUser.org_id == org_id)
        if active_only:
            query = query.filter(OrgUser.status == "Active")
        return query.order_by(OrgUser.created_at).offset(skip).limit(limit).all()
