"""AdminPolicy — the admin allowlist as an explicit, injected value.

Built once from configuration (ADMIN_EMAILS) and handed to whoever needs to
gate admin actions. An empty allowlist means nobody is an admin.
"""

from dataclasses import dataclass

from src.dx_common.errors import NotAdminError


@dataclass(frozen=True)
class AdminPolicy:
    admin_emails: frozenset[str]

    @classmethod
    def from_csv(cls, raw: str) -> "AdminPolicy":
        emails = {e.strip().lower() for e in raw.split(",") if e.strip()}
        return cls(admin_emails=frozenset(emails))

    def is_admin(self, email: str | None) -> bool:
        if not email:
            return False
        return email.strip().lower() in self.admin_emails

    def ensure_admin(self, email: str | None) -> None:
        if not self.is_admin(email):
            raise NotAdminError()
