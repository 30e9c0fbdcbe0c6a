from dataclasses import dataclass

STAFF_ROLES = frozenset({"employee", "admin"})
ROLES = STAFF_ROLES | {"customer"}


@dataclass(frozen=True)
class Principal:
    """Caller identity as resolved by the auth service."""

    account_id: int
    role: str

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES

    def owns(self, account_id: int) -> bool:
        return self.account_id == account_id
