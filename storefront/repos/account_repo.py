from sqlalchemy.orm import Session
from storefront.data.models.account import AccountModel


class AccountRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_account(self, account_id: int) -> AccountModel | None:
        return self.db.get(AccountModel, account_id)
