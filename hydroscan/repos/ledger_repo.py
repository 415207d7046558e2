# hydroscan/repos/ledger_repo.py
from sqlalchemy import update
from sqlalchemy.orm import Session

from hydroscan.data.models.hydrocoin import HydroCoinBalanceModel


class LedgerRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_account(self, owner_id: str) -> HydroCoinBalanceModel | None:
        return self.db.get(HydroCoinBalanceModel, owner_id)

    def get_or_create(self, owner_id: str) -> HydroCoinBalanceModel:
        account = self.get_account(owner_id)
        if account is None:
            account = HydroCoinBalanceModel(owner_id=owner_id, balance=0)
            self.db.add(account)
            self.db.flush()
        return account

    def debit_if_covered(self, owner_id: str, amount: int) -> int:
        # balance check and decrement in one UPDATE so a concurrent debit cannot overdraw
        result = self.db.execute(
            update(HydroCoinBalanceModel)
            .where(
                HydroCoinBalanceModel.owner_id == owner_id,
                HydroCoinBalanceModel.balance >= amount,
            )
            .values(balance=HydroCoinBalanceModel.balance - amount)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    def credit(self, owner_id: str, amount: int) -> HydroCoinBalanceModel:
        account = self.get_or_create(owner_id)
        self.db.execute(
            update(HydroCoinBalanceModel)
            .where(HydroCoinBalanceModel.owner_id == owner_id)
            .values(balance=HydroCoinBalanceModel.balance + amount)
            .execution_options(synchronize_session="fetch")
        )
        self.db.refresh(account)
        return account
