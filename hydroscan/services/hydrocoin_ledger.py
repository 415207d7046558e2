# hydroscan/services/hydrocoin_ledger.py
from sqlalchemy.orm import Session

from hydroscan.data.database import transaction
from hydroscan.domain.errors import InsufficientBalance, ValidationError
from hydroscan.repos.interfaces import LedgerRepository
from hydroscan.repos.ledger_repo import LedgerRepo
from hydroscan.utils.logging import get_logger

logger = get_logger(__name__)


class HydroCoinLedger:
    """
    Per-user loyalty balance. One coin offsets one peso of an order total.

    debit is all or nothing and reports a shortfall as False; the balance
    never goes below zero.
    """

    def __init__(self, db: Session, repo: LedgerRepository | None = None):
        self.db = db
        self.repo = repo or LedgerRepo(db)

    def balance(self, owner_id: str) -> int:
        account = self.repo.get_account(owner_id)
        return account.balance if account else 0

    def debit(self, owner_id: str, amount: int) -> bool:
        if amount < 0:
            logger.info(f"Rejected negative HydroCoin debit of {amount} for user {owner_id}")
            return False
        try:
            with transaction(self.db):
                self.apply_debit(owner_id, amount)
        except InsufficientBalance as e:
            logger.info(str(e))
            return False
        return True

    def credit(self, owner_id: str, amount: int) -> int:
        if amount < 0:
            raise ValidationError("Credit amount must not be negative")
        with transaction(self.db):
            account = self.repo.credit(owner_id, amount)
        logger.info(f"Credited {amount} HydroCoins to user {owner_id}, balance {account.balance}")
        return account.balance

    # runs inside the caller's transaction (order submission)
    def apply_debit(self, owner_id: str, amount: int) -> None:
        if amount < 0:
            raise ValidationError("Debit amount must not be negative")
        if amount == 0:
            return
        if self.repo.debit_if_covered(owner_id, amount) == 0:
            raise InsufficientBalance(owner_id, amount, self.balance(owner_id))
        logger.info(f"Debited {amount} HydroCoins from user {owner_id}")
