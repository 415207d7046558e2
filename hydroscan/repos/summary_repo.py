# hydroscan/repos/summary_repo.py
from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session

from hydroscan.data.models.daily_summary import DailySummaryModel, RolloverStateModel


class SummaryRepo:
    def __init__(self, db: Session):
        self.db = db

    def get(self, owner_id: str, day: date) -> DailySummaryModel | None:
        stmt = select(DailySummaryModel).where(
            DailySummaryModel.owner_id == owner_id,
            DailySummaryModel.date == day,
        )
        return self.db.execute(stmt).scalars().first()

    def exists(self, owner_id: str, day: date) -> bool:
        return self.get(owner_id, day) is not None

    def list_for_owner(self, owner_id: str) -> list[DailySummaryModel]:
        stmt = (
            select(DailySummaryModel)
            .where(DailySummaryModel.owner_id == owner_id)
            .order_by(DailySummaryModel.date.desc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def add(self, row: DailySummaryModel) -> DailySummaryModel:
        self.db.add(row)
        self.db.flush()
        return row

    def delete(self, row: DailySummaryModel) -> None:
        self.db.delete(row)
        self.db.flush()

    def get_last_processed(self, owner_id: str) -> date | None:
        state = self.db.get(RolloverStateModel, owner_id)
        return state.last_processed_date if state else None

    def set_last_processed(self, owner_id: str, day: date) -> None:
        state = self.db.get(RolloverStateModel, owner_id)
        if state is None:
            state = RolloverStateModel(owner_id=owner_id)
            self.db.add(state)
        state.last_processed_date = day
        self.db.flush()
