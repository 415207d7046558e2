from sqlalchemy import Column, String, Integer, CheckConstraint

from hydroscan.data.database import Base


class HydroCoinBalanceModel(Base):
    __tablename__ = "hydrocoin_balances"

    owner_id = Column(String(64), primary_key=True)
    balance = Column(Integer, nullable=False, default=0)

    __table_args__ = (CheckConstraint("balance >= 0", name="ck_hydrocoin_non_negative"),)
