"""Data access layer for investors, units, transactions and payouts"""

import logging
import uuid
from datetime import date
from typing import Dict, List, Optional, Tuple
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload
from armada_ledger.infrastructure.database.models import (
    ActivityLog,
    Cost,
    Investor,
    PaymentHistory,
    ProfitSharing,
    Transaction,
    Unit,
)
from armada_ledger.domain import models as domain
from armada_ledger.domain.models import InvestorSnapshot, ProfitSplit, TransactionStatus, UnitStatus

logger = logging.getLogger(__name__)


def to_domain_investor(row: Investor) -> domain.Investor:
    return domain.Investor(
        id=str(row.id),
        name=row.name,
        margin_percentage=row.margin_percentage,
        contact_info=row.contact_info,
        bank_account_details=row.bank_account_details,
        notes=row.notes,
        user_id=row.user_id,
    )


def to_domain_transaction(row: Transaction, with_details: bool = True) -> domain.Transaction:
    """Map an ORM transaction; costs and profit sharing only when already loaded"""
    profit_sharing = None
    costs = []
    if with_details:
        ps = row.profit_sharing
        if ps is not None:
            profit_sharing = domain.ProfitSharing(
                total_capital_investor=ps.total_capital_investor,
                total_capital_manager=ps.total_capital_manager,
                total_capital=ps.total_capital,
                net_margin=ps.net_margin,
                investor_share_percentage=ps.investor_share_percentage,
                manager_share_percentage=ps.manager_share_percentage,
                investor_profit_amount=ps.investor_profit_amount,
                manager_profit_amount=ps.manager_profit_amount,
            )
        costs = [to_domain_cost(c) for c in row.costs]

    return domain.Transaction(
        id=str(row.id),
        unit_id=str(row.unit_id),
        transaction_code=row.transaction_code,
        status=row.status,
        buy_price=row.buy_price,
        buy_date=row.buy_date,
        initial_investor_capital=row.initial_investor_capital,
        sell_price=row.sell_price,
        sell_date=row.sell_date,
        payment_status=row.payment_status,
        profit_sharing=profit_sharing,
        costs=costs,
    )


def to_domain_cost(row: Cost) -> domain.Cost:
    return domain.Cost(cost_type=row.cost_type, payer=row.payer, amount=row.amount, description=row.description)


def to_domain_unit(row: Unit, with_transactions: bool = False) -> domain.Unit:
    return domain.Unit(
        id=str(row.id),
        investor_id=str(row.investor_id),
        name=row.name,
        code=row.code,
        plate_number=row.plate_number,
        status=row.status,
        transactions=[to_domain_transaction(t, with_details=False) for t in row.transactions]
        if with_transactions
        else [],
    )


class InvestorRepository:
    """Repository for investors and the dashboard snapshot"""

    def __init__(self, db: Session):
        self.db = db

    def list_investors(self) -> List[Investor]:
        return self.db.query(Investor).order_by(Investor.created_at.desc()).all()

    def get_investor(self, investor_id: uuid.UUID) -> Optional[Investor]:
        return self.db.query(Investor).filter(Investor.id == investor_id).first()

    def get_by_user_id(self, user_id: str) -> Optional[Investor]:
        """Investor linked to a login identity, if any"""
        return self.db.query(Investor).filter(Investor.user_id == user_id).first()

    def create_investor(self, **fields) -> Investor:
        db_investor = Investor(**fields)
        self.db.add(db_investor)
        self.db.flush()
        return db_investor

    def update_investor(self, db_investor: Investor, **fields) -> Investor:
        for name, value in fields.items():
            setattr(db_investor, name, value)
        self.db.flush()
        return db_investor

    def load_investor_snapshot(self, investor_id: uuid.UUID) -> Optional[InvestorSnapshot]:
        """
        Read everything the dashboard aggregation needs for one investor.

        Issues independent queries (investor + AVAILABLE units + payments,
        transactions with profit sharing and costs, all units with their
        transactions, unit count); they are not wrapped in one snapshot
        transaction.
        """
        db_investor = (
            self.db.query(Investor)
            .options(selectinload(Investor.payment_histories))
            .populate_existing()
            .filter(Investor.id == investor_id)
            .first()
        )
        if db_investor is None:
            return None

        active_units = (
            self.db.query(Unit)
            .filter(Unit.investor_id == investor_id, Unit.status == UnitStatus.AVAILABLE.value)
            .all()
        )

        transactions = (
            self.db.query(Transaction)
            .join(Unit, Transaction.unit_id == Unit.id)
            .filter(Unit.investor_id == investor_id)
            .options(selectinload(Transaction.profit_sharing), selectinload(Transaction.costs))
            .populate_existing()
            .order_by(Transaction.created_at)
            .all()
        )

        all_units = (
            self.db.query(Unit)
            .filter(Unit.investor_id == investor_id)
            .options(selectinload(Unit.transactions))
            .populate_existing()
            .all()
        )

        total_units_count = self.db.query(func.count(Unit.id)).filter(Unit.investor_id == investor_id).scalar()

        return InvestorSnapshot(
            investor=to_domain_investor(db_investor),
            active_units=[to_domain_unit(u) for u in active_units],
            payments=[
                domain.Payment(amount=p.amount, payment_date=p.payment_date, method=p.method)
                for p in db_investor.payment_histories
            ],
            transactions=[to_domain_transaction(t) for t in transactions],
            units=[to_domain_unit(u, with_transactions=True) for u in all_units],
            total_units_count=total_units_count or 0,
        )

    def load_report_units(self, investor_id: uuid.UUID) -> Optional[Investor]:
        """Investor with units, transactions, costs, profit sharing and payments eagerly loaded"""
        return (
            self.db.query(Investor)
            .options(
                selectinload(Investor.units)
                .selectinload(Unit.transactions)
                .selectinload(Transaction.costs),
                selectinload(Investor.units)
                .selectinload(Unit.transactions)
                .selectinload(Transaction.profit_sharing),
                selectinload(Investor.units)
                .selectinload(Unit.transactions)
                .selectinload(Transaction.payment_histories),
            )
            .populate_existing()
            .filter(Investor.id == investor_id)
            .first()
        )

    def investor_overview(self) -> List[Dict]:
        """Per-investor counts and sums over completed transactions"""
        investors = (
            self.db.query(Investor)
            .options(
                selectinload(Investor.units)
                .selectinload(Unit.transactions)
                .selectinload(Transaction.profit_sharing)
            )
            .populate_existing()
            .all()
        )

        overview = []
        for inv in investors:
            active_units = 0
            completed = 0
            profit = 0
            capital = 0
            for unit in inv.units:
                if unit.status == UnitStatus.AVAILABLE.value:
                    active_units += 1
                for txn in unit.transactions:
                    if txn.status != TransactionStatus.COMPLETED.value:
                        continue
                    completed += 1
                    if txn.profit_sharing:
                        profit += txn.profit_sharing.investor_profit_amount
                        capital += txn.profit_sharing.total_capital_investor
            overview.append(
                {
                    "id": str(inv.id),
                    "name": inv.name,
                    "active_units": active_units,
                    "completed_transactions": completed,
                    "total_profit": profit,
                    "total_capital": capital,
                }
            )
        return overview


class UnitRepository:
    """Repository for vehicle units"""

    def __init__(self, db: Session):
        self.db = db

    def list_units(self) -> List[Unit]:
        return (
            self.db.query(Unit)
            .options(selectinload(Unit.investor))
            .order_by(Unit.created_at.desc())
            .all()
        )

    def get_unit(self, unit_id: uuid.UUID) -> Optional[Unit]:
        return self.db.query(Unit).filter(Unit.id == unit_id).first()

    def create_unit(self, **fields) -> Unit:
        db_unit = Unit(**fields)
        self.db.add(db_unit)
        self.db.flush()
        return db_unit

    def update_unit(self, db_unit: Unit, **fields) -> Unit:
        for key, value in fields.items():
            setattr(db_unit, key, value)
        self.db.flush()
        return db_unit

    def delete_unit(self, db_unit: Unit) -> None:
        self.db.delete(db_unit)
        self.db.flush()

    def delete_units(self, unit_ids: List[uuid.UUID]) -> int:
        units = self.db.query(Unit).filter(Unit.id.in_(unit_ids)).all()
        for unit in units:
            self.db.delete(unit)
        self.db.flush()
        return len(units)

    def latest_code(self) -> Optional[str]:
        return self.db.query(Unit.code).order_by(Unit.code.desc()).limit(1).scalar()

    def count_available(self, investor_id: Optional[uuid.UUID] = None) -> int:
        query = self.db.query(func.count(Unit.id)).filter(Unit.status == UnitStatus.AVAILABLE.value)
        if investor_id:
            query = query.filter(Unit.investor_id == investor_id)
        return query.scalar() or 0

    def status_distribution(self, investor_id: Optional[uuid.UUID] = None) -> List[Tuple[str, int]]:
        query = self.db.query(Unit.status, func.count(Unit.id))
        if investor_id:
            query = query.filter(Unit.investor_id == investor_id)
        return [(status, count) for status, count in query.group_by(Unit.status).all()]

    def tax_due_between(self, start: date, end: date) -> List[Unit]:
        """AVAILABLE units whose tax falls due in [start, end], soonest first"""
        return (
            self.db.query(Unit)
            .options(selectinload(Unit.investor))
            .filter(
                Unit.status == UnitStatus.AVAILABLE.value,
                Unit.tax_due_date >= start,
                Unit.tax_due_date <= end,
            )
            .order_by(Unit.tax_due_date.asc())
            .all()
        )


class TransactionRepository:
    """Repository for unit transactions and their profit sharing"""

    def __init__(self, db: Session):
        self.db = db

    def _with_details(self):
        return self.db.query(Transaction).options(
            selectinload(Transaction.unit).selectinload(Unit.investor),
            selectinload(Transaction.costs),
            selectinload(Transaction.profit_sharing),
            selectinload(Transaction.payment_histories),
        ).populate_existing()

    def list_transactions(self, status: Optional[str] = None) -> List[Transaction]:
        query = self._with_details()
        if status:
            query = query.filter(Transaction.status == status)
        return query.order_by(Transaction.created_at.desc()).all()

    def get_transaction(self, transaction_id: uuid.UUID) -> Optional[Transaction]:
        return self._with_details().filter(Transaction.id == transaction_id).first()

    def get_active_for_unit(self, unit_id: uuid.UUID) -> Optional[Transaction]:
        return (
            self.db.query(Transaction)
            .filter(Transaction.unit_id == unit_id, Transaction.status == TransactionStatus.ON_PROCESS.value)
            .first()
        )

    def create_transaction(self, **fields) -> Transaction:
        db_transaction = Transaction(status=TransactionStatus.ON_PROCESS.value, **fields)
        self.db.add(db_transaction)
        self.db.flush()
        return db_transaction

    def delete_transactions(self, transaction_ids: List[uuid.UUID]) -> int:
        rows = self.db.query(Transaction).filter(Transaction.id.in_(transaction_ids)).all()
        for row in rows:
            self.db.delete(row)
        self.db.flush()
        return len(rows)

    def set_payment_status(self, transaction_ids: List[uuid.UUID], payment_status: str) -> int:
        updated = (
            self.db.query(Transaction)
            .filter(Transaction.id.in_(transaction_ids))
            .update({Transaction.payment_status: payment_status}, synchronize_session="fetch")
        )
        return updated

    def latest_code(self) -> Optional[str]:
        return (
            self.db.query(Transaction.transaction_code)
            .order_by(Transaction.transaction_code.desc())
            .limit(1)
            .scalar()
        )

    def complete_sale(
        self,
        db_transaction: Transaction,
        sell_date: date,
        sell_price: float,
        split: ProfitSplit,
        investor_pct: float,
        manager_pct: float,
        loss_bearer: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> ProfitSharing:
        """Mark transaction COMPLETED, its unit SOLD and record the split (caller commits)"""
        db_transaction.status = TransactionStatus.COMPLETED.value
        db_transaction.sell_date = sell_date
        db_transaction.sell_price = sell_price
        db_transaction.profit_status = split.profit_status
        db_transaction.loss_bearer = loss_bearer
        if notes is not None:
            db_transaction.notes = notes
        db_transaction.unit.status = UnitStatus.SOLD.value
        return self._attach_profit_sharing(db_transaction, split, investor_pct, manager_pct)

    def _attach_profit_sharing(
        self, db_transaction: Transaction, split: ProfitSplit, investor_pct: float, manager_pct: float
    ) -> ProfitSharing:
        db_profit_sharing = ProfitSharing(
            transaction_id=db_transaction.id,
            total_capital_investor=split.total_capital_investor,
            total_capital_manager=split.total_capital_manager,
            total_capital=split.total_capital,
            net_margin=split.net_margin,
            investor_share_percentage=investor_pct,
            manager_share_percentage=manager_pct,
            investor_profit_amount=split.investor_profit_amount,
            manager_profit_amount=split.manager_profit_amount,
        )
        db_transaction.profit_sharing = db_profit_sharing
        self.db.flush()
        return db_profit_sharing

    def _drop_profit_sharing(self, db_transaction: Transaction) -> None:
        if db_transaction.profit_sharing is not None:
            # Flushed before any replacement row: transaction_id is unique
            self.db.delete(db_transaction.profit_sharing)
            db_transaction.profit_sharing = None
            self.db.flush()

    def update_transaction(self, db_transaction: Transaction, **fields) -> Transaction:
        """Apply edited detail fields (caller commits)"""
        for key, value in fields.items():
            setattr(db_transaction, key, value)
        self.db.flush()
        return db_transaction

    def mark_completed(
        self, db_transaction: Transaction, split: ProfitSplit, investor_pct: float, manager_pct: float
    ) -> ProfitSharing:
        """Status edit to COMPLETED: unit SOLD, any earlier split replaced"""
        self._drop_profit_sharing(db_transaction)
        db_transaction.status = TransactionStatus.COMPLETED.value
        db_transaction.profit_status = split.profit_status
        db_transaction.unit.status = UnitStatus.SOLD.value
        return self._attach_profit_sharing(db_transaction, split, investor_pct, manager_pct)

    def reopen(self, db_transaction: Transaction) -> None:
        """Status edit back to ON_PROCESS: split removed, unit AVAILABLE again"""
        self._drop_profit_sharing(db_transaction)
        db_transaction.status = TransactionStatus.ON_PROCESS.value
        db_transaction.profit_status = None
        db_transaction.unit.status = UnitStatus.AVAILABLE.value
        self.db.flush()

    def delete_transaction(self, db_transaction: Transaction) -> None:
        """Delete one transaction with its costs and split; its unit becomes AVAILABLE"""
        db_unit = db_transaction.unit
        self.db.delete(db_transaction)
        if db_unit is not None:
            db_unit.status = UnitStatus.AVAILABLE.value
        self.db.flush()

    def count_completed(self, investor_id: Optional[uuid.UUID] = None) -> int:
        query = self.db.query(func.count(Transaction.id)).filter(
            Transaction.status == TransactionStatus.COMPLETED.value
        )
        if investor_id:
            query = query.select_from(Transaction).join(Unit, Transaction.unit_id == Unit.id).filter(
                Unit.investor_id == investor_id
            )
        return query.scalar() or 0

    def recent(self, limit: int = 5, investor_id: Optional[uuid.UUID] = None) -> List[Transaction]:
        query = self.db.query(Transaction).options(selectinload(Transaction.unit))
        if investor_id:
            query = query.select_from(Transaction).join(Unit, Transaction.unit_id == Unit.id).filter(
                Unit.investor_id == investor_id
            )
        return query.order_by(Transaction.created_at.desc()).limit(limit).all()

    def capital_deployed(self, investor_id: Optional[uuid.UUID] = None) -> float:
        """Investor capital tied up in ON_PROCESS transactions"""
        query = self.db.query(Transaction.buy_price, Transaction.initial_investor_capital).filter(
            Transaction.status == TransactionStatus.ON_PROCESS.value
        )
        if investor_id:
            query = query.select_from(Transaction).join(Unit, Transaction.unit_id == Unit.id).filter(
                Unit.investor_id == investor_id
            )
        return sum(
            capital if capital is not None else buy_price for buy_price, capital in query.all()
        )

    def profit_totals(self, investor_id: Optional[uuid.UUID] = None) -> Tuple[float, float, float]:
        """(net margin, investor profit, manager profit) summed over all profit sharing records"""
        query = self.db.query(
            func.coalesce(func.sum(ProfitSharing.net_margin), 0),
            func.coalesce(func.sum(ProfitSharing.investor_profit_amount), 0),
            func.coalesce(func.sum(ProfitSharing.manager_profit_amount), 0),
        )
        if investor_id:
            query = (
                query.select_from(ProfitSharing)
                .join(Transaction, ProfitSharing.transaction_id == Transaction.id)
                .join(Unit, Transaction.unit_id == Unit.id)
                .filter(Unit.investor_id == investor_id)
            )
        net_margin, investor_profit, manager_profit = query.one()
        return net_margin, investor_profit, manager_profit


class CostRepository:
    """Repository for transaction costs"""

    def __init__(self, db: Session):
        self.db = db

    def create_cost(self, transaction_id: uuid.UUID, **fields) -> Cost:
        db_cost = Cost(transaction_id=transaction_id, **fields)
        self.db.add(db_cost)
        self.db.flush()
        return db_cost

    def get_cost(self, transaction_id: uuid.UUID, cost_id: uuid.UUID) -> Optional[Cost]:
        return (
            self.db.query(Cost)
            .filter(Cost.id == cost_id, Cost.transaction_id == transaction_id)
            .first()
        )

    def update_cost(self, db_cost: Cost, **fields) -> Cost:
        for key, value in fields.items():
            setattr(db_cost, key, value)
        self.db.flush()
        return db_cost

    def delete_cost(self, db_cost: Cost) -> None:
        self.db.delete(db_cost)
        self.db.flush()


class PaymentRepository:
    """Repository for investor payouts"""

    def __init__(self, db: Session):
        self.db = db

    def create_payment(self, **fields) -> PaymentHistory:
        db_payment = PaymentHistory(**fields)
        self.db.add(db_payment)
        self.db.flush()
        return db_payment

    def total_paid(self, transaction_id: uuid.UUID) -> float:
        total = (
            self.db.query(func.coalesce(func.sum(PaymentHistory.amount), 0))
            .filter(PaymentHistory.transaction_id == transaction_id)
            .scalar()
        )
        return total or 0


class ActivityLogRepository:
    """Repository for the audit trail"""

    def __init__(self, db: Session):
        self.db = db

    def record(
        self,
        action: str,
        entity: str,
        entity_id: str,
        details: str,
        user_id: Optional[str] = None,
        user_name: Optional[str] = None,
    ) -> Optional[ActivityLog]:
        """
        Append an audit entry and commit it.

        A failed write is logged and rolled back instead of failing the
        action that triggered it.
        """
        entry = ActivityLog(
            action=action,
            entity=entity,
            entity_id=entity_id,
            details=details,
            user_id=user_id or "SYSTEM",
            user_name=user_name or ("System" if not user_id else None),
        )
        try:
            self.db.add(entry)
            self.db.commit()
            return entry
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to log activity: {e}", extra={"entity": entity, "entity_id": entity_id})
            return None

    def recent(self, limit: int = 50) -> List[ActivityLog]:
        return self.db.query(ActivityLog).order_by(ActivityLog.created_at.desc()).limit(limit).all()
