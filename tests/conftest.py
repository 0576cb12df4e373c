"""Pytest fixtures for testing"""

import pytest
from datetime import date, datetime, timedelta, timezone
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker, Session
from armada_ledger.api.main import create_app
from armada_ledger.infrastructure.database.models import (
    Base,
    Cost,
    Investor,
    PaymentHistory,
    ProfitSharing,
    Transaction,
    Unit,
)
from armada_ledger.infrastructure.database.session import build_engine, get_db


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = build_engine(TEST_DATABASE_URL)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

ADMIN_HEADERS = {"X-User-ID": "admin-1", "X-User-Role": "ADMIN", "X-User-Name": "Admin"}
INVESTOR_HEADERS = {"X-User-ID": "user-investor", "X-User-Role": "INVESTOR"}


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


class Seeder:
    """Helpers to insert rows directly, bypassing the API"""

    def __init__(self, db: Session):
        self.db = db
        self._seq = 0
        self._clock = datetime(2025, 1, 1, tzinfo=timezone.utc)

    def _next(self) -> int:
        self._seq += 1
        return self._seq

    def _tick(self) -> datetime:
        # Strictly increasing creation times keep load order deterministic
        self._clock += timedelta(seconds=1)
        return self._clock

    def investor(self, name: str = "Budi", user_id: str | None = None, margin: float = 40) -> Investor:
        inv = Investor(name=name, user_id=user_id, margin_percentage=margin)
        self.db.add(inv)
        self.db.flush()
        return inv

    def unit(self, investor: Investor, status: str = "AVAILABLE", tax_due_date: date | None = None) -> Unit:
        n = self._next()
        unit = Unit(
            investor_id=investor.id,
            name=f"Avanza {n}",
            plate_number=f"B {1000 + n} XYZ",
            code=f"UNT-{n:03d}",
            status=status,
            tax_due_date=tax_due_date,
        )
        self.db.add(unit)
        self.db.flush()
        return unit

    def transaction(
        self,
        unit: Unit,
        buy_price: float = 100_000,
        initial_investor_capital: float | None = None,
        status: str = "ON_PROCESS",
    ) -> Transaction:
        n = self._next()
        txn = Transaction(
            unit_id=unit.id,
            transaction_code=f"TRX-2025-{n:03d}",
            status=status,
            buy_date=date(2025, 1, 1) + timedelta(days=n),
            buy_price=buy_price,
            initial_investor_capital=initial_investor_capital,
            created_at=self._tick(),
        )
        self.db.add(txn)
        self.db.flush()
        return txn

    def profit_sharing(self, txn: Transaction, investor_amount: float, net_margin: float | None = None) -> ProfitSharing:
        margin = net_margin if net_margin is not None else investor_amount / 0.4
        ps = ProfitSharing(
            transaction_id=txn.id,
            total_capital_investor=txn.buy_price,
            total_capital_manager=0,
            total_capital=txn.buy_price,
            net_margin=margin,
            investor_share_percentage=40,
            manager_share_percentage=60,
            investor_profit_amount=investor_amount,
            manager_profit_amount=max(margin - investor_amount, 0),
        )
        txn.status = "COMPLETED"
        self.db.add(ps)
        self.db.flush()
        return ps

    def cost(self, txn: Transaction, amount: float, payer: str = "INVESTOR", cost_type: str = "REPAIR") -> Cost:
        cost = Cost(transaction_id=txn.id, cost_type=cost_type, payer=payer, amount=amount)
        self.db.add(cost)
        self.db.flush()
        return cost

    def payment(self, investor: Investor, amount: float, when: datetime | None = None, txn: Transaction | None = None) -> PaymentHistory:
        payment = PaymentHistory(
            investor_id=investor.id,
            transaction_id=txn.id if txn else None,
            amount=amount,
            payment_date=when or datetime.now(timezone.utc),
            method="TRANSFER",
        )
        self.db.add(payment)
        self.db.flush()
        return payment


@pytest.fixture
def seed(db: Session) -> Seeder:
    return Seeder(db)
