"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import List, Optional


class UnitStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    SOLD = "SOLD"
    MAINTENANCE = "MAINTENANCE"


class TransactionStatus(str, Enum):
    ON_PROCESS = "ON_PROCESS"
    COMPLETED = "COMPLETED"


class PaymentStatus(str, Enum):
    UNPAID = "UNPAID"
    PARTIAL = "PARTIAL"
    PAID = "PAID"


class ProfitStatus(str, Enum):
    PROFIT = "PROFIT"
    LOSS = "LOSS"
    BREAK_EVEN = "BREAK_EVEN"


class CostPayer(str, Enum):
    INVESTOR = "INVESTOR"
    MANAGER = "MANAGER"


@dataclass
class Investor:
    """Person funding one or more vehicle units"""

    id: str
    name: str
    margin_percentage: float
    contact_info: Optional[str] = None
    bank_account_details: Optional[str] = None
    notes: Optional[str] = None
    user_id: Optional[str] = None


@dataclass
class Cost:
    """Operating cost booked against a transaction"""

    cost_type: str
    payer: str  # "INVESTOR" or "MANAGER"
    amount: float
    description: Optional[str] = None


@dataclass
class ProfitSharing:
    """Realized profit split, created when a transaction completes"""

    total_capital_investor: float
    total_capital_manager: float
    total_capital: float
    net_margin: float
    investor_share_percentage: float
    manager_share_percentage: float
    investor_profit_amount: float
    manager_profit_amount: float


@dataclass
class Transaction:
    """Buy/sell cycle of a single unit"""

    id: str
    unit_id: str
    transaction_code: str
    status: str
    buy_price: float
    buy_date: Optional[date] = None
    initial_investor_capital: Optional[float] = None
    sell_price: Optional[float] = None
    sell_date: Optional[date] = None
    payment_status: str = PaymentStatus.UNPAID.value
    profit_sharing: Optional[ProfitSharing] = None
    costs: List[Cost] = field(default_factory=list)


@dataclass
class Unit:
    """Financed vehicle asset"""

    id: str
    investor_id: str
    name: str
    code: str
    plate_number: str
    status: str
    transactions: List[Transaction] = field(default_factory=list)


@dataclass
class Payment:
    """Cash paid out to an investor"""

    amount: float
    payment_date: datetime
    method: str = "TRANSFER"


@dataclass
class InvestorSnapshot:
    """Everything the aggregator reads for one investor, as loaded from storage"""

    investor: Investor
    active_units: List[Unit]
    payments: List[Payment]
    transactions: List[Transaction]
    units: List[Unit]
    total_units_count: int


@dataclass
class InvestorStats:
    total_invested: float
    total_profit: float
    total_received: float
    active_units_count: int
    total_units_count: int


@dataclass
class MonthlyIncome:
    year: int
    month: int
    income: float


@dataclass
class InvestorDashboard:
    """Output of the profit & capital aggregation"""

    investor: Investor
    stats: InvestorStats
    recent_transactions: List[Transaction]
    monthly_income: List[MonthlyIncome] = field(default_factory=list)


@dataclass
class ProfitSplit:
    """Output of the profit-sharing calculation for a sale"""

    total_capital_investor: float
    total_capital_manager: float
    total_capital: float
    net_margin: float
    profit_status: str
    investor_profit_amount: float
    manager_profit_amount: float
