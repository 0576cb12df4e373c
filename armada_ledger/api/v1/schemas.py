"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import List, Literal, Optional

UnitStatusLiteral = Literal["AVAILABLE", "SOLD", "MAINTENANCE"]
TransactionStatusLiteral = Literal["ON_PROCESS", "COMPLETED"]
PaymentStatusLiteral = Literal["UNPAID", "PARTIAL", "PAID"]
CostTypeLiteral = Literal[
    "INSPECTION", "TRANSPORT", "MEAL", "TOLL", "ADS",
    "REPAIR", "GAS", "PARKING", "STAMP_DUTY", "BROKER", "OTHER",
]


# Investors

class InvestorCreate(BaseModel):
    """Request body for POST /v1/investors"""

    name: str = Field(..., min_length=1)
    contact_info: Optional[str] = None
    notes: Optional[str] = None
    bank_account_details: Optional[str] = None
    margin_percentage: float = Field(50, ge=0, le=100, description="Investor profit share, 0-100")
    user_id: Optional[str] = Field(None, description="Linked login identity")


class InvestorUpdate(BaseModel):
    """Request body for PUT /v1/investors/{investor_id}"""

    name: str = Field(..., min_length=1)
    contact_info: Optional[str] = None
    notes: Optional[str] = None
    bank_account_details: Optional[str] = None
    margin_percentage: Optional[float] = Field(None, ge=0, le=100)


class InvestorSchema(BaseModel):
    id: str
    name: str
    contact_info: Optional[str] = None
    bank_account_details: Optional[str] = None
    notes: Optional[str] = None
    margin_percentage: float
    user_id: Optional[str] = None


# Units

class UnitCreate(BaseModel):
    """Request body for POST /v1/units"""

    investor_id: str
    name: str = Field(..., min_length=1)
    plate_number: str = Field(..., min_length=1)
    code: str = Field(..., min_length=1)
    image_url: Optional[str] = None
    tax_due_date: Optional[date] = None
    status: UnitStatusLiteral = "AVAILABLE"


class UnitSchema(BaseModel):
    id: str
    investor_id: str
    investor_name: Optional[str] = None
    name: str
    plate_number: str
    code: str
    image_url: Optional[str] = None
    tax_due_date: Optional[date] = None
    status: str


class TaxReminder(BaseModel):
    id: str
    name: str
    plate_number: str
    tax_due_date: date
    investor_name: str


# Transactions

class TransactionCreate(BaseModel):
    """Request body for POST /v1/transactions"""

    unit_id: str
    transaction_code: str = Field(..., min_length=1)
    buy_date: date
    buy_price: float = Field(..., gt=0)
    initial_investor_capital: Optional[float] = None
    initial_manager_capital: Optional[float] = None
    notes: Optional[str] = None


class SellRequest(BaseModel):
    """Request body for POST /v1/transactions/{transaction_id}/sell"""

    sell_date: date
    sell_price: float = Field(..., gt=0)
    investor_share_percentage: Optional[float] = Field(None, ge=0, le=100)
    manager_share_percentage: Optional[float] = Field(None, ge=0, le=100)
    loss_bearer: Optional[Literal["INVESTOR", "MANAGER", "SHARED"]] = None
    notes: Optional[str] = None


class TransactionUpdate(BaseModel):
    """
    Request body for PUT /v1/transactions/{transaction_id}

    Only fields present in the body are changed. A status change to
    COMPLETED rebuilds profit sharing; back to ON_PROCESS removes it.
    """

    unit_id: Optional[str] = None
    transaction_code: Optional[str] = Field(None, min_length=1)
    buy_date: Optional[date] = None
    buy_price: Optional[float] = Field(None, gt=0)
    initial_investor_capital: Optional[float] = None
    initial_manager_capital: Optional[float] = None
    notes: Optional[str] = None
    status: Optional[TransactionStatusLiteral] = None
    sell_date: Optional[date] = None
    sell_price: Optional[float] = Field(None, ge=0)
    investor_share_percentage: Optional[float] = Field(None, ge=0, le=100)
    manager_share_percentage: Optional[float] = Field(None, ge=0, le=100)


class ProfitSharingUpdate(BaseModel):
    """Request body for PATCH /v1/transactions/{transaction_id}/profit-sharing"""

    investor_share_percentage: float = Field(..., ge=0, le=100)
    manager_share_percentage: float = Field(..., ge=0, le=100)


class BulkIds(BaseModel):
    ids: List[str] = Field(..., min_length=1)


class BulkPaymentStatus(BaseModel):
    ids: List[str] = Field(..., min_length=1)
    payment_status: PaymentStatusLiteral


class CostCreate(BaseModel):
    """Request body for POST /v1/transactions/{transaction_id}/costs"""

    cost_type: CostTypeLiteral
    payer: Literal["INVESTOR", "MANAGER"]
    amount: float = Field(..., gt=0)
    description: Optional[str] = None
    cost_date: Optional[date] = None


class CostSchema(BaseModel):
    id: str
    cost_type: str
    payer: str
    amount: float
    description: Optional[str] = None
    cost_date: Optional[date] = None


class PaymentCreate(BaseModel):
    """Request body for POST /v1/transactions/{transaction_id}/payments"""

    investor_id: Optional[str] = Field(None, description="Defaults to the unit owner")
    amount: float = Field(..., gt=0)
    payment_date: datetime
    method: Literal["TRANSFER", "CASH"]
    proof_image_url: Optional[str] = None
    notes: Optional[str] = None


class PaymentSchema(BaseModel):
    id: str
    amount: float
    payment_date: datetime
    method: str
    proof_image_url: Optional[str] = None
    notes: Optional[str] = None


class PaymentResponse(BaseModel):
    """Response for POST /v1/transactions/{transaction_id}/payments"""

    success: bool = True
    payment: PaymentSchema
    payment_status: str
    total_paid: float
    investor_should_receive: float


class ProfitSharingSchema(BaseModel):
    total_capital_investor: float
    total_capital_manager: float
    total_capital: float
    net_margin: float
    investor_share_percentage: float
    manager_share_percentage: float
    investor_profit_amount: float
    manager_profit_amount: float


class TransactionSchema(BaseModel):
    id: str
    unit_id: str
    unit_name: Optional[str] = None
    investor_name: Optional[str] = None
    transaction_code: str
    status: str
    buy_date: date
    buy_price: float
    initial_investor_capital: Optional[float] = None
    initial_manager_capital: Optional[float] = None
    sell_date: Optional[date] = None
    sell_price: Optional[float] = None
    profit_status: Optional[str] = None
    payment_status: str
    notes: Optional[str] = None
    costs: List[CostSchema] = []
    profit_sharing: Optional[ProfitSharingSchema] = None
    payments: List[PaymentSchema] = []


class SellResponse(BaseModel):
    transaction: TransactionSchema
    profit_sharing: ProfitSharingSchema


class CodeResponse(BaseModel):
    code: str


class BulkResult(BaseModel):
    success: bool = True
    affected: int


# Investor dashboard

class InvestorStatsSchema(BaseModel):
    total_invested: float
    total_profit: float
    total_received: float
    active_units_count: int
    total_units_count: int


class DashboardTransaction(BaseModel):
    id: str
    transaction_code: str
    status: str
    buy_price: float
    initial_investor_capital: Optional[float] = None
    sell_price: Optional[float] = None
    investor_profit_amount: Optional[float] = None


class MonthlyIncomeSchema(BaseModel):
    year: int
    month: int
    income: float


class InvestorDashboardResponse(BaseModel):
    """Investor dashboard bundle; linked=False when no investor is linked"""

    linked: bool = True
    investor: Optional[InvestorSchema] = None
    stats: Optional[InvestorStatsSchema] = None
    recent_transactions: List[DashboardTransaction] = []
    monthly_income: List[MonthlyIncomeSchema] = []


# Investor report

class ReportTransaction(BaseModel):
    id: str
    transaction_code: str
    unit_name: str
    unit_plate_number: str
    status: str
    buy_date: date
    sell_date: Optional[date] = None
    buy_price: float
    sell_price: float
    initial_investor_capital: float
    total_costs: float
    investor_costs: float
    manager_costs: float
    net_margin: float
    investor_profit_amount: float
    manager_profit_amount: float
    payment_status: str
    total_paid: float


class ReportSummary(BaseModel):
    total_active_units: int
    total_completed_transactions: int
    total_capital_deployed: float
    total_profit: float


class InvestorReportResponse(BaseModel):
    investor: InvestorSchema
    summary: ReportSummary
    transactions: List[ReportTransaction]
    generated_at: str


# Transaction (profit-sharing) report

class SaleReportTransaction(BaseModel):
    id: str
    transaction_code: str
    buy_date: date
    sell_date: Optional[date] = None
    buy_price: float
    sell_price: float
    status: str
    payment_status: str
    duration_days: int


class SaleReportUnit(BaseModel):
    name: str
    plate_number: str
    code: str
    image_url: Optional[str] = None


class SaleReportInvestor(BaseModel):
    name: str
    contact_info: str
    bank_account_details: str


class SaleReportCapital(BaseModel):
    investor_capital: float
    manager_capital: float
    total_capital: float


class SaleReportCosts(BaseModel):
    items: List[CostSchema]
    investor_costs: float
    manager_costs: float
    total_costs: float


class SaleReportPayment(BaseModel):
    """Payout progress against the investor's profit share only"""

    investor_profit_due: float
    total_paid: float
    remaining: float
    payment_status: str
    histories: List[PaymentSchema]


class TransactionReportResponse(BaseModel):
    """Response for GET /v1/reports/transactions/{transaction_id}"""

    transaction: SaleReportTransaction
    unit: SaleReportUnit
    investor: SaleReportInvestor
    capital: SaleReportCapital
    costs: SaleReportCosts
    profit_sharing: Optional[ProfitSharingSchema] = None
    payment: SaleReportPayment
    generated_at: str


# Admin dashboard

class InvestorOverview(BaseModel):
    id: str
    name: str
    active_units: int
    completed_transactions: int
    total_profit: float
    total_capital: float


class StatusCount(BaseModel):
    name: str
    value: int


class RecentTransaction(BaseModel):
    id: str
    code: str
    unit_name: str
    type: str
    amount: float
    occurred_on: Optional[date] = None
    status: str


class AdminDashboardResponse(BaseModel):
    active_units: int
    completed_transactions: int
    total_margin: float
    total_investor_profit: float
    total_manager_profit: float
    total_capital_deployed: float
    investor_stats: List[InvestorOverview]
    unit_status_distribution: List[StatusCount]
    recent_transactions: List[RecentTransaction]


# Activity log

class ActivityLogSchema(BaseModel):
    id: str
    action: str
    entity: str
    entity_id: str
    details: str
    user_id: str
    user_name: Optional[str] = None
    created_at: str
