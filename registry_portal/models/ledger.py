"""
Core Ledger Models for the Property Registry Portal

These models define the strict schemas for registry data flowing through
the system. They are designed to:
1. Accept the ERP (SAP Business One) export keys as-is
2. Expose Pythonic field names to the rest of the code
3. Be read-only - the ledger engine never mutates its inputs
4. Be serializable back to the export shape for AI context and exports

DESIGN DECISION: Inputs are frozen Pydantic v2 models.
A render pass receives a PropertyFile wholesale and discards every derived
view afterwards, so nothing here has an identity beyond `file_no`.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionGroup(str, Enum):
    """Which block of the statement a ledger line is printed in."""
    PAYMENT_PLAN = "payment_plan"  # Numbered installments
    OTHER = "other"                # Fees and ad hoc charges


class LineStatus(str, Enum):
    """
    Classification of a single ledger line on a given day.

    Derived on every render, never stored:
    PENDING_FUTURE -> OVERDUE happens by the passage of time,
    -> SETTLED happens when the ERP reports a zero outstanding balance.
    """
    PENDING_FUTURE = "pending_future"
    OVERDUE = "overdue"
    SETTLED = "settled"


class FileStatus(str, Enum):
    """Dashboard label of a property file, in priority order."""
    ACTION_REQUIRED = "Action Required"
    ACTIVE_LEDGER = "Active Ledger"
    CLEARANCE_VERIFIED = "Clearance Verified"


class AlertKind(str, Enum):
    """Kind of dashboard alert."""
    OVERDUE = "overdue"
    UPCOMING = "upcoming"


# =============================================================================
# INPUT MODELS - as exported by the registry
# =============================================================================

class Transaction(BaseModel):
    """
    One ledger line of a property file.

    Monetary fields are nullable: the ERP leaves them empty rather than
    zero. `outstanding_balance` is the ERP's own figure for the line and is
    trusted as-is; it is never recomputed from receivable - paid.
    """
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="ignore",
    )

    sequence: int = Field(
        default=0,
        alias="seq",
        description="Stable order of non-installment lines"
    )
    installment_number: int = Field(
        default=0,
        ge=0,
        alias="u_intno",
        description="0 = outside the payment plan, >0 = installment order"
    )
    installment_name: str = Field(
        default="",
        alias="u_intname",
        description="Label such as 'Down Payment' or '1st Installment'"
    )
    due_date: Optional[str] = Field(
        default=None,
        alias="duedate",
        description="DD-Mon-YY[YY], or '-', '' or 'NULL' for no due date"
    )
    receivable: Optional[Decimal] = Field(
        default=None,
        description="Amount owed for this line"
    )
    amount_paid: Optional[Decimal] = Field(
        default=None,
        description="Amount received against this line"
    )
    outstanding_balance: Optional[Decimal] = Field(
        default=None,
        alias="balduedeb",
        description="Authoritative outstanding balance from the ERP"
    )
    surcharge: Optional[Decimal] = Field(
        default=None,
        description="Late-payment surcharge accrued on this line"
    )

    # Receipt metadata, present once a payment is booked
    receipt_date: Optional[str] = None
    payment_mode: Optional[str] = Field(default=None, alias="mode")
    instrument_number: Optional[str] = Field(default=None, alias="instrument_no")

    # ERP passthrough fields, display only
    trans_id: Optional[int] = Field(default=None, alias="transid")
    line_id: Optional[int] = None
    short_name: Optional[str] = Field(default=None, alias="shortname")
    trans_type: Optional[str] = Field(default=None, alias="transtype")
    item_code: Optional[str] = Field(default=None, alias="itemcode")
    plot_type: Optional[str] = Field(default=None, alias="plottype")
    currency: Optional[str] = None
    description: Optional[str] = None
    doc_total: Optional[Decimal] = Field(default=None, alias="doctotal")
    status: Optional[str] = None
    balance: Optional[Decimal] = None
    pay_source: Optional[Decimal] = Field(default=None, alias="paysrc")

    @property
    def group(self) -> TransactionGroup:
        """Statement block this line belongs to."""
        if self.installment_number > 0:
            return TransactionGroup.PAYMENT_PLAN
        return TransactionGroup.OTHER

    @property
    def is_unpaid(self) -> bool:
        """No payment has been recorded against this line."""
        return not self.amount_paid


class PropertyFile(BaseModel):
    """
    One owned plot or unit, with its full transaction log.

    The snapshot figures (plot_value, balance, payment_received, overdue,
    surcharge) are pre-computed by the ERP. The ledger engine derives its
    own totals from `transactions` for display and leaves these untouched.
    """
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        str_strip_whitespace=True,
        extra="ignore",
    )

    # Identity
    file_no: str = Field(..., min_length=1, alias="fileNo")
    currency_no: str = Field(default="", alias="currencyNo")

    # Plot
    plot_size: str = Field(default="", alias="plotSize")
    plot_no: str = Field(default="", alias="plotNo")
    block: str = ""
    park: str = ""
    corner: str = ""
    main_boulevard: str = Field(default="", alias="mainBoulevard")

    # Financial snapshot
    plot_value: Decimal = Field(default=Decimal("0"), alias="plotValue")
    balance: Decimal = Decimal("0")
    receivable: Decimal = Decimal("0")
    total_receivable: Decimal = Field(default=Decimal("0"), alias="totalReceivable")
    payment_received: Decimal = Field(default=Decimal("0"), alias="paymentReceived")
    surcharge: Decimal = Decimal("0")
    overdue: Decimal = Decimal("0")

    # Owner
    owner_name: str = Field(default="", alias="ownerName")
    owner_cnic: str = Field(default="", alias="ownerCNIC")
    father_name: str = Field(default="", alias="fatherName")
    cell_no: str = Field(default="", alias="cellNo")
    reg_date: str = Field(default="", alias="regDate")
    address: str = ""

    transactions: tuple[Transaction, ...] = Field(
        default=(),
        description="Ledger lines; input order is not significant"
    )

    uploaded_statement_url: Optional[str] = Field(default=None, alias="uploadedStatementUrl")
    uploaded_statement_name: Optional[str] = Field(default=None, alias="uploadedStatementName")


# =============================================================================
# DERIVED VIEWS - produced by the ledger engine
# =============================================================================

class GroupedLedger(BaseModel):
    """A file's transactions split into the two ordered statement blocks."""
    model_config = ConfigDict(frozen=True)

    payment_plan: tuple[Transaction, ...] = ()
    other: tuple[Transaction, ...] = ()

    @property
    def count(self) -> int:
        return len(self.payment_plan) + len(self.other)


class LedgerTotals(BaseModel):
    """
    Subtotals and grand totals of a statement.

    Subtotal balances may be negative when a block is overpaid.
    Only `grand_balance` is clamped at zero.
    """
    model_config = ConfigDict(frozen=True)

    plan_receivable: Decimal = Decimal("0")
    plan_received: Decimal = Decimal("0")
    plan_surcharge: Decimal = Decimal("0")
    other_receivable: Decimal = Decimal("0")
    other_received: Decimal = Decimal("0")
    grand_receivable: Decimal = Decimal("0")
    grand_received: Decimal = Decimal("0")
    grand_balance: Decimal = Decimal("0")

    @property
    def plan_balance(self) -> Decimal:
        """Payment-plan balance as printed on the subtotal row (unclamped)."""
        return self.plan_receivable - self.plan_received

    @property
    def other_balance(self) -> Decimal:
        """Other-block balance as printed on its subtotal row (unclamped)."""
        return self.other_receivable - self.other_received


class StatementRow(BaseModel):
    """A ledger line as it appears on a rendered statement."""
    model_config = ConfigDict(frozen=True)

    transaction: Transaction
    group: TransactionGroup
    status: LineStatus
    due_date: Optional[date] = None
    receipt_date: Optional[date] = None

    @property
    def is_overdue(self) -> bool:
        """Overdue rows are highlighted on the printed statement."""
        return self.status == LineStatus.OVERDUE


class LedgerStatement(BaseModel):
    """Everything a statement renderer needs for one file on one day."""
    model_config = ConfigDict(frozen=True)

    file_no: str
    as_of: date
    grouped: GroupedLedger
    totals: LedgerTotals
    rows: tuple[StatementRow, ...] = ()

    @property
    def plan_rows(self) -> tuple[StatementRow, ...]:
        return tuple(r for r in self.rows if r.group == TransactionGroup.PAYMENT_PLAN)

    @property
    def other_rows(self) -> tuple[StatementRow, ...]:
        return tuple(r for r in self.rows if r.group == TransactionGroup.OTHER)


class Alert(BaseModel):
    """The single ledger line a file is flagged for on the dashboard."""
    model_config = ConfigDict(frozen=True)

    file_no: str
    plot_size: str = ""
    owner_name: str = ""
    transaction: Transaction
    kind: AlertKind
    due_date: Optional[date] = None

    @property
    def is_overdue(self) -> bool:
        return self.kind == AlertKind.OVERDUE

    @property
    def amount(self) -> Decimal:
        """Outstanding balance when overdue, otherwise the receivable."""
        if self.is_overdue:
            return self.transaction.outstanding_balance or Decimal("0")
        return self.transaction.receivable or Decimal("0")


class FileCard(BaseModel):
    """Per-file summary card on the dashboard."""
    model_config = ConfigDict(frozen=True)

    file_no: str
    plot_size: str = ""
    plot_value: Decimal = Decimal("0")
    status: FileStatus
    headline: Optional[Transaction] = None
    headline_is_overdue: bool = False

    @property
    def headline_amount(self) -> Optional[Decimal]:
        """Amount shown on the card, or None when the registry is clear."""
        if self.headline is None:
            return None
        if self.headline_is_overdue:
            return self.headline.outstanding_balance or Decimal("0")
        return self.headline.receivable or Decimal("0")


class PortfolioStats(BaseModel):
    """Counters shown at the top of the dashboard."""
    model_config = ConfigDict(frozen=True)

    verified_assets: int = Field(ge=0)
    active_records: int = Field(ge=0)
    alerts: int = Field(ge=0)
