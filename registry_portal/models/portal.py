"""
Portal Models

Users, notifications and the narrow projection of a property file that is
handed to the AI service. Role tagging is the only access model: a CLIENT
sees their own files, an ADMIN sees the whole registry.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from registry_portal.models.ledger import PropertyFile, Transaction


class UserRole(str, Enum):
    """Portal roles."""
    CLIENT = "CLIENT"
    ADMIN = "ADMIN"


class UserStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"


class NotificationType(str, Enum):
    """Severity of a portal notification."""
    CRITICAL = "CRITICAL"
    WARNING = "WARNING"
    SUCCESS = "SUCCESS"
    INFO = "INFO"


class NotificationCategory(str, Enum):
    PAYMENT = "PAYMENT"
    SECURITY = "SECURITY"
    SYSTEM = "SYSTEM"


class User(BaseModel):
    """A portal user as listed in the registry dataset."""
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )

    id: str = Field(..., min_length=1)
    cnic: str = Field(..., description="National ID, e.g. 33100-1234567-1")
    name: str = Field(..., min_length=1)
    email: str = ""
    phone: str = ""
    role: UserRole = UserRole.CLIENT
    status: UserStatus = UserStatus.ACTIVE
    last_login: Optional[str] = Field(default=None, alias="lastLogin")

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


class NotificationMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    amount: Optional[Decimal] = None
    file_no: Optional[str] = None
    due_date: Optional[date] = None


class PortalNotification(BaseModel):
    """An entry in the user's alert center."""
    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str
    title: str
    message: str
    type: NotificationType
    category: NotificationCategory
    issued_on: date
    is_read: bool = False
    action_url: Optional[str] = None
    metadata: NotificationMetadata = Field(default_factory=NotificationMetadata)


class FileSnapshot(BaseModel):
    """
    The only shape of registry data the AI service ever sees.

    Field aliases are the keys of the JSON context block in the prompt.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    owner: str
    size: str
    total_value: float = Field(alias="totalVal")
    paid: float
    balance: float
    overdue: float

    @classmethod
    def from_file(cls, file: PropertyFile) -> "FileSnapshot":
        """Project a file onto the fields the AI service may see."""
        return cls(
            id=file.file_no,
            owner=file.owner_name,
            size=file.plot_size,
            total_value=float(file.plot_value),
            paid=float(file.payment_received),
            balance=float(file.balance),
            overdue=float(file.overdue),
        )


class LineSnapshot(BaseModel):
    """One ledger line as shown to the assistant in a client chat."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    file_no: str = Field(alias="file")
    description: str
    due_date: str = Field(alias="due")
    payable: float
    paid: float
    balance: float

    @classmethod
    def from_transaction(cls, file_no: str, t: Transaction) -> "LineSnapshot":
        return cls(
            file_no=file_no,
            description=t.installment_name or t.description or "-",
            due_date=t.due_date or "-",
            payable=float(t.receivable or 0),
            paid=float(t.amount_paid or 0),
            balance=float(t.outstanding_balance or 0),
        )
