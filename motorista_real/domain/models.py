"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import ClassVar, List, Optional, Union


class VehicleType(str, Enum):
    CAR = "carro"
    MOTORCYCLE = "moto"


class OwnershipStatus(str, Enum):
    OWNED = "proprio"
    FINANCED = "financiado"
    RENTED = "alugado"


class RentalPeriod(str, Enum):
    WEEKLY = "semanal"
    MONTHLY = "mensal"


class GoalType(str, Enum):
    GLOBAL = "global"
    PER_VEHICLE = "per_vehicle"


class TransactionType(str, Enum):
    EARNING = "earning"
    EXPENSE = "expense"


class TransactionOrigin(str, Enum):
    """Whether a row was typed by the driver or materialized by the scheduler"""

    MANUAL = "manual"
    SCHEDULED = "scheduled"


class TransactionCategory(str, Enum):
    # Earnings
    UBER = "Uber"
    NINETY_NINE = "99"
    INDRIVER = "Indriver"
    PARTICULAR = "Particular"
    # Expenses
    FUEL = "Combustível"
    MAINTENANCE = "Manutenção"
    FOOD = "Alimentação"
    CLEANING = "Limpeza"
    FINANCING = "FinanciamentoVeiculo"
    RENT = "AluguelVeiculo"
    INSURANCE = "Seguro"
    OTHER = "Outros"

    @property
    def transaction_type(self) -> TransactionType:
        if self in EARNING_CATEGORIES:
            return TransactionType.EARNING
        return TransactionType.EXPENSE


EARNING_CATEGORIES = frozenset(
    {
        TransactionCategory.UBER,
        TransactionCategory.NINETY_NINE,
        TransactionCategory.INDRIVER,
        TransactionCategory.PARTICULAR,
    }
)


class FuelType(str, Enum):
    GASOLINE = "Gasolina"
    ETHANOL = "Etanol"
    CNG = "GNV"
    ELECTRIC = "kWh"

    @property
    def unit(self) -> str:
        """Unit the pump price refers to"""
        if self is FuelType.CNG:
            return "m³"
        if self is FuelType.ELECTRIC:
            return "kWh"
        return "L"


# R$ reserved per km driven when the vehicle has no custom rate
DEFAULT_MAINT_RATES = {
    VehicleType.CAR: 0.15,
    VehicleType.MOTORCYCLE: 0.08,
}

DEFAULT_DUE_DAY = 10


@dataclass
class User:
    """Driver account; one per login"""

    uid: str
    email: str
    name: str
    daily_goal: float = 0.0
    is_pro: bool = False
    goal_type: Optional[GoalType] = None


@dataclass(frozen=True)
class OwnedProfile:
    """Vehicle owned outright"""

    status: ClassVar[OwnershipStatus] = OwnershipStatus.OWNED

    vehicle_value: float = 0.0
    purchase_value: Optional[float] = None
    purchase_date: Optional[date] = None
    installments_paid_off: int = 0  # installment count of a financing already settled

    @property
    def has_purchase_data(self) -> bool:
        return bool(self.purchase_value) and self.purchase_date is not None


@dataclass(frozen=True)
class FinancedProfile:
    """Vehicle bought on installments"""

    status: ClassVar[OwnershipStatus] = OwnershipStatus.FINANCED

    installment_value: float
    total_installments: int
    installments_paid: int = 0
    due_day: int = DEFAULT_DUE_DAY  # day of month, 1-31

    @property
    def remaining_installments(self) -> int:
        return max(0, self.total_installments - self.installments_paid)


@dataclass(frozen=True)
class RentedProfile:
    """Vehicle rented weekly or monthly"""

    status: ClassVar[OwnershipStatus] = OwnershipStatus.RENTED

    rental_value: float
    period: RentalPeriod = RentalPeriod.WEEKLY
    due_reference: int = 1  # weekday 0=Sunday..6=Saturday if weekly, day of month if monthly


FinancialProfile = Union[OwnedProfile, FinancedProfile, RentedProfile]


@dataclass(frozen=True)
class Insurance:
    """Insurance policy attached to any vehicle"""

    value: float  # total premium
    installments: int = 1
    due_day: int = DEFAULT_DUE_DAY
    expiry_date: Optional[date] = None

    @property
    def installment_value(self) -> float:
        return self.value / self.installments if self.installments > 0 else self.value


@dataclass
class Vehicle:
    """Vehicle registered by a driver"""

    vehicle_id: str
    user_id: str
    type: VehicleType
    brand: str
    model: str
    plate: str
    profile: FinancialProfile
    is_active: bool = False
    insurance: Optional[Insurance] = None
    custom_daily_goal: Optional[float] = None
    custom_maint_rate: Optional[float] = None  # R$ per km
    year: Optional[str] = None
    model_year: Optional[str] = None
    current_km: Optional[float] = None

    @property
    def ownership_status(self) -> OwnershipStatus:
        return self.profile.status

    @property
    def installment_value(self) -> float:
        if isinstance(self.profile, FinancedProfile):
            return self.profile.installment_value
        return 0.0

    @property
    def maint_rate(self) -> float:
        if self.custom_maint_rate is not None:
            return self.custom_maint_rate
        return DEFAULT_MAINT_RATES[self.type]


@dataclass
class Transaction:
    """Earning or expense entry tied to one vehicle"""

    transaction_id: str
    user_id: str
    vehicle_id: str
    type: TransactionType
    category: TransactionCategory
    amount: float
    date: date
    timestamp: int  # epoch milliseconds, orders entries within a day
    km_input: Optional[float] = None  # odometer reading
    fuel_type: Optional[FuelType] = None
    price_per_unit: Optional[float] = None
    fuel_quantity: Optional[float] = None
    installment_index: Optional[int] = None
    origin: TransactionOrigin = TransactionOrigin.MANUAL

    @property
    def is_scheduled(self) -> bool:
        return self.origin is TransactionOrigin.SCHEDULED


@dataclass
class DailyFinancialSnapshot:
    """Read-time projection of one vehicle's day"""

    date: date
    earnings: float
    expenses: float
    amortized_cost: float
    maint_reserve: float
    daily_depreciation: float
    profit: float
    distance: float
    distance_is_estimate: bool
    estimated_vehicle_value: Optional[float] = None


@dataclass
class DynamicGoal:
    """Daily goal after spreading this month's shortfall over the remaining days"""

    base_goal: float
    dynamic_goal: float
    accumulated_deficit: float
    remaining_days: int
    is_diluted: bool


@dataclass
class GoalProgress:
    raw_percent: float
    display_percent: float  # never negative, may exceed 100
    progress_percent: float  # clamped to 0..100 for progress bars


@dataclass
class DaySummary:
    date: date
    earnings: float
    expenses: float


@dataclass
class ProviderProfile:
    """Account returned by the external identity provider"""

    external_id: str
    email: str
    display_name: str


@dataclass
class AppVersionInfo:
    current_version: str
    latest_version: str
    release_notes: List[str]
    is_mandatory: bool = False
