"""Pydantic schemas for API request/response validation"""

import datetime as dt
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from motorista_real.domain.models import (
    FinancedProfile,
    FinancialProfile,
    FuelType,
    GoalType,
    Insurance,
    OwnedProfile,
    OwnershipStatus,
    RentalPeriod,
    RentedProfile,
    Transaction,
    TransactionCategory,
    TransactionOrigin,
    TransactionType,
    User,
    Vehicle,
    VehicleType,
)


# Session & user


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3, description="Any email; login is mocked")


class ProviderLoginRequest(BaseModel):
    id_token: str = Field(..., min_length=1, description="Token issued by the identity provider")


class UserResponse(BaseModel):
    uid: str
    email: str
    name: str
    daily_goal: float
    is_pro: bool
    goal_type: Optional[GoalType] = None

    @classmethod
    def from_domain(cls, user: User) -> "UserResponse":
        return cls(
            uid=user.uid,
            email=user.email,
            name=user.name,
            daily_goal=user.daily_goal,
            is_pro=user.is_pro,
            goal_type=user.goal_type,
        )


class UserUpdate(BaseModel):
    name: Optional[str] = None
    daily_goal: Optional[float] = Field(None, ge=0)
    is_pro: Optional[bool] = None
    goal_type: Optional[GoalType] = None


# Vehicles


class InsuranceSchema(BaseModel):
    value: float = Field(..., ge=0, description="Total policy premium")
    installments: int = Field(1, ge=0)
    due_day: int = Field(10, ge=1, le=31)
    expiry_date: Optional[dt.date] = None


class VehicleCreate(BaseModel):
    """Request body for POST /v1/vehicles"""

    model_config = ConfigDict(protected_namespaces=())

    type: VehicleType
    brand: str
    model: str
    plate: str
    ownership_status: OwnershipStatus = OwnershipStatus.OWNED

    # proprio
    vehicle_value: float = Field(0.0, ge=0)
    purchase_value: Optional[float] = Field(None, ge=0)
    purchase_date: Optional[dt.date] = None

    # financiado
    installment_value: float = Field(0.0, ge=0)
    total_installments: int = Field(0, ge=0)
    installments_paid: int = Field(0, ge=0)
    due_day: int = Field(10, ge=1, le=31)

    # alugado
    rental_value: float = Field(0.0, ge=0)
    rental_period: RentalPeriod = RentalPeriod.WEEKLY
    rental_due: int = Field(1, ge=0, le=31, description="Weekday 0-6 if weekly, day of month if monthly")

    insurance: Optional[InsuranceSchema] = None
    custom_daily_goal: Optional[float] = Field(None, ge=0)
    custom_maint_rate: Optional[float] = Field(None, ge=0)
    year: Optional[str] = None
    model_year: Optional[str] = None
    current_km: Optional[float] = Field(None, ge=0)

    def to_profile(self) -> FinancialProfile:
        if self.ownership_status is OwnershipStatus.FINANCED:
            return FinancedProfile(
                installment_value=self.installment_value,
                total_installments=self.total_installments,
                installments_paid=self.installments_paid,
                due_day=self.due_day,
            )
        if self.ownership_status is OwnershipStatus.RENTED:
            return RentedProfile(
                rental_value=self.rental_value,
                period=self.rental_period,
                due_reference=self.rental_due,
            )
        return OwnedProfile(
            vehicle_value=self.vehicle_value,
            purchase_value=self.purchase_value,
            purchase_date=self.purchase_date,
        )

    def to_insurance(self) -> Optional[Insurance]:
        if self.insurance is None:
            return None
        return Insurance(
            value=self.insurance.value,
            installments=self.insurance.installments,
            due_day=self.insurance.due_day,
            expiry_date=self.insurance.expiry_date,
        )


class VehicleResponse(BaseModel):
    vehicle_id: str
    type: VehicleType
    brand: str
    model: str
    plate: str
    is_active: bool
    ownership_status: OwnershipStatus
    maint_rate: float
    custom_daily_goal: Optional[float] = None
    custom_maint_rate: Optional[float] = None
    installment_value: float = 0.0
    installments_paid: Optional[int] = None
    total_installments: Optional[int] = None
    remaining_installments: Optional[int] = None
    rental_value: Optional[float] = None
    rental_period: Optional[RentalPeriod] = None
    has_insurance: bool = False
    insurance_value: Optional[float] = None

    @classmethod
    def from_domain(cls, vehicle: Vehicle) -> "VehicleResponse":
        profile = vehicle.profile
        financed = isinstance(profile, FinancedProfile)
        rented = isinstance(profile, RentedProfile)
        return cls(
            vehicle_id=vehicle.vehicle_id,
            type=vehicle.type,
            brand=vehicle.brand,
            model=vehicle.model,
            plate=vehicle.plate,
            is_active=vehicle.is_active,
            ownership_status=vehicle.ownership_status,
            maint_rate=vehicle.maint_rate,
            custom_daily_goal=vehicle.custom_daily_goal,
            custom_maint_rate=vehicle.custom_maint_rate,
            installment_value=vehicle.installment_value,
            installments_paid=profile.installments_paid if financed else None,
            total_installments=profile.total_installments if financed else None,
            remaining_installments=profile.remaining_installments if financed else None,
            rental_value=profile.rental_value if rented else None,
            rental_period=profile.period if rented else None,
            has_insurance=vehicle.insurance is not None,
            insurance_value=vehicle.insurance.value if vehicle.insurance else None,
        )


class VehicleGoalUpdate(BaseModel):
    custom_daily_goal: Optional[float] = Field(None, ge=0, description="null clears the override")
    custom_maint_rate: Optional[float] = Field(None, ge=0)


class AmortizeRequest(BaseModel):
    paid_installments: int = Field(..., gt=0)
    new_installment_value: Optional[float] = Field(None, gt=0)


# Transactions


class TransactionCreate(BaseModel):
    """Request body for POST /v1/transactions"""

    category: TransactionCategory
    amount: float = Field(..., gt=0)
    date: Optional[dt.date] = None
    type: Optional[TransactionType] = None
    vehicle_id: Optional[str] = None
    km_input: Optional[float] = Field(None, ge=0)
    fuel_type: Optional[FuelType] = None
    price_per_unit: Optional[float] = Field(None, gt=0)
    fuel_quantity: Optional[float] = Field(None, gt=0)
    installment_index: Optional[int] = Field(None, gt=0)


class TransactionUpdate(BaseModel):
    category: Optional[TransactionCategory] = None
    amount: Optional[float] = Field(None, gt=0)
    date: Optional[dt.date] = None
    type: Optional[TransactionType] = None
    km_input: Optional[float] = Field(None, ge=0)
    fuel_type: Optional[FuelType] = None
    price_per_unit: Optional[float] = Field(None, gt=0)
    fuel_quantity: Optional[float] = Field(None, gt=0)
    mark_paid: bool = False


class TransactionResponse(BaseModel):
    transaction_id: str
    vehicle_id: str
    type: TransactionType
    category: TransactionCategory
    amount: float
    date: dt.date
    timestamp: int
    origin: TransactionOrigin
    km_input: Optional[float] = None
    fuel_type: Optional[FuelType] = None
    price_per_unit: Optional[float] = None
    fuel_quantity: Optional[float] = None
    installment_index: Optional[int] = None

    @classmethod
    def from_domain(cls, txn: Transaction) -> "TransactionResponse":
        return cls(
            transaction_id=txn.transaction_id,
            vehicle_id=txn.vehicle_id,
            type=txn.type,
            category=txn.category,
            amount=txn.amount,
            date=txn.date,
            timestamp=txn.timestamp,
            origin=txn.origin,
            km_input=txn.km_input,
            fuel_type=txn.fuel_type,
            price_per_unit=txn.price_per_unit,
            fuel_quantity=txn.fuel_quantity,
            installment_index=txn.installment_index,
        )


# Dashboard & reports


class DashboardResponse(BaseModel):
    """Response for GET /v1/dashboard"""

    vehicle_id: str
    date: dt.date
    earnings: float
    expenses: float
    amortized_cost: float
    maint_reserve: float
    daily_depreciation: float
    profit: float
    distance: float
    distance_is_estimate: bool
    estimated_vehicle_value: Optional[float] = None
    base_goal: float
    dynamic_goal: float
    accumulated_deficit: float
    remaining_days: int
    is_diluted: bool
    raw_percent: float
    display_percent: float
    progress_percent: float


class DaySummarySchema(BaseModel):
    date: dt.date
    earnings: float
    expenses: float


class WeeklyReportResponse(BaseModel):
    days: List[DaySummarySchema]


class AppVersionResponse(BaseModel):
    current_version: str
    latest_version: str
    release_notes: List[str]
    is_mandatory: bool
    has_unseen_notes: bool


class DismissVersionRequest(BaseModel):
    version: str = Field(..., min_length=1)
