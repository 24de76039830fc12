from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from app.core.timezone_utils import is_valid_timezone


class GymBase(BaseModel):
    """Esquema base para gimnasios (tenants)"""
    name: str = Field(..., title="Nombre del gimnasio", min_length=1, max_length=255)
    address: Optional[str] = Field(None, title="Dirección física del gimnasio", max_length=255)
    phone: Optional[str] = Field(None, title="Número de teléfono", max_length=30)
    email: Optional[EmailStr] = Field(None, title="Email de contacto del gimnasio")
    upi_id: Optional[str] = Field(None, title="Identificador UPI para pagos", max_length=100)
    monthly_fee: float = Field(0.0, title="Cuota mensual", ge=0)


class GymCreate(GymBase):
    """Datos del gimnasio al darlo de alta (el admin se crea en el mismo flujo)"""
    description: Optional[str] = Field(None, max_length=2000)
    quarterly_fee: Optional[float] = Field(None, ge=0)
    semi_annual_fee: Optional[float] = Field(None, ge=0)
    timezone: Optional[str] = Field(None, max_length=50, description="Timezone en formato pytz (ej: 'Asia/Kolkata')")

    @field_validator('timezone')
    def validate_timezone(cls, v):
        if v is not None and not is_valid_timezone(v):
            raise ValueError(f"Zona horaria inválida: {v}. Debe ser una zona horaria válida de pytz.")
        return v


class GymSettingsUpdate(BaseModel):
    """Campos que el admin del gimnasio puede editar desde Ajustes"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    phone: Optional[str] = Field(None, max_length=30)
    email: Optional[EmailStr] = None
    address: Optional[str] = Field(None, max_length=255)
    monthly_fee: Optional[float] = Field(None, ge=0)
    quarterly_fee: Optional[float] = Field(None, ge=0)
    semi_annual_fee: Optional[float] = Field(None, ge=0)
    upi_id: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = Field(None, max_length=2000)
    amenities: Optional[List[str]] = None
    opening_hours: Optional[str] = Field(None, max_length=255)
    capacity: Optional[int] = Field(None, ge=0)
    timezone: Optional[str] = Field(None, max_length=50)

    @field_validator('timezone')
    def validate_timezone(cls, v):
        if v is not None and not is_valid_timezone(v):
            raise ValueError(f"Zona horaria inválida: {v}. Debe ser una zona horaria válida de pytz.")
        return v


class Gym(GymBase):
    """Esquema completo de gimnasio para respuestas"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: Optional[str] = None
    description: Optional[str] = None
    quarterly_fee: Optional[float] = None
    semi_annual_fee: Optional[float] = None
    amenities: Optional[List[str]] = None
    opening_hours: Optional[str] = None
    capacity: Optional[int] = None
    timezone: Optional[str] = None
    admin_id: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None


class GymAdminAccount(BaseModel):
    """Cuenta del administrador que se crea junto con el gimnasio"""
    admin_name: str = Field(..., min_length=1, max_length=255)
    admin_email: EmailStr
    admin_password: str = Field(..., min_length=1)


class GymProvisionRequest(BaseModel):
    gym: GymCreate
    admin: GymAdminAccount


class GymProvisionResult(BaseModel):
    gym: Gym
    admin_uid: str
    admin_email: str


class PlatformStats(BaseModel):
    total_gyms: int
    active_gyms: int
    inactive_gyms: int
    total_monthly_fees: float


class GymListResponse(BaseModel):
    gyms: List[Gym]
    stats: PlatformStats
