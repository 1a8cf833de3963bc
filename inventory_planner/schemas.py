from collections.abc import Mapping
from datetime import date
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from . import settings
from .utils import clean_number, parse_iso_date


def _optional_text(value):
    if value is None:
        return None
    return str(value).strip()


class TransitRecord(BaseModel):
    """
    A purchase order already placed for a SKU and not yet received.
    Bad quantities become 0 and bad arrival dates become None, so one broken
    row never rejects the whole SKU.
    """

    model_config = ConfigDict(extra="allow")

    quantity: float = Field(default=0.0, ge=0)
    date_of_arrival: date | None = None

    @field_validator("quantity", mode="before")
    @classmethod
    def _clean_quantity(cls, value):
        return max(clean_number(value), 0.0)

    @field_validator("date_of_arrival", mode="before")
    @classmethod
    def _parse_arrival(cls, value):
        return parse_iso_date(value)


class SkuRecord(BaseModel):
    """
    Defines the data contract for one SKU of the planning snapshot.
    Optional collections that arrive in the wrong shape are replaced by empty
    ones; unknown fields are kept so they travel with the projected record.
    """

    model_config = ConfigDict(extra="allow")

    id: str = Field(..., validation_alias=AliasChoices("id", "sku"))
    sku_name: str | None = None
    brand: str | None = None
    category: str | None = None
    owner: str | None = None
    stock_actual: float = Field(default=0.0, ge=0)
    objetivo_mensual_gmv: float = 0.0
    forecasts: list[float] = Field(default_factory=list)
    purchase_orders: list[TransitRecord] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def _clean_id(cls, value):
        text = _optional_text(value)
        if not text:
            raise ValueError("SKU id is required")
        return text

    @field_validator("sku_name", "brand", "category", "owner", mode="before")
    @classmethod
    def _clean_text(cls, value):
        return _optional_text(value)

    @field_validator("stock_actual", mode="before")
    @classmethod
    def _clean_stock(cls, value):
        return max(clean_number(value), 0.0)

    @field_validator("objetivo_mensual_gmv", mode="before")
    @classmethod
    def _clean_gmv(cls, value):
        return clean_number(value)

    @field_validator("forecasts", mode="before")
    @classmethod
    def _clean_forecasts(cls, value):
        if not isinstance(value, (list, tuple)):
            return []
        return [clean_number(v) for v in value[: settings.PROJECTION_MONTHS]]

    @field_validator("purchase_orders", mode="before")
    @classmethod
    def _clean_purchase_orders(cls, value):
        if not isinstance(value, (list, tuple)):
            return []
        return [po for po in value if isinstance(po, (Mapping, TransitRecord))]


class MonthDetail(BaseModel):
    """One month of the rolling projection window."""

    model_config = ConfigDict(frozen=True)

    year: int
    month_index: int = Field(..., ge=0, le=11)  # zero-based, January = 0
    days_in_month: int = Field(..., ge=28, le=31)
    month_name: str


class MonthProjection(BaseModel):
    """Days covered by stock within one simulated month."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    count: int = Field(..., ge=0)
    days_in_month: int = Field(..., ge=0, alias="daysInMonth")


class ProjectedSku(SkuRecord):
    """A SKU record augmented with its days-of-stock projection."""

    dias_stock_hoy: float
    projections: list[MonthProjection] = Field(default_factory=list)


class PurchaseOrderLine(BaseModel):
    """
    A line of a purchase order that still has to be placed with a supplier.
    """

    model_config = ConfigDict(extra="allow")

    id: str | None = None
    sku: str
    proveedor: str | None = None
    owner: str | None = None
    cantidad_a_comprar: float = 0.0
    precio_unitario: float = 0.0
    status: str = settings.PO_STATUS_PENDING

    @field_validator("id", "proveedor", "owner", mode="before")
    @classmethod
    def _clean_text(cls, value):
        return _optional_text(value)

    @field_validator("sku", mode="before")
    @classmethod
    def _clean_sku(cls, value):
        text = _optional_text(value)
        if not text:
            raise ValueError("Purchase-order line needs a SKU")
        return text

    @field_validator("cantidad_a_comprar", "precio_unitario", mode="before")
    @classmethod
    def _clean_amounts(cls, value):
        return clean_number(value)

    @property
    def amount(self) -> float:
        return self.cantidad_a_comprar * self.precio_unitario

    @property
    def is_done(self) -> bool:
        return self.status == settings.PO_STATUS_DONE


class SupplierItem(PurchaseOrderLine):
    """A purchase-order line enriched with the SKU's stock and transit data."""

    sku_name: str = "N/A"
    category: str = "N/A"
    stock_actual: float = 0.0
    total_in_transit: float = 0.0
    next_arrival: date | None = None


class SupplierSummary(BaseModel):
    """Purchase-order lines of one supplier with their prioritization totals."""

    name: str
    owner: str | None = None
    items: list[SupplierItem] = Field(default_factory=list)
    total_amount: float = 0.0
    total_items: float = 0.0
    risk_score: int = 0
