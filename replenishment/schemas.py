from datetime import date, datetime, time
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from . import settings, utils


class EngineModel(BaseModel):
    """
    Base for every data contract in the engine.
    Accepts both the dashboard's camelCase keys and snake_case field names,
    and exports with the camelCase aliases.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class Health(str, Enum):
    CRITICAL = "critical"
    LOW = "low"
    HEALTHY = "healthy"
    OVERSTOCK = "overstock"
    UNKNOWN = "unknown"


class AbcClass(str, Enum):
    A = "A"
    B = "B"
    C = "C"


# --- Inputs ---


class InventorySnapshotItem(EngineModel):
    """One channel-variant record as handed over by the sync subsystem."""

    sku: Optional[str] = None
    name: str = ""
    amazon_qty: int = 0
    threepl_qty: int = 0
    awd_qty: int = 0
    home_qty: int = 0
    amazon_inbound: int = 0
    awd_inbound: int = 0
    threepl_inbound: int = 0
    total_qty: Optional[int] = None
    cost: Optional[float] = None
    weekly_vel: float = 0
    amz_weekly_vel: float = 0
    shop_weekly_vel: float = 0
    corrected_vel: Optional[float] = None
    cv: float = 0
    safety_stock: Optional[float] = None
    seasonal_factor: Optional[float] = None
    demand_class: Optional[str] = None
    days_of_supply: Optional[float] = None
    stockout_risk: Optional[float] = None
    abc_class: Optional[AbcClass] = None

    @field_validator("sku", mode="before")
    @classmethod
    def _sku_as_string(cls, value: Any) -> Optional[str]:
        # Numeric SKUs (e.g. 1001) come through spreadsheets as numbers.
        if value is None:
            return None
        return str(value)

    @field_validator(
        "name",
        "amazon_qty",
        "threepl_qty",
        "awd_qty",
        "home_qty",
        "amazon_inbound",
        "awd_inbound",
        "threepl_inbound",
        "total_qty",
        "weekly_vel",
        "amz_weekly_vel",
        "shop_weekly_vel",
        "cv",
        mode="before",
    )
    @classmethod
    def _null_as_default(cls, value: Any, info) -> Any:
        if value is None:
            if info.field_name == "total_qty":
                return None
            return "" if info.field_name == "name" else 0
        if isinstance(value, float) and info.field_name.endswith(("_qty", "_inbound")):
            return utils.round_half_up(value)
        return value

    @property
    def on_hand_qty(self) -> int:
        """Total units on hand; derived from the locations when the feed omits it."""
        if self.total_qty is not None:
            return self.total_qty
        return self.amazon_qty + self.threepl_qty + self.awd_qty + self.home_qty

    @property
    def inbound_qty(self) -> int:
        return self.amazon_inbound + self.awd_inbound + self.threepl_inbound


class SnapshotSources(EngineModel):
    last_sync_per_channel: dict[str, datetime] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _collect_legacy_sync_keys(cls, data: Any) -> Any:
        # Older snapshots store one key per channel: lastPackiyoSync, lastAmazonSync.
        if not isinstance(data, dict):
            return data
        syncs = dict(
            data.get("lastSyncPerChannel") or data.get("last_sync_per_channel") or {}
        )
        for key, value in data.items():
            if key.startswith("last") and key.endswith("Sync") and value:
                channel = key[len("last"):-len("Sync")].lower()
                syncs.setdefault(channel, value)
        return {"last_sync_per_channel": {k: v for k, v in syncs.items() if v}}

    @field_validator("last_sync_per_channel", mode="after")
    @classmethod
    def _aware(cls, value: dict[str, datetime]) -> dict[str, datetime]:
        return {channel: utils.as_utc(ts) for channel, ts in value.items()}


class InventorySnapshot(EngineModel):
    items: list[InventorySnapshotItem] = Field(default_factory=list)
    sources: SnapshotSources = Field(default_factory=SnapshotSources)
    captured_at: datetime

    @field_validator("captured_at", mode="before")
    @classmethod
    def _date_means_noon(cls, value: Any) -> Any:
        # A bare snapshot date is read as midday, so a same-day read never decays.
        if isinstance(value, str) and len(value) == 10:
            value = date.fromisoformat(value)
        if isinstance(value, date) and not isinstance(value, datetime):
            return datetime.combine(value, time(12, 0))
        return value

    @field_validator("captured_at", mode="after")
    @classmethod
    def _captured_aware(cls, value: datetime) -> datetime:
        return utils.as_utc(value)


class CategoryLeadTime(EngineModel):
    lead_time_days: Optional[int] = None
    reorder_trigger_days: Optional[int] = None
    min_order_weeks: Optional[int] = None


class SkuSettings(EngineModel):
    lead_time: Optional[int] = None
    reorder_point: Optional[int] = None
    threepl_alert_qty: Optional[int] = None
    amazon_alert_days: Optional[int] = None
    target_days: Optional[int] = None
    alert_enabled: bool = False

    @field_validator(
        "lead_time",
        "reorder_point",
        "threepl_alert_qty",
        "amazon_alert_days",
        "target_days",
        mode="before",
    )
    @classmethod
    def _blank_is_unset(cls, value: Any) -> Any:
        # Settings forms save cleared inputs as empty strings.
        if isinstance(value, str) and not value.strip():
            return None
        return value


class ChannelRule(EngineModel):
    alert_enabled: bool = True
    min_days_of_supply: Optional[int] = None
    default_qty_threshold: Optional[int] = None


class ChannelRules(EngineModel):
    amazon: ChannelRule = Field(
        default_factory=lambda: ChannelRule(
            min_days_of_supply=settings.DEFAULT_AMAZON_MIN_DAYS_OF_SUPPLY
        )
    )
    threepl: ChannelRule = Field(
        default_factory=lambda: ChannelRule(
            default_qty_threshold=settings.DEFAULT_THREEPL_QTY_THRESHOLD
        )
    )


class LeadTimeSettings(EngineModel):
    """
    The whole replenishment configuration: global defaults, category overrides
    and per-SKU overrides. Treated as read-only input on every call.
    """

    default_lead_time_days: Optional[int] = settings.DEFAULT_LEAD_TIME_DAYS
    reorder_trigger_days: Optional[int] = settings.DEFAULT_REORDER_TRIGGER_DAYS
    min_order_weeks: Optional[int] = settings.DEFAULT_MIN_ORDER_WEEKS
    reorder_buffer: Optional[int] = settings.DEFAULT_REORDER_BUFFER_DAYS
    channel_rules: ChannelRules = Field(default_factory=ChannelRules)
    category_lead_times: dict[str, CategoryLeadTime] = Field(default_factory=dict)
    sku_categories: dict[str, str] = Field(default_factory=dict)
    sku_settings: dict[str, SkuSettings] = Field(default_factory=dict)


# --- Intermediate results ---


class ResolvedLeadTime(EngineModel):
    lead_time_days: int
    reorder_trigger_days: int
    min_order_weeks: int
    source: str = "default"


class HealthThresholds(EngineModel):
    critical: int
    low: int
    overstock: int


class AlertResult(EngineModel):
    triggered: bool = False
    reasons: list[str] = Field(default_factory=list)


# --- Outputs ---


class ComputedItem(EngineModel):
    """
    One canonical SKU after projection and scoring.
    Rebuilt on every run from the snapshot and settings, never stored.
    """

    sku: str
    base_sku: str
    name: str = ""
    cost: float = 0

    # Projected quantities
    total_qty: int = Field(default=0, ge=0)
    amazon_qty: int = 0
    threepl_qty: int = 0
    awd_qty: int = 0
    home_qty: int = 0
    amazon_inbound: int = 0
    awd_inbound: int = 0
    threepl_inbound: int = 0
    inbound_qty: int = 0

    # Velocities
    weekly_vel: float = 0
    amz_weekly_vel: float = 0
    shop_weekly_vel: float = 0
    corrected_vel: Optional[float] = None
    effective_velocity: float = 0
    cv: float = 0
    safety_stock: Optional[float] = None
    seasonal_factor: Optional[float] = None
    demand_class: Optional[str] = None

    # Timeline and health
    days_of_supply: int = settings.UNBOUNDED_DAYS
    stockout_date: Optional[date] = None
    reorder_by_date: Optional[date] = None
    days_until_must_order: Optional[int] = None
    health: Health = Health.UNKNOWN
    lead_time: ResolvedLeadTime
    thresholds: HealthThresholds

    # Classification and KPIs
    abc_class: AbcClass = AbcClass.C
    annual_revenue: float = 0
    total_value: float = 0
    turnover_rate: float = 0
    annual_carrying_cost: float = 0
    eoq: int = 0
    sell_through_rate: float = 0
    weeks_of_supply: float = settings.UNBOUNDED_DAYS
    stock_to_sales_ratio: float = settings.UNBOUNDED_DAYS
    stockout_risk: float = 0

    # Alerts
    alert: AlertResult = Field(default_factory=AlertResult)
    channel_alerts: list[str] = Field(default_factory=list)

    # Snapshot values kept for audit/display
    snapshot_total_qty: int = 0
    snapshot_amazon_qty: int = 0
    snapshot_threepl_qty: int = 0
    original_days_of_supply: Optional[float] = None
    days_elapsed: int = 0


class InventorySummary(EngineModel):
    sku_count: int = 0
    critical: int = 0
    low: int = 0
    healthy: int = 0
    overstock: int = 0
    unknown: int = 0
    total_units: int = 0
    total_value: float = 0
    amazon_units: int = 0
    amazon_value: float = 0
    threepl_units: int = 0
    threepl_value: float = 0
    awd_units: int = 0
    awd_value: float = 0
    home_units: int = 0
    home_value: float = 0
    inbound_units: int = 0
    avg_turnover: float = 0
    total_carrying_cost: float = 0
    avg_sell_through: float = 0
    in_stock_rate: float = 100
    total_safety_stock: float = 0
    abc_counts: dict[str, int] = Field(default_factory=dict)
    alert_count: int = 0


class InventoryReport(EngineModel):
    generated_at: datetime
    effective_data_date: datetime
    days_elapsed: int
    items: list[ComputedItem] = Field(default_factory=list)
    summary: InventorySummary = Field(default_factory=InventorySummary)
