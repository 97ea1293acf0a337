"""Pydantic models describing the Square API payloads we read."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SquareBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class MoneyPayload(SquareBaseModel):
    amount: int = 0
    currency: str | None = None


class LocationOverridePayload(SquareBaseModel):
    location_id: str
    price_money: MoneyPayload | None = None


class CategoryDataPayload(SquareBaseModel):
    name: str | None = None


class CategoryRefPayload(SquareBaseModel):
    id: str


class ModifierListInfoPayload(SquareBaseModel):
    modifier_list_id: str
    min_selected_modifiers: int | None = None
    max_selected_modifiers: int | None = None
    enabled: bool = True


class ItemDataPayload(SquareBaseModel):
    name: str | None = None
    description: str | None = None
    category_id: str | None = None
    categories: list[CategoryRefPayload] = Field(default_factory=list["CategoryRefPayload"])
    modifier_list_info: list[ModifierListInfoPayload] = Field(
        default_factory=list["ModifierListInfoPayload"]
    )
    image_ids: list[str] = Field(default_factory=list[str])

    @property
    def resolved_category_id(self) -> str | None:
        if self.category_id:
            return self.category_id
        return self.categories[0].id if self.categories else None


class VariationDataPayload(SquareBaseModel):
    item_id: str
    name: str | None = None
    ordinal: int | None = None
    price_money: MoneyPayload | None = None
    location_overrides: list[LocationOverridePayload] = Field(
        default_factory=list["LocationOverridePayload"]
    )


class ModifierListDataPayload(SquareBaseModel):
    name: str | None = None
    selection_type: str | None = None


class ModifierDataPayload(SquareBaseModel):
    modifier_list_id: str
    name: str | None = None
    ordinal: int | None = None
    price_money: MoneyPayload | None = None
    location_overrides: list[LocationOverridePayload] = Field(
        default_factory=list["LocationOverridePayload"]
    )


class ImageDataPayload(SquareBaseModel):
    name: str | None = None
    url: str | None = None
    caption: str | None = None


class CatalogObjectPayload(SquareBaseModel):
    type: str
    id: str
    is_deleted: bool = False
    present_at_all_locations: bool = True
    present_at_location_ids: list[str] = Field(default_factory=list[str])
    absent_at_location_ids: list[str] = Field(default_factory=list[str])
    category_data: CategoryDataPayload | None = None
    item_data: ItemDataPayload | None = None
    item_variation_data: VariationDataPayload | None = None
    modifier_list_data: ModifierListDataPayload | None = None
    modifier_data: ModifierDataPayload | None = None
    image_data: ImageDataPayload | None = None


class ListCatalogResponse(SquareBaseModel):
    objects: list[CatalogObjectPayload] = Field(default_factory=list["CatalogObjectPayload"])
    cursor: str | None = None


class BusinessHoursPeriodPayload(SquareBaseModel):
    day_of_week: str
    start_local_time: str
    end_local_time: str


class BusinessHoursPayload(SquareBaseModel):
    periods: list[BusinessHoursPeriodPayload] = Field(
        default_factory=list["BusinessHoursPeriodPayload"]
    )


class LocationPayload(SquareBaseModel):
    id: str
    name: str | None = None
    timezone: str | None = None
    status: str | None = None
    business_hours: BusinessHoursPayload | None = None


class ListLocationsResponse(SquareBaseModel):
    locations: list[LocationPayload] = Field(default_factory=list["LocationPayload"])


class RetrieveLocationResponse(SquareBaseModel):
    location: LocationPayload


class LineItemModifierPayload(SquareBaseModel):
    uid: str | None = None
    catalog_object_id: str | None = None
    name: str | None = None


class LineItemPayload(SquareBaseModel):
    uid: str | None = None
    catalog_object_id: str | None = None
    quantity: int = 1
    note: str | None = None
    name: str | None = None
    total_money: MoneyPayload | None = None
    base_price_money: MoneyPayload | None = None
    modifiers: list[LineItemModifierPayload] = Field(
        default_factory=list["LineItemModifierPayload"]
    )

    @field_validator("quantity", mode="before")
    @classmethod
    def _parse_quantity(cls, value: int | str) -> int:
        # quantities are decimal strings on the wire
        return int(float(value))


class FulfillmentPayload(SquareBaseModel):
    uid: str | None = None
    type: str | None = None
    state: str | None = None


class OrderPayload(SquareBaseModel):
    id: str
    location_id: str
    version: int | None = None
    state: str | None = None
    line_items: list[LineItemPayload] = Field(default_factory=list["LineItemPayload"])
    total_money: MoneyPayload | None = None
    total_tax_money: MoneyPayload | None = None
    total_discount_money: MoneyPayload | None = None
    total_tip_money: MoneyPayload | None = None
    total_service_charge_money: MoneyPayload | None = None
    fulfillments: list[FulfillmentPayload] = Field(default_factory=list["FulfillmentPayload"])


class OrderResponse(SquareBaseModel):
    order: OrderPayload


class PaymentPayload(SquareBaseModel):
    id: str
    status: str | None = None
    total_money: MoneyPayload | None = None
    tip_money: MoneyPayload | None = None
    app_fee_money: MoneyPayload | None = None


class PaymentResponse(SquareBaseModel):
    payment: PaymentPayload


class ErrorPayload(SquareBaseModel):
    category: str | None = None
    code: str | None = None
    detail: str | None = None


class ErrorResponse(SquareBaseModel):
    errors: list[ErrorPayload] = Field(default_factory=list["ErrorPayload"])
