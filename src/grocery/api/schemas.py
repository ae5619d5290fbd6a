"""Pydantic request and response schemas for the storefront API.

These are the external contract. Request schemas are translated into
commands; response schemas are read straight off aggregates and entities.
"""

from datetime import datetime
from typing import Annotated, Generic, TypeVar

from pydantic import AfterValidator, AliasChoices, BaseModel, BeforeValidator, ConfigDict, Field, field_validator


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------
class VariantSchema(BaseModel):
    name: str
    value: str
    price: float = Field(ge=0)
    mrp: float | None = Field(default=None, ge=0)
    stock: int = Field(default=0, ge=0)


class CreateProductRequest(BaseModel):
    name: str
    price: float = Field(ge=0)
    mrp: float | None = Field(default=None, ge=0)
    stock: int = Field(default=0, ge=0)
    category_id: str | None = None
    subcategory_id: str | None = None
    description: str | None = None
    brand: str | None = None
    unit: str | None = None
    low_stock_threshold: int | None = Field(default=None, ge=0)
    images: list[str] = []
    tags: list[str] = []
    variants: list[VariantSchema] = []
    is_featured: bool = False
    is_popular: bool = False

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Toor Dal",
                    "price": 145.0,
                    "mrp": 160.0,
                    "stock": 80,
                    "unit": "1 kg",
                    "brand": "Tata Sampann",
                }
            ]
        }
    }


class UpdateProductRequest(BaseModel):
    name: str | None = None
    price: float | None = Field(default=None, ge=0)
    mrp: float | None = Field(default=None, ge=0)
    stock: int | None = Field(default=None, ge=0)
    category_id: str | None = None
    subcategory_id: str | None = None
    description: str | None = None
    brand: str | None = None
    unit: str | None = None
    low_stock_threshold: int | None = Field(default=None, ge=0)
    images: list[str] | None = None
    tags: list[str] | None = None
    variants: list[VariantSchema] | None = None
    is_featured: bool | None = None
    is_popular: bool | None = None
    is_active: bool | None = None


class CreateCategoryRequest(BaseModel):
    name: str
    description: str | None = None
    image: str | None = None
    parent_id: str | None = None
    sort_order: int = 0


class UpdateCategoryRequest(BaseModel):
    name: str | None = None
    description: str | None = None
    image: str | None = None
    sort_order: int | None = None
    is_active: bool | None = None


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class CartVariantSchema(BaseModel):
    name: str
    value: str


class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = Field(default=1, ge=1)
    variant: CartVariantSchema | None = None


class UpdateCartItemRequest(BaseModel):
    quantity: int


class ApplyCouponRequest(BaseModel):
    code: str


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class PlaceOrderRequest(BaseModel):
    address_id: str
    payment_method: str = "cod"
    loyalty_points_to_use: int = Field(default=0, ge=0)
    notes: str | None = None


class CancelOrderRequest(BaseModel):
    reason: str | None = None


class UpdateOrderStatusRequest(BaseModel):
    status: str
    note: str | None = None


class AssignAgentRequest(BaseModel):
    agent_id: str
    note: str | None = None


class ConfirmPaymentRequest(BaseModel):
    order_id: str
    payment_id: str | None = None


class PaymentFailureRequest(BaseModel):
    order_id: str


# ---------------------------------------------------------------------------
# Delivery
# ---------------------------------------------------------------------------
class DeliveryStatusRequest(BaseModel):
    order_id: str
    status: str
    otp: str | None = None
    note: str | None = None


class CompleteDeliveryRequest(BaseModel):
    otp: str | None = None
    note: str | None = None


class LocationRequest(BaseModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class PartnerApplicationRequest(BaseModel):
    vehicle_type: str = "bike"
    vehicle_number: str | None = None
    license_number: str | None = None


class ReviewApplicationRequest(BaseModel):
    status: str


class RegisterAgentRequest(BaseModel):
    name: str
    phone: str
    email: str | None = None
    vehicle_type: str = "bike"
    vehicle_number: str | None = None
    license_number: str | None = None


class UpdateAgentRequest(BaseModel):
    name: str | None = None
    phone: str | None = None
    email: str | None = None
    vehicle_type: str | None = None
    vehicle_number: str | None = None
    license_number: str | None = None


# ---------------------------------------------------------------------------
# Coupons and offers
# ---------------------------------------------------------------------------
class ValidateCouponRequest(BaseModel):
    code: str
    order_amount: float = Field(ge=0)


class CreateCouponRequest(BaseModel):
    code: str
    description: str | None = None
    coupon_type: str = "percentage"
    value: float = Field(ge=0)
    min_order_amount: float = Field(default=0, ge=0)
    max_discount: float | None = Field(default=None, ge=0)
    max_usage: int = -1
    max_usage_per_user: int = Field(default=1, ge=1)
    start_date: datetime
    end_date: datetime


class UpdateCouponRequest(BaseModel):
    code: str | None = None
    description: str | None = None
    value: float | None = Field(default=None, ge=0)
    min_order_amount: float | None = Field(default=None, ge=0)
    max_discount: float | None = Field(default=None, ge=0)
    max_usage: int | None = None
    max_usage_per_user: int | None = Field(default=None, ge=1)
    start_date: datetime | None = None
    end_date: datetime | None = None
    is_active: bool | None = None


class CreateOfferRequest(BaseModel):
    title: str
    description: str | None = None
    offer_type: str
    value: float = Field(ge=0)
    min_order_amount: float = Field(default=0, ge=0)
    max_discount: float | None = Field(default=None, ge=0)
    image: str | None = None
    banner_image: str | None = None
    start_date: datetime
    end_date: datetime
    is_banner: bool = False
    sort_order: int = 0


class UpdateOfferRequest(BaseModel):
    title: str | None = None
    description: str | None = None
    value: float | None = Field(default=None, ge=0)
    min_order_amount: float | None = Field(default=None, ge=0)
    max_discount: float | None = Field(default=None, ge=0)
    image: str | None = None
    banner_image: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    is_active: bool | None = None
    is_banner: bool | None = None
    sort_order: int | None = None


# ---------------------------------------------------------------------------
# Customers, addresses, loyalty and notifications
# ---------------------------------------------------------------------------
class UpdateProfileRequest(BaseModel):
    name: str | None = None
    email: str | None = None


class AddressRequest(BaseModel):
    full_name: str
    phone: str
    address_line1: str
    address_line2: str | None = None
    landmark: str | None = None
    city: str
    state: str
    pincode: str
    address_type: str = "home"
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    is_default: bool = False


class UpdateAddressRequest(BaseModel):
    full_name: str | None = None
    phone: str | None = None
    address_line1: str | None = None
    address_line2: str | None = None
    landmark: str | None = None
    city: str | None = None
    state: str | None = None
    pincode: str | None = None
    address_type: str | None = None
    is_default: bool | None = None


class BonusPointsRequest(BaseModel):
    customer_id: str
    points: int = Field(ge=1)
    description: str | None = None


class SendNotificationRequest(BaseModel):
    title: str
    body: str
    type: str = "system"
    user_id: str | None = None
    image: str | None = None
    is_broadcast: bool = False


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
def _as_str(value):
    return str(value) if value is not None else None


ObjectId = Annotated[str, BeforeValidator(_as_str)]
Amount = Annotated[float, BeforeValidator(lambda value: value or 0.0), AfterValidator(lambda value: round(value, 2))]
StrList = Annotated[list[str], BeforeValidator(lambda value: list(value or []))]

DataT = TypeVar("DataT")


class ResponseSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class MessageResponse(BaseModel):
    success: bool = True
    message: str | None = None


class Envelope(MessageResponse, Generic[DataT]):
    """Success envelope: ``{"success": true, "message", "data"}``."""

    data: DataT | None = None


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class LocationOut(ResponseSchema):
    latitude: float
    longitude: float


# --- Catalogue ---


class VariantOut(ResponseSchema):
    id: ObjectId
    name: str
    value: str
    price: float
    mrp: float | None = None
    stock: int = 0


class ProductOut(ResponseSchema):
    id: ObjectId
    name: str
    slug: str
    description: str | None = None
    brand: str | None = None
    unit: str | None = None
    price: float
    mrp: float | None = None
    discount: int = 0
    stock: int = 0
    low_stock_threshold: int
    category_id: ObjectId | None = None
    subcategory_id: ObjectId | None = None
    variants: list[VariantOut] = []
    images: StrList = []
    tags: StrList = []
    is_active: bool
    is_featured: bool
    is_popular: bool
    total_sold: int = 0
    rating_average: float = 0.0
    rating_count: int = 0
    created_at: datetime | None = None


class CategoryOut(ResponseSchema):
    id: ObjectId
    name: str
    slug: str
    description: str | None = None
    image: str | None = None
    parent_id: ObjectId | None = None
    is_active: bool
    sort_order: int = 0


class CategoryTreeOut(CategoryOut):
    subcategories: list[CategoryOut] = []


class ProductData(BaseModel):
    product: ProductOut


class ProductList(BaseModel):
    products: list[ProductOut]
    pagination: Pagination | None = None


class CategoryData(BaseModel):
    category: CategoryTreeOut


class CategoryList(BaseModel):
    categories: list[CategoryTreeOut]


# --- Cart ---


class CartItemOut(ResponseSchema):
    id: ObjectId
    product_id: ObjectId
    variant_name: str | None = None
    variant_value: str | None = None
    variant_price: float | None = None
    quantity: int
    price: float
    line_total: Amount


class CartOut(ResponseSchema):
    id: ObjectId
    customer_id: ObjectId
    items: list[CartItemOut] = []
    coupon_id: ObjectId | None = None
    coupon_code: str | None = None
    coupon_discount: Amount = 0.0
    subtotal: Amount
    total_items: int


class CartData(BaseModel):
    cart: CartOut


# --- Orders ---


class DeliveryAddressOut(ResponseSchema):
    full_name: str
    phone: str
    address_line1: str
    address_line2: str | None = None
    landmark: str | None = None
    city: str
    state: str
    pincode: str
    latitude: float | None = None
    longitude: float | None = None


class OrderItemOut(ResponseSchema):
    product_id: ObjectId
    name: str
    image: str | None = None
    variant_name: str | None = None
    variant_value: str | None = None
    variant_price: float | None = None
    price: float
    quantity: int
    total: float


class StatusChangeOut(ResponseSchema):
    status: str
    note: str | None = None
    changed_at: datetime


class OrderOut(ResponseSchema):
    id: ObjectId
    order_number: str
    customer_id: ObjectId
    items: list[OrderItemOut] = []
    delivery_address: DeliveryAddressOut | None = None
    subtotal: Amount
    delivery_charge: Amount = 0.0
    coupon_code: str | None = None
    coupon_discount: Amount = 0.0
    loyalty_points_used: int = 0
    loyalty_points_discount: Amount = 0.0
    total_amount: Amount
    payment_method: str
    payment_status: str
    status: str
    delivery_agent_id: ObjectId | None = None
    estimated_delivery_time: datetime | None = None
    actual_delivery_time: datetime | None = None
    cancel_reason: str | None = None
    notes: str | None = None
    status_history: list[StatusChangeOut] = []
    created_at: datetime | None = None

    @field_validator("status_history")
    @classmethod
    def _oldest_first(cls, history):
        return sorted(history, key=lambda change: change.changed_at)


class CustomerOrderOut(OrderOut):
    """An order as its customer sees it, with the code to hand the agent at the door."""

    delivery_otp: str | None = None


class OrderData(BaseModel):
    order: OrderOut | None = None


class CustomerOrderData(BaseModel):
    order: CustomerOrderOut


class OrderList(BaseModel):
    orders: list[OrderOut]
    pagination: Pagination | None = None


# --- Delivery ---


class AgentOut(ResponseSchema):
    id: ObjectId
    user_id: ObjectId
    name: str
    phone: str
    email: str | None = None
    vehicle_type: str | None = None
    vehicle_number: str | None = None
    license_number: str | None = None
    is_available: bool
    is_active: bool
    is_online: bool
    current_location: LocationOut | None = None
    current_order_id: ObjectId | None = None
    total_deliveries: int = 0
    rating_average: float = 0.0
    rating_count: int = 0
    application_status: str
    earnings_today: Amount = 0.0
    earnings_total: Amount = 0.0


class NearbyAgentOut(AgentOut):
    distance: int


class AgentData(BaseModel):
    agent: AgentOut


class AgentList(BaseModel):
    agents: list[AgentOut]


class NearbyAgentList(BaseModel):
    agents: list[NearbyAgentOut]


# --- Coupons and offers ---


class CouponOut(ResponseSchema):
    id: ObjectId
    code: str
    description: str | None = None
    coupon_type: str
    value: float
    min_order_amount: float = 0.0
    max_discount: float | None = None
    max_usage: int
    usage_count: int = 0
    max_usage_per_user: int
    start_date: datetime
    end_date: datetime
    is_active: bool


class CouponPreviewOut(BaseModel):
    code: str
    discount: Amount


class CouponList(BaseModel):
    coupons: list[CouponOut]


class CouponCreated(BaseModel):
    coupon_id: ObjectId


class OfferOut(ResponseSchema):
    id: ObjectId
    title: str
    description: str | None = None
    type: str = Field(validation_alias=AliasChoices("offer_type", "type"))
    value: float
    min_order_amount: float = 0.0
    max_discount: float | None = None
    image: str | None = None
    banner_image: str | None = None
    start_date: datetime
    end_date: datetime
    is_active: bool
    is_banner: bool
    sort_order: int = 0


class OfferList(BaseModel):
    offers: list[OfferOut]


class BannerList(BaseModel):
    banners: list[OfferOut]


class OfferCreated(BaseModel):
    offer_id: ObjectId


# --- Customers, addresses, loyalty and notifications ---


class AddressOut(ResponseSchema):
    id: ObjectId
    full_name: str
    phone: str
    address_line1: str
    address_line2: str | None = None
    landmark: str | None = None
    city: str
    state: str
    pincode: str
    address_type: str | None = None
    location: LocationOut | None = None
    is_default: bool


class CustomerOut(ResponseSchema):
    id: ObjectId
    name: str
    phone: str
    email: str | None = None
    role: str
    is_active: bool
    loyalty_points: int = 0
    addresses: list[AddressOut] = []


class UserData(BaseModel):
    user: CustomerOut


class UserList(BaseModel):
    users: list[CustomerOut]
    pagination: Pagination


class AddressList(BaseModel):
    addresses: list[AddressOut]


class LoyaltyEntryOut(ResponseSchema):
    id: ObjectId
    type: str = Field(validation_alias=AliasChoices("entry_type", "type"))
    points: int
    order_id: ObjectId | None = None
    description: str | None = None
    created_at: datetime | None = None


class LoyaltyBalance(BaseModel):
    balance: int


class LoyaltyHistory(LoyaltyBalance):
    history: list[LoyaltyEntryOut]


class NotificationOut(ResponseSchema):
    id: ObjectId
    title: str
    body: str
    type: str = Field(validation_alias=AliasChoices("notification_type", "type"))
    data: dict = Field(default_factory=dict, validation_alias=AliasChoices("payload", "data"))
    image: str | None = None
    is_read: bool
    is_broadcast: bool
    sent_at: datetime | None = None


class NotificationFeed(BaseModel):
    notifications: list[NotificationOut]
    unread: int


class NotificationCreated(BaseModel):
    notification_id: ObjectId


# --- Back-office reports ---


class DashboardStatsOut(BaseModel):
    total_orders: int
    today_orders: int
    total_revenue: Amount
    today_revenue: Amount
    total_customers: int
    total_products: int
    pending_orders: int
    low_stock_products: int


class DashboardData(BaseModel):
    stats: DashboardStatsOut


class SalesPointOut(BaseModel):
    date: str
    orders: int
    revenue: Amount


class SalesGraph(BaseModel):
    period: str
    sales: list[SalesPointOut]
