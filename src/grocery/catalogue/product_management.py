"""Admin product management: create, update and soft-delete."""

import json

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Boolean, Float, Identifier, Integer, List, String, Text
from protean.utils.globals import current_domain

from grocery.catalogue.category import Category
from grocery.catalogue.product import Product
from grocery.domain import grocery

logger = structlog.get_logger(__name__)


@grocery.command(part_of="Product")
class CreateProduct:
    name: String(required=True, max_length=200, sanitize=False)
    price: Float(required=True, min_value=0.0)
    mrp: Float(min_value=0.0)
    stock: Integer(default=0, min_value=0)
    category_id: Identifier()
    subcategory_id: Identifier()
    description: Text()
    brand: String(max_length=100, sanitize=False)
    unit: String(max_length=30)
    low_stock_threshold: Integer(min_value=0)
    images: List(content_type=String)
    tags: List(content_type=String)
    variants: Text(sanitize=False)  # JSON array of {name, value, price, mrp, stock}
    is_featured: Boolean(default=False)
    is_popular: Boolean(default=False)


@grocery.command(part_of="Product")
class UpdateProduct:
    product_id: Identifier(required=True)
    name: String(max_length=200, sanitize=False)
    price: Float(min_value=0.0)
    mrp: Float(min_value=0.0)
    stock: Integer(min_value=0)
    category_id: Identifier()
    subcategory_id: Identifier()
    description: Text()
    brand: String(max_length=100, sanitize=False)
    unit: String(max_length=30)
    low_stock_threshold: Integer(min_value=0)
    images: List(content_type=String)
    tags: List(content_type=String)
    variants: Text(sanitize=False)
    is_featured: Boolean()
    is_popular: Boolean()
    is_active: Boolean()


@grocery.command(part_of="Product")
class DeactivateProduct:
    product_id: Identifier(required=True)


def _ensure_category(category_id):
    if category_id is None:
        return
    try:
        current_domain.repository_for(Category).get(category_id)
    except ObjectNotFoundError:
        raise ValidationError({"category_id": ["Category not found"]}) from None


def _parse_variants(raw):
    if raw is None:
        return None
    try:
        variants = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        raise ValidationError({"variants": ["Variants must be valid JSON"]}) from None
    if not isinstance(variants, list):
        raise ValidationError({"variants": ["Variants must be a list"]})
    return variants


@grocery.command_handler(part_of=Product)
class ProductManagementHandler:
    @handle(CreateProduct)
    def create_product(self, command):
        _ensure_category(command.category_id)
        _ensure_category(command.subcategory_id)

        product = Product.create(
            name=command.name,
            price=command.price,
            mrp=command.mrp,
            stock=command.stock,
            category_id=command.category_id,
            subcategory_id=command.subcategory_id,
            description=command.description,
            brand=command.brand,
            unit=command.unit,
            low_stock_threshold=command.low_stock_threshold,
            images=command.images,
            tags=command.tags,
            variants=_parse_variants(command.variants),
            is_featured=command.is_featured,
            is_popular=command.is_popular,
        )
        current_domain.repository_for(Product).add(product)
        logger.info("product created", product_id=str(product.id), slug=product.slug)
        return str(product.id)

    @handle(UpdateProduct)
    def update_product(self, command):
        _ensure_category(command.category_id)
        _ensure_category(command.subcategory_id)

        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.update_details(
            name=command.name,
            price=command.price,
            mrp=command.mrp,
            stock=command.stock,
            category_id=command.category_id,
            subcategory_id=command.subcategory_id,
            description=command.description,
            brand=command.brand,
            unit=command.unit,
            low_stock_threshold=command.low_stock_threshold,
            images=command.images or None,
            tags=command.tags or None,
            variants=_parse_variants(command.variants),
            is_featured=command.is_featured,
            is_popular=command.is_popular,
            is_active=command.is_active,
        )
        repo.add(product)

    @handle(DeactivateProduct)
    def deactivate_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.deactivate()
        repo.add(product)
        logger.info("product deactivated", product_id=str(product.id))
