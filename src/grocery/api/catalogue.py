"""Catalogue endpoints: public browsing and admin product/category management."""

import json

from fastapi import APIRouter, Depends, Query
from protean.utils.globals import current_domain

from grocery.api.auth import require_admin
from grocery.api.envelope import ok
from grocery.api.schemas import (
    CategoryData,
    CategoryList,
    CategoryOut,
    CategoryTreeOut,
    CreateCategoryRequest,
    CreateProductRequest,
    Envelope,
    MessageResponse,
    ProductData,
    ProductList,
    ProductOut,
    UpdateCategoryRequest,
    UpdateProductRequest,
)
from grocery.catalogue import queries
from grocery.catalogue.category_management import CreateCategory, DeactivateCategory, UpdateCategory
from grocery.catalogue.product_management import CreateProduct, DeactivateProduct, UpdateProduct

product_router = APIRouter(prefix="/products", tags=["products"])
category_router = APIRouter(prefix="/categories", tags=["categories"])


def _variants_json(variants):
    if variants is None:
        return None
    return json.dumps([variant.model_dump() for variant in variants])


def _products(products) -> list[ProductOut]:
    return [ProductOut.model_validate(product) for product in products]


def _tree(category, subcategories) -> CategoryTreeOut:
    tree = CategoryTreeOut.model_validate(category)
    tree.subcategories = [CategoryOut.model_validate(sub) for sub in subcategories]
    return tree


# --- Product endpoints ---


@product_router.get("", response_model=Envelope[ProductList])
async def list_products(
    category: str | None = None,
    subcategory: str | None = None,
    brand: str | None = None,
    min_price: float | None = Query(default=None, alias="minPrice"),
    max_price: float | None = Query(default=None, alias="maxPrice"),
    search: str | None = None,
    featured: bool | None = None,
    popular: bool | None = None,
    sort: str = "newest",
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
):
    products, pagination = queries.list_products(
        category=category,
        subcategory=subcategory,
        brand=brand,
        min_price=min_price,
        max_price=max_price,
        search=search,
        featured=featured,
        popular=popular,
        sort=sort,
        page=page,
        limit=limit,
    )
    return ok(ProductList(products=_products(products), pagination=pagination))


@product_router.get("/featured", response_model=Envelope[ProductList])
async def featured_products():
    return ok(ProductList(products=_products(queries.featured_products())))


@product_router.get("/popular", response_model=Envelope[ProductList])
async def popular_products():
    return ok(ProductList(products=_products(queries.popular_products())))


@product_router.get("/low-stock", response_model=Envelope[ProductList], dependencies=[Depends(require_admin)])
async def low_stock_products():
    return ok(ProductList(products=_products(queries.low_stock_products())))


@product_router.get("/{id_or_slug}", response_model=Envelope[ProductData])
async def get_product(id_or_slug: str):
    return ok(ProductData(product=ProductOut.model_validate(queries.get_product(id_or_slug))))


@product_router.post("", status_code=201, response_model=Envelope[ProductData], dependencies=[Depends(require_admin)])
async def create_product(body: CreateProductRequest):
    command = CreateProduct(
        name=body.name,
        price=body.price,
        mrp=body.mrp,
        stock=body.stock,
        category_id=body.category_id,
        subcategory_id=body.subcategory_id,
        description=body.description,
        brand=body.brand,
        unit=body.unit,
        low_stock_threshold=body.low_stock_threshold,
        images=body.images,
        tags=body.tags,
        variants=_variants_json(body.variants),
        is_featured=body.is_featured,
        is_popular=body.is_popular,
    )
    product_id = current_domain.process(command, asynchronous=False)
    return ok(ProductData(product=ProductOut.model_validate(queries.get_product(product_id))), "Product created")


@product_router.put("/{product_id}", response_model=MessageResponse, dependencies=[Depends(require_admin)])
async def update_product(product_id: str, body: UpdateProductRequest):
    command = UpdateProduct(
        product_id=product_id,
        name=body.name,
        price=body.price,
        mrp=body.mrp,
        stock=body.stock,
        category_id=body.category_id,
        subcategory_id=body.subcategory_id,
        description=body.description,
        brand=body.brand,
        unit=body.unit,
        low_stock_threshold=body.low_stock_threshold,
        images=body.images,
        tags=body.tags,
        variants=_variants_json(body.variants),
        is_featured=body.is_featured,
        is_popular=body.is_popular,
        is_active=body.is_active,
    )
    current_domain.process(command, asynchronous=False)
    return ok(message="Product updated")


@product_router.delete("/{product_id}", response_model=MessageResponse, dependencies=[Depends(require_admin)])
async def delete_product(product_id: str):
    current_domain.process(DeactivateProduct(product_id=product_id), asynchronous=False)
    return ok(message="Product deleted")


# --- Category endpoints ---


@category_router.get("", response_model=Envelope[CategoryList])
async def list_categories():
    return ok(CategoryList(categories=[_tree(cat, subs) for cat, subs in queries.list_categories()]))


@category_router.get("/{id_or_slug}", response_model=Envelope[CategoryData])
async def get_category(id_or_slug: str):
    category, subcategories = queries.get_category(id_or_slug)
    return ok(CategoryData(category=_tree(category, subcategories)))


@category_router.post("", status_code=201, response_model=Envelope[CategoryData], dependencies=[Depends(require_admin)])
async def create_category(body: CreateCategoryRequest):
    command = CreateCategory(
        name=body.name,
        description=body.description,
        image=body.image,
        parent_id=body.parent_id,
        sort_order=body.sort_order,
    )
    category_id = current_domain.process(command, asynchronous=False)
    category, subcategories = queries.get_category(category_id)
    return ok(CategoryData(category=_tree(category, subcategories)), "Category created")


@category_router.put("/{category_id}", response_model=MessageResponse, dependencies=[Depends(require_admin)])
async def update_category(category_id: str, body: UpdateCategoryRequest):
    command = UpdateCategory(
        category_id=category_id,
        name=body.name,
        description=body.description,
        image=body.image,
        sort_order=body.sort_order,
        is_active=body.is_active,
    )
    current_domain.process(command, asynchronous=False)
    return ok(message="Category updated")


@category_router.delete("/{category_id}", response_model=MessageResponse, dependencies=[Depends(require_admin)])
async def delete_category(category_id: str):
    current_domain.process(DeactivateCategory(category_id=category_id), asynchronous=False)
    return ok(message="Category deleted")
