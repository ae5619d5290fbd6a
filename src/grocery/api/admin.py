"""Back-office dashboard endpoints, all restricted to admins."""

from fastapi import APIRouter, Depends

from grocery.api.auth import require_admin
from grocery.api.envelope import ok
from grocery.api.schemas import (
    DashboardData,
    Envelope,
    ProductList,
    ProductOut,
    SalesGraph,
)
from grocery.catalogue.queries import popular_products
from grocery.order import reports

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])

TOP_PRODUCTS_LIMIT = 10


@router.get("/dashboard", response_model=Envelope[DashboardData])
async def dashboard():
    return ok(DashboardData(stats=reports.dashboard_stats()))


@router.get("/sales-graph", response_model=Envelope[SalesGraph])
async def sales_graph(period: str = reports.SalesPeriod.LAST_7_DAYS.value):
    return ok(SalesGraph(period=period, sales=reports.sales_graph(period)))


@router.get("/top-products", response_model=Envelope[ProductList])
async def top_products():
    products = popular_products(limit=TOP_PRODUCTS_LIMIT)
    return ok(ProductList(products=[ProductOut.model_validate(p) for p in products]))
