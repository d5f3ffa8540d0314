"""
API v1 router aggregating all endpoints.
"""
from fastapi import APIRouter

from shopcore.api.v1.tenants import router as tenants_router
from shopcore.api.v1.tenant_data import router as tenant_data_router
from shopcore.api.v1.ledger import router as ledger_router

api_router = APIRouter()

api_router.include_router(tenants_router)
api_router.include_router(tenant_data_router)
api_router.include_router(ledger_router)
