# api/v1/router.py
from fastapi import APIRouter
from .endpoints import health, diagnosis, soil, plans

api_router = APIRouter()
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(diagnosis.router, prefix="/diagnosis", tags=["diagnosis"])
api_router.include_router(soil.router, prefix="/soil", tags=["soil"])
api_router.include_router(plans.router, prefix="/plans", tags=["plans"])
