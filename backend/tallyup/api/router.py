"""
Main API router that includes all route modules.
"""
from fastapi import APIRouter
from tallyup.api.routes import splits, expenses, balances, settlements, periods, adjustments

api_router = APIRouter()

# Include all route modules
api_router.include_router(splits.router)
api_router.include_router(expenses.router)
api_router.include_router(balances.router)
api_router.include_router(settlements.router)
api_router.include_router(periods.router)
api_router.include_router(adjustments.router)
