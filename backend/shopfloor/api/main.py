from fastapi import APIRouter

from shopfloor.api.routes import auth, health, machines, production_jobs, production_orders

api_router = APIRouter()
api_router.include_router(auth.router)
api_router.include_router(health.router)

# Production scheduling
api_router.include_router(production_orders.router)
api_router.include_router(machines.router)
api_router.include_router(production_jobs.router)
