from fastapi import APIRouter

from leavedesk.api.employees import employees_router
from leavedesk.api.policies import router as policies_router
from leavedesk.api.requests import requests_router

api_router = APIRouter()
api_router.include_router(employees_router)
api_router.include_router(requests_router)
api_router.include_router(policies_router)
