from fastapi import APIRouter

from src.app.api.v1 import (
    audit,
    billing,
    interests,
    invites,
    messages,
    payments,
    projects,
    proposals,
    ratings,
    reports,
    subscriptions,
    users,
)

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(users.router)
api_router.include_router(projects.router)
api_router.include_router(proposals.router)
api_router.include_router(billing.router)
api_router.include_router(payments.router)
api_router.include_router(messages.router)
api_router.include_router(invites.router)
api_router.include_router(interests.router)
api_router.include_router(ratings.router)
api_router.include_router(reports.router)
api_router.include_router(subscriptions.router)
api_router.include_router(audit.router)
