from fastapi import APIRouter

from shipquote.api.routes import adapters, quotes

api_router = APIRouter()
api_router.include_router(quotes.router)
api_router.include_router(adapters.router)
