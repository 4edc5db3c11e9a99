from fastapi import APIRouter

from draft_assistant.api.v1 import draft

api_router = APIRouter()

api_router.include_router(draft.router, prefix="/draft", tags=["draft"])
