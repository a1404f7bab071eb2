"""
ChillGamer router module generic functionalities
"""

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse


router = APIRouter(tags=["Generic"])

LIVENESS_MESSAGE: str = "Data is coming on the server...!"


@router.get("/", response_class=PlainTextResponse)
async def verify_running_backend():
    """
    Return 200 OK with a static text to only verify that the service and the middlewares work
    """

    return LIVENESS_MESSAGE
