import logging
from typing import Any

from fastapi import APIRouter, Body

logger = logging.getLogger("fxquote.general")

router = APIRouter(tags=["general"])


@router.get("/")
async def root():
    return {"message": "Welcome to my API world!"}


@router.post("/echo", summary="Echo the request body back")
async def echo(body: Any = Body(None)):
    logger.warning("request received to /echo")
    return {"message": "Echoing back the request body", "body": body}
