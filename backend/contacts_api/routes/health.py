"""
Contact API — Liveness Routes
===============================

What:  `/` banner and `/ping` health check.
Why:   Load balancers and humans need a cheap way to see the process is up.
How:   Both return fixed plain text and never touch the database; startup
       already refuses to run without a reachable store.
"""

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

router = APIRouter(tags=["Health"])

BANNER = "Welcome to the Contact API 🚀. Try /ping or /api/contacts"
PONG = "pong 🏓"


@router.get("/", response_class=PlainTextResponse, summary="Liveness banner")
async def banner() -> str:
    return BANNER


@router.get("/ping", response_class=PlainTextResponse, summary="Health check")
async def ping() -> str:
    return PONG
