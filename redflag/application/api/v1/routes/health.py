from fastapi import APIRouter

router = APIRouter(tags=["Health"])


@router.get("/ping")
async def ping() -> dict[str, str]:
    """Liveness probe. Never gated, never touches the database."""
    return {"status": "ok"}
