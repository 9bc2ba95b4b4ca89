from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from realty_crm.lib.database import get_db

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health(db: AsyncSession = Depends(get_db)):
    """
    Liveness check including a database round trip.
    """
    await db.execute(text("SELECT 1"))
    return {"status": "ok"}
