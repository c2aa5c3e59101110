from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from formstudio.core.config import settings
from formstudio.core.logging import api_logger
from formstudio.db.database import get_db

router = APIRouter()


@router.get('/healthz')
def healthz():
    return {"status": "ok", "service": settings.APP_NAME}


@router.get('/readyz')
async def readyz(db: AsyncSession = Depends(get_db)):
    """Ready once the database answers and the forms table exists."""
    try:
        await db.execute(text('SELECT 1 FROM forms LIMIT 1'))
    except SQLAlchemyError as e:
        api_logger.error('Readiness check failed', error=e)
        raise HTTPException(status_code=503, detail='Not ready')
    return {"status": "ready"}
