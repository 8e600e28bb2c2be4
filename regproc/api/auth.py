from fastapi import Header, HTTPException
from regproc.settings import settings


def require_api_key(x_api_key: str = Header(default="", alias="x-api-key")):
    """
    Intake endpoints are open when API_KEY is empty.
    Otherwise the x-api-key header must match.
    """
    if not settings.API_KEY:
        return
    if x_api_key != settings.API_KEY:
        raise HTTPException(status_code=401, detail="Invalid API key")
