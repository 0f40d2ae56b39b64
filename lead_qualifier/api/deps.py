"""
API dependencies - shared across all routes.
"""
import uuid

from fastapi import Header, HTTPException, status


async def get_org_id(x_organization_id: str = Header(..., alias="X-Organization-ID")) -> uuid.UUID:
    """Organization the request acts on, from the X-Organization-ID header."""
    try:
        return uuid.UUID(x_organization_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="X-Organization-ID must be a UUID"
        )
