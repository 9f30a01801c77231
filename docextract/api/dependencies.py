"""
FastAPI dependency providers. Collaborators live on ``app.state.container``.
"""

from typing import Optional

from fastapi import Depends, Header, Request

from docextract.bootstrap import Container
from docextract.documents.service import DocumentService


def get_container(request: Request) -> Container:
    return request.app.state.container


def get_service(container: Container = Depends(get_container)) -> DocumentService:
    return container.service


def get_current_user_id(
    authorization: Optional[str] = Header(None),
    container: Container = Depends(get_container),
) -> str:
    """Authenticated caller's user ID. AuthenticationError becomes a 401."""
    return container.identity.authenticate(authorization)
