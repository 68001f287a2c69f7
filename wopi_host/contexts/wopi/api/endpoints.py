"""
WOPI API endpoints.
"""

from fastapi import APIRouter, Depends, Header, Request
from typing import Optional

from ..domain.check_file_info import CheckFileInfoHandler
from ..domain.exceptions import AuthError, CheckFileInfoError
from ..infrastructure.config import WOPISettings
from ..infrastructure.dependencies import get_check_file_info_handler, get_wopi_settings
from ..infrastructure.structured_logger import redact_token, wopi_logger
from .dto import CheckFileInfoDTO
from .error_handlers import ERROR_RESPONSES, to_http_error

# Create router
router = APIRouter(prefix="/wopi", tags=["wopi"])


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    value = authorization.strip()
    if not value.lower().startswith("bearer "):
        return None
    return value[7:].strip() or None


@router.get(
    "/files/{file_id}",
    response_model=CheckFileInfoDTO,
    response_model_exclude_none=True,
    responses=ERROR_RESPONSES,
)
async def check_file_info(
    file_id: str,
    request: Request,
    access_token: Optional[str] = None,
    authorization: Optional[str] = Header(default=None),
    handler: CheckFileInfoHandler = Depends(get_check_file_info_handler),
    wopi_settings: WOPISettings = Depends(get_wopi_settings)
) -> dict:
    """
    CheckFileInfo endpoint - returns file metadata.
    This is the first call the editor makes. The access token comes from the
    access_token query parameter or an Authorization: Bearer header.
    """
    token = access_token or _bearer_token(authorization)
    post_message_origin = (
        wopi_settings.post_message_origin
        or f"{request.url.scheme}://{request.url.netloc}"
    )

    try:
        response = await handler.handle(file_id, token, post_message_origin)
    except CheckFileInfoError as e:
        if isinstance(e, AuthError):
            wopi_logger.log_token_validated(
                token_id=redact_token(token),
                valid=False,
                reason=e.cause_message
            )
        # Differentiated errors are logged by the structured error handler
        if not wopi_settings.differentiated_errors:
            wopi_logger.log_error(
                error_type=e.error_code,
                error_message=e.cause_message,
                context={"file_id": file_id}
            )
        raise to_http_error(e, differentiated=wopi_settings.differentiated_errors) from e

    wopi_logger.log_file_accessed(
        file_id=file_id,
        user_id=response.UserId,
        operation="check_file_info",
        success=True,
        size_bytes=response.Size
    )
    return response.to_dict()
