"""
OAuth 2.0 Device Authorization endpoint.

Implements the device authorization request of RFC 8628: an authenticated
device client asks for a device code and a user code.
"""

import logging

from fastapi import APIRouter, Request
from starlette.concurrency import run_in_threadpool

from ..core.dependencies import CurrentPrincipal, DeviceAuthorization
from ..core.errors import OAuthErrorResponse
from ..models.device_flow import DeviceCodeResponse, RequestContext

logger = logging.getLogger(__name__)

router = APIRouter()

ERROR_RESPONSES = {
    400: {"model": OAuthErrorResponse, "description": "Requested scope not allowed for the client"},
    401: {"model": OAuthErrorResponse, "description": "Caller or client could not be authenticated"},
    500: {"model": OAuthErrorResponse, "description": "Device codes could not be issued"},
}


def request_context(req: Request) -> RequestContext:
    return RequestContext(base_url=str(req.url.replace(query="", fragment="")))


@router.post("/oauth/device_authorize", response_model=DeviceCodeResponse, responses=ERROR_RESPONSES)
async def device_authorize(req: Request, principal: CurrentPrincipal, service: DeviceAuthorization):
    """
    Device Authorization Endpoint.

    Accepts application/x-www-form-urlencoded with optional ``client_id``
    and ``scope`` (space-delimited). Any further fields are kept on the
    authorization request.
    """
    form = await req.form()
    parameters = {key: value for key, value in form.items() if isinstance(value, str)}

    # Registry lookups and store writes are blocking calls
    return await run_in_threadpool(service.authorize, parameters, principal, request_context(req))
