"""
HTTP 中间件与业务异常处理
"""

import time
from typing import Callable

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

from .exceptions import (
    BackendUnavailableError,
    ConflictError,
    InviteCodeSystemError,
    NotFoundError,
    PersistenceError,
)
from .logging_context import generate_trace_id, set_trace_id
from .response_models import create_error_response

MAX_BODY_BYTES = 1024 * 1024

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}

# 业务异常 -> HTTP 状态码
EXCEPTION_STATUS_CODES = {
    NotFoundError: 404,
    ConflictError: 409,
    BackendUnavailableError: 503,
    PersistenceError: 500,
}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """为每个请求分配 trace_id 并记录耗时"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = generate_trace_id()
        request.state.request_id = request_id
        set_trace_id(request_id)

        client = request.client.host if request.client else "unknown"
        started = time.perf_counter()
        logger.info(f"请求开始 {request.method} {request.url.path} 来自 {client}")

        response = await call_next(request)

        elapsed = time.perf_counter() - started
        logger.info(f"请求结束 {request.method} {request.url.path} -> {response.status_code} ({elapsed:.3f}s)")
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = f"{elapsed:.3f}"
        set_trace_id(None)
        return response


class SecurityMiddleware(BaseHTTPMiddleware):
    """限制请求体大小并附加安全响应头"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > MAX_BODY_BYTES:
            logger.warning(f"请求体过大被拒绝: {request.url.path} ({content_length} bytes)")
            return create_error_response("请求体过大", error_code="REQUEST_TOO_LARGE", status_code=413)

        response = await call_next(request)
        response.headers.update(SECURITY_HEADERS)
        return response


async def invite_code_error_handler(request: Request, exc: InviteCodeSystemError) -> JSONResponse:
    """业务异常统一转换为 {success, message, error_code} 响应"""
    status_code = next(
        (code for exc_type, code in EXCEPTION_STATUS_CODES.items() if isinstance(exc, exc_type)),
        500,
    )
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} 失败: {exc}")
    else:
        logger.warning(f"{request.method} {request.url.path} 失败: {exc}")
    return create_error_response(str(exc), error_code=exc.error_code, status_code=status_code)


def setup_middleware(app: FastAPI) -> None:
    """注册中间件和业务异常处理"""
    # 后添加的先执行
    app.add_middleware(SecurityMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_exception_handler(InviteCodeSystemError, invite_code_error_handler)

    logger.info("中间件已设置完成")
