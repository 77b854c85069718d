"""
用户端邀请码API
测评开始前验证、使用邀请码
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from loguru import logger
from pydantic import BaseModel, Field

from app.core.response_models import create_error_response, create_success_response
from app.services.invite_code.adapter import InviteCodeAdapter
from app.utils.api_utils import get_client_ip, get_invite_code_adapter, get_user_agent

router = APIRouter(prefix="/api/invite-codes", tags=["邀请码"])

Adapter = Annotated[InviteCodeAdapter, Depends(get_invite_code_adapter)]


# ========== 请求模型 ==========

class ValidateCodeRequest(BaseModel):
    """验证邀请码请求"""
    code: str = Field(..., min_length=1, max_length=64, description="邀请码")


class UseCodeRequest(BaseModel):
    """使用邀请码请求"""
    code: str = Field(..., min_length=1, max_length=64, description="邀请码")
    session_id: str = Field(..., min_length=1, max_length=128, description="测评会话ID")


def _normalize(code: str) -> str:
    return code.strip().upper()


# ========== 接口 ==========

@router.post("/validate")
async def validate_invite_code(body: ValidateCodeRequest, adapter: Adapter):
    """验证邀请码（可能顺带修正过期/用完状态）"""
    validation = adapter.validate_invite_code(_normalize(body.code))
    if not validation.valid:
        return create_error_response(
            message=validation.reason or "邀请码无效",
            error_code="INVALID_INVITE_CODE",
            status_code=400,
        )
    return create_success_response(data={"valid": True}, message="邀请码有效")


@router.post("/use")
async def use_invite_code(body: UseCodeRequest, request: Request, adapter: Adapter):
    """使用邀请码，成功后记录为该客户端的邀请码"""
    code = _normalize(body.code)
    success = adapter.use_invite_code(
        code,
        body.session_id,
        user_agent=get_user_agent(request),
        ip_address=get_client_ip(request),
    )
    if not success:
        validation = adapter.validate_invite_code(code)
        logger.info(f"邀请码使用被拒绝: {code}")
        return create_error_response(
            message=validation.reason or "邀请码使用失败",
            error_code="INVALID_INVITE_CODE",
            status_code=400,
        )
    return create_success_response(message="邀请码验证成功")


@router.get("/mine")
async def get_my_invite_code(adapter: Adapter):
    """当前客户端记住的邀请码及其是否仍然有效"""
    return create_success_response(data={
        "code": adapter.get_user_invite_code(),
        "valid": adapter.has_valid_user_invite_code(),
    })
