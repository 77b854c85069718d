"""
管理端API路由
包括管理员初始化、登录以及邀请码管理
"""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response
from loguru import logger
from pydantic import BaseModel, Field

from app.core.response_models import create_error_response, create_success_response
from app.models.schemas import AdminUserInfo, InviteCodeGenerateOptions
from app.models.schemas.invite_code_schemas import InviteCodeStatusName
from app.services.invite_code.adapter import InviteCodeAdapter
from app.utils.api_utils import get_invite_code_adapter
from app.utils.permission_helpers import CurrentAdmin

router = APIRouter(prefix="/api/admin", tags=["admin"])

Adapter = Annotated[InviteCodeAdapter, Depends(get_invite_code_adapter)]

MAX_BATCH_COUNT = 100


# ========== 管理API模型定义 ==========

class AdminCredentialsRequest(BaseModel):
    """管理员用户名/密码"""
    username: str = Field(..., min_length=1, max_length=64)
    password: str = Field(..., min_length=6, max_length=128)


class BatchCreateRequest(BaseModel):
    """批量生成邀请码请求"""
    count: int = Field(..., ge=1, le=MAX_BATCH_COUNT, description="生成数量")
    options: InviteCodeGenerateOptions


class UpdateStatusRequest(BaseModel):
    """更新邀请码状态请求"""
    status: InviteCodeStatusName


def _public_admin(admin: AdminUserInfo) -> dict:
    """返回给前端的管理员信息（不含密码哈希）"""
    return admin.model_dump(mode="json", exclude={"password_hash"})


# ========== 管理员账户 ==========

@router.get("/init-status")
async def get_init_status(adapter: Adapter):
    """是否需要创建第一个管理员"""
    return create_success_response(data={
        "needs_initialization": adapter.needs_admin_initialization(),
        "backend": adapter.get_backend_type(),
    })


@router.post("/init")
async def initialize_admin(body: AdminCredentialsRequest, adapter: Adapter):
    """创建第一个管理员（超级管理员），已有管理员时拒绝"""
    if not adapter.needs_admin_initialization():
        return create_error_response(
            message="管理员已初始化", error_code="ALREADY_INITIALIZED", status_code=403
        )
    admin = adapter.create_admin_user(body.username, body.password)
    return create_success_response(data=_public_admin(admin), message="管理员创建成功")


@router.post("/admins")
async def create_admin(body: AdminCredentialsRequest, admin: CurrentAdmin, adapter: Adapter):
    """创建其他管理员 - 仅超级管理员"""
    if admin.get("role") != "super-admin":
        raise HTTPException(status_code=403, detail="仅超级管理员可创建管理员")
    created = adapter.create_admin_user(body.username, body.password)
    logger.info(f"管理员 {admin.get('username')} 创建了管理员 {created.username}")
    return create_success_response(data=_public_admin(created), message="管理员创建成功")


@router.post("/login")
async def login(body: AdminCredentialsRequest, adapter: Adapter):
    """管理员登录，成功返回 24 小时有效的令牌"""
    admin = adapter.admin_login(body.username, body.password)
    if admin is None:
        return create_error_response(
            message="用户名或密码错误", error_code="INVALID_CREDENTIALS", status_code=401
        )
    token = adapter.sessions.save_admin_session(admin)
    return create_success_response(
        data={"access_token": token, "token_type": "bearer", "admin": _public_admin(admin)},
        message="登录成功",
    )


@router.get("/session")
async def get_session(admin: CurrentAdmin):
    """当前令牌对应的管理员会话"""
    return create_success_response(data=admin)


@router.post("/logout")
async def logout(admin: CurrentAdmin, adapter: Adapter):
    adapter.sessions.revoke_session(admin)
    logger.info(f"管理员退出登录: {admin.get('username')}")
    return create_success_response(message="已退出登录")


# ========== 邀请码管理 ==========

@router.get("/invite-codes")
async def list_invite_codes(admin: CurrentAdmin, adapter: Adapter):
    """获取全部邀请码（按创建时间倒序）"""
    codes = adapter.get_all_invite_codes()
    return create_success_response(data=[code.model_dump(mode="json") for code in codes])


@router.post("/invite-codes")
async def create_invite_code(options: InviteCodeGenerateOptions, admin: CurrentAdmin, adapter: Adapter):
    """生成单个邀请码"""
    code = adapter.create_invite_code(options, created_by=admin.get("username") or "admin")
    return create_success_response(data=code.model_dump(mode="json"), message=f"邀请码创建成功: {code.code}")


@router.post("/invite-codes/batch")
async def batch_create_invite_codes(body: BatchCreateRequest, admin: CurrentAdmin, adapter: Adapter):
    """批量生成邀请码，单个失败会被跳过"""
    codes = adapter.batch_create_invite_codes(
        body.count, body.options, created_by=admin.get("username") or "admin"
    )
    return create_success_response(
        data=[code.model_dump(mode="json") for code in codes],
        message=f"成功生成 {len(codes)}/{body.count} 个邀请码",
    )


@router.get("/invite-codes/stats")
async def get_invite_code_stats(admin: CurrentAdmin, adapter: Adapter):
    stats = adapter.get_invite_code_stats()
    return create_success_response(data=stats.model_dump(mode="json"))


@router.get("/invite-codes/export")
async def export_invite_codes(admin: CurrentAdmin, adapter: Adapter):
    """导出全部邀请码为 CSV 文件"""
    content = adapter.export_invite_codes_csv()
    filename = f"invite_codes_{datetime.now().strftime('%Y%m%d_%H%M%S')}.csv"
    return Response(
        content=content.encode("utf-8"),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/invite-codes/{code_id}")
async def get_invite_code(code_id: str, admin: CurrentAdmin, adapter: Adapter):
    code = adapter.get_invite_code(code_id)
    return create_success_response(data=code.model_dump(mode="json"))


@router.put("/invite-codes/{code_id}/status")
async def update_invite_code_status(
    code_id: str, body: UpdateStatusRequest, admin: CurrentAdmin, adapter: Adapter
):
    """更新邀请码状态（启用/禁用等）"""
    if not adapter.update_invite_code_status(code_id, body.status):
        raise HTTPException(status_code=404, detail="邀请码不存在")
    return create_success_response(message="邀请码状态已更新")


@router.delete("/invite-codes/{code_id}")
async def delete_invite_code(code_id: str, admin: CurrentAdmin, adapter: Adapter):
    """删除邀请码（使用记录保留）"""
    if not adapter.delete_invite_code(code_id):
        raise HTTPException(status_code=404, detail="邀请码不存在")
    logger.info(f"管理员 {admin.get('username')} 删除了邀请码 {code_id}")
    return create_success_response(message="邀请码已删除")


@router.get("/invite-codes/{code_id}/usages")
async def get_invite_code_usages(code_id: str, admin: CurrentAdmin, adapter: Adapter):
    """邀请码使用记录（最新在前）"""
    usages = adapter.get_invite_code_usages(code_id)
    return create_success_response(data=[usage.model_dump(mode="json") for usage in usages])
