"""
API工具函数
提供便捷的辅助函数供路由使用
"""

from typing import Optional

from fastapi import Request

from app.services.invite_code.adapter import InviteCodeAdapter, invite_code_adapter


def get_invite_code_adapter() -> InviteCodeAdapter:
    """
    FastAPI 依赖：邀请码系统入口

    测试中可通过 app.dependency_overrides 替换为使用临时存储的实例
    """
    return invite_code_adapter


def get_client_ip(request: Request) -> Optional[str]:
    """获取客户端IP，优先使用反向代理转发的地址"""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def get_user_agent(request: Request) -> Optional[str]:
    """获取客户端 User-Agent"""
    return request.headers.get("user-agent")
