"""
权限控制辅助函数
用于后台管理API的权限检查
使用 FastAPI 依赖注入模式
"""

from typing import Annotated, Any, Dict, Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.services.admin.session_service import read_session_token
from app.services.invite_code.adapter import InviteCodeAdapter
from app.utils.api_utils import get_invite_code_adapter

bearer_scheme = HTTPBearer(auto_error=False)


def require_admin(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)],
    adapter: Annotated[InviteCodeAdapter, Depends(get_invite_code_adapter)],
) -> Dict[str, Any]:
    """
    管理员权限依赖 - 校验登录时签发的会话令牌

    用法:
        @router.get("/admin/invite-codes")
        async def list_codes(admin: CurrentAdmin):
            ...

    Returns:
        会话信息 {admin_id, username, role, session_id, expires_at}
    """
    if credentials is None:
        raise HTTPException(status_code=401, detail="未认证")

    session = read_session_token(credentials.credentials)
    if session is None:
        raise HTTPException(status_code=401, detail="登录已过期，请重新登录")
    if adapter.sessions.is_session_revoked(session):
        raise HTTPException(status_code=401, detail="已退出登录，请重新登录")
    return session


# 类型别名,使代码更简洁
CurrentAdmin = Annotated[Dict[str, Any], Depends(require_admin)]
