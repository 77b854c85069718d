"""
管理员模型
邀请码管理后台的账户表
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Column, DateTime
from sqlmodel import Field, SQLModel


class Admin(SQLModel, table=True):
    """管理员表

    第一个注册的账户为超级管理员，之后注册的为普通管理员
    """
    __tablename__ = "admins"

    id: str = Field(
        default_factory=lambda: str(uuid.uuid4()),
        primary_key=True,
        max_length=36,
        description="管理员ID"
    )

    username: str = Field(
        index=True,
        unique=True,
        max_length=50,
        description="登录用户名"
    )
    password_hash: str = Field(
        max_length=255,
        description="密码哈希（bcrypt）"
    )
    role: str = Field(
        default="admin",
        max_length=16,
        description="角色：super-admin / admin"
    )

    # 状态
    is_active: bool = Field(
        default=True,
        description="账号是否启用"
    )
    last_login_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime, nullable=True),
        description="最后登录时间"
    )

    # 时间戳
    created_at: datetime = Field(
        default_factory=datetime.now,
        sa_column=Column(DateTime, nullable=False),
        description="创建时间"
    )
