"""
数据访问层 (DAO) 模块
本地数据集与数据库两种存储的数据访问接口
"""

from .admin_dao import admin_dao, AdminDAO
from .invite_code_dao import invite_code_dao, InviteCodeDAO
from .local_dataset_dao import LocalDatasetDAO

__all__ = [
    "admin_dao",
    "AdminDAO",
    "invite_code_dao",
    "InviteCodeDAO",
    "LocalDatasetDAO",
]
