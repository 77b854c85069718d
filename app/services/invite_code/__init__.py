"""
邀请码服务模块
本地存储与数据库两种实现，以及按配置选择实现的适配器（adapter.invite_code_adapter）
"""
