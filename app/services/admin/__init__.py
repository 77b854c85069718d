"""
管理员服务模块
管理员账户（本地存储 / 数据库）与管理员会话
"""
