"""
通用工具模块
提供邀请码生成、密码哈希、令牌签发等工具功能
"""
