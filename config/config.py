"""
应用配置
全部从环境变量读取（main.py 启动时先用 python-dotenv 加载 .env 文件）
"""
import os


class Settings:
    """应用配置"""

    def __init__(self):
        # 应用基础配置
        self.APP_NAME = os.getenv("APP_NAME", "性压抑指数计算器")
        self.APP_VERSION = os.getenv("APP_VERSION", "1.0.0")
        self.DEBUG = os.getenv("DEBUG", "true").lower() == "true"
        self.ENVIRONMENT = os.getenv("ENVIRONMENT", "development")

        # 服务器配置
        self.HOST = os.getenv("HOST", "0.0.0.0")
        self.PORT = int(os.getenv("PORT", "8000"))

        # 数据库配置（可选，未设置时使用本地存储）
        self.DATABASE_URL = os.getenv("DATABASE_URL") or None

        # 邀请码后端选择：auto 表示配置了数据库就用数据库，local 强制本地存储
        self.INVITE_BACKEND = os.getenv("INVITE_BACKEND", "auto").lower()

        # 安全配置
        self.SECRET_KEY = os.getenv("SECRET_KEY")
        if not self.SECRET_KEY:
            raise ValueError("SECRET_KEY 环境变量未设置，请在 .env 文件中配置安全密钥")

        # JWT 配置
        self.ALGORITHM = os.getenv("ALGORITHM", "HS256")
        self.ADMIN_SESSION_HOURS = int(os.getenv("ADMIN_SESSION_HOURS", "24"))

        # 本地存储配置
        self.DATA_DIR = os.getenv("DATA_DIR", "./data")
        self.LOCAL_STORAGE_FILE = os.getenv(
            "LOCAL_STORAGE_FILE", os.path.join(self.DATA_DIR, "local_storage.json")
        )

        # 日志配置
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
        self.LOG_FILE = os.getenv("LOG_FILE", "./logs/app.log")

        # CORS配置
        cors_origins = os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000")
        self.CORS_ORIGINS = [origin.strip() for origin in cors_origins.split(",")]

        # 前端开关
        self.SHOW_ABUSE_POPUP = os.getenv(
            "SHOW_ABUSE_POPUP", "false" if self.ENVIRONMENT == "development" else "true"
        ).lower() == "true"

        # 数据库连接池配置
        self.DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "20"))
        self.DB_MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", "30"))
        self.DB_POOL_TIMEOUT = int(os.getenv("DB_POOL_TIMEOUT", "30"))
        self.DB_POOL_RECYCLE = int(os.getenv("DB_POOL_RECYCLE", "3600"))

    def is_remote_backend_configured(self) -> bool:
        """是否使用数据库作为邀请码后端"""
        if self.INVITE_BACKEND == "local":
            return False
        return bool(self.DATABASE_URL)


settings = Settings()
