"""
性压抑指数计算器 - 邀请码后端主程序
"""

import os
import sys
from contextlib import asynccontextmanager
from datetime import datetime

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

# 添加项目根目录到Python路径
sys.path.append(os.path.dirname(os.path.abspath(__file__)))


def load_environment():
    """按 ENVIRONMENT 加载 .env.<环境> 文件，不存在时退回 .env"""
    env = os.getenv("ENVIRONMENT", "development")

    for env_file in (f".env.{env}", ".env"):
        if os.path.exists(env_file):
            load_dotenv(env_file)
            logger.info(f"已加载环境变量文件: {env_file}")
            return
    logger.warning(f"未找到环境变量文件: .env.{env} / .env")

# 在导入配置之前加载环境变量
load_environment()


def _log_format(colored: bool):
    """生成 loguru 格式化函数，自动带上请求 trace_id"""
    from app.core.logging_context import get_trace_id

    if colored:
        template = (
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level}</level> | "
            "<yellow>{extra[trace]}</yellow><cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan>"
            " - <level>{message}</level>\n"
        )
    else:
        template = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {extra[trace]}{name}:{function}:{line} - {message}\n"

    def _format(record):
        tid = get_trace_id()
        record["extra"]["trace"] = f"[{tid}] " if tid else ""
        return template

    return _format


def _setup_logging():
    """配置loguru：控制台 + 按天滚动的日志文件"""
    from config.config import settings as cfg

    log_dir = os.path.dirname(cfg.LOG_FILE)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    logger.remove()
    logger.add(
        sys.stdout,
        level="DEBUG" if cfg.DEBUG else cfg.LOG_LEVEL,
        format=_log_format(colored=True),
        colorize=sys.stdout.isatty() and not os.getenv("NO_COLOR"),
    )
    logger.add(
        cfg.LOG_FILE,
        level="DEBUG",
        format=_log_format(colored=False),
        rotation="1 day",
        retention="30 days",
        compression="zip",
    )

# 模块级别调用，确保uvicorn启动时生效
_setup_logging()

from config.config import settings
from app.api import admin_router, invite_codes_router
from app.core.middleware import setup_middleware
from app.models import db_session_context, init_db
from app.utils.api_utils import get_invite_code_adapter


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    logger.info(f"正在启动 {settings.APP_NAME} 邀请码服务 (环境: {settings.ENVIRONMENT})")
    logger.info(f"CORS配置: {settings.CORS_ORIGINS}")

    # 只有使用数据库后端时才建表
    if settings.is_remote_backend_configured():
        try:
            init_db()
            logger.info("数据库初始化成功")
        except Exception as e:
            logger.error(f"数据库初始化失败: {e}")
            raise
    else:
        logger.info(f"未配置数据库，邀请码使用本地存储: {settings.LOCAL_STORAGE_FILE}")

    yield

    logger.info("应用关闭完成")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="性压抑指数计算器邀请码API",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 请求日志、安全头、业务异常处理
setup_middleware(app)

app.include_router(invite_codes_router)
app.include_router(admin_router)


@app.get("/")
async def root():
    return {
        "message": "性压抑指数计算器邀请码API",
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }


def _check_database() -> str:
    """数据库连通性：not_configured / healthy / unhealthy: 原因"""
    if not settings.is_remote_backend_configured():
        return "not_configured"

    from sqlalchemy import literal, select

    try:
        with db_session_context() as session:
            session.execute(select(literal(1))).first()
        return "healthy"
    except Exception as e:
        return f"unhealthy: {e}"


@app.get("/api/health")
async def health_check():
    """健康检查接口"""
    db_status = _check_database()
    return {
        "status": "unhealthy" if db_status.startswith("unhealthy") else "healthy",
        "timestamp": datetime.now().isoformat(),
        "version": settings.APP_VERSION,
        "components": {
            "backend": get_invite_code_adapter().get_backend_type(),
            "database": db_status,
        },
    }


@app.get("/api/env")
async def get_env():
    """前端运行时开关"""
    return {
        "showAbusePopup": settings.SHOW_ABUSE_POPUP,
        "backendType": get_invite_code_adapter().get_backend_type(),
        "databaseConfigured": bool(settings.DATABASE_URL),
    }


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """未处理异常统一返回 500"""
    logger.exception(f"未处理的异常: {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": "内部服务器错误", "error_code": "INTERNAL_ERROR"},
    )


if __name__ == "__main__":
    logger.info(
        f"启动配置: 主机={settings.HOST} 端口={settings.PORT} 调试={settings.DEBUG} "
        f"邀请码后端={'database' if settings.is_remote_backend_configured() else 'local'} "
        f"日志级别={settings.LOG_LEVEL}"
    )

    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="warning",  # uvicorn 只输出警告以上，访问日志由 loguru 记录
        access_log=False,
    )
