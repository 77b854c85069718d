"""
统一响应格式

成功: {"success": true, "message": ..., "data": ...}
失败: {"success": false, "message": ..., "error_code": ...}
"""

from typing import Any, Dict, Optional, Union

from fastapi.responses import JSONResponse


def create_success_response(data: Any = None, message: str = "操作成功") -> Dict[str, Any]:
    """创建成功响应"""
    return {"success": True, "message": message, "data": data}


def create_error_response(
        message: str,
        error_code: Optional[str] = None,
        status_code: Optional[int] = None,
) -> Union[Dict[str, Any], JSONResponse]:
    """创建错误响应

    指定 status_code 时直接返回 JSONResponse，否则返回字典
    """
    body: Dict[str, Any] = {"success": False, "message": message}
    if error_code:
        body["error_code"] = error_code

    if status_code is None:
        return body
    return JSONResponse(status_code=status_code, content=body)
