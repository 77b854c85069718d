"""
邀请码 CSV 导出

UTF-8 带 BOM（方便 Excel 直接打开），所有字段加双引号，换行使用 \\n
"""

import csv
import io
from datetime import datetime
from typing import Iterable, Optional

from app.constants.invite_code_types import InviteCodeStatus, InviteCodeTypes
from app.models.schemas import InviteCodeInfo

UTF8_BOM = "\ufeff"

CSV_HEADERS = ["邀请码", "类型", "最大使用次数", "已使用次数", "状态", "创建时间", "过期时间", "备注"]

UNLIMITED_LABEL = "无限"
NO_EXPIRY_LABEL = "无"


def format_locale_datetime(value: datetime) -> str:
    """按 zh-CN 习惯格式化时间，例如 2024/1/5 08:03:09"""
    return f"{value.year}/{value.month}/{value.day} {value:%H:%M:%S}"


def _format_expires(value: Optional[datetime]) -> str:
    return format_locale_datetime(value) if value else NO_EXPIRY_LABEL


def invite_code_to_row(code: InviteCodeInfo) -> list:
    """单条邀请码转换为一行 CSV 字段"""
    return [
        code.code,
        InviteCodeTypes.get_chinese_name(code.type),
        UNLIMITED_LABEL if code.is_unlimited else str(code.max_uses),
        str(code.used_count),
        InviteCodeStatus.get_chinese_name(code.status),
        format_locale_datetime(code.created_at),
        _format_expires(code.expires_at),
        code.note or "",
    ]


def render_invite_codes_csv(codes: Iterable[InviteCodeInfo]) -> str:
    """渲染 CSV 文本，行顺序与传入顺序一致"""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for code in codes:
        writer.writerow(invite_code_to_row(code))
    # 与浏览器端导出保持一致：最后一行之后不带换行
    return UTF8_BOM + buffer.getvalue().rstrip("\n")
