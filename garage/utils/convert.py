from datetime import date, datetime
from decimal import Decimal
from ..errors import ValidationError

def format_date(d):
    """将 date 对象格式化为 YYYY-MM-DD 字符串"""
    if isinstance(d, (date, datetime)):
        return d.strftime('%Y-%m-%d')
    return d

def format_datetime(dt):
    """将 datetime 对象格式化为前端适用的字符串"""
    if isinstance(dt, datetime):
        return dt.isoformat(sep=' ', timespec='seconds')
    return dt

def decimal_to_float(d):
    """将 Decimal 类型转换为 float 类型，用于 JSON 序列化"""
    if isinstance(d, Decimal):
        return float(d)
    return d

def _is_blank(value):
    return value is None or (isinstance(value, str) and value.strip() == '')

def parse_date(value, field='date'):
    """解析 YYYY-MM-DD 日期，空值返回 None"""
    if _is_blank(value):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        raise ValidationError(f"Invalid {field}: {value}")

def parse_int(value, field='value'):
    """解析整数，空值返回 None（表单提交的数据都是字符串）"""
    if _is_blank(value):
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be a number")

def parse_float(value, field='value'):
    """解析浮点数，空值返回 None"""
    if _is_blank(value):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be a number")

def parse_text(value, field=None):
    """文本字段，空字符串视为 None"""
    if _is_blank(value):
        return None
    return str(value).strip()
