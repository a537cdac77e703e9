from flask import jsonify, request
from functools import wraps
from typing import Any
from ..errors import GarageError, StoreFailure
from .logger import get_logger

class ApiResponse:
    """统一API响应格式：成功时直接返回数据，失败时返回 {"error": message}"""
    def __init__(self, code: int, message: str = None, data: Any = None):
        self.code = code
        self.message = message
        self.data = data

    def to_dict(self) -> Any:
        if self.code >= 400:
            return {"error": self.message}
        return self.data

    def to_json_response(self, http_status: int = None):
        """将响应转换为JSON格式，默认使用自身的状态码"""
        return jsonify(self.to_dict()), http_status or self.code

    @classmethod
    def success(cls, data: Any = None, code: int = 200) -> 'ApiResponse':
        """成功响应"""
        return cls(code, data=data)

    @classmethod
    def created(cls, data: Any = None) -> 'ApiResponse':
        """创建成功响应"""
        return cls(201, data=data)

    @classmethod
    def message_only(cls, message: str) -> 'ApiResponse':
        """仅包含提示信息的成功响应（如删除成功）"""
        return cls(200, data={"message": message})

    @classmethod
    def error(cls, message: str = "Internal server error", code: int = 400) -> 'ApiResponse':
        """错误响应"""
        return cls(code, message=message)

def api_errors(action: str):
    """
    路由异常处理装饰器

    业务异常(NotFound/ValidationError/Conflict)按其状态码返回原始信息；
    存储异常与未预期异常统一返回 500 {"error": "Failed to <action>"}

    使用示例:
    @maintenance_bp.route('/<int:log_id>', methods=['DELETE'])
    @api_errors("delete maintenance log")
    def delete_log(log_id):
        ...
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            logger = get_logger(f.__module__)
            try:
                return f(*args, **kwargs)
            except StoreFailure as e:
                logger.error(f"{action} 存储失败: {e.message}")
                return ApiResponse.error(f"Failed to {action}", code=500).to_json_response()
            except GarageError as e:
                logger.warning(f"{action} 失败: {e.message}")
                return ApiResponse.error(e.message, code=e.status_code).to_json_response()
            except Exception as e:
                logger.error(f"{action} 出现未处理异常: {str(e)}", exc_info=True)
                return ApiResponse.error(f"Failed to {action}", code=500).to_json_response()
        return decorated_function
    return decorator

def request_data() -> dict:
    """读取请求体：JSON 或 multipart/表单，统一返回普通字典"""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()
