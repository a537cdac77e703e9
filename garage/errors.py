"""
仓储层异常定义

仓储操作只抛出以下几类异常，由路由层统一转换为HTTP状态码和JSON错误体：

    NotFound        -> 404  {"error": "<Entity> not found"}
    ValidationError -> 400  {"error": "<field> required"}
    Conflict        -> 409  {"error": "Tag name already exists"}
    StoreFailure    -> 500  {"error": "Failed to <action>"}
"""


class GarageError(Exception):
    """所有业务异常的基类"""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(GarageError):
    """目标ID没有对应的数据行"""
    status_code = 404

    def __init__(self, entity: str):
        super().__init__(f"{entity} not found")
        self.entity = entity


class ValidationError(GarageError):
    """缺少必填字段或字段值无效"""
    status_code = 400

    @classmethod
    def required(cls, field: str) -> 'ValidationError':
        return cls(f"{field} required")


class Conflict(GarageError):
    """唯一键冲突（如标签名重复）"""
    status_code = 409


class StoreFailure(GarageError):
    """无法归类的底层存储错误"""
    status_code = 500
