"""
UAA SCIM 客户端错误类型

所有错误都直接抛给调用方，客户端内部不做重试。
"""

from .models import SCIMError


class UAAError(Exception):
    """所有 UAA 错误的基类"""
    pass


class InvalidArgument(UAAError, ValueError):
    """参数错误: 未知资源类型、put 缺少 id 等"""
    pass


class BadResponse(UAAError):
    """服务端响应格式不符合预期"""
    pass


class NotFound(UAAError):
    """资源不存在 (HTTP 404 或按名称查找失败)"""
    pass


class BadTarget(UAAError):
    """无法连接到目标服务"""
    pass


class TargetError(UAAError):
    """
    服务端返回的错误响应

    Attributes:
        info: 解析后的响应体
        error: 响应体的 SCIMError 视图
    """
    def __init__(self, message: str, info: dict | None = None, status: int = 0):
        super().__init__(message)
        self.info = info or {}
        self.error = SCIMError.from_dict(self.info, status)


class InvalidToken(TargetError):
    """token 无效或过期 (HTTP 401)"""
    pass
