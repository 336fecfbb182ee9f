"""
UAA SCIM Client

Cloud Foundry UAA 的 SCIM 客户端，管理用户、组和 OAuth client 注册。
"""

from .errors import (
    UAAError,
    InvalidArgument,
    BadResponse,
    NotFound,
    BadTarget,
    TargetError,
    InvalidToken,
)

from .models import QueryPage, SCIMError
from .http import JsonHttp, HttpReply, redact_auth
from .scim import Scim, ResourceType, force_attr, force_case, type_info
from .filters import Filter
from .config import UAAConfig, load_config

__all__ = [
    # Client
    "Scim",
    "ResourceType",
    "force_attr",
    "force_case",
    "type_info",
    # Transport
    "JsonHttp",
    "HttpReply",
    "redact_auth",
    # Errors
    "UAAError",
    "InvalidArgument",
    "BadResponse",
    "NotFound",
    "BadTarget",
    "TargetError",
    "InvalidToken",
    # Models
    "QueryPage",
    "SCIMError",
    # Filter
    "Filter",
    # Config
    "UAAConfig",
    "load_config",
]
