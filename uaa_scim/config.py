"""
配置加载

从 JSON 文件读取 (默认 uaa-config.json)，环境变量 UAA_TARGET / UAA_TOKEN 优先:

    {
        "target": "https://uaa.example.com",
        "token": "xxxx.yyyy.zzzz",
        "timeout": 30,
        "skip_ssl_validation": false
    }

也可以用 auth_header 直接给出完整的 Authorization header。
"""

import json
import os
from dataclasses import dataclass
from pathlib import Path

from .errors import InvalidArgument
from .scim import Scim

DEFAULT_CONFIG_FILE = "uaa-config.json"


def load_json(file: str) -> dict | list:
    """读取 JSON 文件，文件不存在时返回空 dict"""
    path = Path(file)
    if not path.exists():
        return {}
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def auth_header_for(token: str) -> str:
    """裸 token 补上 bearer 前缀"""
    if " " in token.strip():
        return token.strip()
    return f"bearer {token.strip()}"


@dataclass
class UAAConfig:
    """客户端配置"""
    target: str
    auth_header: str
    timeout: float = 30.0
    skip_ssl_validation: bool = False

    def client(self) -> Scim:
        """按配置创建客户端"""
        return Scim(
            self.target,
            self.auth_header,
            timeout=self.timeout,
            skip_ssl_validation=self.skip_ssl_validation,
        )


def load_config(file: str = DEFAULT_CONFIG_FILE) -> UAAConfig:
    """
    加载配置

    Raises:
        InvalidArgument: 缺少 target 或 token
    """
    data = load_json(file)
    if not isinstance(data, dict):
        raise InvalidArgument(f"{file} 格式错误")

    target = os.environ.get("UAA_TARGET") or data.get("target")
    token = os.environ.get("UAA_TOKEN")
    auth_header = auth_header_for(token) if token else data.get("auth_header")
    if not auth_header and data.get("token"):
        auth_header = auth_header_for(data["token"])

    if not target:
        raise InvalidArgument(f"缺少 target (设置 UAA_TARGET 或在 {file} 中配置)")
    if not auth_header:
        raise InvalidArgument(f"缺少 token (设置 UAA_TOKEN 或在 {file} 中配置)")

    return UAAConfig(
        target=target,
        auth_header=auth_header,
        timeout=float(data.get("timeout", 30.0)),
        skip_ssl_validation=bool(data.get("skip_ssl_validation", False)),
    )
