"""
UAA JSON HTTP 传输层

使用 httpx 实现，负责:
- 发送 JSON 请求 (GET/POST/PUT/DELETE)
- 按状态码把响应转换为异常
- 可选地把响应顶层 key 转为小写 ("down" 风格)

重试、限流、连接池都交给 httpx，这里不处理。
"""

import json
import logging
from dataclasses import dataclass, field
from urllib.parse import quote

import httpx

from .errors import BadResponse, BadTarget, InvalidArgument, InvalidToken, NotFound, TargetError

logger = logging.getLogger(__name__)

# 只有这些状态码的响应体会被解析，其余直接视为失败
PARSEABLE_STATUS = (200, 201, 204, 400, 401, 403, 409, 422)

KEY_STYLES = (None, "down")


@dataclass
class HttpReply:
    """原始响应 (headers 的 key 全部小写)"""
    status: int
    body: str = ""
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def content_type(self) -> str:
        return self.headers.get("content-type", "")


def quote_id(value: str) -> str:
    """对路径中的 id 做 percent-encoding"""
    return quote(str(value), safe="")


def redact_auth(headers: dict[str, str]) -> dict[str, str]:
    """返回隐藏了 Authorization 值的 headers 副本，用于日志"""
    redacted = dict(headers)
    for key in list(redacted.keys()):
        if key.lower() == "authorization":
            redacted[key] = "***REDACTED***"
    return redacted


def parse_json(body: str | None, key_style: str | None = None):
    """
    解析 JSON 响应体

    Args:
        body: 响应体，空字符串返回 None
        key_style: None 保持原样; "down" 把顶层 key 转成小写
    """
    if key_style not in KEY_STYLES:
        raise InvalidArgument(f"key_style must be one of {KEY_STYLES}")
    if not body:
        return None
    try:
        parsed = json.loads(body)
    except ValueError as e:
        raise BadResponse(f"invalid JSON response: {e}") from e
    if key_style == "down" and isinstance(parsed, dict):
        return {str(k).lower(): v for k, v in parsed.items()}
    return parsed


class JsonHttp:
    """
    JSON over HTTP 客户端

    每个请求都显式传入 target 和 authorization header，
    因此同一个实例可以服务多个 target。
    """

    def __init__(
        self,
        client: httpx.Client | None = None,
        timeout: float = 30.0,
        skip_ssl_validation: bool = False,
    ):
        """
        初始化传输层

        Args:
            client: 已有的 httpx.Client (测试时注入 MockTransport)，由调用方负责关闭
            timeout: 请求超时时间
            skip_ssl_validation: 跳过 TLS 证书校验
        """
        self._owns_client = client is None
        self.client = client or httpx.Client(
            timeout=timeout,
            verify=not skip_ssl_validation,
            follow_redirects=True,
        )

    def close(self):
        """关闭自己创建的连接"""
        if self._owns_client:
            self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    # ============ 底层请求方法 ============

    def _request(
        self,
        method: str,
        target: str,
        path: str,
        body=None,
        authz: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> HttpReply:
        url = f"{target.rstrip('/')}{path}"
        hdrs = {"Accept": "application/json"}
        if body is not None:
            hdrs["Content-Type"] = "application/json"
        if authz:
            hdrs["Authorization"] = authz
        if headers:
            hdrs.update(headers)

        logger.debug("--> %s %s headers=%s", method, url, redact_auth(hdrs))
        try:
            if body is None:
                resp = self.client.request(method, url, headers=hdrs)
            else:
                resp = self.client.request(method, url, headers=hdrs, content=json.dumps(body))
        except httpx.TransportError as e:
            raise BadTarget(f"error connecting to {url}: {e}") from e
        logger.debug("<-- %s %s %s", resp.status_code, method, url)

        return HttpReply(
            status=resp.status_code,
            body=resp.text,
            headers={k.lower(): v for k, v in resp.headers.items()},
        )

    # ============ JSON 请求 ============

    def json_get(self, target: str, path: str, authz: str | None = None, key_style: str | None = None):
        """GET 并解析响应"""
        return self.json_parse_reply(self._request("GET", target, path, authz=authz), key_style)

    def json_post(
        self, target: str, path: str, body, authz: str | None = None, headers: dict[str, str] | None = None
    ) -> HttpReply:
        """POST JSON，返回原始响应 (用 json_parse_reply 解析)"""
        return self._request("POST", target, path, body, authz, headers)

    def json_put(
        self, target: str, path: str, body, authz: str | None = None, headers: dict[str, str] | None = None
    ) -> HttpReply:
        """PUT JSON，返回原始响应 (用 json_parse_reply 解析)"""
        return self._request("PUT", target, path, body, authz, headers)

    def http_delete(self, target: str, path: str, authz: str | None = None) -> int:
        """DELETE，成功返回状态码"""
        reply = self._request("DELETE", target, path, authz=authz)
        if reply.status in (200, 204):
            return reply.status
        err = NotFound if reply.status == 404 else BadResponse
        raise err(f"invalid response from {path}: {reply.status}")

    def json_parse_reply(self, reply: HttpReply, key_style: str | None = None):
        """
        按状态码解析响应

        Returns:
            解析后的 JSON，空响应体返回 None

        Raises:
            NotFound: 404
            BadResponse: 无法识别的状态码、非 JSON 内容
            InvalidToken: 401
            TargetError: 其他错误响应
        """
        status, body = reply.status, reply.body
        if status not in PARSEABLE_STATUS:
            err = NotFound if status == 404 else BadResponse
            raise err(f"invalid status response: {status}")
        if body and (status == 204 or "json" not in reply.content_type.lower()):
            raise BadResponse("received invalid response content or type")

        parsed = parse_json(body, key_style)
        if 200 <= status < 400:
            return parsed

        info = parsed if isinstance(parsed, dict) else None
        err = InvalidToken if status == 401 else TargetError
        raise err(f"error response: {status}", info, status)
