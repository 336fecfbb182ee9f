"""
UAA SCIM 客户端

管理 UAA 中的用户、组和 OAuth client 注册。

UAA 的 SCIM 实现有几个特殊行为，这里统一处理：
- 属性名大小写敏感 (SCIM 规范要求不敏感)，发送前统一转成 UAA 需要的大小写
- client 资源不是标准 SCIM: 用 client_id 代替 id，列表接口返回 {client_id: client} 的 map
- PUT client 可能返回空响应体
- 响应顶层 key 一律转成小写 (totalresults, startindex, itemsperpage, resources)
"""

import logging
import re
from enum import Enum
from urllib.parse import urlencode

from .errors import BadResponse, InvalidArgument, NotFound
from .filters import Filter
from .http import JsonHttp, quote_id
from .models import QueryPage

logger = logging.getLogger(__name__)


# ============ 资源类型 ============

class ResourceType(str, Enum):
    """
    资源类型

    - user: 用户 (/Users)
    - group: 组 (/Groups)
    - client: OAuth client 注册 (/oauth/clients)
    - user_id: 按 id 查用户名的只读别名 (/ids/Users)
    """
    USER = "user"
    GROUP = "group"
    CLIENT = "client"
    USER_ID = "user_id"

    @property
    def path(self) -> str:
        """接口路径"""
        return _TYPE_INFO[self][0]

    @property
    def name_attr(self) -> str:
        """按名称查找时使用的属性"""
        return _TYPE_INFO[self][1]

    @classmethod
    def resolve(cls, value) -> "ResourceType":
        """把字符串或枚举值转成 ResourceType，无法识别时抛 InvalidArgument"""
        try:
            return cls(value)
        except (ValueError, TypeError):
            names = [t.value for t in cls]
            raise InvalidArgument(f"scim resource type must be one of {names}, not {value!r}") from None


_TYPE_INFO = {
    ResourceType.USER: ("/Users", "userName"),
    ResourceType.GROUP: ("/Groups", "displayName"),
    ResourceType.CLIENT: ("/oauth/clients", "client_id"),
    ResourceType.USER_ID: ("/ids/Users", "userName"),
}


def type_info(rtype: ResourceType | str) -> tuple[str, str]:
    """返回 (path, name_attr)"""
    rtype = ResourceType.resolve(rtype)
    return rtype.path, rtype.name_attr


# ============ 属性名大小写 ============

# 小写属性名 -> UAA 要求的写法，不在表里的属性名一律小写
ATTR_CASE = {
    "username": "userName",
    "familyname": "familyName",
    "givenname": "givenName",
    "middlename": "middleName",
    "honorificprefix": "honorificPrefix",
    "honorificsuffix": "honorificSuffix",
    "displayname": "displayName",
    "nickname": "nickName",
    "profileurl": "profileUrl",
    "streetaddress": "streetAddress",
    "postalcode": "postalCode",
    "usertype": "userType",
    "preferredlanguage": "preferredLanguage",
    "x509certificates": "x509Certificates",
    "lastmodified": "lastModified",
    "externalid": "externalId",
    "phonenumbers": "phoneNumbers",
    "startindex": "startIndex",
}

# query 支持的参数 (已转换大小写)，其余参数直接丢弃
QUERY_PARAMS = ("attributes", "filter", "startIndex", "count")


def force_attr(name) -> str:
    """把单个属性名转成 UAA 需要的大小写"""
    key = str(name).lower()
    return ATTR_CASE.get(key, key)


def force_case(obj):
    """
    递归转换 dict 中所有 key 的大小写

    list/tuple 会逐个元素递归 (返回 list)，标量原样返回。
    key 的顺序保持不变。
    """
    if isinstance(obj, (list, tuple)):
        return [force_case(o) for o in obj]
    if not isinstance(obj, dict):
        return obj
    return {force_attr(k): force_case(v) for k, v in obj.items()}


def arglist(value) -> list[str]:
    """把逗号或空白分隔的字符串 (或列表) 转成列表"""
    if isinstance(value, str):
        return [a for a in re.split(r"[\s,]+", value) if a]
    return [str(a) for a in value]


def _mask_client_reply(rtype: ResourceType, info):
    """client 响应没有 id 时，用 client_id 补上"""
    if rtype is ResourceType.CLIENT and isinstance(info, dict):
        if info.get("client_id") and not info.get("id"):
            logger.debug("using client_id %s as id", info["client_id"])
            info["id"] = info["client_id"]
    return info


# ============ 客户端 ============

class Scim:
    """
    UAA SCIM 客户端

    除 target 和 auth_header 外不保存任何状态，可以在多个线程间共享。
    每个操作对应一次阻塞的请求/响应 (all_pages 按顺序请求多页)。
    """

    # all_pages 最多请求的页数，防止服务端一直声称还有更多结果
    MAX_PAGES = 10000

    def __init__(
        self,
        target: str,
        auth_header: str,
        http: JsonHttp | None = None,
        timeout: float = 30.0,
        skip_ssl_validation: bool = False,
    ):
        """
        初始化客户端

        Args:
            target: UAA 地址，例如 https://uaa.example.com
            auth_header: Authorization header 的值，例如 "bearer xxxx.yyyy.zzzz"
            http: 传输层，默认新建一个 JsonHttp
            timeout: 请求超时时间 (只在新建传输层时使用)
            skip_ssl_validation: 跳过 TLS 校验 (只在新建传输层时使用)
        """
        self.target = target.rstrip("/")
        self.auth_header = auth_header
        self._owns_http = http is None
        self.http = http or JsonHttp(timeout=timeout, skip_ssl_validation=skip_ssl_validation)

    def close(self):
        """关闭自己创建的传输层"""
        if self._owns_http:
            self.http.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def _prep_request(self, rtype, info=None) -> tuple[ResourceType, str, dict | None]:
        rtype = ResourceType.resolve(rtype)
        return rtype, rtype.path, force_case(info)

    def _put_json(self, path: str, body, headers: dict[str, str] | None = None, key_style: str | None = None):
        reply = self.http.json_put(self.target, path, body, self.auth_header, headers)
        return self.http.json_parse_reply(reply, key_style)

    # ============ 增删改查 ============

    def add(self, rtype: ResourceType | str, info: dict) -> dict:
        """
        创建资源

        Returns:
            新建的资源，包含 id 和 meta

        Raises:
            BadResponse: 响应中没有 id
        """
        rtype, path, info = self._prep_request(rtype, info)
        reply = self.http.json_parse_reply(
            self.http.json_post(self.target, path, info, self.auth_header), "down"
        )
        reply = _mask_client_reply(rtype, reply)
        if isinstance(reply, dict) and reply.get("id"):
            return reply
        raise BadResponse(f"no id returned by add request to {self.target}{path}")

    def delete(self, rtype: ResourceType | str, resource_id: str) -> None:
        """删除资源"""
        _, path, _ = self._prep_request(rtype)
        self.http.http_delete(self.target, f"{path}/{quote_id(resource_id)}", self.auth_header)

    def put(self, rtype: ResourceType | str, info: dict) -> dict | None:
        """
        更新资源 (整体替换)

        info 必须包含 id (client 用 client_id)。
        如果 info 中有 meta.version，会作为 if-match header 发送。

        Raises:
            InvalidArgument: info 中没有 id
        """
        rtype, path, info = self._prep_request(rtype, info)
        info = info if isinstance(info, dict) else {}
        if rtype is ResourceType.CLIENT:
            id_attr = "client_id"
            resource_id = info.get("client_id") or info.get("id")
        else:
            id_attr = "id"
            resource_id = info.get("id")
        if not resource_id:
            raise InvalidArgument(f"scim info must include {id_attr}")

        meta = info.get("meta")
        hdrs = {}
        if isinstance(meta, dict) and meta.get("version") is not None:
            hdrs["if-match"] = str(meta["version"])

        reply = self._put_json(f"{path}/{quote_id(resource_id)}", info, hdrs, "down")

        # 部分 client 接口 PUT 成功后没有响应体
        if rtype is ResourceType.CLIENT and not reply:
            logger.debug("empty reply to client update, fetching %s", resource_id)
            return self.get(rtype, resource_id)
        return reply

    def query(self, rtype: ResourceType | str, query: dict | None = None) -> dict:
        """
        查询资源

        query 支持的 key:
        - attributes: 逗号或空白分隔的属性名 (也可以是列表)，不传返回全部属性
        - filter: SCIM filter
        - startIndex: 分页起始位置 (从 1 开始)
        - count: 每页最多返回的数量

        值为 None 的 key 和不认识的 key 会被丢弃。

        Returns:
            {"resources": [...], "totalresults": ..., ...}

        Raises:
            BadResponse: 响应不是列表格式
        """
        rtype, path, query = self._prep_request(rtype, query or {})
        params = {k: v for k, v in query.items() if v is not None and k in QUERY_PARAMS}
        if "attributes" in params:
            params["attributes"] = ",".join(force_attr(a) for a in arglist(params["attributes"]))
        qstr = f"?{urlencode(params)}" if params else ""

        info = self.http.json_get(self.target, f"{path}{qstr}", self.auth_header, "down")
        if isinstance(info, dict) and isinstance(info.get("resources"), list):
            return info

        # client 列表接口返回 {client_id: client} 的 map
        if rtype is ResourceType.CLIENT and isinstance(info, dict):
            logger.debug("converting client map reply with %d entries", len(info))
            return {"resources": list(info.values())}

        raise BadResponse(f"invalid reply to query of {self.target}{path}")

    def get(self, rtype: ResourceType | str, resource_id: str) -> dict:
        """获取单个资源"""
        rtype, path, _ = self._prep_request(rtype)
        info = self.http.json_get(
            self.target, f"{path}/{quote_id(resource_id)}", self.auth_header, "down"
        )
        return _mask_client_reply(rtype, info)

    # ============ 分页和名称查找 ============

    def all_pages(self, rtype: ResourceType | str, query: dict | None = None,
                  max_pages: int | None = None) -> list[dict]:
        """
        获取所有分页结果

        按 startIndex 依次请求，直到某页为空或已取到 totalresults 条。

        Args:
            rtype: 资源类型
            query: 见 query()，startIndex 会被覆盖
            max_pages: 最多请求的页数，默认 MAX_PAGES

        Raises:
            BadResponse: 还有结果但缺少分页字段，或超过 max_pages
        """
        rtype = ResourceType.resolve(rtype)
        query = {
            k: v for k, v in (query or {}).items()
            if v is not None and force_attr(k) != "startIndex"
        }
        query["startIndex"] = 1
        if max_pages is None:
            max_pages = self.MAX_PAGES

        info: list[dict] = []
        for _ in range(max_pages):
            page = QueryPage.from_dict(self.query(rtype, query))
            logger.debug("got %d %s resources from startIndex %d",
                         len(page.resources), rtype.value, query["startIndex"])
            if not page.resources:
                return info
            info.extend(page.resources)
            if page.total_results is None or page.total_results <= len(info):
                return info
            if not page.has_paging:
                raise BadResponse(f"incomplete pagination data from {self.target}{rtype.path}")
            query["startIndex"] = len(info) + 1

        raise BadResponse(f"more than {max_pages} pages returned by {self.target}{rtype.path}")

    def ids(self, rtype: ResourceType | str, *names: str) -> list[dict]:
        """
        按名称查找，返回每个匹配项的 id 和名称属性

        同一个名称可能匹配 0 个或多个结果。
        """
        rtype = ResourceType.resolve(rtype)
        na = rtype.name_attr
        return self.all_pages(rtype, {"attributes": f"id,{na}", "filter": str(Filter.any_eq(na, names))})

    def id(self, rtype: ResourceType | str, name: str) -> str:
        """
        按名称查找唯一的资源，返回其 id

        Raises:
            NotFound: 没有找到，或找到多个
        """
        rtype = ResourceType.resolve(rtype)
        res = self.ids(rtype, name)

        # client 可能没有 id，且 client_id 不区分大小写
        if rtype is ResourceType.CLIENT and res:
            if len(res) > 1 or res[0].get("id") is None:
                for r in res:
                    cid = r.get("client_id")
                    if cid and str(cid).lower() == name.lower():
                        return r.get("id") or cid

        if len(res) == 1 and isinstance(res[0], dict) and res[0].get("id"):
            return res[0]["id"]
        raise NotFound(f"{rtype.value} {name} not found in {self.target}{rtype.path}")

    # ============ 密码和 secret ============

    def change_password(self, user_id: str, new_password: str, old_password: str | None = None):
        """
        修改用户密码

        - 用户修改自己的密码: token 需要 password.write scope，并提供正确的 old_password
        - 管理员设置密码: token 需要 uaa.admin scope
        """
        req = {"password": new_password}
        if old_password:
            req["oldPassword"] = old_password
        return self._put_json(f"/Users/{quote_id(user_id)}/password", req)

    def change_secret(self, client_id: str, new_secret: str, old_secret: str | None = None):
        """
        修改 client secret

        - client 修改自己的 secret: token 需要 uaa.admin,client.secret scope，并提供正确的 old_secret
        - 管理员设置 secret: token 需要 uaa.admin scope
        """
        req = {"secret": new_secret}
        if old_secret:
            req["oldSecret"] = old_secret
        return self._put_json(f"/oauth/clients/{quote_id(client_id)}/secret", req)
