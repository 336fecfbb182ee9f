"""
UAA SCIM 响应数据模型

响应按 "down" 风格解析，顶层 key 全部是小写：
- 列表响应: resources, totalresults, startindex, itemsperpage
- 错误响应: UAA 使用 error/error_description，标准 SCIM 使用 status/detail/scimType
"""

from dataclasses import dataclass, field


# ============ 响应类型 ============

@dataclass
class QueryPage:
    """
    列表响应的一页

    UAA 使用标准的 startIndex/itemsPerPage 分页 (从 1 开始)
    """
    resources: list[dict] = field(default_factory=list)
    total_results: int | None = None
    start_index: int | None = None
    items_per_page: int | None = None

    @property
    def has_paging(self) -> bool:
        """是否带有计算下一页所需的字段"""
        return self.start_index is not None and self.items_per_page is not None

    @classmethod
    def from_dict(cls, data: dict) -> "QueryPage":
        return cls(
            resources=data.get("resources") or [],
            total_results=data.get("totalresults"),
            start_index=data.get("startindex"),
            items_per_page=data.get("itemsperpage"),
        )


@dataclass
class SCIMError:
    """
    错误响应

    同时兼容 UAA (error, error_description) 和 SCIM (status, detail, scimType) 两种格式
    """
    status: int
    error: str | None = None
    detail: str | None = None
    scim_type: str | None = None

    @classmethod
    def from_dict(cls, data: dict, status_code: int = 0) -> "SCIMError":
        # 顶层 key 可能已被转成小写
        return cls(
            status=int(data.get("status") or status_code),
            error=data.get("error"),
            detail=data.get("error_description") or data.get("detail") or data.get("message"),
            scim_type=data.get("scimType") or data.get("scimtype"),
        )

    def __str__(self) -> str:
        msg = f"[{self.status}] {self.detail or self.error or 'Unknown error'}"
        if self.error and self.detail:
            msg += f" ({self.error})"
        return msg
