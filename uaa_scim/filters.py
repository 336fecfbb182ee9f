"""
SCIM Filter 构建器

名称查找只用到 eq 和 or，这里提供最常用的几种组合。
"""

from dataclasses import dataclass


@dataclass
class FilterExpression:
    """Filter 表达式"""
    expression: str

    def __and__(self, other: "FilterExpression") -> "FilterExpression":
        """组合两个 filter (and)"""
        return FilterExpression(f"({self.expression}) and ({other.expression})")

    def __or__(self, other: "FilterExpression") -> "FilterExpression":
        """组合两个 filter (or)"""
        return FilterExpression(f"({self.expression}) or ({other.expression})")

    def __str__(self) -> str:
        return self.expression


class Filter:
    """
    SCIM Filter 构建器

    示例:
        >>> str(Filter.eq("userName", "joe"))
        'userName eq "joe"'

        >>> str(Filter.eq("displayName", "admins") & Filter.eq("active", True))
        '(displayName eq "admins") and (active eq true)'

        >>> str(Filter.any_eq("userName", ["joe", "bob"]))
        'userName eq "joe" or userName eq "bob"'
    """

    @staticmethod
    def eq(attr: str, value: str | bool) -> FilterExpression:
        """
        等于操作符

        Args:
            attr: 属性名
            value: 值 (字符串会自动加引号)
        """
        if isinstance(value, bool):
            val_str = "true" if value else "false"
        else:
            val_str = f'"{value}"'
        return FilterExpression(f"{attr} eq {val_str}")

    @staticmethod
    def any_eq(attr: str, values) -> FilterExpression:
        """
        多个值中任意一个相等 (平铺的 or，不加括号)

        Args:
            attr: 属性名
            values: 值列表
        """
        return FilterExpression(" or ".join(str(Filter.eq(attr, v)) for v in values))
