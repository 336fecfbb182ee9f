#!/usr/bin/env python3
"""
UAA SCIM CLI
"""
import argparse
import json
import logging
import sys

from uaa_scim import (
    Scim,
    ResourceType,
    UAAError,
    force_case,
    load_config,
)
from uaa_scim.config import DEFAULT_CONFIG_FILE, load_json

CLI_TYPES = (ResourceType.USER, ResourceType.GROUP, ResourceType.CLIENT)


def get_client() -> Scim:
    return load_config(DEFAULT_CONFIG_FILE).client()


def load_items(file: str) -> list[dict]:
    data = load_json(file)
    if not data:
        return []
    return data if isinstance(data, list) else [data]


def print_json(data):
    print(json.dumps(data, indent=2, ensure_ascii=False))


def resource_name(rtype: ResourceType, info: dict) -> str:
    """取资源的名称属性 (key 大小写不确定)"""
    return force_case(info).get(rtype.name_attr, "?")


# ========== 通用命令 ==========

def cmd_list(args):
    rtype = ResourceType(args.type)
    with get_client() as client:
        resources = client.all_pages(rtype, {"filter": args.filter, "attributes": args.attributes})
    if args.format == "json":
        print_json(resources)
    else:
        print(f"共 {len(resources)} 个 {rtype.value}:\n")
        for r in resources:
            print(f"  {resource_name(rtype, r)} [id: {r.get('id') or r.get('client_id')}]")


def cmd_get(args):
    rtype = ResourceType(args.type)
    with get_client() as client:
        print_json(client.get(rtype, client.id(rtype, args.name)))


def cmd_ids(args):
    rtype = ResourceType(args.type)
    with get_client() as client:
        print_json(client.ids(rtype, *args.names))


def cmd_create(args):
    rtype = ResourceType(args.type)
    has_error = False
    with get_client() as client:
        for item in load_items(args.file):
            try:
                result = client.add(rtype, item)
                print(f"✓ 创建: {resource_name(rtype, result)} [id: {result['id']}]")
            except UAAError as e:
                print(f"✗ {resource_name(rtype, item)}: {e}")
                has_error = True
    return 1 if has_error else 0


def cmd_update(args):
    """
    整体更新资源

    文件中没有 id 时按名称查找；没有 meta.version 时使用服务端当前版本。
    """
    rtype = ResourceType(args.type)
    has_error = False
    with get_client() as client:
        for item in load_items(args.file):
            info = force_case(item)
            name = info.get(rtype.name_attr, "?")
            try:
                if rtype is not ResourceType.CLIENT and not info.get("id"):
                    info["id"] = client.id(rtype, name)
                if not (info.get("meta") or {}).get("version"):
                    current = client.get(rtype, info.get("id") or info.get("client_id"))
                    version = (current.get("meta") or {}).get("version")
                    if version is not None:
                        info["meta"] = {**(info.get("meta") or {}), "version": version}
                client.put(rtype, info)
                print(f"✓ 更新: {name}")
            except UAAError as e:
                print(f"✗ {name}: {e}")
                has_error = True
    return 1 if has_error else 0


def cmd_delete(args):
    rtype = ResourceType(args.type)
    with get_client() as client:
        client.delete(rtype, client.id(rtype, args.name))
    print(f"✓ 删除: {args.name}")


# ========== 用户/client 命令 ==========

def cmd_user_passwd(args):
    with get_client() as client:
        user_id = client.id(ResourceType.USER, args.name)
        client.change_password(user_id, args.password, args.old_password)
    print(f"✓ 已修改密码: {args.name}")


def cmd_client_secret(args):
    with get_client() as client:
        client_id = client.id(ResourceType.CLIENT, args.name)
        client.change_secret(client_id, args.secret, args.old_secret)
    print(f"✓ 已修改 secret: {args.name}")


# ========== 组成员命令 ==========

def cmd_group_add_member(args):
    with get_client() as client:
        group = client.get(ResourceType.GROUP, client.id(ResourceType.GROUP, args.group))
        user_id = client.id(ResourceType.USER, args.user)
        members = group.get("members") or []
        if any(m.get("value") == user_id for m in members):
            print(f"○ {args.user} 已在 {args.group} 中")
            return 0
        group["members"] = members + [{"value": user_id, "type": "USER"}]
        client.put(ResourceType.GROUP, group)
    print(f"✓ 添加 {args.user} [id: {user_id}] 到 {args.group}")


def cmd_group_remove_member(args):
    with get_client() as client:
        group = client.get(ResourceType.GROUP, client.id(ResourceType.GROUP, args.group))
        user_id = client.id(ResourceType.USER, args.user)
        members = group.get("members") or []
        remaining = [m for m in members if m.get("value") != user_id]
        if len(remaining) == len(members):
            print(f"○ {args.user} 不在 {args.group} 中")
            return 0
        group["members"] = remaining
        client.put(ResourceType.GROUP, group)
    print(f"✓ 从 {args.group} 移除 {args.user}")


# ========== 主函数 ==========

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='scim-cli', description='UAA SCIM CLI')
    parser.add_argument('-v', '--verbose', action='store_true', help='输出调试日志')
    subparsers = parser.add_subparsers(dest='command', help='资源类型')

    type_subs = {}
    for rtype in CLI_TYPES:
        type_parser = subparsers.add_parser(rtype.value, help=f'{rtype.value} 管理')
        sub = type_parser.add_subparsers(dest='action')
        type_subs[rtype] = sub

        p = sub.add_parser('list', help='列出全部')
        p.add_argument('--filter', help='SCIM filter')
        p.add_argument('--attributes', help='返回的属性，逗号分隔')
        p.add_argument('--format', choices=['table', 'json'], default='table')
        p.set_defaults(func=cmd_list, type=rtype.value)

        p = sub.add_parser('get', help='按名称获取')
        p.add_argument('name', help=rtype.name_attr)
        p.set_defaults(func=cmd_get, type=rtype.value)

        p = sub.add_parser('ids', help='按名称查找 id')
        p.add_argument('names', nargs='+', help=rtype.name_attr)
        p.set_defaults(func=cmd_ids, type=rtype.value)

        p = sub.add_parser('create', help='创建')
        p.add_argument('file', help='JSON 文件')
        p.set_defaults(func=cmd_create, type=rtype.value)

        p = sub.add_parser('update', help='整体更新')
        p.add_argument('file', help='JSON 文件')
        p.set_defaults(func=cmd_update, type=rtype.value)

        p = sub.add_parser('delete', help='按名称删除')
        p.add_argument('name', help=rtype.name_attr)
        p.set_defaults(func=cmd_delete, type=rtype.value)

    p = type_subs[ResourceType.USER].add_parser('passwd', help='修改密码')
    p.add_argument('name', help='userName')
    p.add_argument('--password', required=True, help='新密码')
    p.add_argument('--old-password', help='旧密码 (用户修改自己的密码时需要)')
    p.set_defaults(func=cmd_user_passwd)

    p = type_subs[ResourceType.CLIENT].add_parser('secret', help='修改 client secret')
    p.add_argument('name', help='client_id')
    p.add_argument('--secret', required=True, help='新 secret')
    p.add_argument('--old-secret', help='旧 secret (client 修改自己的 secret 时需要)')
    p.set_defaults(func=cmd_client_secret)

    p = type_subs[ResourceType.GROUP].add_parser('add-member', help='添加成员')
    p.add_argument('group')
    p.add_argument('user')
    p.set_defaults(func=cmd_group_add_member)

    p = type_subs[ResourceType.GROUP].add_parser('remove-member', help='移除成员')
    p.add_argument('group')
    p.add_argument('user')
    p.set_defaults(func=cmd_group_remove_member)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return 0

    if not hasattr(args, 'func'):
        parser.parse_args([args.command, '-h'])
        return 0

    try:
        return args.func(args) or 0
    except UAAError as e:
        print(f"✗ {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
