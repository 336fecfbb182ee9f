#!/usr/bin/env python3
"""
UAA SCIM REST API
"""
from typing import Iterator

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel

from uaa_scim import (
    Scim,
    ResourceType,
    UAAError,
    InvalidArgument,
    InvalidToken,
    NotFound,
    TargetError,
    load_config,
)


app = FastAPI(title="UAA SCIM API", version="1.0.0")


def get_client() -> Iterator[Scim]:
    client = load_config().client()
    try:
        yield client
    finally:
        client.close()


def to_http_error(e: UAAError) -> HTTPException:
    """UAA 错误 -> HTTP 错误"""
    if isinstance(e, NotFound):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, InvalidArgument):
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, InvalidToken):
        return HTTPException(status_code=401, detail=str(e.error))
    if isinstance(e, TargetError):
        return HTTPException(status_code=400, detail=str(e.error))
    return HTTPException(status_code=502, detail=str(e))


# ========== 请求模型 ==========

class PasswordChange(BaseModel):
    password: str
    oldPassword: str | None = None


class SecretChange(BaseModel):
    secret: str
    oldSecret: str | None = None


# ========== 资源 API ==========

@app.get("/{rtype}")
def list_resources(rtype: ResourceType, filter: str | None = None, attributes: str | None = None,
                   client: Scim = Depends(get_client)):
    """列出全部资源"""
    try:
        return client.all_pages(rtype, {"filter": filter, "attributes": attributes})
    except UAAError as e:
        raise to_http_error(e)


@app.get("/{rtype}/{name}")
def get_resource(rtype: ResourceType, name: str, client: Scim = Depends(get_client)):
    """按名称获取资源"""
    try:
        return client.get(rtype, client.id(rtype, name))
    except UAAError as e:
        raise to_http_error(e)


@app.post("/{rtype}", status_code=201)
def create_resource(rtype: ResourceType, info: dict, client: Scim = Depends(get_client)):
    """创建资源"""
    try:
        return client.add(rtype, info)
    except UAAError as e:
        raise to_http_error(e)


@app.put("/{rtype}/{name}")
def update_resource(rtype: ResourceType, name: str, info: dict, client: Scim = Depends(get_client)):
    """整体更新资源，id 按名称查找"""
    try:
        resource_id = client.id(rtype, name)
        info = dict(info)
        info["client_id" if rtype is ResourceType.CLIENT else "id"] = resource_id
        return client.put(rtype, info)
    except UAAError as e:
        raise to_http_error(e)


@app.delete("/{rtype}/{name}")
def delete_resource(rtype: ResourceType, name: str, client: Scim = Depends(get_client)):
    """删除资源"""
    try:
        client.delete(rtype, client.id(rtype, name))
        return {"message": f"已删除: {name}"}
    except UAAError as e:
        raise to_http_error(e)


# ========== 密码和 secret ==========

@app.put("/user/{name}/password")
def change_password(name: str, req: PasswordChange, client: Scim = Depends(get_client)):
    """修改用户密码"""
    try:
        client.change_password(client.id(ResourceType.USER, name), req.password, req.oldPassword)
        return {"message": f"已修改密码: {name}"}
    except UAAError as e:
        raise to_http_error(e)


@app.put("/client/{name}/secret")
def change_secret(name: str, req: SecretChange, client: Scim = Depends(get_client)):
    """修改 client secret"""
    try:
        client.change_secret(client.id(ResourceType.CLIENT, name), req.secret, req.oldSecret)
        return {"message": f"已修改 secret: {name}"}
    except UAAError as e:
        raise to_http_error(e)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
