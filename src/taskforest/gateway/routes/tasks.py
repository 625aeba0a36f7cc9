"""任务路由

GET    /api/tasks                         子任务列表（parent_id / user_id / show_completed 筛选）
GET    /api/tasks/{task_id}               任务详情
GET    /api/tasks/{task_id}/progress      子树进度
GET    /api/tasks/{task_id}/children-count 直接子任务数量
POST   /api/tasks                         创建任务（可继承父任务的子任务）
PATCH  /api/tasks/{task_id}               部分更新（含重新挂载父任务）
DELETE /api/tasks/{task_id}               删除任务及整棵子树
"""

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from starlette.responses import JSONResponse
from taskforest.core.errors import (
    ChildrenReparentError,
    CycleError,
    DerivedComputationError,
    NotFoundError,
    StoreError,
    TaskValidationError,
)
from taskforest.core.models import (
    CreateTaskInput,
    Task,
    TaskFilter,
    TaskWithProfile,
    UpdateTaskInput,
)

from ..deps import get_task_service
from ..services.task_service import TaskService

router = APIRouter()


class TaskListResponse(BaseModel):
    """任务列表响应"""

    tasks: list[TaskWithProfile]


class ProgressResponse(BaseModel):
    """进度响应"""

    task_id: str
    progress: float


class ChildrenCountResponse(BaseModel):
    """子任务数量响应"""

    task_id: str
    count: int


class DeleteResponse(BaseModel):
    """删除响应，返回删除前的父任务供导航使用"""

    task_id: str
    parent_id: str | None


def _error(status_code: int, code: str, message: str, **extra) -> JSONResponse:
    """统一错误响应格式"""
    return JSONResponse(
        status_code=status_code,
        content={"error": {"code": code, "message": message, **extra}},
    )


def _error_for(e: Exception) -> JSONResponse:
    """把核心异常映射为 HTTP 错误响应"""
    if isinstance(e, TaskValidationError):
        return _error(400, "VALIDATION_ERROR", str(e), field=e.field)
    if isinstance(e, NotFoundError):
        return _error(404, "TASK_NOT_FOUND", str(e))
    if isinstance(e, CycleError):
        return _error(409, "CYCLE_DETECTED", str(e))
    if isinstance(e, DerivedComputationError):
        return _error(503, "PROGRESS_UNAVAILABLE", "Progress is unavailable, please retry")
    if isinstance(e, ChildrenReparentError):
        return _error(
            500,
            "CHILDREN_REPARENT_FAILED",
            "Task was created but its siblings could not be moved under it",
            task_id=e.created_task.task_id,
        )
    return _error(500, "STORE_ERROR", "Task store operation failed")


@router.get("/api/tasks", response_model=TaskListResponse)
async def list_tasks(
    parent_id: str | None = Query(default=None, description="父任务 ID，缺省为根任务"),
    user_id: str | None = Query(default=None, description="按创建者或负责人筛选"),
    show_completed: bool | None = Query(default=None, description="false 时隐藏已完成任务"),
    service: TaskService = Depends(get_task_service),
):
    """查询子任务列表，按 created_at 倒序"""
    task_filter = TaskFilter(user_id=user_id, show_completed=show_completed)
    try:
        tasks = await service.list_tasks(parent_id, task_filter)
    except StoreError as e:
        return _error_for(e)
    return TaskListResponse(tasks=tasks)


@router.get("/api/tasks/{task_id}", response_model=TaskWithProfile)
async def get_task_detail(
    task_id: str,
    service: TaskService = Depends(get_task_service),
):
    """查询任务详情"""
    try:
        return await service.get_task(task_id)
    except (NotFoundError, StoreError) as e:
        return _error_for(e)


@router.get("/api/tasks/{task_id}/progress", response_model=ProgressResponse)
async def get_task_progress(
    task_id: str,
    service: TaskService = Depends(get_task_service),
):
    """查询子树进度；子树读取失败时返回 503，不回退到旧值"""
    try:
        progress = await service.get_progress(task_id)
    except (NotFoundError, DerivedComputationError) as e:
        return _error_for(e)
    return ProgressResponse(task_id=task_id, progress=progress)


@router.get("/api/tasks/{task_id}/children-count", response_model=ChildrenCountResponse)
async def get_children_count(
    task_id: str,
    service: TaskService = Depends(get_task_service),
):
    """查询直接子任务数量"""
    try:
        count = await service.count_children(task_id)
    except StoreError as e:
        return _error_for(e)
    return ChildrenCountResponse(task_id=task_id, count=count)


@router.post("/api/tasks", status_code=201, response_model=Task)
async def create_task(
    body: CreateTaskInput,
    service: TaskService = Depends(get_task_service),
):
    """创建任务"""
    try:
        return await service.create_task(body)
    except (TaskValidationError, NotFoundError, StoreError) as e:
        return _error_for(e)


@router.patch("/api/tasks/{task_id}", response_model=TaskWithProfile)
async def update_task(
    task_id: str,
    body: UpdateTaskInput,
    service: TaskService = Depends(get_task_service),
):
    """部分更新任务"""
    try:
        return await service.update_task(task_id, body)
    except (TaskValidationError, NotFoundError, CycleError, StoreError) as e:
        return _error_for(e)


@router.delete("/api/tasks/{task_id}", response_model=DeleteResponse)
async def delete_task(
    task_id: str,
    service: TaskService = Depends(get_task_service),
):
    """删除任务及整棵子树"""
    try:
        prior_parent_id = await service.delete_task(task_id)
    except (NotFoundError, StoreError) as e:
        return _error_for(e)
    return DeleteResponse(task_id=task_id, parent_id=prior_parent_id)
