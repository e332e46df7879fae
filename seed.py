# seed.py
# Sample dataset installed the first time the store finds no camps.

from __future__ import annotations

from typing import Callable

from models import Assignment, Camp, User, generate_id, now_ms
from schemas import StatePatch

DAY_MS = 24 * 60 * 60 * 1000


def build_seed_data(
    now: int | None = None,
    id_factory: Callable[[], str] = generate_id,
) -> StatePatch:
    """One camp, an admin, two teachers, three students and two assignments."""
    timestamp = now_ms() if now is None else now
    camp_id = id_factory()

    teacher_1 = "teacher001"
    teacher_2 = "teacher002"
    students = ("student001", "student002", "student003")

    camp = Camp(
        id=camp_id,
        name="Web前端开发学习营",
        description="从零开始学习React、TypeScript和现代前端开发技术",
        created_at=timestamp,
        teachers=(teacher_1, teacher_2),
        students=students,
    )

    users = (
        User(wx_id="admin001", role="admin", nickname="管理员"),
        User(wx_id=teacher_1, role="teacher", nickname="张老师", camp_id=camp_id),
        User(wx_id=teacher_2, role="teacher", nickname="李老师", camp_id=camp_id),
        User(wx_id=students[0], role="student", nickname="小明", camp_id=camp_id),
        User(wx_id=students[1], role="student", nickname="小红", camp_id=camp_id),
        User(wx_id=students[2], role="student", nickname="小刚", camp_id=camp_id),
    )

    assignments = (
        Assignment(
            id=id_factory(),
            camp_id=camp_id,
            teacher_id=teacher_1,
            teacher_name="张老师",
            title="HTML基础作业",
            content="请完成一个简单的个人介绍页面，包含姓名、爱好和一张个人照片。",
            deadline=timestamp + 7 * DAY_MS,
            created_at=timestamp,
        ),
        Assignment(
            id=id_factory(),
            camp_id=camp_id,
            teacher_id=teacher_2,
            teacher_name="李老师",
            title="CSS布局练习",
            content="使用Flexbox和Grid实现一个响应式的卡片布局页面。",
            deadline=timestamp + 14 * DAY_MS,
            created_at=timestamp,
        ),
    )

    return StatePatch(
        camps=(camp,),
        users=users,
        assignments=assignments,
        submissions=(),
        reviews=(),
        messages=(),
    )
