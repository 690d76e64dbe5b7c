from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Literal, Optional, Union

Priority = Literal["High", "Medium", "Low", "None"]
RecurrenceType = Literal["None", "Daily", "Weekly", "Monthly", "Custom"]
RecurrenceUnit = Literal["day", "week", "month"]
TaskId = Union[int, str]


class Due(BaseModel):
    model_config = ConfigDict(extra="ignore")

    date: str = ""  # "YYYY-MM-DD" or ""
    time: str = ""  # "HH:MM" or ""


class Recurrence(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    type: RecurrenceType = "None"
    interval: Optional[int] = None
    unit: RecurrenceUnit = "day"
    days_of_week: List[str] = Field(default_factory=list, alias="daysOfWeek")


class Task(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: TaskId
    title: str
    due: Due = Field(default_factory=Due)
    priority: Priority = "None"
    tags: List[str] = Field(default_factory=list)
    completed: bool = False
    completed_date: Optional[str] = Field(default=None, alias="completedDate")
    time_allocated: Optional[int] = Field(default=None, alias="timeAllocated")
    objective: Optional[Union[int, float, str]] = None
    goal_id: Optional[TaskId] = Field(default=None, alias="goalId")
    recurrence: Recurrence = Field(default_factory=Recurrence)
    in_today: bool = Field(default=False, alias="inToday")

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class TasksPayload(BaseModel):
    tasks: List[Dict[str, Any]] = Field(default_factory=list)


class AssistantReplyPayload(BaseModel):
    content: str = ""
    message_id: Optional[str] = None


class OccurrencePayload(BaseModel):
    recurrence: Optional[Dict[str, Any]] = None
    date: Optional[str] = None
