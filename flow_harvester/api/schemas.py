"""
Request and response models for the clustering API.
"""

from pydantic import BaseModel, Field, field_validator
from typing import Any, List, Optional, Union


class MessageIn(BaseModel):
    id: Optional[Union[str, int]] = None
    role: str = "other"
    text: Optional[str] = None
    content: Optional[Union[str, List[Any]]] = None

    @field_validator('role')
    @classmethod
    def role_must_not_be_empty(cls, v):
        if not v.strip():
            raise ValueError('role cannot be empty')
        return v


class ClusterRequest(BaseModel):
    messages: List[MessageIn] = Field(default_factory=list)
    neighbor_k: Optional[int] = Field(default=None, ge=1)
    seed_cap: Optional[int] = Field(default=None, ge=1)


class FlowNodeOut(BaseModel):
    msgIds: List[str]


class FlowMetricsOut(BaseModel):
    messageCount: int
    qualityScore: Optional[float] = None


class FlowOut(BaseModel):
    id: str
    title: str
    nodes: List[FlowNodeOut]
    deliverables: List[Any]
    metrics: FlowMetricsOut


class ClusterResponse(BaseModel):
    message_count: int
    topic_count: int
    flows: List[FlowOut]


class HealthResponse(BaseModel):
    status: str
    version: str
    index_backend: str
    config_issues: List[str]
