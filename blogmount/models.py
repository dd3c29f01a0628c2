from typing import List

from pydantic import BaseModel


class ServiceIndex(BaseModel):
    message: str
    status: str
    endpoints: List[str]


class HealthStatus(BaseModel):
    status: str
    timestamp: str
    service: str
