from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from datetime import datetime
from enum import Enum
from typing import Optional

class ApiModel(BaseModel):
    """Base for wire models: snake_case in Python, camelCase in JSON"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True

class OverallStatus(str, Enum):
    AVAILABLE = "available"
    PARTIAL = "partial"
    UNAVAILABLE = "unavailable"
    MOCK = "mock"

class PlayerRecord(ApiModel):
    name: str
    id: str
    ping: int = Field(ge=0, description="Milliseconds, synthesized")

    class Config:
        frozen = True

class RegionResult(ApiModel):
    region_id: str
    players: list[PlayerRecord] = Field(default_factory=list)
    online: bool
    rate_limited: Optional[bool] = None
    using_mock_data: Optional[bool] = None
    fetch_failed: Optional[bool] = None
    error: Optional[str] = None

    class Config:
        frozen = True

class ResponseEnvelope(ApiModel):
    regions: list[RegionResult]
    generated_at: datetime
    overall_status: OverallStatus
    mock_count: int
    any_api_reachable: bool
    using_mock_data: bool
    fetch_fail_count: Optional[int] = None
    message: Optional[str] = None
    error: Optional[str] = None

class HealthResponse(BaseModel):
    status: str
    timestamp: float
    regions: int
    version: str = "1.0.0"
