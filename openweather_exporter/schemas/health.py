from typing import List

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: str = Field()
    uptime_s: float = Field(ge=0)
    version: str = Field()
    locations: List[str] = Field(default_factory=list)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"status": "ok", "uptime_s": 12.34, "version": "0.3.0", "locations": ["New York, NY"]}
            ]
        }
    }
