from pydantic import BaseModel


class HealthResponse(BaseModel):
    ok: bool = True
    service: str
