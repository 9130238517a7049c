from datetime import datetime, timezone

from pydantic import BaseModel, Field

class ErrorReport(BaseModel):
    response_type: str = "error"
    task: str
    detail: str
    code: str
    at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_exception(cls, task: str, exc: BaseException) -> "ErrorReport":
        code = getattr(exc, "code", None) or type(exc).__name__
        return cls(task=task, detail=str(exc), code=code)
