from typing import Any, Dict, Optional
from pydantic import BaseModel

class ResponseModel(BaseModel):
    """JSON envelope returned by every route: {code, message, data}."""
    code: int = 200
    message: str = "success"
    data: Optional[Any] = None

    @staticmethod
    def success(data: Any = None) -> Dict[str, Any]:
        return ResponseModel(data=data).model_dump()

    @staticmethod
    def fail(code: int = 400, message: str = "error", data: Any = None) -> Dict[str, Any]:
        return ResponseModel(code=code, message=message, data=data).model_dump()
