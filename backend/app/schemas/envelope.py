from typing import Any, Dict

from pydantic import BaseModel


class Envelope(BaseModel):
    """Uniform result of every operation: check ``success`` first."""
    success: bool
    message: str

    @classmethod
    def failure(cls, message: str) -> "Envelope":
        return cls(success=False, message=message)

    def to_response(self) -> Dict[str, Any]:
        """JSON body with absent payload fields omitted."""
        data = self.model_dump(mode="json")
        return {key: value for key, value in data.items() if value is not None}
