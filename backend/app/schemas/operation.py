from typing import Any, Dict, Literal

from pydantic import BaseModel, Field

OperationName = Literal[
    "login",
    "signup",
    "getAllEmployees",
    "searchEmployeeByEid",
    "searchEmployeesByDesignationOrDepartment",
    "addEmployee",
    "updateEmployeeByEid",
    "deleteEmployeeByEid",
]


class OperationRequest(BaseModel):
    """Body of the single operation endpoint."""
    operation: OperationName
    variables: Dict[str, Any] = Field(default_factory=dict)
