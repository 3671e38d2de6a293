"""
Single operation endpoint.

Clients post ``{"operation": <name>, "variables": {...}}`` and always get
back the operation's envelope with HTTP 200; success or failure is carried by
the envelope's ``success`` flag.
"""

from typing import Any, Awaitable, Callable, Dict, Optional

from fastapi import APIRouter, Depends

from app.api.deps import get_auth_service, get_caller_identity, get_employee_service
from app.core.security import CallerIdentity
from app.schemas.envelope import Envelope
from app.schemas.operation import OperationRequest
from app.services.auth_service import AuthService
from app.services.employee_service import EmployeeService

router = APIRouter()

Handler = Callable[
    [AuthService, EmployeeService, Optional[CallerIdentity], Dict[str, Any]],
    Awaitable[Envelope],
]

OPERATIONS: Dict[str, Handler] = {
    "login": lambda auth, emp, caller, v: auth.login(v.get("input")),
    "signup": lambda auth, emp, caller, v: auth.signup(v.get("input")),
    "getAllEmployees": lambda auth, emp, caller, v: emp.list_employees(caller),
    "searchEmployeeByEid": lambda auth, emp, caller, v: emp.find_employee(caller, v.get("eid")),
    "searchEmployeesByDesignationOrDepartment": lambda auth, emp, caller, v: emp.search_employees(
        caller, designation=v.get("designation"), department=v.get("department")
    ),
    "addEmployee": lambda auth, emp, caller, v: emp.create_employee(caller, v.get("input")),
    "updateEmployeeByEid": lambda auth, emp, caller, v: emp.update_employee(
        caller, v.get("eid"), v.get("input")
    ),
    "deleteEmployeeByEid": lambda auth, emp, caller, v: emp.delete_employee(caller, v.get("eid")),
}


@router.post("")
async def run_operation(
    body: OperationRequest,
    caller: Optional[CallerIdentity] = Depends(get_caller_identity),
    auth_service: AuthService = Depends(get_auth_service),
    employee_service: EmployeeService = Depends(get_employee_service),
) -> Dict[str, Any]:
    """
    Dispatch one login/signup/employee operation.
    """
    handler = OPERATIONS[body.operation]
    envelope = await handler(auth_service, employee_service, caller, body.variables)
    return envelope.to_response()
