"""Employee API Routes

Thin HTTP surface over EmployeeService. Errors are raised as
AppErrorException and rendered by the registered error handlers.
"""
from fastapi import APIRouter, Depends, Request, status

from core.errors import raise_result
from core.logging import api_logger
from models.employee import CreateEmployeeInput, Employee
from services.employees import EmployeeService

log = api_logger()

router = APIRouter()


def get_employee_service(request: Request) -> EmployeeService:
    """Service instance created in the application lifespan."""
    return request.app.state.employee_service


# === Endpoints ===

@router.get("/", response_model=list[Employee])
async def get_all_employees(service: EmployeeService = Depends(get_employee_service)):
    return raise_result(await service.list_employees())


@router.get("/search/{search_string}", response_model=list[Employee])
async def search_employees_by_name(
    search_string: str,
    service: EmployeeService = Depends(get_employee_service),
):
    log.info("employee_search", fragment=search_string)
    return raise_result(await service.search_by_name(search_string))


@router.get("/highestSalary", response_model=int)
async def get_highest_salary(service: EmployeeService = Depends(get_employee_service)):
    return raise_result(await service.max_salary())


@router.get("/topTenHighestEarningEmployeeNames", response_model=list[str])
async def get_top_ten_earning_names(service: EmployeeService = Depends(get_employee_service)):
    return raise_result(await service.top_earning_names())


@router.get("/{employee_id}", response_model=Employee)
async def get_employee_by_id(
    employee_id: str,
    service: EmployeeService = Depends(get_employee_service),
):
    return raise_result(await service.get_employee_by_id(employee_id))


@router.post("/", response_model=Employee, status_code=status.HTTP_201_CREATED)
async def create_employee(
    employee_input: CreateEmployeeInput,
    service: EmployeeService = Depends(get_employee_service),
):
    return raise_result(await service.create_employee(employee_input))


@router.delete("/{employee_id}", response_model=str)
async def delete_employee(
    employee_id: str,
    service: EmployeeService = Depends(get_employee_service),
):
    return raise_result(await service.delete_employee(employee_id))
