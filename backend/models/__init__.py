from models.employee import (
    Employee, CreateEmployeeInput, DeleteEmployeeInput,
    ApiEnvelope, EmployeeListEnvelope, EmployeeEnvelope, DeleteEnvelope,
)

__all__ = [
    "Employee", "CreateEmployeeInput", "DeleteEmployeeInput",
    "ApiEnvelope", "EmployeeListEnvelope", "EmployeeEnvelope", "DeleteEnvelope",
]
