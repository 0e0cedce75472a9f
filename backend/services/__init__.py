from services.employees import EmployeeService, TOP_EARNERS_CAP

__all__ = ["EmployeeService", "TOP_EARNERS_CAP"]
