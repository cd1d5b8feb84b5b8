"""
Главный API роутер HRMS
"""
from fastapi import APIRouter

from apps.api.routers.attendance import router as attendance_router
from apps.api.routers.employees import router as employees_router
from apps.api.routers.payroll import router as payroll_router
from apps.api.routers.payslips import router as payslips_router
from apps.api.routers.time_off import router as time_off_router

# Создаем главный роутер
api_router = APIRouter(prefix="/api/v1")

# Подключаем роутеры
api_router.include_router(payroll_router)
api_router.include_router(payslips_router)
api_router.include_router(time_off_router)
api_router.include_router(attendance_router)
api_router.include_router(employees_router)
