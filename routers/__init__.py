# routers/__init__.py
from .applications import router as applications_router
from .leases import router as leases_router
from .annexes import router as annexes_router

__all__ = ["applications_router", "leases_router", "annexes_router"]
