from . import health, index

routers = [index.rt, health.rt]

__all__ = ["routers"]
