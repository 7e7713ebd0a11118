"""HTTP and WebSocket routers, mounted by ``drivigo.main``."""
