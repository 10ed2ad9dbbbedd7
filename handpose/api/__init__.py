from .server import create_api_server, run_server

__all__ = ["create_api_server", "run_server"]
