"""Building blocks for small web services: .env loading, typed configuration, host addresses, an HTTP server, routing, IDs and logging."""

__version__ = "0.1.0"

__all__ = [
    "env",
    "envconf",
    "hostutil",
    "httpd",
    "idgen",
    "route",
    "router",
    "slog",
]