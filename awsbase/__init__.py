"""Building blocks for configuring AWS clients: diagnostics, settings, account lookup and partitions."""

__version__ = "0.1.0"

__all__ = [
    "awsauth",
    "config",
    "diag",
    "endpoint_resolver",
    "errors",
    "expand",
    "partitions",
    "request_logging",
    "resolvers",
    "textutil",
    "useragent",
]