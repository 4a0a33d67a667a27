"""rpclient — report hierarchical test results to a test-reporting service."""

__version__ = "0.1.0"
