"""rpclient command-line interface."""
