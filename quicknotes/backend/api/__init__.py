# HTTP API package
