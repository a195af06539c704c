"""
Shared utilities for the Battle.net API reader.

This package aggregates common building blocks consumed by the reader:

- config: Reader settings via pydantic-settings
- logging: Structured logging with trace correlation
- metrics: Prometheus metrics helpers
- errors: Canonical error types and responses
- test_helpers: Fakes and factories for the test suites

Apart from test_helpers, nothing in shared/ imports from bnet_reader.
"""
