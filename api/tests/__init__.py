"""
Test suite for the DataSet datasource backend.

Provides:
- LRQ protocol state machine tests
- DataSet client tests against a scripted mock transport
- Panel query translation and frame conversion tests
- HTTP surface tests
"""

__test_suite__ = "DataSet Datasource Tests"
