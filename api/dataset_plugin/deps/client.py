from __future__ import annotations
from fastapi import HTTPException, Request
from dataset_plugin.services.dataset_client import DataSetClient


def get_dataset_client(request: Request) -> DataSetClient:
    """The DataSet client created at startup."""
    client = getattr(request.app.state, "dataset_client", None)
    if client is None:
        raise HTTPException(status_code=503, detail="DataSet client is not initialised")
    return client
