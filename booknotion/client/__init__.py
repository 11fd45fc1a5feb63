from booknotion.client.config import ClientSettings
from booknotion.client.gateway import ApiError, ApiGateway, ClientError, NetworkError
from booknotion.client.storage import ClientStorage
from booknotion.client.stores import LocalStore, NotebookStore, RemoteStore, open_store

__all__ = [
    "ClientSettings",
    "ClientStorage",
    "ApiGateway",
    "ClientError",
    "ApiError",
    "NetworkError",
    "NotebookStore",
    "RemoteStore",
    "LocalStore",
    "open_store",
]
