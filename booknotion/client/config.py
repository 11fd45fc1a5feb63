from typing import List

from pydantic_settings import BaseSettings

LOCAL = "local"
HOSTED = "hosted"


class ClientSettings(BaseSettings):
    # local или hosted
    deployment: str = LOCAL

    local_url: str = "http://localhost:3000/api"
    hosted_urls: List[str] = ["https://book-notion-production.up.railway.app/api"]

    storage_path: str = "~/.booknotion/storage.json"
    local_db_path: str = "~/.booknotion/local.db"

    timeout: float = 10.0

    model_config = {"env_prefix": "BOOKNOTION_CLIENT_", "env_file": ".env", "extra": "ignore"}

    @property
    def is_hosted(self) -> bool:
        return self.deployment.lower() == HOSTED
