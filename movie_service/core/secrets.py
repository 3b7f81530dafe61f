"""Read credentials stored as JSON documents in AWS Secrets Manager."""

from __future__ import annotations

import json
import logging
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from movie_service.services.errors import SecretError

logger = logging.getLogger(__name__)


class SecretProvider:
    """Resolve a single key of a JSON secret."""

    def __init__(self, client: Any) -> None:
        self._client = client

    def get(self, secret_id: str, key: str) -> str:
        try:
            raw = self._client.get_secret_value(SecretId=secret_id)["SecretString"]
        except (BotoCoreError, ClientError) as exc:
            logger.error("Secrets Manager lookup failed for %s: %s", secret_id, exc)
            raise SecretError(f"cannot read secret {secret_id}") from exc

        try:
            values = json.loads(raw)
        except (TypeError, ValueError) as exc:
            raise SecretError(f"secret {secret_id} is not a JSON document") from exc

        if not isinstance(values, dict) or key not in values:
            raise SecretError(f"secret {secret_id} has no key '{key}'")
        return str(values[key])
