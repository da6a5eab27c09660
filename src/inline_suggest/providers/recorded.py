from pathlib import Path
from typing import Any, Dict

import structlog
import yaml

from ..data.schemas import RequestSnapshot
from ..errors import ProviderError
from .base import BaseCompletionProvider

logger = structlog.get_logger(__name__)


class RecordedResponseProvider(BaseCompletionProvider):
    """
    Replays a provider response captured to a YAML or JSON file. Lets the
    session pipeline be exercised without any network access.
    """

    provider_key = "recorded"

    def __init__(self, response: Dict[str, Any]):
        self.response = response
        self.invocations = 0

    @classmethod
    def from_file(cls, path: Path) -> "RecordedResponseProvider":
        """Loads a recorded response. JSON files parse as YAML too."""
        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ProviderError(
                f"Could not read recorded response '{path}': {e}", kind="fatal"
            ) from e
        if not isinstance(data, dict):
            raise ProviderError(
                f"Recorded response '{path}' must contain a mapping.", kind="fatal"
            )
        logger.debug("provider.recorded.loaded", path=str(path))
        return cls(data)

    async def invoke(self, snapshot: RequestSnapshot) -> Dict[str, Any]:
        self.invocations += 1
        logger.debug(
            "provider.recorded.invoked",
            filename=snapshot.file_context.filename,
            invocations=self.invocations,
        )
        return self.response
