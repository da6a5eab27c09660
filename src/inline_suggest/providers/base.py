from abc import ABC, abstractmethod
from typing import Any, Dict

from ..data.schemas import RequestSnapshot


class BaseCompletionProvider(ABC):
    """The contract for the remote completion provider collaborator."""

    provider_key: str = "base"

    @abstractmethod
    async def invoke(self, snapshot: RequestSnapshot) -> Dict[str, Any]:
        """
        Requests completions for a snapshot and returns the provider's raw
        payload untouched.

        Raises:
            ProviderError: With kind "transient" for retryable failures and
                "fatal" otherwise. Implementations must not retry themselves.
        """
        raise NotImplementedError
