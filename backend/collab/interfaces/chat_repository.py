"""Interface for the project chat sink."""

from abc import ABC, abstractmethod

from collab.models.chat import ChatMessage, ChatMessageCreate


class IChatRepository(ABC):
    """Stores project chat messages."""

    @abstractmethod
    async def post(self, message: ChatMessageCreate) -> ChatMessage:
        """Append a message to a project's chat."""
        pass

    @abstractmethod
    async def list_by_project(self, project_id: str, limit: int = 100) -> list[ChatMessage]:
        """List a project's messages, oldest first."""
        pass
