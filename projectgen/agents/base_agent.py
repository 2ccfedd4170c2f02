from abc import ABC, abstractmethod
from typing import Optional, Protocol


class CompletionClient(Protocol):
    def ask(self, system: str, user: str, max_tokens: int = ..., temperature: float = ...) -> str:
        ...


class BaseAgent(ABC):
    def __init__(self, name: str, specialty: str, client: Optional[CompletionClient] = None):
        self.name = name
        self.specialty = specialty
        # cliente criado no startup e injetado; None => só templates
        self.client = client

    @abstractmethod
    def generate_response(self, *args, **kwargs):
        raise NotImplementedError
