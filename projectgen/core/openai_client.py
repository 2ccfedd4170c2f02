from openai import OpenAI

from projectgen.core.config import Settings


class OpenAIClient:
    def __init__(self, api_key: str, model: str = "gpt-4o-mini", timeout: float = 60.0):
        if not api_key:
            raise RuntimeError("OPENAI_API_KEY não encontrado no .env")
        # max_retries=0: uma falha vira fallback imediatamente
        self.client = OpenAI(api_key=api_key, timeout=timeout, max_retries=0)
        self.model = model
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "OpenAIClient":
        return cls(settings.openai_api_key, model=settings.openai_model, timeout=settings.openai_timeout)

    def ask(self, system: str, user: str, max_tokens: int = 4000, temperature: float = 0.7) -> str:
        """
        Envia uma mensagem para a API da OpenAI (interface >= 1.0.0).
        O timeout é aplicado por chamada; ao expirar, a SDK levanta
        APITimeoutError, tratado pelo gerador como erro de geração.
        """
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            max_completion_tokens=max_tokens,
            temperature=temperature,
            timeout=self.timeout,
        )

        content = response.choices[0].message.content if response.choices else None
        return (content or "").strip()
