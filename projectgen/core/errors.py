class ConfigError(Exception):
    """Configuração inválida detectada no startup."""


class GenerationError(Exception):
    """Falha na chamada ao modelo ou resposta sem JSON utilizável.

    Nunca chega ao cliente HTTP: o gerador troca pela estrutura de fallback.
    """


class BuildError(Exception):
    """Falha ao montar, auditar ou empacotar os arquivos do projeto."""

    def __init__(self, message: str = "Code generation failed. Please try again."):
        super().__init__(message)
        self.message = message


class ProjectNotFound(Exception):
    """Download pedido para um arquivo zip que não existe."""

    def __init__(self, project_id: str):
        super().__init__(f"Project not found: {project_id}")
        self.project_id = project_id
