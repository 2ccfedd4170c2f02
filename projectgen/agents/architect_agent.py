import json
import logging
import posixpath
import re
from textwrap import dedent
from typing import Iterable, List, Optional

import openai

from projectgen.agents.base_agent import BaseAgent, CompletionClient
from projectgen.core import templates
from projectgen.core.errors import GenerationError
from projectgen.core.models import FILE_KINDS, GeneratedFile, ProjectStructure
from projectgen.core.requirements import Requirements

logger = logging.getLogger(__name__)

# Guloso de propósito: do primeiro "{" ao último "}" da resposta,
# mesmo que o modelo embrulhe o JSON em texto ou em bloco markdown.
JSON_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)

SYSTEM_PROMPT = dedent("""\
    You are an expert software architect and full-stack developer.
    Your task is to generate complete, production-ready project structures based on user requirements.

    Guidelines:
    1. Generate modern, scalable, and secure code
    2. Follow industry best practices and patterns
    3. Include proper error handling and validation
    4. Implement security measures (authentication, input validation, etc.)
    5. Create responsive and accessible UI components
    6. Include comprehensive testing structure
    7. Use TypeScript for type safety
    8. Follow clean code principles
    9. Include proper documentation and comments
    10. Ensure code is production-ready

    Output Format:
    Return a JSON object with the following structure:
    {
      "architecture": "Brief description of the architecture",
      "files": [
        {
          "path": "relative/file/path",
          "content": "complete file content",
          "type": "component|service|config|test|documentation"
        }
      ],
      "dependencies": ["package1", "package2"],
      "scripts": {"script-name": "script-command"},
      "environment": {"ENV_VAR": "description"}
    }""")

ADDITIONAL_REQUIREMENTS = (
    "Use modern development practices",
    "Include proper error handling",
    "Implement security best practices",
    "Create responsive design",
    "Include unit tests",
    "Add comprehensive documentation",
    "Use TypeScript for type safety",
    "Include CI/CD configuration",
    "Follow accessibility guidelines",
    "Implement proper logging",
)

PLACEHOLDER_CONTENT = "// Generated content"


def build_prompt(requirements: Requirements) -> str:
    lines = [
        f"Create a {requirements.type} application with the following requirements:",
        "",
        f"Project Name: {requirements.name}",
        f"Description: {requirements.description}",
        f"Framework: {requirements.framework}",
        f"Features: {', '.join(requirements.features)}",
    ]
    if requirements.database:
        lines.append(f"Database: {requirements.database}")
    if requirements.authentication:
        lines.append("Authentication: Required")
    if requirements.deployment:
        lines.append(f"Deployment: {requirements.deployment}")
    lines += ["", "Additional Requirements:"]
    lines += [f"- {item}" for item in ADDITIONAL_REQUIREMENTS]
    lines += [
        "",
        "Generate a complete project structure with all necessary files, configurations, and code.",
    ]
    return "\n".join(lines)


def validate_dependencies(dependencies: Iterable) -> List[str]:
    """Remove nomes vazios, com '..' ou absolutos e duplicados (mantém a primeira ocorrência)."""
    valid = [
        dep for dep in dependencies
        if isinstance(dep, str) and dep and ".." not in dep and not dep.startswith("/")
    ]
    return list(dict.fromkeys(valid))


def _safe_relative_path(raw) -> Optional[str]:
    if not isinstance(raw, str):
        return None
    path = raw.strip().replace("\\", "/")
    while path.startswith("./"):
        path = path[2:]
    if not path or path.startswith("/") or re.match(r"^[A-Za-z]:", path):
        return None
    if ".." in path.split("/"):
        return None
    path = posixpath.normpath(path)
    return None if path == "." else path


def _file_content(raw) -> str:
    if isinstance(raw, (dict, list)):
        return json.dumps(raw, indent=2, ensure_ascii=False)
    if isinstance(raw, str) and raw.strip():
        return raw
    return PLACEHOLDER_CONTENT


def enhance_files(raw_files, requirements: Requirements) -> List[GeneratedFile]:
    """
    Converte a lista de arquivos do modelo em GeneratedFile:
    - descarta entradas sem caminho relativo seguro
    - conteúdo ausente vira um placeholder, tipo ausente vira 'component'
    - acrescenta os arquivos essenciais cujo caminho o modelo não gerou
    """
    files: List[GeneratedFile] = []
    for entry in raw_files if isinstance(raw_files, list) else []:
        if not isinstance(entry, dict):
            continue
        path = _safe_relative_path(entry.get("path"))
        if path is None:
            logger.warning("Ignorando arquivo com caminho inválido na resposta do modelo: %r", entry.get("path"))
            continue
        kind = entry.get("type") if entry.get("type") in FILE_KINDS else "component"
        files.append(GeneratedFile(path, _file_content(entry.get("content")), kind))

    existing = {f.path for f in files}
    for essential in templates.essential_files(requirements):
        if essential.path not in existing:
            files.append(essential)
    return files


def parse_response(text: str, requirements: Requirements) -> ProjectStructure:
    match = JSON_OBJECT_RE.search(text or "")
    if not match:
        raise GenerationError("No valid JSON found in AI response")
    try:
        parsed = json.loads(match.group(0))
    except (ValueError, RecursionError) as e:
        # RecursionError: JSON aninhado fundo demais para o decoder
        raise GenerationError(f"Invalid JSON in AI response: {e}") from e
    if not isinstance(parsed, dict):
        raise GenerationError("AI response JSON is not an object")

    scripts = parsed.get("scripts")
    if not isinstance(scripts, dict) or not scripts:
        scripts = templates.default_scripts(requirements)
    environment = parsed.get("environment")
    if not isinstance(environment, dict):
        environment = {}
    dependencies = parsed.get("dependencies")

    return ProjectStructure(
        architecture=str(parsed.get("architecture") or "AI-generated architecture"),
        files=enhance_files(parsed.get("files") or [], requirements),
        dependencies=validate_dependencies(dependencies if isinstance(dependencies, list) else []),
        scripts={str(k): str(v) for k, v in scripts.items()},
        environment={str(k): str(v) for k, v in environment.items()},
        source="ai",
    )


class ArchitectAgent(BaseAgent):
    def __init__(self, client: Optional[CompletionClient] = None, max_tokens: int = 4000, temperature: float = 0.7):
        super().__init__("ArchitectAgent", "Project Structure Generation", client)
        self.max_tokens = max_tokens
        self.temperature = temperature

    def _ask_model(self, requirements: Requirements) -> str:
        if self.client is None:
            raise GenerationError("No completion client configured")
        try:
            text = self.client.ask(
                SYSTEM_PROMPT,
                build_prompt(requirements),
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except openai.APITimeoutError as e:
            raise GenerationError("Completion request timed out") from e
        except Exception as e:
            raise GenerationError(f"Completion request failed: {e}") from e
        if not text:
            raise GenerationError("No response from AI")
        return text

    def generate_response(self, requirements: Requirements) -> ProjectStructure:
        logger.info("Gerando estrutura via IA para projeto %s '%s'", requirements.type, requirements.name)
        try:
            return parse_response(self._ask_model(requirements), requirements)
        except GenerationError as e:
            logger.warning("Geração por IA falhou (%s); usando estrutura de fallback", e)
            return templates.fallback_structure(requirements)

    generate_structure = generate_response
