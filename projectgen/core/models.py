from dataclasses import dataclass, field, replace
from typing import Dict, List


FILE_KINDS = ("component", "service", "config", "test", "documentation")


@dataclass(frozen=True)
class GeneratedFile:
    path: str
    content: str
    kind: str = "component"

    def with_content(self, content: str) -> "GeneratedFile":
        return replace(self, content=content)

    def to_dict(self) -> Dict[str, str]:
        return {"path": self.path, "content": self.content}


@dataclass
class ProjectStructure:
    architecture: str
    files: List[GeneratedFile] = field(default_factory=list)
    dependencies: List[str] = field(default_factory=list)
    scripts: Dict[str, str] = field(default_factory=dict)
    environment: Dict[str, str] = field(default_factory=dict)
    # "ai" quando veio do modelo, "fallback" quando montada só com templates
    source: str = "ai"
