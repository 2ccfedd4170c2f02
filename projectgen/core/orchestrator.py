import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional

from projectgen.agents.architect_agent import ArchitectAgent
from projectgen.core.assembler import build_project
from projectgen.core.auditor import apply_security
from projectgen.core.errors import BuildError
from projectgen.core.models import GeneratedFile
from projectgen.core.packager import build_archive, collapse_duplicates
from projectgen.core.requirements import Requirements

logger = logging.getLogger(__name__)

DOWNLOAD_URL = "/api/generate-code/download/{project_id}"

PREVIEW_CANDIDATES = ("src/App.tsx", "src/index.ts", "app.js", "index.js", "main.py")
PREVIEW_EXTENSIONS = (".ts", ".tsx", ".js", ".jsx")


class JobState(str, Enum):
    RECEIVED = "received"
    STRUCTURE_GENERATED = "structure-generated"
    STRUCTURE_FALLBACK = "structure-fallback"
    ASSEMBLED = "assembled"
    AUDITED = "audited"
    ARCHIVED = "archived"
    COMPLETE = "complete"
    FAILED = "failed"


@dataclass
class Job:
    job_id: str
    requirements: Requirements
    state: JobState = JobState.RECEIVED
    files: List[GeneratedFile] = field(default_factory=list)
    archive: Optional[Path] = None

    def advance(self, state: JobState) -> None:
        logger.info("Job %s: %s -> %s", self.job_id, self.state.value, state.value)
        self.state = state


def code_preview(files: List[GeneratedFile]) -> str:
    for candidate in PREVIEW_CANDIDATES:
        for f in files:
            if candidate in f.path:
                return f.content
    for f in files:
        if f.path.endswith(PREVIEW_EXTENSIONS):
            return f.content
    return "// Generated project files"


class Orchestrator:
    def __init__(self, architect: ArchitectAgent, output_root: Path):
        self.architect = architect
        self.output_root = Path(output_root)

    def run(self, requirements: Requirements, job_id: Optional[str] = None) -> dict:
        job = Job(job_id or str(uuid.uuid4()), requirements)
        logger.info(">>> Iniciando geração do projeto %s ('%s')", job.job_id, requirements.name)

        # Erros de IA já viram fallback dentro do agente; daqui não sai exceção.
        structure = self.architect.generate_structure(requirements)
        job.advance(JobState.STRUCTURE_FALLBACK if structure.source == "fallback" else JobState.STRUCTURE_GENERATED)

        try:
            job.files = build_project(structure.files, requirements)
            job.advance(JobState.ASSEMBLED)

            job.files = collapse_duplicates(apply_security(job.files))
            job.advance(JobState.AUDITED)

            job.archive = build_archive(job.job_id, job.files, self.output_root)
            job.advance(JobState.ARCHIVED)
        except Exception as e:
            job.advance(JobState.FAILED)
            logger.exception("Job %s: geração falhou", job.job_id)
            raise BuildError() from e

        job.advance(JobState.COMPLETE)
        logger.info("✅ Job %s concluído com %d arquivos", job.job_id, len(job.files))
        return {
            "projectId": job.job_id,
            "code": code_preview(job.files),
            "files": [f.to_dict() for f in job.files],
            "downloadUrl": DOWNLOAD_URL.format(project_id=job.job_id),
        }
