import logging
import os
import shutil
import zipfile
from pathlib import Path
from typing import Dict, List

from werkzeug.security import safe_join

from projectgen.core.errors import BuildError, ProjectNotFound
from projectgen.core.models import GeneratedFile

logger = logging.getLogger(__name__)

ARCHIVE_SUFFIX = ".zip"


def collapse_duplicates(files: List[GeneratedFile]) -> List[GeneratedFile]:
    """
    Política para caminhos repetidos: a última escrita vence, mas o arquivo
    fica na posição da primeira ocorrência. Assim o zip e a resposta da API
    sempre mostram o mesmo conteúdo.
    """
    by_path: Dict[str, GeneratedFile] = {}
    for f in files:
        if f.path in by_path:
            logger.warning("Caminho duplicado %s: mantendo a última versão", f.path)
        by_path[f.path] = f
    # dict preserva a ordem de inserção da primeira chave
    return list(by_path.values())


def _job_dir(output_root: Path, job_id: str) -> Path:
    joined = safe_join(str(output_root), job_id)
    if joined is None or os.sep in job_id or "/" in job_id:
        raise BuildError(f"Invalid job id: {job_id!r}")
    return Path(joined)


def write_files(job_dir: Path, files: List[GeneratedFile]) -> None:
    for f in files:
        target = safe_join(str(job_dir), f.path)
        if target is None:
            raise BuildError(f"File path escapes the project directory: {f.path!r}")
        target_path = Path(target)
        target_path.parent.mkdir(parents=True, exist_ok=True)
        target_path.write_text(f.content, encoding="utf-8")


def _zip_directory(source_dir: Path, zip_path: Path) -> None:
    with zipfile.ZipFile(zip_path, mode="w", compression=zipfile.ZIP_DEFLATED, compresslevel=9) as zf:
        for path in sorted(source_dir.rglob("*")):
            if path.is_file():
                zf.write(path, path.relative_to(source_dir).as_posix())


def build_archive(job_id: str, files: List[GeneratedFile], output_root: Path) -> Path:
    """
    Escreve os arquivos em <output_root>/<job_id>/ e compacta em
    <output_root>/<job_id>.zip.

    O diretório temporário só é apagado depois que o zip foi fechado com
    sucesso; se a compactação falhar ele fica no disco para diagnóstico e o
    zip parcial é removido.
    """
    output_root = Path(output_root)
    output_root.mkdir(parents=True, exist_ok=True)
    job_dir = _job_dir(output_root, job_id)
    zip_path = output_root / f"{job_id}{ARCHIVE_SUFFIX}"

    job_dir.mkdir(parents=True, exist_ok=True)
    write_files(job_dir, files)
    logger.info("Job %s: %d arquivos escritos em %s", job_id, len(files), job_dir)

    try:
        _zip_directory(job_dir, zip_path)
    except (OSError, zipfile.BadZipFile) as e:
        logger.exception("Job %s: falha ao compactar; diretório mantido em %s", job_id, job_dir)
        # zip parcial não pode ser servido como download
        zip_path.unlink(missing_ok=True)
        raise BuildError(f"Failed to create archive for {job_id}") from e

    shutil.rmtree(job_dir, ignore_errors=True)
    logger.info("Job %s: arquivo gerado em %s", job_id, zip_path)
    return zip_path


def archive_path(project_id: str, output_root: Path) -> Path:
    joined = safe_join(str(output_root), f"{project_id}{ARCHIVE_SUFFIX}")
    if joined is None or "/" in project_id or os.sep in project_id:
        raise ProjectNotFound(project_id)
    path = Path(joined)
    if not path.is_file():
        raise ProjectNotFound(project_id)
    return path
