"""
Auditoria por padrões (apenas consultiva).

Procura construções arriscadas e trechos parecidos com SQL injection usando
uma lista fixa de regex e PREPENDE comentários de aviso. Não remove nem
neutraliza nada: o texto original continua intacto no fim do arquivo.

Exceção: arquivos .json não têm sintaxe de comentário, então um padrão
encontrado neles só é registrado no log e o arquivo fica inalterado.
"""

import logging
import posixpath
import re
from typing import List, Optional, Tuple

from projectgen.core.assembler import normalize_content, security_files
from projectgen.core.models import GeneratedFile

logger = logging.getLogger(__name__)

DANGEROUS_PATTERNS = [
    re.compile(r"eval\s*\(", re.IGNORECASE),
    re.compile(r"Function\s*\(", re.IGNORECASE),
    re.compile(r"document\.write", re.IGNORECASE),
    re.compile(r"innerHTML\s*=(?!=)", re.IGNORECASE),
    re.compile(r"\.exec\s*\(", re.IGNORECASE),
    re.compile(r"child_process", re.IGNORECASE),
    re.compile(r"fs\.unlink", re.IGNORECASE),
    re.compile(r"process\.exit", re.IGNORECASE),
    re.compile(r"__proto__", re.IGNORECASE),
    re.compile(r"constructor\.constructor", re.IGNORECASE),
]

SQL_INJECTION_PATTERNS = [
    re.compile(r"(?:;\s*(?:DROP|DELETE|INSERT|UPDATE|ALTER)\s+)", re.IGNORECASE),
    re.compile(r"(?:UNION\s+SELECT)", re.IGNORECASE),
    re.compile(r"'(?:\s*OR\s*'\w*'\s*=\s*'\w*')", re.IGNORECASE),
    re.compile(r"(?:--|#|/\*)"),
]

VALIDATION_LIBRARIES = ("express-validator", "joi")

SERVER_ENTRY_FILENAME = "index.ts"

BARE_HELMET = "app.use(helmet())"

HARDENED_HELMET = """
// Security headers middleware
app.use(helmet({
  contentSecurityPolicy: {
    directives: {
      defaultSrc: ["'self'"],
      styleSrc: ["'self'", "'unsafe-inline'"],
      scriptSrc: ["'self'"],
      imgSrc: ["'self'", "data:", "https:"],
    },
  },
  hsts: {
    maxAge: 31536000,
    includeSubDomains: true,
    preload: true
  }
}))
"""

_HASH_COMMENT_EXTS = {".py", ".rb", ".sh", ".bash", ".yml", ".yaml", ".toml", ".ini", ".cfg", ".conf", ".txt"}
_HASH_COMMENT_NAMES = {"dockerfile", ".dockerignore", ".gitignore", ".npmrc", "makefile"}
_MARKUP_EXTS = {".md", ".html", ".htm", ".xml", ".svg", ".vue"}
_BLOCK_EXTS = {".css", ".scss", ".less"}
_NO_COMMENT_EXTS = {".json"}


def comment_style(path: str) -> Optional[Tuple[str, str]]:
    """(abre, fecha) do comentário de linha para o tipo do arquivo; None se não houver."""
    name = posixpath.basename(path or "").lower()
    ext = posixpath.splitext(name)[1]
    if ext in _NO_COMMENT_EXTS:
        return None
    if name in _HASH_COMMENT_NAMES or name.startswith(".env") or ext in _HASH_COMMENT_EXTS:
        return "# ", ""
    if ext in _MARKUP_EXTS:
        return "<!-- ", " -->"
    if ext in _BLOCK_EXTS:
        return "/* ", " */"
    return "// ", ""


def _comment(lines: List[str], style: Tuple[str, str]) -> str:
    opening, closing = style
    return "".join(f"{opening}{line}{closing}\n" for line in lines)


def find_risks(content: str) -> List[str]:
    """Um rótulo por padrão que casa com o texto (sem deduplicar avisos iguais)."""
    risks = [p.pattern for p in DANGEROUS_PATTERNS if p.search(content)]
    risks += [f"SQL Injection risk: {p.pattern}" for p in SQL_INJECTION_PATTERNS if p.search(content)]
    return risks


def scan_and_annotate(content: str, path: str) -> str:
    logger.debug("Auditando arquivo: %s", path)
    style = comment_style(path)
    annotated = content

    for risk in find_risks(content):
        logger.warning("Padrão arriscado em %s: %s", path, risk)
        if style is None:
            continue
        annotated = _comment(
            [f"SECURITY WARNING: {risk}", "Please review this code for security implications"],
            style,
        ) + annotated

    if style is not None and ("route" in path or "controller" in path):
        if not any(lib in annotated for lib in VALIDATION_LIBRARIES):
            annotated = _comment(
                [
                    "TODO: Add input validation using express-validator or joi",
                    "Example: body('email').isEmail().normalizeEmail()",
                ],
                style,
            ) + annotated

    if path.endswith(SERVER_ENTRY_FILENAME) and BARE_HELMET in annotated:
        annotated = annotated.replace(BARE_HELMET, HARDENED_HELMET.strip("\n"))

    return annotated


def apply_security(files: List[GeneratedFile]) -> List[GeneratedFile]:
    """
    Audita cada arquivo e acrescenta os arquivos de segurança (.eslintrc.json, .gitignore).
    Falha em um arquivo não derruba o job: mantém o conteúdo original dele.
    """
    logger.info("Aplicando auditoria de segurança em %d arquivos", len(files))
    audited: List[GeneratedFile] = []
    for f in files:
        try:
            audited.append(f.with_content(scan_and_annotate(f.content, f.path)))
        except Exception:
            logger.warning("Auditoria falhou para %s; mantendo original", f.path, exc_info=True)
            audited.append(f)
    audited += [sf.with_content(normalize_content(sf.content)) for sf in security_files()]
    return audited
