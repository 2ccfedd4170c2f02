"""
HTTP da aplicação: app factory Flask e rotas da API.

Endpoints:
    POST /api/generate-code                        - gera projeto e zip
    GET  /api/generate-code/download/<project_id>  - baixa <project_id>.zip
    GET  /api/generate-code/status/<job_id>        - não implementado (501)
    GET  /api/components, /api/projects            - não implementado (501)
    GET  /health
"""

import logging
from pathlib import Path
from typing import Optional

from flask import Blueprint, Flask, current_app, jsonify, request, send_file
from flask_cors import CORS

from projectgen.agents.architect_agent import ArchitectAgent
from projectgen.agents.base_agent import CompletionClient
from projectgen.core.config import Settings
from projectgen.core.errors import BuildError, ProjectNotFound
from projectgen.core.orchestrator import Orchestrator
from projectgen.core.packager import archive_path
from projectgen.core.requirements import Requirements, validate_requirements

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__, url_prefix="/api")

GENERIC_FAILURE = "Code generation failed. Please try again."


def _orchestrator() -> Orchestrator:
    return current_app.extensions["projectgen.orchestrator"]


def _output_root() -> Path:
    return Path(current_app.config["OUTPUT_ROOT"])


def _not_implemented(feature: str, **extra):
    payload = {
        "success": False,
        "status": "not_implemented",
        "message": f"{feature} is not implemented yet",
    }
    payload.update(extra)
    return jsonify(payload), 501


@api_bp.route("/generate-code", methods=["POST"])
@api_bp.route("/generate-code/", methods=["POST"])
def generate_code():
    data = request.get_json(silent=True)
    ok, errors = validate_requirements(data)
    if not ok:
        return jsonify({"success": False, "message": "Validation errors", "errors": errors}), 400

    try:
        result = _orchestrator().run(Requirements.from_payload(data))
    except BuildError:
        # causa já registrada no log pelo orquestrador
        return jsonify({"success": False, "message": GENERIC_FAILURE}), 500

    return jsonify({"success": True, "message": "Code generated successfully", "data": result}), 200


@api_bp.route("/generate-code/status/<job_id>", methods=["GET"])
def generation_status(job_id: str):
    return _not_implemented("Job status tracking", data={"jobId": job_id})


@api_bp.route("/generate-code/download/<project_id>", methods=["GET"])
def download_project(project_id: str):
    try:
        path = archive_path(project_id, _output_root())
    except ProjectNotFound:
        return jsonify({"success": False, "message": "Project not found"}), 404
    return send_file(
        path.resolve(),
        mimetype="application/zip",
        as_attachment=True,
        download_name=f"{project_id}.zip",
    )


@api_bp.route("/components", methods=["GET"])
def list_components():
    return _not_implemented("Component library", data=[])


@api_bp.route("/projects", methods=["GET"])
def list_projects():
    return _not_implemented("Project history", data=[])


@api_bp.errorhandler(500)
def internal_error(error):
    logger.error("Erro não tratado: %s", error)
    return jsonify({"success": False, "message": "Internal server error"}), 500


def create_app(settings: Optional[Settings] = None, client: Optional[CompletionClient] = None) -> Flask:
    """
    Cria a aplicação Flask.

    `client` é o cliente de completions criado no startup (ver main.py).
    Sem cliente, toda geração usa a estrutura de fallback dos templates.
    """
    settings = settings or Settings()
    app = Flask(__name__)
    app.config["OUTPUT_ROOT"] = str(settings.output_root)

    CORS(
        app,
        origins=list(settings.cors_origins),
        allow_headers=["Authorization", "Content-Type"],
        expose_headers=["Content-Disposition"],
        methods=["GET", "POST", "OPTIONS"],
        max_age=86400,
    )

    if client is None:
        logger.warning("Nenhum cliente OpenAI configurado; usando apenas templates de fallback")
    architect = ArchitectAgent(
        client,
        max_tokens=settings.openai_max_tokens,
        temperature=settings.openai_temperature,
    )
    app.extensions["projectgen.orchestrator"] = Orchestrator(architect, settings.output_root)

    app.register_blueprint(api_bp)

    @app.route("/health", methods=["GET"])
    def health():
        return jsonify({"status": "ok"}), 200

    return app
