from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import jsonschema


PROJECT_TYPES = ("fullstack", "frontend", "backend", "api", "component")

REQUIREMENTS_SCHEMA = {
    "type": "object",
    "required": ["name", "description", "type", "framework", "features"],
    "properties": {
        "name": {"type": "string", "pattern": r"\S"},
        "description": {"type": "string", "pattern": r"\S"},
        "type": {"enum": list(PROJECT_TYPES)},
        "framework": {"type": "string", "pattern": r"\S"},
        "features": {"type": "array", "items": {"type": "string"}},
        "database": {"type": ["string", "null"]},
        "authentication": {"type": ["boolean", "null"]},
        "deployment": {"type": ["string", "null"]},
    },
}

FIELD_MESSAGES = {
    "name": "Project name is required",
    "description": "Project description is required",
    "type": "Invalid project type",
    "framework": "Framework is required",
    "features": "Features must be an array",
    "database": "Database must be a string",
    "authentication": "Authentication must be a boolean",
    "deployment": "Deployment must be a string",
}

_VALIDATOR = jsonschema.Draft7Validator(REQUIREMENTS_SCHEMA)


@dataclass(frozen=True)
class Requirements:
    name: str
    description: str
    type: str
    framework: str
    features: Tuple[str, ...] = ()
    database: Optional[str] = None
    authentication: Optional[bool] = None
    deployment: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Dict) -> "Requirements":
        # Chame validate_requirements antes; aqui só copiamos os campos.
        return cls(
            name=payload["name"],
            description=payload["description"],
            type=payload["type"],
            framework=payload["framework"],
            features=tuple(payload.get("features") or ()),
            database=payload.get("database") or None,
            authentication=payload.get("authentication"),
            deployment=payload.get("deployment") or None,
        )


def _error_field(error: jsonschema.ValidationError) -> str:
    if error.validator == "required":
        # mensagem do jsonschema: "'name' is a required property"
        return error.message.split("'")[1]
    if error.absolute_path:
        return str(error.absolute_path[0])
    return "body"


def validate_requirements(payload) -> Tuple[bool, List[Dict[str, str]]]:
    """
    Valida o corpo de POST /api/generate-code.
    Retorna (ok, erros) com no máximo um erro por campo, na ordem dos campos
    do schema, cada um como {"field": ..., "message": ...}.
    """
    if not isinstance(payload, dict):
        return False, [{"field": "body", "message": "Request body must be a JSON object"}]

    by_field: Dict[str, str] = {}
    for error in _VALIDATOR.iter_errors(payload):
        field = _error_field(error)
        if field not in by_field:
            by_field[field] = FIELD_MESSAGES.get(field, error.message)

    order = list(REQUIREMENTS_SCHEMA["properties"])
    errors = [
        {"field": f, "message": by_field[f]}
        for f in sorted(by_field, key=lambda f: order.index(f) if f in order else len(order))
    ]
    return not errors, errors
