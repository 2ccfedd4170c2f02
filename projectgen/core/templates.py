"""
Templates estáticos usados quando o modelo não responde (estrutura de
fallback) e para completar respostas do modelo sem arquivos essenciais.

Tudo aqui é determinístico: a mesma Requirements gera sempre o mesmo texto.
"""

import json
import re
from typing import Dict, List

from projectgen.core.models import GeneratedFile, ProjectStructure
from projectgen.core.requirements import Requirements


def is_ui_project(requirements: Requirements) -> bool:
    return requirements.type in ("frontend", "fullstack")


def package_name(name: str) -> str:
    return re.sub(r"\s+", "-", name.lower())


def default_scripts(requirements: Requirements) -> Dict[str, str]:
    scripts = {
        "start": "node index.js",
        "build": "tsc",
        "test": "jest",
        "lint": "eslint . --ext .ts,.tsx,.js,.jsx",
    }
    if is_ui_project(requirements):
        scripts["dev"] = "vite"
        scripts["build"] = "vite build"
        scripts["preview"] = "vite preview"
    return scripts


def base_dependencies(requirements: Requirements) -> Dict[str, str]:
    deps: Dict[str, str] = {}
    framework = requirements.framework
    if "react" in framework:
        deps.update({"react": "^18.2.0", "react-dom": "^18.2.0"})
    if "node" in framework:
        deps.update({"express": "^4.18.2", "cors": "^2.8.5", "helmet": "^7.1.0"})
    if requirements.database == "postgresql":
        deps["pg"] = "^8.11.3"
    if requirements.authentication:
        deps.update({"jsonwebtoken": "^9.0.2", "bcryptjs": "^2.4.3"})
    return deps


def dev_dependencies(requirements: Requirements) -> Dict[str, str]:
    return {
        "typescript": "^5.2.2",
        "@types/node": "^20.9.0",
        "jest": "^29.7.0",
        "eslint": "^8.53.0",
    }


def package_json(requirements: Requirements) -> str:
    manifest = {
        "name": package_name(requirements.name),
        "version": "1.0.0",
        "description": requirements.description,
        "main": "index.js",
        "scripts": default_scripts(requirements),
        "dependencies": base_dependencies(requirements),
        "devDependencies": dev_dependencies(requirements),
    }
    return json.dumps(manifest, indent=2, ensure_ascii=False)


def readme(requirements: Requirements) -> str:
    stack = [f"- Framework: {requirements.framework}"]
    if requirements.database:
        stack.append(f"- Database: {requirements.database}")
    if requirements.deployment:
        stack.append(f"- Deployment: {requirements.deployment}")
    features = "\n".join(f"- {f}" for f in requirements.features)

    return (
        f"# {requirements.name}\n\n"
        f"{requirements.description}\n\n"
        "## Features\n"
        f"{features}\n\n"
        "## Technology Stack\n"
        + "\n".join(stack) + "\n\n"
        "## Getting Started\n\n"
        "### Prerequisites\n"
        "- Node.js (v18 or higher)\n"
        "- npm or yarn\n\n"
        "### Installation\n"
        "```bash\nnpm install\n```\n\n"
        "### Development\n"
        "```bash\nnpm run dev\n```\n\n"
        "### Build\n"
        "```bash\nnpm run build\n```\n\n"
        "### Testing\n"
        "```bash\nnpm test\n```\n\n"
        "## Generated by GenAI Development Platform\n"
        "This project was automatically generated using AI-powered code generation.\n"
    )


def env_example(requirements: Requirements) -> str:
    env_vars = ["NODE_ENV=development", "PORT=3000"]
    if requirements.database:
        env_vars.append("DATABASE_URL=your_database_url_here")
    if requirements.authentication:
        env_vars.append("JWT_SECRET=your_jwt_secret_here")
    if "Email Notifications" in requirements.features:
        env_vars += [
            "SMTP_HOST=your_smtp_host",
            "SMTP_PORT=587",
            "SMTP_USER=your_email",
            "SMTP_PASS=your_password",
        ]
    return "\n".join(env_vars)


TSCONFIG = """{
  "compilerOptions": {
    "target": "ES2020",
    "lib": ["ES2020", "DOM", "DOM.Iterable"],
    "allowJs": true,
    "skipLibCheck": true,
    "esModuleInterop": true,
    "allowSyntheticDefaultImports": true,
    "strict": true,
    "forceConsistentCasingInFileNames": true,
    "moduleResolution": "node",
    "resolveJsonModule": true,
    "isolatedModules": true,
    "noEmit": true,
    "jsx": "react-jsx"
  },
  "include": [
    "src"
  ]
}"""


def essential_files(requirements: Requirements) -> List[GeneratedFile]:
    files = [
        GeneratedFile("package.json", package_json(requirements), "config"),
        GeneratedFile("README.md", readme(requirements), "documentation"),
        GeneratedFile(".env.example", env_example(requirements), "config"),
    ]
    if is_ui_project(requirements):
        files.append(GeneratedFile("tsconfig.json", TSCONFIG, "config"))
    return files


def fallback_structure(requirements: Requirements) -> ProjectStructure:
    return ProjectStructure(
        architecture=f"Template-based {requirements.type} application",
        files=essential_files(requirements),
        dependencies=list(base_dependencies(requirements)),
        scripts=default_scripts(requirements),
        environment={
            "NODE_ENV": "Environment (development/production)",
            "PORT": "Application port number",
        },
        source="fallback",
    )
