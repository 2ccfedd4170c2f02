import logging
import re
from typing import List

from projectgen.core.errors import BuildError
from projectgen.core.models import GeneratedFile
from projectgen.core.requirements import Requirements

logger = logging.getLogger(__name__)

_TRAILING_WS_RE = re.compile(r"[ \t]+$", re.MULTILINE)
_CRLF_RE = re.compile(r"\r+\n")


def normalize_content(content: str) -> str:
    """
    CRLF -> LF, remove espaços/tabs no fim das linhas e deixa exatamente um
    '\\n' final (conteúdo vazio continua vazio).

    Repete até estabilizar: remover espaço ou acrescentar o '\\n' final pode
    expor um novo "\\r\\n".
    """
    text = content or ""
    while True:
        cleaned = _TRAILING_WS_RE.sub("", _CRLF_RE.sub("\n", text))
        if cleaned:
            cleaned = cleaned.rstrip("\n") + "\n"
        if cleaned == text:
            return text
        text = cleaned


def _react_boilerplate(requirements: Requirements) -> List[GeneratedFile]:
    vite_config = (
        "import { defineConfig } from 'vite'\n"
        "import react from '@vitejs/plugin-react'\n\n"
        "export default defineConfig({\n"
        "  plugins: [react()],\n"
        "  server: {\n"
        "    port: 3000,\n"
        "    host: true\n"
        "  },\n"
        "  build: {\n"
        "    outDir: 'dist',\n"
        "    sourcemap: true\n"
        "  }\n"
        "})\n"
    )
    main_tsx = (
        "import React from 'react'\n"
        "import ReactDOM from 'react-dom/client'\n"
        "import App from './App'\n"
        "import './index.css'\n\n"
        "ReactDOM.createRoot(document.getElementById('root')!).render(\n"
        "  <React.StrictMode>\n"
        "    <App />\n"
        "  </React.StrictMode>,\n"
        ")\n"
    )
    app_tsx = (
        "import React from 'react'\n"
        "import './App.css'\n\n"
        "function App() {\n"
        "  return (\n"
        "    <div className=\"App\">\n"
        "      <header className=\"App-header\">\n"
        f"        <h1>{requirements.name}</h1>\n"
        f"        <p>{requirements.description}</p>\n"
        "      </header>\n"
        "      <main>\n"
        "        {/* Generated components will be added here */}\n"
        "      </main>\n"
        "    </div>\n"
        "  )\n"
        "}\n\n"
        "export default App\n"
    )
    index_css = (
        ":root {\n"
        "  font-family: Inter, system-ui, Avenir, Helvetica, Arial, sans-serif;\n"
        "  line-height: 1.5;\n"
        "  font-weight: 400;\n"
        "  color-scheme: light dark;\n"
        "  color: rgba(255, 255, 255, 0.87);\n"
        "  background-color: #242424;\n"
        "}\n\n"
        "body {\n"
        "  margin: 0;\n"
        "  display: flex;\n"
        "  place-items: center;\n"
        "  min-width: 320px;\n"
        "  min-height: 100vh;\n"
        "}\n\n"
        "#root {\n"
        "  max-width: 1280px;\n"
        "  margin: 0 auto;\n"
        "  padding: 2rem;\n"
        "  text-align: center;\n"
        "}\n"
    )
    return [
        GeneratedFile("vite.config.ts", vite_config, "config"),
        GeneratedFile("src/main.tsx", main_tsx, "component"),
        GeneratedFile("src/App.tsx", app_tsx, "component"),
        GeneratedFile("src/index.css", index_css, "component"),
    ]


def _database_boilerplate(database: str) -> List[GeneratedFile]:
    if database == "postgresql":
        content = (
            "import { Pool } from 'pg'\n\n"
            "const pool = new Pool({\n"
            "  connectionString: process.env.DATABASE_URL,\n"
            "  ssl: process.env.NODE_ENV === 'production' ? { rejectUnauthorized: false } : false\n"
            "})\n\n"
            "export default pool\n"
        )
    elif database == "mongodb":
        content = (
            "import { MongoClient } from 'mongodb'\n\n"
            "const client = new MongoClient(process.env.DATABASE_URL!)\n\n"
            "export default client\n"
        )
    else:
        return []
    return [GeneratedFile("src/config/database.ts", content, "config")]


def _node_boilerplate(requirements: Requirements) -> List[GeneratedFile]:
    server = (
        "import express from 'express'\n"
        "import cors from 'cors'\n"
        "import helmet from 'helmet'\n"
        "import dotenv from 'dotenv'\n\n"
        "dotenv.config()\n\n"
        "const app = express()\n"
        "const PORT = process.env.PORT || 3000\n\n"
        "// Middleware\n"
        "app.use(helmet())\n"
        "app.use(cors())\n"
        "app.use(express.json())\n\n"
        "// Routes\n"
        "app.get('/', (req, res) => {\n"
        "  res.json({\n"
        f"    message: {_js_string('Welcome to ' + requirements.name + ' API')},\n"
        f"    description: {_js_string(requirements.description)}\n"
        "  })\n"
        "})\n\n"
        "app.listen(PORT, () => {\n"
        "  console.log(`Server running on port ${PORT}`)\n"
        "})\n"
    )
    files = [GeneratedFile("src/index.ts", server, "service")]
    if requirements.database:
        files += _database_boilerplate(requirements.database)
    return files


def _js_string(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace("'", "\\'").replace("\n", "\\n")
    return f"'{escaped}'"


def _next_boilerplate(requirements: Requirements) -> List[GeneratedFile]:
    return [
        GeneratedFile(
            "next.config.js",
            "/** @type {import('next').NextConfig} */\n"
            "const nextConfig = {\n"
            "  experimental: {\n"
            "    appDir: true,\n"
            "  },\n"
            "}\n\n"
            "module.exports = nextConfig\n",
            "config",
        ),
        GeneratedFile(
            "app/layout.tsx",
            "export default function RootLayout({\n"
            "  children,\n"
            "}: {\n"
            "  children: React.ReactNode\n"
            "}) {\n"
            "  return (\n"
            "    <html lang=\"en\">\n"
            "      <body>{children}</body>\n"
            "    </html>\n"
            "  )\n"
            "}\n",
            "component",
        ),
        GeneratedFile(
            "app/page.tsx",
            "export default function Home() {\n"
            "  return (\n"
            "    <main>\n"
            f"      <h1>{requirements.name}</h1>\n"
            f"      <p>{requirements.description}</p>\n"
            "    </main>\n"
            "  )\n"
            "}\n",
            "component",
        ),
    ]


def add_framework_boilerplate(files: List[GeneratedFile], requirements: Requirements) -> List[GeneratedFile]:
    out = list(files)
    framework = requirements.framework
    if "react" in framework:
        out += _react_boilerplate(requirements)
    if "node" in framework:
        out += _node_boilerplate(requirements)
    if "next" in framework:
        out += _next_boilerplate(requirements)
    return out


CI_WORKFLOW = """name: CI

on:
  push:
    branches: [ main, develop ]
  pull_request:
    branches: [ main ]

jobs:
  test:
    runs-on: ubuntu-latest

    strategy:
      matrix:
        node-version: [18.x, 20.x]

    steps:
    - uses: actions/checkout@v3

    - name: Use Node.js ${{ matrix.node-version }}
      uses: actions/setup-node@v3
      with:
        node-version: ${{ matrix.node-version }}
        cache: 'npm'

    - run: npm ci
    - run: npm run build --if-present
    - run: npm test
    - run: npm run lint

  security:
    runs-on: ubuntu-latest
    steps:
    - uses: actions/checkout@v3
    - run: npm audit --audit-level high
"""

VERCEL_CONFIG = """{
  "version": 2,
  "builds": [
    {
      "src": "package.json",
      "use": "@vercel/node"
    }
  ]
}
"""

DOCKER_DEPLOY_WORKFLOW = """name: Deploy

on:
  push:
    branches: [ main ]

jobs:
  deploy:
    runs-on: ubuntu-latest
    steps:
    - uses: actions/checkout@v3

    - name: Build and push Docker image
      uses: docker/build-push-action@v3
      with:
        context: .
        push: true
        tags: app:latest
"""


def add_ci_config(files: List[GeneratedFile], requirements: Requirements) -> List[GeneratedFile]:
    out = list(files)
    out.append(GeneratedFile(".github/workflows/ci.yml", CI_WORKFLOW, "config"))
    if requirements.deployment == "vercel":
        out.append(GeneratedFile("vercel.json", VERCEL_CONFIG, "config"))
    elif requirements.deployment == "docker":
        out.append(GeneratedFile(".github/workflows/deploy.yml", DOCKER_DEPLOY_WORKFLOW, "config"))
    return out


DOCKERIGNORE = """node_modules
npm-debug.log
.git
.gitignore
README.md
.env
.env.local
.env.development
.env.test
.env.production
.nyc_output
coverage
.docker
"""

_DB_SERVICES = {
    "postgresql": (
        "  db:\n"
        "    image: postgres:15\n"
        "    environment:\n"
        "      POSTGRES_DB: app\n"
        "      POSTGRES_USER: user\n"
        "      POSTGRES_PASSWORD: password\n"
        "    ports:\n"
        "      - \"5432:5432\"\n"
        "    volumes:\n"
        "      - postgres_data:/var/lib/postgresql/data\n\n"
        "volumes:\n"
        "  postgres_data:\n"
    ),
    "mongodb": (
        "  db:\n"
        "    image: mongo:7\n"
        "    ports:\n"
        "      - \"27017:27017\"\n"
        "    volumes:\n"
        "      - mongo_data:/data/db\n\n"
        "volumes:\n"
        "  mongo_data:\n"
    ),
}


def _dockerfile(requirements: Requirements) -> str:
    frontend = requirements.type == "frontend"
    lines = [
        "FROM node:18-alpine",
        "",
        "WORKDIR /app",
        "",
        "COPY package*.json ./",
        "RUN npm ci --only=production",
        "",
        "COPY . .",
        "",
    ]
    if frontend:
        lines += ["RUN npm run build", ""]
    lines += ["EXPOSE 3000", ""]
    lines.append('CMD ["npm", "run", "preview"]' if frontend else 'CMD ["npm", "start"]')
    return "\n".join(lines) + "\n"


def _compose(requirements: Requirements) -> str:
    db_service = _DB_SERVICES.get(requirements.database or "")
    compose = (
        "version: '3.8'\n\n"
        "services:\n"
        "  app:\n"
        "    build: .\n"
        "    ports:\n"
        "      - \"3000:3000\"\n"
        "    environment:\n"
        "      - NODE_ENV=production\n"
    )
    if db_service:
        compose += "    depends_on:\n      - db\n\n" + db_service
    return compose


def add_docker_config(files: List[GeneratedFile], requirements: Requirements) -> List[GeneratedFile]:
    return list(files) + [
        GeneratedFile("Dockerfile", _dockerfile(requirements), "config"),
        GeneratedFile("docker-compose.yml", _compose(requirements), "config"),
        GeneratedFile(".dockerignore", DOCKERIGNORE, "config"),
    ]


def normalize_files(files: List[GeneratedFile]) -> List[GeneratedFile]:
    return [f.with_content(normalize_content(f.content)) for f in files]


def build_project(files: List[GeneratedFile], requirements: Requirements) -> List[GeneratedFile]:
    """
    Junta os arquivos gerados com o boilerplate do framework, CI/CD e Docker.
    Nunca remove arquivos; só acrescenta e normaliza o texto no final.
    """
    try:
        out = add_framework_boilerplate(files, requirements)
        out = add_ci_config(out, requirements)
        out = add_docker_config(out, requirements)
        out = normalize_files(out)
    except Exception as e:
        logger.exception("Falha ao montar o projeto '%s'", requirements.name)
        raise BuildError("Failed to build project") from e
    logger.info("Projeto montado com %d arquivos", len(out))
    return out


ESLINT_CONFIG = """{
  "extends": [
    "eslint:recommended",
    "@typescript-eslint/recommended",
    "plugin:security/recommended"
  ],
  "plugins": ["security"],
  "rules": {
    "security/detect-object-injection": "error",
    "security/detect-non-literal-regexp": "error",
    "security/detect-unsafe-regex": "error"
  }
}
"""

GITIGNORE = """node_modules/
.env
.env.local
.env.development
.env.test
.env.production
dist/
build/
coverage/
.nyc_output/
*.log
.DS_Store
.vscode/
.idea/
*.tgz
*.tar.gz
"""


def security_files() -> List[GeneratedFile]:
    return [
        GeneratedFile(".eslintrc.json", ESLINT_CONFIG, "config"),
        GeneratedFile(".gitignore", GITIGNORE, "config"),
    ]
