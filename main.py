# main.py: ponto de entrada do servidor de geração de projetos

import logging

from projectgen.core.config import Settings
from projectgen.core.openai_client import OpenAIClient
from projectgen.web import create_app

settings = Settings.from_env()

logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
)
# SDKs HTTP fazem muito barulho em DEBUG
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("openai").setLevel(logging.WARNING)

client = OpenAIClient.from_settings(settings) if settings.openai_api_key else None
app = create_app(settings, client=client)


if __name__ == "__main__":
    app.run(host=settings.host, port=settings.port, debug=settings.debug, threaded=True)
