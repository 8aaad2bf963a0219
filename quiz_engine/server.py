"""
Quiz Engine Server

FastAPI app que expoe o router do engine:
- Autoria (validacao e gravacao de quizzes)
- Ciclo de vida de tentativas (inicio, respostas, tick, envio)
- Resultados e estatisticas
"""

from fastapi import FastAPI

from .config import configure_logging, load_settings
from .router import router


def create_app() -> FastAPI:
    settings = load_settings()
    configure_logging(settings)

    app = FastAPI(
        title="Quiz Engine",
        description="Validacao, correcao e tentativas cronometradas de quizzes",
        version="1.0.0",
    )
    app.include_router(router)

    @app.get("/health")
    async def health():
        return {"status": "ok", "environment": settings.environment}

    return app


app = create_app()
