# =============================================================================
# CONFIGURACAO DO QUIZ ENGINE
# =============================================================================
# Valores lidos do ambiente; defaults reproduzem o comportamento de referencia
# (aviso com 5 min, critico com 1 min, aviso de expiracao por 2 s).
# =============================================================================

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _getenv_int(name: str, default: int) -> int:
    raw = os.getenv(name, str(default)).strip()
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} deve ser inteiro (recebido {raw!r})") from None
    if value < 0:
        raise ValueError(f"{name} nao pode ser negativo (recebido {value})")
    return value


def _getenv_float(name: str, default: float) -> float:
    raw = os.getenv(name, str(default)).strip()
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} deve ser numerico (recebido {raw!r})") from None
    if value <= 0:
        raise ValueError(f"{name} deve ser positivo (recebido {value})")
    return value


@dataclass(frozen=True)
class EngineSettings:
    environment: str
    log_level: str
    warning_seconds: int
    critical_seconds: int
    expiry_notice_seconds: float
    tick_interval: float

    @property
    def is_test(self) -> bool:
        return self.environment == "test"


def load_settings() -> EngineSettings:
    """Carrega configuracoes das variaveis de ambiente."""
    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    if log_level not in _LOG_LEVELS:
        raise ValueError(f"LOG_LEVEL deve ser um de {'|'.join(_LOG_LEVELS)} (recebido {log_level!r})")

    warning_seconds = _getenv_int("QUIZ_WARNING_SECONDS", 300)
    critical_seconds = _getenv_int("QUIZ_CRITICAL_SECONDS", 60)
    if critical_seconds > warning_seconds:
        raise ValueError("QUIZ_CRITICAL_SECONDS nao pode ser maior que QUIZ_WARNING_SECONDS")

    return EngineSettings(
        environment=os.getenv("ENVIRONMENT", "development").strip().lower(),
        log_level=log_level,
        warning_seconds=warning_seconds,
        critical_seconds=critical_seconds,
        expiry_notice_seconds=_getenv_float("QUIZ_EXPIRY_NOTICE_SECONDS", 2.0),
        tick_interval=_getenv_float("QUIZ_TICK_INTERVAL", 1.0),
    )


def configure_logging(settings: EngineSettings | None = None) -> None:
    """Configura o logging raiz conforme LOG_LEVEL."""
    settings = settings or load_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logging.getLogger("quiz_engine").setLevel(settings.log_level)
