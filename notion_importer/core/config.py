"""
Configuracion central del importador.
Lee variables de entorno (y .env si existe) con valores por defecto.

No hay una instancia global: el CLI construye Settings y la pasa hacia abajo.
"""
from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Configuracion del importador.

    - NOTION_API_KEY vacio: el CLI lo pide de forma interactiva.
    - NOTION_MAX_RETRIES aplica solo a reintentos de transporte (429/5xx).
    """

    # Aplicacion
    APP_NAME: str = Field(default="Notion Table Importer")

    # Notion
    NOTION_API_KEY: str = Field(default="")
    NOTION_VERSION: str = Field(default="2022-06-28")
    NOTION_BASE_URL: str = Field(default="https://api.notion.com/v1")
    NOTION_PAGE_SIZE: int = Field(default=100, ge=1, le=100)
    NOTION_TIMEOUT_S: int = Field(default=30, ge=1)
    NOTION_MAX_RETRIES: int = Field(default=3, ge=0)

    # Fuente MongoDB
    MONGO_URI: str = Field(default="mongodb://localhost:27017")

    # Progreso
    PROGRESS_EVERY: int = Field(default=50, ge=1)

    # Logging
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FILE: str = Field(default="logs/importer.log")

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"
