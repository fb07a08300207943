"""
Configuration de l'application via pydantic-settings.

Deux niveaux :
- Settings : parametres d'execution charges depuis les variables
  d'environnement avec le prefixe CINECAT_ (et un fichier .env optionnel).
- UserConfig : preferences utilisateur (cle API, repertoires de scan,
  scan automatique) stockees en JSON dans le repertoire de configuration.

La cle API est optionnelle a la construction : ConfigMissing n'est leve
qu'au moment ou un client TMDB est reellement necessaire.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional

from platformdirs import user_config_dir, user_data_dir
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cinecat.core.errors import ConfigInvalid, ConfigMissing

APP_NAME = "cinecat"

# Trouver le fichier .env a la racine du projet (parent de cinecat/)
_PROJECT_ROOT = Path(__file__).parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Parametres de l'application avec support des variables d'environnement.

    Tous les parametres peuvent etre surcharges via des variables d'environnement
    avec le prefixe CINECAT_.
    Exemple : CINECAT_CONCURRENCY_LIMIT=4

    Les chemins sont automatiquement etendus (~ -> repertoire home).
    """

    model_config = SettingsConfigDict(
        env_prefix="CINECAT_",
        env_file=_ENV_FILE if _ENV_FILE.exists() else ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Repertoires par utilisateur (avec expansion ~)
    config_dir: Path = Field(default_factory=lambda: Path(user_config_dir(APP_NAME)))
    data_dir: Path = Field(default_factory=lambda: Path(user_data_dir(APP_NAME)))

    # Surcharge de la cle du fichier de configuration (OPTIONNELLE)
    api_key: Optional[str] = Field(default=None)

    # Synchronisation et reseau
    concurrency_limit: int = Field(default=10, ge=1)
    request_timeout: float = Field(default=30.0, gt=0)
    api_max_attempts: int = Field(default=3, ge=1)
    language: str = Field(default="en-US")

    # Logging (fichier + stderr, rotation 10MB, 5 fichiers de retention)
    log_level: str = Field(default="INFO")
    log_file: Path = Field(default=Path("~/.local/state/cinecat/cinecat.log"))
    log_rotation_size: str = Field(default="10 MB")
    log_retention_count: int = Field(default=5)

    @field_validator("config_dir", "data_dir", "log_file", mode="before")
    @classmethod
    def expand_path(cls, v: str | Path) -> Path:
        """Etend ~ vers le repertoire home dans les chemins."""
        return Path(v).expanduser()

    @property
    def config_file(self) -> Path:
        """Fichier JSON des preferences utilisateur."""
        return self.config_dir / "config.json"

    @property
    def catalog_file(self) -> Path:
        """Fichier JSON du catalogue."""
        return self.data_dir / "catalog.json"

    @property
    def poster_dir(self) -> Path:
        """Repertoire du cache d'affiches."""
        return self.data_dir / "posters"

    @property
    def api_cache_dir(self) -> Path:
        """Repertoire du cache des recherches TMDB."""
        return self.data_dir / "cache" / "api"


class UserConfig(BaseModel):
    """
    Preferences utilisateur persistees dans config.json.

    Les cles sur disque sont en camelCase (apiKey, scanDirectories,
    autoScanOnStartup) ; les noms Python restent en snake_case.
    """

    model_config = ConfigDict(populate_by_name=True)

    api_key: str = Field(default="", alias="apiKey")
    scan_directories: list[Path] = Field(default_factory=list, alias="scanDirectories")
    auto_scan_on_startup: bool = Field(default=True, alias="autoScanOnStartup")

    @field_validator("scan_directories", mode="after")
    @classmethod
    def absolute_directories(cls, v: list[Path]) -> list[Path]:
        """Rend les repertoires absolus (l'ordre et les doublons sont conserves)."""
        return [Path(d).expanduser().absolute() for d in v]


def load_user_config(path: Path) -> UserConfig:
    """
    Charge les preferences utilisateur.

    Un fichier absent ou vide retourne les valeurs par defaut.

    Raises:
        ConfigInvalid: Si le fichier existe mais n'est pas un JSON valide
    """
    if not path.exists():
        return UserConfig()

    content = path.read_text(encoding="utf-8")
    if not content.strip():
        return UserConfig()

    try:
        return UserConfig.model_validate_json(content)
    except ValidationError as e:
        raise ConfigInvalid(path, str(e)) from e


def save_user_config(config: UserConfig, path: Path) -> None:
    """Ecrit les preferences utilisateur (ecriture atomique, JSON indente)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = config.model_dump(mode="json", by_alias=True)

    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".config-", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def resolve_api_key(settings: Settings, user_config: UserConfig) -> str:
    """
    Determine la cle API TMDB a utiliser.

    La variable CINECAT_API_KEY est prioritaire sur le fichier de configuration.

    Raises:
        ConfigMissing: Si aucune cle n'est configuree
    """
    key = (settings.api_key or user_config.api_key or "").strip()
    if not key:
        raise ConfigMissing()
    return key
