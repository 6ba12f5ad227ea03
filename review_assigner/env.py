from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvSettings(BaseSettings):
    """
    Настройки окружения сервиса (переменные окружения и .env)
    """
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    debug: bool = False
    secret_key: str = "dev-insecure-secret-key"
    allowed_hosts: list[str] = ["*"]

    # Database
    db_engine: str = "sqlite"
    db_name: str = "db.sqlite3"
    db_host: str = "localhost"
    db_port: int = 5432
    db_user: str = "reassv"
    db_password: str = "reassv"
    # Ограничение ожидания блокировок строк (только PostgreSQL)
    db_statement_timeout_ms: int = 5000

    log_level: str = "INFO"

    def database(self, base_dir) -> dict:
        if self.db_engine == "postgresql":
            return {
                "ENGINE": "django.db.backends.postgresql",
                "NAME": self.db_name,
                "HOST": self.db_host,
                "PORT": self.db_port,
                "USER": self.db_user,
                "PASSWORD": self.db_password,
                "OPTIONS": {
                    "options": f"-c statement_timeout={self.db_statement_timeout_ms}",
                },
            }
        return {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": base_dir / self.db_name,
        }


env = EnvSettings()
