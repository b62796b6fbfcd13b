from decouple import config, Csv

class Settings:
    # Database Configuration
    DATABASE_URL: str = config("DATABASE_URL", default="sqlite:///./catalog.db")
    DB_POOL_SIZE: int = config("DB_POOL_SIZE", default=5, cast=int)
    DB_ECHO: bool = config("DB_ECHO", default=False, cast=bool)

    # Tenant Configuration
    DEFAULT_ORG_MAIL: str = config("DEFAULT_ORG_MAIL", default="")
    TENANT_HEADER: str = config("TENANT_HEADER", default="X-Org-Mail")

    # Storage Configuration
    UPLOAD_DIR: str = config("UPLOAD_DIR", default="uploads")
    UPLOAD_URL_PREFIX: str = config("UPLOAD_URL_PREFIX", default="/uploads")
    MAX_UPLOAD_SIZE: int = config("MAX_UPLOAD_SIZE", default=10 * 1024 * 1024, cast=int)

    # CORS Configuration
    CORS_ORIGINS: list = config(
        "CORS_ORIGINS",
        default="http://localhost:3000,http://localhost:5173,http://localhost:5174",
        cast=Csv()
    )

    # Environment
    ENVIRONMENT: str = config("ENVIRONMENT", default="development")
    DEBUG: bool = config("DEBUG", default=True, cast=bool)

    # Logging
    LOG_LEVEL: str = config("LOG_LEVEL", default="INFO")

settings = Settings()
