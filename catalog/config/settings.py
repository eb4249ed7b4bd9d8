from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # MongoDB Configuration
    # MONGO_URL wins when set; otherwise the URI is assembled from the parts below
    MONGO_URL: Optional[str] = None
    MONGO_USERNAME: Optional[str] = None
    MONGO_PASSWORD: Optional[str] = None
    MONGO_HOST: str = "localhost"
    MONGO_PORT: int = 27017

    MONGO_DATABASE: str = "liquor_store"
    MONGO_POOL_SIZE: int = 20
    MONGO_TIMEOUT_MS: int = 5000

    # Application Configuration
    APP_NAME: str = "Liquor Store Catalog"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # CORS Configuration
    ALLOWED_ORIGINS: list = ["*"]

    # Timezone Configuration
    TIMEZONE: str = "America/New_York"

    @property
    def mongodb_url(self) -> str:
        if self.MONGO_URL:
            return self.MONGO_URL
        credentials = ""
        if self.MONGO_USERNAME and self.MONGO_PASSWORD:
            credentials = f"{self.MONGO_USERNAME}:{self.MONGO_PASSWORD}@"
        return f"mongodb://{credentials}{self.MONGO_HOST}:{self.MONGO_PORT}/{self.MONGO_DATABASE}?authSource=admin&maxPoolSize={self.MONGO_POOL_SIZE}"


settings = Settings()
