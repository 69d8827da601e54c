from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    APP_NAME: str = "POS Inventory"
    DATABASE_URL: str = "sqlite:///./pos.db"
    LOG_LEVEL: str = "INFO"

    # Products with stock below this count as low stock on the dashboard
    LOW_STOCK_THRESHOLD: int = 10

    # Categories inserted when the categories table is empty (comma-separated)
    SEED_CATEGORIES: str = "Beverages,Snacks,Electronics,Clothing,Home"

    # Client side: terminal -> API
    API_BASE_URL: str = "http://localhost:8000"
    HTTP_TIMEOUT: float = 10.0
    OFFLINE_STORE_PATH: str = "./pos_client.json"
    CONNECTIVITY_POLL_INTERVAL: float = 5.0

    model_config = {"env_file": ".env"}


settings = Settings()
