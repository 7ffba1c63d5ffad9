from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    PROJECT_NAME: str = "Asset Catalog"

    MONGODB_URL: str
    DATABASE_NAME: str = "asset_catalog"

    # Ingestion batches run inside a multi-document transaction.
    # Standalone servers (no replica set) must disable this.
    MONGODB_USE_TRANSACTIONS: bool = True

    # Retries for an identity upsert that lost a race on the unique index
    INGEST_UPSERT_RETRIES: int = 3

    # Governance
    ORG_LICENSE_POLICY_NAME: str = "Organization License Policy"

    # Scripts
    LOG_LEVEL: str = "INFO"

    class Config:
        case_sensitive = True
        env_file = ".env"


settings = Settings()
