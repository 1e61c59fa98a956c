from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    PROJECT_NAME: str = "Coupon Management Service"
    HOST: str = "127.0.0.1"
    PORT: int = 3000
    LOG_LEVEL: str = "INFO"

    # Load WELCOME100 / FESTIVE10 / ELECTRO50 into an empty catalog on startup
    SEED_SAMPLE_COUPONS: bool = True

    # Usage ledger key when neither the request nor the user context names a user
    ANONYMOUS_USER_ID: str = "anonymous"

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
