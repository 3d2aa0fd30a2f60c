import logging
from pydantic_settings import BaseSettings, SettingsConfigDict

# Pool families the oracle has to load before it can route
POOL_FAMILIES = [
    'factory',
    'crvUSDFactory',
    'cryptoFactory',
    'twocryptoFactory',
    'tricryptoFactory',
    'stableNgFactory'
]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_ignore_empty=True, extra="ignore"
    )
    RPC_URL: str = "http://localhost:8545"
    ORACLE_URL: str = "http://localhost:4000"
    ORACLE_TIMEOUT: float = 30.0
    CHAIN_ID: int = 1  # Ethereum mainnet
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    LOG_LEVEL: str = "INFO"


settings = Settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
