from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {
        'extra': 'ignore',
        'env_file': '.env',
        'env_file_encoding': 'utf-8',
        'frozen': True,
    }

    HEALTH_SERVER_HOST: str = '0.0.0.0'
    HEALTH_SERVER_PORT: int = 8080

    SERVICE_NAME: str = 'healthserver'
    SERVICE_VERSION: str = '0.1.0'
    LOG_LEVEL: str = 'INFO'
    LOG_FORMAT: str = 'text'


settings = Settings()
