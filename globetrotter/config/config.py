from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    app_name: str = Field(default='GlobeTrotter')
    app_version: str = Field(default='0.1.0')
    app_description: str = Field(
        default='Travel planning service: author trips, arrange day-by-day itineraries, track budgets and share public views'
    )

    app_env: str = Field(default='development')
    host: str = Field(default='127.0.0.1')
    port: int = Field(default=8000)
    debug: bool = Field(default=False)

    allowed_origins: list[str] = Field(default=['http://localhost:3000', 'http://localhost:5173'])
    allowed_methods: list[str] = Field(default=['GET', 'POST', 'PUT', 'PATCH', 'DELETE', 'OPTIONS'])
    allowed_headers: list[str] = Field(default=['*'])

    # Base URL the shareable public trip links point to
    public_base_url: str = Field(default='http://localhost:3000')

    # DynamoDB Configuration
    use_local_dynamodb: bool = Field(default=False, description='Use local DynamoDB instead of AWS')
    dynamodb_endpoint_url: str = Field(default='http://localhost:8003', description='Local DynamoDB endpoint URL')
    trips_table: str = Field(default='trips', description='DynamoDB table holding trip documents')
    itineraries_table: str = Field(default='itineraries', description='DynamoDB table holding itinerary day documents')
    aws_region: str = Field(default='us-east-2', description='AWS region for DynamoDB')
    aws_access_key_id: str | None = Field(default='dummy', description='AWS access key ID')
    aws_secret_access_key: str | None = Field(default='dummy', description='AWS secret access key')

    # Cognito token verification
    cognito_region: str = Field(default='us-east-2')
    cognito_user_pool_id: str | None = Field(default=None)
    cognito_client_id: str | None = Field(default=None)
    jwt_algorithm: str = Field(default='RS256')

    logging_config_file: str = Field(default='logger.yaml')
    log_level: str = Field(default='INFO')
    log_dir: str = Field(default='./logs', description='Directory the file log handler writes to')
    service_name: str = Field(default='globetrotter-api')

    model_config = SettingsConfigDict(
        env_file='../.env', env_file_encoding='utf-8', case_sensitive=False, extra='allow'
    )

    @property
    def collection_tables(self) -> dict[str, str]:
        """Map logical document collections to their DynamoDB table names."""
        return {'trips': self.trips_table, 'itineraries': self.itineraries_table}


settings = Settings()
