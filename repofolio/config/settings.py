from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase (required; the process refuses to start without them)
    supabase_url: str = Field(
        min_length=1,
        validation_alias=AliasChoices("supabase_url", "next_public_supabase_url"),
    )
    supabase_anon_key: str = Field(
        min_length=1,
        validation_alias=AliasChoices("supabase_anon_key", "next_public_supabase_anon_key"),
    )
    supabase_service_role_key: str = Field(min_length=1)
    redirect_uri: str = Field(min_length=1)  # where Supabase sends the browser after GitHub OAuth

    # GitHub
    github_api_url: str = "https://api.github.com"
    github_graphql_url: str = "https://api.github.com/graphql"
    github_timeout_seconds: float = 15.0
    github_oauth_scopes: str = "repo,user:email,read:user,read:org"

    # Attachments: Supabase Storage bucket, or S3 when fully configured
    attachments_bucket: str = "project_documents"
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    aws_region: str = "us-east-1"
    s3_bucket_name: Optional[str] = None

    # Rate limiting (slowapi notation)
    auth_rate_limit: str = "20/minute"

    # Access rules
    expert_view_requires_role: bool = False
    allow_self_promotion: bool = False

    # App
    app_name: str = "repofolio-backend"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000"

    @field_validator("supabase_url", "redirect_uri")
    @classmethod
    def must_be_http_url(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError("must be an http(s) URL")
        return value

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def s3_configured(self) -> bool:
        return all([self.aws_access_key_id, self.aws_secret_access_key, self.s3_bucket_name])

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",
        extra="ignore"
    )
