"""Application configuration via environment variables."""

from pydantic_settings import BaseSettings

from models import DeploymentMode


class Settings(BaseSettings):
    # Plex.tv directory
    plex_tv_url: str = "https://plex.tv/api/v2"
    plex_auth_url: str = "https://app.plex.tv/auth"

    # Which resolved address the proxy talks to (decided once per process)
    deployment_mode: DeploymentMode = DeploymentMode.REMOTE

    # Client descriptors sent to the media server
    product: str = "Plexman"
    version: str = "1.0.0"
    platform: str = "Web"
    platform_version: str = "1.0.0"
    device: str = "Proxy"
    device_name: str = "Plexman Server Proxy"
    default_client_id: str = "PlexmanProxy"

    # Upstream calls
    upstream_timeout: float = 10.0
    pin_retry_attempts: int = 1
    pin_retry_delay: float = 2.0

    # Session cookies
    session_max_age: int = 60 * 60 * 24 * 30  # 30 days
    pairing_max_age: int = 60 * 10
    invalidate_on_auth_rejection: bool = False

    # Redirect targets
    login_path: str = "/login"
    home_path: str = "/"

    # Server
    host: str = "0.0.0.0"
    port: int = 8787
    log_level: str = "INFO"

    model_config = {"env_prefix": "", "env_file": ".env"}

    @property
    def product_headers(self) -> dict[str, str]:
        return {
            "X-Plex-Product": self.product,
            "X-Plex-Version": self.version,
            "X-Plex-Platform": self.platform,
            "X-Plex-Platform-Version": self.platform_version,
            "X-Plex-Device": self.device,
            "X-Plex-Device-Name": self.device_name,
        }


settings = Settings()
