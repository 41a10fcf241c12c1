import os
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings using Pydantic Settings.

    Attributes
    ----------
    rpc_base_url : str
        Base Ankr RPC URL (chain path and API key are appended)
    ankr_api_key : str
        Ankr API key; when empty, public chain endpoints are used
    rpc_urls : dict[str, str]
        Explicit RPC URL per chain name, takes precedence over everything else
    ens_chain : str
        Canonical chain used for ENS name resolution
    rpc_timeout : float
        Timeout in seconds for a single RPC request
    max_concurrent_requests : int
        Upper bound of in-flight RPC requests per fan-out
    log_level : str
        Root logging level
    """

    rpc_base_url: str = "https://rpc.ankr.com"
    ankr_api_key: str = ""
    rpc_urls: dict[str, str] = {}

    ens_chain: str = "ethereum"

    rpc_timeout: float = 30.0
    max_concurrent_requests: int = 32

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=os.getenv("ENV_FILE", ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False
    )

    def get_rpc_url(self, network: str, default_url: str, ankr_path: str | None = None) -> str:
        """
        Get RPC URL for specific network.

        Parameters
        ----------
        network : str
            Network name (ethereum, arbitrum, etc.)
        default_url : str
            Public endpoint used when nothing else is configured
        ankr_path : str | None
            Ankr path segment of the network, if Ankr serves it

        Returns
        -------
        str
            Full RPC URL
        """
        if network in self.rpc_urls:
            return self.rpc_urls[network]
        if self.ankr_api_key and ankr_path:
            return f"{self.rpc_base_url}/{ankr_path}/{self.ankr_api_key}"
        return default_url
