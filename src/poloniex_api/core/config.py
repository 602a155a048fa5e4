"""Configuration containers for the Poloniex trading client."""

from __future__ import annotations

import math
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from ..constants import DEFAULT_REQUEST_TIMEOUT, TRADING_API_URL
from ..exceptions import ConfigurationError
from ..types import Credentials

ENV_API_KEY = "POLONIEX_API_KEY"
ENV_API_SECRET = "POLONIEX_API_SECRET"
ENV_API_URL = "POLONIEX_API_URL"
ENV_REQUEST_TIMEOUT = "POLONIEX_REQUEST_TIMEOUT"


@dataclass(frozen=True)
class TradingClientConfig:
    """Aggregated configuration for the trading client."""

    api_key: str
    secret: str = field(repr=False)
    base_url: str | None = None
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT

    def __post_init__(self) -> None:
        if isinstance(self.request_timeout, bool) or not isinstance(
            self.request_timeout, int | float
        ):
            raise ConfigurationError(
                "request_timeout must be a number of seconds",
                details={"request_timeout": self.request_timeout},
            )
        if not math.isfinite(self.request_timeout) or self.request_timeout <= 0:
            raise ConfigurationError(
                "request_timeout must be a positive finite number",
                details={"request_timeout": self.request_timeout},
            )
        Credentials(api_key=self.api_key, secret=self.secret)

    @property
    def credentials(self) -> Credentials:
        return Credentials(api_key=self.api_key, secret=self.secret)

    def resolved_url(self) -> str:
        """Return the trading endpoint, defaulting to the production URL."""

        if self.base_url:
            return self.base_url.rstrip("/")
        return TRADING_API_URL

    @classmethod
    def from_env(cls, dotenv_path: str | Path | None = None) -> TradingClientConfig:
        """Build a config from environment variables, loading a ``.env`` file first.

        Reads ``POLONIEX_API_KEY`` and ``POLONIEX_API_SECRET`` plus the optional
        ``POLONIEX_API_URL`` and ``POLONIEX_REQUEST_TIMEOUT``. Variables already
        set in the environment take precedence over the ``.env`` file.
        """

        load_dotenv(dotenv_path=dotenv_path)

        api_key = os.getenv(ENV_API_KEY)
        secret = os.getenv(ENV_API_SECRET)
        missing = [
            name for name, value in ((ENV_API_KEY, api_key), (ENV_API_SECRET, secret)) if not value
        ]
        if missing:
            raise ConfigurationError(
                f"Missing environment variables: {', '.join(missing)}",
                details={"missing": missing},
            )

        raw_timeout = os.getenv(ENV_REQUEST_TIMEOUT)
        request_timeout = DEFAULT_REQUEST_TIMEOUT
        if raw_timeout:
            try:
                request_timeout = float(raw_timeout)
            except ValueError as exc:
                raise ConfigurationError(
                    f"{ENV_REQUEST_TIMEOUT} must be a number",
                    details={ENV_REQUEST_TIMEOUT: raw_timeout},
                ) from exc

        return cls(
            api_key=api_key,  # type: ignore[arg-type]
            secret=secret,  # type: ignore[arg-type]
            base_url=os.getenv(ENV_API_URL) or None,
            request_timeout=request_timeout,
        )
