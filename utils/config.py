"""
Configuration management.
"""

import os
from dataclasses import dataclass, field


@dataclass
class Config:
    """
    Application configuration.

    Loads from environment variables with sensible defaults.
    """

    # Server
    host: str = field(default_factory=lambda: os.getenv("HOST", "127.0.0.1"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "8000")))
    debug: bool = field(default_factory=lambda: os.getenv("DEBUG", "false").lower() == "true")
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())

    # Reports
    report_timeout: float = field(
        default_factory=lambda: float(os.getenv("REPORT_TIMEOUT", "30"))
    )
    locale: str = field(default_factory=lambda: os.getenv("REPORT_LOCALE", "fr-FR"))
    currency: str = field(default_factory=lambda: os.getenv("REPORT_CURRENCY", "MRU"))
    company_name: str = field(
        default_factory=lambda: os.getenv("REPORT_COMPANY", "BuildTrack")
    )
    output_dir: str = field(default_factory=lambda: os.getenv("REPORT_OUTPUT_DIR", "./reports"))

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.report_timeout <= 0:
            raise ValueError("report_timeout must be positive")

    @classmethod
    def load(cls) -> "Config":
        """Load configuration from environment."""
        return cls()

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return {
            "host": self.host,
            "port": self.port,
            "debug": self.debug,
            "log_level": self.log_level,
            "report_timeout": self.report_timeout,
            "locale": self.locale,
            "currency": self.currency,
            "company_name": self.company_name,
            "output_dir": self.output_dir,
        }
