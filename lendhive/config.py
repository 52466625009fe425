import os
from dataclasses import dataclass, field
from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str = "False") -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


@dataclass
class Settings:
    # Loan policy
    max_loans: int = field(default_factory=lambda: int(os.getenv("LENDHIVE_MAX_LOANS", "5")))
    default_loan_days: int = field(
        default_factory=lambda: int(os.getenv("LENDHIVE_DEFAULT_LOAN_DAYS", "14"))
    )
    max_extension_days: int = field(
        default_factory=lambda: int(os.getenv("LENDHIVE_MAX_EXTENSION_DAYS", "90"))
    )

    # Application
    seed_demo_data: bool = field(default_factory=lambda: _flag("LENDHIVE_SEED_DEMO_DATA"))
    log_level: str = field(default_factory=lambda: os.getenv("LENDHIVE_LOG_LEVEL", "INFO").upper())


settings = Settings()
