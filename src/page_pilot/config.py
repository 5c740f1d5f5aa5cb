# config.py
# Runtime settings. Values come from the environment (and a local .env file);
# everything else receives a Settings instance rather than reading os.environ.

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Settings(BaseModel):
    """Viewport, model and timing configuration for a test run."""

    display_width: int = Field(default=1024, gt=0)
    display_height: int = Field(default=768, gt=0)
    computer_model: str = "computer-use-preview"
    verifier_model: str = "gpt-5-nano"
    replay_dir: str = "test_replays"
    headless: bool = False

    # Fixed delays. The settle delay is not adaptive: slow pages may still be
    # rendering when the snapshot is taken.
    settle_delay: float = 0.2
    replay_delay: float = 0.5
    wait_ms: int = 3000

    @classmethod
    def from_env(cls) -> "Settings":
        defaults = cls()
        return cls(
            display_width=int(os.getenv("DISPLAY_WIDTH") or defaults.display_width),
            display_height=int(os.getenv("DISPLAY_HEIGHT") or defaults.display_height),
            computer_model=os.getenv("PAGE_PILOT_COMPUTER_MODEL") or defaults.computer_model,
            verifier_model=os.getenv("PAGE_PILOT_VERIFIER_MODEL") or defaults.verifier_model,
            replay_dir=os.getenv("PAGE_PILOT_REPLAY_DIR") or defaults.replay_dir,
            headless=_env_bool("PAGE_PILOT_HEADLESS", defaults.headless),
        )
