"""
Runtime settings read from the environment (and a .env file, if present).
"""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

CONFIG_DIR = Path.home() / ".config" / "stream-assistant"

DEFAULT_MODEL = 'scira-default'
SELECTED_MODEL_KEY = 'selected-model'

# model id shown to the user -> provider model name
MODELS: dict[str, str] = {
    'scira-default': 'gpt-4o-mini',
    'scira-4o': 'gpt-4o',
    'scira-4.1': 'gpt-4.1',
    'scira-4.1-mini': 'gpt-4.1-mini',
    'scira-o4-mini': 'o4-mini',
}

SEARCH_GROUPS: dict[str, str] = {
    'web': 'Search across the entire internet',
    'academic': 'Search academic papers',
    'youtube': 'Search YouTube videos',
    'reddit': 'Search Reddit posts',
    'analysis': 'Code, stock and currency stuff',
    'chat': 'Talk to the model directly.',
    'extreme': 'Deep research with multiple sources and analysis',
    'buddy': 'Your personal memory companion',
}
DEFAULT_GROUP = 'web'


def _local_timezone() -> str:
    tz = os.getenv('TZ')
    if tz:
        return tz
    try:
        link = os.readlink('/etc/localtime')
    except OSError:
        return 'UTC'
    marker = 'zoneinfo/'
    return link.split(marker, 1)[1] if marker in link else 'UTC'


@dataclass(frozen=True)
class Settings:
    store_path: Path = CONFIG_DIR / "preferences.json"
    log_dir: Path = CONFIG_DIR / "logs"
    log_level: str = 'INFO'
    suggestion_model: str = 'gpt-4o-mini'
    user_id: Optional[str] = None
    timezone: str = 'UTC'
    locale: str = 'en_US'
    scroll_debounce: float = 0.1
    scroll_threshold: float = 100

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            store_path=Path(os.getenv('ASSISTANT_STORE_PATH', str(CONFIG_DIR / "preferences.json"))).expanduser(),
            log_dir=Path(os.getenv('ASSISTANT_LOG_DIR', str(CONFIG_DIR / "logs"))).expanduser(),
            log_level=os.getenv('ASSISTANT_LOG_LEVEL', 'INFO').upper(),
            suggestion_model=os.getenv('ASSISTANT_SUGGESTION_MODEL', 'gpt-4o-mini'),
            user_id=os.getenv('ASSISTANT_USER_ID'),
            timezone=_local_timezone(),
            locale=(os.getenv('LANG') or 'en_US').split('.', 1)[0],
            # Textual scrolls in cells, not pixels
            scroll_threshold=float(os.getenv('ASSISTANT_SCROLL_THRESHOLD', '3')),
        )
