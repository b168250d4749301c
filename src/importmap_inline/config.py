"""
Server settings
Loaded from the environment, with an optional .env file in the working directory
"""
import os
from typing import Any, Dict, Optional

from dotenv import load_dotenv


# Module-level settings cache
_config: Optional[Dict[str, Any]] = None


def get_config() -> Dict[str, Any]:
    """
    Load dev server settings.
    Priority: OS Environment > .env > defaults
    """
    global _config
    if _config is not None:
        return _config

    load_dotenv(os.path.join(os.getcwd(), '.env'))

    _config = {
        'host': os.getenv('IMPORTMAP_INLINE_HOST', '127.0.0.1'),
        'port': int(os.getenv('IMPORTMAP_INLINE_PORT', '8080')),
        'served_dir': os.path.abspath(os.getenv('IMPORTMAP_INLINE_SERVED_DIR', '.')),
        'log_level': os.getenv('IMPORTMAP_INLINE_LOG_LEVEL', 'info').lower(),
    }
    return _config


def reset_config():
    """Forget cached settings (used by tests)"""
    global _config
    _config = None
