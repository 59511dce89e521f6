import platform
import time
from typing import Any, Dict

from golfbrain.config import get_settings
from golfbrain.metrics import BUILD_VERSION, GIT_SHA


async def health() -> Dict[str, Any]:
    settings = get_settings()
    return {
        "status": "ok",
        "version": BUILD_VERSION,
        "git": GIT_SHA,
        "ts": time.time(),
        "env": {
            "store_backend": settings.store_backend,
            "require_api_key": settings.require_api_key,
        },
        "runtime": {
            "python": platform.python_version(),
        },
    }
