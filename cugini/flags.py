import os

from dotenv import load_dotenv

# flags are read at import, which may happen before config.settings loads .env
load_dotenv(encoding="utf-8")


def is_enabled(flag: str, default: bool = False) -> bool:
    return os.getenv(flag, str(default)).lower() == "true"


SETTINGS = {
    # progress bar measured against the spendable balance instead of lifetime points
    "use_net_for_goals": is_enabled("USE_NET_FOR_GOALS", True),
    "keepalive_enabled": is_enabled("KEEPALIVE_ENABLED", False),
}
