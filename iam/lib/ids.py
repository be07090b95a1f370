import secrets
import time


def message_id() -> str:
    """8 hex chars, short enough for agents to quote back in ``reply_to``."""
    return secrets.token_hex(4)


def thread_id() -> str:
    """Thread ids sort by creation time and double as backing file stems."""
    return f"thread_{int(time.time() * 1000)}_{secrets.token_hex(3)}"
