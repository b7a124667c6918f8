import secrets
import time


def now_ts() -> int:
    return int(time.time())


def gen_reset_token() -> str:
    return secrets.token_hex(32)
