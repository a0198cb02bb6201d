class StoreTreeError(Exception):
    """Super-type of all errors raised by storetree code"""

    def __init__(self, msg: str, code_space: str = "GEN", code_number: int = None, is_recoverable: bool = False):
        self.internal_code = "" if code_number is None else f"{code_space}-{code_number}"
        super().__init__(f"{msg} [{self.internal_code}]")
        self.message = msg
        self.is_recoverable = is_recoverable


class ConfigError(StoreTreeError):

    def __init__(self, key: str, reason: str, code_number: int = None):
        super().__init__(f"Invalid configuration value for [{key}]: {reason}", "CONFIG", code_number)
