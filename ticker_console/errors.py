class DeviceError(Exception):
    """Base class for failures talking to the display device."""


class DeviceTransportError(DeviceError):
    """No usable response: connection failure, timeout or malformed body."""


class DeviceRejectedError(DeviceError):
    def __init__(self, status_code: int, text: str) -> None:
        super().__init__(text)
        self.status_code = status_code
        self.text = text


class ConfigValidationError(ValueError):
    pass


class CapacityExceededError(ConfigValidationError):
    pass
