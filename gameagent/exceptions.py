class GameAgentError(Exception):
    """Base exception for gameagent errors"""
    def __init__(self, msg: str):
        self.msg = msg
        super().__init__(msg)

    def __str__(self):
        return self.msg


class ConfigError(GameAgentError):
    pass


class TransportError(GameAgentError):
    """Raised when a remote call fails at the network or HTTP layer"""
    def __init__(self, service: str, message: str, status_code: int | None = None):
        self.service = service
        self.message = message
        self.status_code = status_code
        super().__init__(f"{service} API error: {message}")


class DecisionServiceError(TransportError):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__("GAME", message, status_code)


class ProviderError(TransportError):
    """Transport failure scoped to one delegate provider"""
    pass


class DispatchError(GameAgentError):
    """Base exception for failures while dispatching an action"""
    def __init__(self, msg: str, function_id: str | None = None):
        self.function_id = function_id
        super().__init__(msg)


class UnknownFunctionError(DispatchError):
    def __init__(self, function_name: str, available: list[str], function_id: str | None = None):
        self.function_name = function_name
        self.available = available
        super().__init__(
            f"Function '{function_name}' not found. "
            f"Available functions: {', '.join(available) or '(none)'}",
            function_id,
        )


class MissingDelegatePayloadError(DispatchError):
    def __init__(self, action_type: str, payload: str, function_id: str | None = None):
        self.action_type = action_type
        self.payload = payload
        super().__init__(f"Action '{action_type}' requires a '{payload}' payload", function_id)


class ConflictingDelegatePayloadError(DispatchError):
    def __init__(self, action_type: str, payloads: list[str], function_id: str | None = None):
        self.action_type = action_type
        self.payloads = payloads
        super().__init__(
            f"Action '{action_type}' must not carry payload(s): {', '.join(payloads)}",
            function_id,
        )


class MissingRequiredArgumentError(DispatchError):
    def __init__(self, operation: str, argument: str, function_id: str | None = None):
        self.operation = operation
        self.argument = argument
        super().__init__(f"'{argument}' is required for {operation} action", function_id)


class UnknownOperationError(DispatchError):
    def __init__(self, provider: str, operation: str, function_id: str | None = None):
        self.provider = provider
        self.operation = operation
        super().__init__(f"Unknown {provider} action: {operation}", function_id)


class UnrecognizedActionTypeError(DispatchError):
    def __init__(self, action_type: str, function_id: str | None = None):
        self.action_type = action_type
        super().__init__(f"Unrecognized action type: {action_type}", function_id)


class MissingProviderError(DispatchError):
    def __init__(self, provider: str, function_id: str | None = None):
        self.provider = provider
        super().__init__(f"No {provider} provider is configured", function_id)
