# Matched against the exception's class hierarchy, most specific first.
FRIENDLY_MESSAGES = {
    "CircuitOpenError": "The service is temporarily unavailable. Please try again shortly.",
    "IntegrityError": "The data conflicts with an existing record.",
    "GeocoderServiceError": "The address lookup service is unavailable right now.",
    "RedisError": "A caching service is unavailable. Please try again shortly.",
    "HTTPStatusError": "An upstream service rejected the request. Please try again later.",
    "TimeoutException": "An upstream service took too long to respond.",
    "OperationalError": "Temporary issue while accessing data. Please try again shortly.",
    "DBAPIError": "Temporary issue while accessing data. Please try again shortly.",
    "SQLAlchemyError": "Temporary issue while accessing data. Please try again shortly.",
    "TimeoutError": "The request took too long. Please try again later.",
    "ConnectionError": "Unable to connect to a required service. Please try again later.",
    "ValueError": "Invalid data received. Please check your input and try again.",
    "KeyError": "Some required information is missing.",
    "PermissionError": "You don't have permission to perform this action.",
}

DEFAULT_MESSAGE = "Something went wrong on our end. Please try again."


def get_friendly_message(error: Exception) -> str:
    names = {cls.__name__ for cls in type(error).__mro__}
    for name, msg in FRIENDLY_MESSAGES.items():
        if name in names:
            return msg
    return DEFAULT_MESSAGE
