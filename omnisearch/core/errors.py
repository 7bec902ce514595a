"""Exception hierarchy for the search orchestrator."""


class OmnisearchError(Exception):
    """Base for all omnisearch errors."""


class ProviderRegistrationError(OmnisearchError):
    """A provider could not be registered (duplicate name, missing type tag)."""


class ProviderExecutionError(OmnisearchError):
    """A single provider's query call raised.

    Recorded on that provider's cache entry; never propagated to other
    providers or to the caller of execute_query.
    """

    def __init__(self, provider_name: str, query: str, scope: str, cause: BaseException):
        self.provider_name = provider_name
        self.query = query
        self.scope = scope
        self.cause = cause
        detail = str(cause) or type(cause).__name__
        super().__init__(f"{provider_name} ({scope}): {detail}")
