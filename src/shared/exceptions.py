"""Storefront errors that have no counterpart in protean.exceptions.

Domain guards raise protean's own exceptions (ValidationError,
InvalidStateError, ObjectNotFoundError, ExpectedVersionError). The classes
here cover what sits outside the domain model: the payment gateway, its
credentials, and the integrity of the callbacks it signs. Each carries a
``messages`` dict keyed by the offending field.
"""


class StorefrontError(Exception):
    category = "error"

    def __init__(self, messages: dict[str, list[str]] | str | None = None):
        if messages is None:
            messages = {}
        elif isinstance(messages, str):
            messages = {"_entity": [messages]}
        self.messages = messages
        super().__init__(self._summary())

    def _summary(self) -> str:
        parts = [f"{field}: {'; '.join(errors)}" for field, errors in self.messages.items()]
        return ", ".join(parts) or self.category


class ExternalDependencyError(StorefrontError):
    category = "external_dependency"


class GatewayError(ExternalDependencyError):
    pass


class ConfigurationError(ExternalDependencyError):
    category = "configuration"


class IntegrityError(StorefrontError):
    category = "integrity"
