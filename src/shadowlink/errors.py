"""Custom error types for shadowlink."""


class ShadowError(Exception):
    """Base class for all shadowlink errors."""


class ShadowConfigurationError(ShadowError):
    """Raised when a shadow interface cannot be bound to its target.

    These are schema-level mistakes and are never retried.
    """


class NoSuchMemberError(ShadowConfigurationError):
    """Raised when no target method, field, or constructor matches."""


class StaticMismatchError(ShadowConfigurationError):
    """Raised when the static marker disagrees with the resolved target member."""


class ShadowInvocationError(ShadowError):
    """Raised when a bound target member raises during a forwarded call."""

    shadow_class: type
    target_class: type
    member_name: str

    def __init__(
        self,
        shadow_class: type,
        target_class: type,
        member_name: str,
        cause: BaseException,
    ) -> None:
        """Initialize an invocation failure wrapper.

        :param shadow_class: Shadow interface the call was made through.
        :param target_class: Resolved target class.
        :param member_name: Target member that raised.
        :param cause: Original exception raised by the target.
        """
        self.shadow_class = shadow_class
        self.target_class = target_class
        self.member_name = member_name
        formatted: str = (
            f"{shadow_class.__qualname__} -> {target_class.__qualname__}.{member_name} raised "
            + f"{type(cause).__name__}: {cause}"
        )
        super().__init__(formatted)
