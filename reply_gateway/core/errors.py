class DirectiveError(Exception):
    """Base class for failures raised while applying directives to a reply."""

    kind = "directive_error"


class ExclusivityError(DirectiveError):
    """Raised when a second directive of a single-slot category is applied."""

    kind = "exclusivity_violation"


class DirectiveUsageError(DirectiveError):
    """Raised when a directive precondition or argument is missing or invalid."""

    kind = "usage_error"


class ContentShapeError(DirectiveUsageError):
    """Raised when rendered or provided content has an unrecognized shape."""

    kind = "content_shape_error"


class ContentResolutionError(DirectiveError):
    """Raised when a view path cannot be rendered into content."""

    kind = "content_resolution_error"


class DirectiveConfigurationError(DirectiveError):
    """Raised for registry problems: duplicate registrations or unknown keys."""

    kind = "configuration_error"


class UnknownPlatformError(Exception):
    """Raised when a turn names a platform with no registered adapter."""
