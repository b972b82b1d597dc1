"""URL module exceptions."""

from fastapi import status

from url_manager.core.exceptions import AlreadyExistsError, AppException, ValidationError


class UrlNotFoundError(AppException):
    """Slug does not resolve to content."""

    def __init__(self, slug: str, reason: str = "missing") -> None:
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="url_not_found",
            message=f"No content found for '/{slug}'",
            detail={"slug": slug, "reason": reason},
        )


class DepthExceededError(AppException):
    """Redirect chain did not terminate within the hop limit.

    Points at a corrupted redirect graph, so it is kept distinct from a 404.
    """

    def __init__(self, slug: str, chain: list[str], max_depth: int) -> None:
        self.slug = slug
        self.chain = chain
        self.max_depth = max_depth
        super().__init__(
            status_code=status.HTTP_508_LOOP_DETECTED,
            error_code="redirect_depth_exceeded",
            message=f"Redirect chain from '{slug}' exceeded {max_depth} hops",
            detail={"slug": slug, "chain": chain, "max_depth": max_depth},
        )


class CircularRedirectError(AppException):
    """Redirect edge would close a cycle. Nothing was persisted."""

    def __init__(self, from_slug: str, to_slug: str, chain: list[str]) -> None:
        self.from_slug = from_slug
        self.to_slug = to_slug
        self.chain = chain
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            error_code="circular_redirect",
            message=(
                f"Redirect '{from_slug}' -> '{to_slug}' would create a loop: "
                + " -> ".join(chain)
            ),
            detail={"from_slug": from_slug, "to_slug": to_slug, "chain": chain},
        )


class RedirectChainTooLongError(AppException):
    """Redirect target starts a chain longer than the hop limit."""

    def __init__(
        self, from_slug: str, to_slug: str, chain: list[str], max_depth: int
    ) -> None:
        self.chain = chain
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            error_code="redirect_chain_too_long",
            message=(
                f"Redirect '{from_slug}' -> '{to_slug}' would exceed "
                f"the maximum chain length of {max_depth}"
            ),
            detail={
                "from_slug": from_slug,
                "to_slug": to_slug,
                "chain": chain,
                "max_depth": max_depth,
            },
        )


class DuplicateSlugError(AlreadyExistsError):
    """Another record already holds the slug."""

    def __init__(self, slug: str) -> None:
        self.slug = slug
        super().__init__(
            resource="Url",
            field="slug",
            value=slug,
            error_code="duplicate_slug",
        )


class DuplicateOwnerError(AlreadyExistsError):
    """Entity already owns a URL record."""

    def __init__(self, owner_type: str, owner_id: str) -> None:
        super().__init__(
            resource="Url",
            field="owner",
            value=f"{owner_type}:{owner_id}",
            error_code="duplicate_owner",
        )


class InvalidRedirectCodeError(ValidationError):
    """Redirect code outside 301/302/307/308."""

    def __init__(self, code: int) -> None:
        super().__init__(
            message=f"Redirect code {code} is not supported",
            errors=[{"field": "code", "value": code, "supported": [301, 302, 307, 308]}],
            error_code="invalid_redirect_code",
        )


class InvalidSlugError(ValidationError):
    """Slug is empty after normalization."""

    def __init__(self, slug: str) -> None:
        super().__init__(
            message="Slug must not be empty",
            errors=[{"field": "slug", "value": slug}],
            error_code="invalid_slug",
        )


class ManualRedirectRequiredError(AppException):
    """Operation is only allowed on sentinel-owned redirect records."""

    def __init__(self, slug: str, action: str = "delete") -> None:
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            error_code="manual_redirect_required",
            message=f"Cannot {action} '{slug}': record is owned by an entity",
            detail={"slug": slug, "action": action},
        )


class InvalidStatusTransitionError(AppException):
    """Status change not allowed by the record state machine."""

    def __init__(self, slug: str, current: str, requested: str) -> None:
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            error_code="invalid_status_transition",
            message=f"Cannot change '{slug}' from {current} to {requested}",
            detail={"slug": slug, "current": current, "requested": requested},
        )
