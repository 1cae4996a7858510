"""Identity resolution against the external identity provider.

The provider has no lookup by email, so resolution scans its paginated
user listing. The scan is bounded by a page count and runs once per
request for the whole batch; a failed create triggers a single re-scan
for that one email before the failure is reported.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from uuid import UUID

from src.schoolops.core.exceptions import ProviderError
from src.schoolops.core.identity import IdentityProvider, IdentityProviderError, IdentityUser
from src.schoolops.core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_PAGE_SIZE = 1000
DEFAULT_MAX_PAGES = 20


@dataclass(frozen=True)
class ResolvedIdentity:
    """Provider account id for an email, and whether this request created it."""

    user_id: UUID
    created: bool


class IdentityResolver:
    """Request-scoped email to identity resolver.

    Create one per request: the prefetched email map is not shared.
    """

    def __init__(
        self,
        provider: IdentityProvider,
        page_size: int = DEFAULT_PAGE_SIZE,
        max_pages: int = DEFAULT_MAX_PAGES,
    ):
        self.provider = provider
        self.page_size = page_size
        self.max_pages = max_pages
        self._known: dict[str, UUID] = {}

    async def find_by_emails(self, emails: Iterable[str]) -> dict[str, IdentityUser]:
        """Scan the provider listing for the given emails.

        Stops when every wanted email has been seen, when a short page
        marks the end of the listing, or after ``max_pages`` pages.

        Raises:
            ProviderError: If a listing call fails.
        """
        wanted = {email.lower() for email in emails if email}
        found: dict[str, IdentityUser] = {}
        if not wanted:
            return found

        for page in range(1, self.max_pages + 1):
            try:
                users = await self.provider.list_users(page=page, per_page=self.page_size)
            except IdentityProviderError as e:
                raise ProviderError(e.message) from e

            for user in users:
                email = user.email.lower()
                if email in wanted:
                    found[email] = user
            if len(found) >= len(wanted) or len(users) < self.page_size:
                break
        else:
            logger.warning(
                "Identity listing page bound reached",
                max_pages=self.max_pages,
                missing=len(wanted) - len(found),
            )

        return found

    async def prefetch(self, emails: Iterable[str]) -> None:
        """Resolve a batch of emails with one listing scan."""
        found = await self.find_by_emails(emails)
        self._known.update({email: user.id for email, user in found.items()})
        logger.debug("Identities prefetched", found=len(found))

    async def resolve(self, email: str, password: str) -> ResolvedIdentity:
        """Return the account for ``email``, creating it with ``password`` if absent.

        Raises:
            ProviderError: With the provider's message when the account could
                neither be found nor created.
        """
        email = email.lower()
        known = self._known.get(email)
        if known is not None:
            return ResolvedIdentity(user_id=known, created=False)

        try:
            user = await self.provider.create_user(email, password)
        except IdentityProviderError as create_error:
            # The account may have been created concurrently; look once more
            try:
                refreshed = await self.find_by_emails([email])
            except ProviderError:
                refreshed = {}
            existing = refreshed.get(email)
            if existing is None:
                raise ProviderError(create_error.message) from create_error
            logger.info("Identity found after failed create", user_id=str(existing.id))
            self._known[email] = existing.id
            return ResolvedIdentity(user_id=existing.id, created=False)

        self._known[email] = user.id
        return ResolvedIdentity(user_id=user.id, created=True)
