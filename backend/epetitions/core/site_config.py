"""Site Configuration — immutable snapshot of the `sites` row plus derived behaviour.

Invariants:
    - SiteConfig is frozen: the cached singleton is shared by every request
    - host/port/protocol always derive from `url` (single source of truth)
    - Standard ports (443 for https, 80 otherwise) are omitted from *_with_port
    - moderate_host is the bare host in development, "moderate.{host}" elsewhere
    - opened_at_for_closing / closed_at_for_opening work from the END of the given day

Design Decisions:
    - Pure dataclass, no IO: the site service owns loading, caching and persistence;
      routes and services only ever see a SiteConfig
    - site_defaults() mirrors the deployment environment variables so a fresh
      database boots with the same settings as the environment describes
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from urllib.parse import urlsplit

from epetitions.config import Settings
from epetitions.core.calendar import add_months, end_of_day
from epetitions.core.passwords import verify_password

SITE_CACHE_KEY = "__site__"

DEFAULT_SENDER_NAME = "Petitions: UK Government and Parliament"


def standard_port_for(scheme: str) -> int:
    return 443 if scheme == "https" else 80


def build_url(protocol: str, host: str, port: int) -> str:
    """Build the site url, leaving out the port when it is the scheme default."""
    scheme = "https" if protocol == "https" else "http"
    if port == standard_port_for(scheme):
        return f"{scheme}://{host}"
    return f"{scheme}://{host}:{port}"


def format_delimited(number: int) -> str:
    """100000 -> '100,000'."""
    return f"{number:,}"


def site_defaults(settings: Settings) -> dict:
    """Attributes for the first `sites` row, derived from the environment."""
    host = settings.epetitions_host
    return {
        "title": settings.site_title,
        "url": build_url(
            settings.epetitions_protocol, host, settings.epetitions_port,
        ),
        "email_from": settings.epetitions_from or (
            f'"{DEFAULT_SENDER_NAME}" <no-reply@{host}>'
        ),
        "feedback_email": settings.epetitions_feedback or (
            f'"{DEFAULT_SENDER_NAME}" <feedback@{host}>'
        ),
        "username": settings.site_username,
        "password": settings.site_password,
        "enabled": settings.site_enabled != 0,
        "protected": settings.site_protected != 0,
        "petition_duration": settings.petition_duration,
        "minimum_number_of_sponsors": settings.minimum_number_of_sponsors,
        "maximum_number_of_sponsors": settings.maximum_number_of_sponsors,
        "threshold_for_moderation": settings.threshold_for_moderation,
        "threshold_for_response": settings.threshold_for_response,
        "threshold_for_debate": settings.threshold_for_debate,
    }


@dataclass(frozen=True)
class SiteConfig:
    """Read-only view of the site singleton."""
    id: int
    title: str
    url: str
    email_from: str
    feedback_email: str
    username: str | None
    password_digest: str | None
    enabled: bool
    protected: bool
    petition_duration: int
    minimum_number_of_sponsors: int
    maximum_number_of_sponsors: int
    threshold_for_moderation: int
    threshold_for_response: int
    threshold_for_debate: int
    last_checked_at: datetime | None = None
    last_petition_created_at: datetime | None = None
    development: bool = False

    @classmethod
    def from_row(cls, row, development: bool = False) -> "SiteConfig":
        return cls(
            id=row.id,
            title=row.title,
            url=row.url,
            email_from=row.email_from,
            feedback_email=row.feedback_email,
            username=row.username,
            password_digest=row.password_digest,
            enabled=row.enabled,
            protected=row.protected,
            petition_duration=row.petition_duration,
            minimum_number_of_sponsors=row.minimum_number_of_sponsors,
            maximum_number_of_sponsors=row.maximum_number_of_sponsors,
            threshold_for_moderation=row.threshold_for_moderation,
            threshold_for_response=row.threshold_for_response,
            threshold_for_debate=row.threshold_for_debate,
            last_checked_at=row.last_checked_at,
            last_petition_created_at=row.last_petition_created_at,
            development=development,
        )

    # ─── Authentication ──────────────────────────────────────────

    def authenticate(self, username: str | None, password: str | None) -> bool:
        if self.username is None or username != self.username:
            return False
        return verify_password(password, self.password_digest)

    # ─── URL-derived facts ───────────────────────────────────────

    @property
    def email_protocol(self) -> str:
        return urlsplit(self.url).scheme

    @property
    def protocol(self) -> str:
        return f"{self.email_protocol}://"

    @property
    def host(self) -> str:
        return urlsplit(self.url).hostname or ""

    @property
    def port(self) -> int:
        parts = urlsplit(self.url)
        return parts.port or standard_port_for(parts.scheme)

    @property
    def _port_string(self) -> str:
        if self.port == standard_port_for(self.email_protocol):
            return ""
        return f":{self.port}"

    @property
    def host_with_port(self) -> str:
        return f"{self.host}{self._port_string}"

    @property
    def moderate_host(self) -> str:
        return self.host if self.development else f"moderate.{self.host}"

    @property
    def moderate_host_with_port(self) -> str:
        return f"moderate.{self.host}{self._port_string}"

    @property
    def constraints_for_public(self) -> dict:
        return {"protocol": self.protocol, "host": self.host, "port": self.port}

    @property
    def constraints_for_moderation(self) -> dict:
        return {
            "protocol": self.protocol, "host": self.moderate_host, "port": self.port,
        }

    # ─── Thresholds ──────────────────────────────────────────────

    @property
    def formatted_threshold_for_moderation(self) -> str:
        return format_delimited(self.threshold_for_moderation)

    @property
    def formatted_threshold_for_response(self) -> str:
        return format_delimited(self.threshold_for_response)

    @property
    def formatted_threshold_for_debate(self) -> str:
        return format_delimited(self.threshold_for_debate)

    # ─── Petition duration ───────────────────────────────────────

    def opened_at_for_closing(self, moment: datetime | None = None) -> datetime:
        """Petitions opened at or before this moment are due to close."""
        moment = moment or datetime.now(timezone.utc)
        return add_months(end_of_day(moment), -self.petition_duration)

    def closed_at_for_opening(self, moment: datetime | None = None) -> datetime:
        """Closing deadline for a petition opened at `moment`."""
        moment = moment or datetime.now(timezone.utc)
        return add_months(end_of_day(moment), self.petition_duration)

    def petition_url(self, petition_id: int) -> str:
        return f"{self.url}/petitions/{petition_id}"
