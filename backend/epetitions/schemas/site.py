"""Site Schemas — public facts and the moderation edit form."""

from datetime import datetime

from pydantic import BaseModel, Field

from epetitions.core.site_config import SiteConfig


class SiteUpdate(BaseModel):
    """Partial update; omitted fields are left unchanged."""
    title: str | None = None
    url: str | None = None
    email_from: str | None = None
    feedback_email: str | None = None
    username: str | None = None
    password: str | None = None
    password_confirmation: str | None = None
    enabled: bool | None = None
    protected: bool | None = None
    petition_duration: int | None = Field(None, ge=1)
    minimum_number_of_sponsors: int | None = Field(None, ge=0)
    maximum_number_of_sponsors: int | None = Field(None, ge=0)
    threshold_for_moderation: int | None = Field(None, ge=0)
    threshold_for_response: int | None = Field(None, ge=0)
    threshold_for_debate: int | None = Field(None, ge=0)


class SitePublicResponse(BaseModel):
    title: str
    url: str
    host: str
    host_with_port: str
    feedback_email: str
    petition_duration: int
    threshold_for_response: int
    threshold_for_debate: int
    formatted_threshold_for_moderation: str
    formatted_threshold_for_response: str
    formatted_threshold_for_debate: str
    constraints_for_public: dict

    @classmethod
    def from_site(cls, site: SiteConfig) -> "SitePublicResponse":
        return cls(
            title=site.title,
            url=site.url,
            host=site.host,
            host_with_port=site.host_with_port,
            feedback_email=site.feedback_email,
            petition_duration=site.petition_duration,
            threshold_for_response=site.threshold_for_response,
            threshold_for_debate=site.threshold_for_debate,
            formatted_threshold_for_moderation=site.formatted_threshold_for_moderation,
            formatted_threshold_for_response=site.formatted_threshold_for_response,
            formatted_threshold_for_debate=site.formatted_threshold_for_debate,
            constraints_for_public=site.constraints_for_public,
        )


class SiteAdminResponse(BaseModel):
    title: str
    url: str
    email_from: str
    feedback_email: str
    username: str | None
    has_password: bool
    enabled: bool
    protected: bool
    petition_duration: int
    minimum_number_of_sponsors: int
    maximum_number_of_sponsors: int
    threshold_for_moderation: int
    threshold_for_response: int
    threshold_for_debate: int
    moderate_host_with_port: str
    constraints_for_moderation: dict
    last_checked_at: datetime | None
    last_petition_created_at: datetime | None

    @classmethod
    def from_site(cls, site: SiteConfig) -> "SiteAdminResponse":
        return cls(
            title=site.title,
            url=site.url,
            email_from=site.email_from,
            feedback_email=site.feedback_email,
            username=site.username,
            has_password=site.password_digest is not None,
            enabled=site.enabled,
            protected=site.protected,
            petition_duration=site.petition_duration,
            minimum_number_of_sponsors=site.minimum_number_of_sponsors,
            maximum_number_of_sponsors=site.maximum_number_of_sponsors,
            threshold_for_moderation=site.threshold_for_moderation,
            threshold_for_response=site.threshold_for_response,
            threshold_for_debate=site.threshold_for_debate,
            moderate_host_with_port=site.moderate_host_with_port,
            constraints_for_moderation=site.constraints_for_moderation,
            last_checked_at=site.last_checked_at,
            last_petition_created_at=site.last_petition_created_at,
        )
